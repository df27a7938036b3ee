"""聊天气泡渲染：把 ChatMessage 渲染为带头像的 HTML 片段。"""

import html
from typing import Iterable

from webhook_chat.domain.models import ChatMessage
from webhook_chat.formatting.formatter import format_message


def render_chat_message(message: ChatMessage, user_avatar: str = "V", bot_avatar: str = "M") -> str:
    avatar = user_avatar if message.role == "user" else bot_avatar
    return (
        f'<div class="message {message.role}-message">'
        f'<div class="message-avatar"><span>{html.escape(avatar)}</span></div>'
        f'<div class="message-content">{format_message(message.content)}</div>'
        "</div>"
    )


def render_chat_history(messages: Iterable[ChatMessage], user_avatar: str = "V", bot_avatar: str = "M") -> str:
    return "".join(render_chat_message(m, user_avatar, bot_avatar) for m in messages)
