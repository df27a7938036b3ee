"""聊天会话编排层。"""

from webhook_chat.chat.session import ChatSession, TurnResult, new_session_id

__all__ = ["ChatSession", "TurnResult", "new_session_id"]
