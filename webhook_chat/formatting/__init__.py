"""回复文本格式化。

该包下的模块负责：
- 定义格式化结果的文档树 (document)。
- 文本 → 文档树 → 安全 HTML 的转换 (formatter)。
- 聊天气泡的 HTML 渲染 (render)。
"""

from webhook_chat.formatting.document import FormattedDocument
from webhook_chat.formatting.formatter import format_message, parse_message, render_html
from webhook_chat.formatting.render import render_chat_history, render_chat_message

__all__ = [
    "FormattedDocument",
    "format_message",
    "parse_message",
    "render_html",
    "render_chat_message",
    "render_chat_history",
]
