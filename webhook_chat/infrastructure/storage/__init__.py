"""会话 ID 与消息历史的 JSON 文件存储。"""

from webhook_chat.infrastructure.storage.json_store import JsonSessionStore

__all__ = ["JsonSessionStore"]
