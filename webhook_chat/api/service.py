"""对外 API 服务模块。

提供简化的函数接口供上层应用调用。
"""

from typing import Optional, Dict, Any

from webhook_chat.config.settings import settings
from webhook_chat.chat.session import ChatSession
from webhook_chat.providers.webhook_client import WebhookClient
from webhook_chat.infrastructure.storage.json_store import JsonSessionStore
from webhook_chat.infrastructure.logging.logger import logger


_session: Optional[ChatSession] = None


def get_default_session() -> ChatSession:
    """获取默认的聊天会话实例（单例）。"""
    global _session
    if _session is None:
        store = JsonSessionStore(root=settings.storage_root)
        _session = ChatSession(client=WebhookClient(settings), store=store, settings=settings)
    return _session


def send_message(text: str) -> Dict[str, Any]:
    """发送一条用户消息。

    Args:
        text: 用户输入内容

    Returns:
        包含会话ID、是否受理、用户消息、机器人消息和错误提示的字典

    Raises:
        ValidationError: 消息过长或 webhook 地址未配置
    """
    session = get_default_session()
    try:
        result = session.submit(text)
    except Exception as e:
        logger.error(f"Send failed: {e}", extra={"extra": {
            "session_id": session.session_id,
            "error": str(e),
        }})
        raise

    return {
        "session_id": session.session_id,
        "accepted": result.accepted,
        "user_message": result.user_message.to_dict() if result.user_message else None,
        "bot_message": result.bot_message.to_dict() if result.bot_message else None,
        "error": result.error_notice,
    }


def get_history() -> list[Dict[str, Any]]:
    """获取当前会话的所有消息。"""
    return [m.to_dict() for m in get_default_session().history]


def render_history() -> str:
    """把当前会话的历史渲染为 HTML。"""
    return get_default_session().render()


def clear_history() -> str:
    """清空历史并返回新的会话 ID。"""
    return get_default_session().clear()
