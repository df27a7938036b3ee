"""聊天会话编排模块。

负责会话 ID 的恢复与生成、消息历史的恢复与持久化、
轮次串行化（同一会话同时只允许一个请求在途）以及历史渲染。
"""

import logging
import string
import threading
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple
from uuid import uuid4

from webhook_chat.domain.exceptions import BusinessError, DeliveryError, ValidationError
from webhook_chat.domain.history import SessionStore
from webhook_chat.domain.models import ChatMessage, Role, TurnState, now_ms
from webhook_chat.formatting.render import render_chat_history
from webhook_chat.infrastructure.logging.logger import logger
from webhook_chat.providers.base import ReplyClient

_BASE36 = string.digits + string.ascii_lowercase


def _base36(value: int) -> str:
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits)) or "0"


def new_session_id() -> str:
    """生成形如 session_<毫秒时间戳>_<9 位 base36 随机串> 的会话 ID。"""

    return f"session_{now_ms()}_{_base36(uuid4().int)[:9]}"


@dataclass
class TurnResult:
    """一次 submit 的结果。

    accepted 为 False 表示输入为空或已有请求在途，本次提交被忽略。
    error 不为空表示投递失败，error_notice 是应展示给用户的提示。
    """

    accepted: bool
    user_message: Optional[ChatMessage] = None
    bot_message: Optional[ChatMessage] = None
    error: Optional[DeliveryError] = None
    error_notice: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.bot_message is not None


class ChatSession:
    def __init__(self, client: ReplyClient, store: SessionStore, settings):
        self._client = client
        self._store = store
        self._settings = settings
        self._lock = threading.Lock()
        self._state = TurnState.IDLE
        self.session_id = self._restore_session_id()
        self._history: List[ChatMessage] = self._restore_history()

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def history(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._history)

    def submit(self, text: str) -> TurnResult:
        """提交一条用户消息并等待回复。

        Args:
            text: 用户输入（首尾空白会被去掉）

        Returns:
            TurnResult；投递失败不会抛异常，而是体现在 error / error_notice 上

        Raises:
            ValidationError: 消息超过 message_max_length，或客户端配置缺失
        """
        message = (text or "").strip()
        if not message:
            return TurnResult(accepted=False)
        max_length = int(getattr(self._settings, "message_max_length", 2000))
        if len(message) > max_length:
            raise ValidationError(
                code="MESSAGE_TOO_LONG",
                message=f"Message exceeds {max_length} characters",
                length=len(message),
            )
        if not self._lock.acquire(blocking=False):
            self._log(logging.WARNING, "Turn rejected: another send is in flight")
            return TurnResult(accepted=False)

        self._state = TurnState.BUSY
        try:
            user_msg = self._append(message, "user")
            try:
                reply = self._client.send(message, self.session_id)
            except ValidationError:
                # 配置错误：撤回本轮用户消息，不留下没有回复的记录
                self._discard(user_msg)
                raise
            except DeliveryError as e:
                self._log(logging.ERROR, "Turn failed", code=e.code, attempts=e.attempts, error=e.message)
                return TurnResult(
                    accepted=True,
                    user_message=user_msg,
                    error=e,
                    error_notice=getattr(self._settings, "error_notice", e.message),
                )
            bot_msg = self._append(reply, "bot")
            self._log(logging.INFO, "Turn completed", reply_length=len(reply))
            return TurnResult(accepted=True, user_message=user_msg, bot_message=bot_msg)
        finally:
            self._state = TurnState.IDLE
            self._lock.release()

    def render(self) -> str:
        """把全部历史消息渲染为聊天气泡 HTML。"""
        return render_chat_history(
            self._history,
            user_avatar=getattr(self._settings, "user_avatar", "V"),
            bot_avatar=getattr(self._settings, "bot_avatar", "M"),
        )

    def clear(self) -> str:
        """清空历史与会话 ID，并分配新的会话 ID。"""
        try:
            self._store.clear()
        except BusinessError as e:
            self._log(logging.ERROR, "Failed to clear stored session", code=e.code, error=e.message)
        self._history = []
        self.session_id = self._create_session_id()
        return self.session_id

    def _append(self, content: str, role: Role) -> ChatMessage:
        msg = ChatMessage(content=content, role=role)
        self._history.append(msg)
        try:
            self._store.save_history(self._history)
        except BusinessError as e:
            self._log(logging.ERROR, "Failed to save message history", code=e.code, error=e.message)
        return msg

    def _discard(self, msg: ChatMessage) -> None:
        if self._history and self._history[-1] is msg:
            self._history.pop()
        try:
            self._store.save_history(self._history)
        except BusinessError as e:
            self._log(logging.ERROR, "Failed to save message history", code=e.code, error=e.message)

    def _restore_history(self) -> List[ChatMessage]:
        try:
            return self._store.load_history()
        except BusinessError as e:
            self._log(logging.ERROR, "Failed to restore message history", code=e.code, error=e.message)
            return []

    def _restore_session_id(self) -> str:
        try:
            stored = self._store.load_session_id()
        except BusinessError as e:
            self._log(logging.ERROR, "Failed to restore session id", code=e.code, error=e.message)
            stored = None
        return stored or self._create_session_id()

    def _create_session_id(self) -> str:
        session_id = new_session_id()
        try:
            self._store.save_session_id(session_id)
        except BusinessError as e:
            self._log(logging.ERROR, "Failed to save session id", code=e.code, error=e.message)
        logger.info("Created new session", extra={"extra": {"session_id": session_id}})
        return session_id

    def _log(self, level: int, message: str, **fields: Any) -> None:
        payload = {"session_id": getattr(self, "session_id", None)}
        payload.update(fields)
        logger.log(level, message, extra={"extra": payload})
