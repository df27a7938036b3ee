"""统一的消息与请求数据模型。

- ChatMessage: 一条聊天记录（user/bot），创建后不可变。
- WebhookRequest: 单次投递的请求体，用完即弃。
- DeliveryStatus: 单次发送的状态机状态。
- TurnState: 编排层持有的“是否有请求在途”状态。
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Literal

# 聊天消息角色
Role = Literal["user", "bot"]

ROLES = ("user", "bot")


def now_ms() -> int:
    """当前时间的毫秒时间戳。"""

    return int(time.time() * 1000)


@dataclass(frozen=True)
class ChatMessage:
    """一条聊天消息。

    - content: 原始文本（未格式化）。
    - role: "user" 或 "bot"。
    - timestamp: 创建时间，毫秒时间戳。
    """

    content: str
    role: Role
    timestamp: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {"content": self.content, "role": self.role, "timestamp": self.timestamp}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        # 兼容旧记录中的 "type" 字段
        role = data.get("role") or data.get("type")
        if role not in ROLES:
            raise ValueError(f"Unknown message role: {role!r}")
        return cls(
            content=str(data.get("content") or ""),
            role=role,
            timestamp=int(data.get("timestamp") or 0),
        )


@dataclass(frozen=True)
class WebhookRequest:
    """一次 webhook 调用的请求内容。"""

    message: str
    session_id: str

    def to_payload(self) -> Dict[str, str]:
        """转换为线上 JSON 请求体（字段名为 camelCase）。"""

        return {"message": self.message, "sessionId": self.session_id}


class DeliveryStatus(str, Enum):
    """单次发送的状态：Idle → Attempting → {Success | RetryWait → Attempting | Exhausted}。"""

    IDLE = "idle"
    ATTEMPTING = "attempting"
    RETRY_WAIT = "retry_wait"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"

    @property
    def terminal(self) -> bool:
        return self in (DeliveryStatus.SUCCESS, DeliveryStatus.EXHAUSTED)


class TurnState(str, Enum):
    """会话级别的轮次状态，由编排层持有。"""

    IDLE = "idle"
    BUSY = "busy"
