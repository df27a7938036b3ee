"""回复客户端抽象接口。

编排层（ChatSession）不直接依赖具体的 HTTP 实现，而是依赖此协议：

- 每种投递方式实现一个 ReplyClient（如 WebhookClient）。
- 负责：把用户消息与会话 ID 发送出去，并返回回复文本。

客户端本身不持有轮次状态，同一实例可以被多个会话并发调用。
"""

from typing import Protocol


class ReplyClient(Protocol):
    """回复客户端协议。

    实现者需要提供：
    - name: 客户端名称，用于日志。
    - send(message, session_id): 完成一次带重试的投递，返回回复文本；
      重试耗尽时抛出 DeliveryError。
    """

    name: str

    def send(self, message: str, session_id: str) -> str:
        ...
