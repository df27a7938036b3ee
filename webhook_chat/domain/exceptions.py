"""统一业务异常模型。

所有跨模块抛出的业务级错误都应该继承自 BusinessError，
便于在 API 层或 UI 层做统一捕获与用户提示。

重试语义：
- TransportError / EmptyReplyError：单次投递失败，由投递流程负责重试。
- DeliveryError：重试耗尽后唯一暴露给调用方的错误。
- ValidationError：配置或输入错误，不重试。
"""

from typing import Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "STORE_READ_ERROR"）。
        message: 用户可读错误信息。
        http_status: 映射到 HTTP 时可用的状态码，默认 400。
        extra: 其他补充字段（例如 attempt、status_code 等）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class TransportError(BusinessError):
    """传输层失败的基类：连接失败、非 2xx 状态码、响应体无法解码。"""


class NetworkError(TransportError):
    """网络层错误，例如 DNS 失败、连接被拒绝、超时等。"""


class ApiError(TransportError):
    """Webhook 返回非 2xx 状态码，或 2xx 响应体不是合法 JSON。"""


class EmptyReplyError(BusinessError):
    """响应已成功解码，但没有任何候选字段包含可用文本。"""


class DeliveryError(BusinessError):
    """所有尝试均失败后抛出，携带最后一次的底层错误。"""

    def __init__(
        self,
        code: str,
        message: str,
        cause: Optional[BusinessError] = None,
        attempts: int = 0,
        **extra,
    ):
        self.cause = cause
        self.attempts = attempts
        super().__init__(code=code, message=message, http_status=502, **extra)


class ValidationError(BusinessError):
    """参数或配置校验失败。"""
