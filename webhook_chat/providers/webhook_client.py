"""Webhook 客户端。

本模块负责：

1. 接收用户消息与会话 ID，构造 WebhookRequest。
2. 以 JSON POST 调用配置的 webhook 地址，并处理网络/状态码/解码异常。
3. 按提取规则从松散的响应 JSON 中取出回复文本。
4. 通过投递状态机（flows）完成有上限的线性退避重试。

单次尝试的失败统一表现为 TransportError 或 EmptyReplyError，
重试耗尽后对调用方只暴露 DeliveryError。
"""

import time
from typing import Callable, Optional

import httpx

from webhook_chat.domain.exceptions import (
    ApiError,
    DeliveryError,
    EmptyReplyError,
    NetworkError,
    ValidationError,
)
from webhook_chat.domain.models import DeliveryStatus, WebhookRequest
from webhook_chat.flows.graph import build_graph
from webhook_chat.flows.runner import run_delivery
from webhook_chat.infrastructure.logging.logger import logger
from webhook_chat.providers.extraction import match_rule


class WebhookClient:
    """Webhook 回复客户端实现。

    - name: 客户端名称（供日志/调试使用）。
    - send: 对外统一调用入口，返回回复文本。

    客户端不持有轮次状态；“同一会话同时只有一个请求在途”由编排层保证。
    """

    name = "webhook"

    def __init__(self, settings, sleep: Optional[Callable[[float], None]] = None):
        # Settings 里包含 webhook_url、重试次数、退避时长、超时等配置
        self._settings = settings
        self._graph = build_graph(self.post_once, sleep or time.sleep)

    def send(self, message: str, session_id: str) -> str:
        """执行一次带重试的投递。

        步骤：
        1. 校验配置（地址、重试次数、退避时长）。
        2. 运行投递状态机：attempt → backoff → attempt ...
        3. 成功返回回复文本；耗尽时抛出携带最后一次错误的 DeliveryError。
        """

        self._endpoint()
        max_retries = int(getattr(self._settings, "max_retries", 3))
        base_delay_ms = int(getattr(self._settings, "retry_delay_ms", 1000))
        if max_retries < 0 or base_delay_ms < 0:
            raise ValidationError(
                code="INVALID_RETRY_CONFIG",
                message="max_retries and retry_delay_ms must be >= 0",
            )
        request = WebhookRequest(message=message, session_id=session_id)
        state = run_delivery(self._graph, request, max_retries=max_retries, base_delay_ms=base_delay_ms)
        if state["status"] == DeliveryStatus.SUCCESS:
            return state["reply"]

        last_error = state.get("last_error")
        attempts = state.get("attempts", 0)
        logger.error(
            "Delivery exhausted",
            extra={"extra": {
                "session_id": session_id,
                "attempts": attempts,
                "code": getattr(last_error, "code", None),
            }},
        )
        reason = last_error.message if last_error is not None else "unknown error"
        raise DeliveryError(
            code="DELIVERY_FAILED",
            message=f"Delivery failed after {attempts} attempts: {reason}",
            cause=last_error,
            attempts=attempts,
        ) from last_error

    def post_once(self, request: WebhookRequest) -> str:
        """执行单次 HTTP 交换，返回非空回复文本。

        失败时抛出 NetworkError / ApiError / EmptyReplyError，由状态机决定是否重试。
        """

        url = self._endpoint()
        try:
            with httpx.Client(
                timeout=self._settings.http_timeout,
                trust_env=False,
                follow_redirects=True,
            ) as client:
                resp = client.post(
                    url,
                    json=request.to_payload(),
                    headers={"Content-Type": "application/json"},
                )
        except httpx.InvalidURL as e:
            raise ValidationError(code="INVALID_WEBHOOK_URL", message=str(e))
        except httpx.RequestError as e:
            # 网络错误：DNS 失败、连接被拒绝、超时等
            raise NetworkError(code="NETWORK_ERROR", message=str(e))
        if not 200 <= resp.status_code < 300:
            reason = getattr(resp, "reason_phrase", "")
            raise ApiError(
                code="API_ERROR",
                message=f"HTTP {resp.status_code}: {reason}" if reason else f"HTTP {resp.status_code}",
                http_status=resp.status_code,
            )
        try:
            data = resp.json()
        except ValueError as e:
            raise ApiError(code="INVALID_JSON", message=str(e), http_status=resp.status_code)

        rule, reply = match_rule(data)
        if reply is None:
            raise EmptyReplyError(code="EMPTY_REPLY", message="Empty response from server")
        logger.info("Reply extracted", extra={"extra": {"rule": rule, "length": len(reply)}})
        return reply

    def _endpoint(self) -> str:
        url = getattr(self._settings, "webhook_url", None)
        if not url:
            # 配置缺失走 ValidationError，方便上层统一处理
            raise ValidationError(code="MISSING_WEBHOOK_URL", message="WEBHOOK_URL not set")
        try:
            httpx.URL(url)
        except httpx.InvalidURL as e:
            raise ValidationError(code="INVALID_WEBHOOK_URL", message=str(e))
        return url
