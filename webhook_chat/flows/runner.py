"""High-level entry point for the delivery graph."""

from __future__ import annotations

from langgraph.graph.state import CompiledStateGraph

from webhook_chat.domain.models import DeliveryStatus, WebhookRequest
from webhook_chat.flows.state import DeliveryState


def initial_state(request: WebhookRequest, *, max_retries: int, base_delay_ms: int) -> DeliveryState:
    return {
        "request": request,
        "status": DeliveryStatus.IDLE,
        "attempts": 0,
        "max_attempts": max_retries + 1,
        "base_delay_ms": base_delay_ms,
        "delays_ms": [],
        "reply": None,
        "last_error": None,
    }


def run_delivery(
    graph: CompiledStateGraph,
    request: WebhookRequest,
    *,
    max_retries: int,
    base_delay_ms: int,
) -> DeliveryState:
    """Execute the delivery graph until it reaches SUCCESS or EXHAUSTED.

    Args:
        graph: build_graph 编译出的图
        request: 本次投递的请求
        max_retries: 首次尝试之后的最大重试次数
        base_delay_ms: 退避基础时长（毫秒）
    """

    state = initial_state(request, max_retries=max_retries, base_delay_ms=base_delay_ms)
    # 每次尝试与每次等待各占一个 step
    limit = 2 * state["max_attempts"] + 2
    return graph.invoke(state, {"recursion_limit": limit})
