"""LangGraph construction and node implementations for a single send.

attempt ──(retry_wait)──▶ backoff ──▶ attempt
   └──(success / exhausted)──▶ END
"""

from __future__ import annotations

from typing import Callable

from langgraph.graph import END, StateGraph
from langgraph.graph.state import CompiledStateGraph

from webhook_chat.domain.exceptions import EmptyReplyError, TransportError
from webhook_chat.domain.models import DeliveryStatus, WebhookRequest
from webhook_chat.flows.state import DeliveryState
from webhook_chat.infrastructure.logging.logger import logger

AttemptFn = Callable[[WebhookRequest], str]
SleepFn = Callable[[float], None]


def attempt_node(state: DeliveryState, attempt_fn: AttemptFn) -> DeliveryState:
    attempt = state.get("attempts", 0) + 1
    max_attempts = state["max_attempts"]
    state["attempts"] = attempt
    state["status"] = DeliveryStatus.ATTEMPTING
    logger.info(
        "attempt_node.start",
        extra={"extra": {"attempt": attempt, "max_attempts": max_attempts, "session_id": state["request"].session_id}},
    )
    try:
        reply = attempt_fn(state["request"])
    except (TransportError, EmptyReplyError) as exc:
        state["last_error"] = exc
        state["status"] = DeliveryStatus.RETRY_WAIT if attempt < max_attempts else DeliveryStatus.EXHAUSTED
        logger.warning(
            "attempt_node.failed",
            extra={"extra": {"attempt": attempt, "max_attempts": max_attempts, "code": exc.code, "error": exc.message}},
        )
        return state
    state["reply"] = reply
    state["last_error"] = None
    state["status"] = DeliveryStatus.SUCCESS
    logger.info("attempt_node.success", extra={"extra": {"attempt": attempt}})
    return state


def backoff_node(state: DeliveryState, sleep_fn: SleepFn) -> DeliveryState:
    # 第 k 次尝试前等待 base_delay_ms * (k - 1)
    delay_ms = state["base_delay_ms"] * state["attempts"]
    state["delays_ms"] = list(state.get("delays_ms") or []) + [delay_ms]
    logger.info(
        "backoff_node.wait",
        extra={"extra": {"delay_ms": delay_ms, "next_attempt": state["attempts"] + 1}},
    )
    sleep_fn(delay_ms / 1000.0)
    return state


def delivery_router(state: DeliveryState) -> str:
    if state.get("status") == DeliveryStatus.RETRY_WAIT:
        return "backoff"
    return "end"


def build_graph(attempt_fn: AttemptFn, sleep_fn: SleepFn) -> CompiledStateGraph:
    graph = StateGraph(DeliveryState)
    graph.add_node("attempt", lambda s: attempt_node(s, attempt_fn))
    graph.add_node("backoff", lambda s: backoff_node(s, sleep_fn))
    graph.set_entry_point("attempt")
    graph.add_conditional_edges("attempt", delivery_router, {"backoff": "backoff", "end": END})
    graph.add_edge("backoff", "attempt")
    return graph.compile()
