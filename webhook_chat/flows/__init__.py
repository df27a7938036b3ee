"""单次发送的投递状态机（LangGraph）。"""

from webhook_chat.flows.graph import build_graph
from webhook_chat.flows.runner import run_delivery

__all__ = ["build_graph", "run_delivery"]
