import pytest

from webhook_chat.domain.exceptions import EmptyReplyError, NetworkError
from webhook_chat.domain.models import DeliveryStatus, WebhookRequest
from webhook_chat.flows import build_graph, run_delivery


REQ = WebhookRequest(message="hi", session_id="s1")


def scripted_attempts(outcomes, calls):
    def attempt(request):
        calls.append(request)
        outcome = outcomes[len(calls) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    return attempt


def test_retry_until_success():
    calls, sleeps = [], []
    outcomes = [
        EmptyReplyError(code="EMPTY_REPLY", message="empty"),
        NetworkError(code="NETWORK_ERROR", message="down"),
        "done",
    ]
    graph = build_graph(scripted_attempts(outcomes, calls), sleeps.append)
    state = run_delivery(graph, REQ, max_retries=2, base_delay_ms=10)
    assert state["status"] == DeliveryStatus.SUCCESS
    assert state["reply"] == "done"
    assert state["attempts"] == 3
    assert state["delays_ms"] == [10, 20]
    assert sleeps == [0.01, 0.02]
    assert all(c == REQ for c in calls)


def test_exhausted_without_retries():
    calls, sleeps = [], []
    outcomes = [NetworkError(code="NETWORK_ERROR", message="down")]
    graph = build_graph(scripted_attempts(outcomes, calls), sleeps.append)
    state = run_delivery(graph, REQ, max_retries=0, base_delay_ms=1000)
    assert state["status"] == DeliveryStatus.EXHAUSTED
    assert state["status"].terminal
    assert state["attempts"] == 1
    assert state["last_error"].code == "NETWORK_ERROR"
    assert sleeps == []


def test_linear_backoff_schedule():
    calls, sleeps = [], []
    outcomes = [NetworkError(code="NETWORK_ERROR", message="down")] * 6
    graph = build_graph(scripted_attempts(outcomes, calls), sleeps.append)
    state = run_delivery(graph, REQ, max_retries=5, base_delay_ms=100)
    assert state["status"] == DeliveryStatus.EXHAUSTED
    assert len(calls) == 6
    assert state["delays_ms"] == [100, 200, 300, 400, 500]


def test_unexpected_errors_propagate():
    def attempt(request):
        raise RuntimeError("bug")

    graph = build_graph(attempt, lambda s: None)
    with pytest.raises(RuntimeError):
        run_delivery(graph, REQ, max_retries=3, base_delay_ms=0)
