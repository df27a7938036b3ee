import httpx
import pytest

from webhook_chat.domain.exceptions import (
    ApiError,
    DeliveryError,
    EmptyReplyError,
    NetworkError,
    ValidationError,
)
from webhook_chat.providers.webhook_client import WebhookClient


class SettingsStub:
    webhook_url = "https://hooks.example.test/chat"
    max_retries = 3
    retry_delay_ms = 1000
    http_timeout = 1.0


class Resp:
    def __init__(self, status_code=200, body=None, invalid_json=False):
        self.status_code = status_code
        self._body = body
        self._invalid_json = invalid_json

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._body


def fake_client_factory(outcomes, captured):
    """按顺序返回 outcomes 中的响应；异常实例会被直接抛出。"""

    queue = list(outcomes)

    class Client:
        def __init__(self, *a, **kw):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *a):
            return False

        def post(self, url, json=None, headers=None, **_):
            captured.append({"url": url, "json": json, "headers": headers})
            outcome = queue.pop(0) if len(queue) > 1 else queue[0]
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

    return Client


def make_client(sleeps, settings=None):
    return WebhookClient(settings or SettingsStub(), sleep=sleeps.append)


def test_send_success_payload(monkeypatch):
    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([Resp(body={"reply": "hello"})], captured))
    reply = make_client(sleeps).send("hi", "session_1")
    assert reply == "hello"
    assert captured[0]["url"] == "https://hooks.example.test/chat"
    assert captured[0]["json"] == {"message": "hi", "sessionId": "session_1"}
    assert captured[0]["headers"]["Content-Type"] == "application/json"
    assert sleeps == []


def test_transport_failure_retries_then_gives_up(monkeypatch):
    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([httpx.ConnectError("refused")], captured))
    with pytest.raises(DeliveryError) as exc_info:
        make_client(sleeps).send("hi", "s")
    assert len(captured) == 4
    assert sleeps == [1.0, 2.0, 3.0]
    err = exc_info.value
    assert err.attempts == 4
    assert isinstance(err.cause, NetworkError)
    assert err.__cause__ is err.cause


def test_non_success_status_is_retried(monkeypatch):
    captured, sleeps = [], []
    outcomes = [Resp(status_code=500), Resp(body="plain text reply")]
    monkeypatch.setattr("httpx.Client", fake_client_factory(outcomes, captured))
    assert make_client(sleeps).send("hi", "s") == "plain text reply"
    assert len(captured) == 2
    assert sleeps == [1.0]


def test_empty_reply_is_retried(monkeypatch):
    captured, sleeps = [], []
    outcomes = [Resp(body={}), Resp(body=[{"json": {"reply": "ok"}}])]
    monkeypatch.setattr("httpx.Client", fake_client_factory(outcomes, captured))
    assert make_client(sleeps).send("hi", "s") == "ok"
    assert sleeps == [1.0]


def test_empty_reply_exhaustion_keeps_last_cause(monkeypatch):
    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([Resp(body={"reply": ""})], captured))
    with pytest.raises(DeliveryError) as exc_info:
        make_client(sleeps).send("hi", "s")
    assert isinstance(exc_info.value.cause, EmptyReplyError)
    assert len(captured) == 4


def test_invalid_json_without_retries(monkeypatch):
    class NoRetry(SettingsStub):
        max_retries = 0

    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([Resp(invalid_json=True)], captured))
    with pytest.raises(DeliveryError) as exc_info:
        make_client(sleeps, NoRetry()).send("hi", "s")
    assert exc_info.value.cause.code == "INVALID_JSON"
    assert len(captured) == 1
    assert sleeps == []


def test_status_code_is_kept_on_cause(monkeypatch):
    class OneRetry(SettingsStub):
        max_retries = 1
        retry_delay_ms = 250

    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([Resp(status_code=404)], captured))
    with pytest.raises(DeliveryError) as exc_info:
        make_client(sleeps, OneRetry()).send("hi", "s")
    cause = exc_info.value.cause
    assert isinstance(cause, ApiError)
    assert cause.http_status == 404
    assert sleeps == [0.25]


def test_missing_webhook_url(monkeypatch):
    class NoUrl(SettingsStub):
        webhook_url = ""

    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([Resp(body={"reply": "x"})], captured))
    with pytest.raises(ValidationError) as exc_info:
        make_client(sleeps, NoUrl()).send("hi", "s")
    assert exc_info.value.code == "MISSING_WEBHOOK_URL"
    assert captured == []


def test_redirect_is_followed_with_post(monkeypatch):
    seen = []

    def handler(request):
        seen.append((request.method, request.url.path))
        if request.url.path == "/chat":
            return httpx.Response(307, headers={"Location": "/b"})
        return httpx.Response(200, json={"reply": "ok"})

    real_client = httpx.Client

    def client_with_transport(*a, **kw):
        kw["transport"] = httpx.MockTransport(handler)
        return real_client(*a, **kw)

    monkeypatch.setattr("httpx.Client", client_with_transport)
    sleeps = []
    assert make_client(sleeps).send("hi", "s") == "ok"
    assert seen == [("POST", "/chat"), ("POST", "/b")]
    assert sleeps == []


def test_malformed_webhook_url(monkeypatch):
    class BadUrl(SettingsStub):
        webhook_url = "http://[::1/x"

    captured, sleeps = [], []
    monkeypatch.setattr("httpx.Client", fake_client_factory([Resp(body={"reply": "x"})], captured))
    with pytest.raises(ValidationError) as exc_info:
        make_client(sleeps, BadUrl()).send("hi", "s")
    assert exc_info.value.code == "INVALID_WEBHOOK_URL"
    assert captured == []
