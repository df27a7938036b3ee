import tempfile
from pathlib import Path

from webhook_chat.api import service
from webhook_chat.chat.session import ChatSession
from webhook_chat.infrastructure.storage.json_store import JsonSessionStore


class SettingsStub:
    message_max_length = 2000
    user_avatar = "V"
    bot_avatar = "M"
    error_notice = "oops"


class FakeClient:
    name = "fake"

    def send(self, message, session_id):
        return f"echo: {message}"


def test_service_roundtrip(monkeypatch):
    with tempfile.TemporaryDirectory() as d:
        session = ChatSession(client=FakeClient(), store=JsonSessionStore(root=Path(d)), settings=SettingsStub())
        monkeypatch.setattr(service, "_session", session)

        out = service.send_message("hi")
        assert out["accepted"] is True
        assert out["session_id"] == session.session_id
        assert out["bot_message"]["content"] == "echo: hi"
        assert out["error"] is None

        assert [m["role"] for m in service.get_history()] == ["user", "bot"]
        assert "echo: hi" in service.render_history()

        new_id = service.clear_history()
        assert new_id == session.session_id
        assert service.get_history() == []
