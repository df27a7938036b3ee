from webhook_chat.providers import create_client
from webhook_chat.providers.webhook_client import WebhookClient


def test_create_client_uses_settings(monkeypatch):
    class DummySettings:
        webhook_url = "https://hooks.example.test/chat"
        max_retries = 1
        retry_delay_ms = 0
        http_timeout = 1.0

    monkeypatch.setattr("webhook_chat.providers.settings", DummySettings())
    client = create_client(sleep=lambda s: None)
    assert isinstance(client, WebhookClient)
    assert client.name == "webhook"
