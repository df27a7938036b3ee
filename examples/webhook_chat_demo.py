"""Minimal interactive demonstration of the webhook chat session."""

from webhook_chat.api.service import clear_history, get_default_session, send_message

if __name__ == "__main__":
    session = get_default_session()
    print("Session:", session.session_id)
    print("输入消息，/clear 清空历史，/quit 退出")
    while True:
        text = input("> ").strip()
        if text == "/quit":
            break
        if text == "/clear":
            print("New session:", clear_history())
            continue
        out = send_message(text)
        if not out["accepted"]:
            continue
        if out["error"]:
            print("!", out["error"])
        else:
            print("Bot:", out["bot_message"]["content"])
