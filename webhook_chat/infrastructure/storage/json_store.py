import json
import os
from pathlib import Path
from typing import Any, List, Optional
from uuid import uuid4

from webhook_chat.config.settings import settings
from webhook_chat.domain.history import SessionStore
from webhook_chat.domain.models import ChatMessage
from webhook_chat.domain.exceptions import BusinessError


class JsonSessionStore(SessionStore):
    SESSION_FILE = "session.json"
    HISTORY_FILE = "history.json"

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def load_session_id(self) -> Optional[str]:
        data = self._read_json(self._root / self.SESSION_FILE)
        if not isinstance(data, dict):
            return None
        session_id = data.get("session_id")
        return session_id if isinstance(session_id, str) and session_id else None

    def save_session_id(self, session_id: str) -> None:
        self._write_json(self._root / self.SESSION_FILE, {"session_id": session_id})

    def load_history(self) -> List[ChatMessage]:
        data = self._read_json(self._root / self.HISTORY_FILE)
        if data is None:
            return []
        if not isinstance(data, list):
            raise BusinessError(code="STORE_READ_ERROR", message="history is not a list")
        try:
            return [ChatMessage.from_dict(item) for item in data]
        except (TypeError, ValueError, AttributeError) as e:
            raise BusinessError(code="STORE_READ_ERROR", message=str(e))

    def save_history(self, messages: List[ChatMessage]) -> None:
        self._write_json(self._root / self.HISTORY_FILE, [m.to_dict() for m in messages])

    def clear(self) -> None:
        for name in (self.SESSION_FILE, self.HISTORY_FILE):
            path = self._root / name
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                raise BusinessError(code="STORE_DELETE_ERROR", message=str(e))

    def _read_json(self, path: Path) -> Any:
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BusinessError(code="STORE_READ_ERROR", message=str(e))

    def _write_json(self, path: Path, obj: Any) -> None:
        tmp_path = path.parent / f"{path.stem}.{uuid4().hex}.json.tmp"
        try:
            tmp_path.write_text(json.dumps(obj, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise BusinessError(code="STORE_WRITE_ERROR", message=str(e))
