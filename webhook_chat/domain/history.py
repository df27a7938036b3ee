from typing import List, Optional, Protocol

from .models import ChatMessage


class SessionStore(Protocol):
    def load_session_id(self) -> Optional[str]:
        ...

    def save_session_id(self, session_id: str) -> None:
        ...

    def load_history(self) -> List[ChatMessage]:
        ...

    def save_history(self, messages: List[ChatMessage]) -> None:
        ...

    def clear(self) -> None:
        ...
