"""State definition for the delivery graph."""

from __future__ import annotations

from typing import List, Optional, TypedDict

from webhook_chat.domain.exceptions import BusinessError
from webhook_chat.domain.models import DeliveryStatus, WebhookRequest


class DeliveryState(TypedDict, total=False):
    """State shared across delivery graph nodes."""

    request: WebhookRequest
    status: DeliveryStatus
    attempts: int
    max_attempts: int
    base_delay_ms: int
    delays_ms: List[int]
    reply: Optional[str]
    last_error: Optional[BusinessError]
