"""NotifierProtocol — user-facing events emitted by the settlement engine.

Delivery is best effort: the engine logs and swallows notifier failures.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from src.bx_common.clock import utc_now


@dataclass
class Notification:
    user_id: str
    event_type: str                  # NotificationEvent value
    payload: dict[str, Any]
    created_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "event_type": self.event_type,
            "payload": self.payload,
            "created_at": self.created_at.isoformat(),
        }


class NotifierProtocol(Protocol):
    async def notify(self, user_id: str, event_type: str, payload: dict[str, Any]) -> None: ...
