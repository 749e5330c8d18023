"""
Notification events emitted by the claim core.
Delivery is up to the Notifier implementation; the core only publishes.
"""

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Literal, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .core.models import ClaimStatus, RefundReason, SubmissionMethod, utcnow

logger = logging.getLogger(__name__)


class ClaimEvent(BaseModel):
    """Base for all events; each carries the claim identifier."""

    model_config = ConfigDict(frozen=True)

    name: str
    claim_id: str
    occurred_at: datetime = Field(default_factory=utcnow)


class ClaimStatusChanged(ClaimEvent):
    name: Literal["claim_status_changed"] = "claim_status_changed"
    from_status: ClaimStatus
    to_status: ClaimStatus
    actor: str = "system"


class ClaimFiled(ClaimEvent):
    name: Literal["claim_filed"] = "claim_filed"
    airline: str
    airline_reference: str
    filing_method: SubmissionMethod
    next_follow_up: datetime | None = None


class RefundIssued(ClaimEvent):
    name: Literal["refund_issued"] = "refund_issued"
    reason: RefundReason
    amount: Decimal
    currency: str
    payment_reference: str


@runtime_checkable
class Notifier(Protocol):
    """Receives events for rendering and delivery elsewhere."""

    def publish(self, event: ClaimEvent) -> None:
        ...


class EventLog:
    """In-memory notifier that records every published event."""

    def __init__(self) -> None:
        self._events: list[ClaimEvent] = []
        self._lock = threading.Lock()

    def publish(self, event: ClaimEvent) -> None:
        with self._lock:
            self._events.append(event)
        logger.debug("Event %s for claim %s", event.name, event.claim_id)

    @property
    def events(self) -> list[ClaimEvent]:
        with self._lock:
            return list(self._events)

    def for_claim(self, claim_id: str) -> list[ClaimEvent]:
        return [e for e in self.events if e.claim_id == claim_id]

    def named(self, name: str) -> list[ClaimEvent]:
        return [e for e in self.events if e.name == name]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()


class LoggingNotifier:
    """Notifier that only writes events to the log."""

    def publish(self, event: ClaimEvent) -> None:
        logger.info("%s: %s", event.name, event.model_dump_json())
