"""
Payment signal interface.
The core never talks to a payment processor directly: it consumes
capture/refund-request signals and emits refund instructions through a
PaymentGateway.
"""

import logging
import threading
from datetime import datetime
from decimal import Decimal
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from .core.models import RefundReason, utcnow

logger = logging.getLogger(__name__)


class RefundInstruction(BaseModel):
    """An ``issue_refund`` signal as handed to the payment processor."""

    model_config = ConfigDict(frozen=True)

    payment_reference: str
    amount: Decimal
    currency: str
    reason: RefundReason
    issued_at: datetime = Field(default_factory=utcnow)


@runtime_checkable
class PaymentGateway(Protocol):
    """Executes refunds decided by the core."""

    def issue_refund(
        self, payment_reference: str, amount: Decimal, currency: str, reason: RefundReason
    ) -> None:
        ...


class RecordingGateway:
    """Gateway that records refund instructions instead of moving money."""

    def __init__(self) -> None:
        self._instructions: list[RefundInstruction] = []
        self._lock = threading.Lock()

    def issue_refund(
        self, payment_reference: str, amount: Decimal, currency: str, reason: RefundReason
    ) -> None:
        instruction = RefundInstruction(
            payment_reference=payment_reference, amount=amount, currency=currency, reason=reason
        )
        with self._lock:
            self._instructions.append(instruction)
        logger.info(
            "Refund instruction: %s %s %s (%s)", payment_reference, amount, currency, reason.value
        )

    @property
    def instructions(self) -> list[RefundInstruction]:
        with self._lock:
            return list(self._instructions)

    def for_payment(self, payment_reference: str) -> list[RefundInstruction]:
        return [i for i in self.instructions if i.payment_reference == payment_reference]
