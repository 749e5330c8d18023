"""
Shared fixtures for the Flight Claims test suite.
"""

from collections.abc import Callable, Iterator
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

import pytest

from flight_claims.config import Settings
from flight_claims.core.models import (
    Claim,
    ClaimDocument,
    ClaimStatus,
    FlightObservation,
    PaymentInfo,
    PaymentStatus,
    ReconciledFlightRecord,
    StatusChange,
)
from flight_claims.engine import ClaimEngine

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)
FLIGHT_DATE = date(2025, 3, 1)


@pytest.fixture
def now() -> datetime:
    """Fixed evaluation time."""
    return NOW


@pytest.fixture
def observation() -> Callable[..., FlightObservation]:
    """Factory for provider observations of FR1234 on the test date."""

    def _make(
        source: str = "aviationstack",
        confidence: float = 0.8,
        delay_minutes: int = 200,
        cancelled: bool = False,
        reason: str | None = None,
        flight_number: str = "FR1234",
        flight_date: date = FLIGHT_DATE,
    ) -> FlightObservation:
        return FlightObservation(
            flight_number=flight_number,
            carrier=flight_number[:2],
            flight_date=flight_date,
            origin="DUB",
            destination="BCN",
            delay_minutes=delay_minutes,
            cancelled=cancelled,
            cancellation_reason=reason,
            confidence=confidence,
            source=source,
        )

    return _make


def make_record(
    delay_minutes: int = 200,
    cancelled: bool = False,
    reason: str | None = None,
    flight_number: str = "FR1234",
    confidence: float = 0.9,
) -> ReconciledFlightRecord:
    return ReconciledFlightRecord(
        flight_number=flight_number,
        flight_date=FLIGHT_DATE,
        carrier=flight_number[:2],
        delay_minutes=delay_minutes,
        cancelled=cancelled,
        disruption_reason=reason,
        confidence=confidence,
        sources=["aviationstack", "flightlabs"],
        corroborated=True,
    )


@pytest.fixture
def record() -> Callable[..., ReconciledFlightRecord]:
    """Factory for reconciled flight records."""
    return make_record


@pytest.fixture
def make_claim() -> Callable[..., Claim]:
    """
    Factory for a Ryanair DUB-BCN delay claim.

    By default the claim is complete enough to file: identity fields,
    booking reference and both base documents are present.
    """

    def _make(
        claim_id: str = "FC-TEST-001",
        status: ClaimStatus = ClaimStatus.SUBMITTED,
        carrier: str = "FR",
        flight_number: str = "FR1234",
        origin: str = "DUB",
        destination: str = "BCN",
        disruption_type: str = "delay",
        disruption: dict[str, Any] | None = None,
        delay_minutes: int = 200,
        reason: str | None = "technical fault",
        email: str = "jane.doe@example.com",
        booking_reference: str | None = "ABC123",
        documents: tuple[str, ...] = ("boarding_pass", "delay_proof"),
        paid_at: datetime | None = None,
        fee: Decimal = Decimal("29.00"),
        created_at: datetime = NOW - timedelta(days=1),
        **updates: Any,
    ) -> Claim:
        payment = None
        if paid_at is not None:
            payment = PaymentInfo(
                payment_id=f"pi_{claim_id}",
                amount=fee,
                currency="EUR",
                status=PaymentStatus.CAPTURED,
                captured_at=paid_at,
            )
        claim = Claim(
            claim_id=claim_id,
            passenger={"first_name": "Jane", "last_name": "Doe", "email": email},
            flight={
                "flight_number": flight_number,
                "carrier": carrier,
                "flight_date": FLIGHT_DATE,
                "origin": origin,
                "destination": destination,
            },
            booking_reference=booking_reference,
            disruption_type=disruption_type,
            disruption=disruption or {"type": disruption_type, "reason": reason},
            status=status,
            status_history=[StatusChange(status=status, at=created_at)],
            created_at=created_at,
            payment=payment,
            flight_record=make_record(delay_minutes, reason=reason, flight_number=flight_number),
            documents=[ClaimDocument(kind=kind, reference=f"{kind}.pdf") for kind in documents],
        )
        return claim.model_copy(update=updates) if updates else claim

    return _make


@pytest.fixture
def settings() -> Settings:
    """Settings with no provider keys, independent of the environment."""
    return Settings(aviationstack_api_key="", flightlabs_api_key="", log_level="INFO")


@pytest.fixture
def claim_engine(settings: Settings) -> Iterator[ClaimEngine]:
    """Engine over an empty in-memory store with no flight data providers."""
    engine = ClaimEngine(settings=settings, providers=[])
    yield engine
    engine.close()
