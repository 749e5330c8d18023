"""
Core data models for the Flight Claims engine.
Uses Pydantic for validation and serialization.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .errors import DisruptionInputError


def utcnow() -> datetime:
    """Timezone-aware current time in UTC."""
    return datetime.now(timezone.utc)


class DisruptionType(str, Enum):
    """Kinds of flight disruption a claim can be made for."""

    DELAY = "delay"
    CANCELLATION = "cancellation"
    DENIED_BOARDING = "denied_boarding"
    DOWNGRADE = "downgrade"


class Regulation(str, Enum):
    """Passenger-rights regimes the engine can apply."""

    EU261 = "EU261"
    UK261 = "UK261"
    US_DOT = "US_DOT"
    SWISS = "SWISS"
    NORWEGIAN = "NORWEGIAN"
    CANADIAN = "CANADIAN"


class DistanceBand(str, Enum):
    """Great-circle distance bands used by EU-style compensation tables."""

    SHORT = "short"  # <= 1500 km
    MEDIUM = "medium"  # <= 3500 km
    LONG = "long"  # > 3500 km

    @classmethod
    def from_distance(cls, distance_km: float) -> "DistanceBand":
        if distance_km <= 1500:
            return cls.SHORT
        if distance_km <= 3500:
            return cls.MEDIUM
        return cls.LONG


class CabinClass(str, Enum):
    """Cabin classes, ordered from lowest to highest."""

    ECONOMY = "economy"
    PREMIUM_ECONOMY = "premium_economy"
    BUSINESS = "business"
    FIRST = "first"

    @property
    def rank(self) -> int:
        return list(CabinClass).index(self)


class SubmissionMethod(str, Enum):
    """Channel an airline accepts compensation claims through."""

    EMAIL = "email"
    WEB_FORM = "web_form"
    POSTAL = "postal"


class DeniedBoardingReason(str, Enum):
    """Why a passenger was refused boarding."""

    OVERBOOKING = "overbooking"
    SAFETY = "safety"
    DOCUMENTATION = "documentation"
    BEHAVIOUR = "behaviour"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Flight data
# ---------------------------------------------------------------------------


class FlightObservation(BaseModel):
    """One provider's report of a flight. Immutable once received."""

    model_config = ConfigDict(frozen=True)

    flight_number: str
    carrier: str = ""
    flight_date: date
    origin: str | None = None
    destination: str | None = None
    scheduled_departure: datetime | None = None
    actual_departure: datetime | None = None
    scheduled_arrival: datetime | None = None
    actual_arrival: datetime | None = None
    delay_minutes: int = 0
    cancelled: bool = False
    cancellation_reason: str | None = None
    confidence: float = Field(ge=0, le=1)
    source: str

    @field_validator("flight_number")
    @classmethod
    def _normalize_flight_number(cls, v: str) -> str:
        return normalize_flight_number(v)


class FieldConflict(BaseModel):
    """A field on which two flight data sources disagree."""

    model_config = ConfigDict(frozen=True)

    field: str
    preferred_source: str
    preferred_value: Any
    other_source: str
    other_value: Any


class ReconciledFlightRecord(BaseModel):
    """Confidence-scored flight facts derived from one or more observations."""

    model_config = ConfigDict(frozen=True)

    flight_number: str
    flight_date: date
    carrier: str = ""
    delay_minutes: int = 0
    cancelled: bool = False
    disruption_reason: str | None = None
    confidence: float = Field(ge=0, le=1)
    sources: list[str] = Field(default_factory=list)
    corroborated: bool = False
    single_source: bool = False
    conflicts: list[FieldConflict] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    @property
    def is_manual(self) -> bool:
        return self.sources == ["manual"]

    @classmethod
    def manual(
        cls,
        flight_number: str,
        flight_date: date,
        delay_minutes: int = 0,
        cancelled: bool = False,
        reason: str | None = None,
        carrier: str = "",
        confidence: float = 0.6,
    ) -> "ReconciledFlightRecord":
        """Build a record from passenger-supplied facts when no provider answered."""
        return cls(
            flight_number=normalize_flight_number(flight_number),
            flight_date=flight_date,
            carrier=carrier,
            delay_minutes=delay_minutes,
            cancelled=cancelled,
            disruption_reason=reason,
            confidence=confidence,
            sources=["manual"],
            single_source=True,
        )


def normalize_flight_number(value: str) -> str:
    """Uppercase a flight number and strip embedded whitespace."""
    return "".join(value.split()).upper()


class RouteContext(BaseModel):
    """Jurisdiction facts about a flight leg used for regulation selection."""

    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    carrier: str = ""
    departure_country: str | None = None
    arrival_country: str | None = None
    carrier_country: str | None = None
    distance_km: float = Field(ge=0)
    large_carrier: bool = True

    @property
    def distance_band(self) -> DistanceBand:
        return DistanceBand.from_distance(self.distance_km)

    @property
    def is_domestic(self) -> bool:
        return (
            self.departure_country is not None
            and self.departure_country == self.arrival_country
        )


# ---------------------------------------------------------------------------
# Disruption inputs (tagged union keyed on ``type``)
# ---------------------------------------------------------------------------


class DelayInput(BaseModel):
    """Delay claims need nothing beyond the flight record."""

    type: Literal["delay"] = "delay"
    reason: str | None = None

    def missing_fields(self) -> list[str]:
        return []


class CancellationInput(BaseModel):
    """Facts about a cancellation and any re-routing offered."""

    type: Literal["cancellation"] = "cancellation"
    notice_days: int = Field(ge=0)
    alternative_offered: bool
    # Negative means the alternative left earlier than the original flight.
    alternative_departure_delta_minutes: int | None = None
    # Positive means the alternative arrived later than the original flight.
    alternative_arrival_delta_minutes: int | None = None
    reason: str | None = None

    def missing_fields(self) -> list[str]:
        if not self.alternative_offered:
            return []
        return [
            name
            for name in (
                "alternative_departure_delta_minutes",
                "alternative_arrival_delta_minutes",
            )
            if getattr(self, name) is None
        ]


class DeniedBoardingInput(BaseModel):
    """Facts about a denied boarding event."""

    type: Literal["denied_boarding"] = "denied_boarding"
    reason_category: DeniedBoardingReason
    voluntary: bool = False
    compensation_offered: bool
    compensation_offered_amount: Decimal | None = Field(default=None, ge=0)
    passengers_affected: int = Field(default=1, ge=1)
    ticket_price: Decimal | None = Field(default=None, ge=0)
    alternative_arrival_delay_minutes: int | None = Field(default=None, ge=0)

    def missing_fields(self) -> list[str]:
        if self.compensation_offered and self.compensation_offered_amount is None:
            return ["compensation_offered_amount"]
        return []


class DowngradeInput(BaseModel):
    """Facts about an involuntary cabin downgrade."""

    type: Literal["downgrade"] = "downgrade"
    booked_class: CabinClass
    actual_class: CabinClass
    ticket_price: Decimal = Field(gt=0)
    fare_difference: Decimal | None = Field(default=None, ge=0)

    @property
    def is_downgrade(self) -> bool:
        return self.actual_class.rank < self.booked_class.rank

    def missing_fields(self) -> list[str]:
        return []


DisruptionInput = Annotated[
    Union[DelayInput, CancellationInput, DeniedBoardingInput, DowngradeInput],
    Field(discriminator="type"),
]

_DISRUPTION_ADAPTER: TypeAdapter[Any] = TypeAdapter(DisruptionInput)

_INPUT_MODELS = (DelayInput, CancellationInput, DeniedBoardingInput, DowngradeInput)


def parse_disruption_input(
    data: Any, disruption_type: DisruptionType | str | None = None
) -> DelayInput | CancellationInput | DeniedBoardingInput | DowngradeInput:
    """
    Validate raw disruption facts into the matching input variant.

    Args:
        data: A disruption input model or a mapping of its fields
        disruption_type: Expected disruption type; fills ``type`` when absent

    Returns:
        The validated input variant

    Raises:
        DisruptionInputError: With the structured list of missing fields
    """
    expected = DisruptionType(disruption_type) if disruption_type else None

    if isinstance(data, _INPUT_MODELS):
        parsed = data
    else:
        payload = dict(data or {})
        if expected is not None:
            payload.setdefault("type", expected.value)
        try:
            parsed = _DISRUPTION_ADAPTER.validate_python(payload)
        except ValidationError as exc:
            missing: list[str] = []
            invalid: dict[str, str] = {}
            for error in exc.errors():
                # The first location element is the union tag for variant errors.
                loc = [str(part) for part in error["loc"][1:]] or ["type"]
                field_name = ".".join(loc)
                if error["type"] == "missing" or error["type"] == "union_tag_not_found":
                    missing.append(field_name)
                else:
                    invalid[field_name] = error["msg"]
            raise DisruptionInputError(missing, invalid) from exc

    if expected is not None and parsed.type != expected.value:
        raise DisruptionInputError(
            invalid_fields={"type": f"expected {expected.value}, got {parsed.type}"}
        )

    missing = parsed.missing_fields()
    if missing:
        raise DisruptionInputError(missing)
    return parsed


# ---------------------------------------------------------------------------
# Eligibility
# ---------------------------------------------------------------------------


class EligibilityDecision(BaseModel):
    """Outcome of an eligibility evaluation. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    eligible: bool
    amount: Decimal = Decimal("0")
    currency: str = "EUR"
    regulation: Regulation | None = None
    reason: str
    confidence: float = Field(ge=0, le=1)
    low_confidence: bool = False
    disruption_type: DisruptionType
    distance_km: float | None = None
    distance_band: DistanceBand | None = None
    extraordinary_category: str | None = None
    additional_rights: list[str] = Field(default_factory=list)
    decided_at: datetime = Field(default_factory=utcnow)


# ---------------------------------------------------------------------------
# Claims
# ---------------------------------------------------------------------------


class ClaimStatus(str, Enum):
    """Lifecycle states of a claim."""

    SUBMITTED = "submitted"
    VALIDATED = "validated"
    DOCUMENTS_PREPARED = "documents_prepared"
    READY_TO_FILE = "ready_to_file"
    FILED = "filed"
    AIRLINE_ACKNOWLEDGED = "airline_acknowledged"
    MONITORING = "monitoring"
    AIRLINE_RESPONDED = "airline_responded"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    REFUNDED = "refunded"

    @property
    def is_final(self) -> bool:
        """No transition of any kind leaves a final status."""
        return self in (ClaimStatus.COMPLETED, ClaimStatus.REFUNDED)

    @property
    def is_closed(self) -> bool:
        """Closed claims have no follow-up scheduling."""
        return self in (
            ClaimStatus.APPROVED,
            ClaimStatus.REJECTED,
            ClaimStatus.COMPLETED,
            ClaimStatus.REFUNDED,
        )

    @property
    def reached_filing(self) -> bool:
        """Whether the claim has been filed with the airline at some point."""
        return self in _FILED_OR_LATER


_FILED_OR_LATER = frozenset(
    {
        ClaimStatus.FILED,
        ClaimStatus.AIRLINE_ACKNOWLEDGED,
        ClaimStatus.MONITORING,
        ClaimStatus.AIRLINE_RESPONDED,
        ClaimStatus.APPROVED,
        ClaimStatus.REJECTED,
        ClaimStatus.COMPLETED,
    }
)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    CAPTURED = "captured"
    REFUNDED = "refunded"
    FAILED = "failed"


class Passenger(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class FlightLeg(BaseModel):
    flight_number: str
    carrier: str = ""
    flight_date: date
    origin: str = ""
    destination: str = ""
    # Set when an airport is missing from the reference table
    distance_km: float | None = Field(default=None, ge=0)
    departure_country: str | None = None
    arrival_country: str | None = None

    @field_validator("flight_number")
    @classmethod
    def _normalize_flight_number(cls, v: str) -> str:
        return normalize_flight_number(v)

    @field_validator("origin", "destination")
    @classmethod
    def _upper_airport(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("departure_country", "arrival_country")
    @classmethod
    def _upper_country(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.strip().upper() or None


class PaymentInfo(BaseModel):
    """Service-fee payment as seen through the payment signal interface."""

    payment_id: str
    amount: Decimal = Field(ge=0)
    currency: str = "EUR"
    status: PaymentStatus = PaymentStatus.PENDING
    captured_at: datetime | None = None
    refund_requested_at: datetime | None = None


class StatusChange(BaseModel):
    status: ClaimStatus
    at: datetime
    actor: str = "system"
    note: str | None = None


class ClaimDocument(BaseModel):
    kind: str
    reference: str
    uploaded_at: datetime = Field(default_factory=utcnow)


class SubmissionPackage(BaseModel):
    """Airline-facing submission prepared for a claim."""

    method: SubmissionMethod
    recipient: str
    subject: str
    body: str
    attachments: list[str] = Field(default_factory=list)
    form_fields: dict[str, str] = Field(default_factory=dict)
    generated_at: datetime = Field(default_factory=utcnow)


class CompensationOverride(BaseModel):
    """Admin-entered compensation figure, kept apart from the engine estimate."""

    amount: Decimal = Field(ge=0)
    currency: str
    actor: str
    note: str
    recorded_at: datetime = Field(default_factory=utcnow)


class RefundReason(str, Enum):
    CLAIM_UNSUCCESSFUL = "claim_unsuccessful"
    NOT_FILED_IN_TIME = "not_filed_in_time"
    CUSTOMER_REQUEST_WINDOW = "customer_request_window"
    INELIGIBLE_AFTER_PAYMENT = "ineligible_after_payment"
    DUPLICATE_CLAIM = "duplicate_claim"


class RefundRecord(BaseModel):
    reason: RefundReason
    amount: Decimal
    currency: str
    payment_reference: str
    issued_at: datetime = Field(default_factory=utcnow)


class InternalNote(BaseModel):
    text: str
    author: str = "system"
    at: datetime = Field(default_factory=utcnow)


class Claim(BaseModel):
    """
    Central claim record.

    Only the lifecycle state machine changes ``status`` and
    ``status_history``; other components read them.
    """

    claim_id: str
    passenger: Passenger
    flight: FlightLeg
    booking_reference: str | None = None
    disruption_type: DisruptionType
    disruption: DisruptionInput
    status: ClaimStatus = ClaimStatus.SUBMITTED
    status_history: list[StatusChange] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    payment: PaymentInfo | None = None
    flight_record: ReconciledFlightRecord | None = None
    # Latest engine output for the current facts and flight record
    compensation_estimate: EligibilityDecision | None = None
    # Decision the passenger paid against
    quoted_estimate: EligibilityDecision | None = None
    compensation_override: CompensationOverride | None = None
    documents: list[ClaimDocument] = Field(default_factory=list)
    submission: SubmissionPackage | None = None
    airline_reference: str | None = None
    filing_method: SubmissionMethod | None = None
    filed_at: datetime | None = None
    next_follow_up: datetime | None = None
    follow_up_index: int = 0
    follow_ups_sent: int = 0
    refund: RefundRecord | None = None
    internal_notes: list[InternalNote] = Field(default_factory=list)
    version: int = 0

    def model_post_init(self, __context: Any) -> None:
        """Seed the status history with the initial status."""
        if not self.status_history:
            self.status_history.append(
                StatusChange(status=self.status, at=self.created_at)
            )

    @property
    def document_kinds(self) -> set[str]:
        return {doc.kind for doc in self.documents}

    def add_note(self, text: str, author: str = "system") -> None:
        """Append to the internal notes log (append-only)."""
        self.internal_notes.append(InternalNote(text=text, author=author))

    def transitioned_at(self, status: ClaimStatus) -> datetime | None:
        """Timestamp of the most recent transition into ``status``."""
        for change in reversed(self.status_history):
            if change.status == status:
                return change.at
        return None


class RefundDecision(BaseModel):
    """Output of the refund trigger evaluator."""

    model_config = ConfigDict(frozen=True)

    should_refund: bool
    reason: RefundReason | None = None
    amount: Decimal = Decimal("0")
    currency: str = "EUR"
    message: str = ""
    evaluated_at: datetime = Field(default_factory=utcnow)

    @classmethod
    def no_action(cls, message: str) -> "RefundDecision":
        return cls(should_refund=False, message=message)
