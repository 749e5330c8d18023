"""
Claim Lifecycle State Machine.
Owns the claim status field: an explicit table of (from, to, guard)
transitions, the ready-to-file validation and follow-up scheduling.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..core.models import (
    Claim,
    ClaimStatus,
    CompensationOverride,
    DisruptionType,
    PaymentStatus,
    StatusChange,
    SubmissionMethod,
    SubmissionPackage,
    utcnow,
)
from ..directory.airlines import BASE_REQUIRED_DOCUMENTS, AirlineConfig, AirlineDirectory, default_directory
from ..directory.submission import build_submission_package, missing_claim_fields
from ..events import ClaimEvent, ClaimFiled, ClaimStatusChanged
from .follow_up import advance_schedule, schedule_next

logger = logging.getLogger(__name__)

# Fields every claim needs before validation
IDENTITY_FIELDS = [
    "passenger_name",
    "email",
    "flight_number",
    "departure_date",
    "departure_airport",
    "arrival_airport",
]

DELAY_WARNING_MINUTES = 180


class UnmetKind(str, Enum):
    """Why a transition guard refused."""

    INVALID_TRANSITION = "invalid_transition"
    FINAL_STATUS = "final_status"
    PAYMENT = "payment"
    MISSING_FIELD = "missing_field"
    MISSING_DOCUMENT = "missing_document"
    CONFIGURATION_GAP = "configuration_gap"
    SUBMISSION = "submission"


class UnmetCondition(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: UnmetKind
    detail: str
    field: str | None = None


class TransitionResult(BaseModel):
    """
    Outcome of a transition attempt.

    On failure the claim is untouched and ``unmet`` lists what to remediate.
    """

    ok: bool
    claim_id: str
    from_status: ClaimStatus
    to_status: ClaimStatus
    status: ClaimStatus
    already_applied: bool = False
    unmet: list[UnmetCondition] = Field(default_factory=list)
    events: list[ClaimEvent] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.ok and not self.already_applied

    def _of_kind(self, kind: UnmetKind) -> list[str]:
        return [u.field or u.detail for u in self.unmet if u.kind == kind]

    @property
    def missing_fields(self) -> list[str]:
        return self._of_kind(UnmetKind.MISSING_FIELD)

    @property
    def missing_documents(self) -> list[str]:
        return self._of_kind(UnmetKind.MISSING_DOCUMENT)

    @property
    def configuration_gaps(self) -> list[str]:
        return self._of_kind(UnmetKind.CONFIGURATION_GAP)

    @property
    def messages(self) -> list[str]:
        return [u.detail for u in self.unmet]


class ValidationReport(BaseModel):
    """Ready-to-file validation of a claim."""

    claim_id: str
    is_valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    missing_fields: list[str] = Field(default_factory=list)
    missing_documents: list[str] = Field(default_factory=list)
    airline: str | None = None


@dataclass
class TransitionContext:
    """Inputs a guard or effect may read; effects may add events."""

    claim: Claim
    target: ClaimStatus
    now: datetime
    actor: str
    directory: AirlineDirectory
    airline_reference: str | None = None
    filing_method: SubmissionMethod | None = None
    note: str | None = None
    package: SubmissionPackage | None = None
    events: list[ClaimEvent] = field(default_factory=list)

    @property
    def airline(self) -> AirlineConfig | None:
        return self.directory.get(self.claim.flight.carrier or self.claim.flight.flight_number[:2])


Guard = Callable[[TransitionContext], list[UnmetCondition]]
Effect = Callable[[TransitionContext], None]


@dataclass(frozen=True)
class Transition:
    source: ClaimStatus
    target: ClaimStatus
    guard: Guard | None = None
    effect: Effect | None = None


# ---------------------------------------------------------------------------
# Guards
# ---------------------------------------------------------------------------


def _airline_gap(ctx: TransitionContext) -> list[UnmetCondition]:
    if ctx.airline is not None:
        return []
    carrier = ctx.claim.flight.carrier or ctx.claim.flight.flight_number[:2]
    return [
        UnmetCondition(
            kind=UnmetKind.CONFIGURATION_GAP,
            detail=f"Unsupported airline: {carrier!r} has no directory entry",
            field="airline",
        )
    ]


def _payment_unmet(claim: Claim) -> list[UnmetCondition]:
    if claim.payment is None or claim.payment.status != PaymentStatus.CAPTURED:
        return [UnmetCondition(kind=UnmetKind.PAYMENT, detail="Payment not captured")]
    return []


def _fields_unmet(claim: Claim, names: list[str]) -> list[UnmetCondition]:
    return [
        UnmetCondition(kind=UnmetKind.MISSING_FIELD, detail=f"{name} is required", field=name)
        for name in missing_claim_fields(claim, names)
    ]


def required_documents(config: AirlineConfig | None) -> list[str]:
    """Base documents plus the airline's extras, in order."""
    documents = list(BASE_REQUIRED_DOCUMENTS)
    if config is not None:
        documents.extend(d for d in config.required_documents if d not in documents)
    return documents


def _documents_unmet(claim: Claim, config: AirlineConfig | None) -> list[UnmetCondition]:
    present = claim.document_kinds
    return [
        UnmetCondition(kind=UnmetKind.MISSING_DOCUMENT, detail=f"{doc} is required", field=doc)
        for doc in required_documents(config)
        if doc not in present
    ]


def guard_validated(ctx: TransitionContext) -> list[UnmetCondition]:
    return _payment_unmet(ctx.claim) + _fields_unmet(ctx.claim, IDENTITY_FIELDS)


def guard_documents_prepared(ctx: TransitionContext) -> list[UnmetCondition]:
    gap = _airline_gap(ctx)
    if gap:
        return gap
    return _documents_unmet(ctx.claim, ctx.airline)


def guard_ready_to_file(ctx: TransitionContext) -> list[UnmetCondition]:
    gap = _airline_gap(ctx)
    if gap:
        return gap
    package, errors = build_submission_package(ctx.claim, ctx.airline)
    if package is None:
        return [UnmetCondition(kind=UnmetKind.SUBMISSION, detail=error) for error in errors]
    ctx.package = package
    return []


def guard_filed(ctx: TransitionContext) -> list[UnmetCondition]:
    unmet = _airline_gap(ctx)
    if not ctx.airline_reference or not ctx.airline_reference.strip():
        unmet.append(
            UnmetCondition(
                kind=UnmetKind.MISSING_FIELD,
                detail="airline_reference is required to file",
                field="airline_reference",
            )
        )
    return unmet


# ---------------------------------------------------------------------------
# Effects
# ---------------------------------------------------------------------------


def effect_store_package(ctx: TransitionContext) -> None:
    ctx.claim.submission = ctx.package


def effect_filed(ctx: TransitionContext) -> None:
    claim = ctx.claim
    config = ctx.airline
    claim.airline_reference = ctx.airline_reference.strip()
    claim.filing_method = (
        ctx.filing_method
        or (claim.submission.method if claim.submission else None)
        or config.submission_method
    )
    claim.filed_at = ctx.now
    claim.follow_up_index = 0
    schedule_next(claim, config, ctx.now)
    ctx.events.append(
        ClaimFiled(
            claim_id=claim.claim_id,
            airline=config.code,
            airline_reference=claim.airline_reference,
            filing_method=claim.filing_method,
            next_follow_up=claim.next_follow_up,
            occurred_at=ctx.now,
        )
    )


def effect_correspondence(ctx: TransitionContext) -> None:
    advance_schedule(ctx.claim, ctx.airline, ctx.now)


def effect_close(ctx: TransitionContext) -> None:
    ctx.claim.next_follow_up = None


def _build_table() -> list[Transition]:
    S = ClaimStatus
    table = [
        Transition(S.SUBMITTED, S.VALIDATED, guard_validated),
        Transition(S.VALIDATED, S.DOCUMENTS_PREPARED, guard_documents_prepared),
        Transition(S.DOCUMENTS_PREPARED, S.READY_TO_FILE, guard_ready_to_file, effect_store_package),
        Transition(S.READY_TO_FILE, S.FILED, guard_filed, effect_filed),
        Transition(S.FILED, S.AIRLINE_ACKNOWLEDGED, effect=effect_correspondence),
        Transition(S.FILED, S.MONITORING, effect=effect_correspondence),
        Transition(S.FILED, S.AIRLINE_RESPONDED, effect=effect_correspondence),
        Transition(S.AIRLINE_ACKNOWLEDGED, S.MONITORING, effect=effect_correspondence),
        Transition(S.AIRLINE_ACKNOWLEDGED, S.AIRLINE_RESPONDED, effect=effect_correspondence),
        Transition(S.MONITORING, S.AIRLINE_RESPONDED, effect=effect_correspondence),
        Transition(S.AIRLINE_RESPONDED, S.APPROVED, effect=effect_close),
        Transition(S.AIRLINE_RESPONDED, S.REJECTED, effect=effect_close),
        Transition(S.APPROVED, S.COMPLETED, effect=effect_close),
        Transition(S.REJECTED, S.COMPLETED, effect=effect_close),
    ]
    # Side path: refund from any status that is not final
    table.extend(
        Transition(status, S.REFUNDED, effect=effect_close)
        for status in S
        if not status.is_final
    )
    return table


TRANSITIONS: tuple[Transition, ...] = tuple(_build_table())


class ClaimLifecycle:
    """
    Applies transitions from the table to claim records.

    ``transition`` mutates the claim in place only when the guard passes;
    persistence, locking and event publishing are the caller's concern.
    """

    def __init__(
        self,
        directory: AirlineDirectory | None = None,
        transitions: tuple[Transition, ...] = TRANSITIONS,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._directory = directory
        self._clock = clock
        self._table: dict[tuple[ClaimStatus, ClaimStatus], Transition] = {
            (t.source, t.target): t for t in transitions
        }

    @property
    def directory(self) -> AirlineDirectory:
        if self._directory is None:
            self._directory = default_directory()
        return self._directory

    @property
    def transitions(self) -> list[Transition]:
        return list(self._table.values())

    def allowed_targets(self, status: ClaimStatus) -> list[ClaimStatus]:
        return [target for (source, target) in self._table if source == status]

    def is_allowed(self, source: ClaimStatus, target: ClaimStatus) -> bool:
        return (source, target) in self._table

    def _context(self, claim: Claim, target: ClaimStatus, actor: str, now: datetime | None, **kwargs) -> TransitionContext:
        return TransitionContext(
            claim=claim,
            target=target,
            now=now or self._clock(),
            actor=actor,
            directory=self.directory,
            **kwargs,
        )

    def _refused(self, claim: Claim, target: ClaimStatus, unmet: list[UnmetCondition]) -> TransitionResult:
        logger.info(
            "Claim %s: %s -> %s refused: %s",
            claim.claim_id, claim.status.value, target.value, "; ".join(u.detail for u in unmet),
        )
        return TransitionResult(
            ok=False,
            claim_id=claim.claim_id,
            from_status=claim.status,
            to_status=target,
            status=claim.status,
            unmet=unmet,
        )

    def check(self, claim: Claim, target: ClaimStatus | str, **context) -> list[UnmetCondition]:
        """Unmet conditions for a transition, without applying it."""
        target = ClaimStatus(target)
        if claim.status == target:
            return []
        if claim.status.is_final:
            return [UnmetCondition(kind=UnmetKind.FINAL_STATUS, detail=f"Claim is {claim.status.value}")]
        edge = self._table.get((claim.status, target))
        if edge is None:
            return [self._invalid(claim.status, target)]
        if edge.guard is None:
            return []
        probe = claim.model_copy(deep=True)
        return edge.guard(self._context(probe, target, context.pop("actor", "system"), context.pop("now", None), **context))

    def _invalid(self, source: ClaimStatus, target: ClaimStatus) -> UnmetCondition:
        allowed = ", ".join(s.value for s in self.allowed_targets(source)) or "none"
        return UnmetCondition(
            kind=UnmetKind.INVALID_TRANSITION,
            detail=f"Cannot move from {source.value} to {target.value} (allowed: {allowed})",
        )

    def transition(
        self,
        claim: Claim,
        target: ClaimStatus | str,
        actor: str = "system",
        note: str | None = None,
        now: datetime | None = None,
        airline_reference: str | None = None,
        filing_method: SubmissionMethod | str | None = None,
    ) -> TransitionResult:
        """
        Attempt to move a claim to ``target``.

        Args:
            claim: Claim to change; only modified on success
            target: Desired status
            actor: Operator or process making the change
            note: Optional note recorded in the status history
            now: Transition time (defaults to the clock)
            airline_reference: Required when filing
            filing_method: Channel used when filing; defaults to the airline's

        Returns:
            TransitionResult; re-applying the current status is an ok no-op
        """
        target = ClaimStatus(target)
        source = claim.status

        if source == target:
            return TransitionResult(
                ok=True,
                claim_id=claim.claim_id,
                from_status=source,
                to_status=target,
                status=source,
                already_applied=True,
            )
        if source.is_final:
            return self._refused(
                claim,
                target,
                [UnmetCondition(kind=UnmetKind.FINAL_STATUS, detail=f"Claim is already {source.value}")],
            )

        edge = self._table.get((source, target))
        if edge is None:
            return self._refused(claim, target, [self._invalid(source, target)])

        ctx = self._context(
            claim,
            target,
            actor,
            now,
            airline_reference=airline_reference,
            filing_method=SubmissionMethod(filing_method) if filing_method else None,
            note=note,
        )
        if edge.guard is not None:
            unmet = edge.guard(ctx)
            if unmet:
                return self._refused(claim, target, unmet)

        if edge.effect is not None:
            edge.effect(ctx)
        claim.status = target
        claim.status_history.append(StatusChange(status=target, at=ctx.now, actor=actor, note=note))

        events: list[ClaimEvent] = [
            ClaimStatusChanged(
                claim_id=claim.claim_id,
                from_status=source,
                to_status=target,
                actor=actor,
                occurred_at=ctx.now,
            )
        ]
        events.extend(ctx.events)
        logger.info("Claim %s: %s -> %s by %s", claim.claim_id, source.value, target.value, actor)
        return TransitionResult(
            ok=True,
            claim_id=claim.claim_id,
            from_status=source,
            to_status=target,
            status=target,
            events=events,
        )

    def validate_for_filing(self, claim: Claim) -> ValidationReport:
        """
        Full ready-to-file check: payment, fields, documents and airline.

        A short delay is reported as a warning, not an error.
        """
        carrier = claim.flight.carrier or claim.flight.flight_number[:2]
        config = self.directory.get(carrier)

        errors: list[str] = []
        warnings: list[str] = []

        errors.extend(u.detail for u in _payment_unmet(claim))

        field_names = list(IDENTITY_FIELDS)
        if config is not None:
            field_names.extend(f for f in config.required_fields if f not in field_names)
        if claim.disruption_type == DisruptionType.DELAY and "delay_duration" not in field_names:
            field_names.append("delay_duration")
        missing_fields = missing_claim_fields(claim, field_names)
        errors.extend(f"{name} is required" for name in missing_fields)

        missing_documents = [u.field for u in _documents_unmet(claim, config)]
        errors.extend(f"{doc} is required" for doc in missing_documents)

        if config is None:
            errors.append(f"Unsupported airline: {carrier!r} has no directory entry")

        if (
            claim.disruption_type == DisruptionType.DELAY
            and claim.flight_record is not None
            and claim.flight_record.delay_minutes < DELAY_WARNING_MINUTES
        ):
            warnings.append("Delay is less than 3 hours - may not be eligible for compensation")

        return ValidationReport(
            claim_id=claim.claim_id,
            is_valid=not errors,
            errors=errors,
            warnings=warnings,
            missing_fields=missing_fields,
            missing_documents=missing_documents,
            airline=config.code if config else None,
        )


def record_override(
    claim: Claim,
    amount: Decimal,
    currency: str,
    actor: str,
    note: str,
    now: datetime | None = None,
) -> CompensationOverride:
    """
    Record an admin compensation figure next to the engine estimate.

    The estimate itself is never replaced.

    Raises:
        ValueError: If no actor or note is given
    """
    if not actor or not actor.strip():
        raise ValueError("An override needs the acting operator")
    if not note or not note.strip():
        raise ValueError("An override needs a justification note")
    override = CompensationOverride(
        amount=amount, currency=currency, actor=actor, note=note, recorded_at=now or utcnow()
    )
    claim.compensation_override = override
    claim.add_note(f"Compensation override {amount} {currency}: {note}", author=actor)
    return override
