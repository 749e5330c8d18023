"""
Claim Service.
Entry points for the payment signals, operator actions and follow-up sweep.
Every change to a stored claim goes through the per-claim lock and the
store's version check; the refund check runs after each change.
"""

import logging
import uuid
from collections.abc import Callable, Iterable
from datetime import datetime
from decimal import Decimal
from typing import Any, TypeVar

from .core.models import (
    Claim,
    ClaimDocument,
    ClaimStatus,
    DisruptionType,
    EligibilityDecision,
    FlightLeg,
    Passenger,
    PaymentInfo,
    PaymentStatus,
    RefundDecision,
    ReconciledFlightRecord,
    SubmissionMethod,
    parse_disruption_input,
    utcnow,
)
from .eligibility import EligibilityEngine
from .events import ClaimEvent, Notifier
from .lifecycle import (
    ClaimLifecycle,
    ClaimLocks,
    FollowUpStage,
    TransitionResult,
    ValidationReport,
    record_follow_up,
    record_override,
    retry_on_stale,
)
from .refunds import RefundService
from .store import ClaimStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Statuses the service walks through on its own after payment capture
AUTO_ADVANCE = (
    ClaimStatus.VALIDATED,
    ClaimStatus.DOCUMENTS_PREPARED,
    ClaimStatus.READY_TO_FILE,
)


def new_claim_id() -> str:
    return f"FC-{uuid.uuid4().hex[:12].upper()}"


class ClaimService:
    """
    Coordinates the lifecycle, eligibility and refund components over a store.

    Events are published only after the change they describe was saved.
    """

    def __init__(
        self,
        store: ClaimStore,
        lifecycle: ClaimLifecycle,
        engine: EligibilityEngine,
        refunds: RefundService,
        notifier: Notifier,
        locks: ClaimLocks | None = None,
    ) -> None:
        self.store = store
        self.lifecycle = lifecycle
        self.engine = engine
        self.refunds = refunds
        self.notifier = notifier
        # Shared with the refund service so both serialize on the same claim
        self.locks = locks or refunds.locks

    def _locked(self, claim_id: str, operation: Callable[[], T]) -> T:
        with self.locks.hold(claim_id):
            return retry_on_stale(operation)

    def _publish(self, events: Iterable[ClaimEvent]) -> None:
        for event in events:
            self.notifier.publish(event)

    def check_refund(self, claim_id: str, now: datetime | None = None) -> RefundDecision:
        """Run the refund trigger evaluation for one claim."""
        return self.refunds.process(claim_id, now=now)

    # ------------------------------------------------------------------
    # Claim creation and payment signals
    # ------------------------------------------------------------------

    def create_claim(
        self,
        passenger: Passenger | dict[str, Any],
        flight: FlightLeg | dict[str, Any],
        disruption_type: DisruptionType | str,
        disruption: dict[str, Any] | None = None,
        booking_reference: str | None = None,
        flight_record: ReconciledFlightRecord | None = None,
        documents: Iterable[ClaimDocument | dict[str, Any]] = (),
        claim_id: str | None = None,
        now: datetime | None = None,
    ) -> Claim:
        """
        Create a claim and store its pre-payment compensation estimate.

        Args:
            passenger: Passenger identity
            flight: Flight leg being claimed for
            disruption_type: Kind of disruption
            disruption: Disruption facts for the type
            booking_reference: Airline booking code
            flight_record: Reconciled flight facts, if a lookup was done
            documents: Supporting documents already uploaded
            claim_id: Identifier to use instead of a generated one
            now: Creation time

        Returns:
            The stored claim

        Raises:
            DisruptionInputError: With the missing disruption fields
            ValueError: If a flight record is given but the route distance is unknown
        """
        now = now or utcnow()
        disruption_type = DisruptionType(disruption_type)
        facts = parse_disruption_input(disruption or {}, disruption_type)

        claim = Claim(
            claim_id=claim_id or new_claim_id(),
            passenger=passenger,
            flight=flight,
            booking_reference=booking_reference,
            disruption_type=disruption_type,
            disruption=facts,
            flight_record=flight_record,
            documents=[
                d if isinstance(d, ClaimDocument) else ClaimDocument.model_validate(d)
                for d in documents
            ],
            created_at=now,
        )
        if flight_record is not None:
            claim.compensation_estimate = self.engine.evaluate_claim(claim)
            claim.quoted_estimate = claim.compensation_estimate

        stored = self.store.add(claim)
        logger.info(
            "Claim %s created for %s %s (%s)",
            stored.claim_id,
            stored.flight.flight_number,
            stored.flight.flight_date,
            disruption_type.value,
        )
        return stored

    def add_document(self, claim_id: str, kind: str, reference: str) -> Claim:
        def operation() -> Claim:
            claim = self.store.get(claim_id)
            claim.documents.append(ClaimDocument(kind=kind, reference=reference))
            return self.store.save(claim)

        return self._locked(claim_id, operation)

    def payment_captured(
        self,
        claim_id: str,
        amount: Decimal,
        currency: str,
        payment_reference: str,
        captured_at: datetime | None = None,
    ) -> Claim:
        """
        Record the service-fee capture and advance the claim toward filing.

        A repeated signal for the same payment reference is ignored.
        """
        captured_at = captured_at or utcnow()

        def operation() -> Claim:
            claim = self.store.get(claim_id)
            if (
                claim.payment is not None
                and claim.payment.payment_id == payment_reference
                and claim.payment.status != PaymentStatus.PENDING
            ):
                logger.info("Claim %s payment %s already recorded", claim_id, payment_reference)
                return claim
            claim.payment = PaymentInfo(
                payment_id=payment_reference,
                amount=amount,
                currency=currency,
                status=PaymentStatus.CAPTURED,
                captured_at=captured_at,
            )
            return self.store.save(claim)

        self._locked(claim_id, operation)
        self.advance_toward_filing(claim_id, now=captured_at)
        self.check_refund(claim_id, now=captured_at)
        return self.store.get(claim_id)

    def refund_requested(
        self, claim_id: str, requested_at: datetime | None = None
    ) -> RefundDecision:
        """Record a customer's refund request and evaluate it."""
        requested_at = requested_at or utcnow()

        def operation() -> None:
            claim = self.store.get(claim_id)
            if claim.payment is None:
                logger.warning("Refund requested for unpaid claim %s", claim_id)
                return
            if claim.payment.refund_requested_at is None:
                claim.payment = claim.payment.model_copy(
                    update={"refund_requested_at": requested_at}
                )
                self.store.save(claim)

        self._locked(claim_id, operation)
        return self.check_refund(claim_id, now=requested_at)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def advance(
        self,
        claim_id: str,
        to: ClaimStatus | str,
        actor: str = "system",
        note: str | None = None,
        airline_reference: str | None = None,
        filing_method: SubmissionMethod | str | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        """
        Move a stored claim to a new status.

        Args:
            claim_id: Claim to move
            to: Target status
            actor: Operator or process making the change
            note: Recorded in the status history
            airline_reference: Required when filing
            filing_method: Channel used when filing
            now: Transition time

        Returns:
            TransitionResult with unmet conditions on refusal

        Raises:
            ClaimNotFound: If the claim does not exist
        """
        now = now or utcnow()

        def operation() -> TransitionResult:
            claim = self.store.get(claim_id)
            result = self.lifecycle.transition(
                claim,
                to,
                actor=actor,
                note=note,
                now=now,
                airline_reference=airline_reference,
                filing_method=filing_method,
            )
            if result.changed:
                self.store.save(claim)
            return result

        result = self._locked(claim_id, operation)
        self._publish(result.events)
        if result.changed:
            self.check_refund(claim_id, now=now)
        return result

    def advance_toward_filing(
        self, claim_id: str, now: datetime | None = None
    ) -> list[TransitionResult]:
        """Walk a paid claim forward until it is ready to file or a guard refuses."""
        results: list[TransitionResult] = []
        claim = self.store.get(claim_id)
        for target in AUTO_ADVANCE:
            if not self.lifecycle.is_allowed(claim.status, target):
                continue
            result = self.advance(claim_id, target, now=now)
            results.append(result)
            if not result.ok:
                break
            claim = self.store.get(claim_id)
        return results

    def validate(self, claim_id: str) -> ValidationReport:
        return self.lifecycle.validate_for_filing(self.store.get(claim_id))

    # ------------------------------------------------------------------
    # Operator actions
    # ------------------------------------------------------------------

    def record_follow_up(
        self, claim_id: str, actor: str = "system", now: datetime | None = None
    ) -> FollowUpStage:
        """Record that the airline was chased; schedules the next follow-up."""
        now = now or utcnow()

        def operation() -> FollowUpStage:
            claim = self.store.get(claim_id)
            config = self.lifecycle.directory.get(claim.flight.carrier or claim.flight.flight_number[:2])
            stage = record_follow_up(claim, config, now, actor=actor)
            self.store.save(claim)
            return stage

        return self._locked(claim_id, operation)

    def override_compensation(
        self, claim_id: str, amount: Decimal, currency: str, actor: str, note: str
    ) -> Claim:
        """Record an admin compensation figure; the engine estimate is kept."""

        def operation() -> Claim:
            claim = self.store.get(claim_id)
            record_override(claim, amount, currency, actor, note)
            return self.store.save(claim)

        return self._locked(claim_id, operation)

    def re_evaluate(
        self,
        claim_id: str,
        flight_record: ReconciledFlightRecord | None = None,
        now: datetime | None = None,
    ) -> EligibilityDecision:
        """
        Re-run eligibility after payment, optionally with fresher flight data.

        The stored estimate always follows the latest decision. The quote the
        passenger paid against stays in ``quoted_estimate`` for the refund
        evaluator to compare with.
        """

        def operation() -> EligibilityDecision:
            claim = self.store.get(claim_id)
            if flight_record is not None:
                claim.flight_record = flight_record
            decision = self.engine.evaluate_claim(claim)
            claim.compensation_estimate = decision
            if claim.quoted_estimate is None and claim.payment is None:
                claim.quoted_estimate = decision
            claim.add_note(
                f"Re-evaluated: eligible={decision.eligible} "
                f"{decision.amount} {decision.currency} ({decision.reason})"
            )
            self.store.save(claim)
            return decision

        decision = self._locked(claim_id, operation)
        self.check_refund(claim_id, now=now)
        return decision

    def follow_up_sweep(self, now: datetime | None = None) -> dict[str, FollowUpStage]:
        """Record due follow-ups for every open filed claim."""
        now = now or utcnow()
        recorded: dict[str, FollowUpStage] = {}
        for claim in self.store.needing_follow_up(now):
            try:
                recorded[claim.claim_id] = self.record_follow_up(claim.claim_id, now=now)
            except ValueError as exc:
                logger.warning("Follow-up skipped for %s: %s", claim.claim_id, exc)
        logger.info("Follow-up sweep recorded %d follow-ups", len(recorded))
        return recorded
