"""
Refund Trigger Evaluator.
Decides whether the "pay upfront, guaranteed refund" promise obligates an
automatic refund of the service fee, and under which reason code.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from ..core.errors import DisruptionInputError
from ..core.models import (
    Claim,
    ClaimStatus,
    PaymentInfo,
    PaymentStatus,
    RefundDecision,
    RefundReason,
    utcnow,
)
from ..eligibility import EligibilityEngine
from ..store import ClaimStore

logger = logging.getLogger(__name__)

DEFAULT_FILING_DEADLINE_HOURS = 48
DEFAULT_REQUEST_WINDOW_HOURS = 24

# Rule = (claim, payment, now) -> (reason, message) when the rule fires
Rule = Callable[[Claim, PaymentInfo, datetime], tuple[RefundReason, str] | None]


class RefundTriggerEvaluator:
    """
    Evaluates the refund rules in priority order; the first match wins.

    Evaluation has no side effects, so it is safe to run concurrently for
    the same claim: a refund that was already recorded always yields
    "no action", which makes the caller's write the idempotency backstop.
    """

    def __init__(
        self,
        filing_deadline_hours: int = DEFAULT_FILING_DEADLINE_HOURS,
        request_window_hours: int = DEFAULT_REQUEST_WINDOW_HOURS,
        engine: EligibilityEngine | None = None,
        store: ClaimStore | None = None,
    ) -> None:
        """
        Initialize the evaluator.

        Args:
            filing_deadline_hours: Hours after capture by which a claim must be filed
            request_window_hours: Hours after capture in which a refund request is honoured
            engine: Eligibility engine for post-payment re-evaluation (rule skipped if None)
            store: Claim store used for duplicate detection (rule skipped if None)
        """
        self.filing_deadline = timedelta(hours=filing_deadline_hours)
        self.request_window = timedelta(hours=request_window_hours)
        self.engine = engine
        self.store = store
        self._rules: list[Rule] = [
            self._claim_unsuccessful,
            self._not_filed_in_time,
            self._customer_request_window,
            self._ineligible_after_payment,
            self._duplicate_claim,
        ]

    def evaluate(
        self,
        claim: Claim,
        payment: PaymentInfo | None = None,
        now: datetime | None = None,
    ) -> RefundDecision:
        """
        Decide whether a refund must fire for this claim now.

        Args:
            claim: Claim to check
            payment: Payment to check (defaults to the claim's own)
            now: Evaluation time

        Returns:
            RefundDecision for the full payment amount, or no action
        """
        now = now or utcnow()
        payment = payment or claim.payment

        if (
            claim.status == ClaimStatus.REFUNDED
            or claim.refund is not None
            or (payment is not None and payment.status == PaymentStatus.REFUNDED)
        ):
            return RefundDecision.no_action("Refund already recorded")
        if payment is None or payment.status != PaymentStatus.CAPTURED:
            return RefundDecision.no_action("No captured payment")

        for rule in self._rules:
            matched = rule(claim, payment, now)
            if matched is None:
                continue
            reason, message = matched
            logger.info("Claim %s refund trigger: %s", claim.claim_id, reason.value)
            return RefundDecision(
                should_refund=True,
                reason=reason,
                amount=payment.amount,
                currency=payment.currency,
                message=message,
                evaluated_at=now,
            )
        return RefundDecision.no_action("No refund condition met")

    def _claim_unsuccessful(self, claim: Claim, payment: PaymentInfo, now: datetime):
        if claim.status == ClaimStatus.REJECTED:
            return RefundReason.CLAIM_UNSUCCESSFUL, "Airline rejected the claim"
        return None

    def _not_filed_in_time(self, claim: Claim, payment: PaymentInfo, now: datetime):
        if payment.captured_at is None or claim.status.reached_filing:
            return None
        if now - payment.captured_at > self.filing_deadline:
            hours = int(self.filing_deadline.total_seconds() // 3600)
            return (
                RefundReason.NOT_FILED_IN_TIME,
                f"Claim not filed within {hours} hours of payment",
            )
        return None

    def _customer_request_window(self, claim: Claim, payment: PaymentInfo, now: datetime):
        requested = payment.refund_requested_at
        if requested is None or payment.captured_at is None:
            return None
        if timedelta(0) <= requested - payment.captured_at <= self.request_window:
            return (
                RefundReason.CUSTOMER_REQUEST_WINDOW,
                "Refund requested within the cancellation window",
            )
        return None

    def _ineligible_after_payment(self, claim: Claim, payment: PaymentInfo, now: datetime):
        estimate = claim.quoted_estimate or claim.compensation_estimate
        if self.engine is None or estimate is None or not estimate.eligible:
            return None
        if claim.flight_record is None:
            return None
        try:
            decision = self.engine.evaluate_claim(claim)
        except (DisruptionInputError, ValueError) as exc:
            logger.warning("Claim %s could not be re-evaluated: %s", claim.claim_id, exc)
            return None
        if decision.eligible:
            return None
        return (
            RefundReason.INELIGIBLE_AFTER_PAYMENT,
            f"Re-evaluation found the claim ineligible: {decision.reason}",
        )

    def _duplicate_claim(self, claim: Claim, payment: PaymentInfo, now: datetime):
        if self.store is None:
            return None
        # Only the later of two matching claims is refunded.
        key = (claim.created_at, claim.claim_id)
        earlier = [
            other
            for other in self.store.find_duplicates(claim)
            if (other.created_at, other.claim_id) < key
        ]
        if earlier:
            return (
                RefundReason.DUPLICATE_CLAIM,
                f"Duplicate of claim {earlier[0].claim_id}",
            )
        return None
