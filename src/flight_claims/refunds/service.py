"""
Refund execution and the periodic refund sweep.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime

from ..core.models import (
    ClaimStatus,
    PaymentStatus,
    RefundDecision,
    RefundRecord,
    utcnow,
)
from ..events import Notifier, RefundIssued
from ..lifecycle import ClaimLifecycle, ClaimLocks, retry_on_stale
from ..payments import PaymentGateway
from ..store import ClaimStore
from .evaluator import RefundTriggerEvaluator

logger = logging.getLogger(__name__)

REFUND_ACTOR = "refund-evaluator"


class RefundService:
    """
    Applies refund decisions to stored claims.

    Each claim is processed under its lock and the refund is recorded before
    the gateway is told to pay out, so at most one refund instruction is
    ever emitted per claim.
    """

    def __init__(
        self,
        store: ClaimStore,
        gateway: PaymentGateway,
        notifier: Notifier,
        evaluator: RefundTriggerEvaluator | None = None,
        lifecycle: ClaimLifecycle | None = None,
        locks: ClaimLocks | None = None,
    ) -> None:
        self.store = store
        self.gateway = gateway
        self.notifier = notifier
        self.evaluator = evaluator or RefundTriggerEvaluator(store=store)
        self.lifecycle = lifecycle or ClaimLifecycle()
        self.locks = locks or ClaimLocks()

    def process(self, claim_id: str, now: datetime | None = None) -> RefundDecision:
        """
        Evaluate a claim and execute the refund if one is due.

        Args:
            claim_id: Claim to process
            now: Evaluation time

        Returns:
            The decision that was acted on (``should_refund`` is False when
            nothing happened)

        Raises:
            ClaimNotFound: If the claim does not exist
            StaleClaimError: If the claim kept changing under us
        """
        now = now or utcnow()
        with self.locks.hold(claim_id):
            return retry_on_stale(lambda: self._process_once(claim_id, now))

    def _process_once(self, claim_id: str, now: datetime) -> RefundDecision:
        claim = self.store.get(claim_id)
        decision = self.evaluator.evaluate(claim, now=now)
        if not decision.should_refund:
            return decision

        result = self.lifecycle.transition(
            claim,
            ClaimStatus.REFUNDED,
            actor=REFUND_ACTOR,
            note=decision.message,
            now=now,
        )
        if not result.changed:
            logger.warning(
                "Claim %s refund %s not applied: %s",
                claim_id, decision.reason.value, "; ".join(result.messages),
            )
            return RefundDecision.no_action("; ".join(result.messages))

        payment = claim.payment
        claim.refund = RefundRecord(
            reason=decision.reason,
            amount=decision.amount,
            currency=decision.currency,
            payment_reference=payment.payment_id,
            issued_at=now,
        )
        claim.payment = payment.model_copy(update={"status": PaymentStatus.REFUNDED})
        claim.add_note(f"Automatic refund: {decision.reason.value}", author=REFUND_ACTOR)
        self.store.save(claim)

        self.gateway.issue_refund(
            payment.payment_id, decision.amount, decision.currency, decision.reason
        )
        for event in result.events:
            self.notifier.publish(event)
        self.notifier.publish(
            RefundIssued(
                claim_id=claim_id,
                reason=decision.reason,
                amount=decision.amount,
                currency=decision.currency,
                payment_reference=payment.payment_id,
                occurred_at=now,
            )
        )
        return decision


@dataclass
class SweepResult:
    """Summary of one sweep run."""

    evaluated: int = 0
    refunded: dict[str, RefundDecision] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def refunded_count(self) -> int:
        return len(self.refunded)


class RefundSweep:
    """Periodic job that evaluates every open paid claim in parallel."""

    def __init__(self, service: RefundService, workers: int = 8) -> None:
        self.service = service
        self.workers = workers

    def candidates(self) -> list[str]:
        open_statuses = [s for s in ClaimStatus if not s.is_final]
        return [
            claim.claim_id
            for claim in self.service.store.query(open_statuses)
            if claim.payment is not None and claim.payment.status == PaymentStatus.CAPTURED
        ]

    def run(self, now: datetime | None = None) -> SweepResult:
        now = now or utcnow()
        claim_ids = self.candidates()
        result = SweepResult(evaluated=len(claim_ids))
        if not claim_ids:
            return result

        with ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="refund-sweep") as pool:
            futures = {pool.submit(self.service.process, cid, now): cid for cid in claim_ids}
            for future, claim_id in futures.items():
                exc = future.exception()
                if exc is not None:
                    # One bad record must not stop the sweep
                    logger.error("Refund sweep failed for claim %s: %s", claim_id, exc, exc_info=exc)
                    result.errors[claim_id] = str(exc)
                    continue
                decision = future.result()
                if decision.should_refund:
                    result.refunded[claim_id] = decision

        logger.info(
            "Refund sweep: %d evaluated, %d refunded, %d errors",
            result.evaluated, result.refunded_count, len(result.errors),
        )
        return result
