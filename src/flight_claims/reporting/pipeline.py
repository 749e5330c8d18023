"""
Claims Pipeline Reporting Module.
Summarizes a set of claims for operators: volume by status and airline,
refund analytics and the follow-up backlog.
"""

import json
from collections.abc import Iterable
from datetime import datetime
from typing import Any

import pandas as pd
from pydantic import BaseModel, Field

from ..core.models import Claim, ClaimStatus, PaymentStatus, utcnow
from ..lifecycle.follow_up import follow_up_stage

FRAME_COLUMNS = [
    "claim_id",
    "status",
    "airline",
    "disruption_type",
    "regulation",
    "eligible",
    "compensation",
    "compensation_currency",
    "paid",
    "fee",
    "fee_currency",
    "refunded",
    "refund_reason",
    "hours_to_refund",
    "follow_up_stage",
    "follow_up_due",
]


def claims_frame(claims: Iterable[Claim], now: datetime | None = None) -> pd.DataFrame:
    """
    One row per claim with the fields the pipeline report aggregates.

    Compensation uses the admin override when one was recorded.
    """
    now = now or utcnow()
    rows: list[dict[str, Any]] = []
    for claim in claims:
        estimate = claim.compensation_estimate
        override = claim.compensation_override
        payment = claim.payment
        refund = claim.refund
        stage = None if claim.status.is_closed else follow_up_stage(claim, now)
        rows.append(
            {
                "claim_id": claim.claim_id,
                "status": claim.status.value,
                "airline": claim.flight.carrier or claim.flight.flight_number[:2],
                "disruption_type": claim.disruption_type.value,
                "regulation": estimate.regulation.value if estimate and estimate.regulation else None,
                "eligible": bool(estimate and estimate.eligible),
                "compensation": float(
                    override.amount if override else (estimate.amount if estimate else 0)
                ),
                "compensation_currency": (
                    override.currency if override else (estimate.currency if estimate else None)
                ),
                "paid": payment is not None and payment.status != PaymentStatus.PENDING,
                "fee": float(payment.amount) if payment else 0.0,
                "fee_currency": payment.currency if payment else None,
                "refunded": refund is not None,
                "refund_reason": refund.reason.value if refund else None,
                "hours_to_refund": (
                    (refund.issued_at - payment.captured_at).total_seconds() / 3600
                    if refund and payment and payment.captured_at
                    else None
                ),
                "follow_up_stage": stage.value if stage else None,
                "follow_up_due": (
                    claim.next_follow_up is not None
                    and claim.next_follow_up <= now
                    and not claim.status.is_closed
                ),
            }
        )
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    return frame.astype({"eligible": bool, "paid": bool, "refunded": bool, "follow_up_due": bool})


class PipelineReport(BaseModel):
    """Aggregated pipeline statistics."""

    generated_at: datetime = Field(default_factory=utcnow)
    total_claims: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_airline: dict[str, int] = Field(default_factory=dict)
    eligible_claims: int = 0
    compensation_by_currency: dict[str, float] = Field(default_factory=dict)
    paid_claims: int = 0
    refunded_claims: int = 0
    refund_rate: float = 0.0  # percent of paid claims
    refunds_by_reason: dict[str, int] = Field(default_factory=dict)
    revenue_by_currency: dict[str, float] = Field(default_factory=dict)
    refunded_by_currency: dict[str, float] = Field(default_factory=dict)
    average_hours_to_refund: float | None = None
    follow_ups_due: int = 0
    follow_ups_by_stage: dict[str, int] = Field(default_factory=dict)


def _counts(series: pd.Series) -> dict[str, int]:
    return {str(k): int(v) for k, v in series.dropna().value_counts().sort_index().items()}


def _sums(df: pd.DataFrame, value: str, key: str) -> dict[str, float]:
    if df.empty:
        return {}
    grouped = df.groupby(key)[value].sum()
    return {str(k): round(float(v), 2) for k, v in grouped.items()}


class PipelineReportBuilder:
    """Builder for pipeline reports."""

    def __init__(self, claims: Iterable[Claim], now: datetime | None = None) -> None:
        self.now = now or utcnow()
        self.frame = claims_frame(claims, self.now)

    def build(self) -> PipelineReport:
        df = self.frame
        paid = df[df["paid"]]
        refunded = df[df["refunded"]]
        eligible = df[df["eligible"]]

        refund_times = refunded["hours_to_refund"].dropna()
        return PipelineReport(
            generated_at=self.now,
            total_claims=len(df),
            by_status=_counts(df["status"]),
            by_airline=_counts(df["airline"]),
            eligible_claims=len(eligible),
            compensation_by_currency=_sums(eligible, "compensation", "compensation_currency"),
            paid_claims=len(paid),
            refunded_claims=len(refunded),
            refund_rate=round(100 * len(refunded) / len(paid), 1) if len(paid) else 0.0,
            refunds_by_reason=_counts(refunded["refund_reason"]),
            revenue_by_currency=_sums(paid, "fee", "fee_currency"),
            refunded_by_currency=_sums(refunded, "fee", "fee_currency"),
            average_hours_to_refund=(
                round(float(refund_times.mean()), 1) if not refund_times.empty else None
            ),
            follow_ups_due=int(df["follow_up_due"].sum()),
            follow_ups_by_stage=_counts(df["follow_up_stage"]),
        )

    def get_formatter(self) -> "PipelineReportFormatter":
        return PipelineReportFormatter(self.build())


class PipelineReportFormatter:
    """
    Formats pipeline reports for terminal or JSON output.
    """

    STATUS_ORDER = [status.value for status in ClaimStatus]

    def __init__(self, report: PipelineReport) -> None:
        self.report = report

    def to_text(self) -> str:
        """
        Format the report as plain text.

        Returns:
            Formatted text report
        """
        r = self.report
        lines: list[str] = []

        lines.append("=" * 60)
        lines.append("CLAIMS PIPELINE REPORT")
        lines.append("=" * 60)
        lines.append(f"Generated: {r.generated_at.strftime('%Y-%m-%d %H:%M:%S UTC')}")
        lines.append(f"Total Claims: {r.total_claims}")
        lines.append("")

        lines.append("-" * 60)
        lines.append("BY STATUS")
        lines.append("-" * 60)
        for status in self.STATUS_ORDER:
            if status in r.by_status:
                lines.append(f"  {status:<22} {r.by_status[status]:>6}")
        lines.append("")

        if r.by_airline:
            lines.append("-" * 60)
            lines.append("BY AIRLINE")
            lines.append("-" * 60)
            for airline, count in sorted(r.by_airline.items(), key=lambda kv: -kv[1]):
                lines.append(f"  {airline:<22} {count:>6}")
            lines.append("")

        lines.append("-" * 60)
        lines.append("COMPENSATION")
        lines.append("-" * 60)
        lines.append(f"Eligible Claims: {r.eligible_claims}")
        for currency, amount in r.compensation_by_currency.items():
            lines.append(f"  {currency} {amount:,.2f}")
        lines.append("")

        lines.append("-" * 60)
        lines.append("REFUNDS")
        lines.append("-" * 60)
        lines.append(f"Paid Claims: {r.paid_claims}")
        lines.append(f"Refunded: {r.refunded_claims} ({r.refund_rate:.1f}%)")
        for reason, count in r.refunds_by_reason.items():
            lines.append(f"  - {reason}: {count}")
        for currency, amount in r.revenue_by_currency.items():
            refunded = r.refunded_by_currency.get(currency, 0.0)
            lines.append(
                f"Fees {currency}: {amount:,.2f} collected, {refunded:,.2f} refunded, "
                f"{amount - refunded:,.2f} net"
            )
        if r.average_hours_to_refund is not None:
            lines.append(f"Average Time to Refund: {r.average_hours_to_refund:.1f}h")
        lines.append("")

        lines.append("-" * 60)
        lines.append("FOLLOW-UPS")
        lines.append("-" * 60)
        lines.append(f"Due Now: {r.follow_ups_due}")
        for stage, count in r.follow_ups_by_stage.items():
            lines.append(f"  - {stage}: {count}")
        lines.append("=" * 60)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return self.report.model_dump(mode="json")

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)
