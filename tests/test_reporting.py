"""
Tests for pipeline reporting.
"""

import json
from datetime import timedelta
from decimal import Decimal

import pytest

from flight_claims.core.models import (
    ClaimStatus,
    CompensationOverride,
    PaymentStatus,
    RefundReason,
    RefundRecord,
)
from flight_claims.eligibility import EligibilityEngine
from flight_claims.reporting import PipelineReportBuilder, PipelineReportFormatter, claims_frame


@pytest.fixture
def claims(make_claim, now):
    """A filed claim, a refunded claim, an overridden claim and an ineligible one."""
    engine = EligibilityEngine()

    filed = make_claim(
        claim_id="FC-FILED",
        status=ClaimStatus.FILED,
        paid_at=now - timedelta(days=21),
        filed_at=now - timedelta(days=20),
        next_follow_up=now - timedelta(days=1),
    )

    paid_at = now - timedelta(days=3)
    refunded = make_claim(claim_id="FC-REFUNDED", status=ClaimStatus.REFUNDED, paid_at=paid_at)
    refunded.payment.status = PaymentStatus.REFUNDED
    refunded.refund = RefundRecord(
        reason=RefundReason.CLAIM_UNSUCCESSFUL,
        amount=Decimal("29.00"),
        currency="EUR",
        payment_reference="pi_FC-REFUNDED",
        issued_at=paid_at + timedelta(hours=12),
    )

    overridden = make_claim(claim_id="FC-OVERRIDE", carrier="LH", flight_number="LH100")
    overridden.compensation_override = CompensationOverride(
        amount=Decimal("300"), currency="EUR", actor="admin", note="goodwill"
    )

    ineligible = make_claim(claim_id="FC-SHORT", delay_minutes=100)

    result = [filed, refunded, overridden, ineligible]
    for claim in result:
        claim.compensation_estimate = engine.evaluate_claim(claim)
    return result


class TestClaimsFrame:
    """Tests for the per-claim frame."""

    def test_rows(self, claims, now) -> None:
        """Test one row per claim with derived columns."""
        df = claims_frame(claims, now).set_index("claim_id")

        assert len(df) == 4
        assert df.loc["FC-OVERRIDE", "compensation"] == 300.0
        assert df.loc["FC-FILED", "compensation"] == 250.0
        assert df.loc["FC-REFUNDED", "hours_to_refund"] == pytest.approx(12.0)
        assert df.loc["FC-FILED", "follow_up_stage"] == "initial"
        assert bool(df.loc["FC-FILED", "follow_up_due"])
        assert not bool(df.loc["FC-SHORT", "eligible"])
        assert df.loc["FC-OVERRIDE", "airline"] == "LH"

    def test_empty(self, now) -> None:
        """Test an empty claim set gives an empty frame with all columns."""
        df = claims_frame([], now)
        assert df.empty
        assert "refund_reason" in df.columns


class TestPipelineReportBuilder:
    """Tests for report aggregation."""

    def test_build(self, claims, now) -> None:
        """Test counts, sums and refund analytics."""
        report = PipelineReportBuilder(claims, now).build()

        assert report.total_claims == 4
        assert report.by_status == {"filed": 1, "refunded": 1, "submitted": 2}
        assert report.by_airline == {"FR": 3, "LH": 1}
        assert report.eligible_claims == 3
        assert report.compensation_by_currency == {"EUR": 800.0}
        assert report.paid_claims == 2
        assert report.refunded_claims == 1
        assert report.refund_rate == 50.0
        assert report.refunds_by_reason == {"claim_unsuccessful": 1}
        assert report.revenue_by_currency == {"EUR": 58.0}
        assert report.refunded_by_currency == {"EUR": 29.0}
        assert report.average_hours_to_refund == 12.0
        assert report.follow_ups_due == 1
        assert report.follow_ups_by_stage == {"initial": 1}

    def test_empty(self, now) -> None:
        """Test an empty pipeline reports zeros."""
        report = PipelineReportBuilder([], now).build()

        assert report.total_claims == 0
        assert report.refund_rate == 0.0
        assert report.average_hours_to_refund is None
        assert report.revenue_by_currency == {}


class TestPipelineReportFormatter:
    """Tests for report formatting."""

    def test_text(self, claims, now) -> None:
        """Test the plain text layout."""
        text = PipelineReportBuilder(claims, now).get_formatter().to_text()

        assert "CLAIMS PIPELINE REPORT" in text
        assert "Total Claims: 4" in text
        assert "Refunded: 1 (50.0%)" in text
        assert "Fees EUR: 58.00 collected, 29.00 refunded, 29.00 net" in text
        assert "Average Time to Refund: 12.0h" in text

    def test_json(self, claims, now) -> None:
        """Test the JSON output parses back."""
        formatter = PipelineReportFormatter(PipelineReportBuilder(claims, now).build())
        data = json.loads(formatter.to_json())

        assert data["total_claims"] == 4
        assert data["by_airline"]["LH"] == 1
