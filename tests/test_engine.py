"""
Tests for the main ClaimEngine.
"""

from datetime import timedelta
from decimal import Decimal

from flight_claims import ClaimEngine, quote
from flight_claims.config import get_settings
from flight_claims.core.models import ClaimStatus, Regulation
from flight_claims.scheduler import build_scheduler
from flight_claims.store import InMemoryClaimStore

from conftest import FLIGHT_DATE


class TestClaimEngine:
    """Tests for ClaimEngine."""

    def test_quote(self, claim_engine: ClaimEngine) -> None:
        """Test a quote from passenger-reported facts."""
        decision = claim_engine.quote("FR1234", FLIGHT_DATE, "DUB", "BCN", "delay", delay_minutes=200)

        assert decision.eligible
        assert decision.regulation == Regulation.EU261
        assert decision.amount == Decimal("250")
        assert not decision.low_confidence

    def test_lookup_without_providers(self, claim_engine: ClaimEngine) -> None:
        """Test a lookup with no providers returns None."""
        assert claim_engine.lookup_flight("FR1234", FLIGHT_DATE) is None

    def test_quote_with_failed_lookup(self, claim_engine: ClaimEngine) -> None:
        """Test a failed lookup falls back to the reported facts."""
        decision = claim_engine.quote(
            "FR1234", FLIGHT_DATE, "DUB", "BCN", "delay", use_lookup=True, delay_minutes=200
        )
        assert decision.eligible

    def test_components_shared(self, claim_engine: ClaimEngine) -> None:
        """Test lazily created components are built once and wired together."""
        assert claim_engine.service is claim_engine.service
        assert claim_engine.service.store is claim_engine.store
        assert claim_engine.refunds.evaluator.filing_deadline == timedelta(hours=48)

    def test_export_claim(self, make_claim, settings) -> None:
        """Test exported claims are redacted unless asked otherwise."""
        engine = ClaimEngine(settings=settings, store=InMemoryClaimStore([make_claim()]), providers=[])

        redacted = engine.export_claim("FC-TEST-001")
        raw = engine.export_claim("FC-TEST-001", redact=False)

        assert redacted["passenger"]["email"] == "[REDACTED]"
        assert raw["passenger"]["email"] == "jane.doe@example.com"

    def test_refund_sweep(self, make_claim, settings, now) -> None:
        """Test the sweep refunds through the engine's gateway and store."""
        store = InMemoryClaimStore([make_claim(status=ClaimStatus.REJECTED, paid_at=now)])
        engine = ClaimEngine(settings=settings, store=store, providers=[])

        result = engine.run_refund_sweep(now)

        assert result.refunded_count == 1
        assert store.get("FC-TEST-001").status == ClaimStatus.REFUNDED
        assert len(engine.gateway.instructions) == 1
        assert engine.notifier.named("refund_issued")

    def test_pipeline_report(self, make_claim, settings, now) -> None:
        """Test the report covers the engine's store."""
        store = InMemoryClaimStore([make_claim(), make_claim(claim_id="FC-2", email="x@example.com")])
        engine = ClaimEngine(settings=settings, store=store, providers=[])

        formatter = engine.pipeline_report(now)

        assert formatter.report.total_claims == 2
        assert "Total Claims: 2" in formatter.to_text()

    def test_follow_up_sweep(self, make_claim, settings, now) -> None:
        """Test due follow-ups are recorded through the engine."""
        claim = make_claim(
            status=ClaimStatus.FILED,
            paid_at=now - timedelta(days=16),
            filed_at=now - timedelta(days=15),
            next_follow_up=now - timedelta(hours=1),
        )
        engine = ClaimEngine(settings=settings, store=InMemoryClaimStore([claim]), providers=[])

        recorded = engine.run_follow_up_sweep(now)

        assert list(recorded) == ["FC-TEST-001"]
        assert engine.store.get("FC-TEST-001").follow_ups_sent == 1


class TestScheduler:
    """Tests for the background sweep scheduler."""

    def test_jobs(self, claim_engine: ClaimEngine) -> None:
        """Test both sweeps are registered on their intervals."""
        scheduler = build_scheduler(claim_engine)
        jobs = {job.id: job for job in scheduler.get_jobs()}

        assert set(jobs) == {"refund_sweep", "follow_up_sweep"}
        assert jobs["refund_sweep"].trigger.interval == timedelta(minutes=15)
        assert jobs["follow_up_sweep"].trigger.interval == timedelta(minutes=60)
        assert jobs["refund_sweep"].max_instances == 1


class TestQuoteFunction:
    """Tests for the quote convenience function."""

    def test_quote(self, monkeypatch) -> None:
        """Test a one-off quote with settings from the environment."""
        monkeypatch.setenv("FLIGHT_CLAIMS_AVIATIONSTACK_API_KEY", "")
        monkeypatch.setenv("FLIGHT_CLAIMS_FLIGHTLABS_API_KEY", "")
        get_settings.cache_clear()
        try:
            decision = quote("FR1234", FLIGHT_DATE, "DUB", "BCN", "delay", delay_minutes=200)
        finally:
            get_settings.cache_clear()

        assert decision.eligible
        assert decision.amount == Decimal("250")
