"""
Tests for the flight record reconciler.
"""

import pytest

from flight_claims.core.errors import NoFlightData
from flight_claims.flight_data.reconciler import Reconciler, reconcile


class TestReconciler:
    """Tests for Reconciler."""

    def test_no_observations(self) -> None:
        """Test that an empty input raises NoFlightData."""
        with pytest.raises(NoFlightData):
            reconcile([])

    def test_single_source(self, observation) -> None:
        """Test a lone observation keeps its confidence and is flagged single-source."""
        record = reconcile([observation(confidence=0.8, delay_minutes=190)])

        assert record.single_source
        assert not record.corroborated
        assert record.confidence == 0.8
        assert record.delay_minutes == 190
        assert record.sources == ["aviationstack"]

    def test_agreement_raises_confidence(self, observation) -> None:
        """Test agreeing sources within tolerance yield higher confidence than either."""
        a = observation(source="aviationstack", confidence=0.8, delay_minutes=200)
        b = observation(source="flightlabs", confidence=0.7, delay_minutes=210)

        record = reconcile([a, b])

        assert record.corroborated
        assert not record.has_conflicts
        assert record.confidence > 0.8
        assert record.confidence <= 1.0
        assert record.delay_minutes == 200

    def test_agreement_capped_at_one(self, observation) -> None:
        """Test the agreement bonus never pushes confidence above 1.0."""
        a = observation(source="aviationstack", confidence=0.95)
        b = observation(source="flightlabs", confidence=0.95)

        assert reconcile([a, b]).confidence == 1.0

    def test_delay_disagreement(self, observation) -> None:
        """Test a delay gap beyond tolerance keeps the preferred value and lowers confidence."""
        a = observation(source="aviationstack", confidence=0.8, delay_minutes=200)
        b = observation(source="flightlabs", confidence=0.7, delay_minutes=120)

        record = reconcile([b, a])

        assert record.delay_minutes == 200
        assert record.confidence < 0.8
        assert not record.corroborated
        conflict = record.conflicts[0]
        assert conflict.field == "delay_minutes"
        assert conflict.preferred_source == "aviationstack"
        assert conflict.other_value == 120

    def test_cancellation_disagreement(self, observation) -> None:
        """Test disagreeing cancellation flags are recorded as a conflict."""
        a = observation(source="aviationstack", confidence=0.8, cancelled=True, delay_minutes=0)
        b = observation(source="flightlabs", confidence=0.7, cancelled=False, delay_minutes=0)

        record = reconcile([a, b])

        assert record.cancelled is True
        assert [c.field for c in record.conflicts] == ["cancelled"]

    def test_reason_taken_from_other_source(self, observation) -> None:
        """Test a cancellation reason is filled in from a lower-ranked source."""
        a = observation(source="aviationstack", confidence=0.8)
        b = observation(source="flightlabs", confidence=0.7, reason="weather")

        assert reconcile([a, b]).disruption_reason == "weather"

    def test_custom_tolerance(self, observation) -> None:
        """Test a wider tolerance treats the same gap as agreement."""
        a = observation(source="aviationstack", confidence=0.8, delay_minutes=200)
        b = observation(source="flightlabs", confidence=0.7, delay_minutes=170)

        assert reconcile([a, b]).has_conflicts
        assert Reconciler(tolerance_minutes=30).reconcile([a, b]).corroborated

    def test_mismatched_flights(self, observation) -> None:
        """Test observations of different flights cannot be reconciled."""
        a = observation(flight_number="FR1234")
        b = observation(flight_number="FR9999", source="flightlabs")

        with pytest.raises(ValueError):
            reconcile([a, b])

    def test_negative_tolerance_rejected(self) -> None:
        """Test construction rejects a negative tolerance."""
        with pytest.raises(ValueError):
            Reconciler(tolerance_minutes=-1)
