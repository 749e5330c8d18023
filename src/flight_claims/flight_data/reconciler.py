"""
Flight Record Reconciler.
Merges independently sourced flight observations into a single
confidence-scored record with field-level conflict annotations.
"""

import logging
from collections.abc import Sequence

from ..core.errors import NoFlightData
from ..core.models import FieldConflict, FlightObservation, ReconciledFlightRecord

logger = logging.getLogger(__name__)

DEFAULT_DELAY_TOLERANCE_MINUTES = 15
DEFAULT_AGREEMENT_BONUS = 0.1
DEFAULT_DISAGREEMENT_PENALTY = 0.1


class Reconciler:
    """
    Pure reconciliation of one or more observations of the same flight.

    Agreement (delay within tolerance, same cancellation flag) raises the
    best source confidence by a bonus, capped at 1.0. Any disagreement keeps
    the higher-confidence source's values, records the conflict and lowers
    confidence below the best single source.
    """

    def __init__(
        self,
        tolerance_minutes: int = DEFAULT_DELAY_TOLERANCE_MINUTES,
        agreement_bonus: float = DEFAULT_AGREEMENT_BONUS,
        disagreement_penalty: float = DEFAULT_DISAGREEMENT_PENALTY,
    ) -> None:
        if tolerance_minutes < 0:
            raise ValueError("tolerance_minutes must be non-negative")
        self.tolerance_minutes = tolerance_minutes
        self.agreement_bonus = agreement_bonus
        self.disagreement_penalty = disagreement_penalty

    def reconcile(self, observations: Sequence[FlightObservation]) -> ReconciledFlightRecord:
        """
        Reconcile observations into one record.

        Args:
            observations: Provider observations for one flight and date

        Returns:
            The reconciled record

        Raises:
            NoFlightData: If there are no observations
            ValueError: If the observations describe different flights
        """
        if not observations:
            raise NoFlightData()

        first = observations[0]
        for obs in observations[1:]:
            if obs.flight_number != first.flight_number or obs.flight_date != first.flight_date:
                raise ValueError(
                    f"Cannot reconcile {first.flight_number}/{first.flight_date} "
                    f"with {obs.flight_number}/{obs.flight_date}"
                )

        # Highest confidence first; ties keep input order
        ranked = sorted(observations, key=lambda o: -o.confidence)
        preferred = ranked[0]

        if len(ranked) == 1:
            return self._record(preferred, [preferred.source], preferred.confidence, single_source=True)

        conflicts: list[FieldConflict] = []
        for other in ranked[1:]:
            conflicts.extend(self._compare(preferred, other))

        sources = [obs.source for obs in ranked]
        if conflicts:
            confidence = max(0.0, preferred.confidence - self.disagreement_penalty)
            logger.info(
                "Sources disagree on %s %s: %s",
                preferred.flight_number,
                preferred.flight_date,
                ", ".join(c.field for c in conflicts),
            )
            return self._record(
                preferred, sources, confidence, others=ranked[1:], conflicts=conflicts
            )

        confidence = min(1.0, preferred.confidence + self.agreement_bonus)
        return self._record(preferred, sources, confidence, others=ranked[1:], corroborated=True)

    def _compare(self, preferred: FlightObservation, other: FlightObservation) -> list[FieldConflict]:
        conflicts = []
        if abs(preferred.delay_minutes - other.delay_minutes) > self.tolerance_minutes:
            conflicts.append(
                FieldConflict(
                    field="delay_minutes",
                    preferred_source=preferred.source,
                    preferred_value=preferred.delay_minutes,
                    other_source=other.source,
                    other_value=other.delay_minutes,
                )
            )
        if preferred.cancelled != other.cancelled:
            conflicts.append(
                FieldConflict(
                    field="cancelled",
                    preferred_source=preferred.source,
                    preferred_value=preferred.cancelled,
                    other_source=other.source,
                    other_value=other.cancelled,
                )
            )
        return conflicts

    @staticmethod
    def _record(
        preferred: FlightObservation,
        sources: list[str],
        confidence: float,
        others: Sequence[FlightObservation] = (),
        single_source: bool = False,
        corroborated: bool = False,
        conflicts: list[FieldConflict] | None = None,
    ) -> ReconciledFlightRecord:
        reason = preferred.cancellation_reason
        if reason is None:
            reason = next((o.cancellation_reason for o in others if o.cancellation_reason), None)
        return ReconciledFlightRecord(
            flight_number=preferred.flight_number,
            flight_date=preferred.flight_date,
            carrier=preferred.carrier,
            delay_minutes=preferred.delay_minutes,
            cancelled=preferred.cancelled,
            disruption_reason=reason,
            confidence=round(confidence, 4),
            sources=sources,
            corroborated=corroborated,
            single_source=single_source,
            conflicts=conflicts or [],
        )


_default_reconciler = Reconciler()


def reconcile(observations: Sequence[FlightObservation]) -> ReconciledFlightRecord:
    """Reconcile with the default tolerance, bonus and penalty."""
    return _default_reconciler.reconcile(observations)
