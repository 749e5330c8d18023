"""
Eligibility Engine.
Pure computation of (flight record, disruption facts, route) into an
EligibilityDecision, delegating the jurisdiction rules to the regulation
policy registry.
"""

import logging
from datetime import date
from typing import Any

from .core.circumstances import ExtraordinaryCircumstancesClassifier
from .core.geo import distance_between, get_airport
from .core.models import (
    CancellationInput,
    Claim,
    DelayInput,
    DeniedBoardingInput,
    DisruptionType,
    DowngradeInput,
    EligibilityDecision,
    ReconciledFlightRecord,
    Regulation,
    RouteContext,
    parse_disruption_input,
)
from .directory.airlines import AirlineDirectory, default_directory
from .regulations import EvaluationContext, RegulationRegistry, get_default_registry

logger = logging.getLogger(__name__)

DEFAULT_LOW_CONFIDENCE_THRESHOLD = 0.5

DisruptionFacts = DelayInput | CancellationInput | DeniedBoardingInput | DowngradeInput


def build_route(
    origin: str,
    destination: str,
    carrier: str = "",
    directory: AirlineDirectory | None = None,
    distance_km: float | None = None,
    departure_country: str | None = None,
    arrival_country: str | None = None,
) -> RouteContext:
    """
    Build route jurisdiction facts from the airport table and airline directory.

    Args:
        origin: Departure airport IATA code
        destination: Final destination IATA code
        carrier: Operating carrier code or name
        directory: Airline directory used for carrier nationality and size
        distance_km: Overrides the computed great-circle distance
        departure_country: Overrides the origin airport's country
        arrival_country: Overrides the destination airport's country

    Raises:
        ValueError: If the distance cannot be determined
    """
    directory = directory or default_directory()
    start = get_airport(origin)
    end = get_airport(destination)

    if distance_km is None:
        distance_km = distance_between(origin, destination)
    if distance_km is None:
        raise ValueError(
            f"Distance unknown for {origin}-{destination}; supply distance_km explicitly"
        )

    if departure_country:
        departure_country = departure_country.strip().upper()
    if arrival_country:
        arrival_country = arrival_country.strip().upper()

    config = directory.get(carrier) if carrier else None
    return RouteContext(
        origin=origin.strip().upper(),
        destination=destination.strip().upper(),
        carrier=config.code if config else carrier.strip().upper(),
        departure_country=departure_country or (start.country if start else None),
        arrival_country=arrival_country or (end.country if end else None),
        carrier_country=config.country if config else None,
        distance_km=distance_km,
        large_carrier=config.large_carrier if config else True,
    )


class EligibilityEngine:
    """
    Decides eligibility and compensation for one disruption.

    Regulation selection, extraordinary-circumstances classification and the
    low-confidence threshold are all injectable; evaluation itself has no
    side effects.
    """

    def __init__(
        self,
        registry: RegulationRegistry | None = None,
        classifier: ExtraordinaryCircumstancesClassifier | None = None,
        directory: AirlineDirectory | None = None,
        low_confidence_threshold: float = DEFAULT_LOW_CONFIDENCE_THRESHOLD,
    ) -> None:
        self.registry = registry or get_default_registry()
        self.classifier = classifier or ExtraordinaryCircumstancesClassifier()
        self._directory = directory
        self.low_confidence_threshold = low_confidence_threshold

    @property
    def directory(self) -> AirlineDirectory:
        """Get the airline directory, defaulting to the bundled table."""
        if self._directory is None:
            self._directory = default_directory()
        return self._directory

    def evaluate(
        self,
        flight: ReconciledFlightRecord,
        disruption: DisruptionFacts | dict[str, Any] | None,
        disruption_type: DisruptionType | str,
        route: RouteContext,
        regulation: Regulation | str | None = None,
    ) -> EligibilityDecision:
        """
        Evaluate a disruption under the applicable regulation.

        Args:
            flight: Reconciled (or manual) flight record
            disruption: Disruption facts for the type, as a model or a mapping
            disruption_type: The kind of disruption being claimed
            route: Jurisdiction facts used to select the regulation
            regulation: Force a regulation instead of selecting one by route

        Returns:
            A new EligibilityDecision

        Raises:
            DisruptionInputError: If required disruption facts are missing
            ValueError: If a forced regulation has no registered policy
        """
        disruption_type = DisruptionType(disruption_type)
        facts = parse_disruption_input(disruption, disruption_type)

        reason = getattr(facts, "reason", None) or flight.disruption_reason
        circumstances = self.classifier.classify(reason)

        if regulation is not None:
            policy = self.registry.get(regulation)
            if policy is None:
                raise ValueError(f"No policy registered for regulation {regulation}")
        else:
            policy = self.registry.select(route)

        if policy is None:
            logger.info("No regulation covers route %s-%s", route.origin, route.destination)
            return EligibilityDecision(
                eligible=False,
                regulation=None,
                reason=(
                    f"Route {route.origin}-{route.destination} is not covered by "
                    f"any supported passenger-rights regulation."
                ),
                confidence=flight.confidence,
                low_confidence=flight.confidence < self.low_confidence_threshold,
                disruption_type=disruption_type,
                distance_km=route.distance_km,
                distance_band=route.distance_band,
            )

        ctx = EvaluationContext(
            flight=flight,
            disruption=facts,
            disruption_type=disruption_type,
            route=route,
            circumstances=circumstances,
            low_confidence_threshold=self.low_confidence_threshold,
        )
        decision = policy.evaluate(ctx)
        logger.debug(
            "%s %s under %s: eligible=%s amount=%s %s",
            flight.flight_number,
            disruption_type.value,
            policy.regulation.value,
            decision.eligible,
            decision.amount,
            decision.currency,
        )
        return decision

    def route_for(self, claim: Claim) -> RouteContext:
        """Route facts for a claim's flight leg."""
        leg = claim.flight
        return build_route(
            leg.origin,
            leg.destination,
            leg.carrier or leg.flight_number[:2],
            distance_km=leg.distance_km,
            departure_country=leg.departure_country,
            arrival_country=leg.arrival_country,
            directory=self.directory,
        )

    def evaluate_claim(
        self, claim: Claim, flight: ReconciledFlightRecord | None = None
    ) -> EligibilityDecision:
        """
        Re-run eligibility for a stored claim.

        Raises:
            ValueError: If the claim carries no flight record and none is given
        """
        flight = flight or claim.flight_record
        if flight is None:
            raise ValueError(f"Claim {claim.claim_id} has no flight record to evaluate")
        return self.evaluate(flight, claim.disruption, claim.disruption_type, self.route_for(claim))

    def quote(
        self,
        flight_number: str,
        flight_date: date,
        origin: str,
        destination: str,
        disruption_type: DisruptionType | str,
        disruption: dict[str, Any] | None = None,
        carrier: str | None = None,
        flight: ReconciledFlightRecord | None = None,
        delay_minutes: int = 0,
        cancelled: bool = False,
        reason: str | None = None,
        distance_km: float | None = None,
        departure_country: str | None = None,
        arrival_country: str | None = None,
    ) -> EligibilityDecision:
        """
        Pre-payment quote from raw inputs.

        When no reconciled flight record is supplied, the passenger's own
        account of the delay is used as a manual record. Distance and
        countries may be given for airports outside the reference table.
        """
        if flight is None:
            flight = ReconciledFlightRecord.manual(
                flight_number,
                flight_date,
                delay_minutes=delay_minutes,
                cancelled=cancelled,
                reason=reason,
                carrier=carrier or "",
            )
        route = build_route(
            origin,
            destination,
            carrier or flight_number[:2],
            distance_km=distance_km,
            departure_country=departure_country,
            arrival_country=arrival_country,
            directory=self.directory,
        )
        return self.evaluate(flight, disruption or {}, disruption_type, route)
