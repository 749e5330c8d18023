"""
Flight Claims Engine - Main Orchestrator.
Wires the directory, flight lookup, eligibility, lifecycle and refund
components together behind one object.
"""

import logging
from datetime import date, datetime
from typing import Any

from .config import Settings, get_settings
from .core.errors import NoFlightData
from .core.models import Claim, DisruptionType, EligibilityDecision, ReconciledFlightRecord
from .directory import AirlineDirectory, default_directory
from .eligibility import EligibilityEngine
from .events import EventLog, Notifier
from .flight_data import FlightDataProvider, FlightLookupService, Reconciler, TTLCache, default_providers
from .lifecycle import ClaimLifecycle, ClaimLocks
from .payments import PaymentGateway, RecordingGateway
from .refunds import RefundService, RefundSweep, RefundTriggerEvaluator, SweepResult
from .reporting import PipelineReportBuilder, PipelineReportFormatter
from .service import ClaimService
from .store import ClaimStore, InMemoryClaimStore
from .utils.pii_redaction import PIIRedactor

logger = logging.getLogger(__name__)


class ClaimEngine:
    """
    Main orchestrator for the flight disruption claims core.

    Components are created lazily from settings; any of them can be injected
    instead, which is how tests and alternative stores plug in.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        store: ClaimStore | None = None,
        notifier: Notifier | None = None,
        gateway: PaymentGateway | None = None,
        directory: AirlineDirectory | None = None,
        providers: list[FlightDataProvider] | None = None,
    ) -> None:
        """
        Initialize the engine.

        Args:
            settings: Runtime settings (defaults to the environment)
            store: Claim store (defaults to an in-memory store)
            notifier: Event sink (defaults to an in-memory event log)
            gateway: Payment gateway (defaults to a recording gateway)
            directory: Airline directory (defaults to the bundled table)
            providers: Flight data providers (defaults to the HTTP providers)
        """
        self.settings = settings or get_settings()
        self.store = store or InMemoryClaimStore()
        self.notifier = notifier or EventLog()
        self.gateway = gateway or RecordingGateway()
        self._directory = directory
        self._providers = providers

        self._eligibility: EligibilityEngine | None = None
        self._lookup: FlightLookupService | None = None
        self._lifecycle: ClaimLifecycle | None = None
        self._refunds: RefundService | None = None
        self._service: ClaimService | None = None
        self._pii_redactor: PIIRedactor | None = None
        self.locks = ClaimLocks()

    @property
    def directory(self) -> AirlineDirectory:
        if self._directory is None:
            self._directory = default_directory()
        return self._directory

    @property
    def eligibility(self) -> EligibilityEngine:
        """Get or create the eligibility engine."""
        if self._eligibility is None:
            self._eligibility = EligibilityEngine(
                directory=self.directory,
                low_confidence_threshold=self.settings.low_confidence_threshold,
            )
        return self._eligibility

    @property
    def lookup(self) -> FlightLookupService:
        """Get or create the concurrent flight lookup service."""
        if self._lookup is None:
            providers = self._providers
            if providers is None:
                providers = default_providers(self.settings)
            self._lookup = FlightLookupService(
                providers,
                reconciler=Reconciler(tolerance_minutes=self.settings.reconcile_tolerance_minutes),
                cache=TTLCache(
                    maxsize=self.settings.lookup_cache_size, ttl=self.settings.lookup_cache_ttl_s
                ),
                timeout=self.settings.provider_timeout_s,
            )
        return self._lookup

    @property
    def lifecycle(self) -> ClaimLifecycle:
        """Get or create the claim state machine."""
        if self._lifecycle is None:
            self._lifecycle = ClaimLifecycle(directory=self.directory)
        return self._lifecycle

    @property
    def refunds(self) -> RefundService:
        """Get or create the refund service."""
        if self._refunds is None:
            evaluator = RefundTriggerEvaluator(
                filing_deadline_hours=self.settings.filing_deadline_hours,
                request_window_hours=self.settings.refund_request_window_hours,
                engine=self.eligibility,
                store=self.store,
            )
            self._refunds = RefundService(
                self.store,
                self.gateway,
                self.notifier,
                evaluator=evaluator,
                lifecycle=self.lifecycle,
                locks=self.locks,
            )
        return self._refunds

    @property
    def service(self) -> ClaimService:
        """Get or create the claim service."""
        if self._service is None:
            self._service = ClaimService(
                self.store,
                self.lifecycle,
                self.eligibility,
                self.refunds,
                self.notifier,
                locks=self.locks,
            )
        return self._service

    @property
    def pii_redactor(self) -> PIIRedactor:
        if self._pii_redactor is None:
            self._pii_redactor = PIIRedactor()
        return self._pii_redactor

    def lookup_flight(
        self, flight_number: str, flight_date: date
    ) -> ReconciledFlightRecord | None:
        """Reconciled provider data, or None when no provider had the flight."""
        try:
            return self.lookup.lookup(flight_number, flight_date)
        except NoFlightData as exc:
            logger.warning("%s (%s)", exc, "; ".join(exc.provider_errors))
            return None

    def quote(
        self,
        flight_number: str,
        flight_date: date,
        origin: str,
        destination: str,
        disruption_type: DisruptionType | str,
        disruption: dict[str, Any] | None = None,
        carrier: str | None = None,
        use_lookup: bool = False,
        delay_minutes: int = 0,
        cancelled: bool = False,
        reason: str | None = None,
        distance_km: float | None = None,
        departure_country: str | None = None,
        arrival_country: str | None = None,
    ) -> EligibilityDecision:
        """
        Pre-payment eligibility quote.

        Args:
            flight_number: Flight number as printed on the ticket
            flight_date: Scheduled departure date
            origin: Departure airport IATA code
            destination: Final destination IATA code
            disruption_type: Kind of disruption
            disruption: Disruption facts for the type
            carrier: Operating carrier, if not the flight number prefix
            use_lookup: Query the flight data providers first
            delay_minutes: Passenger-reported delay, used without provider data
            cancelled: Passenger-reported cancellation
            reason: Reason the airline gave
            distance_km: Route distance for airports outside the reference table
            departure_country: ISO country of the departure airport, if not in the table
            arrival_country: ISO country of the destination airport, if not in the table

        Returns:
            EligibilityDecision
        """
        flight = self.lookup_flight(flight_number, flight_date) if use_lookup else None
        return self.eligibility.quote(
            flight_number,
            flight_date,
            origin,
            destination,
            disruption_type,
            disruption=disruption,
            carrier=carrier,
            flight=flight,
            delay_minutes=delay_minutes,
            cancelled=cancelled,
            reason=reason,
            distance_km=distance_km,
            departure_country=departure_country,
            arrival_country=arrival_country,
        )

    def run_refund_sweep(self, now: datetime | None = None) -> SweepResult:
        return RefundSweep(self.refunds, workers=self.settings.sweep_workers).run(now)

    def run_follow_up_sweep(self, now: datetime | None = None) -> dict[str, Any]:
        return self.service.follow_up_sweep(now)

    def pipeline_report(self, now: datetime | None = None) -> PipelineReportFormatter:
        return PipelineReportBuilder(self.store.query(), now).get_formatter()

    def export_claim(self, claim_id: str, redact: bool = True) -> dict[str, Any]:
        """Claim as a JSON-compatible dict, PII redacted unless asked otherwise."""
        claim: Claim = self.store.get(claim_id)
        if redact:
            return self.pii_redactor.redact_claim(claim)
        return claim.model_dump(mode="json")

    def close(self) -> None:
        if self._lookup is not None:
            self._lookup.close()


def quote(
    flight_number: str,
    flight_date: date,
    origin: str,
    destination: str,
    disruption_type: DisruptionType | str,
    **kwargs: Any,
) -> EligibilityDecision:
    """
    Convenience function for a one-off quote with default settings.

    Args:
        flight_number: Flight number
        flight_date: Scheduled departure date
        origin: Departure airport IATA code
        destination: Final destination IATA code
        disruption_type: Kind of disruption
        **kwargs: Passed to ``ClaimEngine.quote``

    Returns:
        EligibilityDecision
    """
    engine = ClaimEngine()
    try:
        return engine.quote(flight_number, flight_date, origin, destination, disruption_type, **kwargs)
    finally:
        engine.close()
