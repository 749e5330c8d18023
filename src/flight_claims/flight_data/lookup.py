"""
Concurrent flight lookup across providers.
Both providers are queried at once, each bounded by the same deadline;
whatever subset answers in time is reconciled.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..core.errors import NoFlightData, ProviderError
from ..core.models import FlightObservation, ReconciledFlightRecord, normalize_flight_number
from .cache import TTLCache
from .providers import FlightDataProvider
from .reconciler import Reconciler

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT = 10.0


@dataclass
class LookupResult:
    """Observations gathered for one flight plus the per-provider failures."""

    observations: list[FlightObservation] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def sources(self) -> list[str]:
        return [obs.source for obs in self.observations]

    @property
    def partial(self) -> bool:
        return bool(self.errors) and bool(self.observations)


class FlightLookupService:
    """
    Queries every provider concurrently and reconciles the answers.

    Reconciled records are cached by (flight number, date) in the injected
    TTLCache so repeated quotes do not hit the providers again.
    """

    def __init__(
        self,
        providers: list[FlightDataProvider],
        reconciler: Reconciler | None = None,
        cache: TTLCache | None = None,
        timeout: float = DEFAULT_PROVIDER_TIMEOUT,
    ) -> None:
        self.providers = list(providers)
        self.reconciler = reconciler or Reconciler()
        self.cache = cache
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max(2, 2 * len(self.providers)), thread_name_prefix="flight-lookup"
        )

    def close(self) -> None:
        # Do not wait on a provider that is still hanging past its deadline
        self._executor.shutdown(wait=False, cancel_futures=True)

    def __enter__(self) -> "FlightLookupService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def fetch_observations(self, flight_number: str, flight_date: date) -> LookupResult:
        """
        Ask every provider for the flight, bounded by ``timeout`` seconds.

        Provider errors and timeouts are recorded in the result, never raised.
        """
        flight_number = normalize_flight_number(flight_number)
        futures: dict[Future[FlightObservation | None], str] = {
            self._executor.submit(provider.lookup, flight_number, flight_date): provider.name
            for provider in self.providers
        }
        _, not_done = wait(futures, timeout=self.timeout)

        result = LookupResult()
        for future, name in futures.items():
            if future in not_done:
                future.cancel()
                result.errors[name] = f"timed out after {self.timeout}s"
                logger.warning("Provider %s timed out looking up %s", name, flight_number)
                continue
            try:
                observation = future.result()
            except ProviderError as exc:
                result.errors[name] = str(exc)
                logger.warning("Provider %s failed for %s: %s", name, flight_number, exc)
                continue
            except Exception as exc:
                # Any other failure is recorded like a provider error
                result.errors[name] = f"unexpected error: {exc!r}"
                logger.exception("Provider %s raised unexpectedly for %s", name, flight_number)
                continue
            if observation is None:
                result.errors[name] = "no data"
            elif observation.flight_number != flight_number or observation.flight_date != flight_date:
                result.errors[name] = f"returned {observation.flight_number} {observation.flight_date}"
                logger.warning("Provider %s answered for a different flight", name)
            else:
                result.observations.append(observation)
        return result

    def lookup(self, flight_number: str, flight_date: date) -> ReconciledFlightRecord:
        """
        Reconciled flight facts for one flight.

        Raises:
            NoFlightData: If no provider returned an observation
        """
        flight_number = normalize_flight_number(flight_number)
        key = (flight_number, flight_date)
        if self.cache is not None:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("Lookup cache hit for %s %s", flight_number, flight_date)
                return cached

        result = self.fetch_observations(flight_number, flight_date)
        if not result.observations:
            raise NoFlightData(
                flight_number,
                flight_date,
                [f"{name}: {message}" for name, message in result.errors.items()],
            )
        if result.partial:
            logger.info(
                "Using partial flight data for %s %s from %s",
                flight_number, flight_date, ", ".join(result.sources),
            )

        record = self.reconciler.reconcile(result.observations)
        if self.cache is not None:
            self.cache.set(key, record)
        return record
