"""
Flight status provider clients.
Each provider answers ``lookup(flight_number, flight_date)`` with a single
FlightObservation, None when it has no record, or raises ProviderError.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Protocol, runtime_checkable

import requests

from ..core.errors import ProviderError
from ..core.models import FlightObservation, normalize_flight_number

logger = logging.getLogger(__name__)

# Provider status strings mapped onto our simplified set.
STATUS_MAP: dict[str, str] = {
    "scheduled": "scheduled",
    "delayed": "delayed",
    "cancelled": "cancelled",
    "canceled": "cancelled",
    "departed": "departed",
    "arrived": "arrived",
    "active": "departed",
    "en-route": "departed",
    "landed": "arrived",
    "diverted": "delayed",
}


@runtime_checkable
class FlightDataProvider(Protocol):
    """Source of flight status observations."""

    name: str

    def lookup(self, flight_number: str, flight_date: date) -> FlightObservation | None:
        ...


def map_status(status: str | None) -> str:
    return STATUS_MAP.get((status or "").strip().lower(), "scheduled")


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a provider ISO timestamp; naive values are taken as UTC."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Unparseable provider timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def delay_between(scheduled: datetime | None, actual: datetime | None) -> int | None:
    """Whole minutes late; early running counts as zero."""
    if scheduled is None or actual is None:
        return None
    return max(0, round((actual - scheduled).total_seconds() / 60))


class HTTPFlightProvider:
    """
    Shared request and parsing logic for JSON flight status APIs.

    Subclasses set ``name``, ``confidence`` and ``endpoint`` and build the
    query parameters for their API.
    """

    name = "http"
    confidence = 0.5
    endpoint = ""

    def __init__(
        self,
        api_key: str,
        base_url: str,
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _params(self, flight_number: str, flight_date: date) -> dict[str, str]:
        raise NotImplementedError

    def lookup(self, flight_number: str, flight_date: date) -> FlightObservation | None:
        """
        Fetch the provider's record for a flight.

        Args:
            flight_number: IATA flight number, e.g. ``"BA117"``
            flight_date: Scheduled departure date

        Returns:
            The observation, or None when the provider has no such flight

        Raises:
            ProviderError: On transport failure, a non-200 answer, an API error
                body or a malformed record
        """
        if not self.api_key:
            raise ProviderError(self.name, "API key not configured")

        flight_number = normalize_flight_number(flight_number)
        url = f"{self.base_url}/{self.endpoint}"
        try:
            resp = self.session.get(
                url, params=self._params(flight_number, flight_date), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc

        if resp.status_code != 200:
            raise ProviderError(self.name, f"HTTP {resp.status_code} - {resp.text[:120]}")

        try:
            payload = resp.json()
        except ValueError as exc:
            raise ProviderError(self.name, "invalid JSON response") from exc

        if isinstance(payload, dict) and payload.get("error"):
            raise ProviderError(self.name, f"API error: {payload['error']}")

        rows = payload.get("data") if isinstance(payload, dict) else None
        if not rows:
            logger.info("%s has no record of %s on %s", self.name, flight_number, flight_date)
            return None
        try:
            return self._to_observation(rows[0], flight_number, flight_date)
        except (ValueError, TypeError, AttributeError, LookupError) as exc:
            raise ProviderError(self.name, f"malformed record: {exc}") from exc

    def _to_observation(
        self, row: dict[str, Any], flight_number: str, flight_date: date
    ) -> FlightObservation:
        """Map one provider JSON record onto a FlightObservation."""
        departure = row.get("departure") or {}
        arrival = row.get("arrival") or {}
        flight = row.get("flight") or {}
        airline = row.get("airline") or {}

        scheduled_dep = parse_timestamp(departure.get("scheduled"))
        actual_dep = parse_timestamp(departure.get("actual"))
        scheduled_arr = parse_timestamp(arrival.get("scheduled"))
        actual_arr = parse_timestamp(arrival.get("actual"))

        # Arrival delay is what counts for compensation
        delay = delay_between(scheduled_arr, actual_arr)
        if delay is None:
            delay = delay_between(scheduled_dep, actual_dep)
        if delay is None:
            delay = int(arrival.get("delay") or departure.get("delay") or 0)

        status = map_status(row.get("flight_status"))
        cancelled = status == "cancelled"

        return FlightObservation(
            flight_number=flight.get("iata") or flight_number,
            carrier=airline.get("iata") or flight_number[:2],
            flight_date=flight_date,
            origin=departure.get("iata"),
            destination=arrival.get("iata"),
            scheduled_departure=scheduled_dep,
            actual_departure=actual_dep,
            scheduled_arrival=scheduled_arr,
            actual_arrival=actual_arr,
            delay_minutes=0 if cancelled else delay,
            cancelled=cancelled,
            cancellation_reason=row.get("cancellation_reason") or ("Flight cancelled" if cancelled else None),
            confidence=self.confidence,
            source=self.name,
        )


class AviationStackProvider(HTTPFlightProvider):
    """AviationStack flights API client."""

    name = "aviationstack"
    confidence = 0.8
    endpoint = "flights"

    def _params(self, flight_number: str, flight_date: date) -> dict[str, str]:
        return {
            "access_key": self.api_key,
            "flight_iata": flight_number,
            "flight_date": flight_date.isoformat(),
        }


class FlightLabsProvider(HTTPFlightProvider):
    """FlightLabs flight status API client."""

    name = "flightlabs"
    confidence = 0.7
    endpoint = "flight"

    def _params(self, flight_number: str, flight_date: date) -> dict[str, str]:
        return {
            "access_key": self.api_key,
            "flight_iata": flight_number,
            "date": flight_date.isoformat(),
        }


def default_providers(settings: Any = None) -> list[HTTPFlightProvider]:
    """Build both HTTP providers from settings."""
    if settings is None:
        from ..config import get_settings

        settings = get_settings()
    return [
        AviationStackProvider(
            settings.aviationstack_api_key,
            settings.aviationstack_base_url,
            timeout=settings.provider_timeout_s,
        ),
        FlightLabsProvider(
            settings.flightlabs_api_key,
            settings.flightlabs_base_url,
            timeout=settings.provider_timeout_s,
        ),
    ]
