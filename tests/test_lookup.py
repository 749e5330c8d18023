"""
Tests for flight data providers, the lookup cache and concurrent lookup.
"""

import threading
from datetime import date
from unittest.mock import Mock

import pytest
import requests

from flight_claims.core.errors import NoFlightData, ProviderError
from flight_claims.flight_data import (
    AviationStackProvider,
    FlightLabsProvider,
    FlightLookupService,
    TTLCache,
)

FLIGHT_DATE = date(2025, 3, 1)


class FakeProvider:
    """Provider returning a fixed answer, optionally after blocking on an event."""

    def __init__(self, name, result=None, error=None, gate=None):
        self.name = name
        self.result = result
        self.error = error
        self.gate = gate
        self.calls = 0

    def lookup(self, flight_number, flight_date):
        self.calls += 1
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return self.result


def _response(payload, status_code=200):
    resp = Mock(status_code=status_code, text=str(payload))
    resp.json.return_value = payload
    return resp


AVIATIONSTACK_ROW = {
    "flight_date": "2025-03-01",
    "flight_status": "landed",
    "departure": {
        "iata": "DUB",
        "scheduled": "2025-03-01T06:00:00+00:00",
        "actual": "2025-03-01T09:05:00+00:00",
    },
    "arrival": {
        "iata": "BCN",
        "scheduled": "2025-03-01T09:30:00+00:00",
        "actual": "2025-03-01T12:50:00+00:00",
    },
    "airline": {"iata": "FR"},
    "flight": {"iata": "FR1234"},
}


class TestTTLCache:
    """Tests for TTLCache."""

    def test_expiry(self) -> None:
        """Test entries disappear once their TTL has passed."""
        clock = Mock(return_value=100.0)
        cache = TTLCache(maxsize=4, ttl=10, clock=clock)
        cache.set("k", "v")

        clock.return_value = 109.0
        assert cache.get("k") == "v"

        clock.return_value = 110.0
        assert cache.get("k") is None
        assert "k" not in cache

    def test_lru_eviction(self) -> None:
        """Test the least recently used entry is evicted at capacity."""
        cache = TTLCache(maxsize=2, ttl=60)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert "a" in cache
        assert "b" not in cache
        assert len(cache) == 2

    def test_stats(self) -> None:
        """Test hits and misses are counted."""
        cache = TTLCache()
        cache.set("a", 1)
        cache.get("a")
        cache.get("missing")
        assert cache.stats() == {"size": 1, "hits": 1, "misses": 1}

    def test_invalid_size(self) -> None:
        """Test a zero-size cache is rejected."""
        with pytest.raises(ValueError):
            TTLCache(maxsize=0)


class TestHTTPProviders:
    """Tests for the HTTP provider clients with a mocked session."""

    def test_parses_arrival_delay(self) -> None:
        """Test the delay is computed from scheduled and actual arrival."""
        session = Mock()
        session.get.return_value = _response({"data": [AVIATIONSTACK_ROW]})
        provider = AviationStackProvider("key", "https://api.example.test/v1/", session=session)

        obs = provider.lookup("fr 1234", FLIGHT_DATE)

        assert obs.delay_minutes == 200
        assert obs.source == "aviationstack"
        assert obs.confidence == 0.8
        assert obs.origin == "DUB"
        assert not obs.cancelled
        url = session.get.call_args.args[0]
        params = session.get.call_args.kwargs["params"]
        assert url == "https://api.example.test/v1/flights"
        assert params["flight_iata"] == "FR1234"
        assert params["flight_date"] == "2025-03-01"

    def test_cancelled_status(self) -> None:
        """Test a cancelled flight reports no delay and a default reason."""
        row = dict(AVIATIONSTACK_ROW, flight_status="cancelled")
        session = Mock()
        session.get.return_value = _response({"data": [row]})
        provider = FlightLabsProvider("key", "https://labs.example.test", session=session)

        obs = provider.lookup("FR1234", FLIGHT_DATE)

        assert obs.cancelled
        assert obs.delay_minutes == 0
        assert obs.cancellation_reason == "Flight cancelled"
        assert session.get.call_args.kwargs["params"]["date"] == "2025-03-01"

    def test_empty_data_is_none(self) -> None:
        """Test a provider with no record answers None."""
        session = Mock()
        session.get.return_value = _response({"data": []})
        provider = AviationStackProvider("key", "https://api.example.test", session=session)

        assert provider.lookup("FR1234", FLIGHT_DATE) is None

    def test_http_error(self) -> None:
        """Test non-200 responses raise ProviderError."""
        session = Mock()
        session.get.return_value = _response({}, status_code=503)
        provider = AviationStackProvider("key", "https://api.example.test", session=session)

        with pytest.raises(ProviderError, match="HTTP 503"):
            provider.lookup("FR1234", FLIGHT_DATE)

    def test_api_error_body(self) -> None:
        """Test an error object in a 200 body raises ProviderError."""
        session = Mock()
        session.get.return_value = _response({"error": {"code": "usage_limit_reached"}})
        provider = AviationStackProvider("key", "https://api.example.test", session=session)

        with pytest.raises(ProviderError, match="API error"):
            provider.lookup("FR1234", FLIGHT_DATE)

    def test_transport_error(self) -> None:
        """Test request exceptions are wrapped in ProviderError."""
        session = Mock()
        session.get.side_effect = requests.ConnectionError("refused")
        provider = AviationStackProvider("key", "https://api.example.test", session=session)

        with pytest.raises(ProviderError, match="request failed"):
            provider.lookup("FR1234", FLIGHT_DATE)

    def test_malformed_record(self) -> None:
        """Test an unreadable record is reported as a ProviderError."""
        session = Mock()
        session.get.return_value = _response({"data": [{"arrival": {"delay": "n/a"}}]})
        provider = FlightLabsProvider("key", "https://labs.example.test", session=session)

        with pytest.raises(ProviderError, match="malformed record"):
            provider.lookup("FR1234", FLIGHT_DATE)

    def test_missing_key(self) -> None:
        """Test a provider without an API key fails without a request."""
        session = Mock()
        provider = AviationStackProvider("", "https://api.example.test", session=session)

        with pytest.raises(ProviderError, match="API key"):
            provider.lookup("FR1234", FLIGHT_DATE)
        session.get.assert_not_called()


class TestFlightLookupService:
    """Tests for concurrent lookup and reconciliation."""

    def test_both_providers_reconciled(self, observation) -> None:
        """Test two agreeing answers are reconciled into one corroborated record."""
        providers = [
            FakeProvider("aviationstack", observation(source="aviationstack", confidence=0.8)),
            FakeProvider("flightlabs", observation(source="flightlabs", confidence=0.7)),
        ]
        with FlightLookupService(providers) as service:
            record = service.lookup("FR1234", FLIGHT_DATE)

        assert record.corroborated
        assert set(record.sources) == {"aviationstack", "flightlabs"}

    def test_one_provider_fails(self, observation) -> None:
        """Test a failing provider leaves a single-source record from the other."""
        providers = [
            FakeProvider("aviationstack", error=ProviderError("aviationstack", "HTTP 500")),
            FakeProvider("flightlabs", observation(source="flightlabs", confidence=0.7)),
        ]
        with FlightLookupService(providers) as service:
            result = service.fetch_observations("FR1234", FLIGHT_DATE)
            record = service.lookup("FR1234", FLIGHT_DATE)

        assert result.partial
        assert "aviationstack" in result.errors
        assert record.single_source
        assert record.sources == ["flightlabs"]

    def test_all_providers_fail(self) -> None:
        """Test NoFlightData carries each provider's error."""
        providers = [
            FakeProvider("aviationstack", error=ProviderError("aviationstack", "HTTP 500")),
            FakeProvider("flightlabs", result=None),
        ]
        with FlightLookupService(providers) as service:
            with pytest.raises(NoFlightData) as exc_info:
                service.lookup("FR1234", FLIGHT_DATE)

        errors = exc_info.value.provider_errors
        assert any(e.startswith("aviationstack:") for e in errors)
        assert "flightlabs: no data" in errors

    def test_slow_provider_times_out(self, observation) -> None:
        """Test a provider past the deadline is dropped and the other answer used."""
        gate = threading.Event()
        slow = FakeProvider("aviationstack", observation(source="aviationstack"), gate=gate)
        fast = FakeProvider("flightlabs", observation(source="flightlabs", confidence=0.7))
        service = FlightLookupService([slow, fast], timeout=0.2)
        try:
            result = service.fetch_observations("FR1234", FLIGHT_DATE)
        finally:
            gate.set()
            service.close()

        assert [o.source for o in result.observations] == ["flightlabs"]
        assert "timed out" in result.errors["aviationstack"]

    def test_wrong_flight_ignored(self, observation) -> None:
        """Test an answer for a different flight is not used."""
        providers = [
            FakeProvider("aviationstack", observation(flight_number="FR9999")),
            FakeProvider("flightlabs", observation(source="flightlabs", confidence=0.7)),
        ]
        with FlightLookupService(providers) as service:
            result = service.fetch_observations("FR1234", FLIGHT_DATE)

        assert result.sources == ["flightlabs"]
        assert "aviationstack" in result.errors

    def test_cached_lookup(self, observation) -> None:
        """Test a second lookup is served from the cache."""
        provider = FakeProvider("aviationstack", observation())
        with FlightLookupService([provider], cache=TTLCache()) as service:
            first = service.lookup("FR1234", FLIGHT_DATE)
            second = service.lookup("fr1234", FLIGHT_DATE)

        assert first == second
        assert provider.calls == 1


    def test_malformed_provider_keeps_other_answer(self) -> None:
        """Test one provider's unreadable record does not lose the other's answer."""
        good_session = Mock()
        good_session.get.return_value = _response({"data": [AVIATIONSTACK_ROW]})
        bad_session = Mock()
        bad_session.get.return_value = _response({"data": [{"arrival": {"delay": "n/a"}}]})
        providers = [
            AviationStackProvider("key", "https://api.example.test", session=good_session),
            FlightLabsProvider("key", "https://labs.example.test", session=bad_session),
        ]
        with FlightLookupService(providers) as service:
            result = service.fetch_observations("FR1234", FLIGHT_DATE)
            record = service.lookup("FR1234", FLIGHT_DATE)

        assert "malformed record" in result.errors["flightlabs"]
        assert record.single_source
        assert record.sources == ["aviationstack"]
        assert record.delay_minutes == 200

    def test_unexpected_provider_exception(self, observation) -> None:
        """Test an unexpected provider exception is recorded, not raised."""
        providers = [
            FakeProvider("aviationstack", error=KeyError("arrival")),
            FakeProvider("flightlabs", observation(source="flightlabs", confidence=0.7)),
        ]
        with FlightLookupService(providers) as service:
            result = service.fetch_observations("FR1234", FLIGHT_DATE)

        assert result.sources == ["flightlabs"]
        assert "unexpected error" in result.errors["aviationstack"]
