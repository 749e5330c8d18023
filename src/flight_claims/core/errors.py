"""
Exception hierarchy for the Flight Claims engine.

Only hard failures are raised. Expected business conditions (unmet transition
guards, refund decisions, filing validation) are returned as typed results.
"""

from datetime import date
from typing import Any


class FlightClaimsError(Exception):
    """Base class for all engine errors."""

    def to_dict(self) -> dict[str, Any]:
        """Convert the error to a dictionary for logging/serialization."""
        return {"error_type": type(self).__name__, "message": str(self)}


class ProviderError(FlightClaimsError):
    """A flight data provider failed to answer a lookup."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class NoFlightData(FlightClaimsError):
    """Neither flight data provider returned an observation."""

    def __init__(
        self,
        flight_number: str | None = None,
        flight_date: date | None = None,
        provider_errors: list[str] | None = None,
    ) -> None:
        target = f"{flight_number} on {flight_date}" if flight_number else "flight"
        super().__init__(f"No flight data available for {target}")
        self.flight_number = flight_number
        self.flight_date = flight_date
        self.provider_errors = provider_errors or []

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["provider_errors"] = list(self.provider_errors)
        return data


class DisruptionInputError(FlightClaimsError, ValueError):
    """Disruption facts are missing or malformed for the given disruption type."""

    def __init__(
        self,
        missing_fields: list[str] | None = None,
        invalid_fields: dict[str, str] | None = None,
        message: str | None = None,
    ) -> None:
        self.missing_fields = missing_fields or []
        self.invalid_fields = invalid_fields or {}
        if message is None:
            parts = []
            if self.missing_fields:
                parts.append(f"missing fields: {', '.join(self.missing_fields)}")
            if self.invalid_fields:
                parts.append(f"invalid fields: {', '.join(self.invalid_fields)}")
            message = "Invalid disruption input (" + "; ".join(parts) + ")"
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["missing_fields"] = list(self.missing_fields)
        data["invalid_fields"] = dict(self.invalid_fields)
        return data


class UnsupportedAirline(FlightClaimsError, LookupError):
    """No airline directory entry matches the identifier."""

    def __init__(self, identifier: str) -> None:
        super().__init__(f"Unsupported airline: {identifier!r}")
        self.identifier = identifier


class ClaimNotFound(FlightClaimsError, KeyError):
    """The record store has no claim with this identifier."""

    def __init__(self, claim_id: str) -> None:
        super().__init__(claim_id)
        self.claim_id = claim_id

    def __str__(self) -> str:
        return f"Claim not found: {self.claim_id}"


class StaleClaimError(FlightClaimsError):
    """A claim was saved from an outdated version (lost update)."""

    def __init__(self, claim_id: str, expected: int, found: int) -> None:
        super().__init__(
            f"Claim {claim_id} changed concurrently "
            f"(expected version {expected}, found {found})"
        )
        self.claim_id = claim_id
        self.expected = expected
        self.found = found
