"""
Airline Directory.
Static reference data describing how each airline accepts compensation
claims, indexed by canonical code with a normalized alias index.
"""

import logging
import re
from collections.abc import Iterable
from datetime import timedelta
from typing import Any

from pydantic import BaseModel, Field, field_validator

from ..core.errors import UnsupportedAirline
from ..core.models import Regulation, SubmissionMethod

logger = logging.getLogger(__name__)

DEFAULT_FOLLOW_UP_INTERVAL = timedelta(days=14)

BASE_REQUIRED_DOCUMENTS = ["boarding_pass", "delay_proof"]

_INTERVAL_PATTERN = re.compile(
    r"^\s*(\d+(?:\.\d+)?)\s*(minute|min|hour|hr|h|day|d|week|wk|w|month)s?\s*$",
    re.IGNORECASE,
)

_UNIT_DAYS = {
    "day": 1, "d": 1,
    "week": 7, "wk": 7, "w": 7,
    "month": 30,
}
_UNIT_HOURS = {"hour": 1, "hr": 1, "h": 1}


def parse_interval(value: str | int | float | timedelta) -> timedelta:
    """
    Parse a follow-up interval such as ``"2 weeks"`` or ``"10 days"``.

    Bare numbers are read as days.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(days=value)

    match = _INTERVAL_PATTERN.match(value)
    if not match:
        raise ValueError(f"Unrecognised interval: {value!r}")

    amount = float(match.group(1))
    unit = match.group(2).lower()
    if unit in _UNIT_DAYS:
        return timedelta(days=amount * _UNIT_DAYS[unit])
    if unit in _UNIT_HOURS:
        return timedelta(hours=amount)
    return timedelta(minutes=amount)


def normalize_alias(value: str) -> str:
    """Lowercase and drop everything but letters and digits."""
    return re.sub(r"[^a-z0-9]", "", value.lower())


class AirlineConfig(BaseModel):
    """Claim submission requirements for one airline."""

    code: str
    name: str
    icao_code: str | None = None
    aliases: list[str] = Field(default_factory=list)
    submission_method: SubmissionMethod
    claim_email: str | None = None
    claim_form_url: str | None = None
    postal_address: str | None = None
    required_documents: list[str] = Field(default_factory=lambda: list(BASE_REQUIRED_DOCUMENTS))
    required_fields: list[str] = Field(default_factory=list)
    form_fields: dict[str, str] = Field(default_factory=dict)
    expected_response_time: str = "4-6 weeks"
    follow_up_schedule: list[timedelta] = Field(default_factory=list)
    regulations_covered: list[Regulation] = Field(default_factory=list)
    country: str
    region: str = "Europe"
    large_carrier: bool = True
    parent_company: str | None = None
    special_instructions: str = ""
    is_active: bool = True

    @field_validator("code")
    @classmethod
    def _upper_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("follow_up_schedule", mode="before")
    @classmethod
    def _parse_schedule(cls, v: Any) -> list[timedelta]:
        return [parse_interval(item) for item in (v or [])]

    @property
    def submission_address(self) -> str | None:
        """Where a submission goes for the configured channel."""
        if self.submission_method == SubmissionMethod.EMAIL:
            return self.claim_email
        if self.submission_method == SubmissionMethod.WEB_FORM:
            return self.claim_form_url
        return self.postal_address

    def follow_up_interval(self, index: int) -> timedelta | None:
        """The ``index``-th follow-up interval, or None past the end of the schedule."""
        if 0 <= index < len(self.follow_up_schedule):
            return self.follow_up_schedule[index]
        return None

    def first_follow_up_interval(self) -> timedelta:
        return self.follow_up_interval(0) or DEFAULT_FOLLOW_UP_INTERVAL


class AirlineDirectory:
    """
    Indexed airline configuration table.

    Lookups accept a canonical IATA code, an ICAO code, the airline name or
    any configured alias. The alias index is built once at construction.
    """

    def __init__(self, configs: Iterable[AirlineConfig | dict[str, Any]] = ()) -> None:
        self._configs: dict[str, AirlineConfig] = {}
        self._alias_index: dict[str, str] = {}
        for config in configs:
            self.add(config)

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, identifier: object) -> bool:
        return isinstance(identifier, str) and self.get(identifier) is not None

    def __iter__(self):
        return iter(self._configs.values())

    def add(self, config: AirlineConfig | dict[str, Any]) -> AirlineConfig:
        """Add or replace an airline entry and index its aliases."""
        if isinstance(config, dict):
            config = AirlineConfig.model_validate(config)

        self._configs[config.code] = config
        keys = [config.code, config.name, *config.aliases]
        if config.icao_code:
            keys.append(config.icao_code)
        for key in keys:
            normalized = normalize_alias(key)
            if not normalized:
                continue
            existing = self._alias_index.get(normalized)
            if existing and existing != config.code:
                logger.warning(
                    "Alias %r for %s shadows existing airline %s",
                    key, config.code, existing,
                )
            self._alias_index[normalized] = config.code
        return config

    def get(self, identifier: str | None) -> AirlineConfig | None:
        """
        Resolve an airline by exact code, name or alias.

        Names are compared on their normalized form only; fragments resolve
        through ``search`` and never here, so an unlisted carrier stays unknown.
        """
        if not identifier or not identifier.strip():
            return None

        direct = self._configs.get(identifier.strip().upper())
        if direct is not None:
            return direct

        code = self._alias_index.get(normalize_alias(identifier))
        if code is None:
            return None
        return self._configs[code]

    def require(self, identifier: str | None) -> AirlineConfig:
        """Resolve an airline or raise ``UnsupportedAirline``."""
        config = self.get(identifier)
        if config is None:
            raise UnsupportedAirline(identifier or "")
        return config

    def by_code(self, code: str) -> AirlineConfig | None:
        return self._configs.get(code.strip().upper())

    def search(self, query: str) -> list[AirlineConfig]:
        """All airlines whose name, code or alias contains the query."""
        normalized = normalize_alias(query)
        if not normalized:
            return []
        codes = {
            code for alias, code in self._alias_index.items() if normalized in alias
        }
        return sorted((self._configs[c] for c in codes), key=lambda c: c.name)

    def by_submission_method(self, method: SubmissionMethod) -> list[AirlineConfig]:
        return [c for c in self._configs.values() if c.submission_method == method]

    def by_region(self, region: str) -> list[AirlineConfig]:
        return [c for c in self._configs.values() if c.region.lower() == region.lower()]

    def active(self) -> list[AirlineConfig]:
        return [c for c in self._configs.values() if c.is_active]

    def carrier_country(self, identifier: str | None) -> str | None:
        config = self.get(identifier)
        return config.country if config else None


_default_directory: AirlineDirectory | None = None


def default_directory() -> AirlineDirectory:
    """Get the directory built from the bundled airline table."""
    global _default_directory
    if _default_directory is None:
        from .data import AIRLINE_TABLE

        _default_directory = AirlineDirectory(AIRLINE_TABLE)
    return _default_directory
