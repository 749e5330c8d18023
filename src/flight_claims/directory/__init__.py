"""Airline directory and submission package generation."""

from .airlines import (
    BASE_REQUIRED_DOCUMENTS,
    AirlineConfig,
    AirlineDirectory,
    DEFAULT_FOLLOW_UP_INTERVAL,
    default_directory,
    normalize_alias,
    parse_interval,
)
from .submission import build_submission_package, claim_field_value, missing_claim_fields

__all__ = [
    "BASE_REQUIRED_DOCUMENTS",
    "AirlineConfig",
    "AirlineDirectory",
    "DEFAULT_FOLLOW_UP_INTERVAL",
    "build_submission_package",
    "claim_field_value",
    "default_directory",
    "missing_claim_fields",
    "normalize_alias",
    "parse_interval",
]
