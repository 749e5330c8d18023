"""
Flight data providers, lookup caching and reconciliation.
"""

from .cache import TTLCache
from .lookup import FlightLookupService, LookupResult
from .providers import (
    AviationStackProvider,
    FlightDataProvider,
    FlightLabsProvider,
    HTTPFlightProvider,
    default_providers,
)
from .reconciler import Reconciler, reconcile

__all__ = [
    "AviationStackProvider",
    "FlightDataProvider",
    "FlightLabsProvider",
    "FlightLookupService",
    "HTTPFlightProvider",
    "LookupResult",
    "Reconciler",
    "TTLCache",
    "default_providers",
    "reconcile",
]
