"""
Core components for the Flight Claims engine.
"""

from .circumstances import (
    CircumstanceAssessment,
    CircumstanceCategory,
    ExtraordinaryCircumstancesClassifier,
)
from .errors import (
    ClaimNotFound,
    DisruptionInputError,
    FlightClaimsError,
    NoFlightData,
    ProviderError,
    StaleClaimError,
    UnsupportedAirline,
)
from .geo import Airport, distance_between, get_airport, haversine_km
from .models import (
    CabinClass,
    CancellationInput,
    Claim,
    ClaimStatus,
    DelayInput,
    DeniedBoardingInput,
    DisruptionType,
    DistanceBand,
    DowngradeInput,
    EligibilityDecision,
    FlightLeg,
    FlightObservation,
    Passenger,
    PaymentInfo,
    PaymentStatus,
    ReconciledFlightRecord,
    RefundDecision,
    RefundReason,
    Regulation,
    RouteContext,
    SubmissionMethod,
    parse_disruption_input,
)

__all__ = [
    # Models
    "CabinClass",
    "CancellationInput",
    "Claim",
    "ClaimStatus",
    "DelayInput",
    "DeniedBoardingInput",
    "DisruptionType",
    "DistanceBand",
    "DowngradeInput",
    "EligibilityDecision",
    "FlightLeg",
    "FlightObservation",
    "Passenger",
    "PaymentInfo",
    "PaymentStatus",
    "ReconciledFlightRecord",
    "RefundDecision",
    "RefundReason",
    "Regulation",
    "RouteContext",
    "SubmissionMethod",
    "parse_disruption_input",
    # Errors
    "ClaimNotFound",
    "DisruptionInputError",
    "FlightClaimsError",
    "NoFlightData",
    "ProviderError",
    "StaleClaimError",
    "UnsupportedAirline",
    # Circumstances
    "CircumstanceAssessment",
    "CircumstanceCategory",
    "ExtraordinaryCircumstancesClassifier",
    # Geography
    "Airport",
    "distance_between",
    "get_airport",
    "haversine_km",
]
