"""
Flight Disruption Claims Engine.

Decides statutory compensation for delayed, cancelled, overbooked and
downgraded flights, and runs the resulting claim through airline filing,
follow-up and the refund guarantee.
"""

from .core.models import (
    Claim,
    ClaimStatus,
    DisruptionType,
    EligibilityDecision,
    ReconciledFlightRecord,
    RefundDecision,
    RefundReason,
    Regulation,
    RouteContext,
)
from .directory import AirlineConfig, AirlineDirectory, default_directory
from .eligibility import EligibilityEngine, build_route
from .engine import ClaimEngine, quote
from .flight_data import FlightLookupService, Reconciler
from .lifecycle import ClaimLifecycle, TransitionResult
from .refunds import RefundService, RefundSweep, RefundTriggerEvaluator
from .reporting import PipelineReportBuilder, PipelineReportFormatter
from .service import ClaimService
from .utils.pii_redaction import PIIRedactor, redact_pii

__version__ = "0.1.0"

__all__ = [
    # Main Engine
    "ClaimEngine",
    "quote",
    # Models
    "Claim",
    "ClaimStatus",
    "DisruptionType",
    "EligibilityDecision",
    "ReconciledFlightRecord",
    "RefundDecision",
    "RefundReason",
    "Regulation",
    "RouteContext",
    # Components
    "AirlineConfig",
    "AirlineDirectory",
    "ClaimLifecycle",
    "ClaimService",
    "EligibilityEngine",
    "FlightLookupService",
    "Reconciler",
    "RefundService",
    "RefundSweep",
    "RefundTriggerEvaluator",
    "TransitionResult",
    "build_route",
    "default_directory",
    # Reporting
    "PipelineReportBuilder",
    "PipelineReportFormatter",
    # Utils
    "PIIRedactor",
    "redact_pii",
]
