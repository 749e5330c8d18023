"""Refund trigger evaluation and execution."""

from .evaluator import (
    DEFAULT_FILING_DEADLINE_HOURS,
    DEFAULT_REQUEST_WINDOW_HOURS,
    RefundTriggerEvaluator,
)
from .service import RefundService, RefundSweep, SweepResult

__all__ = [
    "DEFAULT_FILING_DEADLINE_HOURS",
    "DEFAULT_REQUEST_WINDOW_HOURS",
    "RefundService",
    "RefundSweep",
    "RefundTriggerEvaluator",
    "SweepResult",
]
