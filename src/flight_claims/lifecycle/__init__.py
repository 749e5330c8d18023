"""Claim lifecycle state machine, follow-up scheduling and locking."""

from .follow_up import (
    FollowUpStage,
    advance_schedule,
    follow_up_stage,
    interval_for,
    record_follow_up,
    schedule_next,
)
from .locks import ClaimLocks, retry_on_stale
from .state_machine import (
    TRANSITIONS,
    ClaimLifecycle,
    Transition,
    TransitionResult,
    UnmetCondition,
    UnmetKind,
    ValidationReport,
    record_override,
    required_documents,
)

__all__ = [
    "TRANSITIONS",
    "ClaimLifecycle",
    "ClaimLocks",
    "FollowUpStage",
    "Transition",
    "TransitionResult",
    "UnmetCondition",
    "UnmetKind",
    "ValidationReport",
    "advance_schedule",
    "follow_up_stage",
    "interval_for",
    "record_follow_up",
    "record_override",
    "required_documents",
    "retry_on_stale",
    "schedule_next",
]
