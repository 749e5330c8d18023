"""
Follow-up scheduling for filed claims.
"""

import logging
from datetime import datetime, timedelta
from enum import Enum

from ..core.models import Claim
from ..directory.airlines import DEFAULT_FOLLOW_UP_INTERVAL, AirlineConfig

logger = logging.getLogger(__name__)

# Days since filing at which each stage starts
STAGE_THRESHOLDS_DAYS = (
    (35, "escalation"),
    (28, "reminder"),
    (14, "initial"),
)


class FollowUpStage(str, Enum):
    INITIAL = "initial"
    REMINDER = "reminder"
    ESCALATION = "escalation"


def follow_up_stage(claim: Claim, now: datetime) -> FollowUpStage | None:
    """Stage of chasing the airline, or None if filed under 14 days ago."""
    if claim.filed_at is None:
        return None
    days = (now - claim.filed_at).days
    for threshold, stage in STAGE_THRESHOLDS_DAYS:
        if days >= threshold:
            return FollowUpStage(stage)
    return None


def interval_for(config: AirlineConfig | None, index: int) -> timedelta:
    """
    Interval for the ``index``-th follow-up.

    Past the end of the airline's schedule the last entry repeats; airlines
    without a schedule use the 14 day default.
    """
    if config is None or not config.follow_up_schedule:
        return DEFAULT_FOLLOW_UP_INTERVAL
    return config.follow_up_interval(index) or config.follow_up_schedule[-1]


def schedule_next(claim: Claim, config: AirlineConfig | None, start: datetime) -> datetime:
    """Set ``next_follow_up`` from the claim's current schedule position."""
    claim.next_follow_up = start + interval_for(config, claim.follow_up_index)
    return claim.next_follow_up


def advance_schedule(claim: Claim, config: AirlineConfig | None, now: datetime) -> datetime:
    """Move to the next schedule entry, counting from ``now``."""
    claim.follow_up_index += 1
    return schedule_next(claim, config, now)


def record_follow_up(
    claim: Claim, config: AirlineConfig | None, now: datetime, actor: str = "system"
) -> FollowUpStage:
    """
    Record that the airline was chased and schedule the next follow-up.

    Returns:
        The stage the follow-up was sent at

    Raises:
        ValueError: If the claim is not awaiting an airline answer
    """
    if claim.filed_at is None or claim.status.is_closed:
        raise ValueError(f"Claim {claim.claim_id} is not awaiting an airline response")

    stage = follow_up_stage(claim, now) or FollowUpStage.INITIAL
    claim.follow_ups_sent += 1
    next_date = advance_schedule(claim, config, now)
    claim.add_note(
        f"Follow-up #{claim.follow_ups_sent} sent ({stage.value}); next on {next_date.date().isoformat()}",
        author=actor,
    )
    logger.info("Claim %s follow-up %s recorded", claim.claim_id, stage.value)
    return stage
