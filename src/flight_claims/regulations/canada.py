"""
Canadian Air Passenger Protection Regulations (APPR).
Compensation depends on whether the disruption was within the airline's
control and on carrier size, not on distance.
"""

from decimal import Decimal

from ..core.geo import CANADIAN_COUNTRIES
from ..core.models import DeniedBoardingReason, EligibilityDecision, Regulation, RouteContext
from .base import EvaluationContext, RegulationPolicy, register_regulation

CANCELLATION_NOTICE_DAYS = 14

# (minimum arrival delay in minutes, amount), highest tier first
LARGE_CARRIER_TIERS: tuple[tuple[int, Decimal], ...] = (
    (540, Decimal("1000")),
    (360, Decimal("700")),
    (180, Decimal("400")),
)
SMALL_CARRIER_TIERS: tuple[tuple[int, Decimal], ...] = (
    (540, Decimal("500")),
    (360, Decimal("250")),
    (180, Decimal("125")),
)
DENIED_BOARDING_TIERS: tuple[tuple[int, Decimal], ...] = (
    (540, Decimal("2400")),
    (360, Decimal("1800")),
    (0, Decimal("900")),
)

APPR_RIGHTS = (
    "Right to alternative transportation",
    "Right to care if delayed overnight",
)


def _tier_amount(tiers: tuple[tuple[int, Decimal], ...], minutes: int) -> Decimal | None:
    for threshold, amount in tiers:
        if minutes >= threshold:
            return amount
    return None


@register_regulation
class CanadianPolicy(RegulationPolicy):
    """APPR rules for flights to, from and within Canada."""

    regulation = Regulation.CANADIAN
    priority = 50
    currency = "CAD"
    name = "Canadian APPR"
    additional_rights = APPR_RIGHTS

    def applies_to(self, route: RouteContext) -> bool:
        return (
            route.departure_country in CANADIAN_COUNTRIES
            or route.arrival_country in CANADIAN_COUNTRIES
        )

    def _outside_control(self, ctx: EvaluationContext) -> EligibilityDecision:
        return self.decide(
            ctx,
            False,
            f"Disruption outside the airline's control ({ctx.circumstances.category}).",
        )

    def _delay_compensation(self, ctx: EvaluationContext, minutes: int, label: str) -> EligibilityDecision:
        tiers = LARGE_CARRIER_TIERS if ctx.route.large_carrier else SMALL_CARRIER_TIERS
        amount = _tier_amount(tiers, minutes)
        if amount is None:
            return self.decide(
                ctx, False, f"{label} of {minutes} minutes at arrival is under 3 hours."
            )
        size = "large" if ctx.route.large_carrier else "small"
        return self.decide(
            ctx,
            True,
            f"{label} of {minutes} minutes within airline control on a {size} carrier.",
            amount,
        )

    def evaluate_delay(self, ctx: EvaluationContext) -> EligibilityDecision:
        if ctx.circumstances.extraordinary:
            return self._outside_control(ctx)
        return self._delay_compensation(ctx, ctx.flight.delay_minutes, "Delay")

    def evaluate_cancellation(self, ctx: EvaluationContext) -> EligibilityDecision:
        facts = ctx.disruption
        if facts.notice_days >= CANCELLATION_NOTICE_DAYS:
            return self.decide(
                ctx, False, f"Cancellation notified {facts.notice_days} days in advance."
            )
        if ctx.circumstances.extraordinary:
            return self._outside_control(ctx)
        if not facts.alternative_offered:
            # No rebooking means the passenger never arrived with this carrier
            top = (LARGE_CARRIER_TIERS if ctx.route.large_carrier else SMALL_CARRIER_TIERS)[0][1]
            return self.decide(
                ctx, True, "Cancellation within airline control with no alternative offered.", top
            )
        return self._delay_compensation(
            ctx, max(0, facts.alternative_arrival_delta_minutes), "Cancellation with rebooking arriving late"
        )

    def evaluate_denied_boarding(self, ctx: EvaluationContext) -> EligibilityDecision:
        facts = ctx.disruption
        if facts.voluntary:
            return self.decide(
                ctx, False, "Seat given up voluntarily; compensation is as agreed with the airline."
            )
        if facts.reason_category != DeniedBoardingReason.OVERBOOKING:
            return self.decide(
                ctx,
                False,
                f"Boarding denied for {facts.reason_category.value} reasons, "
                f"which carry no compensation.",
            )
        self.require(facts.alternative_arrival_delay_minutes, "alternative_arrival_delay_minutes")

        amount = _tier_amount(DENIED_BOARDING_TIERS, facts.alternative_arrival_delay_minutes)
        offered = facts.compensation_offered_amount or Decimal("0")
        if facts.compensation_offered and offered >= amount:
            return self.decide(
                ctx,
                False,
                f"The airline already paid {offered} CAD, at least the {amount} CAD due.",
            )
        return self.decide(
            ctx,
            True,
            f"Involuntary denied boarding arriving "
            f"{facts.alternative_arrival_delay_minutes} minutes late.",
            amount,
        )

    def evaluate_downgrade(self, ctx: EvaluationContext) -> EligibilityDecision:
        facts = ctx.disruption
        if not facts.is_downgrade:
            return self.decide(ctx, False, "No downgrade: travelled in the booked class or higher.")
        self.require(facts.fare_difference, "fare_difference")
        return self.decide(
            ctx,
            True,
            "Downgrade entitles you to a refund of the fare difference.",
            facts.fare_difference,
            additional_rights=(),
        )
