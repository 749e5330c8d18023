"""
US Department of Transportation rules (14 CFR Part 250 and Part 259).
No statutory cash compensation for delays or cancellations; involuntary
denied boarding pays a percentage of the one-way fare with a cap.
"""

from decimal import Decimal

from ..core.geo import US_COUNTRIES
from ..core.models import DeniedBoardingReason, EligibilityDecision, Regulation, RouteContext
from .base import EvaluationContext, RegulationPolicy, register_regulation

# Arrival delay (minutes) separating the 200% and 400% tiers
DOMESTIC_LOW_TIER_MAX = 120
INTERNATIONAL_LOW_TIER_MAX = 240
MIN_BUMP_DELAY = 60

LOW_TIER_RATE = Decimal("2")
LOW_TIER_CAP = Decimal("775")
HIGH_TIER_RATE = Decimal("4")
HIGH_TIER_CAP = Decimal("1550")

REFUND_RIGHTS = (
    "Right to a refund if the flight is cancelled or significantly changed and you choose not to travel",
)


@register_regulation
class USDOTPolicy(RegulationPolicy):
    """US DOT rules for flights departing the United States."""

    regulation = Regulation.US_DOT
    priority = 60
    currency = "USD"
    name = "US DOT"
    additional_rights = REFUND_RIGHTS

    def applies_to(self, route: RouteContext) -> bool:
        return route.departure_country in US_COUNTRIES

    def evaluate_delay(self, ctx: EvaluationContext) -> EligibilityDecision:
        return self.decide(
            ctx,
            False,
            "US DOT rules do not require cash compensation for flight delays; "
            "check the airline's customer service plan for meal or hotel vouchers.",
        )

    def evaluate_cancellation(self, ctx: EvaluationContext) -> EligibilityDecision:
        return self.decide(
            ctx,
            False,
            "US DOT rules do not require cash compensation for cancellations, "
            "but a refund is due if you chose not to travel.",
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
        self.require(facts.ticket_price, "ticket_price")

        delay = facts.alternative_arrival_delay_minutes
        if delay < MIN_BUMP_DELAY:
            return self.decide(
                ctx,
                False,
                "Substitute transportation arrived within one hour of the original schedule.",
            )

        low_tier_max = (
            DOMESTIC_LOW_TIER_MAX if ctx.route.is_domestic else INTERNATIONAL_LOW_TIER_MAX
        )
        if delay <= low_tier_max:
            amount = min(facts.ticket_price * LOW_TIER_RATE, LOW_TIER_CAP)
            tier = "200% of the one-way fare"
        else:
            amount = min(facts.ticket_price * HIGH_TIER_RATE, HIGH_TIER_CAP)
            tier = "400% of the one-way fare"

        offered = facts.compensation_offered_amount or Decimal("0")
        if facts.compensation_offered and offered >= amount:
            return self.decide(
                ctx,
                False,
                f"The airline already paid {offered} USD, at least the {amount} USD due.",
            )
        return self.decide(
            ctx,
            True,
            f"Involuntary bump with a {delay} minute later arrival pays {tier}, capped.",
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
            "Involuntary downgrade entitles you to a refund of the fare difference.",
            facts.fare_difference,
            additional_rights=(),
        )
