"""
EU261-style regimes: distance-banded fixed compensation.
UK261, Swiss and Norwegian rules follow the same shape with their own
currency, amounts and covered countries.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..core.geo import EU_COUNTRIES, NORWEGIAN_COUNTRIES, SWISS_COUNTRIES, UK_COUNTRIES
from ..core.models import (
    DeniedBoardingReason,
    DistanceBand,
    EligibilityDecision,
    Regulation,
    RouteContext,
)
from .base import EvaluationContext, RegulationPolicy, register_regulation

MIN_DELAY_MINUTES = 180
# Long-haul delays in [180, 240) get half compensation
LONG_HAUL_FULL_DELAY_MINUTES = 240
LONG_HAUL_REDUCTION = Decimal("0.5")

FULL_NOTICE_DAYS = 14
SHORT_NOTICE_DAYS = 7
MAX_EARLIER_DEPARTURE_MINUTES = 60
# Later-arrival allowance for an offered alternative, by notice period
LATE_ARRIVAL_ALLOWANCE_MINUTES = {"medium_notice": 120, "short_notice": 240}

DOWNGRADE_RATES: dict[DistanceBand, Decimal] = {
    DistanceBand.SHORT: Decimal("0.30"),
    DistanceBand.MEDIUM: Decimal("0.50"),
    DistanceBand.LONG: Decimal("0.75"),
}

EU_BAND_AMOUNTS: dict[DistanceBand, Decimal] = {
    DistanceBand.SHORT: Decimal("250"),
    DistanceBand.MEDIUM: Decimal("400"),
    DistanceBand.LONG: Decimal("600"),
}

STANDARD_RIGHTS = (
    "Right to care (meals, refreshments, accommodation)",
    "Right to choose between refund and re-routing",
    "Right to assistance (phone calls, etc.)",
)


class BandedCompensationPolicy(RegulationPolicy):
    """
    Fixed compensation by distance band, as set out in Regulation (EC) 261/2004.

    A regime is covered when the flight departs one of ``countries``, or
    arrives in one on a carrier based there.
    """

    countries: frozenset[str] = frozenset()
    band_amounts: dict[DistanceBand, Decimal] = EU_BAND_AMOUNTS
    additional_rights = STANDARD_RIGHTS

    def applies_to(self, route: RouteContext) -> bool:
        if route.departure_country in self.countries:
            return True
        return (
            route.arrival_country in self.countries
            and route.carrier_country in self.countries
        )

    def band_amount(self, band: DistanceBand) -> Decimal:
        return self.band_amounts[band]

    def _extraordinary_reason(self, ctx: EvaluationContext) -> str:
        return (
            f"Extraordinary circumstances ({ctx.circumstances.category}): "
            f"{ctx.circumstances.reason}. The airline is not liable for compensation."
        )

    def evaluate_delay(self, ctx: EvaluationContext) -> EligibilityDecision:
        delay = ctx.flight.delay_minutes
        if delay < MIN_DELAY_MINUTES:
            return self.decide(
                ctx, False, f"Delay of {delay} minutes is under the 3 hour threshold."
            )
        if ctx.circumstances.extraordinary:
            return self.decide(ctx, False, self._extraordinary_reason(ctx))

        band = ctx.route.distance_band
        amount = self.band_amount(band)
        if band == DistanceBand.LONG and delay < LONG_HAUL_FULL_DELAY_MINUTES:
            amount = amount * LONG_HAUL_REDUCTION
            return self.decide(
                ctx,
                True,
                f"Long-haul delay of {delay} minutes (3-4 hours) qualifies for "
                f"50% compensation under {self.regulation.value}.",
                amount,
            )
        return self.decide(
            ctx,
            True,
            f"{band.value.capitalize()}-haul delay of {delay} minutes qualifies "
            f"under {self.regulation.value}.",
            amount,
        )

    def evaluate_cancellation(self, ctx: EvaluationContext) -> EligibilityDecision:
        facts = ctx.disruption
        if facts.notice_days >= FULL_NOTICE_DAYS:
            return self.decide(
                ctx,
                False,
                f"Cancellation notified {facts.notice_days} days in advance "
                f"(14 or more days notice).",
            )
        if ctx.circumstances.extraordinary:
            return self.decide(ctx, False, self._extraordinary_reason(ctx))

        if facts.alternative_offered:
            allowance_key = (
                "medium_notice" if facts.notice_days >= SHORT_NOTICE_DAYS else "short_notice"
            )
            departs_close = (
                facts.alternative_departure_delta_minutes >= -MAX_EARLIER_DEPARTURE_MINUTES
            )
            arrives_close = (
                facts.alternative_arrival_delta_minutes
                <= LATE_ARRIVAL_ALLOWANCE_MINUTES[allowance_key]
            )
            if departs_close and arrives_close:
                return self.decide(
                    ctx,
                    False,
                    f"Cancellation notified {facts.notice_days} days in advance with an "
                    f"acceptable alternative flight offered.",
                )

        band = ctx.route.distance_band
        return self.decide(
            ctx,
            True,
            f"Cancellation notified {facts.notice_days} days in advance without an "
            f"acceptable alternative qualifies under {self.regulation.value}.",
            self.band_amount(band),
        )

    def evaluate_denied_boarding(self, ctx: EvaluationContext) -> EligibilityDecision:
        facts = ctx.disruption
        if facts.voluntary:
            return self.decide(
                ctx, False, "Boarding was given up voluntarily; compensation is as agreed with the airline."
            )
        if facts.reason_category != DeniedBoardingReason.OVERBOOKING:
            return self.decide(
                ctx,
                False,
                f"Boarding denied for {facts.reason_category.value} reasons, "
                f"which carry no compensation.",
            )

        amount = self.band_amount(ctx.route.distance_band)
        offered = facts.compensation_offered_amount or Decimal("0")
        if facts.compensation_offered and offered >= amount:
            return self.decide(
                ctx,
                False,
                f"The airline already paid {offered} {self.currency} on the spot, "
                f"at least the {amount} {self.currency} due.",
            )
        return self.decide(
            ctx,
            True,
            f"Involuntary denied boarding due to overbooking qualifies under {self.regulation.value}.",
            amount,
        )

    def evaluate_downgrade(self, ctx: EvaluationContext) -> EligibilityDecision:
        facts = ctx.disruption
        if not facts.is_downgrade:
            return self.decide(
                ctx,
                False,
                f"Travelled in {facts.actual_class.value}, which is not below the "
                f"booked {facts.booked_class.value}.",
            )
        band = ctx.route.distance_band
        rate = DOWNGRADE_RATES[band]
        return self.decide(
            ctx,
            True,
            f"Downgrade from {facts.booked_class.value} to {facts.actual_class.value} "
            f"on a {band.value}-haul flight refunds {int(rate * 100)}% of the ticket price.",
            facts.ticket_price * rate,
            additional_rights=(),
        )


@register_regulation
class UK261Policy(BandedCompensationPolicy):
    regulation = Regulation.UK261
    priority = 10
    currency = "GBP"
    name = "UK261"
    countries = UK_COUNTRIES
    band_amounts = {
        DistanceBand.SHORT: Decimal("250"),
        DistanceBand.MEDIUM: Decimal("400"),
        DistanceBand.LONG: Decimal("520"),
    }


@register_regulation
class EU261Policy(BandedCompensationPolicy):
    regulation = Regulation.EU261
    priority = 20
    currency = "EUR"
    name = "EU261"
    countries = EU_COUNTRIES


def _converted(rate: str) -> dict[DistanceBand, Decimal]:
    return {
        band: (amount * Decimal(rate)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        for band, amount in EU_BAND_AMOUNTS.items()
    }


@register_regulation
class SwissPolicy(BandedCompensationPolicy):
    """Swiss FOCA rules mirror EU261, paid in CHF."""

    regulation = Regulation.SWISS
    priority = 30
    currency = "CHF"
    name = "Swiss FOCA"
    countries = SWISS_COUNTRIES
    band_amounts = _converted("1.08")


@register_regulation
class NorwegianPolicy(BandedCompensationPolicy):
    """Norwegian CAA rules mirror EU261, paid in NOK."""

    regulation = Regulation.NORWEGIAN
    priority = 40
    currency = "NOK"
    name = "Norwegian CAA"
    countries = NORWEGIAN_COUNTRIES
    band_amounts = _converted("11.5")
