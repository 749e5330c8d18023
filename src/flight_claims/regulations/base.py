"""
Regulation policy framework.
One RegulationPolicy per passenger-rights regime, kept in an ordered
registry. Adding a regime means registering a new policy; existing policies
are never edited.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from ..core.circumstances import CircumstanceAssessment
from ..core.errors import DisruptionInputError
from ..core.models import (
    CancellationInput,
    DelayInput,
    DeniedBoardingInput,
    DisruptionType,
    DowngradeInput,
    EligibilityDecision,
    ReconciledFlightRecord,
    Regulation,
    RouteContext,
)

CENT = Decimal("0.01")


def money(value: Decimal | int | float | str) -> Decimal:
    """Quantize an amount to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class EvaluationContext:
    """Everything a policy needs to decide one disruption."""

    flight: ReconciledFlightRecord
    disruption: DelayInput | CancellationInput | DeniedBoardingInput | DowngradeInput
    disruption_type: DisruptionType
    route: RouteContext
    circumstances: CircumstanceAssessment
    low_confidence_threshold: float = 0.5


class RegulationPolicy:
    """
    Base class for a jurisdiction's compensation rules.

    Subclasses set ``regulation`` and ``currency``, implement ``applies_to``
    and the four ``evaluate_*`` methods. Every method returns a finished
    EligibilityDecision built through ``decide``.
    """

    regulation: Regulation
    currency: str = "EUR"
    name: str = ""
    # Lower priorities are tried first during selection
    priority: int = 100
    additional_rights: tuple[str, ...] = ()

    def applies_to(self, route: RouteContext) -> bool:
        raise NotImplementedError

    def evaluate(self, ctx: EvaluationContext) -> EligibilityDecision:
        """Dispatch to the rule set for the disruption type."""
        handlers = {
            DisruptionType.DELAY: self.evaluate_delay,
            DisruptionType.CANCELLATION: self.evaluate_cancellation,
            DisruptionType.DENIED_BOARDING: self.evaluate_denied_boarding,
            DisruptionType.DOWNGRADE: self.evaluate_downgrade,
        }
        return handlers[ctx.disruption_type](ctx)

    def evaluate_delay(self, ctx: EvaluationContext) -> EligibilityDecision:
        raise NotImplementedError

    def evaluate_cancellation(self, ctx: EvaluationContext) -> EligibilityDecision:
        raise NotImplementedError

    def evaluate_denied_boarding(self, ctx: EvaluationContext) -> EligibilityDecision:
        raise NotImplementedError

    def evaluate_downgrade(self, ctx: EvaluationContext) -> EligibilityDecision:
        raise NotImplementedError

    def decide(
        self,
        ctx: EvaluationContext,
        eligible: bool,
        reason: str,
        amount: Decimal | int = 0,
        additional_rights: Iterable[str] | None = None,
    ) -> EligibilityDecision:
        """Build the decision, carrying confidence and route facts from the context."""
        confidence = ctx.flight.confidence
        rights = list(self.additional_rights if additional_rights is None else additional_rights)
        return EligibilityDecision(
            eligible=eligible,
            amount=money(amount) if eligible else money(0),
            currency=self.currency,
            regulation=self.regulation,
            reason=reason,
            confidence=confidence,
            low_confidence=confidence < ctx.low_confidence_threshold,
            disruption_type=ctx.disruption_type,
            distance_km=ctx.route.distance_km,
            distance_band=ctx.route.distance_band,
            extraordinary_category=(
                ctx.circumstances.category if ctx.circumstances.extraordinary else None
            ),
            additional_rights=rights,
        )

    @staticmethod
    def require(value: object, field_name: str) -> None:
        """Raise a structured input error when a policy-specific field is absent."""
        if value is None:
            raise DisruptionInputError([field_name])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.regulation.value})"


class RegulationRegistry:
    """
    Collection of regulation policies keyed by regulation.

    Selection walks the policies by ascending ``priority`` (registration order
    breaks ties) and returns the first one that applies to the route.
    """

    def __init__(self, policies: Iterable[RegulationPolicy] = ()) -> None:
        self._policies: dict[Regulation, RegulationPolicy] = {}
        for policy in policies:
            self.register(policy)

    def __len__(self) -> int:
        return len(self._policies)

    def __iter__(self) -> Iterator[RegulationPolicy]:
        return iter(self.ordered())

    def __contains__(self, regulation: object) -> bool:
        return regulation in self._policies

    def register(self, policy: RegulationPolicy) -> None:
        """Add or replace the policy for its regulation."""
        self._policies[policy.regulation] = policy

    def unregister(self, regulation: Regulation) -> bool:
        return self._policies.pop(regulation, None) is not None

    def get(self, regulation: Regulation | str) -> RegulationPolicy | None:
        return self._policies.get(Regulation(regulation))

    def select(self, route: RouteContext) -> RegulationPolicy | None:
        """First registered policy covering the route, or None."""
        for policy in self.ordered():
            if policy.applies_to(route):
                return policy
        return None

    def ordered(self) -> list[RegulationPolicy]:
        return sorted(self._policies.values(), key=lambda p: p.priority)

    def regulations(self) -> list[Regulation]:
        return [policy.regulation for policy in self.ordered()]


# Singleton registry populated by ``register_regulation``
_default_registry: RegulationRegistry | None = None


def get_default_registry() -> RegulationRegistry:
    """Get the default regulation registry instance."""
    global _default_registry
    if _default_registry is None:
        _default_registry = RegulationRegistry()
    return _default_registry


def register_regulation(cls: type[RegulationPolicy]) -> type[RegulationPolicy]:
    """Class decorator registering a policy with the default registry."""
    get_default_registry().register(cls())
    return cls
