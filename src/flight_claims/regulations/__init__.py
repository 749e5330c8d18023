"""
Per-jurisdiction compensation policies.

Importing this package registers the bundled policies with the default
registry. Selection order by priority: UK261, EU261, Swiss, Norwegian,
Canadian, US DOT.
"""

from .base import (
    EvaluationContext,
    RegulationPolicy,
    RegulationRegistry,
    get_default_registry,
    money,
    register_regulation,
)
from .eu261 import (
    BandedCompensationPolicy,
    EU261Policy,
    NorwegianPolicy,
    SwissPolicy,
    UK261Policy,
)
from .canada import CanadianPolicy
from .us_dot import USDOTPolicy

__all__ = [
    "BandedCompensationPolicy",
    "CanadianPolicy",
    "EU261Policy",
    "EvaluationContext",
    "NorwegianPolicy",
    "RegulationPolicy",
    "RegulationRegistry",
    "SwissPolicy",
    "UK261Policy",
    "USDOTPolicy",
    "get_default_registry",
    "money",
    "register_regulation",
]
