"""
Extraordinary circumstances classification.
Maps a free-text disruption reason onto a category and decides whether the
airline is exempt from paying compensation.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class CircumstanceCategory:
    """A named group of reason patterns."""

    name: str
    extraordinary: bool
    patterns: tuple[str, ...]


@dataclass(frozen=True)
class CircumstanceAssessment:
    """Classification result for one disruption reason."""

    reason: str | None
    category: str
    extraordinary: bool
    matched: str | None = None


# Order matters: airline-internal causes win over extraordinary keywords,
# and "bird strike" is matched before the generic strike category.
DEFAULT_CATEGORIES: tuple[CircumstanceCategory, ...] = (
    CircumstanceCategory(
        "technical",
        False,
        (r"technical", r"mechanical", r"maintenance", r"engine", r"aircraft\s+(?:fault|problem|issue)"),
    ),
    CircumstanceCategory(
        "operational",
        False,
        (
            r"crew",
            r"pilots?\s+strike",
            r"airline\s+(?:staff\s+)?strike",
            r"staff\s+shortage",
            r"overbook",
            r"operational",
            r"late\s+arriv",
            r"rotation",
            r"baggage",
            r"fuel",
        ),
    ),
    CircumstanceCategory(
        "weather",
        True,
        (r"weather", r"storm", r"snow", r"\bfog\b", r"\bice\b", r"icing", r"hurricane", r"tornado", r"thunder", r"volcanic\s+ash"),
    ),
    CircumstanceCategory(
        "air_traffic",
        True,
        (r"air\s+traffic\s+control", r"\batc\b", r"airspace", r"slot\s+restriction", r"eurocontrol"),
    ),
    CircumstanceCategory(
        "security",
        True,
        (r"security", r"terror", r"\bthreat\b", r"\bbomb\b", r"suspicious"),
    ),
    CircumstanceCategory(
        "wildlife",
        True,
        (r"bird\s*strike", r"wildlife"),
    ),
    CircumstanceCategory(
        "strike",
        True,
        (r"\bstrike\b", r"industrial\s+action", r"walkout"),
    ),
    CircumstanceCategory(
        "medical",
        True,
        (r"medical\s+emergency", r"emergency\s+landing", r"diversion"),
    ),
    CircumstanceCategory(
        "political",
        True,
        (r"political\s+unrest", r"\bwar\b", r"natural\s+disaster", r"earthquake"),
    ),
)


class ExtraordinaryCircumstancesClassifier:
    """
    Configurable keyword classifier for disruption reasons.

    Categories are evaluated in order; the first category with a matching
    pattern wins. Unmatched reasons are treated as within the airline's
    control.
    """

    def __init__(
        self, categories: tuple[CircumstanceCategory, ...] | list[CircumstanceCategory] | None = None
    ) -> None:
        self._categories: list[CircumstanceCategory] = list(categories or DEFAULT_CATEGORIES)
        self._compiled: dict[str, list[re.Pattern[str]]] = {}
        for category in self._categories:
            self._compile(category)

    def _compile(self, category: CircumstanceCategory) -> None:
        self._compiled[category.name] = [
            re.compile(pattern, re.IGNORECASE) for pattern in category.patterns
        ]

    @property
    def categories(self) -> list[CircumstanceCategory]:
        return list(self._categories)

    def add_category(self, category: CircumstanceCategory, first: bool = False) -> None:
        """Register an extra category, optionally ahead of the defaults."""
        self._categories = [c for c in self._categories if c.name != category.name]
        if first:
            self._categories.insert(0, category)
        else:
            self._categories.append(category)
        self._compile(category)

    def classify(self, reason: str | None) -> CircumstanceAssessment:
        """Classify a free-text disruption reason."""
        if not reason or not reason.strip():
            return CircumstanceAssessment(reason=reason, category="unknown", extraordinary=False)

        for category in self._categories:
            for pattern in self._compiled[category.name]:
                match = pattern.search(reason)
                if match:
                    return CircumstanceAssessment(
                        reason=reason,
                        category=category.name,
                        extraordinary=category.extraordinary,
                        matched=match.group(0),
                    )

        return CircumstanceAssessment(reason=reason, category="other", extraordinary=False)

    def is_extraordinary(self, reason: str | None) -> bool:
        return self.classify(reason).extraordinary
