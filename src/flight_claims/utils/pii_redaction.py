"""
PII Redaction Module.
Strips passenger-identifying data from claim records before they are
logged, exported or shown outside the operator console.
"""

import re
from dataclasses import dataclass
from typing import Any

from ..core.models import Claim


@dataclass
class RedactionResult:
    """Result of a redaction operation."""

    original_value: str
    redacted_value: str
    pii_type: str
    field_path: str


class PIIRedactor:
    """
    Redacts passenger PII from claim data.

    Supports redaction of:
    - Passenger names (including inside generated letters)
    - Email addresses
    - Phone numbers
    - Payment card numbers
    - Passport numbers
    """

    # Redaction placeholder
    REDACTED = "[REDACTED]"

    # PII detection patterns
    PATTERNS: dict[str, re.Pattern[str]] = {
        "email": re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b"),
        "credit_card": re.compile(r"\b(?:\d{4}[-\s]?){3}\d{4}\b"),
        "phone": re.compile(r"(?<![\w-])\+\d{1,3}[\s.-]?(?:\(?\d{1,4}\)?[\s.-]?){2,4}\d{2,4}\b"),
        "passport": re.compile(r"\bpassport(?:\s+(?:no\.?|number))?[:\s]+[A-Z0-9]{6,9}\b", re.IGNORECASE),
    }

    # Name patterns (common titles followed by words)
    NAME_TITLE_PATTERN = re.compile(
        r"\b(?:Mr\.?|Mrs\.?|Ms\.?|Dr\.?)\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?"
    )

    # Keys whose whole value is PII; matched exactly, since airline records
    # carry non-personal "name" and "address" fields.
    PII_FIELDS: set[str] = {
        "first_name",
        "last_name",
        "full_name",
        "passenger_name",
        "email",
        "phone",
        "date_of_birth",
        "passport_number",
        "home_address",
    }

    def __init__(
        self,
        redact_names: bool = True,
        custom_patterns: dict[str, re.Pattern[str]] | None = None,
    ) -> None:
        """
        Initialize the PII redactor.

        Args:
            redact_names: Whether to redact titled names found in free text
            custom_patterns: Additional custom patterns to redact
        """
        self.redact_names = redact_names
        self.custom_patterns = custom_patterns or {}
        self._redaction_log: list[RedactionResult] = []

    def _apply(self, pattern: re.Pattern[str], pii_type: str, value: str, field_path: str) -> str:
        for match in pattern.findall(value):
            if match:
                self._redaction_log.append(
                    RedactionResult(match, self.REDACTED, pii_type, field_path)
                )
                value = value.replace(match, self.REDACTED)
        return value

    def redact_string(
        self, value: str, field_path: str = "", known_values: dict[str, str] | None = None
    ) -> str:
        """
        Redact PII from a string value.

        Args:
            value: The string to redact
            field_path: The path to this field (for the redaction log)
            known_values: Exact PII strings to remove, keyed by PII type

        Returns:
            The redacted string
        """
        if not isinstance(value, str) or not value:
            return value

        result = value
        for pii_type, known in (known_values or {}).items():
            if known and known in result:
                self._redaction_log.append(
                    RedactionResult(known, self.REDACTED, pii_type, field_path)
                )
                result = result.replace(known, self.REDACTED)

        for pii_type, pattern in self.PATTERNS.items():
            result = self._apply(pattern, pii_type, result, field_path)
        for pii_type, pattern in self.custom_patterns.items():
            result = self._apply(pattern, f"custom_{pii_type}", result, field_path)
        if self.redact_names:
            result = self._apply(self.NAME_TITLE_PATTERN, "name", result, field_path)
        return result

    def redact_dict(
        self,
        data: dict[str, Any],
        path_prefix: str = "",
        known_values: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        """
        Recursively redact PII from a dictionary.

        Args:
            data: The dictionary to redact
            path_prefix: Current path prefix for the redaction log
            known_values: Exact PII strings to remove wherever they appear

        Returns:
            The redacted dictionary
        """
        result: dict[str, Any] = {}
        for key, value in data.items():
            field_path = f"{path_prefix}.{key}" if path_prefix else key
            if isinstance(value, dict):
                result[key] = self.redact_dict(value, field_path, known_values)
            elif isinstance(value, list):
                result[key] = self.redact_list(value, field_path, known_values)
            elif isinstance(value, str) and key.lower() in self.PII_FIELDS and value:
                self._redaction_log.append(
                    RedactionResult(value, self.REDACTED, "pii_field", field_path)
                )
                result[key] = self.REDACTED
            elif isinstance(value, str):
                result[key] = self.redact_string(value, field_path, known_values)
            else:
                result[key] = value
        return result

    def redact_list(
        self,
        data: list[Any],
        path_prefix: str = "",
        known_values: dict[str, str] | None = None,
    ) -> list[Any]:
        """Recursively redact PII from a list."""
        result = []
        for i, item in enumerate(data):
            field_path = f"{path_prefix}[{i}]"
            if isinstance(item, dict):
                result.append(self.redact_dict(item, field_path, known_values))
            elif isinstance(item, list):
                result.append(self.redact_list(item, field_path, known_values))
            elif isinstance(item, str):
                result.append(self.redact_string(item, field_path, known_values))
            else:
                result.append(item)
        return result

    def redact_claim(self, claim: Claim) -> dict[str, Any]:
        """
        Log-safe view of a claim.

        The passenger's own name and email are removed from every text field,
        including the generated submission letter and internal notes.

        Args:
            claim: The claim to redact

        Returns:
            A JSON-compatible dict with PII redacted
        """
        known = {
            "name": claim.passenger.full_name,
            "last_name": claim.passenger.last_name,
            "email": claim.passenger.email,
        }
        # Longest first so a full name is not split by its surname
        ordered = dict(sorted(known.items(), key=lambda kv: len(kv[1]), reverse=True))
        redacted = self.redact_dict(claim.model_dump(mode="json"), known_values=ordered)
        redacted["redacted"] = True
        return redacted

    def get_redaction_log(self) -> list[RedactionResult]:
        """Get the log of all redactions performed."""
        return self._redaction_log.copy()

    def clear_redaction_log(self) -> None:
        self._redaction_log.clear()

    def get_redaction_summary(self) -> dict[str, int]:
        """Get a summary of redactions by type."""
        summary: dict[str, int] = {}
        for result in self._redaction_log:
            summary[result.pii_type] = summary.get(result.pii_type, 0) + 1
        return summary


# Convenience function
def redact_pii(data: Claim | dict[str, Any]) -> dict[str, Any]:
    """
    Redact PII from a claim or a plain dict.

    Raises:
        TypeError: For any other input type
    """
    redactor = PIIRedactor()
    if isinstance(data, Claim):
        return redactor.redact_claim(data)
    if isinstance(data, dict):
        return redactor.redact_dict(data)
    raise TypeError(f"Unsupported data type: {type(data)}")
