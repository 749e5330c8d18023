"""Utility modules for the Flight Claims engine."""

from .log import setup_logging
from .pii_redaction import PIIRedactor, redact_pii

__all__ = ["PIIRedactor", "redact_pii", "setup_logging"]
