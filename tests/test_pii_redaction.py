"""
Tests for PII redaction functionality.
"""

import json
import re

import pytest

from flight_claims.utils.pii_redaction import PIIRedactor, redact_pii


class TestPIIRedactor:
    """Tests for PIIRedactor class."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        """Create a redactor instance."""
        return PIIRedactor()

    def test_redact_phone(self, redactor: PIIRedactor) -> None:
        """Test international phone number redaction."""
        text = "Call me at +44 20 7946 0958"
        result = redactor.redact_string(text)

        assert "7946" not in result
        assert "[REDACTED]" in result

    def test_flight_numbers_preserved(self, redactor: PIIRedactor) -> None:
        """Test flight numbers, dates and amounts are not mistaken for PII."""
        text = "FR1234 on 2025-03-01 delayed 200 minutes, 250.00 EUR"
        assert redactor.redact_string(text) == text

    def test_redact_email(self, redactor: PIIRedactor) -> None:
        """Test email redaction."""
        text = "Email: john.doe@example.com"
        result = redactor.redact_string(text)

        assert "john.doe@example.com" not in result
        assert "[REDACTED]" in result

    def test_redact_card_and_passport(self, redactor: PIIRedactor) -> None:
        """Test card and passport numbers are redacted."""
        text = "Paid with 4111 1111 1111 1111, passport number: X1234567"
        result = redactor.redact_string(text)

        assert "4111" not in result
        assert "X1234567" not in result

    def test_redact_titled_name(self, redactor: PIIRedactor) -> None:
        """Test titled names in free text are redacted."""
        result = redactor.redact_string("Spoke with Mrs Smith at the gate")
        assert "Smith" not in result

    def test_names_kept_when_disabled(self) -> None:
        """Test name redaction can be switched off."""
        redactor = PIIRedactor(redact_names=False)
        assert "Smith" in redactor.redact_string("Spoke with Mrs Smith at the gate")

    def test_redact_dict(self, redactor: PIIRedactor) -> None:
        """Test PII fields are redacted by key."""
        data = {
            "passenger_name": "John Smith",
            "phone": "555-123-4567",
            "name": "Ryanair",
            "notes": "Technical fault",
        }

        result = redactor.redact_dict(data)

        assert result["passenger_name"] == "[REDACTED]"
        assert result["phone"] == "[REDACTED]"
        # Airline names are not personal data
        assert result["name"] == "Ryanair"
        assert result["notes"] == "Technical fault"

    def test_redact_nested(self, redactor: PIIRedactor) -> None:
        """Test nested dictionaries and lists are redacted."""
        data = {
            "passenger": {"email": "test@example.com"},
            "notes": [{"text": "Reached on +1 415 555 0100"}],
        }

        result = redactor.redact_dict(data)

        assert result["passenger"]["email"] == "[REDACTED]"
        assert "555" not in result["notes"][0]["text"]

    def test_custom_pattern(self) -> None:
        """Test custom patterns are applied and tagged."""
        redactor = PIIRedactor(custom_patterns={"booking": re.compile(r"\bPNR-[A-Z0-9]{6}\b")})
        result = redactor.redact_string("Booking PNR-ABC123")

        assert "PNR-ABC123" not in result
        assert redactor.get_redaction_summary() == {"custom_booking": 1}

    def test_redaction_log(self, redactor: PIIRedactor) -> None:
        """Test that redaction log is maintained."""
        redactor.redact_string("Call +33 1 23 45 67 89 or email test@example.com")

        summary = redactor.get_redaction_summary()
        assert summary.get("email") == 1
        assert summary.get("phone") == 1

    def test_clear_log(self, redactor: PIIRedactor) -> None:
        """Test clearing redaction log."""
        redactor.redact_string("Email: test@example.com")
        assert len(redactor.get_redaction_log()) > 0

        redactor.clear_redaction_log()
        assert len(redactor.get_redaction_log()) == 0


class TestRedactClaim:
    """Tests for claim redaction."""

    def test_known_values_removed_everywhere(self, make_claim) -> None:
        """Test the passenger's name and email are removed from free text."""
        claim = make_claim()
        claim.add_note("Called Jane Doe; Doe confirmed via jane.doe@example.com", author="ops")

        redacted = PIIRedactor().redact_claim(claim)
        dumped = json.dumps(redacted)

        assert "Jane" not in dumped
        assert "Doe" not in dumped
        assert "jane.doe@example.com" not in dumped
        assert redacted["redacted"] is True
        assert redacted["flight"]["flight_number"] == "FR1234"
        assert redacted["booking_reference"] == "ABC123"


class TestRedactPiiFunction:
    """Tests for the redact_pii convenience function."""

    def test_redact_dict(self) -> None:
        """Test redacting a dictionary."""
        data = {"phone": "555-123-4567", "status": "filed"}
        result = redact_pii(data)

        assert result["phone"] == "[REDACTED]"
        assert result["status"] == "filed"

    def test_redact_claim(self, make_claim) -> None:
        """Test redacting a claim model."""
        result = redact_pii(make_claim())
        assert result["passenger"]["email"] == "[REDACTED]"

    def test_unsupported_type(self) -> None:
        """Test that unsupported types raise error."""
        with pytest.raises(TypeError):
            redact_pii("just a string")  # type: ignore
