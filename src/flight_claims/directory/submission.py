"""
Submission package generation.
Turns a claim plus its airline configuration into the channel-specific
package an operator or automated filer sends to the airline.
"""

import logging
from collections.abc import Callable
from typing import Any

from ..core.models import Claim, SubmissionMethod, SubmissionPackage
from .airlines import AirlineConfig

logger = logging.getLogger(__name__)


def _delay_duration(claim: Claim) -> str | None:
    if claim.flight_record is None:
        return None
    minutes = claim.flight_record.delay_minutes
    if claim.flight_record.cancelled:
        return "cancelled"
    return f"{minutes // 60}h {minutes % 60:02d}m"


def _delay_reason(claim: Claim) -> str | None:
    if claim.flight_record is not None and claim.flight_record.disruption_reason:
        return claim.flight_record.disruption_reason
    return getattr(claim.disruption, "reason", None)


# Claim accessors for the field names airlines list in ``required_fields``.
CLAIM_FIELD_ACCESSORS: dict[str, Callable[[Claim], Any]] = {
    "passenger_name": lambda c: c.passenger.full_name,
    "email": lambda c: c.passenger.email,
    "flight_number": lambda c: c.flight.flight_number,
    "departure_date": lambda c: c.flight.flight_date.isoformat(),
    "departure_airport": lambda c: c.flight.origin,
    "arrival_airport": lambda c: c.flight.destination,
    "booking_reference": lambda c: c.booking_reference,
    "delay_duration": _delay_duration,
    "delay_reason": _delay_reason,
}


def claim_field_value(claim: Claim, field_name: str) -> str | None:
    """Read a named submission field from a claim; empty values become None."""
    accessor = CLAIM_FIELD_ACCESSORS.get(field_name)
    if accessor is None:
        return None
    value = accessor(claim)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return str(value)


def missing_claim_fields(claim: Claim, required: list[str]) -> list[str]:
    """Names of required fields the claim cannot supply."""
    return [name for name in required if claim_field_value(claim, name) is None]


def _compensation_line(claim: Claim) -> str:
    estimate = claim.compensation_estimate
    if estimate is None or not estimate.eligible:
        return "I request compensation as provided by the applicable regulation."
    regulation = estimate.regulation.value if estimate.regulation else "the applicable regulation"
    return (
        f"Under {regulation} I am entitled to compensation of "
        f"{estimate.amount} {estimate.currency}."
    )


def _render_body(claim: Claim, config: AirlineConfig) -> str:
    flight = claim.flight
    lines = [
        f"Dear {config.name} Customer Relations,",
        "",
        f"I am writing to claim compensation for flight {flight.flight_number} "
        f"from {flight.origin} to {flight.destination} on {flight.flight_date.isoformat()}.",
        f"Disruption: {claim.disruption_type.value.replace('_', ' ')}.",
    ]
    duration = _delay_duration(claim)
    if duration and duration != "cancelled":
        lines.append(f"Delay at arrival: {duration}.")
    reason = _delay_reason(claim)
    if reason:
        lines.append(f"Reason given: {reason}.")
    if claim.booking_reference:
        lines.append(f"Booking reference: {claim.booking_reference}.")
    lines.extend(
        [
            "",
            _compensation_line(claim),
            "",
            "Supporting documents are attached.",
            "",
            "Kind regards,",
            claim.passenger.full_name,
            claim.passenger.email,
        ]
    )
    return "\n".join(lines)


def build_submission_package(
    claim: Claim, config: AirlineConfig
) -> tuple[SubmissionPackage | None, list[str]]:
    """
    Generate the airline-facing submission for a claim.

    Args:
        claim: The claim to package
        config: Directory entry for the operating airline

    Returns:
        The package and an empty error list, or None and the validation
        errors that blocked generation
    """
    errors: list[str] = []

    recipient = config.submission_address
    if not recipient:
        errors.append(
            f"{config.name} has no {config.submission_method.value} address configured"
        )

    for name in missing_claim_fields(claim, config.required_fields):
        errors.append(f"missing required field: {name}")

    if errors:
        logger.info(
            "Submission package for claim %s blocked: %s", claim.claim_id, "; ".join(errors)
        )
        return None, errors

    form_fields: dict[str, str] = {}
    if config.submission_method == SubmissionMethod.WEB_FORM:
        for name, label in config.form_fields.items():
            value = claim_field_value(claim, name)
            if value is not None:
                form_fields[label] = value

    package = SubmissionPackage(
        method=config.submission_method,
        recipient=recipient or "",
        subject=(
            f"Compensation claim: {claim.flight.flight_number} "
            f"{claim.flight.flight_date.isoformat()} ({claim.claim_id})"
        ),
        body=_render_body(claim, config),
        attachments=list(config.required_documents),
        form_fields=form_fields,
    )
    return package, []
