#!/usr/bin/env python3
"""
Sample Claim Script.
Walks one delay claim from quote to airline rejection and fee refund.
"""

from datetime import date, timedelta
from decimal import Decimal

from flight_claims import ClaimEngine, ClaimStatus, ReconciledFlightRecord
from flight_claims.core.models import utcnow


def main() -> None:
    """Run the sample claim walkthrough."""
    print("=" * 70)
    print("FLIGHT CLAIMS ENGINE - SAMPLE CLAIM")
    print("=" * 70)
    print()

    engine = ClaimEngine(providers=[])
    flight_date = date(2025, 3, 1)

    # Quote before payment, from what the passenger tells us
    decision = engine.quote(
        "FR1234", flight_date, "DUB", "BCN", "delay",
        delay_minutes=215, reason="technical fault",
    )
    print(f"Quote: eligible={decision.eligible} {decision.amount} {decision.currency}")
    print(f"  {decision.reason}")
    print()

    now = utcnow()
    claim = engine.service.create_claim(
        passenger={"first_name": "John", "last_name": "Smith", "email": "john.smith@example.com"},
        flight={
            "flight_number": "FR1234",
            "carrier": "FR",
            "flight_date": flight_date,
            "origin": "DUB",
            "destination": "BCN",
        },
        disruption_type="delay",
        disruption={"reason": "technical fault"},
        booking_reference="ABC123",
        flight_record=ReconciledFlightRecord.manual(
            "FR1234", flight_date, delay_minutes=215, reason="technical fault"
        ),
        documents=[
            {"kind": "boarding_pass", "reference": "bp.pdf"},
            {"kind": "delay_proof", "reference": "delay.pdf"},
        ],
        now=now,
    )
    print(f"Created {claim.claim_id} ({claim.status.value})")

    claim = engine.service.payment_captured(claim.claim_id, Decimal("29.00"), "EUR", "pi_demo", captured_at=now)
    print(f"Payment captured, claim now {claim.status.value}")
    print()
    print(claim.submission.body)
    print()

    service = engine.service
    service.advance(claim.claim_id, ClaimStatus.FILED, airline_reference="RYR-0001", now=now)
    later = now + timedelta(days=30)
    service.advance(claim.claim_id, ClaimStatus.AIRLINE_RESPONDED, now=later)
    service.advance(claim.claim_id, ClaimStatus.REJECTED, actor="ops", now=later)

    final = engine.store.get(claim.claim_id)
    print(f"Final status: {final.status.value}")
    if final.refund:
        print(f"Refunded {final.refund.amount} {final.refund.currency} ({final.refund.reason.value})")
    print()

    print("-" * 70)
    print("EVENTS")
    print("-" * 70)
    for event in engine.notifier.events:
        print(f"  {event.name}")
    print()

    print("-" * 70)
    print("REDACTED EXPORT")
    print("-" * 70)
    export = engine.export_claim(claim.claim_id)
    print(f"Passenger: {export['passenger']}")

    print()
    print(engine.pipeline_report().to_text())
    engine.close()


if __name__ == "__main__":
    main()
