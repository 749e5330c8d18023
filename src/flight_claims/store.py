"""
Record-store interface for claims.
The core reads and writes claims by identifier and by status-filtered
queries; InMemoryClaimStore is the reference implementation.
"""

import threading
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from .core.errors import ClaimNotFound, StaleClaimError
from .core.models import Claim, ClaimStatus


@runtime_checkable
class ClaimStore(Protocol):
    """Persistence boundary used by the lifecycle and refund services."""

    def add(self, claim: Claim) -> Claim:
        ...

    def get(self, claim_id: str) -> Claim:
        ...

    def save(self, claim: Claim) -> Claim:
        ...

    def query(self, statuses: Iterable[ClaimStatus] | None = None) -> list[Claim]:
        ...

    def ready_to_file(self) -> list[Claim]:
        ...

    def overdue(self, days: int, now: datetime) -> list[Claim]:
        ...

    def needing_follow_up(self, now: datetime) -> list[Claim]:
        ...

    def find_duplicates(self, claim: Claim) -> list[Claim]:
        ...


class InMemoryClaimStore:
    """
    Thread-safe dictionary-backed claim store.

    Claims are copied on the way in and out, so callers only change stored
    state through ``save``. ``save`` enforces optimistic concurrency: the
    claim's ``version`` must match the stored one, and is incremented.
    """

    def __init__(self, claims: Iterable[Claim] = ()) -> None:
        self._claims: dict[str, Claim] = {}
        self._lock = threading.RLock()
        for claim in claims:
            self.add(claim)

    def __len__(self) -> int:
        with self._lock:
            return len(self._claims)

    def __contains__(self, claim_id: object) -> bool:
        with self._lock:
            return claim_id in self._claims

    def add(self, claim: Claim) -> Claim:
        with self._lock:
            if claim.claim_id in self._claims:
                raise ValueError(f"Claim {claim.claim_id} already exists")
            self._claims[claim.claim_id] = claim.model_copy(deep=True)
            return claim.model_copy(deep=True)

    def get(self, claim_id: str) -> Claim:
        with self._lock:
            stored = self._claims.get(claim_id)
            if stored is None:
                raise ClaimNotFound(claim_id)
            return stored.model_copy(deep=True)

    def save(self, claim: Claim) -> Claim:
        """
        Persist a modified claim.

        Raises:
            ClaimNotFound: If the claim was never added
            StaleClaimError: If the stored version moved on since ``claim`` was read
        """
        with self._lock:
            stored = self._claims.get(claim.claim_id)
            if stored is None:
                raise ClaimNotFound(claim.claim_id)
            if stored.version != claim.version:
                raise StaleClaimError(claim.claim_id, claim.version, stored.version)
            updated = claim.model_copy(deep=True, update={"version": claim.version + 1})
            self._claims[claim.claim_id] = updated
            return updated.model_copy(deep=True)

    def all(self) -> list[Claim]:
        with self._lock:
            return [c.model_copy(deep=True) for c in self._claims.values()]

    def query(self, statuses: Iterable[ClaimStatus] | None = None) -> list[Claim]:
        wanted = set(statuses) if statuses is not None else None
        return [c for c in self.all() if wanted is None or c.status in wanted]

    def ready_to_file(self) -> list[Claim]:
        return self.query([ClaimStatus.READY_TO_FILE])

    def overdue(self, days: int, now: datetime) -> list[Claim]:
        """Filed claims still open ``days`` or more days after filing."""
        cutoff = now - timedelta(days=days)
        return [
            c
            for c in self.all()
            if c.filed_at is not None and c.filed_at <= cutoff and not c.status.is_closed
        ]

    def needing_follow_up(self, now: datetime) -> list[Claim]:
        return [
            c
            for c in self.all()
            if c.next_follow_up is not None
            and c.next_follow_up <= now
            and not c.status.is_closed
        ]

    def find_duplicates(self, claim: Claim) -> list[Claim]:
        """Other claims by the same passenger for the same flight and date."""
        email = claim.passenger.email.strip().lower()
        return [
            other
            for other in self.all()
            if other.claim_id != claim.claim_id
            and other.flight.flight_number == claim.flight.flight_number
            and other.flight.flight_date == claim.flight.flight_date
            and other.passenger.email.strip().lower() == email
            and other.status != ClaimStatus.REFUNDED
        ]
