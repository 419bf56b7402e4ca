"""Duplicate detection for arrival records.

Two records collide when they share the composite key
``(party_name, invoice_no, invoice_date, amount)``:

- strings are trimmed and lower-cased, ``None`` compares as ``""``;
- dates compare as ``yyyy-MM-dd`` so a stored timestamp
  (``"2024-01-01T00:00:00Z"``) equals a freshly typed ``"2024-01-01"``;
- amounts compare as parsed floats (``"100"`` equals ``100``).

A missing or unparseable amount never collides with anything, including
another unparseable amount.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .models import ArrivalRecord
from .normalizers import canonical_date, match_key, to_amount

DUPLICATE_MESSAGE = "Duplicate entry found (Party Name + Invoice No + Invoice Date + Amount)."


@dataclass(frozen=True, slots=True)
class DuplicateKey:
    party_name: str
    invoice_no: str
    invoice_date: str
    amount: float | None

    @classmethod
    def of(cls, record: ArrivalRecord) -> DuplicateKey:
        return cls(
            party_name=match_key(record.get("party_name")),
            invoice_no=match_key(record.get("invoice_no")),
            invoice_date=canonical_date(record.get("invoice_date")),
            amount=to_amount(record.get("amount")),
        )

    def collides(self, other: DuplicateKey) -> bool:
        if self.amount is None or other.amount is None:
            return False
        return (
            self.party_name == other.party_name
            and self.invoice_no == other.invoice_no
            and self.invoice_date == other.invoice_date
            and self.amount == other.amount
        )


def find_duplicate(
    candidate: ArrivalRecord,
    records: Iterable[ArrivalRecord],
) -> ArrivalRecord | None:
    """Return the first record colliding with ``candidate``, in collection order."""

    key = DuplicateKey.of(candidate)
    if key.amount is None:
        return None
    for r in records:
        if key.collides(DuplicateKey.of(r)):
            return r
    return None


__all__ = ["DUPLICATE_MESSAGE", "DuplicateKey", "find_duplicate"]
