"""Data models and type aliases for ``bundle_ledger``.

Arrival records travel as plain mappings keyed by the ``bundle_arrivals``
column names. Values may be raw form strings (``"2024-03-01"``, ``"500"``) or
parsed values (``date``, ``float``) depending on where the record comes from;
every consumer canonicalizes through :mod:`bundle_ledger.normalizers` rather
than trusting the representation.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Arrival records
# ---------------------------------------------------------------------------

type ArrivalRecord = Mapping[str, Any]
"""One bundle arrival keyed by column name.

Keys: ``id``, ``date``, ``lorry_type``, ``lorry_no``, ``city``,
``party_name``, ``account_type``, ``bundle``, ``invoice_no``,
``invoice_date``, ``amount``, ``phone_no``, ``status``, ``itemtype``,
``created_at``, ``updated_at``. Store-assigned keys (``id``, timestamps) are
absent on candidates that have not been persisted yet.
"""

type Records = Iterable[ArrivalRecord]

# Fields a caller may write. Store-assigned keys are excluded.
EDITABLE_FIELDS: tuple[str, ...] = (
    "date",
    "lorry_type",
    "lorry_no",
    "city",
    "party_name",
    "account_type",
    "bundle",
    "invoice_no",
    "invoice_date",
    "amount",
    "phone_no",
    "status",
    "itemtype",
)

ACCOUNT_TYPES: tuple[str, ...] = ("S", "T", "R")
ACCOUNT_LABELS: dict[str, str] = {"S": "SS", "T": "ST", "R": "SR"}

STATUS_OPEN = "OPEN"
STATUS_PENDING = "PENDING"
STATUSES: tuple[str, ...] = ("", STATUS_OPEN, STATUS_PENDING)
# Filter value selecting records whose status was never set.
STATUS_UNSET = "UNSET"


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """Transient view filter; empty values mean "no constraint".

    Attributes
    ----------
    date:
        Exact arrival date (``YYYY-MM-DD`` or a ``date``).
    month:
        Arrival year-month, ``YYYY-MM``.
    range_from / range_to:
        Inclusive date bounds; either may be omitted for a one-sided range.
    range_field:
        ``"invoice"`` applies the range to ``invoice_date``; anything else
        (default ``"arrival"``) to ``date``.
    lorry_type / party_name:
        Case-insensitive substrings.
    account_types:
        Accepted account types (OR semantics). Empty accepts all.
    status:
        ``OPEN``, ``PENDING`` or :data:`STATUS_UNSET`.
    """

    date: Any = ""
    month: str = ""
    range_from: Any = ""
    range_to: Any = ""
    range_field: Literal["arrival", "invoice"] = "arrival"
    lorry_type: str = ""
    party_name: str = ""
    account_types: frozenset[str] = field(default_factory=frozenset)
    status: str = ""

    def __post_init__(self) -> None:
        # Accept lists/tuples from callers; instances stay hashable.
        if not isinstance(self.account_types, frozenset):
            object.__setattr__(self, "account_types", frozenset(self.account_types or ()))

    @property
    def is_empty(self) -> bool:
        return not (
            self.date
            or self.month
            or self.range_from
            or self.range_to
            or self.lorry_type
            or self.party_name
            or self.account_types
            or self.status
        )


@dataclass(frozen=True, slots=True)
class Page:
    """One page of an ordered record sequence."""

    items: list[ArrivalRecord]
    page: int
    per_page: int
    total_items: int
    total_pages: int


# ---------------------------------------------------------------------------
# Derived numbers
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Balances:
    """Running totals derived from the full, unfiltered collection.

    ``total_with_opening`` is always ``opening_balance + current_day_total``:
    month-to-date including today, not an all-time figure.
    """

    opening_balance: float
    current_day_total: float
    total_with_opening: float
    all_time_total: float
    current_month_total: float


@dataclass(frozen=True, slots=True)
class ViewSummary:
    total_entries: int
    total_amount: float
    unique_lorries: int
    unique_parties: int


@dataclass(frozen=True, slots=True)
class WriteOutcome:
    """Result of a repository write; ``errors`` is empty on success."""

    record: ArrivalRecord | None
    errors: dict[str, str]

    @property
    def ok(self) -> bool:
        return not self.errors


__all__ = [
    "ACCOUNT_LABELS",
    "ACCOUNT_TYPES",
    "ArrivalRecord",
    "Balances",
    "EDITABLE_FIELDS",
    "FilterSpec",
    "Page",
    "Records",
    "STATUSES",
    "STATUS_OPEN",
    "STATUS_PENDING",
    "STATUS_UNSET",
    "ViewSummary",
    "WriteOutcome",
]
