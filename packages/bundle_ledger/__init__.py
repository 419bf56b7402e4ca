"""Public interface for the ``bundle_ledger`` package.

This module exposes the core ledger functions and public models/types as the
stable import surface. There is no runtime logic here, only symbol re-exports.
"""

from .balances import compute_balances, summarize_view
from .duplicates import find_duplicate
from .export import write_csv
from .filters import filter_records, paginate, search_records
from .models import (
    ArrivalRecord,
    Balances,
    FilterSpec,
    Page,
    Records,
    ViewSummary,
    WriteOutcome,
)
from .repository import ArrivalRepository, RecordStore, RecordStoreError
from .validation import validate

__all__ = [
    # Core functions
    "compute_balances",
    "filter_records",
    "find_duplicate",
    "paginate",
    "search_records",
    "summarize_view",
    "validate",
    "write_csv",
    # Repository
    "ArrivalRepository",
    "RecordStore",
    "RecordStoreError",
    # Models / types
    "ArrivalRecord",
    "Balances",
    "FilterSpec",
    "Page",
    "Records",
    "ViewSummary",
    "WriteOutcome",
]
