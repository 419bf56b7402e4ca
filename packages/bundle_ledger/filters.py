"""Filter evaluation, free-text search and pagination over arrival records.

All functions are pure: they take the collection by value, never mutate it,
and return new lists that preserve the input order (callers pass records
newest first). Cost is one linear pass per active dimension.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable
from datetime import date
from typing import Any

from .models import STATUS_UNSET, ArrivalRecord, FilterSpec, Page
from .normalizers import match_key, norm_str, to_calendar_date

type Predicate = Callable[[ArrivalRecord], bool]


def _month_of(value: Any) -> tuple[int, int] | None:
    s = norm_str(value)
    if s is None:
        return None
    parts = s.split("-")
    if len(parts) < 2:
        return None
    try:
        year, month = int(parts[0]), int(parts[1])
    except ValueError:
        return None
    if not 1 <= month <= 12:
        return None
    return year, month


def _exact_date(target: date | None) -> Predicate:
    def pred(r: ArrivalRecord) -> bool:
        return target is not None and to_calendar_date(r.get("date")) == target

    return pred


def _same_month(target: tuple[int, int] | None) -> Predicate:
    def pred(r: ArrivalRecord) -> bool:
        d = to_calendar_date(r.get("date"))
        return target is not None and d is not None and (d.year, d.month) == target

    return pred


def _in_range(field: str, lo: date | None, hi: date | None) -> Predicate:
    def pred(r: ArrivalRecord) -> bool:
        d = to_calendar_date(r.get(field))
        if d is None:
            return False
        if lo is not None and d < lo:
            return False
        if hi is not None and d > hi:
            return False
        return True

    return pred


def _contains(field: str, needle: str) -> Predicate:
    n = needle.lower()

    def pred(r: ArrivalRecord) -> bool:
        return n in match_key(r.get(field))

    return pred


def _account_in(accepted: frozenset[str]) -> Predicate:
    def pred(r: ArrivalRecord) -> bool:
        return (norm_str(r.get("account_type")) or "") in accepted

    return pred


def _status_is(status: str) -> Predicate:
    # Unset status is its own state; it never stands in for OPEN.
    wanted = "" if status == STATUS_UNSET else status

    def pred(r: ArrivalRecord) -> bool:
        return (norm_str(r.get("status")) or "").upper() == wanted

    return pred


def build_predicates(spec: FilterSpec) -> list[Predicate]:
    """Return one predicate per active dimension of ``spec``.

    A non-empty bound that cannot be parsed as a date yields a predicate that
    rejects every record.
    """

    preds: list[Predicate] = []
    if norm_str(spec.date):
        preds.append(_exact_date(to_calendar_date(spec.date)))
    if norm_str(spec.month):
        preds.append(_same_month(_month_of(spec.month)))
    if norm_str(spec.range_from) or norm_str(spec.range_to):
        field = "invoice_date" if spec.range_field == "invoice" else "date"
        lo = to_calendar_date(spec.range_from)
        hi = to_calendar_date(spec.range_to)
        if (norm_str(spec.range_from) and lo is None) or (norm_str(spec.range_to) and hi is None):
            preds.append(lambda _r: False)
        else:
            preds.append(_in_range(field, lo, hi))
    if spec.lorry_type.strip():
        preds.append(_contains("lorry_type", spec.lorry_type.strip()))
    if spec.party_name.strip():
        preds.append(_contains("party_name", spec.party_name.strip()))
    if spec.account_types:
        preds.append(_account_in(spec.account_types))
    if spec.status.strip():
        preds.append(_status_is(spec.status.strip().upper()))
    return preds


def filter_records(records: Iterable[ArrivalRecord], spec: FilterSpec) -> list[ArrivalRecord]:
    """Return the records satisfying every active constraint of ``spec``."""

    filtered = list(records)
    for pred in build_predicates(spec):
        filtered = [r for r in filtered if pred(r)]
    return filtered


def search_records(records: Iterable[ArrivalRecord], term: str | None) -> list[ArrivalRecord]:
    """Case-insensitive substring search across every non-empty value."""

    needle = (term or "").strip().lower()
    if not needle:
        return list(records)
    return [
        r
        for r in records
        if any(v is not None and needle in str(v).lower() for v in r.values())
    ]


def paginate(records: Iterable[ArrivalRecord], page: int, per_page: int) -> Page:
    """Slice ``records`` into the requested page, clamping ``page`` to range."""

    if per_page <= 0:
        raise ValueError(f"per_page must be positive, got {per_page}")
    items = list(records)
    total_pages = math.ceil(len(items) / per_page)
    current = max(1, min(page, total_pages)) if total_pages else 1
    start = (current - 1) * per_page
    return Page(
        items=items[start : start + per_page],
        page=current,
        per_page=per_page,
        total_items=len(items),
        total_pages=total_pages,
    )


__all__ = ["build_predicates", "filter_records", "paginate", "search_records"]
