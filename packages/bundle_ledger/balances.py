"""Running balances over date-partitioned arrival records.

Every figure is derived from the full, unfiltered collection and a reference
"now" date:

- opening balance: amounts dated in the reference month strictly before the
  reference day (resets to zero on the 1st);
- current-day total: amounts dated exactly on the reference day;
- total with opening: opening balance + current-day total (month to date,
  today included, nothing after today);
- current-month total: every amount dated anywhere in the reference month,
  future-dated entries included;
- all-time total: unconditional sum.

Sums run in floating point; missing or non-numeric amounts count as zero.
Records with an unparseable ``date`` are left out of the date-bucketed sums
and reported once per computation through the package logger.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from .logging_setup import get_logger
from .models import ArrivalRecord, Balances, ViewSummary
from .normalizers import amount_or_zero, norm_str, to_amount, to_calendar_date

_logger = get_logger("bundle_ledger.balances")


def _reference_day(now: date | datetime | None) -> date:
    if now is None:
        return date.today()
    if isinstance(now, datetime):
        return now.date()
    return now


def compute_balances(
    records: Iterable[ArrivalRecord],
    now: date | datetime | None = None,
) -> Balances:
    """Compute all derived balance figures in a single pass."""

    today = _reference_day(now)
    opening = 0.0
    current_day = 0.0
    current_month = 0.0
    all_time = 0.0
    bad_dates = 0
    bad_amounts = 0

    for r in records:
        raw_amount = r.get("amount")
        amount = to_amount(raw_amount)
        if amount is None:
            if norm_str(raw_amount) is not None:
                bad_amounts += 1
            amount = 0.0
        all_time += amount

        d = to_calendar_date(r.get("date"))
        if d is None:
            bad_dates += 1
            continue
        if d.year != today.year or d.month != today.month:
            continue
        current_month += amount
        if d.day < today.day:
            opening += amount
        elif d.day == today.day:
            current_day += amount

    if bad_dates:
        _logger.warning("Skipped %d record(s) with an unparseable date in balances", bad_dates)
    if bad_amounts:
        _logger.warning("Counted %d non-numeric amount(s) as zero in balances", bad_amounts)

    return Balances(
        opening_balance=opening,
        current_day_total=current_day,
        total_with_opening=opening + current_day,
        all_time_total=all_time,
        current_month_total=current_month,
    )


def opening_balance(records: Iterable[ArrivalRecord], now: date | datetime | None = None) -> float:
    return compute_balances(records, now).opening_balance


def current_day_total(
    records: Iterable[ArrivalRecord], now: date | datetime | None = None
) -> float:
    return compute_balances(records, now).current_day_total


def total_amount(records: Iterable[ArrivalRecord]) -> float:
    """Plain sum of amounts (e.g. over a filtered view)."""

    return sum((amount_or_zero(r.get("amount")) for r in records), 0.0)


def summarize_view(records: Iterable[ArrivalRecord]) -> ViewSummary:
    """Dashboard figures for the currently displayed (filtered) records."""

    items = list(records)
    return ViewSummary(
        total_entries=len(items),
        total_amount=total_amount(items),
        unique_lorries=len({r.get("lorry_type") for r in items}),
        unique_parties=len({r.get("party_name") for r in items}),
    )


__all__ = [
    "compute_balances",
    "current_day_total",
    "opening_balance",
    "summarize_view",
    "total_amount",
]
