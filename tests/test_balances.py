from __future__ import annotations

import logging
from datetime import date, datetime

import pytest

from bundle_ledger.balances import (
    compute_balances,
    current_day_total,
    opening_balance,
    summarize_view,
    total_amount,
)


def test_opening_balance_scenario():
    records = [{"date": "2024-03-01", "amount": 100}, {"date": "2024-03-15", "amount": 50}]
    b = compute_balances(records, date(2024, 3, 20))
    assert b.opening_balance == 150
    assert b.current_day_total == 0
    assert b.total_with_opening == 150


def test_opening_balance_is_zero_on_first_of_month():
    records = [
        {"date": "2024-02-29", "amount": 10},
        {"date": "2024-03-01", "amount": 20},
        {"date": "2024-03-05", "amount": 30},
        {"date": "garbage", "amount": 40},
    ]
    assert opening_balance(records, date(2024, 3, 1)) == 0
    assert current_day_total(records, date(2024, 3, 1)) == 20


@pytest.mark.parametrize("day", [1, 2, 15, 31])
def test_total_with_opening_is_opening_plus_current_day(day: int):
    records = [
        {"date": f"2024-01-{d:02d}", "amount": 0.1 * d} for d in range(1, 32)
    ] + [{"date": "2023-12-31", "amount": 999}, {"date": "2024-02-01", "amount": 7}]
    b = compute_balances(records, date(2024, 1, day))
    assert b.current_day_total + b.opening_balance == b.total_with_opening


def test_month_and_all_time_totals():
    records = [
        {"date": "2024-03-01", "amount": 100},
        {"date": "2024-03-20", "amount": "25.5"},
        {"date": "2024-03-28", "amount": 10},  # future-dated within the month
        {"date": "2024-02-10", "amount": 1000},
        {"date": "2024-03-20T09:15:00Z", "amount": None},
    ]
    b = compute_balances(records, datetime(2024, 3, 20, 18, 0))
    assert b.opening_balance == 100
    assert b.current_day_total == 25.5
    assert b.total_with_opening == 125.5
    assert b.current_month_total == 135.5
    assert b.all_time_total == 1135.5


def test_bad_dates_are_skipped_and_logged(caplog: pytest.LogCaptureFixture):
    records = [
        {"date": "31/03/2024", "amount": 10},
        {"date": None, "amount": 5},
        {"date": "2024-03-02", "amount": "abc"},
        {"date": "2024-03-02", "amount": 3},
    ]
    logger = logging.getLogger("bundle_ledger")
    logger.addHandler(caplog.handler)
    try:
        with caplog.at_level(logging.WARNING, logger="bundle_ledger"):
            b = compute_balances(records, date(2024, 3, 10))
    finally:
        logger.removeHandler(caplog.handler)
    assert b.opening_balance == 3
    assert b.all_time_total == 18
    messages = " ".join(r.getMessage() for r in caplog.records)
    assert "unparseable date" in messages
    assert "non-numeric" in messages


def test_total_amount_and_view_summary():
    records = [
        {"lorry_type": "AKR", "party_name": "A", "amount": 100},
        {"lorry_type": "AKR", "party_name": "B", "amount": "50.25"},
        {"lorry_type": "VRL", "party_name": "A", "amount": "n/a"},
    ]
    assert total_amount(records) == 150.25
    s = summarize_view(records)
    assert (s.total_entries, s.total_amount, s.unique_lorries, s.unique_parties) == (3, 150.25, 2, 2)
