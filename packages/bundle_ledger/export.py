"""CSV export and fixed display formatting.

The CSV layout matches what the business already imports elsewhere:

1. a synthetic "Opening Balance" row (label in the Party Name column, amount
   with two decimals in the Amount column);
2. the 14-column header;
3. one row per record, numbered from 1, with dates as ``dd/MM/yyyy``.

Quoting follows RFC 4180 via the stdlib :mod:`csv` writer.
"""

from __future__ import annotations

import csv
from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import IO, Any

from .models import ACCOUNT_LABELS, ArrivalRecord
from .normalizers import norm_str, to_amount, to_calendar_date

CSV_HEADER: tuple[str, ...] = (
    "S.No",
    "Date",
    "Lorry",
    "LR No",
    "City",
    "Party Name",
    "A/c",
    "Bundle",
    "Invoice No",
    "Invoice Date",
    "Amount",
    "PH NO",
    "STATUS",
    "Itemtype",
)

_PARTY_COL = CSV_HEADER.index("Party Name")
_AMOUNT_COL = CSV_HEADER.index("Amount")


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def _quantize(value: float) -> Decimal:
    # Through str() so 0.1 + 0.2 style noise does not leak into rounding.
    return Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def format_plain_amount(value: Any) -> str:
    """Two decimals, ASCII dot, no grouping; non-numeric values render as 0.00."""

    amt = to_amount(value)
    return f"{_quantize(amt if amt is not None else 0.0):.2f}"


def format_amount(value: Any) -> str:
    """Two decimals with Indian digit grouping, e.g. ``12,34,567.89``."""

    plain = format_plain_amount(value)
    sign = ""
    if plain.startswith("-"):
        sign, plain = "-", plain[1:]
    whole, frac = plain.split(".")
    if len(whole) > 3:
        head, tail = whole[:-3], whole[-3:]
        groups: list[str] = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        whole = ",".join([*groups, tail])
    return f"{sign}{whole}.{frac}"


def format_display_date(value: Any) -> str:
    d = to_calendar_date(value)
    return d.strftime("%d/%m/%Y") if d is not None else ""


def account_label(value: Any) -> str:
    s = (norm_str(value) or "").upper()
    return ACCOUNT_LABELS.get(s, s)


def status_label(value: Any) -> str:
    return norm_str(value) or "-"


# ---------------------------------------------------------------------------
# CSV
# ---------------------------------------------------------------------------


def opening_balance_row(opening_balance: float) -> list[str]:
    row = [""] * len(CSV_HEADER)
    row[_PARTY_COL] = "Opening Balance"
    row[_AMOUNT_COL] = format_plain_amount(opening_balance)
    return row


def record_row(index: int, r: ArrivalRecord) -> list[str]:
    return [
        str(index),
        format_display_date(r.get("date")),
        norm_str(r.get("lorry_type")) or "",
        norm_str(r.get("lorry_no")) or "",
        norm_str(r.get("city")) or "",
        norm_str(r.get("party_name")) or "",
        norm_str(r.get("account_type")) or "",
        norm_str(r.get("bundle")) or "",
        norm_str(r.get("invoice_no")) or "",
        format_display_date(r.get("invoice_date")),
        format_plain_amount(r.get("amount")),
        norm_str(r.get("phone_no")) or "",
        norm_str(r.get("status")) or "",
        norm_str(r.get("itemtype")) or "",
    ]


def write_csv(
    records: Iterable[ArrivalRecord],
    *,
    opening_balance: float,
    stream: IO[str],
) -> int:
    """Write the export to ``stream``; return the number of record rows."""

    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(opening_balance_row(opening_balance))
    writer.writerow(CSV_HEADER)
    count = 0
    for count, r in enumerate(records, start=1):
        writer.writerow(record_row(count, r))
    return count


def export_filename(today: date | None = None) -> str:
    return f"bundle_arrivals_{(today or date.today()).isoformat()}.csv"


__all__ = [
    "CSV_HEADER",
    "account_label",
    "export_filename",
    "format_amount",
    "format_display_date",
    "format_plain_amount",
    "opening_balance_row",
    "record_row",
    "status_label",
    "write_csv",
]
