"""Value canonicalization shared by filtering, balances, duplicates and writes.

Records reach the core in mixed representations: form input carries strings
(``"2024-03-01"``, ``" 500 "``), the store returns ``date``/``Decimal``/``float``
values, and older exports carry ISO timestamps (``"2024-01-01T00:00:00Z"``).
The helpers here reduce each of them to one comparable form and never raise
on bad input; unparseable values come back as ``None``.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .models import EDITABLE_FIELDS


def to_calendar_date(value: Any) -> date | None:
    """Return the calendar date of ``value`` or ``None`` when unparseable.

    Accepts ``date``/``datetime`` objects and strings of the forms
    ``YYYY-MM-DD``, ``YYYY-MM-DDTHH:MM:SS[...]`` and ``YYYY-MM-DD HH:MM:SS``.
    The date portion is taken as written; no timezone conversion happens.
    """

    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    first = s.split()[0].split("T", 1)[0]
    try:
        return date.fromisoformat(first)
    except ValueError:
        return None


def canonical_date(value: Any) -> str:
    """Return ``yyyy-MM-dd`` for ``value``; ``""`` when empty.

    An unparseable non-empty value falls back to its trimmed string form so
    that two identical garbage strings still compare equal.
    """

    d = to_calendar_date(value)
    if d is not None:
        return d.isoformat()
    if value is None:
        return ""
    return str(value).strip()


def to_amount(value: Any) -> float | None:
    """Parse ``value`` as a finite float; ``None`` when missing or invalid."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        f = float(value)
    else:
        s = str(value).strip().replace(",", "")
        if not s:
            return None
        try:
            f = float(s)
        except ValueError:
            return None
    if math.isnan(f) or math.isinf(f):
        return None
    return f


def amount_or_zero(value: Any) -> float:
    amt = to_amount(value)
    return amt if amt is not None else 0.0


def norm_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s if s else None


def match_key(value: Any) -> str:
    """Trimmed, lower-cased string; ``None`` maps to ``""``."""

    if value is None:
        return ""
    return str(value).strip().lower()


def is_blank(value: Any) -> bool:
    return norm_str(value) is None


def prepare_fields(candidate: Mapping[str, Any]) -> dict[str, Any]:
    """Project a validated candidate onto typed column values for the store.

    Strings are trimmed, dates parsed, the amount converted to ``float`` and
    optional text fields stored as ``""`` when blank. Keys outside
    :data:`~bundle_ledger.models.EDITABLE_FIELDS` are dropped.
    """

    out: dict[str, Any] = {}
    for key in EDITABLE_FIELDS:
        if key not in candidate:
            continue
        raw = candidate[key]
        if key in ("date", "invoice_date"):
            out[key] = to_calendar_date(raw)
        elif key == "amount":
            out[key] = to_amount(raw)
        elif key == "status":
            out[key] = (norm_str(raw) or "").upper()
        elif key == "account_type":
            out[key] = (norm_str(raw) or "").upper()
        else:
            out[key] = norm_str(raw) or ""
    return out


__all__ = [
    "amount_or_zero",
    "canonical_date",
    "is_blank",
    "match_key",
    "norm_str",
    "prepare_fields",
    "to_amount",
    "to_calendar_date",
]
