"""Candidate validation for the create and edit paths.

``validate`` is a pure decision function: it performs no I/O, never raises,
and reports every violated rule as ``{field: message}``. An empty mapping
means the candidate may be written.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable
from typing import Any

from .duplicates import DUPLICATE_MESSAGE, find_duplicate
from .models import ACCOUNT_TYPES, STATUSES, ArrivalRecord
from .normalizers import is_blank, norm_str, to_amount, to_calendar_date

# Field -> message for values that must be present (blank counts as absent).
REQUIRED_FIELDS: dict[str, str] = {
    "date": "Date is required",
    "lorry_type": "Lorry type is required",
    "lorry_no": "Lorry number is required",
    "city": "City is required",
    "party_name": "Party name is required",
    "account_type": "Account type is required",
    "bundle": "Bundle is required",
    "invoice_no": "Invoice number is required",
    "invoice_date": "Invoice date is required",
}

AMOUNT_MESSAGE = "Valid amount is required"


def _semantic_errors(
    candidate: ArrivalRecord,
    lorry_types: Collection[str] | None,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    date_val = candidate.get("date")
    if not is_blank(date_val) and to_calendar_date(date_val) is None:
        errors["date"] = "Date is invalid"
    inv_val = candidate.get("invoice_date")
    if not is_blank(inv_val) and to_calendar_date(inv_val) is None:
        errors["invoice_date"] = "Invoice date is invalid"

    acct = norm_str(candidate.get("account_type"))
    if acct is not None and acct.upper() not in ACCOUNT_TYPES:
        errors["account_type"] = "Account type must be one of S, T, R"

    status = (norm_str(candidate.get("status")) or "").upper()
    if status not in STATUSES:
        errors["status"] = "Status must be OPEN or PENDING"

    lorry = norm_str(candidate.get("lorry_type"))
    if lorry is not None and lorry_types is not None:
        known = {t.lower() for t in lorry_types}
        if lorry.lower() not in known:
            errors["lorry_type"] = f"Unknown lorry type: {lorry}"
    return errors


def validate(
    candidate: ArrivalRecord,
    records: Iterable[ArrivalRecord] | None = None,
    *,
    lorry_types: Collection[str] | None = None,
) -> dict[str, str]:
    """Return field errors for ``candidate``.

    Parameters
    ----------
    candidate:
        Record to check; values may be raw form strings.
    records:
        Existing collection. Supplying it (create path) enables the duplicate
        check; the edit path omits it.
    lorry_types:
        Configured carrier set. When given, an unknown carrier is an error.
    """

    errors: dict[str, str] = {}
    for field, message in REQUIRED_FIELDS.items():
        if is_blank(candidate.get(field)):
            errors[field] = message

    amount = to_amount(candidate.get("amount"))
    if amount is None or amount <= 0:
        errors["amount"] = AMOUNT_MESSAGE

    for field, message in _semantic_errors(candidate, lorry_types).items():
        errors.setdefault(field, message)

    if records is not None and find_duplicate(candidate, records) is not None:
        errors["duplicate"] = DUPLICATE_MESSAGE

    return errors


__all__ = ["AMOUNT_MESSAGE", "REQUIRED_FIELDS", "validate"]
