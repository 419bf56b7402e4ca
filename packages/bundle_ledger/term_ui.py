"""Terminal entry form for bundle arrivals (prompt_toolkit-based).

The form is intentionally thin: it collects raw strings, offers completion
for the carrier list, known parties/cities and the item-type history, and
rejects only values that can never be parsed (dates, amount). Business rules
stay in :func:`bundle_ledger.validation.validate`, which the caller runs on the
returned mapping.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.validation import ValidationError, Validator

from .models import ACCOUNT_TYPES, STATUS_OPEN, STATUS_PENDING
from .normalizers import canonical_date, norm_str, to_amount, to_calendar_date


@dataclass(frozen=True, slots=True)
class _Field:
    name: str
    label: str
    choices: str | None = None  # key into the vocabulary mapping
    kind: str = "text"  # text | date | amount


FORM_FIELDS: tuple[_Field, ...] = (
    _Field("date", "Date (YYYY-MM-DD)", kind="date"),
    _Field("lorry_type", "Lorry", choices="lorry_types"),
    _Field("lorry_no", "LR No"),
    _Field("city", "City", choices="cities"),
    _Field("party_name", "Party name", choices="party_names"),
    _Field("account_type", "A/c (S/T/R)", choices="account_types"),
    _Field("bundle", "Bundle"),
    _Field("invoice_no", "Invoice no"),
    _Field("invoice_date", "Invoice date (YYYY-MM-DD)", kind="date"),
    _Field("amount", "Amount", kind="amount"),
    _Field("phone_no", "Phone no"),
    _Field("status", "Status (OPEN/PENDING, blank for none)", choices="statuses"),
    _Field("itemtype", "Item type", choices="item_types"),
)


class _DateValidator(Validator):
    def validate(self, document) -> None:
        text = document.text.strip()
        if text and to_calendar_date(text) is None:
            raise ValidationError(message="Expected a date as YYYY-MM-DD")


class _AmountValidator(Validator):
    def validate(self, document) -> None:
        text = document.text.strip()
        if text and to_amount(text) is None:
            raise ValidationError(message="Expected a number")


_VALIDATORS: dict[str, Validator] = {
    "date": _DateValidator(),
    "amount": _AmountValidator(),
}


def _default_text(name: str, value: Any) -> str:
    if value is None:
        return ""
    if name in ("date", "invoice_date"):
        return canonical_date(value)
    if name == "amount":
        amt = to_amount(value)
        return "" if amt is None else f"{amt:g}"
    return norm_str(value) or ""


def prompt_arrival_form(
    session: PromptSession | None = None,
    *,
    lorry_types: Sequence[str],
    party_names: Sequence[str] = (),
    cities: Sequence[str] = (),
    item_types: Sequence[str] = (),
    defaults: Mapping[str, Any] | None = None,
) -> dict[str, str]:
    """Prompt for every editable field and return the raw answers.

    ``defaults`` pre-fills the buffers (edit path); pressing Enter keeps the
    shown value. Completion matches anywhere in a word, ignoring case.
    """

    sess = session or PromptSession()
    vocab: dict[str, Sequence[str]] = {
        "lorry_types": lorry_types,
        "cities": cities,
        "party_names": party_names,
        "account_types": ACCOUNT_TYPES,
        "statuses": (STATUS_OPEN, STATUS_PENDING),
        "item_types": item_types,
    }
    prefill = defaults or {}

    answers: dict[str, str] = {}
    for f in FORM_FIELDS:
        completer = None
        if f.choices is not None and vocab[f.choices]:
            completer = WordCompleter(
                list(vocab[f.choices]), ignore_case=True, match_middle=True, sentence=True
            )
        text = sess.prompt(
            f"{f.label}: ",
            default=_default_text(f.name, prefill.get(f.name)),
            completer=completer,
            complete_while_typing=False,
            validator=_VALIDATORS.get(f.kind),
            validate_while_typing=False,
        )
        answers[f.name] = text.strip()
    return answers


__all__ = ["FORM_FIELDS", "prompt_arrival_form"]
