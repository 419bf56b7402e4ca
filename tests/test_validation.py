from __future__ import annotations

import pytest

from bundle_ledger.config import DEFAULT_LORRY_TYPES
from bundle_ledger.duplicates import DUPLICATE_MESSAGE
from bundle_ledger.validation import AMOUNT_MESSAGE, REQUIRED_FIELDS, validate
from tests.helpers.records import make_candidate, make_record


def test_valid_candidate_against_empty_collection_has_no_errors():
    assert validate(make_candidate(), []) == {}
    assert validate(make_candidate(), [], lorry_types=DEFAULT_LORRY_TYPES) == {}


def test_missing_bundle_is_the_only_error():
    candidate = make_candidate()
    del candidate["bundle"]
    assert validate(candidate, []) == {"bundle": "Bundle is required"}


@pytest.mark.parametrize("field", sorted(REQUIRED_FIELDS))
def test_each_required_field_blank_or_whitespace(field: str):
    for blank in ("", "   ", None):
        errors = validate(make_candidate(**{field: blank}))
        assert errors == {field: REQUIRED_FIELDS[field]}


@pytest.mark.parametrize("amount", ["", "0", "-5", "abc", None, "nan"])
def test_amount_must_be_a_positive_number(amount):
    assert validate(make_candidate(amount=amount)) == {"amount": AMOUNT_MESSAGE}


def test_optional_fields_are_never_flagged():
    candidate = make_candidate(status="", phone_no="", itemtype="")
    candidate.pop("phone_no")
    assert validate(candidate) == {}


def test_every_violation_is_reported_at_once():
    errors = validate({"amount": "0"})
    assert set(errors) == set(REQUIRED_FIELDS) | {"amount"}


def test_semantic_checks():
    errors = validate(
        make_candidate(date="2024-13-01", invoice_date="yesterday", account_type="x", status="closed")
    )
    assert errors == {
        "date": "Date is invalid",
        "invoice_date": "Invoice date is invalid",
        "account_type": "Account type must be one of S, T, R",
        "status": "Status must be OPEN or PENDING",
    }


def test_lowercase_account_and_status_are_accepted():
    assert validate(make_candidate(account_type="t", status="pending")) == {}


def test_unknown_lorry_type_only_checked_with_configured_list():
    candidate = make_candidate(lorry_type="Nowhere Express")
    assert validate(candidate) == {}
    assert validate(candidate, lorry_types=DEFAULT_LORRY_TYPES) == {
        "lorry_type": "Unknown lorry type: Nowhere Express"
    }
    assert validate(make_candidate(lorry_type="akr"), lorry_types=DEFAULT_LORRY_TYPES) == {}


def test_duplicate_only_checked_when_collection_supplied():
    existing = [make_record(1)]
    assert validate(make_candidate(), existing) == {"duplicate": DUPLICATE_MESSAGE}
    # Edit path: no collection, no duplicate check
    assert validate(make_candidate()) == {}


def test_validate_does_not_raise_on_odd_values():
    errors = validate({"date": 12, "amount": object(), "account_type": 5})
    assert errors["amount"] == AMOUNT_MESSAGE
    assert errors["date"] == "Date is invalid"
