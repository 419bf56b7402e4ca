from __future__ import annotations

import itertools

from bundle_ledger.duplicates import DuplicateKey, find_duplicate


def test_duplicate_detected_across_representations():
    candidate = {"party_name": "ABC", "invoice_no": "INV1", "invoice_date": "2024-01-01", "amount": "500"}
    existing = [
        {"id": 7, "party_name": "abc", "invoice_no": "inv1", "invoice_date": "2024-01-01T00:00:00Z", "amount": 500}
    ]
    assert find_duplicate(candidate, existing) is existing[0]


def test_trimmed_strings_and_none_as_empty():
    candidate = {"party_name": "  ABC ", "invoice_no": None, "invoice_date": "2024-01-01", "amount": 10}
    existing = [{"party_name": "abc", "invoice_no": "", "invoice_date": "2024-01-01", "amount": "10.00"}]
    assert find_duplicate(candidate, existing) is not None


def test_any_key_difference_means_no_collision():
    base = {"party_name": "ABC", "invoice_no": "INV1", "invoice_date": "2024-01-01", "amount": 500}
    for field, value in (
        ("party_name", "ABD"),
        ("invoice_no", "INV2"),
        ("invoice_date", "2024-01-02"),
        ("amount", 500.01),
    ):
        assert find_duplicate({**base, field: value}, [base]) is None


def test_unparseable_amounts_never_collide():
    garbage = {"party_name": "ABC", "invoice_no": "INV1", "invoice_date": "2024-01-01", "amount": "abc"}
    assert find_duplicate(garbage, [dict(garbage)]) is None
    assert find_duplicate({**garbage, "amount": None}, [garbage]) is None
    assert not DuplicateKey.of(garbage).collides(DuplicateKey.of(garbage))


def test_outcome_is_order_independent_but_first_match_is_reported():
    candidate = {"party_name": "ABC", "invoice_no": "INV1", "invoice_date": "2024-01-01", "amount": 1}
    first = {"id": 1, **candidate}
    second = {"id": 2, **candidate, "party_name": "abc"}
    other = {"id": 3, **candidate, "invoice_no": "X"}
    for perm in itertools.permutations([first, second, other]):
        hit = find_duplicate(candidate, list(perm))
        assert hit is not None
        assert hit["id"] == next(r["id"] for r in perm if r["id"] != 3)


def test_empty_collection_has_no_duplicate():
    assert find_duplicate({"amount": 1}, []) is None
