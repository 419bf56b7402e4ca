from __future__ import annotations

from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from bundle_ledger.autocomplete import AutocompleteHistory
from bundle_ledger.config import DEFAULT_LORRY_TYPES
from bundle_ledger.duplicates import DUPLICATE_MESSAGE
from bundle_ledger.persistence import SqlRecordStore
from bundle_ledger.repository import ArrivalRepository, RecordStoreError
from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.records import make_candidate


class _MemoryStore:
    """In-process store double recording every call."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = list(rows or [])
        self.calls: list[tuple[str, Any]] = []
        self._next_id = max((r["id"] for r in self.rows), default=0) + 1

    def fetch_all(self) -> list[dict[str, Any]]:
        self.calls.append(("fetch_all", None))
        return [dict(r) for r in self.rows]

    def insert(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("insert", dict(fields)))
        row = {"id": self._next_id, **fields}
        self._next_id += 1
        self.rows.insert(0, row)
        return dict(row)

    def update(self, record_id: Any, fields: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("update", (record_id, dict(fields))))
        for row in self.rows:
            if row["id"] == record_id:
                row.update(fields)
                return dict(row)
        raise RecordStoreError(f"no record with id {record_id!r}")

    def delete(self, record_id: Any) -> None:
        self.calls.append(("delete", record_id))
        before = len(self.rows)
        self.rows = [r for r in self.rows if r["id"] != record_id]
        if len(self.rows) == before:
            raise RecordStoreError(f"no record with id {record_id!r}")


def _repo(store: _MemoryStore, history: AutocompleteHistory | None = None) -> ArrivalRepository:
    repo = ArrivalRepository(store, lorry_types=DEFAULT_LORRY_TYPES, history=history)
    repo.refresh()
    return repo


def test_create_prepends_typed_record_and_remembers_itemtype(tmp_path: Path):
    store = _MemoryStore([{"id": 1, **make_candidate(invoice_no="OLD")}])
    history = AutocompleteHistory(tmp_path / "history.json")
    repo = _repo(store, history)

    outcome = repo.create(make_candidate(amount="1,250.50", itemtype="Silk Dhoti", city=" Salem "))

    assert outcome.ok
    assert [r["id"] for r in repo.records()] == [2, 1]
    inserted = store.calls[-1][1]
    assert inserted["date"] == date(2024, 3, 1)
    assert inserted["amount"] == 1250.5
    assert inserted["city"] == "Salem"
    assert history.entries[0] == "Silk Dhoti"
    assert (tmp_path / "history.json").is_file()


def test_create_rejects_duplicates_without_touching_store():
    store = _MemoryStore([{"id": 1, **make_candidate()}])
    repo = _repo(store)
    outcome = repo.create(make_candidate(party_name="abc textiles "))
    assert outcome.errors == {"duplicate": DUPLICATE_MESSAGE}
    assert outcome.record is None
    assert [c[0] for c in store.calls] == ["fetch_all"]


def test_create_validates_lorry_type_against_configuration():
    repo = _repo(_MemoryStore())
    outcome = repo.create(make_candidate(lorry_type="Unknown Carrier"))
    assert outcome.errors == {"lorry_type": "Unknown lorry type: Unknown Carrier"}


def test_update_replaces_in_place_and_skips_duplicate_check():
    store = _MemoryStore([{"id": 2, **make_candidate(invoice_no="B")}, {"id": 1, **make_candidate()}])
    repo = _repo(store)
    # Same key as record 1; edits do not re-run the duplicate rule.
    outcome = repo.update(2, make_candidate(bundle="B9"))
    assert outcome.ok
    assert [r["id"] for r in repo.records()] == [2, 1]
    assert repo.get(2)["bundle"] == "B9"


def test_update_reports_field_errors():
    repo = _repo(_MemoryStore([{"id": 1, **make_candidate()}]))
    outcome = repo.update(1, make_candidate(amount="0"))
    assert not outcome.ok
    assert repo.get(1)["amount"] == "500"


def test_set_status_and_clear():
    store = _MemoryStore([{"id": 1, **make_candidate()}])
    repo = _repo(store)
    assert repo.set_status(1, "pending").ok
    assert repo.get(1)["status"] == "PENDING"
    assert repo.set_status(1, "").ok
    assert repo.get(1)["status"] == ""
    bad = repo.set_status(1, "DONE")
    assert bad.errors == {"status": "Status must be OPEN or PENDING"}


def test_delete_filters_record_out_and_store_errors_propagate():
    store = _MemoryStore([{"id": 2, **make_candidate(invoice_no="B")}, {"id": 1, **make_candidate()}])
    repo = _repo(store)
    repo.delete(2)
    assert [r["id"] for r in repo.records()] == [1]
    with pytest.raises(RecordStoreError):
        repo.delete(99)
    assert [r["id"] for r in repo.records()] == [1]


def test_records_returns_a_copy():
    repo = _repo(_MemoryStore([{"id": 1, **make_candidate()}]))
    repo.records().clear()
    assert len(repo.records()) == 1


def test_party_and_city_vocabularies():
    store = _MemoryStore(
        [
            {"id": 2, **make_candidate(party_name="Zeta", city="Salem")},
            {"id": 1, **make_candidate(party_name="Alpha", city="Salem")},
        ]
    )
    repo = _repo(store)
    assert repo.party_names() == ["Alpha", "Zeta"]
    assert repo.cities() == ["Salem"]


# ---- SQL-backed store ----------------------------------------------------------


def test_sql_store_round_trip(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "ledger.db")
    repo = ArrivalRepository(SqlRecordStore(database_url=url), lorry_types=DEFAULT_LORRY_TYPES)
    repo.refresh()
    assert repo.records() == []

    first = repo.create(make_candidate(invoice_no="A1"))
    second = repo.create(make_candidate(invoice_no="A2", amount="75.5", status="open"))
    assert first.ok and second.ok
    assert second.record["status"] == "OPEN"
    assert first.record["status"] == ""

    fresh = ArrivalRepository(SqlRecordStore(database_url=url)).refresh()
    assert [r["invoice_no"] for r in fresh] == ["A2", "A1"]
    assert fresh[0]["amount"] == 75.5
    assert fresh[0]["date"] == date(2024, 3, 1)
    assert fresh[0]["id"] is not None and fresh[0]["created_at"] is not None

    dup = repo.create(make_candidate(invoice_no="a1 "))
    assert "duplicate" in dup.errors

    rid = second.record["id"]
    assert repo.set_status(rid, "PENDING").record["status"] == "PENDING"
    repo.delete(first.record["id"])
    assert [r["invoice_no"] for r in ArrivalRepository(SqlRecordStore(database_url=url)).refresh()] == ["A2"]


def test_sql_store_missing_id_raises(tmp_path: Path):
    url = bootstrap_sqlite_db(tmp_path / "ledger.db")
    store = SqlRecordStore(database_url=url)
    with pytest.raises(RecordStoreError):
        store.update(404, {"status": "OPEN"})
    with pytest.raises(RecordStoreError):
        store.delete(404)


def test_sql_store_wraps_database_errors(tmp_path: Path):
    # Engine points at a file without the schema.
    url = f"sqlite+pysqlite:///{tmp_path / 'empty.db'}"
    store = SqlRecordStore(database_url=url)
    with pytest.raises(RecordStoreError):
        store.fetch_all()


def test_carrier_is_stored_with_configured_spelling():
    store = _MemoryStore()
    repo = _repo(store)

    created = repo.create(make_candidate(lorry_type="  akr "))
    assert created.ok
    assert store.calls[-1][1]["lorry_type"] == "AKR"
    assert repo.records()[0]["lorry_type"] == "AKR"

    rid = created.record["id"]
    assert repo.update(rid, make_candidate(lorry_type="laxmi carco")).ok
    assert repo.get(rid)["lorry_type"] == "LAXMI CARCO"


def test_returned_records_do_not_alias_the_collection():
    repo = _repo(_MemoryStore([{"id": 1, **make_candidate()}]))
    repo.get(1)["bundle"] = "changed"
    repo.records()[0]["bundle"] = "changed"
    outcome = repo.set_status(1, "OPEN")
    outcome.record["bundle"] = "changed"
    assert repo.get(1)["bundle"] == "B1"
