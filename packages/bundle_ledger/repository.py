"""In-memory mirror of the record store with an explicit refresh policy.

``ArrivalRepository`` is the single owner of the client-side collection. It
replaces the collection wholesale on ``refresh()`` and patches it in place
after each successful write instead of refetching:

- create: the stored record is prepended (collection is newest first);
- update / set_status: the record with the same ``id`` is replaced;
- delete: the record is filtered out.

Writes are validated before the store is touched. Validation failures come
back as ``WriteOutcome.errors``; store failures raise ``RecordStoreError``
and leave the mirror unchanged.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from typing import Any, Protocol

from .autocomplete import AutocompleteHistory, unique_values
from .logging_setup import get_logger
from .models import STATUSES, ArrivalRecord, WriteOutcome
from .normalizers import norm_str, prepare_fields
from .validation import validate

_logger = get_logger("bundle_ledger.repository")


class RecordStoreError(RuntimeError):
    """The backing store failed or rejected an operation."""


class RecordStore(Protocol):
    """Operations the repository consumes from the backing store."""

    def fetch_all(self) -> list[dict[str, Any]]:
        """All records ordered by ``created_at`` descending."""
        ...

    def insert(self, fields: Mapping[str, Any]) -> dict[str, Any]: ...

    def update(self, record_id: Any, fields: Mapping[str, Any]) -> dict[str, Any]: ...

    def delete(self, record_id: Any) -> None: ...


class ArrivalRepository:
    def __init__(
        self,
        store: RecordStore,
        *,
        lorry_types: Collection[str] | None = None,
        history: AutocompleteHistory | None = None,
    ) -> None:
        self._store = store
        self._lorry_types = lorry_types
        self._history = history
        self._records: list[dict[str, Any]] = []

    # ---- reads -------------------------------------------------------------

    def refresh(self) -> list[dict[str, Any]]:
        """Reload the full collection from the store."""

        self._records = list(self._store.fetch_all())
        _logger.debug("Loaded %d record(s) from store", len(self._records))
        return self.records()

    def records(self) -> list[dict[str, Any]]:
        return [dict(r) for r in self._records]

    def get(self, record_id: Any) -> dict[str, Any] | None:
        for r in self._records:
            if r.get("id") == record_id:
                return dict(r)
        return None

    def party_names(self) -> list[str]:
        return unique_values(self._records, "party_name")

    def cities(self) -> list[str]:
        return unique_values(self._records, "city")

    # ---- writes ------------------------------------------------------------

    def create(self, candidate: ArrivalRecord) -> WriteOutcome:
        errors = validate(candidate, self._records, lorry_types=self._lorry_types)
        if errors:
            return WriteOutcome(record=None, errors=errors)

        stored = self._store.insert(self._prepare(candidate))
        self._records.insert(0, stored)
        if self._history is not None:
            self._history.remember(stored.get("itemtype"))
        _logger.info("Created arrival %s for %s", stored.get("id"), stored.get("party_name"))
        return WriteOutcome(record=dict(stored), errors={})

    def update(self, record_id: Any, candidate: ArrivalRecord) -> WriteOutcome:
        # Edits re-run field rules only; the duplicate check is a create-time rule.
        errors = validate(candidate, lorry_types=self._lorry_types)
        if errors:
            return WriteOutcome(record=None, errors=errors)

        stored = self._store.update(record_id, self._prepare(candidate))
        self._replace(stored)
        if self._history is not None:
            self._history.remember(stored.get("itemtype"))
        _logger.info("Updated arrival %s", record_id)
        return WriteOutcome(record=dict(stored), errors={})

    def set_status(self, record_id: Any, status: str | None) -> WriteOutcome:
        value = (norm_str(status) or "").upper()
        if value not in STATUSES:
            return WriteOutcome(record=None, errors={"status": "Status must be OPEN or PENDING"})
        stored = self._store.update(record_id, {"status": value})
        self._replace(stored)
        _logger.info("Set status of arrival %s to %r", record_id, value)
        return WriteOutcome(record=dict(stored), errors={})

    def delete(self, record_id: Any) -> None:
        self._store.delete(record_id)
        self._records = [r for r in self._records if r.get("id") != record_id]
        _logger.info("Deleted arrival %s", record_id)

    def _prepare(self, candidate: ArrivalRecord) -> dict[str, Any]:
        fields = prepare_fields(candidate)
        # Carriers match case-insensitively but are stored as configured.
        if self._lorry_types and fields.get("lorry_type"):
            spelling = {t.lower(): t for t in self._lorry_types}
            fields["lorry_type"] = spelling.get(fields["lorry_type"].lower(), fields["lorry_type"])
        return fields

    def _replace(self, stored: dict[str, Any]) -> None:
        rid = stored.get("id")
        self._records = [stored if r.get("id") == rid else r for r in self._records]


__all__ = ["ArrivalRepository", "RecordStore", "RecordStoreError"]
