"""SQLAlchemy-backed record store for ``bundle_ledger``.

``SqlRecordStore`` implements the repository's ``RecordStore`` protocol on
top of the ``bundle_arrivals`` table owned by ``libs/db``. Each operation runs
in its own short transaction via ``db.client.session_scope``; rows are turned
into plain dicts before the session closes so callers never hold ORM state.

Business rules (required fields, duplicates) are not enforced here; the
repository validates before calling in.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from db.client import session_scope
from db.models.ledger import BundleArrival
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from .logging_setup import get_logger
from .models import EDITABLE_FIELDS
from .repository import RecordStoreError

_logger = get_logger("bundle_ledger.persistence")

_COLUMNS: tuple[str, ...] = ("id", *EDITABLE_FIELDS, "created_at", "updated_at")


def row_to_record(row: BundleArrival) -> dict[str, Any]:
    rec = {name: getattr(row, name) for name in _COLUMNS}
    if rec["amount"] is not None:
        rec["amount"] = float(rec["amount"])
    return rec


class SqlRecordStore:
    """Record store over ``bundle_arrivals``."""

    def __init__(self, *, database_url: str | None = None) -> None:
        self._database_url = database_url

    def fetch_all(self) -> list[dict[str, Any]]:
        stmt = select(BundleArrival).order_by(
            BundleArrival.created_at.desc(), BundleArrival.id.desc()
        )
        try:
            with session_scope(database_url=self._database_url) as session:
                return [row_to_record(row) for row in session.scalars(stmt).all()]
        except SQLAlchemyError as e:
            raise RecordStoreError(f"failed to load records: {e}") from e

    def insert(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        values = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
        try:
            with session_scope(database_url=self._database_url) as session:
                row = BundleArrival(**values)
                session.add(row)
                session.flush()
                return row_to_record(row)
        except SQLAlchemyError as e:
            raise RecordStoreError(f"failed to insert record: {e}") from e

    def update(self, record_id: Any, fields: Mapping[str, Any]) -> dict[str, Any]:
        try:
            with session_scope(database_url=self._database_url) as session:
                row = session.get(BundleArrival, record_id)
                if row is None:
                    raise RecordStoreError(f"no record with id {record_id!r}")
                for k, v in fields.items():
                    if k in EDITABLE_FIELDS:
                        setattr(row, k, v)
                session.flush()
                return row_to_record(row)
        except SQLAlchemyError as e:
            raise RecordStoreError(f"failed to update record {record_id!r}: {e}") from e

    def delete(self, record_id: Any) -> None:
        try:
            with session_scope(database_url=self._database_url) as session:
                row = session.get(BundleArrival, record_id)
                if row is None:
                    raise RecordStoreError(f"no record with id {record_id!r}")
                session.delete(row)
        except SQLAlchemyError as e:
            raise RecordStoreError(f"failed to delete record {record_id!r}: {e}") from e
        _logger.debug("Deleted row %s", record_id)


__all__ = ["SqlRecordStore", "row_to_record"]
