"""Autocomplete memory for the entry form.

Two sources feed suggestions:

- ``AutocompleteHistory``: the item-type history, an append-only ordered set
  de-duplicated case-insensitively, seeded from a fixed garment vocabulary
  and persisted per client installation as JSON;
- ``unique_values``: distinct party names / cities derived from the records
  currently held in memory.

History layout (relative to the data directory, default
``./.bundle_ledger``): ``itemtype_history.json``. Writes target a ``.tmp``
file first and then ``os.replace`` into place. A failed write is logged and
the entries remain available for the rest of the process.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .config import ITEMTYPE_SEED
from .logging_setup import get_logger
from .models import ArrivalRecord
from .normalizers import norm_str

# Bump only when the on-disk JSON shape changes.
SCHEMA_VERSION: int = 1
HISTORY_FILE_NAME = "itemtype_history.json"

_logger = get_logger("bundle_ledger.autocomplete")


class HistoryFile(BaseModel):
    """On-disk schema of the item-type history."""

    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    schema_version: int
    entries: list[str]

    @field_validator("entries")
    @classmethod
    def _drop_blank(cls, v: list[str]) -> list[str]:
        return [s for s in v if s]


def _dedupe(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in values:
        s = norm_str(v)
        if s is None or s.lower() in seen:
            continue
        seen.add(s.lower())
        out.append(s)
    return out


class AutocompleteHistory:
    """Ordered, case-insensitively unique item-type memory.

    ``remember`` puts new values at the front so recent entries surface first
    in suggestions. Known values (in any casing) are left where they are.
    The history is uncapped unless ``max_entries`` is given, in which case the
    oldest entries fall off the end.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        seed: Sequence[str] = ITEMTYPE_SEED,
        max_entries: int | None = None,
    ) -> None:
        if max_entries is not None and max_entries <= 0:
            raise ValueError("max_entries must be positive when set")
        self._path = path
        self._max = max_entries
        stored = self._load() if path is not None else []
        # Stored order wins; seed entries missing from it are appended.
        self._entries = self._cap(_dedupe([*stored, *seed]))

    @classmethod
    def in_dir(cls, data_dir: Path, **kwargs) -> AutocompleteHistory:
        return cls(data_dir / HISTORY_FILE_NAME, **kwargs)

    @property
    def entries(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def __contains__(self, value: object) -> bool:
        if not isinstance(value, str):
            return False
        return value.strip().lower() in {e.lower() for e in self._entries}

    def remember(self, value: str | None) -> bool:
        """Record ``value``; return ``True`` when it was new."""

        s = norm_str(value)
        if s is None or s in self:
            return False
        self._entries = self._cap([s, *self._entries])
        self._save()
        return True

    def suggest(self, text: str | None, *, limit: int | None = None) -> list[str]:
        """Entries containing ``text`` (case-insensitive), in history order."""

        needle = (text or "").strip().lower()
        if not needle:
            return []
        hits = [e for e in self._entries if needle in e.lower()]
        return hits[:limit] if limit is not None else hits

    def _cap(self, entries: list[str]) -> list[str]:
        return entries[: self._max] if self._max is not None else entries

    def _load(self) -> list[str]:
        assert self._path is not None
        if not self._path.is_file():
            return []
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            parsed = HistoryFile.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            _logger.warning("Ignoring unreadable history file %s: %s", self._path, e)
            return []
        if parsed.schema_version != SCHEMA_VERSION:
            _logger.info(
                "History schema %s != %s; starting from seed",
                parsed.schema_version,
                SCHEMA_VERSION,
            )
            return []
        return parsed.entries

    def _save(self) -> None:
        if self._path is None:
            return
        payload = HistoryFile(schema_version=SCHEMA_VERSION, entries=list(self._entries))
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(payload.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp, self._path)
        except OSError as e:
            # The in-memory entries stay current; only persistence is lost.
            _logger.warning("Could not save history file %s: %s", self._path, e)


def unique_values(records: Iterable[ArrivalRecord], field: str) -> list[str]:
    """Sorted distinct non-empty values of ``field`` (party names, cities)."""

    values = {s for s in (norm_str(r.get(field)) for r in records) if s is not None}
    return sorted(values)


__all__ = [
    "HISTORY_FILE_NAME",
    "AutocompleteHistory",
    "HistoryFile",
    "unique_values",
]
