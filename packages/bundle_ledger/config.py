"""Runtime configuration for ``bundle_ledger``.

Settings come from environment variables (the CLI loads a local ``.env`` via
``python-dotenv`` first, without overriding variables already set):

- ``DATABASE_URL``: SQLAlchemy URL of the record store.
- ``BUNDLE_LEDGER_LORRY_TYPES``: comma-separated carriers appended to the
  built-in list. The carrier set is closed; only configuration extends it.
- ``BUNDLE_LEDGER_PAGE_SIZE``: rows per page in listings (default 15).
- ``BUNDLE_LEDGER_DATA_DIR``: client data directory holding the item-type
  history (default ``./.bundle_ledger``).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_LORRY_TYPES: tuple[str, ...] = (
    "AKR",
    "PNP",
    "VRL",
    "MSS",
    "LAXMI CARCO",
    "BLUEDART",
    "BY HAND",
    "JUPITER",
    "LCM",
    "KLS",
    "KAVITHA",
    "LPL",
    "GLS",
    "RATHEMEENA",
    "SVT",
    "VMB",
    "A1 Travels",
    "By Bus",
    "Professional",
)

# Seed vocabulary for the item-type autocomplete history.
ITEMTYPE_SEED: tuple[str, ...] = (
    "Shirting",
    "Dress Material",
    "Suiting",
    "Scarf",
    "Lungi",
    "Petti Coat",
    "Dhoti",
    "Blouse",
    "Towel",
    "Odini",
    "Vest",
    "Lining",
    "Lab Coat",
    "Falls",
    "Brief",
    "Sun Grape",
    "Long Cloth",
    "Blouse Bit",
    "Mall",
    "Full Suit",
    "Chudidar",
    "Baba Suit",
    "Tops",
    "Jubba Set",
    "Frock",
    "Coat Suit",
    "Western Dresses",
    "Baby Bed",
    "Leggins",
    "Boys T-Shirt",
    "Patiyala Set",
    "Boys Pant",
    "Pavadai Satai",
    "Wedding R/M Set",
    "Nighty",
    "T-Shirt",
    "Panties",
    "Boys Shirt",
    "Night Suit",
    "Track Pant",
    "Bra",
    "Shots",
    "Slips",
    "Tie",
    "Kerchief",
    "Saree",
    "Shirt",
    "Bed Spread",
    "Pant",
    "Screen R/M",
    "Shawl",
)

DEFAULT_PAGE_SIZE = 15


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str | None
    lorry_types: tuple[str, ...]
    page_size: int
    data_dir: Path


def _extra_lorry_types(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    return tuple(p.strip() for p in raw.split(",") if p.strip())


def merge_lorry_types(base: tuple[str, ...], extra: tuple[str, ...]) -> tuple[str, ...]:
    """Append ``extra`` carriers to ``base``, skipping case-insensitive repeats."""

    seen = {t.lower() for t in base}
    merged = list(base)
    for t in extra:
        if t.lower() not in seen:
            seen.add(t.lower())
            merged.append(t)
    return tuple(merged)


def _resolve_page_size() -> int:
    _env_sz = os.getenv("BUNDLE_LEDGER_PAGE_SIZE")
    try:
        size = int(_env_sz) if _env_sz else DEFAULT_PAGE_SIZE
        if size <= 0:
            raise ValueError
    except ValueError:
        size = DEFAULT_PAGE_SIZE
    return size


def _resolve_data_dir() -> Path:
    root = os.getenv("BUNDLE_LEDGER_DATA_DIR")
    if root and root.strip():
        return Path(root).expanduser().resolve()
    return (Path.cwd() / ".bundle_ledger").resolve()


def load_settings() -> Settings:
    """Read settings from the environment."""

    return Settings(
        database_url=os.getenv("DATABASE_URL") or None,
        lorry_types=merge_lorry_types(
            DEFAULT_LORRY_TYPES, _extra_lorry_types(os.getenv("BUNDLE_LEDGER_LORRY_TYPES"))
        ),
        page_size=_resolve_page_size(),
        data_dir=_resolve_data_dir(),
    )


__all__ = [
    "DEFAULT_LORRY_TYPES",
    "DEFAULT_PAGE_SIZE",
    "ITEMTYPE_SEED",
    "Settings",
    "load_settings",
    "merge_lorry_types",
]
