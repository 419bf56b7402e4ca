"""Shared SQLAlchemy models registry for the workspace database.

Currently holds the ledger table used by ``bundle_ledger``.
"""

from .ledger import Base, BundleArrival

__all__ = [
    "Base",
    "BundleArrival",
]
