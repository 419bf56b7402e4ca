from __future__ import annotations

import datetime as dt

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Date,
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


# ---------------------------
# Core: bundle_arrivals
# ---------------------------


class BundleArrival(Base):
    __tablename__ = "bundle_arrivals"

    # BIGINT identity on Postgres; SQLite needs INTEGER for rowid autoincrement.
    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer(), "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    lorry_type: Mapped[str] = mapped_column(String(100), nullable=False)
    lorry_no: Mapped[str] = mapped_column(String(50), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    party_name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_type: Mapped[str] = mapped_column(String(1), nullable=False)
    bundle: Mapped[str] = mapped_column(String(100), nullable=False)
    invoice_no: Mapped[str] = mapped_column(String(100), nullable=False)
    invoice_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    # Amounts surface as float; display rounding happens in the application.
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    phone_no: Mapped[str | None] = mapped_column(String(20), nullable=True)
    # Empty string is the explicit "unset" state; it is not coerced to OPEN.
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="", server_default=text("''")
    )
    itemtype: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # Python-side defaults keep ordering usable on backends without now().
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        CheckConstraint("account_type in ('S','T','R')", name="ck_bundle_arrivals_account_type"),
        CheckConstraint("status in ('','OPEN','PENDING')", name="ck_bundle_arrivals_status"),
        CheckConstraint("amount >= 0", name="ck_bundle_arrivals_amount"),
        Index("idx_bundle_arrivals_date", "date"),
        Index("idx_bundle_arrivals_lorry_type", "lorry_type"),
        Index("idx_bundle_arrivals_party_name", "party_name"),
        Index("idx_bundle_arrivals_account_type", "account_type"),
        Index("idx_bundle_arrivals_status", "status"),
    )


__all__ = [
    "Base",
    "BundleArrival",
]
