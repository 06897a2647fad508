"""SQLAlchemy ORM models for cached exchange rates."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKeyConstraint, Numeric, String, Text
from sqlalchemy.engine import Dialect
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator, TypeEngine

from ratecache.database import Base


class ExactDecimal(TypeDecorator):
    """Decimal column that returns exactly the value it was given.

    Backends with a native decimal type get an unbounded ``NUMERIC``. SQLite
    would coerce ``NUMERIC`` through a float, so there the value is kept as
    its decimal string.
    """

    impl = Numeric
    cache_ok = True

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine:
        if dialect.name == "sqlite":
            return dialect.type_descriptor(Text())
        return dialect.type_descriptor(Numeric(asdecimal=True))

    def process_bind_param(self, value, dialect: Dialect):
        if value is None:
            return None
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        return str(value) if dialect.name == "sqlite" else value

    def process_result_value(self, value, dialect: Dialect) -> Optional[Decimal]:
        if value is None or isinstance(value, Decimal):
            return value
        return Decimal(str(value))


class CachedSnapshot(Base):
    """Rates fetched for one (date, base currency) pair."""

    __tablename__ = "exchange_rates_cache"

    rate_date: Mapped[date] = mapped_column("date", Date, primary_key=True)
    base_currency: Mapped[str] = mapped_column(String(3), primary_key=True)
    exec_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    rates: Mapped[list["CachedRate"]] = relationship(
        "CachedRate",
        back_populates="snapshot",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="CachedRate.target_currency",
    )

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<CachedSnapshot {self.rate_date.isoformat()} base={self.base_currency} rates={len(self.rates)}>"


class CachedRate(Base):
    """Single target-currency rate owned by a cached snapshot."""

    __tablename__ = "exchange_rate_values"
    __table_args__ = (
        ForeignKeyConstraint(
            ["date", "base_currency"],
            ["exchange_rates_cache.date", "exchange_rates_cache.base_currency"],
            ondelete="CASCADE",
            name="fk_exchange_rate_values_cache",
        ),
    )

    rate_date: Mapped[date] = mapped_column("date", Date, primary_key=True)
    base_currency: Mapped[str] = mapped_column(String(3), primary_key=True)
    target_currency: Mapped[str] = mapped_column(String(3), primary_key=True)
    rate: Mapped[Decimal] = mapped_column(ExactDecimal(), nullable=False)

    snapshot: Mapped["CachedSnapshot"] = relationship("CachedSnapshot", back_populates="rates")

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return (
            f"<CachedRate {self.rate_date.isoformat()} {self.base_currency}->{self.target_currency} "
            f"rate={self.rate}>"
        )
