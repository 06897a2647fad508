"""Persistence of rate snapshots keyed by (date, base currency)."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ratecache.database import get_session
from ratecache.models import CachedRate, CachedSnapshot
from ratecache.providers.schemas import RateSnapshot
from ratecache.utils.datetime import ensure_utc

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], Session]


class RateStore:
    """Durable storage for cached snapshots and their rate entries.

    Methods accept and return ``RateSnapshot`` values; ORM rows never leave
    this class.
    """

    def __init__(self, session_factory: SessionFactory | None = None) -> None:
        self._session_factory = session_factory or get_session()

    def find(self, rate_date: date, base_currency: str) -> Optional[RateSnapshot]:
        """Return the cached snapshot, or None on a cache miss."""

        session = self._session_factory()
        row = session.get(CachedSnapshot, (rate_date, _code(base_currency)))
        if row is None:
            return None
        return _to_snapshot(row)

    def save(self, snapshot: RateSnapshot) -> None:
        """Upsert the snapshot and each of its entries in one transaction.

        An entry sharing ``(date, base, target)`` with a stored one replaces
        its rate (last write wins). Stored entries absent from ``snapshot``
        are left untouched.
        """

        session = self._session_factory()
        try:
            row = session.get(CachedSnapshot, snapshot.key)
            if row is None:
                row = CachedSnapshot(
                    rate_date=snapshot.date,
                    base_currency=snapshot.base_currency,
                    exec_date=snapshot.executed_at,
                )
                session.add(row)
            elif snapshot.executed_at is not None:
                row.exec_date = snapshot.executed_at

            existing = {entry.target_currency: entry for entry in row.rates}
            for target, rate in snapshot.rates.items():
                entry = existing.get(target)
                if entry is None:
                    row.rates.append(
                        CachedRate(
                            rate_date=snapshot.date,
                            base_currency=snapshot.base_currency,
                            target_currency=target,
                            rate=rate,
                        )
                    )
                elif entry.rate != rate:
                    logger.debug(
                        "Overwriting cached rate %s/%s->%s: %s -> %s",
                        snapshot.date,
                        snapshot.base_currency,
                        target,
                        entry.rate,
                        rate,
                    )
                    entry.rate = rate
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception(
                "Failed to save rates for %s/%s", snapshot.date, snapshot.base_currency
            )
            raise

    def exists(self, rate_date: date, base_currency: str) -> bool:
        session = self._session_factory()
        stmt = select(CachedSnapshot.rate_date).where(
            CachedSnapshot.rate_date == rate_date,
            CachedSnapshot.base_currency == _code(base_currency),
        )
        return session.execute(stmt).first() is not None

    def delete(self, rate_date: date, base_currency: str) -> bool:
        """Remove the snapshot and, by cascade, all of its entries.

        Returns whether a snapshot was found.
        """

        session = self._session_factory()
        try:
            row = session.get(CachedSnapshot, (rate_date, _code(base_currency)))
            if row is None:
                return False
            session.delete(row)
            session.commit()
        except SQLAlchemyError:
            session.rollback()
            raise
        logger.info("Deleted cached rates for %s/%s", rate_date, _code(base_currency))
        return True

    def count_rates(self, rate_date: date, base_currency: str) -> int:
        session = self._session_factory()
        stmt = select(func.count()).select_from(CachedRate).where(
            CachedRate.rate_date == rate_date,
            CachedRate.base_currency == _code(base_currency),
        )
        return int(session.execute(stmt).scalar_one())

    def get_rate(self, rate_date: date, base_currency: str, target_currency: str) -> Optional[Decimal]:
        session = self._session_factory()
        row = session.get(CachedRate, (rate_date, _code(base_currency), _code(target_currency)))
        return row.rate if row is not None else None


def _code(value: str) -> str:
    return str(value).strip().upper()


def _to_snapshot(row: CachedSnapshot) -> RateSnapshot:
    return RateSnapshot(
        date=row.rate_date,
        base_currency=row.base_currency,
        rates={entry.target_currency: Decimal(entry.rate) for entry in row.rates},
        executed_at=ensure_utc(row.exec_date) if row.exec_date is not None else None,
    )
