"""Security price data access layer."""

import logging
from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

from security_data.models import SecurityPrice

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


class SecurityPriceRepository:
    """Centralized security price data access.

    Naming conventions:
    - find_* : Query that may return None or empty list
    - get_* : Query that raises exception if missing
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def find_by_security_and_date(self, security_id: int, target_date: date) -> SecurityPrice | None:
        """Find the cached price for a security on a specific date."""
        return (
            self._db.query(SecurityPrice)
            .filter(SecurityPrice.security_id == security_id, SecurityPrice.date == target_date)
            .first()
        )

    def find_price_history(
        self,
        security_id: int,
        start_date: date,
        end_date: date,
    ) -> "Sequence[SecurityPrice]":
        """Find price history for a security within a date range."""
        return (
            self._db.query(SecurityPrice)
            .filter(
                SecurityPrice.security_id == security_id,
                SecurityPrice.date >= start_date,
                SecurityPrice.date <= end_date,
            )
            .order_by(SecurityPrice.date)
            .all()
        )

    def find_last_before(self, security_id: int, before_date: date) -> SecurityPrice | None:
        """Find the most recent cached price strictly before a date."""
        return (
            self._db.query(SecurityPrice)
            .filter(SecurityPrice.security_id == security_id, SecurityPrice.date < before_date)
            .order_by(SecurityPrice.date.desc())
            .first()
        )

    def count_in_range(self, security_id: int, start_date: date, end_date: date) -> int:
        """Count cached prices for a security within a date range."""
        return (
            self._db.query(SecurityPrice)
            .filter(
                SecurityPrice.security_id == security_id,
                SecurityPrice.date >= start_date,
                SecurityPrice.date <= end_date,
            )
            .count()
        )

    def has_all_prices(self, security_id: int, start_date: date, end_date: date) -> bool:
        """True when every calendar day in the range is cached."""
        expected_days = (end_date - start_date).days + 1
        return self.count_in_range(security_id, start_date, end_date) >= expected_days

    def find_or_create(
        self, security_id: int, target_date: date, price: Decimal, currency: str
    ) -> SecurityPrice:
        """Return the cached price for the date, creating it if missing."""
        existing = self.find_by_security_and_date(security_id, target_date)
        if existing is not None:
            return existing

        record = SecurityPrice(
            security_id=security_id, date=target_date, price=price, currency=currency
        )
        self._db.add(record)
        self._db.commit()
        return record

    def upsert_many(self, security_id: int, rows: list[tuple[date, Decimal, str]]) -> int:
        """Insert or update (date, price, currency) rows. Returns rows written."""
        if not rows:
            return 0

        dates = [row_date for row_date, _, _ in rows]
        existing = {
            record.date: record
            for record in self.find_price_history(security_id, min(dates), max(dates))
        }

        for row_date, price, currency in rows:
            record = existing.get(row_date)
            if record is None:
                self._db.add(
                    SecurityPrice(
                        security_id=security_id, date=row_date, price=price, currency=currency
                    )
                )
            else:
                record.price = price
                record.currency = currency

        self._db.commit()
        logger.debug(f"Upserted {len(rows)} prices for security {security_id}")
        return len(rows)
