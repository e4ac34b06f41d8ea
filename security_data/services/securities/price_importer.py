"""Import a date range of security prices from one provider into the cache."""

import logging
from datetime import date, timedelta
from decimal import Decimal

from sqlalchemy.orm import Session

from security_data.models import Security
from security_data.services.providers.base import SecurityConcept
from security_data.services.repositories import SecurityPriceRepository

logger = logging.getLogger(__name__)


class SecurityPriceImporter:
    """Fill the price cache for one security over a date range.

    One row is written per calendar day from the first day with a known price
    through ``end_date``. A day's value comes from the provider, else from the
    existing cache, else the previous day's value carried forward (weekends
    and holidays keep the last close).
    """

    def __init__(
        self,
        db: Session,
        security: Security,
        security_provider: SecurityConcept,
        start_date: date,
        end_date: date,
        clear_cache: bool = False,
    ):
        self.security = security
        self.security_provider = security_provider
        self.start_date = start_date
        self.end_date = end_date
        self.clear_cache = clear_cache
        self._prices = SecurityPriceRepository(db)

    def import_provider_prices(self) -> int:
        """Fetch and upsert prices. Returns the number of rows written."""
        if self.start_date > self.end_date:
            logger.warning(
                f"Invalid date range for {self.security.ticker}: {self.start_date} > {self.end_date}"
            )
            return 0

        if not self.clear_cache and self._prices.has_all_prices(
            self.security.id, self.start_date, self.end_date
        ):
            logger.info(f"No new prices to import for {self.security.ticker}")
            return 0

        response = self.security_provider.fetch_security_prices(
            self.security.ticker,
            self.start_date,
            self.end_date,
            exchange_operating_mic=self.security.exchange_operating_mic,
        )
        if not response.success:
            logger.warning(
                f"Could not fetch prices for {self.security.ticker}: {response.error}"
            )
            return 0
        if not response.data:
            logger.info(f"Provider returned no prices for {self.security.ticker}")
            return 0

        rows = self._build_rows({price.date: price for price in response.data})
        written = self._prices.upsert_many(self.security.id, rows)
        logger.info(
            f"Imported {written} prices for {self.security.ticker} "
            f"({self.start_date} to {self.end_date})"
        )
        return written

    def _build_rows(self, provider_prices: dict) -> list[tuple[date, Decimal, str]]:
        cached = {}
        if not self.clear_cache:
            cached = {
                record.date: record
                for record in self._prices.find_price_history(
                    self.security.id, self.start_date, self.end_date
                )
            }

        previous = self._prices.find_last_before(self.security.id, self.start_date)
        carried = (previous.price, previous.currency) if previous else None

        rows = []
        day = self.start_date
        while day <= self.end_date:
            if day in provider_prices:
                carried = (provider_prices[day].price, provider_prices[day].currency)
            elif day in cached:
                carried = (cached[day].price, cached[day].currency)

            if carried is not None:
                rows.append((day, carried[0], carried[1]))
            day += timedelta(days=1)

        return rows
