"""Securities backed by external data providers.

Single entry point the application uses to look up securities, keep their
details current and cache their prices. Synth is tried first; FMP is the
fallback when Synth fails or has nothing.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from security_data.models import Security, SecurityPrice
from security_data.services.providers import (
    Provider,
    ProviderRegistry,
    SecuritiesProviderChain,
)
from security_data.services.repositories import SecurityPriceRepository, SecurityRepository
from security_data.services.securities.price_importer import SecurityPriceImporter
from security_data.services.shared.error_reporting import ErrorReporter, get_error_reporter

logger = logging.getLogger(__name__)


class SecurityInfoMissingError(Exception):
    """No provider could describe a security."""


class SecurityProviderService:
    """Search, describe and price securities through the provider fallback chain.

    Example:
        service = SecurityProviderService(db)
        results = service.search("AAPL", country_code="US")
        price = service.find_or_fetch_price(security, date(2024, 1, 2))
    """

    def __init__(
        self,
        db: Session,
        registry: ProviderRegistry | None = None,
        error_reporter: ErrorReporter | None = None,
    ):
        self._db = db
        self.registry = registry or ProviderRegistry.for_concept("securities")
        self._error_reporter = error_reporter
        self._securities = SecurityRepository(db)
        self._prices = SecurityPriceRepository(db)

    @property
    def error_reporter(self) -> ErrorReporter:
        return self._error_reporter or get_error_reporter()

    @property
    def primary_provider(self) -> Provider | None:
        return self.registry.primary_provider

    @property
    def fallback_provider(self) -> Provider | None:
        return self.registry.fallback_provider

    @property
    def available_providers(self) -> list[Provider]:
        return [p for p in (self.primary_provider, self.fallback_provider) if p is not None]

    @property
    def chain(self) -> SecuritiesProviderChain:
        return SecuritiesProviderChain(self.available_providers)

    def search(
        self,
        symbol: str,
        country_code: str | None = None,
        exchange_operating_mic: str | None = None,
    ) -> list[Security]:
        """Search providers for securities matching a symbol.

        Returns unsaved Security instances suitable for display; an empty
        list when the symbol is blank or every provider fails.
        """
        if not symbol or not symbol.strip():
            return []

        response = self.chain.search_securities(
            symbol,
            country_code=country_code or None,
            exchange_operating_mic=exchange_operating_mic or None,
        )
        if not response.success:
            return []

        return [
            Security(
                ticker=provider_security.symbol,
                name=provider_security.name,
                logo_url=provider_security.logo_url,
                exchange_operating_mic=provider_security.exchange_operating_mic,
                country_code=provider_security.country_code,
            )
            for provider_security in response.data
        ]

    def find_or_fetch_price(
        self, security: Security, date: date | None = None, cache: bool = True
    ) -> SecurityPrice | None:
        """Return the cached price for a day, fetching it from providers if missing.

        Args:
            security: Security to price
            date: Day to price (default: today)
            cache: Persist a fetched price

        Returns:
            SecurityPrice (unsaved when cache is False), or None if all providers fail
        """
        target_date = date or _today()

        price = self._prices.find_by_security_and_date(security.id, target_date)
        if price is not None:
            return price

        response = self.chain.fetch_security_price(
            security.ticker,
            target_date,
            exchange_operating_mic=security.exchange_operating_mic,
        )
        if not response.success:
            logger.warning(f"All providers failed to fetch price for {security.ticker}")
            return None

        price_data = response.data
        if cache:
            return self._prices.find_or_create(
                security.id, price_data.date, price_data.price, price_data.currency
            )
        return SecurityPrice(
            security_id=security.id,
            date=price_data.date,
            price=price_data.price,
            currency=price_data.currency,
        )

    def import_provider_details(self, security: Security, clear_cache: bool = False) -> None:
        """Fill in a security's name and logo from the first provider that knows it."""
        if security.name and security.logo_url and not clear_cache:
            return

        response = self.chain.fetch_security_info(
            security.ticker, security.exchange_operating_mic
        )
        if response.success:
            security.name = response.data.name
            security.logo_url = response.data.logo_url
            self._securities.save(security)
            return

        self.error_reporter.capture_exception(
            SecurityInfoMissingError("Failed to get security info from all providers"),
            level="warning",
            tags={"security_id": security.id},
            context={"security": {"id": security.id, "ticker": security.ticker}},
        )

    def import_provider_prices(
        self,
        security: Security,
        start_date: date,
        end_date: date,
        clear_cache: bool = False,
    ) -> int:
        """Import a range of prices from the first provider that has any.

        Returns:
            Number of prices written (0 when the range is already cached)
        """
        if start_date > end_date:
            logger.warning(f"Invalid date range for {security.ticker}: {start_date} > {end_date}")
            return 0

        if not clear_cache and self._prices.has_all_prices(security.id, start_date, end_date):
            logger.info(f"Prices for {security.ticker} already cached from {start_date} to {end_date}")
            return 0

        total_imported = 0

        for provider in self.available_providers:
            imported_count = SecurityPriceImporter(
                self._db,
                security=security,
                security_provider=provider,
                start_date=start_date,
                end_date=end_date,
                clear_cache=clear_cache,
            ).import_provider_prices()

            if imported_count > 0:
                total_imported += imported_count
                break

            logger.warning(f"Provider {provider.name} failed to import prices for {security.ticker}")

        if total_imported == 0:
            logger.warning(f"All providers failed to import prices for {security.ticker}")

        return total_imported


def _today() -> date:
    return date.today()
