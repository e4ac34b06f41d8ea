"""Financial Modeling Prep (FMP) securities data provider.

Used as the fallback vendor when Synth is unavailable or has no data.
FMP quotes everything in USD and authenticates with an ``apikey`` query
parameter.
"""

import logging
from datetime import date
from typing import Any

from security_data.config import settings
from security_data.services.providers.base import (
    Provider,
    ProviderError,
    SecurityConcept,
    with_provider_response,
)
from security_data.services.providers.types import Price, Security, SecurityInfo
from security_data.services.shared.error_reporting import ErrorReporter
from security_data.services.shared.http_client import UnauthorizedError

logger = logging.getLogger(__name__)

FMP_BASE_URL = "https://financialmodelingprep.com/api/v3"
FMP_USER_AGENT = "Maybe Finance App"
FMP_SEARCH_LIMIT = 25
FMP_CURRENCY = "USD"


def _today() -> date:
    return date.today()


class FmpError(ProviderError):
    """Exception raised for FMP provider errors."""


class FmpAuthenticationError(FmpError):
    """FMP rejected the configured API key."""


class InvalidSecurityPriceError(FmpError):
    """FMP returned a price record without a usable date or price."""


class InvalidSecurityInfoError(FmpError):
    """FMP returned no usable profile for a security."""


class FmpProvider(Provider, SecurityConcept):
    """Client for security search, profiles and prices from FMP.

    Usage:
        provider = FmpProvider(api_key="...")
        response = provider.fetch_security_prices("AAPL", date(2024, 1, 1), date(2024, 1, 31))
        if response.success:
            prices = response.data
    """

    name = "FMP"
    Error = FmpError
    AuthenticationError = FmpAuthenticationError
    InvalidSecurityPriceError = InvalidSecurityPriceError

    def __init__(self, api_key: str, error_reporter: ErrorReporter | None = None, **http_options):
        http_options.setdefault("timeout", settings.provider_timeout)
        http_options.setdefault("max_retries", settings.provider_max_retries)
        http_options.setdefault("headers", {"User-Agent": FMP_USER_AGENT})
        super().__init__(
            api_key=api_key,
            base_url=FMP_BASE_URL,
            error_reporter=error_reporter,
            **http_options,
        )

    def _params(self, **params: Any) -> dict[str, Any]:
        return {**params, "apikey": self.api_key}

    @with_provider_response
    def healthy(self) -> bool:
        """Check the API key against a simple quote request."""
        try:
            parsed = self.get_json("/quote/AAPL", params=self._params())
        except UnauthorizedError as e:
            logger.error(f"FMP API 401 Unauthorized error in health check: {e}")
            logger.error(f"FMP API key being used: {self.api_key_status}")
            return False
        return isinstance(parsed, list) and len(parsed) > 0

    # ================================
    #           Securities
    # ================================

    @with_provider_response
    def search_securities(
        self,
        symbol: str,
        country_code: str | None = None,
        exchange_operating_mic: str | None = None,
    ) -> list[Security]:
        logger.info(f"FMP searching for symbol: {symbol} with API key: {self.api_key_status}")

        parsed = self._fetch_json(
            "/search", params=self._params(query=symbol, limit=FMP_SEARCH_LIMIT)
        )
        logger.info(f"FMP search returned {len(parsed)} results for symbol: {symbol}")

        results = [
            security
            for security in parsed
            if self._matches(security.get("country"), country_code)
            and self._matches(security.get("exchangeShortName"), exchange_operating_mic)
        ]
        logger.info(f"FMP search filtered to {len(results)} results for symbol: {symbol}")

        return [
            Security(
                symbol=security["symbol"],
                name=security.get("name"),
                logo_url=None,  # FMP search doesn't include logo URLs
                exchange_operating_mic=security.get("exchangeShortName"),
                country_code=security.get("country"),
            )
            for security in results
        ]

    @with_provider_response
    def fetch_security_info(self, symbol: str, exchange_operating_mic: str | None) -> SecurityInfo:
        logger.info(
            f"FMP fetching security info for symbol: {symbol} with API key: {self.api_key_status}"
        )

        data = self._fetch_json(f"/profile/{symbol}", params=self._params())

        # FMP returns an array, take the first result
        security_data = self._first(data)
        if not security_data:
            raise InvalidSecurityInfoError(f"No profile data found for {symbol}")

        website = security_data.get("website")
        return SecurityInfo(
            symbol=symbol,
            name=security_data.get("companyName"),
            links=(website,) if website else (),
            logo_url=security_data.get("image"),
            description=security_data.get("description"),
            kind=self.determine_security_kind(security_data),
            exchange_operating_mic=exchange_operating_mic,
        )

    @with_provider_response
    def fetch_security_price(
        self, symbol: str, date: date, exchange_operating_mic: str | None = None
    ) -> Price:
        logger.info(
            f"FMP fetching security price for symbol: {symbol} on date: {date} "
            f"with API key: {self.api_key_status}"
        )

        if date != _today():
            historical_data = self._historical_prices(symbol, date, date, exchange_operating_mic)
            if not historical_data:
                raise FmpError(f"No prices found for security {symbol} on date {date}")
            return historical_data[0]

        # Use real-time quote for current date
        data = self._fetch_json(f"/quote/{symbol}", params=self._params())
        price_data = self._first(data)
        if not price_data:
            raise FmpError(f"No price data found for {symbol}")

        price = self._build_price(
            symbol,
            date.isoformat(),
            (price_data.get("price"),),
            FMP_CURRENCY,
            exchange_operating_mic,
        )
        if price is None:
            raise FmpError(f"No price data found for {symbol}")
        return price

    @with_provider_response
    def fetch_security_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        exchange_operating_mic: str | None = None,
    ) -> list[Price]:
        logger.info(
            f"FMP fetching security prices for symbol: {symbol} from {start_date} to {end_date} "
            f"with API key: {self.api_key_status}"
        )
        return self._historical_prices(symbol, start_date, end_date, exchange_operating_mic)

    def _historical_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        exchange_operating_mic: str | None,
    ) -> list[Price]:
        data = self._fetch_json(
            f"/historical-price-full/{symbol}",
            params=self._params(**{"from": start_date.isoformat(), "to": end_date.isoformat()}),
        )
        historical_data = (data.get("historical") or []) if isinstance(data, dict) else []

        prices = []
        for price_data in historical_data:
            price = self._build_price(
                symbol,
                price_data.get("date"),
                (price_data.get("close"), price_data.get("adjClose")),
                FMP_CURRENCY,
                exchange_operating_mic,
            )
            if price is not None:
                prices.append(price)
        return prices

    @staticmethod
    def determine_security_kind(security_data: dict) -> str:
        """Map an FMP profile to 'etf', 'mutual_fund' or 'stock'."""
        if security_data.get("isEtf"):
            return "etf"
        if (security_data.get("exchangeShortName") or "").upper() == "MUTUAL":
            return "mutual_fund"
        return "stock"

    @staticmethod
    def _matches(value: str | None, wanted: str | None) -> bool:
        if wanted is None:
            return True
        return value is not None and value.upper() == wanted.upper()

    @staticmethod
    def _first(data: Any) -> dict | None:
        if isinstance(data, list):
            return data[0] if data else None
        return data or None
