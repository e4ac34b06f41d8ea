"""Synth Finance securities data provider (primary vendor)."""

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

logger = logging.getLogger(__name__)

SYNTH_BASE_URL = "https://api.synthfinance.com"
DEFAULT_CURRENCY = "USD"


class SynthError(ProviderError):
    """Exception raised for Synth provider errors."""


class SynthAuthenticationError(SynthError):
    """Synth rejected the configured API key."""


class InvalidSecurityPriceError(SynthError):
    """Synth returned a price record without a usable date or price."""


class SynthProvider(Provider, SecurityConcept):
    """Client for security search, profiles and prices from Synth.

    Synth authenticates with a Bearer token and expects the calling
    application to identify itself through the X-Source headers.
    """

    name = "Synth"
    Error = SynthError
    AuthenticationError = SynthAuthenticationError
    InvalidSecurityPriceError = InvalidSecurityPriceError

    def __init__(self, api_key: str, error_reporter: ErrorReporter | None = None, **http_options):
        http_options.setdefault("timeout", settings.provider_timeout)
        http_options.setdefault("max_retries", settings.provider_max_retries)
        http_options.setdefault(
            "headers",
            {
                "Authorization": f"Bearer {api_key}",
                "X-Source": settings.app_name,
                "X-Source-Type": settings.app_type,
            },
        )
        super().__init__(
            api_key=api_key,
            base_url=SYNTH_BASE_URL,
            error_reporter=error_reporter,
            **http_options,
        )

    @with_provider_response
    def healthy(self) -> bool:
        """Check the API key by fetching the account it belongs to."""
        data = self._fetch_json("/user")
        return bool(data.get("id"))

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
        params: dict[str, Any] = {"name": symbol, "dataset": "limited"}
        if country_code:
            params["country_code"] = country_code
        if exchange_operating_mic:
            params["exchange_operating_mic"] = exchange_operating_mic

        data = self._fetch_json("/tickers/search", params=params)
        securities = data.get("data") or []
        logger.info(f"Synth search returned {len(securities)} results for symbol: {symbol}")

        results = []
        for security in securities:
            if not security.get("symbol"):
                logger.warning(f"Synth search returned a result without a symbol: {security!r}")
                continue
            exchange = security.get("exchange") or {}
            results.append(
                Security(
                    symbol=security["symbol"],
                    name=security.get("name"),
                    logo_url=security.get("logo_url"),
                    exchange_operating_mic=exchange.get("operating_mic_code"),
                    country_code=exchange.get("country_code"),
                )
            )
        return results

    @with_provider_response
    def fetch_security_info(self, symbol: str, exchange_operating_mic: str | None) -> SecurityInfo:
        params = {"operating_mic": exchange_operating_mic} if exchange_operating_mic else None
        data = self._fetch_json(f"/tickers/{symbol}", params=params)
        security = data.get("data")
        if not security:
            raise SynthError(f"No profile data found for {symbol}")

        return SecurityInfo(
            symbol=security.get("ticker") or symbol,
            name=security.get("name"),
            links=tuple(security.get("links") or ()),
            logo_url=security.get("logo_url"),
            description=security.get("description"),
            kind=security.get("kind"),
            exchange_operating_mic=(security.get("exchange") or {}).get("operating_mic_code")
            or exchange_operating_mic,
        )

    @with_provider_response
    def fetch_security_price(
        self, symbol: str, date: date, exchange_operating_mic: str | None = None
    ) -> Price:
        prices = self._open_close_prices(symbol, date, date, exchange_operating_mic)
        if not prices:
            raise SynthError(f"No prices found for security {symbol} on date {date}")
        return prices[0]

    @with_provider_response
    def fetch_security_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        exchange_operating_mic: str | None = None,
    ) -> list[Price]:
        return self._open_close_prices(symbol, start_date, end_date, exchange_operating_mic)

    def _open_close_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        exchange_operating_mic: str | None,
    ) -> list[Price]:
        params = {
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        }
        if exchange_operating_mic:
            params["operating_mic_code"] = exchange_operating_mic

        # Single page only; range requests are small enough to fit one response
        total_pages = 1
        prices: list[Price] = []
        for _page in range(total_pages):
            data = self._fetch_json(f"/tickers/{symbol}/open-close", params=params)
            currency = data.get("currency") or DEFAULT_CURRENCY
            exchange_mic = (data.get("exchange") or {}).get(
                "operating_mic_code"
            ) or exchange_operating_mic

            for price_data in data.get("prices") or []:
                price = self._build_price(
                    symbol,
                    price_data.get("date"),
                    (price_data.get("close"), price_data.get("open")),
                    currency,
                    exchange_mic,
                )
                if price is not None:
                    prices.append(price)

        logger.info(f"Synth returned {len(prices)} prices for {symbol}")
        return prices
