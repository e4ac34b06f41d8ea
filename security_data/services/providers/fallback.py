"""Ordered fallback across securities data providers.

The first provider is the primary vendor; the rest are tried in order when
it fails or comes back empty.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import date

from security_data.services.providers.base import (
    ProviderError,
    ProviderResponse,
    SecurityConcept,
)
from security_data.services.providers.types import Price, Security, SecurityInfo

logger = logging.getLogger(__name__)


class SecuritiesProviderChain(SecurityConcept):
    """Run securities operations against providers until one gives usable data.

    Example:
        chain = SecuritiesProviderChain([synth, fmp])
        response = chain.fetch_security_prices("AAPL", date(2024, 1, 1), date(2024, 1, 31))
    """

    def __init__(self, providers: Sequence[SecurityConcept]):
        self.providers = [provider for provider in providers if provider is not None]

    def search_securities(
        self,
        symbol: str,
        country_code: str | None = None,
        exchange_operating_mic: str | None = None,
    ) -> ProviderResponse[list[Security]]:
        if not symbol or not symbol.strip():
            return ProviderResponse.ok([])

        return self._first_usable(
            "search_securities",
            lambda provider: provider.search_securities(
                symbol, country_code=country_code, exchange_operating_mic=exchange_operating_mic
            ),
            require_data=True,
            accept_empty_from_last=True,
        )

    def fetch_security_info(
        self, symbol: str, exchange_operating_mic: str | None
    ) -> ProviderResponse[SecurityInfo]:
        return self._first_usable(
            "fetch_security_info",
            lambda provider: provider.fetch_security_info(symbol, exchange_operating_mic),
        )

    def fetch_security_price(
        self, symbol: str, date: date, exchange_operating_mic: str | None = None
    ) -> ProviderResponse[Price]:
        return self._first_usable(
            "fetch_security_price",
            lambda provider: provider.fetch_security_price(
                symbol, date, exchange_operating_mic=exchange_operating_mic
            ),
        )

    def fetch_security_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        exchange_operating_mic: str | None = None,
    ) -> ProviderResponse[list[Price]]:
        return self._first_usable(
            "fetch_security_prices",
            lambda provider: provider.fetch_security_prices(
                symbol, start_date, end_date, exchange_operating_mic=exchange_operating_mic
            ),
            require_data=True,
        )

    def _first_usable(
        self,
        operation: str,
        call: Callable[[SecurityConcept], ProviderResponse],
        require_data: bool = False,
        accept_empty_from_last: bool = False,
    ) -> ProviderResponse:
        """Return the first successful response, trying providers in order.

        With ``require_data``, successful but empty responses also fall through
        to the next provider. When every provider fails, the last failure is
        returned; when they all succeed empty, an empty success is returned.
        """
        if not self.providers:
            return ProviderResponse.failure(ProviderError("No securities providers configured"))

        last_failure: ProviderResponse | None = None
        empty_success: ProviderResponse | None = None

        for index, provider in enumerate(self.providers):
            provider_name = getattr(provider, "name", type(provider).__name__)
            is_last = index == len(self.providers) - 1
            response = call(provider)

            if not response.success:
                logger.warning(f"{operation} failed on {provider_name}: {response.error}")
                last_failure = response
                continue

            if require_data and not response.data and not (accept_empty_from_last and is_last):
                logger.info(f"{operation} returned no data from {provider_name}")
                empty_success = response
                continue

            return response

        return empty_success or last_failure
