"""Provider abstraction shared by all securities data vendors.

Every public provider operation returns a ProviderResponse instead of raising:
failures are converted to the vendor's own error class, reported to the error
sink, and handed back to the caller so it can fall back to another vendor.
"""

import functools
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Generic, TypeVar

from security_data.services.providers.types import Price, Security, SecurityInfo
from security_data.services.shared.error_reporting import ErrorReporter, get_error_reporter
from security_data.services.shared.http_client import (
    HTTPClient,
    HTTPClientError,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderError(Exception):
    """Base exception for provider failures."""

    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.details = details


@dataclass(frozen=True)
class ProviderResponse(Generic[T]):
    """Outcome of a provider operation."""

    success: bool
    data: T | None = None
    error: ProviderError | None = None

    @classmethod
    def ok(cls, data: T) -> "ProviderResponse[T]":
        return cls(success=True, data=data)

    @classmethod
    def failure(cls, error: ProviderError) -> "ProviderResponse[T]":
        return cls(success=False, error=error)


def with_provider_response(func: Callable[..., T]) -> Callable[..., ProviderResponse[T]]:
    """Wrap a provider method so it returns a ProviderResponse instead of raising."""

    @functools.wraps(func)
    def wrapper(self: "Provider", *args, **kwargs) -> ProviderResponse[T]:
        try:
            data = func(self, *args, **kwargs)
        except Exception as e:
            error = self._transform_error(e)
            logger.warning(f"{self.name} {func.__name__} failed: {error}")
            self.error_reporter.capture_exception(error, tags={"provider": self.name})
            return ProviderResponse.failure(error)
        return ProviderResponse.ok(data)

    return wrapper


class SecurityConcept(ABC):
    """Operations every securities data provider implements."""

    @abstractmethod
    def search_securities(
        self,
        symbol: str,
        country_code: str | None = None,
        exchange_operating_mic: str | None = None,
    ) -> ProviderResponse[list[Security]]: ...

    @abstractmethod
    def fetch_security_info(
        self, symbol: str, exchange_operating_mic: str | None
    ) -> ProviderResponse[SecurityInfo]: ...

    @abstractmethod
    def fetch_security_price(
        self, symbol: str, date: date, exchange_operating_mic: str | None = None
    ) -> ProviderResponse[Price]: ...

    @abstractmethod
    def fetch_security_prices(
        self,
        symbol: str,
        start_date: date,
        end_date: date,
        exchange_operating_mic: str | None = None,
    ) -> ProviderResponse[list[Price]]: ...


class Provider(HTTPClient):
    """HTTP-backed vendor adapter.

    Subclasses set ``name``, ``base_url`` and the error classes, and build
    their request headers/params around ``api_key``.
    """

    name: ClassVar[str] = "provider"
    Error: ClassVar[type[ProviderError]] = ProviderError
    AuthenticationError: ClassVar[type[ProviderError]] = ProviderError
    InvalidSecurityPriceError: ClassVar[type[ProviderError]] = ProviderError

    def __init__(
        self,
        api_key: str,
        base_url: str,
        error_reporter: ErrorReporter | None = None,
        **http_options,
    ):
        super().__init__(base_url=base_url, **http_options)
        self.api_key = api_key
        self._error_reporter = error_reporter
        logger.info(f"{self.name} provider initialized with API key: {self.api_key_status}")

    @property
    def api_key_status(self) -> str:
        """'present' or 'missing'; the key itself is never logged."""
        return "present" if self.api_key else "missing"

    @property
    def error_reporter(self) -> ErrorReporter:
        return self._error_reporter or get_error_reporter()

    def _transform_error(self, error: Exception) -> ProviderError:
        if isinstance(error, self.Error):
            return error
        if isinstance(error, HTTPClientError):
            return self.Error(str(error), details=error.response_body)
        return self.Error(str(error))

    def _fetch_json(self, path: str, params: dict | None = None) -> Any:
        """GET a vendor endpoint, translating 401s into the authentication error."""
        try:
            return self.get_json(path, params=params)
        except UnauthorizedError as e:
            logger.error(f"{self.name} API 401 Unauthorized error: {e}")
            logger.error(f"{self.name} API key being used: {self.api_key_status}")
            raise self.AuthenticationError(
                f"{self.name} API authentication failed. Please check your API key.",
                details=e.response_body,
            ) from e

    def _build_price(
        self,
        symbol: str,
        raw_date: Any,
        raw_prices: Sequence[Any],
        currency: str,
        exchange_operating_mic: str | None,
    ) -> Price | None:
        """Build a Price from one vendor record, or report it and return None.

        ``raw_prices`` lists the record's price fields in order of preference;
        the first one that parses as a finite decimal is used.
        """
        try:
            price_date = date.fromisoformat(str(raw_date)[:10]) if raw_date else None
        except ValueError:
            price_date = None
        price = next(
            (p for p in map(self._parse_price, raw_prices) if p is not None), None
        )

        if price_date is None or price is None:
            logger.warning(
                f"{self.name} returned invalid price data for security {symbol} on: "
                f"{raw_date}. Price data: {list(raw_prices)!r}"
            )
            self.error_reporter.capture_exception(
                self.InvalidSecurityPriceError(f"{self.name} returned invalid security price data"),
                level="warning",
                context={"security": {"symbol": symbol, "date": raw_date}},
            )
            return None

        return Price(
            symbol=symbol,
            date=price_date,
            price=price,
            currency=currency,
            exchange_operating_mic=exchange_operating_mic,
        )

    @staticmethod
    def _parse_price(raw_price: Any) -> Decimal | None:
        if raw_price is None:
            return None
        try:
            price = Decimal(str(raw_price))
        except InvalidOperation:
            return None
        # NaN and infinities parse but are not prices
        return price if price.is_finite() else None
