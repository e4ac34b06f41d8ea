"""Value objects produced by securities data providers."""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class Security:
    """Search result for a listed security."""

    symbol: str
    name: str | None
    logo_url: str | None
    exchange_operating_mic: str | None
    country_code: str | None


@dataclass(frozen=True)
class SecurityInfo:
    """Descriptive profile of a security."""

    symbol: str
    name: str | None
    links: tuple[str, ...]
    logo_url: str | None
    description: str | None
    kind: str | None  # 'stock', 'etf', 'mutual_fund' or vendor-specific
    exchange_operating_mic: str | None


@dataclass(frozen=True)
class Price:
    """Closing price of a security on one day."""

    symbol: str
    date: date
    price: Decimal
    currency: str
    exchange_operating_mic: str | None
