"""Tests for SecurityProviderService."""

import logging
from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock, patch

import pytest

from security_data.models import Security, SecurityPrice
from security_data.services.providers.base import ProviderError, ProviderResponse
from security_data.services.providers.types import Price
from security_data.services.providers.types import Security as ProviderSecurity
from security_data.services.providers.types import SecurityInfo
from security_data.services.repositories import SecurityPriceRepository
from security_data.services.securities import SecurityInfoMissingError, SecurityProviderService


def failure(message: str = "down") -> ProviderResponse:
    return ProviderResponse.failure(ProviderError(message))


def info(name: str, logo_url: str | None) -> SecurityInfo:
    return SecurityInfo("AAPL", name, (), logo_url, None, "stock", "XNAS")


@pytest.fixture
def synth():
    provider = MagicMock()
    provider.name = "Synth"
    return provider


@pytest.fixture
def fmp():
    provider = MagicMock()
    provider.name = "FMP"
    return provider


@pytest.fixture
def service(db, synth, fmp, reporter):
    registry = MagicMock()
    registry.primary_provider = synth
    registry.fallback_provider = fmp
    return SecurityProviderService(db, registry=registry, error_reporter=reporter)


class TestProviders:
    """Tests for provider access."""

    def test_primary_and_fallback(self, service, synth, fmp):
        assert service.primary_provider is synth
        assert service.fallback_provider is fmp
        assert service.available_providers == [synth, fmp]

    def test_unconfigured_providers_skipped(self, db, fmp):
        registry = MagicMock()
        registry.primary_provider = None
        registry.fallback_provider = fmp

        assert SecurityProviderService(db, registry=registry).available_providers == [fmp]


class TestSearch:
    """Tests for search."""

    def test_maps_provider_results_to_securities(self, service, synth):
        synth.search_securities.return_value = ProviderResponse.ok(
            [ProviderSecurity("AAPL", "Apple Inc.", "https://logo/AAPL", "XNAS", "US")]
        )

        results = service.search("AAPL", country_code="US", exchange_operating_mic="")

        assert len(results) == 1
        assert isinstance(results[0], Security)
        assert results[0].ticker == "AAPL"
        assert results[0].exchange_operating_mic == "XNAS"
        assert results[0].id is None
        synth.search_securities.assert_called_once_with(
            "AAPL", country_code="US", exchange_operating_mic=None
        )

    def test_falls_back_to_fmp(self, service, synth, fmp):
        synth.search_securities.return_value = failure()
        fmp.search_securities.return_value = ProviderResponse.ok(
            [ProviderSecurity("AAPL", "Apple Inc.", None, "NASDAQ", "US")]
        )

        results = service.search("AAPL")

        assert [s.ticker for s in results] == ["AAPL"]

    def test_all_fail_returns_empty(self, service, synth, fmp):
        synth.search_securities.return_value = failure()
        fmp.search_securities.return_value = failure()

        assert service.search("AAPL") == []

    def test_blank_symbol(self, service, synth):
        assert service.search(" ") == []
        synth.search_securities.assert_not_called()


class TestFindOrFetchPrice:
    """Tests for find_or_fetch_price."""

    def test_returns_cached_price(self, service, db, test_security, synth):
        db.add(
            SecurityPrice(
                security_id=test_security.id,
                date=date(2024, 1, 2),
                price=Decimal("185.64"),
                currency="USD",
            )
        )
        db.commit()

        price = service.find_or_fetch_price(test_security, date=date(2024, 1, 2))

        assert price.price == Decimal("185.64")
        synth.fetch_security_price.assert_not_called()

    def test_fetches_from_fallback_and_caches(self, service, db, test_security, synth, fmp):
        synth.fetch_security_price.return_value = failure()
        fmp.fetch_security_price.return_value = ProviderResponse.ok(
            Price("AAPL", date(2024, 1, 2), Decimal("185.64"), "USD", "XNAS")
        )

        price = service.find_or_fetch_price(test_security, date=date(2024, 1, 2))

        assert price.price == Decimal("185.64")
        cached = SecurityPriceRepository(db).find_by_security_and_date(
            test_security.id, date(2024, 1, 2)
        )
        assert cached is not None

    def test_no_cache(self, service, db, test_security, synth):
        synth.fetch_security_price.return_value = ProviderResponse.ok(
            Price("AAPL", date(2024, 1, 2), Decimal("185.64"), "USD", "XNAS")
        )

        price = service.find_or_fetch_price(test_security, date=date(2024, 1, 2), cache=False)

        assert price.price == Decimal("185.64")
        assert price.id is None
        assert (
            SecurityPriceRepository(db).find_by_security_and_date(
                test_security.id, date(2024, 1, 2)
            )
            is None
        )

    def test_defaults_to_today(self, service, test_security, synth):
        synth.fetch_security_price.return_value = failure()

        with patch(
            "security_data.services.securities.security_provider_service._today",
            return_value=date(2024, 5, 1),
        ):
            service.find_or_fetch_price(test_security)

        assert synth.fetch_security_price.call_args.args[1] == date(2024, 5, 1)

    def test_all_providers_fail(self, service, test_security, synth, fmp):
        synth.fetch_security_price.return_value = failure()
        fmp.fetch_security_price.return_value = failure()

        assert service.find_or_fetch_price(test_security, date=date(2024, 1, 2)) is None


class TestImportProviderDetails:
    """Tests for import_provider_details."""

    def test_updates_name_and_logo(self, service, db, test_security, synth):
        synth.fetch_security_info.return_value = ProviderResponse.ok(
            info("Apple Inc.", "https://logo/AAPL")
        )

        service.import_provider_details(test_security)

        db.refresh(test_security)
        assert test_security.name == "Apple Inc."
        assert test_security.logo_url == "https://logo/AAPL"

    def test_skips_when_details_present(self, service, test_security, synth):
        test_security.name = "Apple"
        test_security.logo_url = "https://logo/AAPL"

        service.import_provider_details(test_security)

        synth.fetch_security_info.assert_not_called()

    def test_clear_cache_refetches(self, service, test_security, synth):
        test_security.name = "Apple"
        test_security.logo_url = "https://logo/AAPL"
        synth.fetch_security_info.return_value = ProviderResponse.ok(
            info("Apple Inc.", "https://logo/new")
        )

        service.import_provider_details(test_security, clear_cache=True)

        assert test_security.logo_url == "https://logo/new"

    def test_falls_back_to_fmp(self, service, test_security, synth, fmp):
        synth.fetch_security_info.return_value = failure()
        fmp.fetch_security_info.return_value = ProviderResponse.ok(info("Apple Inc.", None))

        service.import_provider_details(test_security)

        assert test_security.name == "Apple Inc."

    def test_reports_when_all_fail(self, service, test_security, synth, fmp, reporter):
        synth.fetch_security_info.return_value = failure()
        fmp.fetch_security_info.return_value = failure()

        service.import_provider_details(test_security)

        error = reporter.capture_exception.call_args.args[0]
        assert isinstance(error, SecurityInfoMissingError)
        assert reporter.capture_exception.call_args.kwargs["tags"] == {
            "security_id": test_security.id
        }
        assert test_security.name is None


class TestImportProviderPrices:
    """Tests for import_provider_prices."""

    def test_stops_at_first_provider_with_prices(self, service, test_security, synth, fmp):
        synth.fetch_security_prices.return_value = ProviderResponse.ok(
            [Price("AAPL", date(2024, 1, 2), Decimal("185.64"), "USD", "XNAS")]
        )

        count = service.import_provider_prices(test_security, date(2024, 1, 2), date(2024, 1, 3))

        assert count == 2
        fmp.fetch_security_prices.assert_not_called()

    def test_falls_back_when_primary_imports_nothing(self, service, test_security, synth, fmp):
        synth.fetch_security_prices.return_value = ProviderResponse.ok([])
        fmp.fetch_security_prices.return_value = ProviderResponse.ok(
            [Price("AAPL", date(2024, 1, 2), Decimal("185.64"), "USD", "XNAS")]
        )

        count = service.import_provider_prices(test_security, date(2024, 1, 2), date(2024, 1, 2))

        assert count == 1
        fmp.fetch_security_prices.assert_called_once()

    def test_all_fail(self, service, test_security, synth, fmp):
        synth.fetch_security_prices.return_value = failure()
        fmp.fetch_security_prices.return_value = failure()

        assert service.import_provider_prices(test_security, date(2024, 1, 2), date(2024, 1, 3)) == 0

    def test_cached_range_is_not_a_failure(self, service, db, test_security, synth, fmp, caplog):
        SecurityPriceRepository(db).upsert_many(
            test_security.id,
            [
                (date(2024, 1, 2), Decimal("185.64"), "USD"),
                (date(2024, 1, 3), Decimal("184.25"), "USD"),
            ],
        )

        with caplog.at_level(logging.INFO):
            count = service.import_provider_prices(test_security, date(2024, 1, 2), date(2024, 1, 3))

        assert count == 0
        synth.fetch_security_prices.assert_not_called()
        fmp.fetch_security_prices.assert_not_called()
        assert "already cached" in caplog.text
        assert "failed" not in caplog.text
