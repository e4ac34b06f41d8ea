"""Tests for SecurityPriceRepository and SecurityRepository."""

from datetime import date
from decimal import Decimal

import pytest

from security_data.models import Security, SecurityPrice
from security_data.services.repositories import (
    NotFoundError,
    SecurityPriceRepository,
    SecurityRepository,
)


def add_price(db, security, day, price, currency="USD"):
    db.add(SecurityPrice(security_id=security.id, date=day, price=Decimal(price), currency=currency))
    db.commit()


class TestSecurityPriceRepository:
    """Test cases for SecurityPriceRepository."""

    def test_find_by_security_and_date(self, db, test_security):
        add_price(db, test_security, date(2024, 1, 2), "185.64")

        repo = SecurityPriceRepository(db)

        assert repo.find_by_security_and_date(test_security.id, date(2024, 1, 2)).price == Decimal(
            "185.64"
        )
        assert repo.find_by_security_and_date(test_security.id, date(2024, 1, 3)) is None

    def test_find_price_history_ordered(self, db, test_security):
        add_price(db, test_security, date(2024, 1, 3), "184.25")
        add_price(db, test_security, date(2024, 1, 2), "185.64")
        add_price(db, test_security, date(2024, 1, 10), "186.19")

        history = SecurityPriceRepository(db).find_price_history(
            test_security.id, date(2024, 1, 1), date(2024, 1, 5)
        )

        assert [p.date for p in history] == [date(2024, 1, 2), date(2024, 1, 3)]

    def test_find_last_before(self, db, test_security):
        add_price(db, test_security, date(2023, 12, 28), "193.58")
        add_price(db, test_security, date(2023, 12, 29), "192.53")

        last = SecurityPriceRepository(db).find_last_before(test_security.id, date(2024, 1, 2))

        assert last.date == date(2023, 12, 29)

    def test_count_in_range(self, db, test_security):
        add_price(db, test_security, date(2024, 1, 2), "185.64")
        add_price(db, test_security, date(2024, 1, 3), "184.25")

        repo = SecurityPriceRepository(db)

        assert repo.count_in_range(test_security.id, date(2024, 1, 2), date(2024, 1, 3)) == 2
        assert repo.count_in_range(test_security.id, date(2024, 1, 4), date(2024, 1, 5)) == 0

    def test_has_all_prices(self, db, test_security):
        add_price(db, test_security, date(2024, 1, 2), "185.64")
        add_price(db, test_security, date(2024, 1, 3), "184.25")

        repo = SecurityPriceRepository(db)

        assert repo.has_all_prices(test_security.id, date(2024, 1, 2), date(2024, 1, 3))
        assert not repo.has_all_prices(test_security.id, date(2024, 1, 2), date(2024, 1, 4))

    def test_find_or_create_keeps_existing(self, db, test_security):
        add_price(db, test_security, date(2024, 1, 2), "185.64")

        record = SecurityPriceRepository(db).find_or_create(
            test_security.id, date(2024, 1, 2), Decimal("1.00"), "USD"
        )

        assert record.price == Decimal("185.64")

    def test_upsert_many_inserts_and_updates(self, db, test_security):
        add_price(db, test_security, date(2024, 1, 2), "100.00")

        repo = SecurityPriceRepository(db)
        written = repo.upsert_many(
            test_security.id,
            [
                (date(2024, 1, 2), Decimal("185.64"), "USD"),
                (date(2024, 1, 3), Decimal("184.25"), "USD"),
            ],
        )

        assert written == 2
        history = repo.find_price_history(test_security.id, date(2024, 1, 1), date(2024, 1, 31))
        assert [(p.date, p.price) for p in history] == [
            (date(2024, 1, 2), Decimal("185.64")),
            (date(2024, 1, 3), Decimal("184.25")),
        ]

    def test_upsert_many_empty(self, db, test_security):
        assert SecurityPriceRepository(db).upsert_many(test_security.id, []) == 0


class TestSecurityRepository:
    """Test cases for SecurityRepository."""

    def test_find_by_ticker(self, db, test_security):
        repo = SecurityRepository(db)

        assert repo.find_by_ticker("AAPL").id == test_security.id
        assert repo.find_by_ticker("AAPL", "XNAS").id == test_security.id
        assert repo.find_by_ticker("AAPL", "XLON") is None

    def test_get_by_id_missing(self, db):
        with pytest.raises(NotFoundError, match="Security not found: 999"):
            SecurityRepository(db).get_by_id(999)

    def test_save(self, db):
        security = SecurityRepository(db).save(Security(ticker="MSFT", exchange_operating_mic="XNAS"))

        assert security.id is not None
        assert SecurityRepository(db).get_by_id(security.id).ticker == "MSFT"
