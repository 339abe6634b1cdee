"""
Tests for internal order number formatting and reservation
"""
import pytest
from sqlalchemy.exc import OperationalError

from sunkool.models.order_number_counter import OrderNumberCounter
from sunkool.services import order_numbering
from sunkool.services.order_numbering import (
    format_order_number,
    next_order_number_from,
    parse_order_number,
    reserve_order_number,
    scan_next_order_number,
)
from tests.factories import create_test_customer, create_test_order


class TestFormatting:

    @pytest.mark.parametrize("value,expected", [
        (1, "SK01"),
        (9, "SK09"),
        (10, "SK10"),
        (99, "SK99"),
        (100, "SK100"),
        (1234, "SK1234"),
    ])
    def test_format(self, value, expected):
        assert format_order_number(value) == expected

    def test_custom_prefix_and_width(self):
        assert format_order_number(7, prefix="SO-", pad_width=4) == "SO-0007"

    @pytest.mark.parametrize("value,expected", [
        ("SK01", 1),
        ("SK100", 100),
        (" SK12 ", 12),
        ("SK00", None),
        ("SK", None),
        ("SKX1", None),
        ("AB12", None),
        ("", None),
        (None, None),
    ])
    def test_parse(self, value, expected):
        assert parse_order_number(value) == expected


class TestNextFromExisting:

    def test_empty_starts_at_one(self):
        assert next_order_number_from([]) == "SK01"

    def test_after_single_digits(self):
        existing = [f"SK{n:02d}" for n in range(1, 10)]
        assert next_order_number_from(existing) == "SK10"

    def test_padding_stops_after_99(self):
        assert next_order_number_from(["SK98", "SK99"]) == "SK100"

    def test_malformed_values_ignored(self):
        assert next_order_number_from(["SK05", "legacy-7", None, "SKabc"]) == "SK06"

    def test_uses_numeric_maximum_not_lexical(self):
        assert next_order_number_from(["SK99", "SK100", "SK101"]) == "SK102"


class TestScanAndReserve:

    def test_scan_reads_orders_table(self, db):
        customer = create_test_customer(db)
        for n in range(1, 10):
            create_test_order(db, customer=customer, internal_order_number=f"SK{n:02d}")
        db.commit()

        assert scan_next_order_number(db) == "SK10"

    def test_scan_falls_back_on_database_error(self, db, monkeypatch):
        def broken_query(*args, **kwargs):
            raise OperationalError("SELECT", {}, Exception("connection lost"))

        monkeypatch.setattr(db, "query", broken_query)
        assert scan_next_order_number(db) == "SK01"

    def test_reserve_seeds_counter_from_existing_orders(self, db):
        create_test_order(db, internal_order_number="SK99")
        db.commit()

        assert reserve_order_number(db) == "SK100"
        counter = db.query(OrderNumberCounter).filter_by(prefix="SK").one()
        assert counter.last_value == 100

    def test_reserve_is_monotonic(self, db):
        numbers = [reserve_order_number(db) for _ in range(3)]
        db.commit()
        assert numbers == ["SK01", "SK02", "SK03"]

    def test_reserve_does_not_rescan_once_seeded(self, db, monkeypatch):
        assert reserve_order_number(db) == "SK01"
        db.commit()

        def fail_scan(db):
            raise AssertionError("counter already seeded")

        monkeypatch.setattr(order_numbering, "scan_next_order_number", fail_scan)
        assert reserve_order_number(db) == "SK02"

    def test_rolled_back_reservation_is_released(self, db):
        assert reserve_order_number(db) == "SK01"
        db.commit()
        assert reserve_order_number(db) == "SK02"
        db.rollback()
        assert reserve_order_number(db) == "SK02"
