"""Tests for transaction numbering."""

import asyncio
from datetime import date

from bizmanager.ledger import (
    TransactionNumberGenerator,
    fallback_transaction_no,
    next_transaction_no,
)
from bizmanager.services.storage import InMemoryTransactionStorage, StorageError

from tests.conftest import make_transaction


JAN_8 = date(2025, 1, 8)


class TestNextTransactionNo:
    """Tests for the pure sequence rule."""

    def test_first_of_day(self):
        assert next_transaction_no([], JAN_8) == "20250108-001"

    def test_continues_from_highest_suffix(self):
        """Test that gaps are not filled."""
        existing = ["20250108-001", "20250108-005", "20250108-003"]
        assert next_transaction_no(existing, JAN_8) == "20250108-006"

    def test_ignores_other_days_and_custom_numbers(self):
        """Test that foreign prefixes and non-numeric suffixes are skipped."""
        existing = ["20250107-009", "20250108-abc", "INV42", "", "20250108-002"]
        assert next_transaction_no(existing, JAN_8) == "20250108-003"

    def test_grows_past_three_digits(self):
        assert next_transaction_no(["20250108-999"], JAN_8) == "20250108-1000"

    def test_superscript_suffix_ignored(self):
        """Test that digit-like characters int() can't read are skipped."""
        existing = ["20250108-\u00b2", "20250108-004"]
        assert next_transaction_no(existing, JAN_8) == "20250108-005"


class TestFallback:
    """Tests for the timestamp-based fallback."""

    def test_uses_last_three_millisecond_digits(self):
        assert fallback_transaction_no(date(2025, 8, 4), now_ms=1722771234567) == (
            "20250804-567"
        )

    def test_uses_clock_by_default(self):
        number = fallback_transaction_no(JAN_8)
        assert number.startswith("20250108-")
        assert len(number.split("-")[1]) == 3


class TestTransactionNumberGenerator:
    """Tests for generation against storage."""

    def test_counts_only_the_target_day(self, store, transaction_storage):
        """Test that numbers from other days don't affect the sequence."""
        for t in (
            make_transaction(JAN_8, 10, transaction_no="20250108-002"),
            make_transaction(date(2025, 1, 7), 10, transaction_no="20250107-010"),
        ):
            store.transactions[t.id] = t

        generator = TransactionNumberGenerator(transaction_storage)
        assert asyncio.run(generator.generate(JAN_8)) == "20250108-003"
        assert asyncio.run(generator.generate(date(2025, 1, 9))) == "20250109-001"

    def test_sees_more_than_one_page(self, store, transaction_storage):
        """Test that a busy day is not limited to the default page size."""
        for i in range(1, 31):
            t = make_transaction(JAN_8, 10, transaction_no=f"20250108-{i:03d}")
            store.transactions[t.id] = t

        generator = TransactionNumberGenerator(transaction_storage)
        assert asyncio.run(generator.generate(JAN_8)) == "20250108-031"

    def test_falls_back_when_storage_fails(self, store):
        """Test that a read failure still yields a number for the day."""

        class FailingStorage(InMemoryTransactionStorage):
            async def list_transactions(self, filters=None):
                raise StorageError("sheet unavailable")

        generator = TransactionNumberGenerator(FailingStorage(store))
        number = asyncio.run(generator.generate(JAN_8))
        assert number.startswith("20250108-")
        assert len(number) == len("20250108-000")
