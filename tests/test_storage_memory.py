"""Tests for the in-memory storage and the shared filter helpers."""

import asyncio
import pytest
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from bizmanager.models.records import (
    AccountCreate,
    LocationCreate,
    TransactionFilters,
)
from bizmanager.services.storage import NotFoundError

from tests.conftest import make_transaction


BASE_TIME = datetime(2025, 1, 8, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def seeded(store, amit, neha, mumbai, delhi):
    """Five transactions with explicit creation times."""
    transactions = [
        make_transaction(date(2025, 1, 8), 100, "credit", account=amit, location=mumbai,
                         transaction_no="20250108-001", description="Cash sale",
                         created_at=BASE_TIME),
        make_transaction(date(2025, 1, 8), 200, "debit", account=neha, location=delhi,
                         transaction_no="20250108-002", description="Supplier payment",
                         created_at=BASE_TIME + timedelta(minutes=5)),
        make_transaction(date(2025, 1, 7), 300, "credit", account=amit, location=delhi,
                         transaction_no="20250107-001", created_at=BASE_TIME),
        make_transaction(date(2025, 1, 6), 400, "credit", account=neha, location=mumbai,
                         transaction_no="20250106-001", description="Advance",
                         created_at=BASE_TIME),
        make_transaction(date(2025, 1, 5), 500, "debit", account=amit, location=mumbai,
                         transaction_no="INV-77", created_at=BASE_TIME),
    ]
    for t in transactions:
        # Stored without relations, the way a sheet row is
        store.transactions[t.id] = t.model_copy(update={"account": None, "location": None})
    return transactions


def listing(storage, **filters):
    return asyncio.run(storage.list_transactions(TransactionFilters(**filters)))


class TestTransactionListing:
    """Tests for filtering, ordering and pagination."""

    def test_newest_first(self, transaction_storage, seeded):
        """Test ordering by date then creation time, both descending."""
        page = listing(transaction_storage)
        assert [t.transaction_no for t in page.data] == [
            "20250108-002",
            "20250108-001",
            "20250107-001",
            "20250106-001",
            "INV-77",
        ]

    def test_pagination_and_count(self, transaction_storage, seeded):
        """Test that count is the full match count, not the page size."""
        page = listing(transaction_storage, page=2, limit=2)
        assert page.count == 5
        assert [t.transaction_no for t in page.data] == ["20250107-001", "20250106-001"]

    def test_past_last_page_is_empty(self, transaction_storage, seeded):
        page = listing(transaction_storage, page=4, limit=2)
        assert page.data == []
        assert page.count == 5

    def test_location_filter(self, transaction_storage, seeded, mumbai):
        page = listing(transaction_storage, location_id=mumbai.id)
        assert page.count == 3
        assert all(t.location_id == mumbai.id for t in page.data)

    def test_account_and_type_filter(self, transaction_storage, seeded, amit):
        page = listing(transaction_storage, account_id=amit.id, type="debit")
        assert [t.transaction_no for t in page.data] == ["INV-77"]

    def test_date_range_inclusive(self, transaction_storage, seeded):
        """Test that both ends of the range are included."""
        page = listing(
            transaction_storage,
            date_from=date(2025, 1, 6),
            date_to=date(2025, 1, 7),
        )
        assert sorted(t.transaction_no for t in page.data) == ["20250106-001", "20250107-001"]

    def test_search_number_and_description(self, transaction_storage, seeded):
        """Test case-insensitive search on both fields."""
        assert listing(transaction_storage, search="inv").count == 1
        assert listing(transaction_storage, search="SUPPLIER").count == 1
        assert listing(transaction_storage, search="20250108").count == 2
        assert listing(transaction_storage, search="nothing-like-this").count == 0

    def test_relations_joined(self, transaction_storage, seeded):
        """Test that listed transactions carry account and location."""
        first = listing(transaction_storage).data[0]
        assert first.account_name == "Neha Joshi"
        assert first.location_name == "Delhi Branch"

    def test_missing_relation_is_none(self, store, transaction_storage):
        """Test a transaction whose account was deleted."""
        orphan = make_transaction(date(2025, 1, 8), 10).model_copy(
            update={"account": None, "location": None}
        )
        store.transactions[orphan.id] = orphan
        fetched = asyncio.run(transaction_storage.get_transaction(orphan.id))
        assert fetched.account is None
        assert fetched.account_name == "Unknown"


class TestTransactionWrites:
    """Tests for create, update and delete."""

    def test_update_bumps_updated_at(self, transaction_storage, seeded):
        original = seeded[0]
        payload = original.to_create().model_copy(update={"description": "Edited"})
        updated = asyncio.run(transaction_storage.update_transaction(original.id, payload))
        assert updated.description == "Edited"
        assert updated.id == original.id
        assert updated.created_at == original.created_at
        assert updated.updated_at >= original.updated_at

    def test_update_missing_raises(self, transaction_storage, seeded):
        with pytest.raises(NotFoundError):
            asyncio.run(
                transaction_storage.update_transaction(uuid4(), seeded[0].to_create())
            )

    def test_delete(self, transaction_storage, seeded):
        assert asyncio.run(transaction_storage.delete_transaction(seeded[0].id)) is True
        assert asyncio.run(transaction_storage.delete_transaction(seeded[0].id)) is False
        assert listing(transaction_storage).count == 4


class TestDirectoryStorage:
    """Tests for accounts and locations."""

    def test_accounts_sorted_by_name(self, account_storage):
        asyncio.run(account_storage.create_account(AccountCreate(name="Zara Traders")))
        names = [a.name for a in asyncio.run(account_storage.list_accounts())]
        assert names == ["Amit Patel", "Neha Joshi", "Zara Traders"]

    def test_update_account(self, account_storage, amit):
        updated = asyncio.run(account_storage.update_account(
            amit.id, AccountCreate(name="Amit Patel", phone_number="9000000000")
        ))
        assert updated.phone_number == "9000000000"
        assert asyncio.run(account_storage.get_account(amit.id)).phone_number == "9000000000"

    def test_update_missing_location_raises(self, location_storage):
        with pytest.raises(NotFoundError):
            asyncio.run(location_storage.update_location(uuid4(), LocationCreate(name="X")))

    def test_create_and_delete_location(self, location_storage):
        created = asyncio.run(location_storage.create_location(
            LocationCreate(name="Pune Branch", address="FC Road")
        ))
        assert asyncio.run(location_storage.get_location(created.id)).address == "FC Road"
        assert asyncio.run(location_storage.delete_location(created.id)) is True
        assert asyncio.run(location_storage.get_location(created.id)) is None
