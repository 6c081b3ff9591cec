"""Shared fixtures: in-memory storage seeded with a few accounts and locations."""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from bizmanager.activity import ActivityLogger
from bizmanager.ledger import TransactionNumberGenerator
from bizmanager.models.records import Account, Location, Transaction
from bizmanager.services.storage import (
    InMemoryAccountStorage,
    InMemoryLocationStorage,
    InMemoryStore,
    InMemoryTransactionStorage,
)


def make_transaction(
    day: date,
    amount,
    type: str = "credit",
    commission=None,
    account: Optional[Account] = None,
    location: Optional[Location] = None,
    transaction_no: Optional[str] = None,
    description: Optional[str] = None,
    **extra,
) -> Transaction:
    """Build a stored transaction with its relations attached."""
    account = account or Account(name="Walk-in")
    location = location or Location(name="Main Shop")
    return Transaction(
        transaction_no=transaction_no or f"{day:%Y%m%d}-001",
        date=day,
        amount=Decimal(str(amount)),
        commission=Decimal(str(commission)) if commission is not None else None,
        type=type,
        account_id=account.id,
        location_id=location.id,
        description=description,
        account=account,
        location=location,
        **extra,
    )


@pytest.fixture
def amit():
    return Account(name="Amit Patel", phone_number="9820012345")


@pytest.fixture
def neha():
    return Account(name="Neha Joshi")


@pytest.fixture
def mumbai():
    return Location(name="Mumbai Branch", address="Andheri East, Mumbai")


@pytest.fixture
def delhi():
    return Location(name="Delhi Branch")


@pytest.fixture
def store(amit, neha, mumbai, delhi):
    store = InMemoryStore()
    for account in (amit, neha):
        store.accounts[account.id] = account
    for location in (mumbai, delhi):
        store.locations[location.id] = location
    return store


@pytest.fixture
def transaction_storage(store):
    return InMemoryTransactionStorage(store)


@pytest.fixture
def account_storage(store):
    return InMemoryAccountStorage(store)


@pytest.fixture
def location_storage(store):
    return InMemoryLocationStorage(store)


@pytest.fixture
def number_generator(transaction_storage):
    return TransactionNumberGenerator(transaction_storage)


@pytest.fixture
def activity_logger():
    return ActivityLogger()
