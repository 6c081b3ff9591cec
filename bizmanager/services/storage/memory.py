"""
In-Memory Storage Implementation

Used by the test suite and as the fallback when no remote store is
configured. Data lives only as long as the process.
"""

from typing import Optional
from uuid import UUID

from bizmanager.models.records import (
    Account,
    AccountCreate,
    Location,
    LocationCreate,
    Transaction,
    TransactionCreate,
    TransactionFilters,
    TransactionPage,
    utc_now,
)
from bizmanager.services.storage.interface import (
    AccountStorageInterface,
    LocationStorageInterface,
    NotFoundError,
    TransactionStorageInterface,
    matches_filters,
    paginate,
)


class InMemoryStore:
    """Shared tables for the in-memory storages."""

    def __init__(self):
        self.accounts: dict[UUID, Account] = {}
        self.locations: dict[UUID, Location] = {}
        self.transactions: dict[UUID, Transaction] = {}


class InMemoryAccountStorage(AccountStorageInterface):

    def __init__(self, store: Optional[InMemoryStore] = None):
        self._store = store or InMemoryStore()

    async def list_accounts(self) -> list[Account]:
        return sorted(self._store.accounts.values(), key=lambda a: a.name)

    async def get_account(self, account_id: UUID) -> Optional[Account]:
        return self._store.accounts.get(account_id)

    async def create_account(self, payload: AccountCreate) -> Account:
        account = Account(**payload.model_dump())
        self._store.accounts[account.id] = account
        return account

    async def update_account(self, account_id: UUID, payload: AccountCreate) -> Account:
        existing = self._store.accounts.get(account_id)
        if existing is None:
            raise NotFoundError(f"Account not found: {account_id}")
        updated = existing.model_copy(
            update={**payload.model_dump(), "updated_at": utc_now()}
        )
        self._store.accounts[account_id] = updated
        return updated

    async def delete_account(self, account_id: UUID) -> bool:
        return self._store.accounts.pop(account_id, None) is not None


class InMemoryLocationStorage(LocationStorageInterface):

    def __init__(self, store: Optional[InMemoryStore] = None):
        self._store = store or InMemoryStore()

    async def list_locations(self) -> list[Location]:
        return sorted(self._store.locations.values(), key=lambda l: l.name)

    async def get_location(self, location_id: UUID) -> Optional[Location]:
        return self._store.locations.get(location_id)

    async def create_location(self, payload: LocationCreate) -> Location:
        location = Location(**payload.model_dump())
        self._store.locations[location.id] = location
        return location

    async def update_location(self, location_id: UUID, payload: LocationCreate) -> Location:
        existing = self._store.locations.get(location_id)
        if existing is None:
            raise NotFoundError(f"Location not found: {location_id}")
        updated = existing.model_copy(
            update={**payload.model_dump(), "updated_at": utc_now()}
        )
        self._store.locations[location_id] = updated
        return updated

    async def delete_location(self, location_id: UUID) -> bool:
        return self._store.locations.pop(location_id, None) is not None


class InMemoryTransactionStorage(TransactionStorageInterface):
    """
    Transaction storage backed by a dict.

    Keeps an ordered list of create calls so tests can assert on
    import ordering.
    """

    def __init__(self, store: Optional[InMemoryStore] = None):
        self._store = store or InMemoryStore()
        self.created: list[TransactionCreate] = []

    def _with_relations(self, transaction: Transaction) -> Transaction:
        return transaction.model_copy(update={
            "account": self._store.accounts.get(transaction.account_id),
            "location": self._store.locations.get(transaction.location_id),
        })

    async def list_transactions(
        self,
        filters: Optional[TransactionFilters] = None,
    ) -> TransactionPage:
        filters = filters or TransactionFilters()
        matching = [
            self._with_relations(t)
            for t in self._store.transactions.values()
            if matches_filters(t, filters)
        ]
        return paginate(matching, filters)

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        transaction = self._store.transactions.get(transaction_id)
        return self._with_relations(transaction) if transaction else None

    async def create_transaction(self, payload: TransactionCreate) -> Transaction:
        transaction = Transaction(**payload.model_dump())
        self._store.transactions[transaction.id] = transaction
        self.created.append(payload)
        return self._with_relations(transaction)

    async def update_transaction(
        self,
        transaction_id: UUID,
        payload: TransactionCreate,
    ) -> Transaction:
        existing = self._store.transactions.get(transaction_id)
        if existing is None:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
        updated = existing.model_copy(
            update={**payload.model_dump(), "updated_at": utc_now()}
        )
        self._store.transactions[transaction_id] = updated
        return self._with_relations(updated)

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        return self._store.transactions.pop(transaction_id, None) is not None
