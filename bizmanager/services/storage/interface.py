"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a real database later
2. Use in-memory storage for testing
3. Keep business logic decoupled from storage implementation

The interface is intentionally simple - we're not building a full ORM.
Just the CRUD operations the screens need, plus transaction listing with
filters and pagination.

Every implementation returns typed records. Rows that cannot be parsed are
dropped at this boundary and never reach aggregation.
"""

from abc import ABC, abstractmethod
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
)


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Any storage implementation (Google Sheets, PostgreSQL, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def list_transactions(
        self,
        filters: Optional[TransactionFilters] = None,
    ) -> TransactionPage:
        """
        List transactions matching the filters.

        Results are sorted by date (newest first), then by creation time
        (newest first), and paginated with filters.page / filters.limit.
        Each transaction has its account and location relations joined in.

        Returns:
            The requested page and the total match count
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        """
        Retrieve a transaction by its ID.

        Returns:
            The transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_transaction(self, payload: TransactionCreate) -> Transaction:
        """
        Create a transaction.

        Returns:
            The stored transaction (with id and timestamps)

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def update_transaction(
        self,
        transaction_id: UUID,
        payload: TransactionCreate,
    ) -> Transaction:
        """
        Replace a transaction's fields and bump updated_at.

        Raises:
            NotFoundError: If the transaction doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if a row was deleted
        """
        pass


class AccountStorageInterface(ABC):
    """Abstract interface for account storage operations."""

    @abstractmethod
    async def list_accounts(self) -> list[Account]:
        """List all accounts sorted by name."""
        pass

    @abstractmethod
    async def get_account(self, account_id: UUID) -> Optional[Account]:
        pass

    @abstractmethod
    async def create_account(self, payload: AccountCreate) -> Account:
        pass

    @abstractmethod
    async def update_account(self, account_id: UUID, payload: AccountCreate) -> Account:
        """
        Raises:
            NotFoundError: If the account doesn't exist
        """
        pass

    @abstractmethod
    async def delete_account(self, account_id: UUID) -> bool:
        pass


class LocationStorageInterface(ABC):
    """Abstract interface for location storage operations."""

    @abstractmethod
    async def list_locations(self) -> list[Location]:
        """List all locations sorted by name."""
        pass

    @abstractmethod
    async def get_location(self, location_id: UUID) -> Optional[Location]:
        pass

    @abstractmethod
    async def create_location(self, payload: LocationCreate) -> Location:
        pass

    @abstractmethod
    async def update_location(self, location_id: UUID, payload: LocationCreate) -> Location:
        """
        Raises:
            NotFoundError: If the location doesn't exist
        """
        pass

    @abstractmethod
    async def delete_location(self, location_id: UUID) -> bool:
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


def matches_filters(transaction: Transaction, filters: TransactionFilters) -> bool:
    """
    Check a transaction against listing filters.

    Shared by implementations that filter in Python.
    """
    if filters.location_id and transaction.location_id != filters.location_id:
        return False
    if filters.account_id and transaction.account_id != filters.account_id:
        return False
    if filters.type and transaction.type != filters.type:
        return False
    if filters.date_from and transaction.date < filters.date_from:
        return False
    if filters.date_to and transaction.date > filters.date_to:
        return False
    if filters.search:
        needle = filters.search.lower()
        haystacks = (transaction.transaction_no, transaction.description or "")
        if not any(needle in text.lower() for text in haystacks):
            return False
    return True


def paginate(
    transactions: list[Transaction],
    filters: TransactionFilters,
) -> TransactionPage:
    """Sort newest first and cut out the requested page."""
    ordered = sorted(
        transactions,
        key=lambda t: (t.date, t.created_at),
        reverse=True,
    )
    return TransactionPage(
        data=ordered[filters.offset:filters.offset + filters.limit],
        count=len(ordered),
    )
