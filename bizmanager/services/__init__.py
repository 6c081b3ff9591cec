"""Services package."""

from bizmanager.services.storage import (
    AccountStorageInterface,
    ConnectionError,
    GoogleSheetsAccountStorage,
    GoogleSheetsClient,
    GoogleSheetsLocationStorage,
    GoogleSheetsTransactionStorage,
    InMemoryAccountStorage,
    InMemoryLocationStorage,
    InMemoryStore,
    InMemoryTransactionStorage,
    LocationStorageInterface,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    "AccountStorageInterface",
    "ConnectionError",
    "GoogleSheetsAccountStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLocationStorage",
    "GoogleSheetsTransactionStorage",
    "InMemoryAccountStorage",
    "InMemoryLocationStorage",
    "InMemoryStore",
    "InMemoryTransactionStorage",
    "LocationStorageInterface",
    "NotFoundError",
    "StorageError",
    "TransactionStorageInterface",
]
