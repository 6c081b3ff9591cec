"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Google Sheets is the remote backend; the in-memory backend serves tests and
unconfigured installs.
"""

from bizmanager.services.storage.interface import (
    AccountStorageInterface,
    ConnectionError,
    LocationStorageInterface,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from bizmanager.services.storage.google_sheets import (
    GoogleSheetsAccountStorage,
    GoogleSheetsClient,
    GoogleSheetsLocationStorage,
    GoogleSheetsTransactionStorage,
)
from bizmanager.services.storage.memory import (
    InMemoryAccountStorage,
    InMemoryLocationStorage,
    InMemoryStore,
    InMemoryTransactionStorage,
)

__all__ = [
    # Interfaces
    "AccountStorageInterface",
    "LocationStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAccountStorage",
    "GoogleSheetsClient",
    "GoogleSheetsLocationStorage",
    "GoogleSheetsTransactionStorage",
    # In-memory implementation
    "InMemoryAccountStorage",
    "InMemoryLocationStorage",
    "InMemoryStore",
    "InMemoryTransactionStorage",
]
