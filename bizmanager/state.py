"""
Application and client state.

AppState holds what the screens currently have loaded. It is an explicit
object owned by the UI session, not a module-level singleton.

ClientStateStore is a small JSON file for the things that must survive a
restart: the login flag and the storage connection overrides. It is not
encrypted and never expires.
"""

import json
from pathlib import Path
from typing import Optional
from uuid import UUID

import structlog
from pydantic import BaseModel, Field

from bizmanager.models.records import Account, Location, Transaction


logger = structlog.get_logger("bizmanager.state")

UNKNOWN_ACCOUNT = "Unknown Account"
UNKNOWN_LOCATION = "Unknown Location"


class AppState(BaseModel):
    """In-memory state of one UI session."""

    is_authenticated: bool = False
    selected_location_id: Optional[UUID] = None
    accounts: list[Account] = Field(default_factory=list)
    locations: list[Location] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)

    def set_authenticated(self, value: bool) -> None:
        self.is_authenticated = value

    def set_selected_location(self, location_id: Optional[UUID]) -> None:
        self.selected_location_id = location_id

    def set_accounts(self, accounts: list[Account]) -> None:
        self.accounts = list(accounts)

    def set_locations(self, locations: list[Location]) -> None:
        self.locations = list(locations)

    def set_transactions(self, transactions: list[Transaction]) -> None:
        self.transactions = list(transactions)

    def get_account_name(self, account_id: Optional[UUID]) -> str:
        for account in self.accounts:
            if account.id == account_id:
                return account.name
        return UNKNOWN_ACCOUNT

    def get_location_name(self, location_id: Optional[UUID]) -> str:
        for location in self.locations:
            if location.id == location_id:
                return location.name
        return UNKNOWN_LOCATION

    def find_account_by_name(self, name: str) -> Optional[Account]:
        """Exact, case-sensitive match."""
        return next((a for a in self.accounts if a.name == name), None)

    def find_location_by_name(self, name: str) -> Optional[Location]:
        """Exact, case-sensitive match."""
        return next((l for l in self.locations if l.name == name), None)


class ClientState(BaseModel):
    is_authenticated: bool = False
    storage_credentials_path: Optional[str] = None
    storage_spreadsheet_id: Optional[str] = None


class ClientStateStore:
    """Reads and writes ClientState as JSON at a fixed path."""

    def __init__(self, path: str):
        self._path = Path(path)

    def load(self) -> ClientState:
        """Current state; a missing or unreadable file reads as the default."""
        if not self._path.exists():
            return ClientState()
        try:
            return ClientState.model_validate(json.loads(self._path.read_text(encoding="utf-8")))
        except (OSError, ValueError) as e:
            logger.warning("client_state_unreadable", path=str(self._path), error=str(e))
            return ClientState()

    def save(self, state: ClientState) -> None:
        self._path.write_text(
            json.dumps(state.model_dump(), indent=2),
            encoding="utf-8",
        )

    def update(self, **changes) -> ClientState:
        state = self.load().model_copy(update=changes)
        self.save(state)
        return state

    def set_storage_overrides(
        self,
        credentials_path: Optional[str],
        spreadsheet_id: Optional[str],
    ) -> ClientState:
        return self.update(
            storage_credentials_path=credentials_path or None,
            storage_spreadsheet_id=spreadsheet_id or None,
        )

    def clear_storage_overrides(self) -> ClientState:
        return self.update(storage_credentials_path=None, storage_spreadsheet_id=None)
