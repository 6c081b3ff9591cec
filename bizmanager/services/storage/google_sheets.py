"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the remote store because:
1. Shop owners can view their books directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (a small business is fine)
- No transactions (imports create rows one at a time, in file order)
- Limited query capabilities (we filter, sort and paginate in Python)

Only the connection is retried. A failed create/update/delete is reported
once and never replayed, so a retry can't double-write a transaction.
"""

from typing import Optional
from uuid import UUID

import gspread
import structlog
from google.oauth2.service_account import Credentials
from pydantic import ValidationError
from tenacity import retry, stop_after_attempt, wait_exponential

from bizmanager.config import StorageSettings, get_settings
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
    ConnectionError,
    LocationStorageInterface,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    matches_filters,
    paginate,
)


logger = structlog.get_logger("bizmanager.storage")


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "transaction_no",
    "date",
    "amount",
    "commission",
    "type",
    "account_id",
    "location_id",
    "description",
    "created_at",
    "updated_at",
]

# Column mappings for Accounts sheet
ACCOUNT_COLUMNS = [
    "id",
    "name",
    "phone_number",
    "created_at",
    "updated_at",
]

# Column mappings for Locations sheet
LOCATION_COLUMNS = [
    "id",
    "name",
    "address",
    "created_at",
    "updated_at",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and opens (or creates) the worksheets.
    The credentials path and spreadsheet id can be overridden per client,
    which is how the settings page points the app at a different sheet.
    """

    def __init__(
        self,
        credentials_path: Optional[str] = None,
        spreadsheet_id: Optional[str] = None,
        settings: Optional[StorageSettings] = None,
    ):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().storage
        self.credentials_path = credentials_path or self._settings.credentials_path
        self.spreadsheet_id = spreadsheet_id or self._settings.spreadsheet_id

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(self.spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
            rows=5000,
        )

    def get_accounts_sheet(self) -> gspread.Worksheet:
        """Get or create the Accounts worksheet."""
        return self._get_or_create_sheet(
            self._settings.accounts_sheet_name,
            ACCOUNT_COLUMNS,
        )

    def get_locations_sheet(self) -> gspread.Worksheet:
        """Get or create the Locations worksheet."""
        return self._get_or_create_sheet(
            self._settings.locations_sheet_name,
            LOCATION_COLUMNS,
        )

    def test_connection(self) -> bool:
        """Open the spreadsheet once. Raises ConnectionError on failure."""
        self.get_spreadsheet()
        return True


def _row_to_dict(columns: list[str], row: list) -> dict:
    """Map a sheet row onto column names, treating missing cells as blank."""
    def safe_get(index: int) -> str:
        try:
            return row[index]
        except IndexError:
            return ""

    return {name: safe_get(i) for i, name in enumerate(columns)}


def _find_row(all_rows: list[list], entity_id: UUID) -> Optional[int]:
    """1-based sheet row number of an entity (row 1 is the header)."""
    for idx, row in enumerate(all_rows[1:], start=2):
        if row and row[0] == str(entity_id):
            return idx
    return None


class GoogleSheetsAccountStorage(AccountStorageInterface):
    """Accounts stored one per row."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _account_to_row(self, account: Account) -> list:
        return [
            str(account.id),
            account.name,
            account.phone_number or "",
            account.created_at.isoformat(),
            account.updated_at.isoformat(),
        ]

    def _row_to_account(self, row: list) -> Account:
        data = _row_to_dict(ACCOUNT_COLUMNS, row)
        data["phone_number"] = data["phone_number"] or None
        return Account.model_validate(data)

    def _read_all(self) -> list[Account]:
        sheet = self._client.get_accounts_sheet()
        accounts = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:  # Skip empty rows
                continue
            try:
                accounts.append(self._row_to_account(row))
            except (ValidationError, ValueError) as e:
                logger.warning("malformed_row_skipped", sheet="accounts", error=str(e))
        return accounts

    async def list_accounts(self) -> list[Account]:
        try:
            return sorted(self._read_all(), key=lambda a: a.name)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list accounts: {e}")

    async def get_account(self, account_id: UUID) -> Optional[Account]:
        for account in await self.list_accounts():
            if account.id == account_id:
                return account
        return None

    async def create_account(self, payload: AccountCreate) -> Account:
        account = Account(**payload.model_dump())
        try:
            sheet = self._client.get_accounts_sheet()
            sheet.append_row(self._account_to_row(account), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save account: {e}")
        return account

    async def update_account(self, account_id: UUID, payload: AccountCreate) -> Account:
        existing = await self.get_account(account_id)
        if existing is None:
            raise NotFoundError(f"Account not found: {account_id}")
        updated = existing.model_copy(
            update={**payload.model_dump(), "updated_at": utc_now()}
        )
        try:
            sheet = self._client.get_accounts_sheet()
            idx = _find_row(sheet.get_all_values(), account_id)
            if idx is None:
                raise NotFoundError(f"Account not found: {account_id}")
            sheet.update(
                values=[self._account_to_row(updated)],
                range_name=f"A{idx}",
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update account: {e}")
        return updated

    async def delete_account(self, account_id: UUID) -> bool:
        try:
            sheet = self._client.get_accounts_sheet()
            idx = _find_row(sheet.get_all_values(), account_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete account: {e}")


class GoogleSheetsLocationStorage(LocationStorageInterface):
    """Locations stored one per row."""

    def __init__(self, client: GoogleSheetsClient):
        self._client = client

    def _location_to_row(self, location: Location) -> list:
        return [
            str(location.id),
            location.name,
            location.address or "",
            location.created_at.isoformat(),
            location.updated_at.isoformat(),
        ]

    def _row_to_location(self, row: list) -> Location:
        data = _row_to_dict(LOCATION_COLUMNS, row)
        data["address"] = data["address"] or None
        return Location.model_validate(data)

    def _read_all(self) -> list[Location]:
        sheet = self._client.get_locations_sheet()
        locations = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                locations.append(self._row_to_location(row))
            except (ValidationError, ValueError) as e:
                logger.warning("malformed_row_skipped", sheet="locations", error=str(e))
        return locations

    async def list_locations(self) -> list[Location]:
        try:
            return sorted(self._read_all(), key=lambda l: l.name)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list locations: {e}")

    async def get_location(self, location_id: UUID) -> Optional[Location]:
        for location in await self.list_locations():
            if location.id == location_id:
                return location
        return None

    async def create_location(self, payload: LocationCreate) -> Location:
        location = Location(**payload.model_dump())
        try:
            sheet = self._client.get_locations_sheet()
            sheet.append_row(self._location_to_row(location), value_input_option="RAW")
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save location: {e}")
        return location

    async def update_location(self, location_id: UUID, payload: LocationCreate) -> Location:
        existing = await self.get_location(location_id)
        if existing is None:
            raise NotFoundError(f"Location not found: {location_id}")
        updated = existing.model_copy(
            update={**payload.model_dump(), "updated_at": utc_now()}
        )
        try:
            sheet = self._client.get_locations_sheet()
            idx = _find_row(sheet.get_all_values(), location_id)
            if idx is None:
                raise NotFoundError(f"Location not found: {location_id}")
            sheet.update(
                values=[self._location_to_row(updated)],
                range_name=f"A{idx}",
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update location: {e}")
        return updated

    async def delete_location(self, location_id: UUID) -> bool:
        try:
            sheet = self._client.get_locations_sheet()
            idx = _find_row(sheet.get_all_values(), location_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete location: {e}")


class GoogleSheetsTransactionStorage(TransactionStorageInterface):
    """
    Google Sheets implementation of transaction storage.

    Transactions are stored one per row with account/location ids.
    Relations are joined in Python from the Accounts and Locations sheets.
    """

    def __init__(
        self,
        client: GoogleSheetsClient,
        accounts: GoogleSheetsAccountStorage,
        locations: GoogleSheetsLocationStorage,
    ):
        self._client = client
        self._accounts = accounts
        self._locations = locations

    def _transaction_to_row(self, transaction: Transaction) -> list:
        """Convert a Transaction to a spreadsheet row."""
        return [
            str(transaction.id),
            transaction.transaction_no,
            transaction.date.isoformat(),
            str(transaction.amount),
            str(transaction.commission) if transaction.commission is not None else "",
            transaction.type.value,
            str(transaction.account_id),
            str(transaction.location_id),
            transaction.description or "",
            transaction.created_at.isoformat(),
            transaction.updated_at.isoformat(),
        ]

    def _row_to_transaction(self, row: list) -> Transaction:
        """Convert a spreadsheet row to a Transaction."""
        data = _row_to_dict(TRANSACTION_COLUMNS, row)
        data["commission"] = data["commission"] or None
        data["description"] = data["description"] or None
        return Transaction.model_validate(data)

    def _read_all(self) -> list[Transaction]:
        sheet = self._client.get_transactions_sheet()
        transactions = []
        for row in sheet.get_all_values()[1:]:
            if not row or not row[0]:
                continue
            try:
                transactions.append(self._row_to_transaction(row))
            except (ValidationError, ValueError) as e:
                # Malformed rows never reach aggregation
                logger.warning("malformed_row_skipped", sheet="transactions", error=str(e))
        return transactions

    async def _join(self, transactions: list[Transaction]) -> list[Transaction]:
        accounts = {a.id: a for a in await self._accounts.list_accounts()}
        locations = {l.id: l for l in await self._locations.list_locations()}
        return [
            t.model_copy(update={
                "account": accounts.get(t.account_id),
                "location": locations.get(t.location_id),
            })
            for t in transactions
        ]

    async def list_transactions(
        self,
        filters: Optional[TransactionFilters] = None,
    ) -> TransactionPage:
        filters = filters or TransactionFilters()
        try:
            matching = [t for t in self._read_all() if matches_filters(t, filters)]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")

        page = paginate(matching, filters)
        return TransactionPage(data=await self._join(page.data), count=page.count)

    async def get_transaction(self, transaction_id: UUID) -> Optional[Transaction]:
        try:
            found = [t for t in self._read_all() if t.id == transaction_id]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get transaction: {e}")
        if not found:
            return None
        return (await self._join(found))[0]

    async def create_transaction(self, payload: TransactionCreate) -> Transaction:
        transaction = Transaction(**payload.model_dump())
        try:
            sheet = self._client.get_transactions_sheet()
            sheet.append_row(
                self._transaction_to_row(transaction),
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")
        return (await self._join([transaction]))[0]

    async def update_transaction(
        self,
        transaction_id: UUID,
        payload: TransactionCreate,
    ) -> Transaction:
        try:
            sheet = self._client.get_transactions_sheet()
            all_rows = sheet.get_all_values()
            idx = _find_row(all_rows, transaction_id)
            if idx is None:
                raise NotFoundError(f"Transaction not found: {transaction_id}")

            existing = self._row_to_transaction(all_rows[idx - 1])
            updated = existing.model_copy(
                update={**payload.model_dump(), "updated_at": utc_now()}
            )
            sheet.update(
                values=[self._transaction_to_row(updated)],
                range_name=f"A{idx}",
                value_input_option="RAW",
            )
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update transaction: {e}")
        return (await self._join([updated]))[0]

    async def delete_transaction(self, transaction_id: UUID) -> bool:
        try:
            sheet = self._client.get_transactions_sheet()
            idx = _find_row(sheet.get_all_values(), transaction_id)
            if idx is None:
                return False
            sheet.delete_rows(idx)
            return True
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")
