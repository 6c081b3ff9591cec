"""
Main Orchestrator for BizManager

This module ties together all the components and defines the
end-to-end flows for:
1. Transactions (list → validate → number → create/update/delete)
2. CSV import (preview → sequential create → summary)
3. Reports and dashboard (fetch → aggregate)
4. Accounts and locations (directory CRUD)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is written without passing validation
- Storage calls are awaited one at a time
- Every write is logged as an activity event

Storage failures propagate to the caller (the UI shows a generic error);
they are logged here first.
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog

from bizmanager.activity import ActivityLogger
from bizmanager.config import StorageSettings, get_settings
from bizmanager.csv_io import ImportSummary, TransactionImporter, preview_rows
from bizmanager.ledger import TransactionNumberGenerator
from bizmanager.models.records import (
    Account,
    AccountCreate,
    Location,
    LocationCreate,
    Transaction,
    TransactionFilters,
    TransactionForm,
    TransactionPage,
    ValidationResult,
)
from bizmanager.models.reports import DashboardStats, ReportData
from bizmanager.reports import build_report, dashboard_stats
from bizmanager.services.storage import (
    AccountStorageInterface,
    GoogleSheetsAccountStorage,
    GoogleSheetsClient,
    GoogleSheetsLocationStorage,
    GoogleSheetsTransactionStorage,
    InMemoryAccountStorage,
    InMemoryLocationStorage,
    InMemoryStore,
    InMemoryTransactionStorage,
    LocationStorageInterface,
    StorageError,
    TransactionStorageInterface,
)
from bizmanager.validation import TransactionValidator


logger = structlog.get_logger("bizmanager.orchestrator")


class TransactionFlow:
    """
    Orchestrates manual transaction entry.

    Flow:
    1. Validate → Field checks (amount, commission, type, date, relations)
    2. Number → Generate YYYYMMDD-NNN when the number is left blank
    3. Save → Create, or update when editing
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        number_generator: Optional[TransactionNumberGenerator] = None,
        validator: Optional[TransactionValidator] = None,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._numbers = number_generator or TransactionNumberGenerator(storage)
        self._validator = validator or TransactionValidator()
        self._activity = activity_logger or ActivityLogger()

    async def load_page(self, filters: Optional[TransactionFilters] = None) -> TransactionPage:
        try:
            return await self._storage.list_transactions(filters or TransactionFilters())
        except StorageError as e:
            await self._activity.log_storage_error("list_transactions", str(e))
            raise

    async def save(
        self,
        form: TransactionForm,
        editing_id: Optional[UUID] = None,
    ) -> tuple[Optional[Transaction], ValidationResult]:
        """
        Validate the form and write it.

        Returns:
            (transaction, validation_result). The transaction is None when
            validation failed; nothing was written in that case.
        """
        result = self._validator.validate(form)
        if result.has_errors:
            return None, result

        transaction_no = form.transaction_no or await self._numbers.generate(form.date)

        payload, result = self._validator.build_payload(form, transaction_no)
        if payload is None:
            return None, result

        try:
            if editing_id:
                saved = await self._storage.update_transaction(editing_id, payload)
            else:
                saved = await self._storage.create_transaction(payload)
        except StorageError as e:
            operation = "update_transaction" if editing_id else "create_transaction"
            await self._activity.log_storage_error(operation, str(e))
            raise

        await self._activity.log_transaction_saved(
            transaction_id=saved.id,
            transaction_no=saved.transaction_no,
            amount=str(saved.amount),
            created=editing_id is None,
        )
        return saved, result

    async def delete(self, transaction_id: UUID) -> bool:
        try:
            deleted = await self._storage.delete_transaction(transaction_id)
        except StorageError as e:
            await self._activity.log_storage_error("delete_transaction", str(e))
            raise
        if deleted:
            await self._activity.log_transaction_deleted(transaction_id)
        return deleted


class ImportFlow:
    """
    Orchestrates CSV import.

    The preview never touches storage. The run creates rows one at a time,
    in file order, and always reports a summary.
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        number_generator: Optional[TransactionNumberGenerator] = None,
        activity_logger: Optional[ActivityLogger] = None,
        preview_limit: int = 5,
    ):
        self._importer = TransactionImporter(
            storage,
            number_generator or TransactionNumberGenerator(storage),
            activity_logger,
        )
        self._preview_limit = preview_limit

    def preview(self, text: str) -> list[dict]:
        """
        Raises:
            CsvImportError: the header check failed
        """
        return preview_rows(text, limit=self._preview_limit)

    async def run(
        self,
        text: str,
        accounts: list[Account],
        locations: list[Location],
    ) -> ImportSummary:
        return await self._importer.run(text, accounts, locations)


class ReportFlow:
    """Fetches transactions and hands them to the aggregation engine."""

    def __init__(
        self,
        storage: TransactionStorageInterface,
        locations: LocationStorageInterface,
        row_limit: int = 1000,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._locations = locations
        self._row_limit = row_limit
        self._activity = activity_logger or ActivityLogger()

    async def _fetch(self, filters: TransactionFilters) -> list[Transaction]:
        filters = filters.model_copy(update={"page": 1, "limit": self._row_limit})
        try:
            page = await self._storage.list_transactions(filters)
        except StorageError as e:
            await self._activity.log_storage_error("list_transactions", str(e))
            raise
        if page.count > len(page.data):
            logger.warning(
                "report_truncated",
                fetched=len(page.data),
                total=page.count,
            )
        return page.data

    async def load_report(self, filters: Optional[TransactionFilters] = None) -> ReportData:
        """Up to row_limit matching transactions, aggregated."""
        transactions = await self._fetch(filters or TransactionFilters())
        return build_report(transactions)

    async def load_dashboard(
        self,
        location_id: Optional[UUID] = None,
        on_date: Optional[date] = None,
    ) -> DashboardStats:
        transactions = await self._fetch(TransactionFilters(location_id=location_id))
        try:
            locations = await self._locations.list_locations()
        except StorageError as e:
            await self._activity.log_storage_error("list_locations", str(e))
            raise
        return dashboard_stats(
            transactions,
            on_date=on_date,
            location_id=location_id,
            total_locations=len(locations),
        )


class DirectoryFlow:
    """Account and location CRUD."""

    def __init__(
        self,
        accounts: AccountStorageInterface,
        locations: LocationStorageInterface,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._accounts = accounts
        self._locations = locations
        self._activity = activity_logger or ActivityLogger()

    async def list_accounts(self) -> list[Account]:
        return await self._accounts.list_accounts()

    async def save_account(
        self,
        payload: AccountCreate,
        editing_id: Optional[UUID] = None,
    ) -> Account:
        if editing_id:
            account = await self._accounts.update_account(editing_id, payload)
        else:
            account = await self._accounts.create_account(payload)
        await self._activity.log_directory_saved("account", account.id, account.name)
        return account

    async def delete_account(self, account_id: UUID) -> bool:
        deleted = await self._accounts.delete_account(account_id)
        if deleted:
            await self._activity.log_directory_deleted("account", account_id)
        return deleted

    async def list_locations(self) -> list[Location]:
        return await self._locations.list_locations()

    async def save_location(
        self,
        payload: LocationCreate,
        editing_id: Optional[UUID] = None,
    ) -> Location:
        if editing_id:
            location = await self._locations.update_location(editing_id, payload)
        else:
            location = await self._locations.create_location(payload)
        await self._activity.log_directory_saved("location", location.id, location.name)
        return location

    async def delete_location(self, location_id: UUID) -> bool:
        deleted = await self._locations.delete_location(location_id)
        if deleted:
            await self._activity.log_directory_deleted("location", location_id)
        return deleted


class AppComponents:
    """Everything the UI needs, built once per session."""

    def __init__(
        self,
        transaction_flow: TransactionFlow,
        import_flow: ImportFlow,
        report_flow: ReportFlow,
        directory_flow: DirectoryFlow,
        activity_logger: ActivityLogger,
        sheets_client: Optional[GoogleSheetsClient] = None,
    ):
        self.transaction_flow = transaction_flow
        self.import_flow = import_flow
        self.report_flow = report_flow
        self.directory_flow = directory_flow
        self.activity_logger = activity_logger
        self.sheets_client = sheets_client

    @property
    def uses_remote_storage(self) -> bool:
        return self.sheets_client is not None


def _storage_settings(
    credentials_path: Optional[str],
    spreadsheet_id: Optional[str],
) -> StorageSettings:
    """Configured storage settings, with the client-side overrides applied."""
    if credentials_path and spreadsheet_id:
        return StorageSettings(
            credentials_path=credentials_path,
            spreadsheet_id=spreadsheet_id,
        )
    return get_settings().storage


def create_app_components(
    use_storage: bool = True,
    credentials_path: Optional[str] = None,
    spreadsheet_id: Optional[str] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to initialize Google Sheets storage.
                    Set to False for in-memory storage (tests, demos).
        credentials_path: Override for the service account file
        spreadsheet_id: Override for the spreadsheet

    Returns:
        AppComponents over Google Sheets, or over in-memory storage when
        Sheets isn't configured.
    """
    app_settings = get_settings().app
    activity_logger = ActivityLogger()
    sheets_client = None

    transactions: Optional[TransactionStorageInterface] = None
    accounts: Optional[AccountStorageInterface] = None
    locations: Optional[LocationStorageInterface] = None

    if use_storage:
        try:
            settings = _storage_settings(credentials_path, spreadsheet_id)
            sheets_client = GoogleSheetsClient(
                credentials_path=credentials_path,
                spreadsheet_id=spreadsheet_id,
                settings=settings,
            )
            accounts = GoogleSheetsAccountStorage(sheets_client)
            locations = GoogleSheetsLocationStorage(sheets_client)
            transactions = GoogleSheetsTransactionStorage(sheets_client, accounts, locations)
        except Exception as e:
            # Storage not configured - continue in memory
            logger.warning("storage_not_configured", error=str(e))
            sheets_client = None
            transactions = accounts = locations = None

    if transactions is None:
        store = InMemoryStore()
        accounts = InMemoryAccountStorage(store)
        locations = InMemoryLocationStorage(store)
        transactions = InMemoryTransactionStorage(store)

    number_generator = TransactionNumberGenerator(transactions)

    return AppComponents(
        transaction_flow=TransactionFlow(
            transactions,
            number_generator=number_generator,
            activity_logger=activity_logger,
        ),
        import_flow=ImportFlow(
            transactions,
            number_generator=number_generator,
            activity_logger=activity_logger,
            preview_limit=app_settings.import_preview_rows,
        ),
        report_flow=ReportFlow(
            transactions,
            locations,
            row_limit=app_settings.report_row_limit,
            activity_logger=activity_logger,
        ),
        directory_flow=DirectoryFlow(
            accounts,
            locations,
            activity_logger=activity_logger,
        ),
        activity_logger=activity_logger,
        sheets_client=sheets_client,
    )
