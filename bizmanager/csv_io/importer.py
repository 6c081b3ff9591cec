"""
CSV Import Pipeline

DESIGN DECISION: The import runs in three stages:

STAGE 1 - HEADER CHECK:
- At least a header and one data row
- Every required column present (exact, case-sensitive)
- Any failure here aborts the import before a single row is written

STAGE 2 - ROW RESOLUTION:
- Account / location names resolved to ids by exact match
- Amount, commission and type validated
- A bad row is counted and skipped; it never aborts the batch

STAGE 3 - SEQUENTIAL CREATE:
- Rows are created one at a time, in file order
- Each create is awaited before the next row starts, so a blank
  Transaction No always sees the numbers written by earlier rows

Fields are parsed with the csv module, so quoted values may contain commas.
"""

import csv
import io
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

import structlog
from pydantic import BaseModel, Field, ValidationError

from bizmanager.activity import ActivityLogger, create_correlation_id
from bizmanager.csv_io.export import (
    ACCOUNT_NAME,
    AMOUNT,
    COMMISSION,
    DATE,
    DESCRIPTION,
    LOCATION_NAME,
    REQUIRED_HEADERS,
    TRANSACTION_NO,
    TYPE,
)
from bizmanager.ledger.numbering import TransactionNumberGenerator
from bizmanager.models.records import (
    Account,
    Location,
    TransactionCreate,
    TransactionType,
)
from bizmanager.services.storage.interface import (
    StorageError,
    TransactionStorageInterface,
)
from bizmanager.state import AppState
from bizmanager.validation.commission import (
    CommissionValidationError,
    parse_commission,
)


logger = structlog.get_logger("bizmanager.importer")


class CsvImportError(Exception):
    """Base exception for problems that abort an import."""
    pass


class EmptyCsvError(CsvImportError):
    """The file has no data rows."""

    def __init__(self):
        super().__init__("CSV file must have at least a header and one data row")


class MissingColumnsError(CsvImportError):
    """One or more required columns are absent from the header."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"Missing required columns: {', '.join(missing)}")


class RowError(ValueError):
    """A single row can't be imported."""
    pass


class ParsedCsv(BaseModel):
    headers: list[str]
    rows: list[dict[str, str]]


class ImportRowError(BaseModel):
    row_number: int = Field(..., ge=1, description="1-based data row number")
    message: str


class ImportSummary(BaseModel):
    """Outcome of one import run."""

    success_count: int = 0
    error_count: int = 0
    row_errors: list[ImportRowError] = Field(default_factory=list)

    @property
    def message(self) -> str:
        return (
            f"Successfully imported {self.success_count} transactions. "
            f"{self.error_count} errors occurred."
        )


def parse_csv(text: str) -> ParsedCsv:
    """
    Parse CSV text and check the header.

    Raises:
        EmptyCsvError: fewer than two non-blank records
        MissingColumnsError: required columns absent
    """
    records = [
        [field.strip() for field in record]
        for record in csv.reader(io.StringIO(text))
        if any(field.strip() for field in record)
    ]
    if len(records) < 2:
        raise EmptyCsvError()

    headers = records[0]
    if headers:
        # Spreadsheet exports often start with a byte-order mark
        headers[0] = headers[0].lstrip("\ufeff")

    missing = [h for h in REQUIRED_HEADERS if h not in headers]
    if missing:
        raise MissingColumnsError(missing)

    rows = []
    for values in records[1:]:
        rows.append({
            header: values[i] if i < len(values) else ""
            for i, header in enumerate(headers)
        })
    return ParsedCsv(headers=headers, rows=rows)


def preview_rows(text: str, limit: int = 5) -> list[dict]:
    """First data rows as given in the file, each with a 1-based row_index."""
    parsed = parse_csv(text)
    return [
        {**row, "row_index": index}
        for index, row in enumerate(parsed.rows[:limit], start=1)
    ]


class TransactionImporter:
    """
    Creates transactions from an uploaded CSV file.

    Account and location names are resolved against the lists passed to
    run(), which are whatever the screen currently has loaded.
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        number_generator: TransactionNumberGenerator,
        activity_logger: Optional[ActivityLogger] = None,
    ):
        self._storage = storage
        self._numbers = number_generator
        self._activity = activity_logger or ActivityLogger()

    async def _build_payload(
        self,
        row: dict[str, str],
        directory: AppState,
    ) -> TransactionCreate:
        account = directory.find_account_by_name(row[ACCOUNT_NAME])
        if account is None:
            raise RowError(f"Account not found: {row[ACCOUNT_NAME]}")

        location = directory.find_location_by_name(row[LOCATION_NAME])
        if location is None:
            raise RowError(f"Location not found: {row[LOCATION_NAME]}")

        try:
            amount = Decimal(row[AMOUNT])
        except InvalidOperation:
            raise RowError(f"Invalid amount: {row[AMOUNT]}")
        if not amount.is_finite():
            raise RowError(f"Invalid amount: {row[AMOUNT]}")

        try:
            commission = parse_commission(row.get(COMMISSION, ""))
        except CommissionValidationError as e:
            raise RowError(str(e))

        kind = row[TYPE].lower()
        if kind not in {t.value for t in TransactionType}:
            raise RowError(f"Invalid type: {row[TYPE]}")

        try:
            on_date = date.fromisoformat(row[DATE])
        except ValueError:
            raise RowError(f"Invalid date: {row[DATE]}")

        transaction_no = row[TRANSACTION_NO] or await self._numbers.generate(on_date)

        try:
            return TransactionCreate(
                transaction_no=transaction_no,
                date=on_date,
                amount=amount,
                commission=commission,
                type=kind,
                account_id=account.id,
                location_id=location.id,
                description=row[DESCRIPTION] or None,
            )
        except ValidationError as e:
            reasons = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            raise RowError(f"Invalid row: {reasons}")

    async def run(
        self,
        text: str,
        accounts: list[Account],
        locations: list[Location],
    ) -> ImportSummary:
        """
        Import every row of the file.

        Raises:
            CsvImportError: header problems (nothing is created)
        """
        parsed = parse_csv(text)

        directory = AppState(accounts=accounts, locations=locations)

        correlation_id = create_correlation_id()
        await self._activity.log_import_started(correlation_id, len(parsed.rows))

        summary = ImportSummary()
        for row_number, row in enumerate(parsed.rows, start=1):
            try:
                payload = await self._build_payload(row, directory)
                created = await self._storage.create_transaction(payload)
            except (RowError, StorageError) as e:
                summary.error_count += 1
                summary.row_errors.append(
                    ImportRowError(row_number=row_number, message=str(e))
                )
                logger.warning("import_row_failed", row_number=row_number, error=str(e))
                await self._activity.log_import_row_failed(
                    correlation_id, row_number, str(e)
                )
                continue

            summary.success_count += 1
            await self._activity.log_transaction_saved(
                transaction_id=created.id,
                transaction_no=created.transaction_no,
                amount=str(created.amount),
                created=True,
                correlation_id=correlation_id,
            )

        await self._activity.log_import_completed(
            correlation_id, summary.success_count, summary.error_count
        )
        return summary
