"""Tests for the CSV import pipeline."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from bizmanager.csv_io import (
    EmptyCsvError,
    MissingColumnsError,
    TransactionImporter,
    parse_csv,
    preview_rows,
    to_csv,
    transaction_export_rows,
)
from bizmanager.models.activity import ActivityEventType
from bizmanager.models.records import TransactionFilters
from bizmanager.services.storage import InMemoryTransactionStorage, StorageError

from tests.conftest import make_transaction


HEADER = "Transaction No,Date,Amount,Commission,Type,Account Name,Location Name,Description"


def csv_text(*rows: str, header: str = HEADER) -> str:
    return "\n".join([header, *rows])


@pytest.fixture
def importer(transaction_storage, number_generator, activity_logger):
    return TransactionImporter(transaction_storage, number_generator, activity_logger)


@pytest.fixture
def directory(amit, neha, mumbai, delhi):
    return [amit, neha], [mumbai, delhi]


def run_import(importer, text, directory):
    accounts, locations = directory
    return asyncio.run(importer.run(text, accounts, locations))


class TestParseCsv:
    """Tests for header checks and parsing."""

    def test_requires_header_and_data_row(self):
        """Test the empty-file error."""
        with pytest.raises(EmptyCsvError, match="CSV file must have at least a header and one data row"):
            parse_csv(HEADER + "\n\n")

    def test_missing_columns_named(self):
        """Test that every missing column is reported."""
        header = "Transaction No,Date,Type,Account Name,Location Name,Description"
        with pytest.raises(MissingColumnsError) as exc_info:
            parse_csv(csv_text("x,2025-01-08,credit,A,B,", header=header))
        assert exc_info.value.missing == ["Amount"]
        assert str(exc_info.value) == "Missing required columns: Amount"

    def test_headers_are_case_sensitive(self):
        """Test exact header matching."""
        header = HEADER.replace("Amount", "amount")
        with pytest.raises(MissingColumnsError):
            parse_csv(csv_text("x,2025-01-08,1,,credit,A,B,", header=header))

    def test_commission_column_optional(self):
        """Test that files without Commission still parse."""
        header = "Transaction No,Date,Amount,Type,Account Name,Location Name,Description"
        parsed = parse_csv(csv_text("1,2025-01-08,100,credit,A,B,Note", header=header))
        assert "Commission" not in parsed.headers
        assert parsed.rows[0]["Amount"] == "100"

    def test_quoted_fields_and_whitespace(self):
        """Test quoted commas and trimming."""
        parsed = parse_csv(csv_text(
            '"20250108-001", 2025-01-08 ,"1500",,credit,Amit Patel,Mumbai Branch,"Rent, June"'
        ))
        row = parsed.rows[0]
        assert row["Transaction No"] == "20250108-001"
        assert row["Date"] == "2025-01-08"
        assert row["Description"] == "Rent, June"

    def test_missing_trailing_values_are_blank(self):
        """Test short rows."""
        parsed = parse_csv(csv_text("1,2025-01-08,100,,credit,A,B"))
        assert parsed.rows[0]["Description"] == ""

    def test_byte_order_mark_ignored(self):
        """Test files saved with a BOM."""
        parsed = parse_csv("\ufeff" + csv_text("1,2025-01-08,100,,credit,A,B,"))
        assert parsed.headers[0] == "Transaction No"


class TestPreview:
    """Tests for the import preview."""

    def test_first_five_rows_with_index(self):
        """Test preview limit and 1-based row_index."""
        rows = [f"{i},2025-01-08,{i}00,,credit,Unknown,Nowhere," for i in range(1, 8)]
        preview = preview_rows(csv_text(*rows))
        assert len(preview) == 5
        assert preview[0]["row_index"] == 1
        assert preview[4]["Transaction No"] == "5"
        assert preview[0]["Account Name"] == "Unknown"


class TestTransactionImporter:
    """Tests for running an import."""

    def test_imports_valid_rows(self, importer, transaction_storage, directory, amit, mumbai):
        """Test a clean import."""
        summary = run_import(importer, csv_text(
            "20250108-001,2025-01-08,1500,50,credit,Amit Patel,Mumbai Branch,Payment",
            "20250108-002,2025-01-08,200,,DEBIT,Neha Joshi,Delhi Branch,",
        ), directory)

        assert summary.success_count == 2
        assert summary.error_count == 0
        assert summary.message == "Successfully imported 2 transactions. 0 errors occurred."

        first, second = transaction_storage.created
        assert first.account_id == amit.id
        assert first.location_id == mumbai.id
        assert first.commission == Decimal("50.00")
        assert second.type.value == "debit"
        assert second.commission == Decimal("0")
        assert second.description is None

    def test_unresolved_account_is_an_error_without_create(self, importer, transaction_storage, directory):
        """Test that an unknown account name counts as an error and writes nothing."""
        summary = run_import(importer, csv_text(
            "20250108-001,2025-01-08,1500,,credit,Nobody,Mumbai Branch,",
        ), directory)

        assert summary.success_count == 0
        assert summary.error_count == 1
        assert summary.row_errors[0].message == "Account not found: Nobody"
        assert transaction_storage.created == []

    def test_unresolved_location(self, importer, directory):
        """Test location name resolution."""
        summary = run_import(importer, csv_text(
            "20250108-001,2025-01-08,1500,,credit,Amit Patel,Pune Branch,",
        ), directory)
        assert summary.row_errors[0].message == "Location not found: Pune Branch"

    def test_name_match_is_exact(self, importer, directory):
        """Test that names are matched case-sensitively."""
        summary = run_import(importer, csv_text(
            "20250108-001,2025-01-08,1500,,credit,amit patel,Mumbai Branch,",
        ), directory)
        assert summary.error_count == 1

    def test_missing_header_aborts_with_zero_creates(self, importer, transaction_storage, directory):
        """Test that a missing Amount column stops the import before any row."""
        header = "Transaction No,Date,Commission,Type,Account Name,Location Name,Description"
        with pytest.raises(MissingColumnsError):
            run_import(importer, csv_text(
                "20250108-001,2025-01-08,,credit,Amit Patel,Mumbai Branch,",
                header=header,
            ), directory)
        assert transaction_storage.created == []

    def test_bad_rows_do_not_abort_batch(self, importer, transaction_storage, directory):
        """Test that row errors are counted and the rest imports."""
        summary = run_import(importer, csv_text(
            "1,2025-01-08,abc,,credit,Amit Patel,Mumbai Branch,",
            "2,2025-01-08,100,10.123,credit,Amit Patel,Mumbai Branch,",
            "3,2025-01-08,100,,refund,Amit Patel,Mumbai Branch,",
            "4,08/01/2025,100,,credit,Amit Patel,Mumbai Branch,",
            "5,2025-01-08,100,,credit,Amit Patel,Mumbai Branch,",
        ), directory)

        assert summary.success_count == 1
        assert summary.error_count == 4
        messages = [e.message for e in summary.row_errors]
        assert messages[0] == "Invalid amount: abc"
        assert messages[1] == "Commission can have at most 2 decimal places"
        assert messages[2] == "Invalid type: refund"
        assert messages[3] == "Invalid date: 08/01/2025"
        assert [e.row_number for e in summary.row_errors] == [1, 2, 3, 4]
        assert [p.transaction_no for p in transaction_storage.created] == ["5"]

    def test_nan_amount_rejected(self, importer, directory):
        """Test that NaN never reaches storage."""
        summary = run_import(importer, csv_text(
            "1,2025-01-08,NaN,,credit,Amit Patel,Mumbai Branch,",
        ), directory)
        assert summary.error_count == 1

    def test_amount_keeps_paise_at_any_size(self, importer, transaction_storage, directory):
        """Test that amounts are read as exact decimals, like manual entry."""
        summary = run_import(importer, csv_text(
            "1,2025-01-08,12345678901234567.89,,credit,Amit Patel,Mumbai Branch,",
        ), directory)
        assert summary.success_count == 1
        assert transaction_storage.created[0].amount == Decimal("12345678901234567.89")

    def test_amount_beyond_paise_rejected(self, importer, transaction_storage, directory):
        """Test that sub-paise amounts are an error, not rounded."""
        summary = run_import(importer, csv_text(
            "1,2025-01-08,10.555,,credit,Amit Patel,Mumbai Branch,",
            "2,2025-01-08,Infinity,,credit,Amit Patel,Mumbai Branch,",
        ), directory)
        assert summary.error_count == 2
        assert summary.row_errors[0].message.startswith("Invalid row: amount")
        assert summary.row_errors[1].message == "Invalid amount: Infinity"
        assert transaction_storage.created == []

    def test_blank_numbers_are_sequential(self, importer, transaction_storage, directory, amit, mumbai, store):
        """Test that generated numbers see earlier rows of the same file."""
        existing = make_transaction(
            date(2025, 1, 8), 10, account=amit, location=mumbai, transaction_no="20250108-005"
        )
        store.transactions[existing.id] = existing

        summary = run_import(importer, csv_text(
            ",2025-01-08,100,,credit,Amit Patel,Mumbai Branch,",
            ",2025-01-08,200,,credit,Amit Patel,Mumbai Branch,",
            ",2025-01-09,300,,credit,Amit Patel,Mumbai Branch,",
        ), directory)

        assert summary.success_count == 3
        assert [p.transaction_no for p in transaction_storage.created] == [
            "20250108-006",
            "20250108-007",
            "20250109-001",
        ]

    def test_rows_created_in_file_order(self, importer, transaction_storage, directory):
        """Test that creates follow the file order."""
        rows = [f"N{i},2025-01-08,{i},,credit,Amit Patel,Mumbai Branch," for i in range(1, 6)]
        run_import(importer, csv_text(*rows), directory)
        assert [p.transaction_no for p in transaction_storage.created] == [
            "N1", "N2", "N3", "N4", "N5"
        ]

    def test_storage_failure_is_row_error(self, store, number_generator, activity_logger, directory):
        """Test that a failed create is counted, not raised."""

        class FailingStorage(InMemoryTransactionStorage):
            async def create_transaction(self, payload):
                raise StorageError("quota exceeded")

        importer = TransactionImporter(FailingStorage(store), number_generator, activity_logger)
        summary = run_import(importer, csv_text(
            "1,2025-01-08,100,,credit,Amit Patel,Mumbai Branch,",
        ), directory)
        assert summary.error_count == 1
        assert summary.row_errors[0].message == "quota exceeded"

    def test_activity_events(self, importer, activity_logger, directory):
        """Test that the import is logged start to finish."""
        run_import(importer, csv_text(
            "1,2025-01-08,100,,credit,Amit Patel,Mumbai Branch,",
            "2,2025-01-08,100,,credit,Nobody,Mumbai Branch,",
        ), directory)
        kinds = [e.event_type for e in activity_logger.recent]
        assert kinds[0] == ActivityEventType.IMPORT_STARTED
        assert ActivityEventType.TRANSACTION_CREATED in kinds
        assert ActivityEventType.IMPORT_ROW_FAILED in kinds
        assert kinds[-1] == ActivityEventType.IMPORT_COMPLETED
        correlation_ids = {e.correlation_id for e in activity_logger.recent}
        assert len(correlation_ids) == 1


class TestRoundTrip:
    """Export then import."""

    def test_amount_commission_type_survive(self, importer, transaction_storage, directory, amit, neha, mumbai, delhi):
        """Test that (amount, commission, type) triples survive a round trip."""
        originals = [
            make_transaction(date(2025, 1, 8), 1000, "credit", commission=50, account=amit, location=mumbai),
            make_transaction(date(2025, 1, 8), 200, "debit", commission=None, account=neha, location=delhi),
            make_transaction(date(2025, 1, 7), "300.75", "credit", commission="15.5", account=neha, location=mumbai),
        ]
        text = to_csv(transaction_export_rows(originals))

        summary = run_import(importer, text, directory)
        assert summary.success_count == 3

        page = asyncio.run(transaction_storage.list_transactions(TransactionFilters(limit=100)))
        imported = sorted(
            (t.amount_value, t.commission_value, t.type.value) for t in page.data
        )
        expected = sorted(
            (t.amount_value, t.commission_value, t.type.value) for t in originals
        )
        assert imported == expected
