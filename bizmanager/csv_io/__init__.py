"""CSV import/export package."""

from bizmanager.csv_io.export import (
    REQUIRED_HEADERS,
    SAMPLE_FILENAME,
    export_filename,
    sample_csv,
    summary_export_rows,
    to_csv,
    transaction_export_rows,
)
from bizmanager.csv_io.importer import (
    CsvImportError,
    EmptyCsvError,
    ImportRowError,
    ImportSummary,
    MissingColumnsError,
    ParsedCsv,
    TransactionImporter,
    parse_csv,
    preview_rows,
)

__all__ = [
    # Export
    "REQUIRED_HEADERS",
    "SAMPLE_FILENAME",
    "export_filename",
    "sample_csv",
    "summary_export_rows",
    "to_csv",
    "transaction_export_rows",
    # Import
    "CsvImportError",
    "EmptyCsvError",
    "ImportRowError",
    "ImportSummary",
    "MissingColumnsError",
    "ParsedCsv",
    "TransactionImporter",
    "parse_csv",
    "preview_rows",
]
