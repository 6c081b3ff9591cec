"""
CSV Export

Turns transactions and report summaries into CSV text for download.

Exports use the same column names the importer expects, so an exported
file can be imported back unchanged.
"""

import csv
import io
from datetime import date
from typing import Any, Iterable, Mapping, Optional

from pydantic import BaseModel

from bizmanager.models.records import Transaction


TRANSACTION_NO = "Transaction No"
DATE = "Date"
AMOUNT = "Amount"
COMMISSION = "Commission"
TYPE = "Type"
ACCOUNT_NAME = "Account Name"
LOCATION_NAME = "Location Name"
DESCRIPTION = "Description"

REQUIRED_HEADERS = [
    TRANSACTION_NO,
    DATE,
    AMOUNT,
    TYPE,
    ACCOUNT_NAME,
    LOCATION_NAME,
    DESCRIPTION,
]

SAMPLE_FILENAME = "sample-transactions.csv"

SAMPLE_ROWS = [
    {
        TRANSACTION_NO: "20250804-001",
        DATE: "2025-08-04",
        AMOUNT: "5000",
        COMMISSION: "50",
        TYPE: "credit",
        ACCOUNT_NAME: "Amit Patel",
        LOCATION_NAME: "Mumbai Branch",
        DESCRIPTION: "Payment received from client",
    },
    {
        TRANSACTION_NO: "20250804-002",
        DATE: "2025-08-04",
        AMOUNT: "1500",
        COMMISSION: "",
        TYPE: "debit",
        ACCOUNT_NAME: "Neha Joshi",
        LOCATION_NAME: "Delhi Branch",
        DESCRIPTION: "Office supplies purchase",
    },
    {
        TRANSACTION_NO: "20250803-001",
        DATE: "2025-08-03",
        AMOUNT: "25000",
        COMMISSION: "250.50",
        TYPE: "credit",
        ACCOUNT_NAME: "Rajesh Kumar",
        LOCATION_NAME: "Bangalore Branch",
        DESCRIPTION: "Monthly rent payment",
    },
]


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def _write(rows: list[Mapping[str, Any]], quoting: int) -> str:
    headers = list(rows[0].keys())
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(headers)
    writer = csv.writer(buffer, quoting=quoting, lineterminator="\n")
    for row in rows:
        writer.writerow([_cell(row.get(h)) for h in headers])
    # Lines are joined with "\n", no trailing terminator
    return buffer.getvalue()[:-1]


def to_csv(rows: Iterable[Mapping[str, Any]]) -> str:
    """
    Serialize uniform dict rows to CSV text.

    The header comes from the first row's keys. Values are quoted only
    when they contain a comma, a quote or a newline. Empty input gives "".
    """
    rows = list(rows)
    if not rows:
        return ""
    return _write(rows, csv.QUOTE_MINIMAL)


def transaction_export_rows(transactions: Iterable[Transaction]) -> list[dict[str, str]]:
    """Rows keyed by the import column names."""
    return [
        {
            TRANSACTION_NO: t.transaction_no,
            DATE: t.date.isoformat(),
            AMOUNT: str(t.amount),
            COMMISSION: str(t.commission) if t.commission is not None else "0",
            TYPE: t.type.value,
            ACCOUNT_NAME: t.account_name,
            LOCATION_NAME: t.location_name,
            DESCRIPTION: t.description or "",
        }
        for t in transactions
    ]


def summary_export_rows(summaries: Iterable[BaseModel]) -> list[dict[str, Any]]:
    """Report summaries as dicts, one key per model field."""
    return [summary.model_dump(mode="json") for summary in summaries]


def sample_csv() -> str:
    """The downloadable sample file, every value in double quotes."""
    return _write(SAMPLE_ROWS, csv.QUOTE_ALL)


def export_filename(report_name: str, on_date: Optional[date] = None) -> str:
    on_date = on_date or date.today()
    return f"{report_name}-{on_date.isoformat()}.csv"
