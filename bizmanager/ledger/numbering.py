"""
Transaction Numbering

Numbers look like YYYYMMDD-NNN: the transaction's date followed by a
per-day sequence. The sequence continues from the highest numeric suffix
already used that day. If the store can't be read, a timestamp-based number
is used instead so the save is never blocked.
"""

import time
from datetime import date
from typing import Iterable, Optional

import structlog

from bizmanager.models.records import TransactionFilters
from bizmanager.services.storage.interface import TransactionStorageInterface


logger = structlog.get_logger("bizmanager.numbering")

# Same-day transactions fetched when computing the next number
DAY_FETCH_LIMIT = 1000


def day_prefix(on_date: date) -> str:
    return on_date.strftime("%Y%m%d")


def next_transaction_no(existing_numbers: Iterable[str], on_date: date) -> str:
    """
    Next sequential number for a day.

    Numbers without the day's prefix, or with a non-numeric suffix, are ignored.
    """
    prefix = day_prefix(on_date)
    highest = 0
    for number in existing_numbers:
        if not number or not number.startswith(prefix):
            continue
        suffix = number.rsplit("-", 1)[-1] if "-" in number else ""
        if suffix.isdecimal():
            highest = max(highest, int(suffix))
    return f"{prefix}-{highest + 1:03d}"


def fallback_transaction_no(on_date: date, now_ms: Optional[int] = None) -> str:
    """YYYYMMDD plus the last three digits of the millisecond clock."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{day_prefix(on_date)}-{str(now_ms)[-3:]}"


class TransactionNumberGenerator:
    """Generates numbers against the transactions already stored for a day."""

    def __init__(self, storage: TransactionStorageInterface):
        self._storage = storage

    async def generate(self, on_date: Optional[date] = None) -> str:
        on_date = on_date or date.today()
        try:
            filters = TransactionFilters(limit=DAY_FETCH_LIMIT).for_day(on_date)
            page = await self._storage.list_transactions(filters)
        except Exception as e:
            logger.warning(
                "transaction_number_fallback",
                on_date=on_date.isoformat(),
                error=str(e),
            )
            return fallback_transaction_no(on_date)
        return next_transaction_no((t.transaction_no for t in page.data), on_date)
