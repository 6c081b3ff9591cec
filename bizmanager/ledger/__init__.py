"""Transaction numbering package."""

from bizmanager.ledger.numbering import (
    TransactionNumberGenerator,
    fallback_transaction_no,
    next_transaction_no,
)

__all__ = [
    "TransactionNumberGenerator",
    "fallback_transaction_no",
    "next_transaction_no",
]
