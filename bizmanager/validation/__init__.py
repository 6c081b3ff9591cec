"""Validation package."""

from bizmanager.validation.commission import (
    CommissionValidationError,
    parse_commission,
    validate_commission,
)
from bizmanager.validation.validator import TransactionValidator, validation_summary

__all__ = [
    "CommissionValidationError",
    "TransactionValidator",
    "parse_commission",
    "validate_commission",
    "validation_summary",
]
