"""
Commission Validation

One rule, applied identically to manual entry and CSV import:

- blank or absent: valid, treated as zero
- must be a plain number (no currency symbols, no thousands separators)
- must not be negative
- at most 2 decimal places (currency subunit precision)
- at most 999,999,999.99

Each failure kind has its own message so the caller can show the exact reason.
"""

import math
import re
from decimal import Decimal
from typing import Optional

from bizmanager.models.records import (
    COMMISSION_MAX_DECIMAL_PLACES,
    COMMISSION_MAX_VALUE,
    ValidationIssue,
)


_NUMBER_PATTERN = re.compile(r"^-?\d*\.?\d+([eE][+-]?\d+)?$")

INVALID_NUMBER = "invalid_number"
NEGATIVE = "negative"
TOO_MANY_DECIMALS = "too_many_decimals"
TOO_LARGE = "too_large"

MESSAGES = {
    INVALID_NUMBER: "Commission must be a valid number",
    NEGATIVE: "Commission cannot be negative",
    TOO_MANY_DECIMALS: (
        f"Commission can have at most {COMMISSION_MAX_DECIMAL_PLACES} decimal places"
    ),
    TOO_LARGE: f"Commission value is too large (maximum: {COMMISSION_MAX_VALUE})",
}


class CommissionValidationError(ValueError):
    """Commission input failed validation."""

    def __init__(self, issue: ValidationIssue):
        self.issue = issue
        super().__init__(issue.message)

    @property
    def issue_type(self) -> str:
        return self.issue.issue_type


def _issue(issue_type: str) -> ValidationIssue:
    return ValidationIssue(
        field="commission",
        issue_type=issue_type,
        message=MESSAGES[issue_type],
        severity="error",
    )


def validate_commission(value: Optional[str]) -> Optional[ValidationIssue]:
    """
    Validate raw commission input.

    Returns None when the value is acceptable, otherwise the issue
    describing the first rule it broke.
    """
    if value is None:
        return None

    text = str(value).strip()
    if not text:
        return None

    if not _NUMBER_PATTERN.match(text):
        return _issue(INVALID_NUMBER)

    number = float(text)
    if math.isnan(number) or math.isinf(number):
        return _issue(INVALID_NUMBER)

    if number < 0:
        return _issue(NEGATIVE)

    # Counted on the parsed value so exponent forms ("1e-5", "1.2e1") are judged correctly
    exponent = Decimal(text).normalize().as_tuple().exponent
    if -exponent > COMMISSION_MAX_DECIMAL_PLACES:
        return _issue(TOO_MANY_DECIMALS)

    if Decimal(text) > COMMISSION_MAX_VALUE:
        return _issue(TOO_LARGE)

    return None


def parse_commission(value: Optional[str]) -> Decimal:
    """
    Parse raw commission input into a Decimal.

    Blank input is zero. Raises CommissionValidationError on invalid input.
    """
    issue = validate_commission(value)
    if issue is not None:
        raise CommissionValidationError(issue)

    text = "" if value is None else str(value).strip()
    if not text:
        return Decimal("0")
    # Already at most 2 places, so this only normalises the form ("1e2" -> 100.00)
    return Decimal(text).quantize(Decimal("0.01"))
