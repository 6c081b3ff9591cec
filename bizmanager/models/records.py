"""
Core Data Models for BizManager

These models define the strict schemas for all data flowing through the system.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging
4. Reject malformed rows before they reach aggregation

DESIGN DECISION: Every row read from storage is parsed into one of these
models. Nothing downstream works with raw dicts from the remote store.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from math import ceil
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)


# Commission precision matches the currency subunit (paise)
COMMISSION_MAX_VALUE = Decimal("999999999.99")
COMMISSION_MAX_DECIMAL_PLACES = 2

UNKNOWN_NAME = "Unknown"


def utc_now() -> dt.datetime:
    """Timezone-aware current UTC timestamp."""
    return dt.datetime.now(dt.timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """
    Direction of money for a transaction.

    CREDIT is money received, DEBIT is money paid out.
    No other values are valid.
    """
    CREDIT = "credit"
    DEBIT = "debit"


Money = Annotated[Decimal, Field(ge=0, decimal_places=2)]
Commission = Annotated[
    Decimal,
    Field(ge=0, le=COMMISSION_MAX_VALUE, decimal_places=COMMISSION_MAX_DECIMAL_PLACES),
]


# =============================================================================
# DIRECTORY MODELS - accounts and locations
# =============================================================================

class AccountCreate(BaseModel):
    """Payload for creating or updating an account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Account display name (used to match CSV imports)"
    )
    phone_number: Optional[str] = Field(
        default=None,
        max_length=20,
        description="Contact number"
    )


class Account(AccountCreate):
    """An account (customer, vendor or other counterparty)."""

    id: UUID = Field(default_factory=uuid4)
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)


class LocationCreate(BaseModel):
    """Payload for creating or updating a location."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Location display name (used to match CSV imports)"
    )
    address: Optional[str] = Field(
        default=None,
        max_length=500,
        description="Postal address"
    )


class Location(LocationCreate):
    """A business location (branch, shop, office)."""

    id: UUID = Field(default_factory=uuid4)
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)


# =============================================================================
# TRANSACTION MODELS
# =============================================================================

class TransactionBase(BaseModel):
    """Fields shared by stored transactions and create/update payloads."""
    model_config = ConfigDict(str_strip_whitespace=True)

    transaction_no: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description="Human-facing daily sequence number (YYYYMMDD-NNN)"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date of the transaction"
    )
    amount: Money = Field(
        ...,
        description="Amount in INR"
    )
    type: TransactionType
    account_id: UUID
    location_id: UUID
    description: Optional[str] = Field(
        default=None,
        max_length=1000,
    )


class TransactionCreate(TransactionBase):
    """
    Payload for creating or updating a transaction.

    Commission defaults to zero when not provided.
    """

    commission: Commission = Field(
        default=Decimal("0"),
        description="Commission in INR"
    )


class Transaction(TransactionBase):
    """
    A stored transaction.

    Commission is optional on stored rows; a missing value means zero.
    The account and location relations are joined in when listing.
    """

    id: UUID = Field(default_factory=uuid4)
    commission: Optional[Commission] = Field(
        default=None,
        description="Commission in INR (None means zero)"
    )
    created_at: dt.datetime = Field(default_factory=utc_now)
    updated_at: dt.datetime = Field(default_factory=utc_now)

    account: Optional[Account] = None
    location: Optional[Location] = None

    @property
    def amount_value(self) -> float:
        return float(self.amount)

    @property
    def commission_value(self) -> float:
        """Commission as a float, treating a missing value as zero."""
        return float(self.commission or 0)

    @property
    def is_credit(self) -> bool:
        return self.type == TransactionType.CREDIT

    @property
    def account_name(self) -> str:
        return self.account.name if self.account else UNKNOWN_NAME

    @property
    def location_name(self) -> str:
        return self.location.name if self.location else UNKNOWN_NAME

    def to_create(self) -> TransactionCreate:
        """Strip identity, timestamps and relations."""
        return TransactionCreate(
            transaction_no=self.transaction_no,
            date=self.date,
            amount=self.amount,
            commission=self.commission or Decimal("0"),
            type=self.type,
            account_id=self.account_id,
            location_id=self.location_id,
            description=self.description,
        )


class TransactionFilters(BaseModel):
    """
    Filters for listing transactions.

    Mirrors what the transactions page and reports let the user pick.
    """

    location_id: Optional[UUID] = None
    account_id: Optional[UUID] = None
    type: Optional[TransactionType] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    search: Optional[str] = Field(
        default=None,
        max_length=100,
        description="Case-insensitive match on transaction number or description"
    )

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=1000)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def for_day(self, day: dt.date) -> "TransactionFilters":
        """Same filters, restricted to a single day."""
        return self.model_copy(update={"date_from": day, "date_to": day})


class TransactionPage(BaseModel):
    """One page of transactions plus the total match count."""

    data: list[Transaction] = Field(default_factory=list)
    count: int = Field(default=0, ge=0)

    def total_pages(self, limit: int) -> int:
        if self.count == 0:
            return 1
        return ceil(self.count / limit)


# =============================================================================
# VALIDATION MODELS
# =============================================================================

class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'negative', 'too_large')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )
    severity: str = Field(
        default="error",
        pattern="^(error|warning|info)$",
        description="Issue severity"
    )


class ValidationResult(BaseModel):
    """Result of validating a transaction form."""

    validated_at: dt.datetime = Field(default_factory=utc_now)
    issues: list[ValidationIssue] = Field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    @property
    def has_errors(self) -> bool:
        """Check if there are any error-level issues."""
        return any(issue.severity == "error" for issue in self.issues)

    @property
    def error_count(self) -> int:
        """Count error-level issues."""
        return sum(1 for issue in self.issues if issue.severity == "error")

    def messages_for(self, field: str) -> list[str]:
        return [issue.message for issue in self.issues if issue.field == field]


class TransactionForm(BaseModel):
    """
    Raw values from the transaction entry form.

    Everything is a string (or None) because this is what the user typed.
    TransactionValidator turns it into a TransactionCreate.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    transaction_no: str = ""
    date: Optional[dt.date] = None
    amount: str = ""
    commission: str = ""
    type: str = TransactionType.CREDIT.value
    account_id: Optional[UUID] = None
    location_id: Optional[UUID] = None
    description: str = ""

    @model_validator(mode="before")
    @classmethod
    def _none_to_blank(cls, data):
        if isinstance(data, dict):
            data = dict(data)
            for key in ("transaction_no", "amount", "commission", "description"):
                if data.get(key) is None:
                    data[key] = ""
        return data

    @classmethod
    def from_transaction(cls, transaction: Transaction) -> "TransactionForm":
        """Prefill the form for editing an existing transaction."""
        return cls(
            transaction_no=transaction.transaction_no,
            date=transaction.date,
            amount=str(transaction.amount),
            commission=str(transaction.commission) if transaction.commission else "",
            type=transaction.type.value,
            account_id=transaction.account_id,
            location_id=transaction.location_id,
            description=transaction.description or "",
        )
