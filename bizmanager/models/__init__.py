"""
Data Models Package

This package contains all Pydantic models used in BizManager.
All data flowing through the system must conform to these schemas.
"""

from bizmanager.models.records import (
    COMMISSION_MAX_DECIMAL_PLACES,
    COMMISSION_MAX_VALUE,
    Account,
    AccountCreate,
    Location,
    LocationCreate,
    Transaction,
    TransactionCreate,
    TransactionFilters,
    TransactionForm,
    TransactionPage,
    TransactionType,
    ValidationIssue,
    ValidationResult,
    utc_now,
)
from bizmanager.models.reports import (
    AccountShare,
    AccountSummary,
    CommissionSummary,
    DailySummary,
    DashboardStats,
    LocationSummary,
    ReportData,
    ReportTotals,
    TopAccount,
)
from bizmanager.models.activity import (
    ActivityEvent,
    ActivityEventBuilder,
    ActivityEventType,
    ActivitySeverity,
)

__all__ = [
    # Records
    "COMMISSION_MAX_DECIMAL_PLACES",
    "COMMISSION_MAX_VALUE",
    "Account",
    "AccountCreate",
    "Location",
    "LocationCreate",
    "Transaction",
    "TransactionCreate",
    "TransactionFilters",
    "TransactionForm",
    "TransactionPage",
    "TransactionType",
    "ValidationIssue",
    "ValidationResult",
    "utc_now",
    # Reports
    "AccountShare",
    "AccountSummary",
    "CommissionSummary",
    "DailySummary",
    "DashboardStats",
    "LocationSummary",
    "ReportData",
    "ReportTotals",
    "TopAccount",
    # Activity models
    "ActivityEvent",
    "ActivityEventBuilder",
    "ActivityEventType",
    "ActivitySeverity",
]
