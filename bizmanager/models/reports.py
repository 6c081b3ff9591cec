"""
Report Models

Summary structures produced by the aggregation engine.
These are derived views - recomputed on every load, never persisted.

Field order matters: CSV export of a summary uses the field order as the
column order.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


NO_TRANSACTIONS = "No transactions"


class DailySummary(BaseModel):
    """Totals for one calendar day."""

    date: dt.date
    credits: float = 0.0
    debits: float = 0.0
    net: float = 0.0
    count: int = 0
    commission: float = 0.0


class AccountSummary(BaseModel):
    """Totals for one account."""

    account_id: UUID
    account_name: str
    credits: float = 0.0
    debits: float = 0.0
    net: float = 0.0
    count: int = 0


class LocationSummary(BaseModel):
    """Totals for one location."""

    location_id: UUID
    location_name: str
    credits: float = 0.0
    debits: float = 0.0
    net: float = 0.0
    count: int = 0


class CommissionSummary(BaseModel):
    """
    Commission earned through one account.

    Only transactions with a positive commission are counted, so
    transaction_count is always at least 1.
    """

    account_id: UUID
    account_name: str
    total_commission: float = 0.0
    transaction_count: int = Field(default=0, ge=0)
    avg_commission: float = 0.0

    def share_of(self, total_commissions: float) -> float:
        """Percentage of all commissions earned through this account."""
        if total_commissions <= 0:
            return 0.0
        return self.total_commission / total_commissions * 100


class ReportTotals(BaseModel):
    """Headline totals for a report."""

    total_credits: float = 0.0
    total_debits: float = 0.0
    net_balance: float = 0.0
    total_commissions: float = 0.0
    total_transactions: int = 0


class ReportData(BaseModel):
    """Everything the reports page renders."""

    daily_summary: list[DailySummary] = Field(default_factory=list)
    account_summary: list[AccountSummary] = Field(default_factory=list)
    location_summary: list[LocationSummary] = Field(default_factory=list)
    commission_summary: list[CommissionSummary] = Field(default_factory=list)
    totals: ReportTotals = Field(default_factory=ReportTotals)

    @property
    def commission_transaction_count(self) -> int:
        return sum(entry.transaction_count for entry in self.commission_summary)


class TopAccount(BaseModel):
    """The account with the highest summed amount on a day."""

    name: str
    amount: float = 0.0

    @classmethod
    def none(cls) -> "TopAccount":
        """Sentinel used when there are no transactions on the day."""
        return cls(name=NO_TRANSACTIONS, amount=0.0)

    @property
    def is_empty(self) -> bool:
        return self.name == NO_TRANSACTIONS


class AccountShare(BaseModel):
    """One slice of the dashboard account distribution."""

    name: str
    total: float


class DashboardStats(BaseModel):
    """KPIs for the dashboard, relative to a target date."""

    on_date: dt.date
    location_id: Optional[UUID] = None

    today_credits: float = 0.0
    today_debits: float = 0.0
    net_balance: float = 0.0
    today_commissions: float = 0.0
    total_transactions: int = 0

    active_accounts: int = 0
    total_locations: int = 0
    monthly_total: float = 0.0
    weekly_average: float = 0.0
    avg_transaction_amount: float = 0.0
    top_account: TopAccount = Field(default_factory=TopAccount.none)

    account_distribution: list[AccountShare] = Field(default_factory=list)
