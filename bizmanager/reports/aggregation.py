"""
Aggregation Engine

DESIGN DECISION: Aggregation is a PURE function of a transaction list.
Storage hands us typed Transaction records; this module reduces them to the
summaries shown on the dashboard and the reports page.

GUARANTEES:
- The input list is never mutated
- A missing commission counts as exactly zero
- Missing account/location relations degrade to "Unknown", never an error
- Every commission summary entry has at least one transaction
"""

import datetime as dt
from collections import defaultdict
from typing import Iterable, Optional
from uuid import UUID

from bizmanager.models.records import Transaction, TransactionType
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


WEEK_DAYS = 7


def _apply(summary, transaction: Transaction) -> None:
    """Add one transaction to a credits/debits/net/count summary."""
    amount = transaction.amount_value
    summary.count += 1
    if transaction.type == TransactionType.CREDIT:
        summary.credits += amount
    else:
        summary.debits += amount
    summary.net = summary.credits - summary.debits


def daily_summary(transactions: Iterable[Transaction]) -> list[DailySummary]:
    """Group by date, oldest first."""
    groups: dict[dt.date, DailySummary] = {}

    for transaction in transactions:
        if transaction.date not in groups:
            groups[transaction.date] = DailySummary(date=transaction.date)
        summary = groups[transaction.date]
        _apply(summary, transaction)
        summary.commission += transaction.commission_value

    return sorted(groups.values(), key=lambda s: s.date)


def account_summary(transactions: Iterable[Transaction]) -> list[AccountSummary]:
    """Group by account, highest net first."""
    groups: dict[UUID, AccountSummary] = {}

    for transaction in transactions:
        if transaction.account_id not in groups:
            groups[transaction.account_id] = AccountSummary(
                account_id=transaction.account_id,
                account_name=transaction.account_name,
            )
        _apply(groups[transaction.account_id], transaction)

    return sorted(groups.values(), key=lambda s: s.net, reverse=True)


def location_summary(transactions: Iterable[Transaction]) -> list[LocationSummary]:
    """Group by location, highest net first."""
    groups: dict[UUID, LocationSummary] = {}

    for transaction in transactions:
        if transaction.location_id not in groups:
            groups[transaction.location_id] = LocationSummary(
                location_id=transaction.location_id,
                location_name=transaction.location_name,
            )
        _apply(groups[transaction.location_id], transaction)

    return sorted(groups.values(), key=lambda s: s.net, reverse=True)


def commission_summary(transactions: Iterable[Transaction]) -> list[CommissionSummary]:
    """
    Commission earned per account, highest total first.

    Only transactions with a positive commission create or update an entry,
    so avg_commission never divides by zero.
    """
    groups: dict[UUID, CommissionSummary] = {}

    for transaction in transactions:
        commission = transaction.commission_value
        if commission <= 0:
            continue

        if transaction.account_id not in groups:
            groups[transaction.account_id] = CommissionSummary(
                account_id=transaction.account_id,
                account_name=transaction.account_name,
            )
        entry = groups[transaction.account_id]
        entry.total_commission += commission
        entry.transaction_count += 1
        entry.avg_commission = entry.total_commission / entry.transaction_count

    return sorted(groups.values(), key=lambda s: s.total_commission, reverse=True)


def compute_totals(transactions: Iterable[Transaction]) -> ReportTotals:
    """Headline credit/debit/commission totals."""
    transactions = list(transactions)

    total_credits = sum(
        t.amount_value for t in transactions if t.type == TransactionType.CREDIT
    )
    total_debits = sum(
        t.amount_value for t in transactions if t.type == TransactionType.DEBIT
    )
    total_commissions = sum(t.commission_value for t in transactions)

    return ReportTotals(
        total_credits=total_credits,
        total_debits=total_debits,
        net_balance=total_credits - total_debits,
        total_commissions=total_commissions,
        total_transactions=len(transactions),
    )


def build_report(transactions: Iterable[Transaction]) -> ReportData:
    """Build every summary the reports page shows."""
    transactions = list(transactions)
    return ReportData(
        daily_summary=daily_summary(transactions),
        account_summary=account_summary(transactions),
        location_summary=location_summary(transactions),
        commission_summary=commission_summary(transactions),
        totals=compute_totals(transactions),
    )


def _net(transactions: Iterable[Transaction]) -> float:
    return sum(
        t.amount_value if t.type == TransactionType.CREDIT else -t.amount_value
        for t in transactions
    )


def _top_account(transactions: list[Transaction]) -> TopAccount:
    if not transactions:
        return TopAccount.none()

    totals: dict[UUID, float] = defaultdict(float)
    names: dict[UUID, str] = {}
    for transaction in transactions:
        totals[transaction.account_id] += transaction.amount_value
        names.setdefault(transaction.account_id, transaction.account_name)

    account_id = max(totals, key=totals.get)
    return TopAccount(name=names[account_id], amount=totals[account_id])


def _account_distribution(
    transactions: list[Transaction],
    top_n: int,
) -> list[AccountShare]:
    totals: dict[str, float] = defaultdict(float)
    for transaction in transactions:
        totals[transaction.account_name] += transaction.amount_value

    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    return [AccountShare(name=name, total=total) for name, total in ranked[:top_n]]


def dashboard_stats(
    transactions: Iterable[Transaction],
    on_date: Optional[dt.date] = None,
    location_id: Optional[UUID] = None,
    total_locations: int = 0,
    accounts_top_n: int = 4,
) -> DashboardStats:
    """
    Compute dashboard KPIs for a target date (default: today).

    Windows are inclusive of the target date:
    - week: the target date and the six days before it
    - month: the first of the target month through the target date
    """
    transactions = list(transactions)
    on_date = on_date or dt.date.today()
    week_start = on_date - dt.timedelta(days=WEEK_DAYS - 1)
    month_start = on_date.replace(day=1)

    today = [t for t in transactions if t.date == on_date]
    week = [t for t in transactions if week_start <= t.date <= on_date]
    month = [t for t in transactions if month_start <= t.date <= on_date]

    today_credits = sum(t.amount_value for t in today if t.type == TransactionType.CREDIT)
    today_debits = sum(t.amount_value for t in today if t.type == TransactionType.DEBIT)

    avg_amount = (
        sum(t.amount_value for t in today) / len(today) if today else 0.0
    )

    return DashboardStats(
        on_date=on_date,
        location_id=location_id,
        today_credits=today_credits,
        today_debits=today_debits,
        net_balance=today_credits - today_debits,
        today_commissions=sum(t.commission_value for t in today),
        total_transactions=len(transactions),
        active_accounts=len({t.account_id for t in week}),
        total_locations=total_locations,
        monthly_total=_net(month),
        weekly_average=_net(week) / WEEK_DAYS,
        avg_transaction_amount=avg_amount,
        top_account=_top_account(today),
        account_distribution=_account_distribution(week, accounts_top_n),
    )
