"""Reporting and aggregation package."""

from bizmanager.reports.aggregation import (
    account_summary,
    build_report,
    commission_summary,
    compute_totals,
    daily_summary,
    dashboard_stats,
    location_summary,
)

__all__ = [
    "account_summary",
    "build_report",
    "commission_summary",
    "compute_totals",
    "daily_summary",
    "dashboard_stats",
    "location_summary",
]
