"""Read-only reports built from a committed FinancialState."""

from finfree.reports.dashboard import DashboardSummary, build_dashboard

__all__ = ["DashboardSummary", "build_dashboard"]
