"""Data models for the finance dashboard."""

from finance_dashboard.models.category import (
    CATEGORIES,
    Category,
    CategoryDescriptor,
    categories_for,
    describe,
)
from finance_dashboard.models.filters import ALL, FilterState, TimeWindow
from finance_dashboard.models.summary import (
    CategorySlice,
    ChartSlice,
    DashboardSummary,
    DashboardView,
    MonthBucket,
)
from finance_dashboard.models.transaction import (
    Transaction,
    TransactionCreate,
    TransactionType,
    parse_instant,
)

__all__ = [
    "ALL",
    "CATEGORIES",
    "Category",
    "CategoryDescriptor",
    "CategorySlice",
    "ChartSlice",
    "DashboardSummary",
    "DashboardView",
    "FilterState",
    "MonthBucket",
    "TimeWindow",
    "Transaction",
    "TransactionCreate",
    "TransactionType",
    "categories_for",
    "describe",
    "parse_instant",
]
