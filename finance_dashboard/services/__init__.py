"""Services package for the finance dashboard."""

from finance_dashboard.services.analytics_service import AnalyticsService
from finance_dashboard.services.filter_service import FilterService
from finance_dashboard.services.pipeline import DashboardPipeline
from finance_dashboard.services.transaction_service import (
    Subscription,
    TransactionService,
)

__all__ = [
    "AnalyticsService",
    "DashboardPipeline",
    "FilterService",
    "Subscription",
    "TransactionService",
]
