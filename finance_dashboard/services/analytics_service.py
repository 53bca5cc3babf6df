"""Service for dashboard analytics."""

from collections import defaultdict
from datetime import datetime, tzinfo
from typing import Iterable, Optional

from finance_dashboard.config import settings
from finance_dashboard.models import (
    Category,
    CategorySlice,
    ChartSlice,
    DashboardSummary,
    DashboardView,
    FilterState,
    MonthBucket,
    Transaction,
    TransactionType,
    describe,
)
from finance_dashboard.services.filter_service import FilterService, sort_newest_first

INCOME_COLOR = "#10b981"
EXPENSE_COLOR = "#ef4444"


class AnalyticsService:
    """Service for financial analytics over an in-memory transaction list."""

    def __init__(
        self,
        filter_service: Optional[FilterService] = None,
        tz: Optional[tzinfo] = None,
    ):
        self.tz = tz or settings.tzinfo
        self.filter_service = filter_service or FilterService(self.tz)

    def summarize(self, transactions: Iterable[Transaction]) -> DashboardSummary:
        """Get income, expense and balance in one pass."""
        income = 0.0
        expense = 0.0
        count = 0
        for t in transactions:
            count += 1
            if t.type == TransactionType.INCOME:
                income += t.amount
            elif t.type == TransactionType.EXPENSE:
                expense += t.amount

        return DashboardSummary(
            income=income,
            expense=expense,
            balance=income - expense,
            count=count,
        )

    def category_breakdown(
        self, transactions: Iterable[Transaction]
    ) -> list[CategorySlice]:
        """
        Get expense totals per category, largest first.

        Unknown category keys are counted under ``other``. Percentages are of
        total expense, and all 0 when there is no expense.
        """
        totals: dict[Category, float] = defaultdict(float)
        for t in transactions:
            if t.type == TransactionType.EXPENSE:
                totals[describe(t.category).key] += t.amount

        total_exp = sum(totals.values())

        slices = []
        for key, total in totals.items():
            descriptor = describe(key)
            slices.append(
                CategorySlice(
                    key=key,
                    label=descriptor.label,
                    total=total,
                    color=descriptor.color,
                    emoji=descriptor.emoji,
                    percentage=(total / total_exp) * 100 if total_exp > 0 else 0.0,
                )
            )

        slices.sort(key=lambda s: s.total, reverse=True)
        return slices

    def monthly_breakdown(
        self, transactions: Iterable[Transaction]
    ) -> list[MonthBucket]:
        """
        Get income and expense per calendar month, oldest month first.

        Buckets are opened in the order they are first met while walking the
        transactions newest first, then the list is reversed. Undated entries
        are left out.
        """
        buckets: dict[tuple[int, int], MonthBucket] = {}

        for t in sort_newest_first(transactions):
            moment = t.parsed_date
            if moment is None:
                continue
            moment = moment.astimezone(self.tz)
            key = (moment.year, moment.month)

            bucket = buckets.get(key)
            if bucket is None:
                bucket = MonthBucket(
                    label=moment.strftime("%b %y"),
                    year=moment.year,
                    month=moment.month,
                )
                buckets[key] = bucket

            if t.type == TransactionType.INCOME:
                bucket.income += t.amount
            elif t.type == TransactionType.EXPENSE:
                bucket.expense += t.amount

        return list(reversed(list(buckets.values())))

    def income_expense_split(
        self, transactions: Iterable[Transaction]
    ) -> list[ChartSlice]:
        """Get the two slices of the income vs expense donut chart."""
        return _split(self.summarize(transactions))

    def build_view(
        self,
        transactions: Iterable[Transaction],
        state: Optional[FilterState] = None,
        now: Optional[datetime] = None,
    ) -> DashboardView:
        """Filter a snapshot and compute every derived value from the result."""
        state = state or FilterState()
        filtered = self.filter_service.filter_transactions(transactions, state, now)
        summary = self.summarize(filtered)

        return DashboardView(
            state=state,
            transactions=filtered,
            summary=summary,
            categories=self.category_breakdown(filtered),
            months=self.monthly_breakdown(filtered),
            split=_split(summary),
        )


def _split(summary: DashboardSummary) -> list[ChartSlice]:
    return [
        ChartSlice(name="Income", value=summary.income, color=INCOME_COLOR),
        ChartSlice(name="Expense", value=summary.expense, color=EXPENSE_COLOR),
    ]
