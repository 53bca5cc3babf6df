from datetime import timezone

import pytest
from pydantic import ValidationError

from finance_dashboard.models import (
    Category,
    FilterState,
    TimeWindow,
    TransactionCreate,
    TransactionType,
)
from finance_dashboard.services import AnalyticsService
from tests.conftest import NOW, make_txn


@pytest.fixture
def analytics():
    return AnalyticsService(tz=timezone.utc)


class TestSummarize:
    def test_totals_and_balance(self, analytics, sample_transactions):
        summary = analytics.summarize(sample_transactions)
        assert summary.income == 25500
        assert summary.expense == 45 + 350 + 1500 + 200 + 1200
        assert summary.balance == summary.income - summary.expense
        assert summary.count == len(sample_transactions)

    def test_empty_list(self, analytics):
        summary = analytics.summarize([])
        assert (summary.income, summary.expense, summary.balance) == (0.0, 0.0, 0.0)

    def test_balance_can_be_negative(self, analytics):
        summary = analytics.summarize([
            make_txn("1", "2024-01-01T00:00:00Z", 10.5, TransactionType.INCOME, "salary"),
            make_txn("2", "2024-01-02T00:00:00Z", 20.25),
        ])
        assert summary.balance == 10.5 - 20.25


class TestCategoryBreakdown:
    def test_totals_sum_to_expense(self, analytics, sample_transactions):
        slices = analytics.category_breakdown(sample_transactions)
        expense = analytics.summarize(sample_transactions).expense

        assert sum(s.total for s in slices) == pytest.approx(expense)
        assert sum(s.percentage for s in slices) == pytest.approx(100.0)

    def test_sorted_by_total_descending(self, analytics, sample_transactions):
        slices = analytics.category_breakdown(sample_transactions)
        assert [s.key for s in slices] == [
            Category.BILLS,
            Category.SHOPPING,
            Category.TRANSPORT,
            Category.ENTERTAINMENT,
            Category.FOOD,
        ]
        assert slices[0].label == "Bills & Utilities"
        assert slices[0].emoji

    def test_income_is_left_out(self, analytics):
        slices = analytics.category_breakdown([
            make_txn("1", "2024-01-01T00:00:00Z", 500, TransactionType.INCOME, "salary"),
        ])
        assert slices == []

    def test_percentages_zero_without_expense(self, analytics):
        assert analytics.category_breakdown([]) == []

        slices = analytics.category_breakdown([make_txn("1", "2024-01-01T00:00:00Z", 0)])
        assert [s.percentage for s in slices] == [0.0]

    def test_unknown_category_counts_as_other(self, analytics):
        slices = analytics.category_breakdown([
            make_txn("1", "2024-01-01T00:00:00Z", 30, category="crypto"),
            make_txn("2", "2024-01-02T00:00:00Z", 70, category="other"),
        ])
        assert len(slices) == 1
        assert slices[0].key == Category.OTHER
        assert slices[0].label == "Other"
        assert slices[0].total == 100
        assert slices[0].percentage == pytest.approx(100.0)


class TestMonthlyBreakdown:
    def test_months_read_oldest_first(self, analytics):
        txns = [
            make_txn("nov", "2023-11-20T00:00:00Z", 10),
            make_txn("jan", "2024-01-05T00:00:00Z", 20),
            make_txn("dec", "2023-12-12T00:00:00Z", 30),
        ]
        months = analytics.monthly_breakdown(txns)
        assert [m.label for m in months] == ["Nov 23", "Dec 23", "Jan 24"]

    def test_income_and_expense_summed_per_month(self, analytics, sample_transactions):
        months = {m.label: m for m in analytics.monthly_breakdown(sample_transactions)}
        assert months["Jan 24"].income == 25000
        assert months["Jan 24"].expense == 45 + 350 + 1500
        assert months["Dec 23"].income == 0
        assert months["Dec 23"].expense == 1400
        assert months["Nov 23"].income == 500

    def test_undated_entries_are_skipped(self, analytics):
        months = analytics.monthly_breakdown([
            make_txn("bad", "yesterday"),
            make_txn("ok", "2024-02-01T00:00:00Z"),
        ])
        assert [(m.year, m.month) for m in months] == [(2024, 2)]


class TestBuildView:
    def test_view_is_computed_from_filtered_list(self, analytics, sample_transactions):
        state = FilterState(window=TimeWindow.LAST_MONTH)
        view = analytics.build_view(sample_transactions, state, NOW)

        assert view.state == state
        assert [t.id for t in view.transactions] == ["5", "6"]
        assert view.summary.expense == 1400
        assert view.summary.income == 0
        assert [m.label for m in view.months] == ["Dec 23"]
        assert [s.name for s in view.split] == ["Income", "Expense"]
        assert [s.value for s in view.split] == [0, 1400]

    def test_split_matches_summary(self, analytics, sample_transactions):
        split = analytics.income_expense_split(sample_transactions)
        summary = analytics.summarize(sample_transactions)
        assert split[0].value == summary.income
        assert split[1].value == summary.expense


def test_stored_amounts_are_finite(service):
    with pytest.raises(ValidationError):
        service.insert(TransactionCreate(
            type="expense", amount=float("inf"), description="Broken", category="food",
        ))
    service.insert(TransactionCreate(
        type="expense", amount=5, description="Pen", category="bills",
    ))

    slices = AnalyticsService(tz=timezone.utc).category_breakdown(service.snapshot())
    assert [(s.key, s.percentage) for s in slices] == [(Category.BILLS, 100.0)]
