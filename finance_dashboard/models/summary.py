"""Derived values computed from a filtered snapshot."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

from finance_dashboard.models.category import Category
from finance_dashboard.models.filters import FilterState
from finance_dashboard.models.transaction import Transaction


class DashboardSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    income: float = 0.0
    expense: float = 0.0
    balance: float = 0.0
    count: int = 0


class CategorySlice(BaseModel):
    """Expense total for one category."""

    model_config = ConfigDict(frozen=True)

    key: Category
    label: str
    total: float
    color: str
    emoji: str
    percentage: float


class MonthBucket(BaseModel):
    """Income and expense totals for one calendar month."""

    label: str
    year: int
    month: int
    income: float = 0.0
    expense: float = 0.0


class ChartSlice(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: float
    color: str


@dataclass(frozen=True)
class DashboardView:
    """Everything the page renders for one snapshot and filter state."""

    state: FilterState
    transactions: list[Transaction]
    summary: DashboardSummary
    categories: list[CategorySlice]
    months: list[MonthBucket]
    split: list[ChartSlice]
