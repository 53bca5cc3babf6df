"""Fixed category registry used for display and aggregation."""

from enum import Enum
from typing import NamedTuple, Optional

from finance_dashboard.models.transaction import TransactionType


class Category(str, Enum):
    """Closed set of category keys."""

    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    BILLS = "bills"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    EDUCATION = "education"
    OTHER = "other"
    SALARY = "salary"
    OTHER_INCOME = "other_income"


class CategoryDescriptor(NamedTuple):
    """Display metadata for a category."""

    key: Category
    label: str
    color: str
    emoji: str


CATEGORIES: dict[Category, CategoryDescriptor] = {
    Category.FOOD: CategoryDescriptor(Category.FOOD, "Food & Drink", "#f97316", "🍔"),
    Category.TRANSPORT: CategoryDescriptor(Category.TRANSPORT, "Transport", "#3b82f6", "🚗"),
    Category.SHOPPING: CategoryDescriptor(Category.SHOPPING, "Shopping", "#ec4899", "🛍️"),
    Category.BILLS: CategoryDescriptor(Category.BILLS, "Bills & Utilities", "#eab308", "💡"),
    Category.ENTERTAINMENT: CategoryDescriptor(
        Category.ENTERTAINMENT, "Entertainment", "#8b5cf6", "🎬"
    ),
    Category.HEALTH: CategoryDescriptor(Category.HEALTH, "Health", "#14b8a6", "💊"),
    Category.EDUCATION: CategoryDescriptor(Category.EDUCATION, "Education", "#6366f1", "📚"),
    Category.OTHER: CategoryDescriptor(Category.OTHER, "Other", "#94a3b8", "📦"),
    Category.SALARY: CategoryDescriptor(Category.SALARY, "Salary", "#10b981", "💰"),
    Category.OTHER_INCOME: CategoryDescriptor(
        Category.OTHER_INCOME, "Other Income", "#22c55e", "💵"
    ),
}

INCOME_CATEGORIES = (Category.SALARY, Category.OTHER_INCOME)

DEFAULT_CATEGORY = Category.OTHER


def resolve(key: Optional[str]) -> Category:
    """Map a stored key to a Category, falling back to ``other``."""
    try:
        return Category(key)
    except ValueError:
        return DEFAULT_CATEGORY


def describe(key: Optional[str]) -> CategoryDescriptor:
    """Get the descriptor for a stored key. Never fails."""
    return CATEGORIES[resolve(key)]


def categories_for(transaction_type: TransactionType) -> list[Category]:
    """Categories offered by the input form for a transaction type."""
    if TransactionType(transaction_type) is TransactionType.INCOME:
        return list(INCOME_CATEGORIES)
    return [c for c in Category if c not in INCOME_CATEGORIES]
