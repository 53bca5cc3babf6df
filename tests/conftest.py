from datetime import datetime, timezone
from typing import Optional

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from finance_dashboard.database import init_db
from finance_dashboard.models import Transaction, TransactionType
from finance_dashboard.services import TransactionService

# Fixed clock for window tests
NOW = datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)


def make_txn(
    id: str,
    date: str,
    amount: float = 100.0,
    type: TransactionType = TransactionType.EXPENSE,
    category: str = "food",
    description: Optional[str] = None,
) -> Transaction:
    return Transaction(
        id=id,
        type=type,
        amount=amount,
        description=description or f"Transaction {id}",
        category=category,
        date=date,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def service(engine):
    return TransactionService(engine, retry_attempts=2, retry_delay=0)


@pytest.fixture
def sample_transactions():
    return [
        make_txn("1", "2024-01-15T08:30:00Z", 45, description="Iced Coffee (Amazon)"),
        make_txn("2", "2024-01-15T12:00:00Z", 350, category="transport", description="Gasoline"),
        make_txn("3", "2024-01-01T00:00:00Z", 25000, TransactionType.INCOME, "salary", "Salary"),
        make_txn("4", "2024-01-10T00:00:00Z", 1500, category="bills", description="Electricity Bill"),
        make_txn("5", "2023-12-20T00:00:00Z", 200, category="entertainment", description="Netflix"),
        make_txn("6", "2023-12-03T15:45:00Z", 1200, category="shopping", description="Uniqlo T-Shirt"),
        make_txn("7", "2023-11-14T12:30:00Z", 500, TransactionType.INCOME, "other_income", "Sold Old Items"),
    ]
