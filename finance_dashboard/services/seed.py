"""Sample transactions for a fresh store."""

import logging

from finance_dashboard.models import TransactionCreate
from finance_dashboard.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

DEMO_TRANSACTIONS = [
    {"type": "expense", "amount": 45, "description": "Iced Coffee (Amazon)",
     "category": "food", "date": "2024-01-15T08:30:00Z"},
    {"type": "expense", "amount": 350, "description": "Gasoline",
     "category": "transport", "date": "2024-01-15T12:00:00Z"},
    {"type": "income", "amount": 25000, "description": "Salary",
     "category": "salary", "date": "2024-01-01T00:00:00Z"},
    {"type": "expense", "amount": 1500, "description": "Electricity Bill",
     "category": "bills", "date": "2024-01-10T00:00:00Z"},
    {"type": "expense", "amount": 200, "description": "Netflix Subscription",
     "category": "entertainment", "date": "2024-01-05T00:00:00Z"},
    {"type": "expense", "amount": 1200, "description": "Uniqlo T-Shirt",
     "category": "shopping", "date": "2024-01-03T15:45:00Z"},
    {"type": "expense", "amount": 80, "description": "Chicken Rice",
     "category": "food", "date": "2024-01-14T12:30:00Z"},
    {"type": "income", "amount": 500, "description": "Sold Old Items",
     "category": "other_income", "date": "2024-01-08T10:00:00Z"},
    {"type": "expense", "amount": 890, "description": "Medicine / Doctor",
     "category": "health", "date": "2024-01-12T10:30:00Z"},
    {"type": "expense", "amount": 65, "description": "Street Food",
     "category": "food", "date": "2024-01-11T18:00:00Z"},
]


def seed_demo_transactions(service: TransactionService) -> int:
    """
    Insert the sample transactions when the store is empty.

    Returns:
        Number of transactions inserted
    """
    if service.count():
        logger.info("Store already has transactions, skipping demo data")
        return 0

    for row in DEMO_TRANSACTIONS:
        service.insert(TransactionCreate(**row))

    logger.info("Seeded %d demo transactions", len(DEMO_TRANSACTIONS))
    return len(DEMO_TRANSACTIONS)
