"""Display helpers for amounts and dates."""

import math
from datetime import tzinfo
from typing import Any, Optional

from finance_dashboard.config import settings
from finance_dashboard.models import Transaction, TransactionType, parse_instant


def format_currency(amount: float, currency: Optional[str] = None) -> str:
    """Format an amount in whole currency units, e.g. ``THB 1,500``.

    The fraction is truncated, never rounded up.
    """
    code = currency or settings.currency
    sign = "-" if amount < 0 else ""
    return f"{sign}{code} {math.floor(abs(amount)):,}"


def format_signed(transaction: Transaction, currency: Optional[str] = None) -> str:
    """Amount with ``+`` for income and ``-`` for expense."""
    sign = "+" if transaction.type == TransactionType.INCOME else "-"
    return f"{sign}{format_currency(transaction.amount, currency)}"


def format_date(value: Any, tz: Optional[tzinfo] = None) -> str:
    """Format a stored date like ``15 Jan 24, 08:30``."""
    moment = parse_instant(value)
    if moment is None:
        return "Unknown date"
    moment = moment.astimezone(tz or settings.tzinfo)
    return f"{moment.day} {moment:%b %y, %H:%M}"
