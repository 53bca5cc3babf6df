"""Transaction model for the finance dashboard."""

import math
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import field_validator
from sqlmodel import Field, SQLModel


class TransactionType(str, Enum):
    """Direction of a money movement."""

    INCOME = "income"
    EXPENSE = "expense"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_instant(value: Any) -> Optional[datetime]:
    """
    Parse a stored date into an aware datetime.

    Naive values are taken as UTC. Returns None for anything that cannot be
    parsed instead of raising.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class TransactionBase(SQLModel):
    """Fields shared by stored transactions and insert payloads."""

    type: TransactionType = Field(index=True)
    amount: float
    description: str
    category: str = Field(default="other", index=True)
    # ISO-8601 instant, kept as text the way the document store holds it
    date: str = Field(index=True)


class Transaction(TransactionBase, table=True):
    """A recorded money movement. Immutable once stored."""

    __tablename__ = "transactions"

    # Assigned by the store on insert
    id: Optional[str] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def parsed_date(self) -> Optional[datetime]:
        return parse_instant(self.date)


class TransactionCreate(TransactionBase):
    """Validated insert payload. Has no id; the store assigns one."""

    amount: float = Field(gt=0)
    description: str = Field(min_length=1)
    date: str = Field(default_factory=lambda: utcnow().isoformat())

    @field_validator("amount")
    @classmethod
    def _finite_amount(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("amount must be a finite number")
        return value

    @field_validator("description", mode="before")
    @classmethod
    def _strip_description(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> str:
        parsed = parse_instant(value)
        if parsed is None:
            raise ValueError(f"not an ISO-8601 date: {value!r}")
        return parsed.astimezone(timezone.utc).isoformat()
