"""Service for narrowing a transaction snapshot to the active filters."""

import calendar
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Iterable, Optional

from finance_dashboard.config import settings
from finance_dashboard.models import ALL, FilterState, TimeWindow, Transaction

# Sort key for entries without a usable date; they go after every dated entry
_UNDATED = datetime.min.replace(tzinfo=timezone.utc)


def _months_back(moment: datetime, months: int) -> datetime:
    """Shift a datetime back by calendar months, clamping the day."""
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


class FilterService:
    """Service for filtering and ordering transactions."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz or settings.tzinfo

    def now(self) -> datetime:
        return datetime.now(self.tz)

    def time_range(
        self, window: TimeWindow, now: Optional[datetime] = None
    ) -> Optional[tuple[datetime, datetime]]:
        """
        Resolve a window selector to an inclusive (start, end) range.

        Returns None for ``all``.
        """
        window = TimeWindow(window)
        if now is None:
            now = self.now()
        elif now.tzinfo is None:
            now = now.replace(tzinfo=self.tz)
        else:
            now = now.astimezone(self.tz)

        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        if window is TimeWindow.ALL:
            return None
        if window is TimeWindow.LAST_7_DAYS:
            return now - timedelta(days=7), now
        if window is TimeWindow.LAST_30_DAYS:
            return now - timedelta(days=30), now
        if window is TimeWindow.LAST_3_MONTHS:
            return _months_back(now, 3), now
        if window is TimeWindow.THIS_MONTH:
            return start_of_day.replace(day=1), now
        if window is TimeWindow.LAST_MONTH:
            start = _months_back(start_of_day.replace(day=1), 1)
            last_day = calendar.monthrange(start.year, start.month)[1]
            end = start.replace(
                day=last_day, hour=23, minute=59, second=59, microsecond=999999
            )
            return start, end
        if window is TimeWindow.THIS_YEAR:
            return start_of_day.replace(month=1, day=1), now
        raise ValueError(f"Unsupported time window: {window!r}")

    # Predicates

    @staticmethod
    def matches_window(
        transaction: Transaction, bounds: Optional[tuple[datetime, datetime]]
    ) -> bool:
        if bounds is None:
            return True
        moment = transaction.parsed_date
        if moment is None:
            return False
        start, end = bounds
        return start <= moment <= end

    @staticmethod
    def matches_category(transaction: Transaction, category: str) -> bool:
        return category == ALL or transaction.category == category

    @staticmethod
    def matches_type(transaction: Transaction, transaction_type: str) -> bool:
        return transaction_type == ALL or transaction.type == transaction_type

    @staticmethod
    def matches_query(transaction: Transaction, query: str) -> bool:
        if not query:
            return True
        return query.casefold() in (transaction.description or "").casefold()

    def filter_transactions(
        self,
        transactions: Iterable[Transaction],
        state: Optional[FilterState] = None,
        now: Optional[datetime] = None,
    ) -> list[Transaction]:
        """
        Apply every active filter and order the result newest first.

        The sort is stable, so entries with equal dates keep their input order.
        Entries whose date cannot be parsed are dropped by any time window and
        otherwise listed last.
        """
        state = state or FilterState()
        bounds = self.time_range(state.window, now)

        matched = [
            t
            for t in transactions
            if self.matches_window(t, bounds)
            and self.matches_category(t, state.category)
            and self.matches_type(t, state.type)
            and self.matches_query(t, state.query)
        ]
        return sort_newest_first(matched)


def sort_newest_first(transactions: Iterable[Transaction]) -> list[Transaction]:
    """Stable sort by date descending; undated entries last."""
    return sorted(
        transactions,
        key=lambda t: t.parsed_date or _UNDATED,
        reverse=True,
    )
