"""Filter selections for the dashboard view."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict

ALL = "all"


class TimeWindow(str, Enum):
    """Named date-range selectors."""

    LAST_7_DAYS = "7d"
    LAST_30_DAYS = "30d"
    LAST_3_MONTHS = "3m"
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    THIS_YEAR = "year"
    ALL = "all"


TIME_WINDOW_LABELS = {
    TimeWindow.LAST_7_DAYS: "Last 7 days",
    TimeWindow.LAST_30_DAYS: "Last 30 days",
    TimeWindow.LAST_3_MONTHS: "Last 3 months",
    TimeWindow.THIS_MONTH: "This month",
    TimeWindow.LAST_MONTH: "Last month",
    TimeWindow.THIS_YEAR: "This year",
    TimeWindow.ALL: "All time",
}


class FilterState(BaseModel):
    """Immutable set of active filters. ``all`` disables a selector."""

    model_config = ConfigDict(frozen=True)

    window: TimeWindow = TimeWindow.ALL
    category: str = ALL
    type: str = ALL
    query: str = ""

    def with_changes(self, **changes: Any) -> "FilterState":
        """Return a copy with the given selectors replaced."""
        return self.model_validate({**self.model_dump(), **changes})

    @property
    def is_default(self) -> bool:
        return self == FilterState()
