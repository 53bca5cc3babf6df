"""Pipeline from store snapshots to the rendered dashboard view."""

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Optional

from finance_dashboard.models import DashboardView, FilterState, Transaction
from finance_dashboard.services.analytics_service import AnalyticsService
from finance_dashboard.services.transaction_service import TransactionService

logger = logging.getLogger(__name__)

ViewCallback = Callable[[DashboardView], Any]


class DashboardPipeline:
    """
    Keep the latest snapshot and filter state, and recompute the view.

    A new view is built whenever a snapshot arrives or the filters change,
    and handed to ``on_view`` when one is set.
    """

    def __init__(
        self,
        on_view: Optional[ViewCallback] = None,
        now: Optional[Callable[[], datetime]] = None,
    ):
        # Default services are built on first use
        self._transaction_service: Optional[TransactionService] = None
        self._analytics_service: Optional[AnalyticsService] = None
        self._subscription = None

        self.on_view = on_view
        self._now = now
        self._snapshot: list[Transaction] = []
        self._state = FilterState()
        self._lock = threading.Lock()

    @property
    def transaction_service(self) -> TransactionService:
        """Store the pipeline subscribes to."""
        if self._transaction_service is None:
            self._transaction_service = TransactionService()
        return self._transaction_service

    @transaction_service.setter
    def transaction_service(self, service: TransactionService) -> None:
        self._transaction_service = service

    @property
    def analytics_service(self) -> AnalyticsService:
        if self._analytics_service is None:
            self._analytics_service = AnalyticsService()
        return self._analytics_service

    @analytics_service.setter
    def analytics_service(self, service: AnalyticsService) -> None:
        self._analytics_service = service

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def snapshot(self) -> list[Transaction]:
        return list(self._snapshot)

    # Store subscription

    def start(self) -> None:
        """Subscribe to the store. The first view is built immediately."""
        if self._subscription is None:
            self._subscription = self.transaction_service.subscribe(self.receive)

    def stop(self) -> None:
        """Release the store subscription."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    @property
    def running(self) -> bool:
        return self._subscription is not None

    def __enter__(self) -> "DashboardPipeline":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    # Inputs

    def receive(self, snapshot: list[Transaction]) -> DashboardView:
        """Replace the snapshot with the one pushed by the store."""
        with self._lock:
            self._snapshot = list(snapshot)
        logger.debug("Received snapshot of %d transactions", len(snapshot))
        return self.refresh()

    def apply_filters(self, state: FilterState) -> DashboardView:
        """Replace the filter state."""
        with self._lock:
            self._state = state
        return self.refresh()

    def update_filters(self, **changes: Any) -> DashboardView:
        """Change some selectors and keep the rest."""
        return self.apply_filters(self._state.with_changes(**changes))

    def reset_filters(self) -> DashboardView:
        return self.apply_filters(FilterState())

    # Output

    def refresh(self) -> DashboardView:
        """Build the view from the current snapshot and filters."""
        with self._lock:
            snapshot, state = self._snapshot, self._state

        now = self._now() if self._now else None
        view = self.analytics_service.build_view(snapshot, state, now)
        if self.on_view is not None:
            self.on_view(view)
        return view
