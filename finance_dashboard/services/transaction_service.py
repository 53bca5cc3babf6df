"""Service for storing transactions and pushing snapshots to subscribers."""

import logging
import math
import threading
import time
from typing import Any, Callable, Iterable, Optional, TypeVar
from uuid import uuid4

from pydantic import ValidationError
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlmodel import select

from finance_dashboard import database
from finance_dashboard.config import settings
from finance_dashboard.errors import StoreError, TransactionValidationError
from finance_dashboard.models import (
    Transaction,
    TransactionCreate,
    TransactionType,
    categories_for,
)

logger = logging.getLogger(__name__)

Snapshot = list[Transaction]
SnapshotCallback = Callable[[Snapshot], Any]

T = TypeVar("T")


class Subscription:
    """Handle for a snapshot callback. Release it with ``unsubscribe()``."""

    def __init__(self, service: "TransactionService", callback: SnapshotCallback):
        self._service = service
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Stop receiving snapshots. Safe to call more than once."""
        if self.active:
            self.active = False
            self._service._remove(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class TransactionService:
    """Service for managing transactions in the database.

    Every successful mutation is followed by a full snapshot, ordered newest
    first, delivered to each subscriber. Callers never mutate their own copy
    of the list; they wait for the next snapshot.
    """

    def __init__(
        self,
        engine: Optional[Engine] = None,
        retry_attempts: Optional[int] = None,
        retry_delay: Optional[float] = None,
    ):
        self.engine = engine or database.engine
        self.retry_attempts = (
            settings.store_retry_attempts if retry_attempts is None else retry_attempts
        )
        self.retry_delay = (
            settings.store_retry_delay if retry_delay is None else retry_delay
        )
        self._subscribers: list[Subscription] = []
        self._lock = threading.Lock()
        # Held while reading and delivering a snapshot so deliveries stay ordered
        self._publish_lock = threading.RLock()

    def _call(self, operation: str, fn: Callable[[], T]) -> T:
        """Run a store operation, retrying transient failures."""
        attempts = max(1, self.retry_attempts)
        attempt = 1
        while True:
            try:
                return fn()
            except OperationalError as e:
                if attempt >= attempts:
                    logger.exception("%s failed after %d attempt(s)", operation, attempt)
                    raise StoreError(f"{operation} failed: {e}") from e
                logger.warning(
                    "%s failed (attempt %d/%d), retrying: %s",
                    operation,
                    attempt,
                    attempts,
                    e,
                )
                time.sleep(self.retry_delay)
                attempt += 1
            except SQLAlchemyError as e:
                logger.exception("%s failed", operation)
                raise StoreError(f"{operation} failed: {e}") from e

    # Reads

    def snapshot(self) -> Snapshot:
        """Read every transaction, newest first."""

        def read() -> Snapshot:
            with database.get_session(self.engine) as session:
                query = select(Transaction).order_by(
                    Transaction.date.desc(), Transaction.created_at.desc()
                )
                return list(session.exec(query).all())

        return self._call("snapshot", read)

    # Subscriptions

    def subscribe(self, callback: SnapshotCallback) -> Subscription:
        """
        Register a callback for snapshots.

        The callback receives the current snapshot right away and a fresh one
        after every insert or delete.
        """
        subscription = Subscription(self, callback)
        with self._publish_lock:
            with self._lock:
                self._subscribers.append(subscription)
            try:
                current = self.snapshot()
            except StoreError:
                subscription.unsubscribe()
                raise
            self._deliver(subscription, current)
        logger.debug("Subscriber added (%d active)", len(self._subscribers))
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscribers:
                self._subscribers.remove(subscription)
        logger.debug("Subscriber removed (%d active)", len(self._subscribers))

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def _deliver(self, subscription: Subscription, snapshot: Snapshot) -> None:
        if not subscription.active:
            return
        try:
            subscription.callback(list(snapshot))
        except Exception:
            logger.exception("Snapshot subscriber %r raised", subscription.callback)

    def _publish(self) -> None:
        """Push the current snapshot to every subscriber."""
        with self._publish_lock:
            with self._lock:
                subscribers = list(self._subscribers)
            if not subscribers:
                return
            try:
                current = self.snapshot()
            except StoreError:
                # The write itself succeeded; subscribers catch up on the next push
                logger.error("Could not read snapshot after write")
                return
            logger.debug(
                "Publishing %d transactions to %d subscriber(s)",
                len(current),
                len(subscribers),
            )
            for subscription in subscribers:
                self._deliver(subscription, current)

    # Writes

    def build_transaction(
        self,
        transaction_type: Any,
        amount: Any,
        description: Any,
        category: Any,
        date: Optional[Any] = None,
    ) -> TransactionCreate:
        """
        Turn raw form input into an insert payload.

        Raises:
            TransactionValidationError: with a message fit to show the user
        """
        try:
            kind = TransactionType(transaction_type)
        except ValueError:
            raise TransactionValidationError("Choose income or expense") from None

        if isinstance(amount, str):
            amount = amount.strip().replace(",", "")
        try:
            value = float(amount)
        except (TypeError, ValueError):
            raise TransactionValidationError("Amount must be a number") from None
        if not math.isfinite(value):
            raise TransactionValidationError("Amount must be a number")
        if value <= 0:
            raise TransactionValidationError("Amount must be greater than zero")

        text = description.strip() if isinstance(description, str) else ""
        if not text:
            raise TransactionValidationError("Description is required")

        if category not in [c.value for c in categories_for(kind)]:
            raise TransactionValidationError(
                f"Choose a category for this {kind.value}"
            )

        data: dict[str, Any] = {
            "type": kind,
            "amount": value,
            "description": text,
            "category": category,
        }
        if date is not None:
            data["date"] = date

        try:
            return TransactionCreate(**data)
        except ValidationError as e:
            raise TransactionValidationError("Date is not valid") from e

    def insert(self, payload: TransactionCreate) -> str:
        """
        Store a new transaction and return the id assigned to it.

        The record reaches subscribers through the next snapshot.
        """
        transaction_id = uuid4().hex
        data = payload.model_dump()

        def write() -> None:
            with database.get_session(self.engine) as session:
                session.add(Transaction(id=transaction_id, **data))
                session.commit()

        self._call("insert", write)
        logger.info("Inserted transaction %s", transaction_id)
        self._publish()
        return transaction_id

    def delete_by_id(self, transaction_id: str) -> bool:
        """
        Delete a transaction by ID.

        Returns:
            True if deleted, False if not found
        """

        def remove() -> bool:
            with database.get_session(self.engine) as session:
                transaction = session.get(Transaction, transaction_id)
                if not transaction:
                    return False
                session.delete(transaction)
                session.commit()
                return True

        deleted = self._call("delete", remove)
        if deleted:
            logger.info("Deleted transaction %s", transaction_id)
            self._publish()
        return deleted

    def bulk_delete(self, transaction_ids: Iterable[str]) -> int:
        """
        Delete the given transactions in a single commit.

        Either every listed record that still exists is removed or none are.
        Records not in the list, including ones inserted meanwhile, are kept.

        Returns:
            Number of transactions deleted
        """
        ids = list(dict.fromkeys(transaction_ids))
        if not ids:
            return 0

        def remove_all() -> int:
            deleted = 0
            with database.get_session(self.engine) as session:
                for txn_id in ids:
                    transaction = session.get(Transaction, txn_id)
                    if transaction:
                        session.delete(transaction)
                        deleted += 1
                session.commit()
            return deleted

        deleted = self._call("bulk delete", remove_all)
        logger.info("Bulk deleted %d transaction(s)", deleted)
        self._publish()
        return deleted

    def clear_all(self) -> int:
        """Delete every transaction in the current snapshot."""
        return self.bulk_delete(t.id for t in self.snapshot())

    def count(self) -> int:
        return len(self.snapshot())

