import pytest
from sqlalchemy.exc import OperationalError

from finance_dashboard import database
from finance_dashboard.errors import StoreError, TransactionValidationError
from finance_dashboard.models import TransactionCreate, TransactionType
from finance_dashboard.services import TransactionService


def payload(description="Coffee", amount=45, date="2024-01-15T08:30:00Z", **kwargs):
    data = {
        "type": TransactionType.EXPENSE,
        "amount": amount,
        "description": description,
        "category": "food",
        "date": date,
    }
    data.update(kwargs)
    return TransactionCreate(**data)


class Recorder:
    def __init__(self):
        self.snapshots = []

    def __call__(self, snapshot):
        self.snapshots.append(snapshot)

    @property
    def last_ids(self):
        return [t.id for t in self.snapshots[-1]]


class TestSubscribe:
    def test_initial_snapshot_delivered(self, service):
        service.insert(payload())
        recorder = Recorder()

        with service.subscribe(recorder):
            assert len(recorder.snapshots) == 1
            assert [t.description for t in recorder.snapshots[0]] == ["Coffee"]

    def test_insert_pushes_new_snapshot(self, service):
        recorder = Recorder()
        service.subscribe(recorder)

        new_id = service.insert(payload())

        assert len(recorder.snapshots) == 2
        assert recorder.last_ids == [new_id]
        assert recorder.snapshots[-1][0].type == TransactionType.EXPENSE

    def test_snapshot_ordered_newest_first(self, service):
        old = service.insert(payload("old", date="2024-01-01T00:00:00Z"))
        new = service.insert(payload("new", date="2024-01-15T00:00:00Z"))
        middle = service.insert(payload("middle", date="2024-01-08T00:00:00Z"))

        assert [t.id for t in service.snapshot()] == [new, middle, old]

    def test_unsubscribe_stops_delivery(self, service):
        recorder = Recorder()
        subscription = service.subscribe(recorder)
        subscription.unsubscribe()
        subscription.unsubscribe()

        service.insert(payload())

        assert len(recorder.snapshots) == 1
        assert service.subscriber_count == 0

    def test_context_manager_releases_subscription(self, service):
        with service.subscribe(Recorder()):
            assert service.subscriber_count == 1
        assert service.subscriber_count == 0

    def test_failing_subscriber_does_not_block_others(self, service):
        def broken(snapshot):
            raise RuntimeError("boom")

        recorder = Recorder()
        service.subscribe(broken)
        service.subscribe(recorder)

        service.insert(payload())

        assert len(recorder.snapshots) == 2


class TestDelete:
    def test_delete_by_id(self, service):
        recorder = Recorder()
        keep = service.insert(payload("keep"))
        drop = service.insert(payload("drop"))
        service.subscribe(recorder)

        assert service.delete_by_id(drop) is True
        assert recorder.last_ids == [keep]
        assert service.delete_by_id(drop) is False

    def test_bulk_delete_then_fresh_subscription_is_empty(self, service):
        for i in range(3):
            service.insert(payload(f"item {i}"))

        deleted = service.bulk_delete(t.id for t in service.snapshot())

        recorder = Recorder()
        service.subscribe(recorder)
        assert deleted == 3
        assert recorder.snapshots == [[]]

    def test_bulk_delete_keeps_records_outside_the_list(self, service):
        first = service.insert(payload("first"))
        enumerated = [t.id for t in service.snapshot()]
        later = service.insert(payload("later"))

        assert service.bulk_delete(enumerated) == 1
        assert [t.id for t in service.snapshot()] == [later]
        assert first not in [t.id for t in service.snapshot()]

    def test_bulk_delete_ignores_missing_ids(self, service):
        kept = service.insert(payload())
        assert service.bulk_delete(["missing", "missing"]) == 0
        assert service.bulk_delete([]) == 0
        assert [t.id for t in service.snapshot()] == [kept]

    def test_clear_all(self, service):
        service.insert(payload("a"))
        service.insert(payload("b"))
        assert service.clear_all() == 2
        assert service.count() == 0


class TestRetry:
    def _flaky_sessions(self, monkeypatch, failures):
        real_get_session = database.get_session
        calls = {"n": 0}

        def get_session(bind=database.engine):
            calls["n"] += 1
            if calls["n"] <= failures:
                raise OperationalError("SELECT", {}, Exception("database is locked"))
            return real_get_session(bind)

        monkeypatch.setattr(database, "get_session", get_session)
        return calls

    def test_transient_failure_is_retried_once(self, service, monkeypatch):
        calls = self._flaky_sessions(monkeypatch, failures=1)
        assert service.snapshot() == []
        assert calls["n"] == 2

    def test_exhausted_retries_raise_store_error(self, service, monkeypatch):
        calls = self._flaky_sessions(monkeypatch, failures=5)
        with pytest.raises(StoreError):
            service.insert(payload())
        assert calls["n"] == 2

    def test_no_retry_when_disabled(self, engine, monkeypatch):
        service = TransactionService(engine, retry_attempts=1, retry_delay=0)
        calls = self._flaky_sessions(monkeypatch, failures=1)
        with pytest.raises(StoreError):
            service.snapshot()
        assert calls["n"] == 1

    def test_failed_subscribe_is_not_registered(self, service, monkeypatch):
        self._flaky_sessions(monkeypatch, failures=5)
        with pytest.raises(StoreError):
            service.subscribe(Recorder())
        assert service.subscriber_count == 0


class TestBuildTransaction:
    def test_valid_input(self, service):
        created = service.build_transaction("expense", " 1,200 ", "  Uniqlo  ", "shopping")
        assert created.amount == 1200.0
        assert created.description == "Uniqlo"
        assert created.type == TransactionType.EXPENSE

    def test_date_is_optional(self, service):
        created = service.build_transaction("income", 100, "Gift", "other_income")
        assert created.date

    @pytest.mark.parametrize(
        "amount, message",
        [
            ("abc", "Amount must be a number"),
            ("", "Amount must be a number"),
            (None, "Amount must be a number"),
            ("nan", "Amount must be a number"),
            ("0", "Amount must be greater than zero"),
            (-5, "Amount must be greater than zero"),
        ],
    )
    def test_bad_amount(self, service, amount, message):
        with pytest.raises(TransactionValidationError, match=message):
            service.build_transaction("expense", amount, "Coffee", "food")

    def test_empty_description(self, service):
        with pytest.raises(TransactionValidationError, match="Description is required"):
            service.build_transaction("expense", 10, "   ", "food")

    def test_unknown_type(self, service):
        with pytest.raises(TransactionValidationError):
            service.build_transaction("transfer", 10, "Coffee", "food")

    def test_category_must_fit_type(self, service):
        with pytest.raises(TransactionValidationError, match="expense"):
            service.build_transaction("expense", 10, "Coffee", "salary")
        with pytest.raises(TransactionValidationError, match="income"):
            service.build_transaction("income", 10, "Bonus", "food")

    def test_bad_date(self, service):
        with pytest.raises(TransactionValidationError, match="Date"):
            service.build_transaction("expense", 10, "Coffee", "food", date="soon")

    def test_validation_error_is_a_value_error(self, service):
        with pytest.raises(ValueError):
            service.build_transaction("expense", "x", "Coffee", "food")
