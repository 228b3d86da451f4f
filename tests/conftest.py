"""
Shared fixtures.

No test touches real user data: storage is in memory or under tmp_path,
the clock is frozen, and sharing goes to a recording fake.
"""

from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from pocket_ledger.config import ExportSettings
from pocket_ledger.models.transaction import Transaction, TransactionType
from pocket_ledger.services.clock import FixedClock
from pocket_ledger.services.sharing import ShareSinkInterface
from pocket_ledger.services.storage import InMemoryKeyValueStorage, TransactionStore


STORAGE_KEY = "expenses_data"


class RecordingShareSink(ShareSinkInterface):
    """Sharing sink that remembers what it was given."""

    def __init__(self, available: bool = True, error: Exception = None):
        self.available = available
        self.error = error
        self.shared: list[Path] = []
        self.payloads: list[bytes] = []

    async def is_available(self) -> bool:
        return self.available

    async def share(self, path: Path) -> None:
        if self.error is not None:
            raise self.error
        self.shared.append(path)
        self.payloads.append(Path(path).read_bytes())


class FailingStorage(InMemoryKeyValueStorage):
    """In-memory storage whose reads and/or writes blow up."""

    def __init__(self, initial=None, fail_reads=False, fail_writes=False):
        super().__init__(initial)
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    async def get(self, key):
        if self.fail_reads:
            raise OSError("disk unreadable")
        return await super().get(key)

    async def set(self, key, value):
        if self.fail_writes:
            raise OSError("disk full")
        await super().set(key, value)

    async def remove(self, key):
        if self.fail_writes:
            raise OSError("disk full")
        await super().remove(key)


def make_transaction(
    id: str,
    amount="10",
    type: TransactionType = TransactionType.EXPENSE,
    category: str = "Food",
    counterparty: str = "Friends",
    place: str = "",
    occurred_at: datetime = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc),
) -> Transaction:
    return Transaction(
        id=id,
        type=type,
        amount=Decimal(str(amount)),
        category=category,
        counterparty=counterparty,
        place=place,
        occurred_at=occurred_at,
    )


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> FixedClock:
    """Saturday 15 June 2024, noon UTC."""
    return FixedClock(utc(2024, 6, 15, 12, 0))


@pytest.fixture
def storage() -> InMemoryKeyValueStorage:
    return InMemoryKeyValueStorage()


@pytest.fixture
def store(storage) -> TransactionStore:
    return TransactionStore(storage, key=STORAGE_KEY)


@pytest.fixture
def sink() -> RecordingShareSink:
    return RecordingShareSink()


@pytest.fixture
def export_settings(tmp_path) -> ExportSettings:
    return ExportSettings(
        cache_dir=tmp_path / "cache",
        share_dir=tmp_path / "shared",
    )


@pytest.fixture
def scenario_records() -> list[Transaction]:
    """Two food expenses and one salary payment in January 2024."""
    return [
        make_transaction("1", amount=100, category="Food", occurred_at=utc(2024, 1, 5, 9, 0)),
        make_transaction("2", amount=50, category="Food", occurred_at=utc(2024, 1, 10, 9, 0)),
        make_transaction(
            "3",
            amount=20,
            type=TransactionType.INCOME,
            category="Job",
            occurred_at=utc(2024, 1, 15, 9, 0),
        ),
    ]


class RecordingLogger:
    """Stands in for a structlog logger and keeps every call."""

    def __init__(self):
        self.calls: list[tuple[str, str, dict]] = []

    def _record(self, level):
        def log(event, **kwargs):
            self.calls.append((level, event, kwargs))
        return log

    def __getattr__(self, level):
        return self._record(level)

    def event_types(self) -> list[str]:
        return [kwargs["event_type"] for _, _, kwargs in self.calls]


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()
