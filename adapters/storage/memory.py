"""
In-memory BloodTestStore.

Used by the demo and the test suite. Writes are serialized with an asyncio lock
so each BloodTest is stored as a single unit; saving an existing id replaces the
previous record.
"""

import asyncio
from datetime import datetime

import structlog

from vitalcore.domain.errors import StoreError
from vitalcore.domain.models import BloodTest, SeriesPoint, as_utc
from vitalcore.services.records import Result

logger = structlog.get_logger(__name__)


class InMemoryBloodTestStore:
    """Dict-backed store keyed by BloodTest id."""

    def __init__(self) -> None:
        self._records: dict[str, BloodTest] = {}
        self._lock = asyncio.Lock()
        self.logger = logger.bind(store="memory")

    async def save(self, blood_test: BloodTest) -> Result[BloodTest, StoreError]:
        async with self._lock:
            replaced = str(blood_test.id) in self._records
            self._records[str(blood_test.id)] = blood_test
        self.logger.debug(
            "blood_test_saved",
            blood_test_id=str(blood_test.id),
            test_type=blood_test.test_type,
            replaced=replaced,
        )
        return Result.ok(blood_test)

    async def fetch_all(self) -> Result[list[BloodTest], StoreError]:
        async with self._lock:
            records = list(self._records.values())
        return Result.ok(sorted(records, key=lambda bt: bt.date))

    async def fetch_by_metric(
        self, canonical_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> Result[list[SeriesPoint], StoreError]:
        """Non-null values of matching results inside an inclusive date window."""
        lower = as_utc(start) if start else None
        upper = as_utc(end) if end else None

        async with self._lock:
            records = list(self._records.values())

        points = [
            SeriesPoint(date=bt.date, value=result.value)
            for bt in records
            if (lower is None or bt.date >= lower) and (upper is None or bt.date <= upper)
            for result in bt.results
            if result.value is not None and canonical_id in (result.canonical_id, result.name)
        ]
        return Result.ok(sorted(points, key=lambda point: point.date))

    def __len__(self) -> int:
        return len(self._records)
