"""
Record service: wires the pure core around a persistence collaborator.

Key patterns:
- Protocol-based store injection
- Generic Result type for expected failures
- Caller-side timeouts around every store call, no retries
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from datetime import datetime
from typing import Any, Generic, Protocol, TypeVar

import structlog

from vitalcore.config import AppConfig, get_config
from vitalcore.domain.errors import LabImportError, PartialImportError, StoreError
from vitalcore.domain.models import BloodTest, SeriesPoint, SeriesStatistics, TrendAnalysis
from vitalcore.services.lab_import import LabReportImporter
from vitalcore.services.trends import TrendAnalyzer

logger = structlog.get_logger(__name__)

ValueT = TypeVar("ValueT")
MappedT = TypeVar("MappedT")
ErrorT = TypeVar("ErrorT", bound=BaseException)


class Result(Generic[ValueT, ErrorT]):
    """
    Outcome of a store-backed operation: a value, or the error that prevented it.

    Exactly one side is set. An empty list is a valid value.
    """

    __slots__ = ("_value", "_error")

    def __init__(self, value: ValueT | None = None, error: ErrorT | None = None) -> None:
        if value is not None and error is not None:
            raise ValueError("Result cannot have both value and error")
        if value is None and error is None:
            raise ValueError("Result must have either value or error")
        self._value = value
        self._error = error

    @classmethod
    def ok(cls, value: ValueT) -> "Result[ValueT, ErrorT]":
        return cls(value=value)

    @classmethod
    def err(cls, error: ErrorT) -> "Result[ValueT, ErrorT]":
        return cls(error=error)

    def is_ok(self) -> bool:
        return self._error is None

    def is_err(self) -> bool:
        return self._error is not None

    def unwrap(self) -> ValueT:
        """Return the value, raising the stored error if there is one."""
        if self._error is not None:
            raise self._error
        return self._value  # type: ignore[return-value]

    def unwrap_err(self) -> ErrorT:
        if self._error is None:
            raise ValueError("Called unwrap_err() on an Ok value")
        return self._error

    def map(self, transform: Callable[[ValueT], MappedT]) -> "Result[MappedT, ErrorT]":
        """Apply ``transform`` to the value; an error passes through untouched."""
        if self._error is not None:
            return Result(error=self._error)
        return Result(value=transform(self._value))  # type: ignore[arg-type]

    def __repr__(self) -> str:
        if self._error is not None:
            return f"Result.err({self._error!r})"
        return f"Result.ok({self._value!r})"




class BloodTestStore(Protocol):
    """
    Persistence contract for blood tests.

    Each saved BloodTest is one atomic unit; saving an existing id replaces it.
    """

    async def save(self, blood_test: BloodTest) -> Result[BloodTest, StoreError]: ...

    async def fetch_all(self) -> Result[list[BloodTest], StoreError]: ...

    async def fetch_by_metric(
        self, canonical_id: str, start: datetime | None = None, end: datetime | None = None
    ) -> Result[list[SeriesPoint], StoreError]: ...


class HealthRecordService:
    """
    Imports reports into a store and analyzes stored series.

    Design principles:
    - Import is all-or-nothing at the parse step; panels are then saved one by one
    - Store failures and timeouts surface as StoreError results
    - The analyzer and importer stay pure; only this class touches the store
    """

    def __init__(
        self,
        store: BloodTestStore,
        importer: LabReportImporter | None = None,
        analyzer: TrendAnalyzer | None = None,
        config: AppConfig | None = None,
    ) -> None:
        self.config = config or get_config()
        self.store = store
        self.importer = importer or LabReportImporter(config=self.config.imports)
        self.analyzer = analyzer or TrendAnalyzer(config=self.config.trends)
        self.timeout_seconds = self.config.storage.operation_timeout_seconds
        self.logger = logger.bind(component="health_record_service")

    async def _call_store(
        self, operation: str, call: Awaitable[Result[Any, StoreError]]
    ) -> Result[Any, StoreError]:
        try:
            return await asyncio.wait_for(call, timeout=self.timeout_seconds)
        except TimeoutError:
            self.logger.warning(
                "store_operation_timeout", operation=operation, timeout_seconds=self.timeout_seconds
            )
            return Result.err(
                StoreError(f"Store {operation} timed out after {self.timeout_seconds}s")
            )
        except Exception as e:
            self.logger.exception("store_operation_failed", operation=operation, error=str(e))
            return Result.err(StoreError(f"Store {operation} failed: {e}"))

    async def import_report(
        self, payload: str | bytes | Mapping[str, Any], keep_empty: bool = False
    ) -> Result[list[BloodTest], LabImportError | StoreError]:
        """
        Import a report and save each resulting BloodTest.

        Parsing is all-or-nothing, but saving is per panel. When a save fails
        after earlier panels were stored, the error is a PartialImportError that
        lists the ids already saved; those records are left in place.
        """
        try:
            blood_tests = self.importer.import_report(payload)
        except LabImportError as e:
            self.logger.warning("report_import_failed", error=str(e))
            return Result.err(e)

        if not keep_empty:
            discarded = [bt for bt in blood_tests if not bt.results]
            if discarded:
                self.logger.info(
                    "empty_panels_discarded", panels=[bt.test_type for bt in discarded]
                )
            blood_tests = [bt for bt in blood_tests if bt.results]

        saved: list[BloodTest] = []
        for blood_test in blood_tests:
            result = await self._call_store("save", self.store.save(blood_test))
            if result.is_err():
                return Result.err(self._save_failure(result.unwrap_err(), saved, len(blood_tests)))
            saved.append(result.unwrap())

        self.logger.info("report_saved", blood_tests=len(saved))
        return Result.ok(saved)

    def _save_failure(self, error: StoreError, saved: list[BloodTest], total: int) -> StoreError:
        if not saved:
            return error
        saved_ids = [str(bt.id) for bt in saved]
        self.logger.error(
            "report_partially_saved", saved=len(saved), total=total, saved_ids=saved_ids
        )
        return PartialImportError(
            f"Saved {len(saved)} of {total} panels before failing: {error}", saved_ids, error
        )

    async def _fetch_series(
        self, metric: str, start: datetime | None, end: datetime | None
    ) -> tuple[str, Result[list[SeriesPoint], StoreError]]:
        key = self.analyzer.metric_key(metric)
        return key, await self._call_store(
            "fetch_by_metric", self.store.fetch_by_metric(key, start, end)
        )

    async def analyze_metric(
        self, metric: str, start: datetime | None = None, end: datetime | None = None
    ) -> Result[TrendAnalysis, StoreError]:
        """Fetch a metric series from the store and analyze its trend."""
        key, series = await self._fetch_series(metric, start, end)
        return series.map(lambda points: self.analyzer.analyze(key, points))

    async def summarize_metric(
        self, metric: str, start: datetime | None = None, end: datetime | None = None
    ) -> Result[SeriesStatistics, StoreError]:
        """Fetch a metric series from the store and describe it."""
        _, series = await self._fetch_series(metric, start, end)
        return series.map(self.analyzer.summarize)
