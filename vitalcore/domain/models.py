"""
Domain models for lab results and trend analysis.

These models represent the core business concepts and are framework-agnostic.
They use Pydantic for validation; entities that must never change after
creation are frozen.
"""

from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so series from different sources compare cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class TestCategory(str, Enum):
    """Panel a canonical test belongs to."""

    __test__ = False

    CBC = "CBC"
    CMP = "CMP"
    LIPID = "Lipid"
    THYROID = "Thyroid"
    DIABETES = "Diabetes"
    GENERAL = "General"


class TestStatus(str, Enum):
    """Classification of a measured value against its reference range."""

    __test__ = False

    NORMAL = "normal"
    HIGH = "high"
    LOW = "low"
    UNKNOWN = "unknown"


class TrendDirection(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"
    FLUCTUATING = "fluctuating"


class HealthStatus(str, Enum):
    """Absolute health band of a series average, independent of its direction."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
    CRITICAL = "critical"


class VitalMetric(str, Enum):
    """Vital signs that can be trended alongside catalog lab tests."""

    HEART_RATE = "HEART_RATE"
    BLOOD_PRESSURE_SYSTOLIC = "BLOOD_PRESSURE_SYSTOLIC"
    BLOOD_PRESSURE_DIASTOLIC = "BLOOD_PRESSURE_DIASTOLIC"
    OXYGEN_SATURATION = "OXYGEN_SATURATION"
    BODY_TEMPERATURE = "BODY_TEMPERATURE"
    RESPIRATORY_RATE = "RESPIRATORY_RATE"
    HEART_RATE_VARIABILITY = "HEART_RATE_VARIABILITY"


class ReferenceRange(BaseModel):
    """Numeric interval considered normal. Either bound may be open."""

    model_config = ConfigDict(frozen=True)

    low: float | None = None
    high: float | None = None
    unit: str = ""

    @model_validator(mode="after")
    def check_bounds(self) -> "ReferenceRange":
        if self.low is None and self.high is None:
            raise ValueError("reference range needs at least one bound")
        if self.low is not None and self.high is not None and self.low > self.high:
            raise ValueError(f"low bound {self.low} exceeds high bound {self.high}")
        return self

    @property
    def bounds(self) -> tuple[float | None, float | None]:
        return (self.low, self.high)


class CanonicalTest(BaseModel):
    """Immutable catalog entry: the single normalized identity of a lab test."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    display_name: str
    category: TestCategory
    unit: str = ""
    reference_range: ReferenceRange | None = None
    aliases: frozenset[str] = Field(default_factory=frozenset)
    description: str = ""


class TestResult(BaseModel):
    """One measured value belonging to one panel draw."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Canonical id when resolved, otherwise the raw source name")
    display_name: str = ""
    canonical_id: str | None = None
    value: float | None = Field(default=None, allow_inf_nan=False)
    unit: str = ""
    reference_range_text: str = ""
    category: TestCategory = TestCategory.GENERAL
    source_flag: str | None = Field(
        default=None, description="Flag supplied by the lab; informational only"
    )
    explanation: str = ""

    @computed_field  # type: ignore[prop-decorator]
    @property
    def status(self) -> TestStatus:
        # Local import: the parser module depends on this one.
        from vitalcore.services.reference_range import classify_text

        return classify_text(self.value, self.reference_range_text)


class BloodTest(BaseModel):
    """A lab-test instance (one panel draw) with its results."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    date: datetime
    test_type: str
    results: list[TestResult] = Field(default_factory=list)
    interpretation: str | None = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class SeriesPoint(BaseModel):
    """A single dated observation of one metric."""

    model_config = ConfigDict(frozen=True)

    date: datetime
    value: float = Field(allow_inf_nan=False)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return as_utc(v)


class TrendAnalysis(BaseModel):
    """Trend summary for one metric; recomputed on every request."""

    model_config = ConfigDict(frozen=True)

    metric: str
    direction: TrendDirection
    rate_of_change: float
    confidence: float = Field(ge=0.0, le=1.0)
    health_status: HealthStatus
    recommendation: str
    sample_size: int = Field(ge=0)
    average: float | None = None
    insufficient_data: bool = False


class TrendLine(BaseModel):
    """Least-squares line over (days since first point, value)."""

    model_config = ConfigDict(frozen=True)

    origin: datetime
    slope_per_day: float
    intercept: float
    mean: float
    degenerate: bool = False

    def value_at(self, when: datetime) -> float:
        """Estimate the metric at an arbitrary date."""
        if self.degenerate:
            return self.mean
        days = (as_utc(when) - self.origin).total_seconds() / 86400.0
        return self.slope_per_day * days + self.intercept

    @property
    def slope_per_year(self) -> float:
        return 0.0 if self.degenerate else self.slope_per_day * 365.0


class SeriesStatistics(BaseModel):
    """Descriptive statistics for a metric series."""

    model_config = ConfigDict(frozen=True)

    count: int = Field(ge=0)
    average: float | None = None
    minimum: float | None = None
    maximum: float | None = None
    first_date: datetime | None = None
    last_date: datetime | None = None
    span_days: float = Field(default=0.0, ge=0.0)
    change_per_year: float | None = Field(
        default=None, description="Endpoint change divided by the span in years"
    )
