"""
Trend analytics over a single metric's time series.

The engine is a pure function of its input series: it sorts by date, classifies
the endpoint rate of change into a direction with a fixed confidence, bands the
series average into a health status and looks up a recommendation. A separate
least-squares fit estimates the metric at arbitrary dates for trend lines.
"""

from collections.abc import Iterable
from datetime import datetime

import structlog

from vitalcore.config import TrendConfig
from vitalcore.domain.models import (
    HealthStatus,
    SeriesPoint,
    SeriesStatistics,
    TrendAnalysis,
    TrendDirection,
    TrendLine,
    VitalMetric,
)
from vitalcore.services.catalog import TestCatalog, default_catalog
from vitalcore.services.health_status import health_status_for
from vitalcore.services.recommendations import (
    insufficient_data_recommendation,
    recommendation_for,
)

logger = structlog.get_logger(__name__)

PointLike = SeriesPoint | tuple[datetime, float]

SECONDS_PER_DAY = 86400.0
DAYS_PER_YEAR = 365.0


def to_series(points: Iterable[PointLike]) -> list[SeriesPoint]:
    """Normalize points to SeriesPoints sorted ascending by date."""
    series = [
        point if isinstance(point, SeriesPoint) else SeriesPoint(date=point[0], value=point[1])
        for point in points
    ]
    return sorted(series, key=lambda point: point.date)


def _days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def fit_trend_line(points: Iterable[PointLike]) -> TrendLine:
    """
    Ordinary least squares over (days since first point, value).

    A single point, or points that all share one date, give a degenerate line
    whose value is the series mean everywhere.

    Raises:
        ValueError: if the series is empty.
    """
    series = to_series(points)
    if not series:
        raise ValueError("cannot fit a trend line to an empty series")

    origin = series[0].date
    xs = [_days_between(origin, point.date) for point in series]
    ys = [point.value for point in series]
    n = len(series)
    mean = sum(ys) / n

    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys, strict=True))
    sum_xx = sum(x * x for x in xs)
    denominator = n * sum_xx - sum_x * sum_x

    if n < 2 or denominator <= 0:
        logger.debug("trend_line_degenerate", points=n)
        return TrendLine(origin=origin, slope_per_day=0.0, intercept=mean, mean=mean, degenerate=True)

    slope = (n * sum_xy - sum_x * sum_y) / denominator
    intercept = (sum_y - slope * sum_x) / n
    return TrendLine(origin=origin, slope_per_day=slope, intercept=intercept, mean=mean)


def summarize(points: Iterable[PointLike]) -> SeriesStatistics:
    """Descriptive statistics; change per year needs three points over a non-zero span."""
    series = to_series(points)
    if not series:
        return SeriesStatistics(count=0)

    values = [point.value for point in series]
    first, last = series[0], series[-1]
    span_days = _days_between(first.date, last.date)

    change_per_year = None
    if len(series) >= 3 and span_days > 0:
        change_per_year = (last.value - first.value) / (span_days / DAYS_PER_YEAR)

    return SeriesStatistics(
        count=len(series),
        average=sum(values) / len(values),
        minimum=min(values),
        maximum=max(values),
        first_date=first.date,
        last_date=last.date,
        span_days=span_days,
        change_per_year=change_per_year,
    )


class TrendAnalyzer:
    """
    Direction, confidence, health status and recommendation for one metric.

    Metric identifiers may be VitalMetric values, canonical catalog ids or any
    catalog alias; aliases are resolved to the canonical id before lookups.
    """

    def __init__(self, config: TrendConfig | None = None, catalog: TestCatalog | None = None) -> None:
        self.config = config or TrendConfig()
        self.catalog = catalog or default_catalog()

    def metric_key(self, metric: str | VitalMetric) -> str:
        if isinstance(metric, VitalMetric):
            return metric.value
        candidate = metric.strip()
        if candidate.upper() in VitalMetric.__members__:
            return candidate.upper()
        entry = self.catalog.resolve(candidate)
        return entry.id if entry else candidate

    def classify_rate(self, rate: float) -> tuple[TrendDirection, float]:
        """Map a fractional change to a direction and its confidence."""
        cfg = self.config
        if abs(rate) < cfg.stable_threshold:
            return TrendDirection.STABLE, cfg.stable_confidence
        if rate > cfg.change_threshold:
            return TrendDirection.INCREASING, cfg.directional_confidence
        if rate < -cfg.change_threshold:
            return TrendDirection.DECREASING, cfg.directional_confidence
        return TrendDirection.FLUCTUATING, cfg.fluctuating_confidence

    def analyze(self, metric: str | VitalMetric, points: Iterable[PointLike]) -> TrendAnalysis:
        key = self.metric_key(metric)
        series = to_series(points)
        values = [point.value for point in series]
        average = sum(values) / len(values) if values else None
        health = self._health_status(key, average)

        if len(series) < self.config.min_points:
            logger.debug("trend_insufficient_data", metric=key, points=len(series))
            return TrendAnalysis(
                metric=key,
                direction=TrendDirection.STABLE,
                rate_of_change=0.0,
                confidence=0.0,
                health_status=health,
                recommendation=insufficient_data_recommendation(self.config.min_points),
                sample_size=len(series),
                average=average,
                insufficient_data=True,
            )

        first, last = values[0], values[-1]
        delta = last - first

        if first != 0:
            rate = delta / abs(first)
            direction, confidence = self.classify_rate(rate)
        else:
            # No baseline to divide by: direction follows the sign of the change.
            scale = sum(abs(v) for v in values) / len(values)
            rate = delta / scale if scale else 0.0
            if delta > 0:
                direction, confidence = TrendDirection.INCREASING, self.config.directional_confidence
            elif delta < 0:
                direction, confidence = TrendDirection.DECREASING, self.config.directional_confidence
            else:
                direction, confidence = TrendDirection.STABLE, self.config.stable_confidence
            confidence *= self.config.zero_baseline_confidence_factor

        analysis = TrendAnalysis(
            metric=key,
            direction=direction,
            rate_of_change=rate,
            confidence=confidence,
            health_status=health,
            recommendation=recommendation_for(key, direction),
            sample_size=len(series),
            average=average,
        )
        logger.debug(
            "trend_analyzed",
            metric=key,
            direction=direction.value,
            rate_of_change=round(rate, 4),
            confidence=confidence,
            health_status=health.value,
        )
        return analysis

    def fit_trend_line(self, points: Iterable[PointLike]) -> TrendLine:
        return fit_trend_line(points)

    def summarize(self, points: Iterable[PointLike]) -> SeriesStatistics:
        return summarize(points)

    def _health_status(self, key: str, average: float | None) -> HealthStatus:
        if average is None:
            return HealthStatus.FAIR
        entry = self.catalog.get(key)
        reference = entry.reference_range if entry else None
        return health_status_for(key, average, reference)
