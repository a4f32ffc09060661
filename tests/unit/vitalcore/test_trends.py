"""
Tests for the trend analytics engine.

Testing philosophy:
- Pin the direction/confidence policy with the documented examples
- Property-based tests for ordering and regression invariants
"""

from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vitalcore.config import TrendConfig
from vitalcore.domain.models import HealthStatus, SeriesPoint, TrendDirection, VitalMetric
from vitalcore.services.recommendations import GENERIC_RECOMMENDATION
from vitalcore.services.trends import TrendAnalyzer, fit_trend_line, summarize, to_series

D0 = datetime(2025, 1, 1, tzinfo=UTC)


def _series(*values: float, step_days: int = 30) -> list[tuple[datetime, float]]:
    return [(D0 + timedelta(days=i * step_days), v) for i, v in enumerate(values)]


@pytest.fixture
def analyzer() -> TrendAnalyzer:
    return TrendAnalyzer()


class TestDirection:
    def test_stable_example(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("GLUCOSE", _series(100, 101, 99, 100))

        assert analysis.direction == TrendDirection.STABLE
        assert analysis.confidence == 0.8
        assert analysis.rate_of_change == 0.0

    def test_increasing_example(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("GLUCOSE", _series(80, 90, 100, 115))

        assert analysis.direction == TrendDirection.INCREASING
        assert analysis.confidence == 0.9
        assert analysis.rate_of_change == pytest.approx(0.4375)

    def test_decreasing(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("LDL", _series(160, 150, 140))

        assert analysis.direction == TrendDirection.DECREASING
        assert analysis.confidence == 0.9

    @pytest.mark.parametrize("last", [106.0, 110.0, 94.0, 90.0])
    def test_between_thresholds_is_fluctuating(self, analyzer: TrendAnalyzer, last: float) -> None:
        analysis = analyzer.analyze("GLUCOSE", _series(100, 120, last))

        assert analysis.direction == TrendDirection.FLUCTUATING
        assert analysis.confidence == 0.7

    def test_unsorted_input_is_sorted(self, analyzer: TrendAnalyzer) -> None:
        points = list(reversed(_series(80, 90, 100, 115)))

        analysis = analyzer.analyze("GLUCOSE", points)

        assert analysis.direction == TrendDirection.INCREASING

    def test_accepts_series_points(self, analyzer: TrendAnalyzer) -> None:
        points = [SeriesPoint(date=d, value=v) for d, v in _series(100, 101, 99)]

        assert analyzer.analyze("GLUCOSE", points).sample_size == 3

    def test_custom_thresholds(self) -> None:
        analyzer = TrendAnalyzer(TrendConfig(stable_threshold=0.2, change_threshold=0.3))

        analysis = analyzer.analyze("GLUCOSE", _series(100, 110, 115))

        assert analysis.direction == TrendDirection.STABLE


class TestInsufficientData:
    @pytest.mark.parametrize("count", [0, 1, 2])
    def test_short_series(self, analyzer: TrendAnalyzer, count: int) -> None:
        analysis = analyzer.analyze("GLUCOSE", _series(*[90.0] * count))

        assert analysis.direction == TrendDirection.STABLE
        assert analysis.confidence == 0.0
        assert analysis.insufficient_data is True
        assert analysis.sample_size == count
        assert "Insufficient data" in analysis.recommendation

    def test_empty_series_has_no_average(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("GLUCOSE", [])

        assert analysis.average is None
        assert analysis.health_status == HealthStatus.FAIR

    def test_min_points_is_configurable(self) -> None:
        analyzer = TrendAnalyzer(TrendConfig(min_points=5))

        assert analyzer.analyze("GLUCOSE", _series(80, 90, 100, 115)).insufficient_data


class TestZeroBaseline:
    def test_rise_from_zero_is_increasing_with_reduced_confidence(
        self, analyzer: TrendAnalyzer
    ) -> None:
        analysis = analyzer.analyze("EOS_ABS", _series(0.0, 0.1, 0.2))

        assert analysis.direction == TrendDirection.INCREASING
        assert analysis.confidence == pytest.approx(0.45)
        assert analysis.rate_of_change == pytest.approx(2.0)

    def test_flat_zero_series_is_stable(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("BASO_ABS", _series(0.0, 0.0, 0.0))

        assert analysis.direction == TrendDirection.STABLE
        assert analysis.rate_of_change == 0.0
        assert analysis.confidence == pytest.approx(0.4)

    def test_fall_from_zero_is_decreasing(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("CUSTOM", _series(0.0, -1.0, -2.0))

        assert analysis.direction == TrendDirection.DECREASING
        assert analysis.confidence == pytest.approx(0.45)


class TestMetricsAndRecommendations:
    def test_aliases_resolve_to_canonical_id(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("Hemoglobin A1c", _series(5.2, 5.3, 5.2))

        assert analysis.metric == "HBA1C"
        assert analysis.health_status == HealthStatus.EXCELLENT

    def test_vital_metrics_are_recognized(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("heart_rate", _series(62, 64, 61))

        assert analysis.metric == VitalMetric.HEART_RATE.value
        assert analysis.health_status == HealthStatus.EXCELLENT
        assert analysis.recommendation != GENERIC_RECOMMENDATION

    def test_vital_metric_enum_accepted(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze(VitalMetric.OXYGEN_SATURATION, _series(98, 97, 98))

        assert analysis.metric == "OXYGEN_SATURATION"

    def test_unknown_metric_gets_generic_recommendation(self, analyzer: TrendAnalyzer) -> None:
        analysis = analyzer.analyze("Mystery Marker", _series(10, 10, 10))

        assert analysis.metric == "Mystery Marker"
        assert analysis.recommendation == GENERIC_RECOMMENDATION
        assert analysis.health_status == HealthStatus.FAIR

    def test_health_status_uses_average_not_direction(self, analyzer: TrendAnalyzer) -> None:
        # Improving, but the average is still well above target.
        analysis = analyzer.analyze("LDL", _series(200, 190, 170))

        assert analysis.direction == TrendDirection.DECREASING
        assert analysis.health_status == HealthStatus.POOR

    def test_recommendation_depends_on_direction(self, analyzer: TrendAnalyzer) -> None:
        rising = analyzer.analyze("GLUCOSE", _series(80, 90, 100, 115))
        steady = analyzer.analyze("GLUCOSE", _series(100, 101, 99, 100))

        assert rising.recommendation != steady.recommendation


class TestTrendLine:
    def test_exact_line_is_recovered(self) -> None:
        line = fit_trend_line(_series(10, 12, 14, 16, step_days=1))

        assert not line.degenerate
        assert line.slope_per_day == pytest.approx(2.0)
        assert line.intercept == pytest.approx(10.0)
        assert line.value_at(D0 + timedelta(days=10)) == pytest.approx(30.0)
        assert line.slope_per_year == pytest.approx(730.0)

    def test_identical_dates_return_mean(self) -> None:
        points = [(D0, 4.0), (D0, 6.0), (D0, 11.0)]

        line = fit_trend_line(points)

        assert line.degenerate
        assert line.value_at(D0) == 7.0
        assert line.value_at(D0 + timedelta(days=365)) == 7.0
        assert line.slope_per_year == 0.0

    def test_single_point_is_degenerate(self) -> None:
        line = fit_trend_line([(D0, 5.0)])

        assert line.degenerate
        assert line.value_at(D0 - timedelta(days=3)) == 5.0

    def test_empty_series_raises(self) -> None:
        with pytest.raises(ValueError, match="empty series"):
            fit_trend_line([])

    def test_naive_query_dates_are_treated_as_utc(self) -> None:
        line = fit_trend_line(_series(10, 12, step_days=1))

        assert line.value_at(datetime(2025, 1, 2)) == pytest.approx(12.0)

    @given(
        values=st.lists(
            st.floats(min_value=-1e6, max_value=1e6, allow_nan=False), min_size=1, max_size=20
        )
    )
    def test_same_day_series_is_always_degenerate(self, values: list[float]) -> None:
        line = fit_trend_line([(D0, v) for v in values])

        assert line.degenerate
        assert line.value_at(D0) == pytest.approx(sum(values) / len(values))

    @given(
        values=st.lists(
            st.floats(min_value=0, max_value=1000, allow_nan=False), min_size=2, max_size=20
        )
    )
    def test_line_passes_through_centroid(self, values: list[float]) -> None:
        points = _series(*values, step_days=1)
        line = fit_trend_line(points)

        mean_day = sum(range(len(values))) / len(values)
        centroid = D0 + timedelta(days=mean_day)
        assert line.value_at(centroid) == pytest.approx(sum(values) / len(values), abs=1e-6)


class TestSummary:
    def test_summary_statistics(self) -> None:
        stats = summarize(_series(90, 100, 110, step_days=73))

        assert stats.count == 3
        assert stats.average == pytest.approx(100.0)
        assert stats.minimum == 90
        assert stats.maximum == 110
        assert stats.first_date == D0
        assert stats.span_days == pytest.approx(146.0)
        assert stats.change_per_year == pytest.approx(50.0)

    def test_change_per_year_needs_three_points(self) -> None:
        assert summarize(_series(90, 110)).change_per_year is None

    def test_change_per_year_needs_a_span(self) -> None:
        assert summarize([(D0, 1.0), (D0, 2.0), (D0, 3.0)]).change_per_year is None

    def test_empty_summary(self) -> None:
        stats = summarize([])

        assert stats.count == 0
        assert stats.average is None

    @given(st.permutations(list(range(6))))
    def test_to_series_sorts_any_order(self, order: list[int]) -> None:
        points = _series(*[float(i) for i in range(6)])
        shuffled = [points[i] for i in order]

        assert [p.value for p in to_series(shuffled)] == [float(i) for i in range(6)]
