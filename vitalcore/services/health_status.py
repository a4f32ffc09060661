"""
Absolute health bands for series averages.

Each banded metric lists half-open ``[low, high)`` intervals per status; an
average that falls in no interval is critical. Metrics without explicit bands
derive them from their catalog reference range, and metrics with neither are
reported as fair.
"""

import math

from vitalcore.domain.models import HealthStatus, ReferenceRange

INF = math.inf

Band = tuple[HealthStatus, float, float]

EXCELLENT = HealthStatus.EXCELLENT
GOOD = HealthStatus.GOOD
FAIR = HealthStatus.FAIR
POOR = HealthStatus.POOR

METRIC_BANDS: dict[str, tuple[Band, ...]] = {
    # Vitals
    "HEART_RATE": (
        (EXCELLENT, 50, 70),
        (GOOD, 70, 85), (GOOD, 45, 50),
        (FAIR, 85, 100), (FAIR, 40, 45),
        (POOR, 100, 120), (POOR, 35, 40),
    ),
    "BLOOD_PRESSURE_SYSTOLIC": (
        (EXCELLENT, 90, 120),
        (GOOD, 120, 130),
        (FAIR, 130, 140), (FAIR, 85, 90),
        (POOR, 140, 180), (POOR, 70, 85),
    ),
    "BLOOD_PRESSURE_DIASTOLIC": (
        (EXCELLENT, 60, 80),
        (GOOD, 80, 85), (GOOD, 55, 60),
        (FAIR, 85, 90), (FAIR, 50, 55),
        (POOR, 90, 120), (POOR, 40, 50),
    ),
    "OXYGEN_SATURATION": (
        (EXCELLENT, 97, INF),
        (GOOD, 95, 97),
        (FAIR, 92, 95),
        (POOR, 88, 92),
    ),
    # Fahrenheit
    "BODY_TEMPERATURE": (
        (EXCELLENT, 97, 99),
        (GOOD, 96.5, 97), (GOOD, 99, 99.5),
        (FAIR, 95, 96.5), (FAIR, 99.5, 100.4),
        (POOR, 93, 95), (POOR, 100.4, 103),
    ),
    "RESPIRATORY_RATE": (
        (EXCELLENT, 12, 18),
        (GOOD, 18, 20), (GOOD, 10, 12),
        (FAIR, 20, 24), (FAIR, 8, 10),
        (POOR, 24, 30), (POOR, 6, 8),
    ),
    "HEART_RATE_VARIABILITY": (
        (EXCELLENT, 60, INF),
        (GOOD, 40, 60),
        (FAIR, 25, 40),
        (POOR, 15, 25),
    ),
    # Lab tests with clinically staged cut-offs
    "GLUCOSE": (
        (EXCELLENT, 70, 90),
        (GOOD, 90, 100),
        (FAIR, 100, 126), (FAIR, 60, 70),
        (POOR, 126, 200), (POOR, 54, 60),
    ),
    "HBA1C": (
        (EXCELLENT, -INF, 5.4),
        (GOOD, 5.4, 5.7),
        (FAIR, 5.7, 6.5),
        (POOR, 6.5, 9.0),
    ),
    "LDL": (
        (EXCELLENT, -INF, 100),
        (GOOD, 100, 130),
        (FAIR, 130, 160),
        (POOR, 160, 190),
    ),
    "HDL": (
        (EXCELLENT, 60, INF),
        (GOOD, 50, 60),
        (FAIR, 40, 50),
        (POOR, 30, 40),
    ),
    "TOTAL_CHOLESTEROL": (
        (EXCELLENT, -INF, 180),
        (GOOD, 180, 200),
        (FAIR, 200, 240),
        (POOR, 240, 280),
    ),
    "TRIGLYCERIDES": (
        (EXCELLENT, -INF, 100),
        (GOOD, 100, 150),
        (FAIR, 150, 200),
        (POOR, 200, 500),
    ),
    # CKD stages G1 through G4; G5 is critical
    "EGFR": (
        (EXCELLENT, 90, INF),
        (GOOD, 60, 90),
        (FAIR, 45, 60),
        (POOR, 15, 45),
    ),
}

# Relative distance beyond a violated bound
FAIR_DEVIATION = 0.10
POOR_DEVIATION = 0.25


def status_from_bands(average: float, bands: tuple[Band, ...]) -> HealthStatus:
    for status, low, high in bands:
        if low <= average < high:
            return status
    return HealthStatus.CRITICAL


def status_from_range(average: float, reference: ReferenceRange) -> HealthStatus:
    """
    Derive a band from a reference range.

    Inside the range: the central half of a two-sided range is excellent and
    the rest is good. One-sided ranges are excellent with a 20% margin from the
    bound. Outside the range the status degrades with the relative distance
    from the violated bound.
    """
    low, high = reference.low, reference.high

    if low is not None and high is not None:
        width = high - low
        if abs(average - (low + high) / 2) <= width / 4:
            return HealthStatus.EXCELLENT
        if low <= average <= high:
            return HealthStatus.GOOD
    elif high is not None:
        if average <= high - 0.2 * abs(high):
            return HealthStatus.EXCELLENT
        if average <= high:
            return HealthStatus.GOOD
    elif low is not None:
        if average >= low + 0.2 * abs(low):
            return HealthStatus.EXCELLENT
        if average >= low:
            return HealthStatus.GOOD

    if low is not None and average < low:
        bound, deviation = low, low - average
    else:
        bound, deviation = high, average - high  # type: ignore[operator]

    scale = abs(bound)  # type: ignore[arg-type]
    if scale == 0:
        scale = (high - low) if low is not None and high is not None and high > low else 1.0
    relative = deviation / scale

    if relative <= FAIR_DEVIATION:
        return HealthStatus.FAIR
    if relative <= POOR_DEVIATION:
        return HealthStatus.POOR
    return HealthStatus.CRITICAL


def health_status_for(
    metric: str, average: float, reference: ReferenceRange | None = None
) -> HealthStatus:
    """Band the average of a metric series; explicit bands win over the range."""
    bands = METRIC_BANDS.get(metric)
    if bands is not None:
        return status_from_bands(average, bands)
    if reference is not None:
        return status_from_range(average, reference)
    return HealthStatus.FAIR
