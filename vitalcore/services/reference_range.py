"""
Reference range parsing and status classification.

Supported textual forms:
- "4.5-11.0", "4.5-11.0 K/uL", "41.0-50.0%" (hyphen or en dash)
- "<200 mg/dL", "≤200"
- ">40 mg/dL", "≥40"

Parsing never raises: anything malformed yields ``None`` and callers treat the
result as ``TestStatus.UNKNOWN``.
"""

import re

from vitalcore.domain.models import ReferenceRange, TestStatus

_NUMBER = r"[-+]?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?"
_DASHES = "-–"

_BETWEEN = re.compile(rf"^({_NUMBER})\s*[{_DASHES}]\s*({_NUMBER})(.*)$")
_UPPER_ONLY = re.compile(rf"^[<≤]\s*=?\s*({_NUMBER})(.*)$")
_LOWER_ONLY = re.compile(rf"^[>≥]\s*=?\s*({_NUMBER})(.*)$")
# Any character that cannot be part of a bare number.
_UNIT_MARK = re.compile(r"[^\d.\s+\-–eE]")

_FLAG_STATUS = {
    "H": TestStatus.HIGH,
    "HI": TestStatus.HIGH,
    "HIGH": TestStatus.HIGH,
    "CRIT": TestStatus.HIGH,
    "CRITICAL": TestStatus.HIGH,
    "L": TestStatus.LOW,
    "LO": TestStatus.LOW,
    "LOW": TestStatus.LOW,
    "N": TestStatus.NORMAL,
    "NORMAL": TestStatus.NORMAL,
}


def _unit_tail(rest: str) -> str | None:
    """
    Return the trailing unit, or None when the tail is not a unit.

    A unit may start with a digit ("10^3/uL") only when whitespace sets it apart
    from the bound and it is more than a number, so "1-2-3" and "1-2 3" stay invalid.
    """
    unit = rest.strip()
    if not unit or not (unit[0].isdigit() or unit[0] in _DASHES + "."):
        return unit
    if rest[:1].isspace() and _UNIT_MARK.search(unit):
        return unit
    return None


def parse_reference_range(text: str | None) -> ReferenceRange | None:
    """Parse a human-readable range; returns None for anything unrecognized."""
    if not text:
        return None
    trimmed = " ".join(text.split())
    if not trimmed:
        return None

    try:
        if match := _BETWEEN.match(trimmed):
            unit = _unit_tail(match.group(3))
            if unit is None:
                return None
            return ReferenceRange(low=float(match.group(1)), high=float(match.group(2)), unit=unit)

        if match := _UPPER_ONLY.match(trimmed):
            unit = _unit_tail(match.group(2))
            if unit is None:
                return None
            return ReferenceRange(high=float(match.group(1)), unit=unit)

        if match := _LOWER_ONLY.match(trimmed):
            unit = _unit_tail(match.group(2))
            if unit is None:
                return None
            return ReferenceRange(low=float(match.group(1)), unit=unit)
    except ValueError:
        # Inverted bounds (low > high) fail model validation.
        return None

    return None


def format_number(value: float) -> str:
    """Shortest text that parses back to exactly ``value``."""
    if value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return repr(value)


def format_reference_range(reference: ReferenceRange) -> str:
    """Render a range in the "L-H unit" / "<H unit" / ">L unit" forms."""
    if reference.low is not None and reference.high is not None:
        body = f"{format_number(reference.low)}-{format_number(reference.high)}"
    elif reference.high is not None:
        body = f"<{format_number(reference.high)}"
    else:
        body = f">{format_number(reference.low)}"  # type: ignore[arg-type]
    return f"{body} {reference.unit}" if reference.unit else body


def classify(value: float | None, reference: ReferenceRange | None) -> TestStatus:
    """
    Classify a value against a range with inclusive bounds.

    A degenerate range (low == high) is normal only on exact equality.
    """
    if value is None or reference is None:
        return TestStatus.UNKNOWN
    if reference.low is not None and value < reference.low:
        return TestStatus.LOW
    if reference.high is not None and value > reference.high:
        return TestStatus.HIGH
    return TestStatus.NORMAL


def classify_text(value: float | None, text: str | None) -> TestStatus:
    return classify(value, parse_reference_range(text))


def normalize_flag(flag: str | None) -> TestStatus | None:
    """Map a lab-supplied flag to a status, for comparison only."""
    if flag is None:
        return None
    return _FLAG_STATUS.get(flag.strip().strip("[]()").upper())
