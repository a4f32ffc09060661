"""
Line-oriented parser for lab reports that arrive as plain text.

Text extraction (PDF, OCR) happens elsewhere; this module only turns lines like::

    Glucose: 105 mg/dL (70-100)
    WBC: 6.3 K/uL
    Hemoglobin: 12.1 g/dL [L]

into classified TestResults. Lines that do not look like a reading are ignored.
"""

import re

import structlog

from vitalcore.domain.models import TestResult
from vitalcore.services.catalog import TestCatalog, default_catalog
from vitalcore.services.lab_import import build_test_result, coerce_value
from vitalcore.services.reference_range import format_reference_range, parse_reference_range

logger = structlog.get_logger(__name__)

_LINE = re.compile(
    r"""^
    (?P<name>[A-Za-z][A-Za-z0-9 ,%#()/\-]*?)\s*:\s*
    (?P<value>[-+]?\d{1,3}(?:,\d{3})+(?:\.\d+)?|[-+]?\d+(?:\.\d+)?)
    (?:\s*(?P<unit>[A-Za-zµμ%][^\s\[(]*))?
    (?:\s*\((?P<range>[^)]*)\))?
    (?:\s*\[(?P<flag>[A-Za-z]+)\])?
    \s*$""",
    re.VERBOSE,
)


def parse_lab_line(line: str, catalog: TestCatalog | None = None) -> TestResult | None:
    """Parse a single line; returns None when it is not a reading."""
    match = _LINE.match(line.strip())
    if not match:
        return None

    value = coerce_value(match["value"])
    if value is None:
        return None

    unit = match["unit"] or ""
    result = build_test_result(
        match["name"].strip(),
        value,
        catalog=catalog,
        unit=unit or None,
        source_flag=match["flag"],
    )

    # A range printed on the line describes this lab's reference interval and
    # takes precedence over the catalog's.
    explicit = parse_reference_range(match["range"])
    if explicit is not None:
        if not explicit.unit and unit:
            explicit = explicit.model_copy(update={"unit": unit})
        result = result.model_copy(
            update={"reference_range_text": format_reference_range(explicit)}
        )
    return result


def parse_lab_text(text: str, catalog: TestCatalog | None = None) -> list[TestResult]:
    """Parse every recognizable reading in a block of report text."""
    catalog = catalog or default_catalog()
    results: list[TestResult] = []
    for line in text.splitlines():
        result = parse_lab_line(line, catalog)
        if result is not None:
            results.append(result)

    logger.info(
        "lab_text_parsed",
        lines=len(text.splitlines()),
        results=len(results),
        unresolved=sum(1 for r in results if r.canonical_id is None),
    )
    return results
