"""
Core services for the application.

This package contains the catalog, range classification, report import,
trend analytics and the record service that wires them to a store.
"""

from .catalog import TestCatalog, default_catalog
from .lab_import import (
    LabReportImporter,
    build_test_result,
    create_manual_blood_test,
    import_lab_report,
)
from .records import BloodTestStore, HealthRecordService, Result
from .reference_range import classify, format_reference_range, parse_reference_range
from .text_import import parse_lab_text
from .trends import TrendAnalyzer, fit_trend_line, summarize

__all__ = [
    "TestCatalog",
    "default_catalog",
    "LabReportImporter",
    "build_test_result",
    "create_manual_blood_test",
    "import_lab_report",
    "BloodTestStore",
    "HealthRecordService",
    "Result",
    "classify",
    "format_reference_range",
    "parse_reference_range",
    "parse_lab_text",
    "TrendAnalyzer",
    "fit_trend_line",
    "summarize",
]
