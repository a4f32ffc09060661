"""
Lab report import pipeline.

Turns a loosely structured report (JSON text or an already-decoded mapping) into
BloodTests, one per panel and date. The pipeline is referentially transparent:
identical input yields identical BloodTests, ids included, and nothing is
written anywhere. A report that cannot be validated fails as a whole with
LabImportError; individual fields that carry no usable number are skipped.

Three report layouts are accepted, alone or mixed in one document.

Panels under ``lab_tests``::

    {
      "report": {"date": "05/01/2025"},
      "lab_tests": {
        "cbc": {
          "test_name": "CBC (Complete Blood Count)",
          "test_date": "05/01/2025",
          "results": {"wbc": {"name": "White Blood Cell Count", "value": 6.3, "units": "K/uL"}},
          "interpretation": "Your blood count is normal."
        }
      }
    }

Panels at the top level, with patient info and a findings summary::

    {
      "patient_info": {"test_date": "2025-05-01"},
      "Cholesterol_Results": {
        "results": {"ldl": {"name": "LDL", "value": 128, "units": "mg/dL", "flag": "H", "note": "Fasting"}}
      },
      "summary": {"abnormal_findings": [{"test": "LDL", "status": "high", "recommendation": "Recheck in 3 months"}]}
    }

Panels as lists of single-test entries::

    {
      "CMP_Metabolism_Studies": [
        {"date": "2025-05-01", "Glucose": 105, "unit": "mg/dL", "reference_range": "70-100", "note": "Fasting"}
      ]
    }
"""

import json
import math
import re
import uuid
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from vitalcore.config import ImportConfig
from vitalcore.domain.errors import LabImportError
from vitalcore.domain.models import BloodTest, TestCategory, TestResult, TestStatus
from vitalcore.services.catalog import TestCatalog, default_catalog, normalize_name
from vitalcore.services.reference_range import format_reference_range, normalize_flag

logger = structlog.get_logger(__name__)

# Namespace for deterministic BloodTest ids derived from panel content.
BLOOD_TEST_NAMESPACE = uuid.UUID("6f1c8a52-3d4e-5b7a-9c21-0e8d4f6a2b13")

_NUMERIC_TEXT = re.compile(r"^[-+]?(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d+)?$")


class RawLabField(BaseModel):
    """One field of a panel as it appears in the source report."""

    model_config = ConfigDict(extra="ignore")

    name: str | None = None
    value: Any = None
    units: str | None = None
    flag: str | None = None
    reference_range: str | None = None
    note: str | None = None


class RawPanel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    test_name: str | None = None
    test_date: str | None = None
    results: dict[str, RawLabField] = Field(default_factory=dict)
    interpretation: str | None = None


class RawPanelEntry(BaseModel):
    """
    One reading of a list-style panel.

    The entry's only key outside the known fields is the test name, and its
    value is the reading: ``{"date": "2025-05-01", "Glucose": 105, "unit": "mg/dL"}``.
    """

    model_config = ConfigDict(extra="allow")

    date: str | None = None
    unit: str | None = None
    reference_range: str | None = None
    flag: str | None = None
    note: str | None = None
    time: str | None = None
    sample: str | None = None

    @model_validator(mode="after")
    def check_single_reading(self) -> "RawPanelEntry":
        readings = list(self.model_extra or {})
        if len(readings) != 1:
            raise ValueError(f"entry must name exactly one test, found {readings or 'none'}")
        return self

    def to_field(self) -> RawLabField:
        name, value = next(iter((self.model_extra or {}).items()))
        return RawLabField(
            name=name,
            value=value,
            units=self.unit,
            flag=self.flag,
            reference_range=self.reference_range,
            note=self.note,
        )


class RawReportHeader(BaseModel):
    model_config = ConfigDict(extra="allow")

    date: str | None = None


class RawPatientInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    test_date: str | None = None


class RawFinding(BaseModel):
    model_config = ConfigDict(extra="ignore")

    test: str
    value: Any = None
    status: str | None = None
    recommendation: str | None = None


class RawSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    abnormal_findings: list[RawFinding] = Field(default_factory=list)
    normal_findings: list[str] = Field(default_factory=list)


class RawLabReport(BaseModel):
    """
    Top-level report.

    Top-level objects with a ``results`` mapping are lifted into
    ``top_level_panels`` and top-level lists of objects into ``entry_panels``.
    Anything else (facility and patient blocks) is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    report: RawReportHeader | None = None
    patient_info: RawPatientInfo | None = None
    date: str | None = None
    summary: RawSummary | None = None
    lab_tests: dict[str, RawPanel] = Field(default_factory=dict)
    top_level_panels: dict[str, RawPanel] = Field(default_factory=dict)
    entry_panels: dict[str, list[RawPanelEntry]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def lift_top_level_panels(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        panels: dict[str, Any] = {}
        entries: dict[str, Any] = {}
        for key, value in data.items():
            if key in cls.model_fields:
                continue
            if isinstance(value, dict) and "results" in value:
                panels[key] = value
            elif isinstance(value, list) and value and all(isinstance(v, dict) for v in value):
                entries[key] = value
        return {**data, "top_level_panels": panels, "entry_panels": entries}

    @model_validator(mode="after")
    def check_has_panels(self) -> "RawLabReport":
        lifted = self.top_level_panels or self.entry_panels
        if "lab_tests" not in self.model_fields_set and not lifted:
            raise ValueError("report contains no lab panels")
        return self

    @property
    def fallback_date(self) -> str | None:
        """Report-level date used by panels that carry none of their own."""
        return (
            (self.report.date if self.report else None)
            or (self.patient_info.test_date if self.patient_info else None)
            or self.date
        )


@dataclass(frozen=True)
class _PanelDraft:
    """A panel normalized across layouts, with its date already resolved."""

    key: str
    date: datetime
    test_type: str
    fields: list[tuple[str, RawLabField]]
    interpretation: str | None
    content: Any


def coerce_value(raw: Any) -> float | None:
    """
    Extract a number from a source value.

    Numbers and plain numeric strings ("12.5", "1,200") are accepted. Censored
    values such as ">90", free text, booleans and non-finite or out-of-range
    numbers yield None.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int | float):
        try:
            value = float(raw)
        except OverflowError:
            return None
        return value if math.isfinite(value) else None
    if isinstance(raw, str):
        text = raw.strip()
        if _NUMERIC_TEXT.match(text):
            value = float(text.replace(",", ""))
            return value if math.isfinite(value) else None
    return None


def parse_report_date(text: str, formats: tuple[str, ...]) -> datetime:
    """Parse a report or panel date using the configured formats, in order."""
    candidate = text.strip()
    for fmt in formats:
        try:
            return datetime.strptime(candidate, fmt)
        except ValueError:
            continue
    raise LabImportError(f"Unrecognized date {text!r}; expected one of {list(formats)}")


def build_test_result(
    name: str,
    value: float | None,
    *,
    catalog: TestCatalog | None = None,
    unit: str | None = None,
    source_flag: str | None = None,
    field_key: str | None = None,
    reference_range_text: str | None = None,
    note: str | None = None,
) -> TestResult:
    """
    Build a classified TestResult for a single reading.

    The human-readable name is resolved first and the field key second. When
    neither resolves the result keeps the raw name, the General category and an
    empty reference range, so its status is unknown. A range printed by the lab
    replaces the catalog range; a note is appended to the explanation.
    """
    catalog = catalog or default_catalog()
    entry = catalog.resolve(name)
    if entry is None and field_key:
        entry = catalog.resolve(field_key)

    if entry is None:
        raw_name = name or field_key or ""
        return TestResult(
            name=raw_name,
            display_name=raw_name,
            value=value,
            unit=unit or "",
            reference_range_text=reference_range_text or "",
            category=TestCategory.GENERAL,
            source_flag=source_flag,
            explanation=note or "",
        )

    catalog_range = format_reference_range(entry.reference_range) if entry.reference_range else ""
    return TestResult(
        name=entry.id,
        display_name=entry.display_name,
        canonical_id=entry.id,
        value=value,
        unit=unit or entry.unit,
        reference_range_text=reference_range_text or catalog_range,
        category=entry.category,
        source_flag=source_flag,
        explanation=" - ".join(part for part in (entry.description, note) if part),
    )


def create_manual_blood_test(
    test_type: str,
    date: datetime,
    values: Mapping[str, float | None],
    *,
    catalog: TestCatalog | None = None,
    interpretation: str | None = None,
) -> BloodTest:
    """Build a BloodTest from manually entered values; None entries are skipped."""
    catalog = catalog or default_catalog()
    results = [
        build_test_result(name, value, catalog=catalog)
        for name, value in values.items()
        if value is not None
    ]
    blood_test = BloodTest(
        date=date, test_type=test_type, results=results, interpretation=interpretation
    )
    logger.info(
        "manual_blood_test_created",
        test_type=test_type,
        results=len(results),
        skipped=len(values) - len(results),
    )
    return blood_test


class LabReportImporter:
    """
    Stateless importer bound to a catalog and an import configuration.

    Safe to share between concurrent callers: nothing is mutated after
    construction.
    """

    def __init__(
        self, catalog: TestCatalog | None = None, config: ImportConfig | None = None
    ) -> None:
        self.catalog = catalog or default_catalog()
        self.config = config or ImportConfig()

    def import_report(self, payload: str | bytes | Mapping[str, Any]) -> list[BloodTest]:
        """Import every panel of the report, or raise LabImportError and emit nothing."""
        report = self._validate(payload)

        # Drafting resolves every date, so a bad panel fails the whole import.
        drafts = list(self._drafts(report))
        advice = self._finding_advice(report.summary)

        blood_tests = [self._import_panel(draft, advice) for draft in drafts]

        logger.info(
            "lab_report_imported",
            panels=len(blood_tests),
            results=sum(len(bt.results) for bt in blood_tests),
            empty_panels=sum(1 for bt in blood_tests if not bt.results),
        )
        return blood_tests

    def _validate(self, payload: str | bytes | Mapping[str, Any]) -> RawLabReport:
        try:
            if isinstance(payload, str | bytes | bytearray):
                return RawLabReport.model_validate_json(payload)
            if isinstance(payload, Mapping):
                return RawLabReport.model_validate(dict(payload))
        except ValidationError as e:
            logger.warning("lab_report_rejected", errors=e.error_count())
            raise LabImportError(f"Malformed lab report: {e}") from e
        raise LabImportError(f"Unsupported lab report payload type: {type(payload).__name__}")

    def _drafts(self, report: RawLabReport) -> Iterator[_PanelDraft]:
        fallback = report.fallback_date
        keyed_panels = [*report.lab_tests.items(), *report.top_level_panels.items()]
        for key, panel in keyed_panels:
            yield _PanelDraft(
                key=key,
                date=self._panel_date(key, panel.test_date, fallback),
                test_type=panel.test_name or key,
                fields=list(panel.results.items()),
                interpretation=panel.interpretation,
                content=panel.model_dump(mode="json"),
            )

        for key, entries in report.entry_panels.items():
            # Entries of one list may come from different draws; each date is its own BloodTest.
            by_date: dict[str, list[RawPanelEntry]] = {}
            for entry in entries:
                date_text = entry.date or fallback
                if not date_text:
                    raise LabImportError(
                        f"Panel {key!r} has an entry without a date and the report has no date"
                    )
                by_date.setdefault(date_text, []).append(entry)

            for date_text, group in by_date.items():
                fields = [(field.name or key, field) for field in (e.to_field() for e in group)]
                yield _PanelDraft(
                    key=key,
                    date=self._panel_date(key, date_text, fallback),
                    test_type=key,
                    fields=fields,
                    interpretation=None,
                    content=[e.model_dump(mode="json") for e in group],
                )

    def _panel_date(self, key: str, text: str | None, fallback: str | None) -> datetime:
        text = text or fallback
        if not text:
            raise LabImportError(f"Panel {key!r} has no test date and the report has no date")
        return parse_report_date(text, self.config.date_formats)

    def _finding_advice(self, summary: RawSummary | None) -> dict[str, str]:
        """Map each abnormal finding's test, by canonical id or normalized name, to its advice."""
        if summary is None:
            return {}
        advice: dict[str, str] = {}
        for finding in summary.abnormal_findings:
            if not finding.recommendation:
                continue
            entry = self.catalog.resolve(finding.test)
            advice[entry.id if entry else normalize_name(finding.test)] = finding.recommendation
        return advice

    def _import_panel(self, draft: _PanelDraft, advice: Mapping[str, str]) -> BloodTest:
        log = logger.bind(panel=draft.key)
        results: list[TestResult] = []

        for field_key, field in draft.fields:
            if field.value is None:
                log.debug("lab_field_null_skipped", field=field_key)
                continue

            value = coerce_value(field.value)
            if value is None:
                log.info(
                    "lab_field_non_numeric_skipped", field=field_key, raw_value=str(field.value)[:40]
                )
                continue

            result = build_test_result(
                field.name or field_key,
                value,
                catalog=self.catalog,
                unit=field.units,
                source_flag=field.flag,
                field_key=field_key,
                reference_range_text=field.reference_range,
                note=field.note,
            )
            if result.canonical_id is None:
                log.debug("lab_field_unresolved", field=field_key, name=field.name)
            finding = advice.get(result.canonical_id or normalize_name(result.name))
            if finding:
                parts = (result.explanation, finding)
                result = result.model_copy(
                    update={"explanation": " - ".join(part for part in parts if part)}
                )
            self._check_flag(log, field_key, result)
            results.append(result)

        return BloodTest(
            id=self._panel_id(draft),
            date=draft.date,
            test_type=draft.test_type,
            results=results,
            interpretation=draft.interpretation,
        )

    @staticmethod
    def _check_flag(log: Any, field_key: str, result: TestResult) -> None:
        """Log a lab flag that disagrees with the computed status; the status stands."""
        flagged = normalize_flag(result.source_flag)
        if flagged is None or result.status == TestStatus.UNKNOWN:
            return
        if flagged != result.status:
            log.warning(
                "source_flag_mismatch",
                field=field_key,
                test=result.name,
                source_flag=result.source_flag,
                computed_status=result.status.value,
            )

    @staticmethod
    def _panel_id(draft: _PanelDraft) -> uuid.UUID:
        content = json.dumps(draft.content, sort_keys=True, default=str)
        return uuid.uuid5(BLOOD_TEST_NAMESPACE, f"{draft.key}|{draft.date.isoformat()}|{content}")


def import_lab_report(
    payload: str | bytes | Mapping[str, Any],
    *,
    catalog: TestCatalog | None = None,
    config: ImportConfig | None = None,
) -> list[BloodTest]:
    """Convenience wrapper around LabReportImporter.import_report."""
    return LabReportImporter(catalog=catalog, config=config).import_report(payload)
