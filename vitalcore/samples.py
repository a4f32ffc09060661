"""Bundled sample data for the demo and the test suite."""

import json
from datetime import UTC, datetime
from typing import Any

SAMPLE_LAB_REPORT: dict[str, Any] = {
    "healthcare_facility": {
        "name": "Example Community Health Center",
        "address": {
            "street": "100 Sample Avenue",
            "city": "Anytown",
            "state": "XX",
            "zip_code": "00000",
        },
    },
    "patient": {
        "name": "Test Patient",
        "address": {
            "street": "1 Example Lane",
            "city": "Anytown",
            "state": "XX",
            "zip_code": "00000",
        },
    },
    "report": {
        "type": "Lab Results Review",
        "description": (
            "This is a review of your test results to help you understand the results "
            "and to let you know if any follow up is needed."
        ),
        "date": "05/01/2025",
    },
    "lab_tests": {
        "cbc": {
            "test_name": "CBC (Complete Blood Count)",
            "test_date": "05/01/2025",
            "results": {
                "wbc": {"name": "White Blood Cell Count", "value": 6.3, "units": "K/uL"},
                "neutrophils_percent": {"name": "Neutrophils Percentage", "value": 57.1, "units": "%"},
                "lymphs_percent": {"name": "Lymphocytes Percentage", "value": 32.3, "units": "%"},
                "monos_percent": {"name": "Monocytes Percentage", "value": 8.2, "units": "%"},
                "eos_percent": {"name": "Eosinophils Percentage", "value": 1.3, "units": "%"},
                "basos_percent": {"name": "Basophils Percentage", "value": 0.5, "units": "%"},
                "neutrophils_absolute": {
                    "name": "Neutrophils Absolute Count",
                    "value": 3.61,
                    "units": "K/uL",
                },
                "lymphs_absolute": {"name": "Lymphocytes Absolute Count", "value": 2, "units": "K/uL"},
                "monos_absolute": {"name": "Monocytes Absolute Count", "value": 0.5, "units": "K/uL"},
                "eos_absolute": {"name": "Eosinophils Absolute Count", "value": 0.1, "units": "K/uL"},
                "basos_absolute": {"name": "Basophils Absolute Count", "value": None, "units": "K/uL"},
                "rbc": {"name": "Red Blood Cell Count", "value": 4.93, "units": "M/uL"},
                "hgb": {"name": "Hemoglobin", "value": 14.5, "units": "g/dL"},
                "hct": {"name": "Hematocrit", "value": 44.6, "units": "%"},
                "mcv": {"name": "Mean Corpuscular Volume", "value": 90.5, "units": "fL"},
                "mch": {"name": "Mean Corpuscular Hemoglobin", "value": 29.4, "units": "pg"},
                "mchc": {
                    "name": "Mean Corpuscular Hemoglobin Concentration",
                    "value": 32.5,
                    "units": "g/dL",
                },
                "rdw": {"name": "Red Cell Distribution Width", "value": 13.6, "units": "%"},
                "platelet_count": {"name": "Platelet Count", "value": 220, "units": "K/uL"},
                "mpv": {"name": "Mean Platelet Volume", "value": 9.2, "units": "fL"},
            },
            "interpretation": "Your blood count is normal.",
        },
        "cmp": {
            "test_name": "CMP (Metabolism Studies)",
            "test_date": "05/01/2025",
            "results": {
                "glucose": {"name": "Glucose", "value": 200, "units": "mg/dL", "flag": "HIGH"},
                "urea_nitrogen": {"name": "Urea Nitrogen (BUN)", "value": 21, "units": "mg/dL"},
                "creatinine": {"name": "Creatinine", "value": 1, "units": "mg/dL"},
                "egfr_creatinine": {
                    "name": "eGFR - Creatinine",
                    "value": ">90",
                    "units": "mL/min/1.73m²",
                },
                "sodium": {"name": "Sodium", "value": 140, "units": "mmol/L"},
                "potassium": {"name": "Potassium", "value": 4.1, "units": "mmol/L"},
                "chloride": {"name": "Chloride", "value": 105, "units": "mmol/L"},
                "co2": {"name": "Carbon Dioxide (CO2)", "value": 24, "units": "mmol/L"},
                "anion_gap": {"name": "Anion Gap", "value": 11, "units": "mmol/L"},
                "calcium": {"name": "Calcium", "value": 9.2, "units": "mg/dL"},
                "total_protein": {"name": "Total Protein", "value": None, "units": "g/dL"},
                "albumin": {"name": "Albumin", "value": 4.3, "units": "g/dL"},
                "ast": {"name": "AST (Aspartate Aminotransferase)", "value": 25, "units": "U/L"},
            },
        },
    },
}

SAMPLE_LAB_TEXT = """\
Patient: Test Patient
Collected: 05/01/2025
Glucose: 105 mg/dL (70-100)
WBC: 6.3 K/uL
Hemoglobin: 12.1 g/dL [L]
LDL Cholesterol: 128 mg/dL (<100) [H]
eGFR: >90 mL/min/1.73m2
"""

# Earlier glucose draws used to show a multi-point trend next to the sample report.
SAMPLE_GLUCOSE_HISTORY: list[tuple[datetime, float]] = [
    (datetime(2024, 5, 2, tzinfo=UTC), 92.0),
    (datetime(2024, 9, 14, tzinfo=UTC), 104.0),
    (datetime(2025, 1, 20, tzinfo=UTC), 131.0),
]


def sample_report_json() -> str:
    """The sample report serialized the way it arrives from an upload."""
    return json.dumps(SAMPLE_LAB_REPORT, ensure_ascii=False)
