"""
Canonical test catalog.

One declarative table maps every recognized lab-test name or alias to a
canonical identifier, unit, panel category, reference range and description.
Every other component queries this table instead of re-implementing the
mapping.

Percentage and absolute-count variants of the same measurement are distinct
entries (e.g. NEUT_PCT and NEUT_ABS) and are never merged during resolution.
"""

from collections.abc import Iterable, Iterator
from functools import lru_cache
from typing import Any

import structlog

from vitalcore.domain.errors import CatalogError
from vitalcore.domain.models import CanonicalTest, ReferenceRange, TestCategory

logger = structlog.get_logger(__name__)

# id, display name, category, unit, (low, high) or None, aliases, description
_CATALOG_TABLE: list[dict[str, Any]] = [
    # Complete blood count
    {
        "id": "WBC",
        "name": "White Blood Cell Count",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (4.5, 11.0),
        "aliases": ["white blood cell count", "white blood cells", "wbc count", "leukocytes",
                    "WBC (White Blood Cells)"],
        "description": "Measures infection-fighting white blood cells",
    },
    {
        "id": "RBC",
        "name": "Red Blood Cell Count",
        "category": TestCategory.CBC,
        "unit": "M/µL",
        "range": (4.5, 5.9),
        "aliases": ["red blood cell count", "red blood cells", "rbc count", "erythrocytes",
                    "RBC (Red Blood Cells)"],
        "description": "Measures oxygen-carrying red blood cells",
    },
    {
        "id": "HGB",
        "name": "Hemoglobin",
        "category": TestCategory.CBC,
        "unit": "g/dL",
        "range": (13.5, 17.5),
        "aliases": ["hemoglobin", "haemoglobin", "hb", "HGB (Hemoglobin)"],
        "description": "Measures the oxygen-carrying protein in red blood cells",
    },
    {
        "id": "HCT",
        "name": "Hematocrit",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (41.0, 50.0),
        "aliases": ["hematocrit", "haematocrit", "HCT (Hematocrit)"],
        "description": "Percentage of blood volume occupied by red blood cells",
    },
    {
        "id": "MCV",
        "name": "Mean Corpuscular Volume",
        "category": TestCategory.CBC,
        "unit": "fL",
        "range": (80.0, 100.0),
        "aliases": ["mean corpuscular volume"],
        "description": "Average size of red blood cells",
    },
    {
        "id": "MCH",
        "name": "Mean Corpuscular Hemoglobin",
        "category": TestCategory.CBC,
        "unit": "pg",
        "range": (27.0, 33.0),
        "aliases": ["mean corpuscular hemoglobin"],
        "description": "Average amount of hemoglobin per red blood cell",
    },
    {
        "id": "MCHC",
        "name": "Mean Corpuscular Hemoglobin Concentration",
        "category": TestCategory.CBC,
        "unit": "g/dL",
        "range": (32.0, 36.0),
        "aliases": ["mean corpuscular hemoglobin concentration"],
        "description": "Concentration of hemoglobin in red blood cells",
    },
    {
        "id": "RDW",
        "name": "Red Cell Distribution Width",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (11.5, 14.5),
        "aliases": ["red cell distribution width", "rdw-cv"],
        "description": "Variation in red blood cell size",
    },
    {
        "id": "PLT",
        "name": "Platelet Count",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (150.0, 450.0),
        "aliases": ["platelets", "platelet", "platelet count", "platelet_count"],
        "description": "Measures blood clotting cells",
    },
    {
        "id": "MPV",
        "name": "Mean Platelet Volume",
        "category": TestCategory.CBC,
        "unit": "fL",
        "range": (7.5, 11.5),
        "aliases": ["mean platelet volume"],
        "description": "Average size of platelets",
    },
    {
        "id": "NEUT_PCT",
        "name": "Neutrophils %",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (40.0, 70.0),
        "aliases": ["neutrophils %", "neutrophils percentage", "neutrophils percent",
                    "neutrophils_percent", "neut %"],
        "description": "Percentage of neutrophils (infection-fighting cells)",
    },
    {
        "id": "LYMPH_PCT",
        "name": "Lymphocytes %",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (20.0, 40.0),
        "aliases": ["lymphocytes %", "lymphs %", "lymphocytes percentage", "lymphs_percent"],
        "description": "Percentage of lymphocytes (immune system cells)",
    },
    {
        "id": "MONO_PCT",
        "name": "Monocytes %",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (2.0, 8.0),
        "aliases": ["monocytes %", "monos %", "monocytes percentage", "monos_percent"],
        "description": "Percentage of monocytes (immune system cells)",
    },
    {
        "id": "EOS_PCT",
        "name": "Eosinophils %",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (1.0, 4.0),
        "aliases": ["eosinophils %", "eos %", "eosinophils percentage", "eos_percent"],
        "description": "Percentage of eosinophils (allergy and parasite-fighting cells)",
    },
    {
        "id": "BASO_PCT",
        "name": "Basophils %",
        "category": TestCategory.CBC,
        "unit": "%",
        "range": (0.5, 1.0),
        "aliases": ["basophils %", "basos %", "basophils percentage", "basos_percent"],
        "description": "Percentage of basophils (inflammation and allergy cells)",
    },
    {
        "id": "NEUT_ABS",
        "name": "Neutrophils #",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (1.8, 7.7),
        "aliases": ["neutrophils #", "neutrophils absolute count", "neutrophils absolute",
                    "neutrophils_absolute", "anc"],
        "description": "Absolute count of neutrophils",
    },
    {
        "id": "LYMPH_ABS",
        "name": "Lymphocytes #",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (1.0, 4.8),
        "aliases": ["lymphocytes #", "lymphs #", "lymphocytes absolute count", "lymphs_absolute"],
        "description": "Absolute count of lymphocytes",
    },
    {
        "id": "MONO_ABS",
        "name": "Monocytes #",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (0.2, 1.0),
        "aliases": ["monocytes #", "monos #", "monocytes absolute count", "monos_absolute"],
        "description": "Absolute count of monocytes",
    },
    {
        "id": "EOS_ABS",
        "name": "Eosinophils #",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (0.0, 0.5),
        "aliases": ["eosinophils #", "eos #", "eosinophils absolute count", "eos_absolute"],
        "description": "Absolute count of eosinophils",
    },
    {
        "id": "BASO_ABS",
        "name": "Basophils #",
        "category": TestCategory.CBC,
        "unit": "K/µL",
        "range": (0.0, 0.2),
        "aliases": ["basophils #", "basos #", "basophils absolute count", "basos_absolute"],
        "description": "Absolute count of basophils",
    },
    # Comprehensive metabolic panel
    {
        "id": "GLUCOSE",
        "name": "Glucose",
        "category": TestCategory.CMP,
        "unit": "mg/dL",
        "range": (70.0, 100.0),
        "aliases": ["glucose", "blood glucose", "fasting glucose", "glucose fasting", "fbs"],
        "description": "Blood sugar level - high levels may indicate diabetes",
    },
    {
        "id": "BUN",
        "name": "Urea Nitrogen (BUN)",
        "category": TestCategory.CMP,
        "unit": "mg/dL",
        "range": (7.0, 20.0),
        "aliases": ["urea nitrogen", "urea nitrogen (bun)", "blood urea nitrogen", "urea_nitrogen"],
        "description": "Kidney function marker - high levels may indicate kidney problems",
    },
    {
        "id": "CREATININE",
        "name": "Creatinine",
        "category": TestCategory.CMP,
        "unit": "mg/dL",
        "range": (0.7, 1.3),
        "aliases": ["creatinine", "creat", "serum creatinine"],
        "description": "Kidney function marker - high levels may indicate kidney problems",
    },
    {
        "id": "EGFR",
        "name": "eGFR",
        "category": TestCategory.CMP,
        "unit": "mL/min/1.73m²",
        "range": (60.0, None),
        "aliases": ["egfr - creatinine", "egfr_creatinine", "estimated gfr",
                    "estimated glomerular filtration rate", "egfr (ckd-epi)"],
        "description": "Estimated glomerular filtration rate measures kidney filtering ability",
    },
    {
        "id": "SODIUM",
        "name": "Sodium",
        "category": TestCategory.CMP,
        "unit": "mEq/L",
        "range": (135.0, 145.0),
        "aliases": ["sodium", "na"],
        "description": "Electrolyte that helps maintain fluid balance",
    },
    {
        "id": "POTASSIUM",
        "name": "Potassium",
        "category": TestCategory.CMP,
        "unit": "mEq/L",
        "range": (3.5, 5.0),
        "aliases": ["potassium", "k"],
        "description": "Electrolyte important for heart and muscle function",
    },
    {
        "id": "CHLORIDE",
        "name": "Chloride",
        "category": TestCategory.CMP,
        "unit": "mEq/L",
        "range": (96.0, 106.0),
        "aliases": ["chloride", "cl"],
        "description": "Electrolyte that helps maintain fluid balance and pH",
    },
    {
        "id": "CO2",
        "name": "Carbon Dioxide (CO2)",
        "category": TestCategory.CMP,
        "unit": "mEq/L",
        "range": (22.0, 28.0),
        "aliases": ["carbon dioxide", "carbon dioxide (co2)", "bicarbonate", "hco3", "total co2"],
        "description": "Measures acid-base balance in the body",
    },
    {
        "id": "ANION_GAP",
        "name": "Anion Gap",
        "category": TestCategory.CMP,
        "unit": "mEq/L",
        "range": (8.0, 16.0),
        "aliases": ["anion gap", "anion_gap"],
        "description": "Helps identify acid-base disorders",
    },
    {
        "id": "CALCIUM",
        "name": "Calcium",
        "category": TestCategory.CMP,
        "unit": "mg/dL",
        "range": (8.5, 10.5),
        "aliases": ["calcium", "ca", "calcium total"],
        "description": "Important for bones, muscles, and nerve function",
    },
    {
        "id": "TOTAL_PROTEIN",
        "name": "Total Protein",
        "category": TestCategory.CMP,
        "unit": "g/dL",
        "range": (6.0, 8.3),
        "aliases": ["total protein", "total_protein", "protein total"],
        "description": "Measures overall protein levels in blood",
    },
    {
        "id": "ALBUMIN",
        "name": "Albumin",
        "category": TestCategory.CMP,
        "unit": "g/dL",
        "range": (3.5, 5.0),
        "aliases": ["albumin", "alb"],
        "description": "Main protein in blood - helps maintain fluid balance",
    },
    {
        "id": "AST",
        "name": "AST",
        "category": TestCategory.CMP,
        "unit": "U/L",
        "range": (10.0, 40.0),
        "aliases": ["sgot", "aspartate aminotransferase", "AST (Aspartate Aminotransferase)",
                    "ast (sgot)"],
        "description": "Liver enzyme - high levels may indicate liver damage",
    },
    {
        "id": "ALT",
        "name": "ALT",
        "category": TestCategory.CMP,
        "unit": "U/L",
        "range": (7.0, 56.0),
        "aliases": ["sgpt", "alanine aminotransferase", "ALT (Alanine Aminotransferase)",
                    "alt (sgpt)"],
        "description": "Liver enzyme - high levels may indicate liver damage",
    },
    {
        "id": "ALP",
        "name": "Alkaline Phosphatase",
        "category": TestCategory.CMP,
        "unit": "U/L",
        "range": (44.0, 147.0),
        "aliases": ["alkaline phosphatase", "alk phos", "alkaline_phosphatase"],
        "description": "Liver and bone enzyme",
    },
    {
        "id": "BILIRUBIN_TOTAL",
        "name": "Bilirubin Total",
        "category": TestCategory.CMP,
        "unit": "mg/dL",
        "range": (0.3, 1.2),
        "aliases": ["bilirubin total", "total bilirubin", "bilirubin", "tbil"],
        "description": "Liver function marker - high levels may indicate liver problems",
    },
    # Lipid panel
    {
        "id": "TOTAL_CHOLESTEROL",
        "name": "Total Cholesterol",
        "category": TestCategory.LIPID,
        "unit": "mg/dL",
        "range": (None, 200.0),
        "aliases": ["total cholesterol", "cholesterol", "cholesterol total", "chol"],
        "description": "Total cholesterol level",
    },
    {
        "id": "HDL",
        "name": "HDL",
        "category": TestCategory.LIPID,
        "unit": "mg/dL",
        "range": (40.0, None),
        "aliases": ["hdl cholesterol", "hdl-c", "high-density lipoprotein"],
        "description": "HDL (good cholesterol) - higher values are better",
    },
    {
        "id": "LDL",
        "name": "LDL",
        "category": TestCategory.LIPID,
        "unit": "mg/dL",
        "range": (None, 100.0),
        "aliases": ["ldl cholesterol", "ldl-c", "low-density lipoprotein", "ldl_non_fasting",
                    "ldl calculated"],
        "description": "LDL (bad cholesterol) - lower values are better",
    },
    {
        "id": "TRIGLYCERIDES",
        "name": "Triglycerides",
        "category": TestCategory.LIPID,
        "unit": "mg/dL",
        "range": (None, 150.0),
        "aliases": ["triglycerides", "triglyceride", "trig", "tg"],
        "description": "Fat in the blood - high levels may increase heart disease risk",
    },
    # Thyroid
    {
        "id": "TSH",
        "name": "TSH",
        "category": TestCategory.THYROID,
        "unit": "µIU/mL",
        "range": (0.4, 4.0),
        "aliases": ["thyroid stimulating hormone", "thyrotropin"],
        "description": "Thyroid stimulating hormone regulates thyroid function",
    },
    {
        "id": "T4",
        "name": "T4",
        "category": TestCategory.THYROID,
        "unit": "µg/dL",
        "range": (5.0, 12.0),
        "aliases": ["thyroxine", "total t4", "t4 total"],
        "description": "Thyroxine is the main thyroid hormone",
    },
    {
        "id": "T3",
        "name": "T3",
        "category": TestCategory.THYROID,
        "unit": "ng/dL",
        "range": (80.0, 200.0),
        "aliases": ["triiodothyronine", "total t3", "t3 total"],
        "description": "Triiodothyronine is an active thyroid hormone",
    },
    {
        "id": "FREE_T4",
        "name": "Free T4",
        "category": TestCategory.THYROID,
        "unit": "ng/dL",
        "range": (0.8, 1.8),
        "aliases": ["free t4", "ft4", "free thyroxine"],
        "description": "Free thyroxine measures available thyroid hormone",
    },
    {
        "id": "FREE_T3",
        "name": "Free T3",
        "category": TestCategory.THYROID,
        "unit": "pg/mL",
        "range": (2.3, 4.2),
        "aliases": ["free t3", "ft3", "free triiodothyronine"],
        "description": "Free triiodothyronine measures active thyroid hormone",
    },
    # Diabetes
    {
        "id": "HBA1C",
        "name": "HbA1c",
        "category": TestCategory.DIABETES,
        "unit": "%",
        "range": (None, 5.7),
        "aliases": ["hemoglobin a1c", "a1c", "hba1c", "glycated hemoglobin", "glycohemoglobin"],
        "description": "Hemoglobin A1c measures average blood sugar over 3 months",
    },
    {
        "id": "INSULIN",
        "name": "Insulin",
        "category": TestCategory.DIABETES,
        "unit": "µIU/mL",
        "range": (3.0, 25.0),
        "aliases": ["insulin", "fasting insulin"],
        "description": "Insulin regulates blood sugar levels",
    },
    {
        "id": "C_PEPTIDE",
        "name": "C-Peptide",
        "category": TestCategory.DIABETES,
        "unit": "ng/mL",
        "range": (0.8, 3.1),
        "aliases": ["c-peptide", "c peptide"],
        "description": "C-peptide indicates insulin production",
    },
    # General
    {
        "id": "VITAMIN_D",
        "name": "Vitamin D, 25-Hydroxy",
        "category": TestCategory.GENERAL,
        "unit": "ng/mL",
        "range": (30.0, 100.0),
        "aliases": ["vitamin d", "25-oh vitamin d", "vitamin d 25-hydroxy", "25-hydroxyvitamin d"],
        "description": "Vitamin D status for bone and immune health",
    },
    {
        "id": "URINE_COLOR",
        "name": "Urine Color",
        "category": TestCategory.GENERAL,
        "unit": "",
        "range": None,
        "aliases": ["urine color", "color, urine", "urine_color"],
        "description": "Qualitative appearance of the urine sample",
    },
]


def normalize_name(raw_name: str) -> str:
    """Case-fold and collapse whitespace; no other heuristics."""
    return " ".join(raw_name.split()).casefold()


def _build_entry(row: dict[str, Any]) -> CanonicalTest:
    bounds = row.get("range")
    reference = None
    if bounds is not None:
        low, high = bounds
        reference = ReferenceRange(low=low, high=high, unit=row.get("unit", ""))
    return CanonicalTest(
        id=row["id"],
        display_name=row["name"],
        category=row["category"],
        unit=row.get("unit", ""),
        reference_range=reference,
        aliases=frozenset(normalize_name(a) for a in row.get("aliases", [])),
        description=row.get("description", ""),
    )


class TestCatalog:
    """
    Read-only registry of canonical tests.

    Lookup keys are normalized once at construction; resolution tries the exact
    id first and then the alias index.
    """

    __test__ = False

    def __init__(self, entries: Iterable[CanonicalTest]) -> None:
        self._by_id: dict[str, CanonicalTest] = {}
        self._by_alias: dict[str, CanonicalTest] = {}

        for entry in entries:
            id_key = normalize_name(entry.id)
            if id_key in self._by_id:
                raise CatalogError(f"Duplicate canonical id: {entry.id}")
            self._by_id[id_key] = entry

        for entry in self._by_id.values():
            for alias in entry.aliases | {normalize_name(entry.display_name)}:
                owner = self._by_alias.get(alias)
                if owner is not None and owner.id != entry.id:
                    raise CatalogError(
                        f"Alias {alias!r} claimed by both {owner.id} and {entry.id}"
                    )
                self._by_alias[alias] = entry

    @classmethod
    def from_table(cls, rows: Iterable[dict[str, Any]]) -> "TestCatalog":
        return cls(_build_entry(row) for row in rows)

    def resolve(self, raw_name: str | None) -> CanonicalTest | None:
        """Resolve a free-text name to its canonical entry, or None."""
        if not raw_name:
            return None
        key = normalize_name(raw_name)
        if not key:
            return None
        entry = self._by_id.get(key) or self._by_alias.get(key)
        if entry is None:
            logger.debug("test_name_unresolved", raw_name=raw_name)
        return entry

    def get(self, test_id: str) -> CanonicalTest | None:
        return self._by_id.get(normalize_name(test_id))

    def range_for(self, test_id: str) -> tuple[float | None, float | None] | None:
        entry = self.get(test_id)
        if entry is None or entry.reference_range is None:
            return None
        return entry.reference_range.bounds

    def unit_for(self, test_id: str) -> str:
        entry = self.get(test_id)
        return entry.unit if entry else ""

    def by_category(self, category: TestCategory) -> list[CanonicalTest]:
        return [entry for entry in self._by_id.values() if entry.category == category]

    def __iter__(self) -> Iterator[CanonicalTest]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def __contains__(self, test_id: object) -> bool:
        return isinstance(test_id, str) and normalize_name(test_id) in self._by_id


@lru_cache
def default_catalog() -> TestCatalog:
    """The process-wide catalog, built once from the static table."""
    catalog = TestCatalog.from_table(_CATALOG_TABLE)
    logger.debug("catalog_loaded", entries=len(catalog))
    return catalog
