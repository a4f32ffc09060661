"""Tests for the canonical test catalog."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from vitalcore.domain.errors import CatalogError
from vitalcore.domain.models import CanonicalTest, TestCategory
from vitalcore.services.catalog import TestCatalog, default_catalog, normalize_name

SAMPLE_REPORT_KEYS = [
    "wbc", "neutrophils_percent", "lymphs_percent", "monos_percent", "eos_percent",
    "basos_percent", "neutrophils_absolute", "lymphs_absolute", "monos_absolute",
    "eos_absolute", "basos_absolute", "rbc", "hgb", "hct", "mcv", "mch", "mchc", "rdw",
    "platelet_count", "mpv", "glucose", "urea_nitrogen", "creatinine", "egfr_creatinine",
    "sodium", "potassium", "chloride", "co2", "anion_gap", "calcium", "total_protein",
    "albumin", "ast",
]


@pytest.fixture
def catalog() -> TestCatalog:
    return default_catalog()


class TestResolve:
    def test_sgot_and_ast_resolve_to_same_entry(self, catalog: TestCatalog) -> None:
        assert catalog.resolve("SGOT") == catalog.resolve("AST")
        assert catalog.resolve("SGOT").id == "AST"

    def test_resolution_ignores_case_and_whitespace(self, catalog: TestCatalog) -> None:
        entry = catalog.resolve("  white   BLOOD cell count ")

        assert entry is not None
        assert entry.id == "WBC"

    def test_exact_id_resolves(self, catalog: TestCatalog) -> None:
        assert catalog.resolve("neut_abs").id == "NEUT_ABS"

    @pytest.mark.parametrize("key", SAMPLE_REPORT_KEYS)
    def test_sample_report_keys_resolve(self, catalog: TestCatalog, key: str) -> None:
        assert catalog.resolve(key) is not None

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("Urea Nitrogen (BUN)", "BUN"),
            ("eGFR - Creatinine", "EGFR"),
            ("Carbon Dioxide (CO2)", "CO2"),
            ("AST (Aspartate Aminotransferase)", "AST"),
            ("Neutrophils Percentage", "NEUT_PCT"),
            ("Neutrophils Absolute Count", "NEUT_ABS"),
            ("Hemoglobin A1c", "HBA1C"),
        ],
    )
    def test_human_readable_names_resolve(
        self, catalog: TestCatalog, name: str, expected: str
    ) -> None:
        assert catalog.resolve(name).id == expected

    def test_percent_and_absolute_variants_are_distinct(self, catalog: TestCatalog) -> None:
        percent = catalog.resolve("Neutrophils %")
        absolute = catalog.resolve("Neutrophils #")

        assert percent.id == "NEUT_PCT"
        assert absolute.id == "NEUT_ABS"
        assert percent.unit == "%"
        assert absolute.unit == "K/µL"

    def test_ambiguous_name_is_not_guessed(self, catalog: TestCatalog) -> None:
        assert catalog.resolve("Neutrophils") is None

    @pytest.mark.parametrize("name", ["", "   ", None, "Unobtainium Level"])
    def test_unknown_names_return_none(self, catalog: TestCatalog, name: str | None) -> None:
        assert catalog.resolve(name) is None

    @given(st.text(max_size=40))
    def test_resolve_never_raises(self, name: str) -> None:
        result = default_catalog().resolve(name)
        assert result is None or isinstance(result, CanonicalTest)


class TestLookups:
    def test_range_and_unit_for_known_id(self, catalog: TestCatalog) -> None:
        assert catalog.range_for("GLUCOSE") == (70.0, 100.0)
        assert catalog.unit_for("GLUCOSE") == "mg/dL"

    def test_one_sided_ranges(self, catalog: TestCatalog) -> None:
        assert catalog.range_for("LDL") == (None, 100.0)
        assert catalog.range_for("HDL") == (40.0, None)

    def test_qualitative_test_has_no_range(self, catalog: TestCatalog) -> None:
        assert "URINE_COLOR" in catalog
        assert catalog.range_for("URINE_COLOR") is None

    def test_unknown_id_lookups(self, catalog: TestCatalog) -> None:
        assert catalog.range_for("NOPE") is None
        assert catalog.unit_for("NOPE") == ""
        assert catalog.get("NOPE") is None

    def test_by_category(self, catalog: TestCatalog) -> None:
        lipids = {entry.id for entry in catalog.by_category(TestCategory.LIPID)}

        assert lipids == {"TOTAL_CHOLESTEROL", "HDL", "LDL", "TRIGLYCERIDES"}

    def test_every_panel_is_populated(self, catalog: TestCatalog) -> None:
        for category in TestCategory:
            assert catalog.by_category(category), category

    def test_iteration_and_length_agree(self, catalog: TestCatalog) -> None:
        assert len(list(catalog)) == len(catalog)
        assert all(entry.id in catalog for entry in catalog)

    def test_default_catalog_is_cached(self) -> None:
        assert default_catalog() is default_catalog()


class TestValidation:
    def _entry(self, test_id: str, *aliases: str) -> CanonicalTest:
        return CanonicalTest(
            id=test_id,
            display_name=test_id.title(),
            category=TestCategory.GENERAL,
            aliases=frozenset(normalize_name(a) for a in aliases),
        )

    def test_duplicate_alias_rejected(self) -> None:
        with pytest.raises(CatalogError, match="shared"):
            TestCatalog([self._entry("ONE", "shared"), self._entry("TWO", "shared")])

    def test_duplicate_id_rejected(self) -> None:
        with pytest.raises(CatalogError, match="Duplicate canonical id"):
            TestCatalog([self._entry("ONE"), self._entry("one")])

    def test_entries_are_immutable(self, catalog: TestCatalog) -> None:
        entry = catalog.get("AST")

        with pytest.raises(ValueError, match="frozen"):
            entry.unit = "mg/dL"  # type: ignore[misc]
