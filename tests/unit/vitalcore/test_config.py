"""
Tests for configuration management in `vitalcore/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level and format coercion to the expected Literals
- Trend, import and storage overrides
- get_config cache behavior
- Section validation (threshold ordering, debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from vitalcore.config import (
    DEFAULT_DATE_FORMATS,
    AppConfig,
    ImportConfig,
    StorageConfig,
    TrendConfig,
    get_config,
    load_config_from_env,
    print_config_summary,
    validate_config,
)


@pytest.fixture(autouse=True)
def clear_config_cache() -> Iterator[None]:
    """Ensure get_config cache is cleared before and after each test."""
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "ENVIRONMENT",
        "LOG_LEVEL",
        "LOG_FORMAT",
        "TREND_MIN_POINTS",
        "STORE_TIMEOUT_SECONDS",
        "IMPORT_DATE_FORMATS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_config_dev_defaults() -> None:
    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.logging.level == "INFO"
    assert config.trends.min_points == 3
    assert config.imports.date_formats == DEFAULT_DATE_FORMATS
    assert config.storage.operation_timeout_seconds == 5.0


def test_production_defaults_to_json_logging(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_log_format_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")
    monkeypatch.setenv("LOG_FORMAT", "console")

    config = load_config_from_env()

    assert config.environment == "staging"
    assert config.logging.format == "console"


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    config = load_config_from_env()
    assert config.logging.level == "INFO"

    # Known level should pass through
    monkeypatch.setenv("LOG_LEVEL", "error")
    config = load_config_from_env()
    assert config.logging.level == "ERROR"


def test_trend_and_storage_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TREND_MIN_POINTS", "5")
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "0.25")

    config = load_config_from_env()

    assert config.trends.min_points == 5
    assert config.storage.operation_timeout_seconds == 0.25


def test_import_date_formats_are_semicolon_separated(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("IMPORT_DATE_FORMATS", "%d.%m.%Y; %Y/%m/%d ;")

    config = load_config_from_env()

    assert config.imports.date_formats == ("%d.%m.%Y", "%Y/%m/%d")


def test_invalid_timeout_fails_fast(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STORE_TIMEOUT_SECONDS", "0")

    with pytest.raises(ValueError):
        load_config_from_env()


def test_get_config_cache() -> None:
    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


class TestSections:
    def test_trend_defaults_match_policy(self) -> None:
        config = TrendConfig()

        assert config.stable_threshold == 0.05
        assert config.change_threshold == 0.10
        assert config.stable_confidence == 0.8
        assert config.directional_confidence == 0.9
        assert config.fluctuating_confidence == 0.7
        assert config.zero_baseline_confidence_factor == 0.5

    def test_trend_thresholds_must_be_ordered(self) -> None:
        with pytest.raises(ValueError, match="stable_threshold"):
            TrendConfig(stable_threshold=0.2, change_threshold=0.1)

    def test_confidence_out_of_range_rejected(self) -> None:
        with pytest.raises(ValueError):
            TrendConfig(directional_confidence=1.5)

    def test_import_config_needs_a_format(self) -> None:
        with pytest.raises(ValueError):
            ImportConfig(date_formats=())

    def test_storage_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            StorageConfig(operation_timeout_seconds=-1.0)

    def test_app_config_debug_only_in_dev_validation(self) -> None:
        with pytest.raises(ValueError, match="debug mode is only allowed"):
            AppConfig(environment="production", debug=True)


class TestStartupHelpers:
    def test_validate_config_reports_environment(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "staging")

        validate_config()

        assert "staging environment" in capsys.readouterr().out

    def test_validate_config_reraises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TREND_MIN_POINTS", "0")

        with pytest.raises(ValueError):
            validate_config()

    def test_summary_lists_sections(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_config_summary()

        out = capsys.readouterr().out
        assert "TREND CONFIGURATION" in out
        assert "Minimum Points: 3" in out
        assert "Store Timeout: 5.0s" in out
