"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Trend and import policies are data, not constants buried in the engine
"""

import os
from functools import lru_cache
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%Y-%m-%d",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S%z",
    "%m/%d/%Y %H:%M",
)


class TrendConfig(BaseModel):
    """Direction thresholds and confidences for the trend engine."""

    min_points: int = Field(default=3, ge=1, description="Minimum series length for a trend")
    stable_threshold: float = Field(
        default=0.05, gt=0.0, description="|rate| below this is stable"
    )
    change_threshold: float = Field(
        default=0.10, gt=0.0, description="|rate| above this is a directional change"
    )
    stable_confidence: float = Field(default=0.8, ge=0.0, le=1.0)
    directional_confidence: float = Field(default=0.9, ge=0.0, le=1.0)
    fluctuating_confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    zero_baseline_confidence_factor: float = Field(
        default=0.5,
        ge=0.0,
        le=1.0,
        description="Confidence multiplier when the first value is zero",
    )

    @model_validator(mode="after")
    def thresholds_ordered(self) -> "TrendConfig":
        if self.stable_threshold > self.change_threshold:
            raise ValueError("stable_threshold must not exceed change_threshold")
        return self


class ImportConfig(BaseModel):
    """Lab report import settings."""

    date_formats: tuple[str, ...] = Field(
        default=DEFAULT_DATE_FORMATS,
        min_length=1,
        description="strptime formats tried in order for report and panel dates",
    )


class StorageConfig(BaseModel):
    """Caller-side policy for the persistence collaborator."""

    operation_timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="Timeout for each store call"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    trends: TrendConfig = Field(default_factory=TrendConfig)
    imports: ImportConfig = Field(default_factory=ImportConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _format_to_literal(val: str | None, debug: bool) -> Literal["json", "console"]:
        if val is None:
            return "console" if debug else "json"
        return "console" if val.strip().lower() == "console" else "json"

    def _parse_formats(val: str | None) -> tuple[str, ...]:
        if not val:
            return DEFAULT_DATE_FORMATS
        formats = tuple(f.strip() for f in val.split(";") if f.strip())
        return formats or DEFAULT_DATE_FORMATS

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    trend_config = TrendConfig(
        min_points=int(os.getenv("TREND_MIN_POINTS", "3")),
    )

    import_config = ImportConfig(
        date_formats=_parse_formats(os.getenv("IMPORT_DATE_FORMATS")),
    )

    storage_config = StorageConfig(
        operation_timeout_seconds=float(os.getenv("STORE_TIMEOUT_SECONDS", "5.0")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format=_format_to_literal(os.getenv("LOG_FORMAT"), debug),
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        trends=trend_config,
        imports=import_config,
        storage=storage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"Configuration loaded for {config.environment} environment")
    except Exception as e:
        print(f"Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\nCONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level} ({config.logging.format})")

    print("\nTREND CONFIGURATION")
    print(f"Minimum Points: {config.trends.min_points}")
    print(f"Stable Below: {config.trends.stable_threshold:.0%}")
    print(f"Directional Above: {config.trends.change_threshold:.0%}")

    print("\nIMPORT & STORAGE")
    print(f"Date Formats: {', '.join(config.imports.date_formats)}")
    print(f"Store Timeout: {config.storage.operation_timeout_seconds}s")


if __name__ == "__main__":
    validate_config()
    print_config_summary()
