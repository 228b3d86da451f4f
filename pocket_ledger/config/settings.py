"""
Configuration Management for Pocket Ledger

Uses pydantic-settings for type-safe configuration from environment variables.

All configuration is centralized here so that the storage location,
export target and calendar rules are visible in one place and are
validated before the ledger touches any data.
"""

import tempfile
from functools import cached_property, lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Durable key-value storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".pocket_ledger",
        description="Directory holding one JSON file per storage key"
    )
    storage_key: str = Field(
        default="expenses_data",
        min_length=1,
        description="Key under which the whole transaction collection is stored"
    )
    write_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made for a single key write before giving up"
    )

    @field_validator('storage_key')
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """Keys become file names, so path separators are not allowed."""
        if "/" in v or "\\" in v:
            raise ValueError(f"Storage key must not contain path separators: {v}")
        return v


class ExportSettings(BaseSettings):
    """Spreadsheet export configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_EXPORT_",
        extra="ignore"
    )

    cache_dir: Path = Field(
        default=Path(tempfile.gettempdir()),
        description="Where the encoded workbook is written before sharing"
    )
    file_name: str = Field(
        default="expenses.xlsx",
        description="File name of the exported workbook"
    )
    sheet_name: str = Field(
        default="Expenses",
        min_length=1,
        max_length=31,
        description="Title of the single worksheet"
    )
    share_dir: Path = Field(
        default=Path.home() / "Downloads",
        description="Target directory for the directory share sink"
    )

    @field_validator('file_name')
    @classmethod
    def validate_file_name(cls, v: str) -> str:
        if not v.lower().endswith(".xlsx"):
            raise ValueError(f"Export file must be an .xlsx file: {v}")
        return v


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum level for structured logs"
    )

    # Calendar rules for date presets
    week_starts_on: int = Field(
        default=6,
        ge=0,
        le=6,
        description="First day of the week (0=Monday ... 6=Sunday)"
    )


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are built on first access so a broken section
    # only fails the code path that needs it. They are then kept for
    # the life of this Settings instance.

    @cached_property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @cached_property
    def export(self) -> ExportSettings:
        return ExportSettings()

    @cached_property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = get_settings()

    sections = {
        "storage": lambda: settings.storage,
        "export": lambda: settings.export,
        "app": lambda: settings.app,
    }

    for name, load in sections.items():
        try:
            _ = load()
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
