"""
Core configuration management using Pydantic V2 Settings.

This module provides type-safe, validated configuration management with support for:
- Environment variables
- .env file loading
- Runtime validation
- Immutable settings, overridden by building a new validated instance
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application-wide configuration with environment variable support.

    All settings can be overridden via environment variables or .env file.
    Instances are frozen: use :meth:`with_overrides` to derive a new one.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Application Configuration
    # ═══════════════════════════════════════════════════════════════════════
    app_name: str = Field(
        default="Dotnet Metrics",
        description="Application display name",
    )

    app_version: str = Field(
        default="1.0.0",
        description="Application version",
    )

    environment: Literal["development", "production", "testing"] = Field(
        default="development",
        description="Runtime environment",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # SourceMonitor Configuration
    # ═══════════════════════════════════════════════════════════════════════
    sourcemonitor_directory: Path | None = Field(
        default=None,
        description="Installation directory of SourceMonitor (extracted from the bundle if unset)",
    )

    sourcemonitor_executable: str = Field(
        default="SourceMonitor.exe",
        min_length=1,
        description="Simple file name of the SourceMonitor executable",
    )

    runtime_directory: Path = Field(
        default=Path("target"),
        description="Folder receiving the extracted SourceMonitor runtime",
    )

    project_language: str = Field(
        default="C#",
        description="Language declared in the SourceMonitor project",
    )

    source_extensions: str = Field(
        default="*.cs",
        description="Glob of the source files SourceMonitor analyses",
    )

    excluded_extensions: list[str] = Field(
        default_factory=lambda: ["*.Designer.cs"],
        description="Globs of generated files excluded from the metrics",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Workspace Configuration
    # ═══════════════════════════════════════════════════════════════════════
    metrics_src_directory: Path | None = Field(
        default=None,
        description="Analysis root; defaults to the workspace base directory",
    )

    skipped_projects: str | None = Field(
        default=None,
        description="Comma-separated names of projects excluded from the analysis",
    )

    test_project_pattern: str = Field(
        default="*.Tests;*Test",
        description="Semicolon-separated globs identifying test projects by name",
    )

    checkpoint_label: str | None = Field(
        default=None,
        description="Version label of the SourceMonitor checkpoint for this run",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Output Configuration
    # ═══════════════════════════════════════════════════════════════════════
    report_directory: Path = Field(
        default=Path("target"),
        description="Directory receiving the report and the command file",
    )

    metrics_report_file_name: str = Field(
        default="metrics-report.xml",
        min_length=1,
        description="File name of the generated metrics report",
    )

    command_file_name: str = Field(
        default="sourcemonitor-command.xml",
        min_length=1,
        description="File name of the generated SourceMonitor command script",
    )

    fail_on_stale_output: bool = Field(
        default=True,
        description="Abort the run when a previous report cannot be deleted",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Process Configuration
    # ═══════════════════════════════════════════════════════════════════════
    launch_timeout_seconds: int = Field(
        default=600,
        ge=1,
        le=86_400,
        description="Timeout of a single SourceMonitor launch in seconds",
    )

    launch_attempts: int = Field(
        default=1,
        ge=1,
        le=10,
        description="Number of launches allowed before the run is reported as failed",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Logging Configuration
    # ═══════════════════════════════════════════════════════════════════════
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file path",
    )

    # ═══════════════════════════════════════════════════════════════════════
    # Validators
    # ═══════════════════════════════════════════════════════════════════════
    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is uppercase."""
        return v.upper() if isinstance(v, str) else v

    @field_validator("excluded_extensions", mode="before")
    @classmethod
    def split_excluded_extensions(cls, v: Any) -> Any:
        """Accept a comma-separated string as well as a list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("checkpoint_label", "skipped_projects")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    # ═══════════════════════════════════════════════════════════════════════
    # Helper Methods
    # ═══════════════════════════════════════════════════════════════════════
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def test_project_globs(self) -> list[str]:
        """Split the test project pattern into individual globs."""
        return [glob.strip() for glob in self.test_project_pattern.split(";") if glob.strip()]

    def with_overrides(self, **changes: Any) -> Settings:
        """
        Build a new validated settings instance.

        ``None`` values are ignored so CLI options left unset keep the
        configured value.

        Raises:
            ConfigurationError: If an override fails validation
        """
        values = self.model_dump()
        values.update({key: value for key, value in changes.items() if value is not None})
        try:
            return type(self).model_validate(values)
        except ValidationError as e:
            raise ConfigurationError(
                "Invalid configuration override",
                fields=sorted(changes),
                error=str(e),
            ) from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Returns:
        Settings: Singleton settings object
    """
    return Settings()


# Convenience export
settings: Settings = get_settings()
