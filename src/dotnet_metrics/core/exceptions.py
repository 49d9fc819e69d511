"""
Custom exception hierarchy for the metrics runner.

Provides domain-specific exceptions with rich error context.
"""

from __future__ import annotations

from typing import Any


class MetricsError(Exception):
    """Base exception for all metrics runner errors."""

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize exception with message and context.

        Args:
            message: Human-readable error message
            **context: Additional error context for logging
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return formatted error message."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigurationError(MetricsError):
    """Raised when configuration is invalid."""


class WorkspaceError(MetricsError):
    """Raised when a solution or workspace description cannot be loaded."""


class PathResolutionError(MetricsError):
    """Raised when a directory cannot be expressed relative to the analysis root."""


class MalformedScriptError(MetricsError):
    """Raised when a command script lacks required fields."""


class ScriptWriteError(MetricsError):
    """Raised when the command script cannot be written to disk."""


class OutputCleanupError(MetricsError):
    """Raised when a stale report survives the deletion attempt."""


class ToolNotFoundError(MetricsError):
    """Raised when the SourceMonitor executable cannot be located."""


class ExternalToolExecutionError(MetricsError):
    """Raised when the external analyzer fails to run or exits with an error."""

    def __init__(
        self,
        message: str,
        *,
        label: str,
        exit_status: int | None = None,
        **context: Any,
    ) -> None:
        super().__init__(message, label=label, exit_status=exit_status, **context)
        self.label = label
        self.exit_status = exit_status
