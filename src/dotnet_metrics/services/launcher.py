"""
SourceMonitor executable resolution and process launching.

The executable is either taken from a configured installation directory or
extracted from the resources bundled with the package. Launches are blocking;
the exit status is the only success signal.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from importlib import resources
from importlib.resources.abc import Traversable
from pathlib import Path
from typing import Protocol

from ..core.config import Settings
from ..core.exceptions import ExternalToolExecutionError, ToolNotFoundError
from ..core.logging import LoggerMixin, get_logger

logger = get_logger(__name__)

RESOURCE_DIR = "metrics"
EXPORT_PATH = "sourcemonitor-runtime"
STDERR_TAIL_CHARS = 500

RunCommand = Callable[..., subprocess.CompletedProcess[str]]


class ToolExtractor(Protocol):
    """Materializes the bundled SourceMonitor runtime on disk."""

    def extract(self) -> Path: ...


class BundledToolExtractor:
    """Copies the ``resources/metrics`` folder of the package to a working folder."""

    def __init__(self, runtime_directory: Path, package: str = "dotnet_metrics") -> None:
        self.runtime_directory = runtime_directory
        self.package = package

    def extract(self) -> Path:
        source = resources.files(self.package) / "resources" / RESOURCE_DIR
        target = self.runtime_directory / EXPORT_PATH
        if not source.is_dir():
            raise ToolNotFoundError(
                "No bundled SourceMonitor runtime",
                resource=f"{self.package}/resources/{RESOURCE_DIR}",
            )
        try:
            _copy_tree(source, target)
        except OSError as e:
            raise ToolNotFoundError(
                "Cannot extract the bundled SourceMonitor runtime",
                target=str(target),
                error=str(e),
            ) from e
        logger.info("sourcemonitor_extracted", directory=str(target))
        return target


def _copy_tree(source: Traversable, target: Path) -> None:
    target.mkdir(parents=True, exist_ok=True)
    for entry in source.iterdir():
        destination = target / entry.name
        if entry.is_dir():
            _copy_tree(entry, destination)
        else:
            destination.write_bytes(entry.read_bytes())
            destination.chmod(0o755)


def check_executable(executable: Path) -> Path:
    """
    Ensure ``executable`` is an existing, executable file.

    Returns:
        The absolute path of the executable

    Raises:
        ToolNotFoundError: If the file is missing or not executable
    """
    if not executable.is_file() or not os.access(executable, os.X_OK):
        logger.error("sourcemonitor_not_found", executable=str(executable))
        logger.error(
            "sourcemonitor_configuration_hint",
            hint=(
                "Ensure SourceMonitor is installed and that SOURCEMONITOR_DIRECTORY "
                "and SOURCEMONITOR_EXECUTABLE point to it"
            ),
        )
        raise ToolNotFoundError(
            "Cannot find the SourceMonitor executable",
            executable=str(executable),
        )
    return executable.resolve()


def resolve_executable(settings: Settings, extractor: ToolExtractor) -> Path:
    """
    Locate the SourceMonitor executable.

    The extractor is only consulted when no installation directory is
    configured.

    Raises:
        ToolNotFoundError: If the executable is missing after resolution
    """
    directory = settings.sourcemonitor_directory
    if directory is None:
        directory = extractor.extract()
    return check_executable(directory / settings.sourcemonitor_executable)


@dataclass(frozen=True)
class LauncherDeps:
    run: RunCommand = field(default=subprocess.run)


class ProcessLauncher(LoggerMixin):
    """Runs an external tool and reports its failures."""

    def __init__(
        self,
        timeout_seconds: float | None = None,
        deps: LauncherDeps | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self.deps = deps or LauncherDeps()

    @classmethod
    def from_settings(cls, settings: Settings, deps: LauncherDeps | None = None) -> ProcessLauncher:
        return cls(timeout_seconds=settings.launch_timeout_seconds, deps=deps)

    def launch(
        self,
        executable: Path,
        arguments: Sequence[str],
        label: str,
        attempts: int = 1,
    ) -> subprocess.CompletedProcess[str]:
        """
        Run ``executable`` with ``arguments`` and wait for it.

        Args:
            executable: Tool to run
            arguments: Command-line arguments
            label: Name of the step, used in logs and errors
            attempts: Launches allowed before giving up

        Returns:
            The completed process of the successful launch

        Raises:
            ToolNotFoundError: If the executable is missing (never retried)
            ExternalToolExecutionError: If every launch failed; the cause is
                the last ``CalledProcessError``, ``TimeoutExpired`` or ``OSError``
        """
        if attempts < 1:
            raise ValueError(f"attempts must be at least 1, got {attempts}")

        command = [str(check_executable(executable)), *arguments]
        attempt = 0
        while True:
            attempt += 1
            self.logger.info("launching_external_tool", label=label, command=command, attempt=attempt)
            try:
                completed = self.deps.run(
                    command,
                    capture_output=True,
                    text=True,
                    timeout=self.timeout_seconds,
                    check=False,
                )
            except subprocess.TimeoutExpired as e:
                error = ExternalToolExecutionError(
                    f"{label} timed out",
                    label=label,
                    timeout_seconds=self.timeout_seconds,
                )
                cause = e
            except OSError as e:
                error = ExternalToolExecutionError(
                    f"{label} could not be started",
                    label=label,
                    error=str(e),
                )
                cause = e
            else:
                if completed.returncode == 0:
                    self.logger.info("external_tool_completed", label=label, attempt=attempt)
                    return completed
                error = ExternalToolExecutionError(
                    f"{label} failed",
                    label=label,
                    exit_status=completed.returncode,
                    stderr=(completed.stderr or "")[-STDERR_TAIL_CHARS:].strip(),
                )
                cause = subprocess.CalledProcessError(
                    completed.returncode, command, completed.stdout, completed.stderr
                )
            self.logger.warning(
                "external_tool_attempt_failed", label=label, attempt=attempt, error=str(error)
            )
            if attempt >= attempts:
                raise error from cause
