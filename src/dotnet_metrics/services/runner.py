"""
Metrics run orchestration.

Drives one SourceMonitor invocation per target:
1. Executable resolution
2. Output path computation and stale output deletion
3. Exclusion resolution
4. Command script generation
5. SourceMonitor launch

Concurrent runs writing the same report path must be serialized by the
caller; no locking happens here.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone

import structlog

from ..core.config import Settings
from ..core.exceptions import MetricsError
from ..core.logging import LoggerMixin
from ..domain.models import MetricsRun, RunState
from .launcher import BundledToolExtractor, ProcessLauncher, ToolExtractor, resolve_executable
from .outputs import compute_output_paths, delete_outputs
from .script import CommandScriptGenerator
from .targets import AnalysisTarget

LAUNCH_LABEL = "Metrics"


class MetricsRunner(LoggerMixin):
    """Runs SourceMonitor against solutions and projects."""

    def __init__(
        self,
        settings: Settings,
        *,
        launcher: ProcessLauncher | None = None,
        extractor: ToolExtractor | None = None,
        generator: CommandScriptGenerator | None = None,
    ) -> None:
        """
        Initialize the runner.

        Args:
            settings: Immutable configuration of every run
            launcher: Process launcher (built from settings if None)
            extractor: Bundled runtime extractor (package resources if None)
            generator: Command script generator
        """
        self.settings = settings
        self.launcher = launcher or ProcessLauncher.from_settings(settings)
        self.extractor = extractor or BundledToolExtractor(settings.runtime_directory)
        self.generator = generator or CommandScriptGenerator()

    def run(self, target: AnalysisTarget) -> MetricsRun:
        """
        Generate the metrics report of ``target``.

        Returns:
            The completed run record

        Raises:
            MetricsError: Any failure of the run, after it was logged
        """
        run = MetricsRun(target_name=target.name, kind=target.kind, label=LAUNCH_LABEL)
        self._execute(target, run)
        return run

    def run_all(
        self,
        targets: Iterable[AnalysisTarget],
        *,
        continue_on_error: bool = False,
    ) -> list[MetricsRun]:
        """
        Run every target in order.

        Args:
            targets: Targets to analyse
            continue_on_error: Record a failed target and move on instead of raising

        Returns:
            One run record per attempted target
        """
        runs: list[MetricsRun] = []
        for target in targets:
            run = MetricsRun(target_name=target.name, kind=target.kind, label=LAUNCH_LABEL)
            runs.append(run)
            try:
                self._execute(target, run)
            except MetricsError:
                if not continue_on_error:
                    raise
        return runs

    def _execute(self, target: AnalysisTarget, run: MetricsRun) -> None:
        log = self.logger.bind(target=target.name, kind=target.kind.value)

        try:
            executable = resolve_executable(self.settings, self.extractor)

            outputs = compute_output_paths(
                self.settings.report_directory, self.settings.metrics_report_file_name
            )
            run.outputs = outputs
            delete_outputs(*outputs.as_tuple(), strict=self.settings.fail_on_stale_output)

            exclusions = target.resolve_exclusions(self.settings)
            run.excluded_directories = exclusions
            for directory in exclusions:
                log.debug("excluding_directory", directory=directory)

            work_directory = self.settings.report_directory
            script = target.build_script(self.settings, outputs, exclusions, work_directory)
            run.script_path = self.generator.write(
                script, work_directory / self.settings.command_file_name
            )
            self._transition(run, RunState.SCRIPT_WRITTEN, log)

            log.info("launching_metrics_generation")
            self._transition(run, RunState.LAUNCHED, log)
            self.launcher.launch(
                executable,
                ["/C", str(run.script_path)],
                run.label,
                attempts=self.settings.launch_attempts,
            )
        except MetricsError as e:
            run.error = str(e)
            self._transition(run, RunState.FAILED, log)
            log.error("metrics_generation_failed", error=str(e))
            raise

        self._transition(run, RunState.COMPLETED, log)
        log.info("metrics_generated", report=str(outputs.report))

    def _transition(
        self,
        run: MetricsRun,
        state: RunState,
        log: structlog.stdlib.BoundLogger,
    ) -> None:
        log.debug("run_state_changed", previous=run.state.value, state=state.value)
        run.state = state
        if run.is_complete:
            run.finished_at = datetime.now(timezone.utc)
