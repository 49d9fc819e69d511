"""
Command-line interface using Typer and Rich.

Provides:
- ``run``: generate the metrics report of a solution or project
- ``script``: write the SourceMonitor command file without launching it
- ``version`` and ``config``: inspect the installation
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.config import Settings, settings
from ..core.exceptions import MetricsError
from ..core.logging import configure_logging, get_logger
from ..domain.models import MetricsRun, OutputPaths
from ..services.outputs import compute_output_paths
from ..services.runner import MetricsRunner
from ..services.script import CommandScriptGenerator
from ..services.targets import AnalysisTarget, SingleProjectTarget, SolutionTarget
from ..services.workspace import PROJECT_FILE_SUFFIXES, load_project, load_workspace

app = typer.Typer(
    name="dotnet-metrics",
    help="SourceMonitor metrics for .NET solutions and projects",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
logger = get_logger(__name__)

PathArgument = Annotated[
    Path,
    typer.Argument(
        help="Solution (.sln), workspace description (.json) or project file (.csproj)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
]
SourceDirOption = Annotated[
    Optional[Path],
    typer.Option("--source-dir", "-s", help="Analysis root (defaults to the solution directory)"),
]
ReportDirOption = Annotated[
    Optional[Path],
    typer.Option("--report-dir", "-o", help="Directory receiving the report and command file"),
]
SkipOption = Annotated[
    Optional[str],
    typer.Option("--skip", help="Comma-separated names of projects to exclude"),
]
ExcludeExtOption = Annotated[
    Optional[list[str]],
    typer.Option("--exclude-ext", "-x", help="Glob of generated files to exclude (repeatable)"),
]
CheckpointOption = Annotated[
    Optional[str],
    typer.Option("--checkpoint", "-c", help="Checkpoint label, usually the build version"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose logging"),
]


def build_target(path: Path, run_settings: Settings) -> AnalysisTarget:
    """Pick the target matching the kind of ``path``."""
    if path.suffix.lower() in PROJECT_FILE_SUFFIXES:
        return SingleProjectTarget(load_project(path, run_settings.test_project_globs))
    return SolutionTarget(load_workspace(path, run_settings.test_project_globs))


def print_exclusions(exclusions: tuple[str, ...]) -> None:
    """Display the excluded directories."""
    table = Table(
        title="Excluded directories",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
        border_style="cyan",
    )
    table.add_column("#", justify="right", style="dim", width=4)
    table.add_column("Directory", style="yellow")

    for index, directory in enumerate(exclusions, start=1):
        table.add_row(str(index), directory)
    if not exclusions:
        table.add_row("-", "(none)", style="dim")

    console.print(table)


def print_run(run: MetricsRun) -> None:
    """Display the outcome of a run."""
    text = Text()
    text.append(f"{run.kind.value.title()}: {run.target_name}\n", style="bold blue")
    text.append(f"State: {run.state.value}\n", style="green" if run.succeeded else "red")
    if run.outputs:
        text.append(f"Report: {run.outputs.report}\n", style="cyan")
        text.append(f"Project file: {run.outputs.project_state}\n", style="cyan")
    if run.duration_seconds is not None:
        text.append(f"Duration: {run.duration_seconds:.1f}s", style="dim")
    console.print(Panel(text, title="Metrics", border_style="blue", expand=False))


def _settings_for(
    *,
    source_dir: Path | None,
    report_dir: Path | None,
    skip: str | None,
    exclude_ext: list[str] | None,
    checkpoint: str | None,
    verbose: bool,
    **extra: object,
) -> Settings:
    run_settings = settings.with_overrides(
        metrics_src_directory=source_dir,
        report_directory=report_dir,
        skipped_projects=skip,
        excluded_extensions=exclude_ext or None,
        checkpoint_label=checkpoint,
        log_level="DEBUG" if verbose else None,
        **extra,
    )
    if verbose:
        configure_logging(run_settings)
    return run_settings


@app.command()
def run(
    path: PathArgument,
    source_dir: SourceDirOption = None,
    report_dir: ReportDirOption = None,
    report_name: Annotated[
        Optional[str],
        typer.Option("--report-name", help="File name of the metrics report"),
    ] = None,
    sourcemonitor_dir: Annotated[
        Optional[Path],
        typer.Option("--sourcemonitor-dir", help="SourceMonitor installation directory"),
    ] = None,
    executable: Annotated[
        Optional[str],
        typer.Option("--executable", help="SourceMonitor executable file name"),
    ] = None,
    skip: SkipOption = None,
    exclude_ext: ExcludeExtOption = None,
    checkpoint: CheckpointOption = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Generate the SourceMonitor metrics report.

    Solutions are analysed from their root directory with test and skipped
    projects excluded; project files are analysed on their own.
    """
    try:
        run_settings = _settings_for(
            source_dir=source_dir,
            report_dir=report_dir,
            skip=skip,
            exclude_ext=exclude_ext,
            checkpoint=checkpoint,
            verbose=verbose,
            metrics_report_file_name=report_name,
            sourcemonitor_directory=sourcemonitor_dir,
            sourcemonitor_executable=executable,
        )
        target = build_target(path, run_settings)
        console.print(f"\n[cyan]Analyzing {target.kind.value}:[/cyan] {target.name}")

        with console.status("[cyan]Running SourceMonitor...", spinner="dots"):
            result = MetricsRunner(run_settings).run(target)

        print_exclusions(result.excluded_directories)
        print_run(result)
        console.print("[green]Metrics generated![/green]")

    except MetricsError as e:
        console.print(f"\n[red]Metrics generation failed:[/red] {e.message}")
        if verbose and e.context:
            console.print(f"[dim]Context: {e.context}[/dim]")
        logger.error("metrics_command_failed", error=str(e))
        raise typer.Exit(1)


@app.command()
def script(
    path: PathArgument,
    source_dir: SourceDirOption = None,
    report_dir: ReportDirOption = None,
    skip: SkipOption = None,
    exclude_ext: ExcludeExtOption = None,
    checkpoint: CheckpointOption = None,
    output: Annotated[
        Optional[Path],
        typer.Option("--output", help="Command file path (defaults to the report directory)"),
    ] = None,
    verbose: VerboseOption = False,
) -> None:
    """
    Write the SourceMonitor command file without running SourceMonitor.

    Existing reports are left untouched.
    """
    try:
        run_settings = _settings_for(
            source_dir=source_dir,
            report_dir=report_dir,
            skip=skip,
            exclude_ext=exclude_ext,
            checkpoint=checkpoint,
            verbose=verbose,
        )
        target = build_target(path, run_settings)
        outputs: OutputPaths = compute_output_paths(
            run_settings.report_directory, run_settings.metrics_report_file_name
        )
        exclusions = target.resolve_exclusions(run_settings)
        command_script = target.build_script(
            run_settings, outputs, exclusions, run_settings.report_directory
        )
        destination = output or run_settings.report_directory / run_settings.command_file_name
        CommandScriptGenerator().write(command_script, destination)

        print_exclusions(exclusions)
        console.print(f"[green]Command file written to:[/green] {destination}")

    except MetricsError as e:
        console.print(f"\n[red]Command file generation failed:[/red] {e.message}")
        if verbose and e.context:
            console.print(f"[dim]Context: {e.context}[/dim]")
        logger.error("script_command_failed", error=str(e))
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Display version information."""
    version_text = Text()
    version_text.append(f"{settings.app_name}\n", style="bold blue")
    version_text.append(f"Version: {settings.app_version}\n", style="green")
    version_text.append(f"Environment: {settings.environment}\n", style="yellow")
    version_text.append(f"Executable: {settings.sourcemonitor_executable}", style="cyan")

    console.print(Panel(version_text, border_style="blue"))


@app.command()
def config() -> None:
    """Display current configuration."""
    config_table = Table(
        title="Current Configuration",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="yellow")
    config_table.add_column("Value", style="green")

    config_items = [
        ("SourceMonitor Directory", settings.sourcemonitor_directory or "(bundled)"),
        ("SourceMonitor Executable", settings.sourcemonitor_executable),
        ("Source Directory", settings.metrics_src_directory or "(solution directory)"),
        ("Report Directory", settings.report_directory),
        ("Report File", settings.metrics_report_file_name),
        ("Excluded Extensions", ", ".join(settings.excluded_extensions) or "(none)"),
        ("Skipped Projects", settings.skipped_projects or "(none)"),
        ("Test Project Pattern", settings.test_project_pattern),
        ("Checkpoint", settings.checkpoint_label or "(unset)"),
        ("Log Level", settings.log_level),
    ]

    for key, value in config_items:
        config_table.add_row(key, str(value))

    console.print(config_table)


def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
