"""
SourceMonitor command script generation.

Renders a :class:`CommandScript` through a Jinja2 template and writes it
all-or-nothing: the file only appears once it is complete.
"""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined

from ..core.exceptions import MalformedScriptError, ScriptWriteError
from ..core.logging import LoggerMixin
from ..domain.models import CommandScript
from .launcher import ProcessLauncher

TEMPLATE_NAME = "sourcemonitor-command.xml.j2"


def _create_environment() -> Environment:
    return Environment(
        loader=PackageLoader("dotnet_metrics", "templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


class CommandScriptGenerator(LoggerMixin):
    """Serializes command scripts into files SourceMonitor can execute."""

    def __init__(self, environment: Environment | None = None) -> None:
        self.environment = environment or _create_environment()

    def render(self, script: CommandScript) -> bytes:
        """
        Render the command file content.

        Args:
            script: Script to serialize

        Returns:
            UTF-8 encoded XML, identical for identical scripts

        Raises:
            MalformedScriptError: If a required field is missing
        """
        missing = script.missing_fields
        if missing:
            raise MalformedScriptError(
                "Command script is missing required fields",
                missing=", ".join(missing),
            )

        template = self.environment.get_template(TEMPLATE_NAME)
        return template.render(script=script).encode("utf-8")

    def write(self, script: CommandScript, path: Path) -> Path:
        """
        Render ``script`` and write it to ``path``.

        The content is written to a temporary file next to ``path`` and moved
        into place, so a failure never leaves a partial command file.

        Raises:
            MalformedScriptError: If a required field is missing (nothing is written)
            ScriptWriteError: If the file system refuses the write
        """
        content = self.render(script)

        temp_path: Path | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                delete=False, dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
            ) as tmp:
                temp_path = Path(tmp.name)
                tmp.write(content)
            temp_path.replace(path)
        except OSError as e:
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise ScriptWriteError(
                "Cannot write command script",
                path=str(path),
                error=str(e),
            ) from e

        self.logger.info(
            "command_script_written",
            path=str(path),
            excluded_directories=len(script.excluded_directories),
        )
        return path

    def generate_and_launch(
        self,
        script: CommandScript,
        path: Path,
        *,
        executable: Path,
        launcher: ProcessLauncher,
        label: str = "Metrics",
    ) -> subprocess.CompletedProcess[str]:
        """Write ``script`` and run SourceMonitor on it in one step."""
        command_file = self.write(script, path)
        return launcher.launch(executable, ["/C", str(command_file)], label)
