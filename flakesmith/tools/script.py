"""Flake script execution — runs a user's Python script and captures the flake.

A flake script builds a FlakeBuilder and prints the result of build():

    print(FlakeBuilder().with_input("nixpkgs", "...").build())

`flakesmith build` runs the script with the configured interpreter, in the
script's own directory so relative imports and paths resolve, and takes
the script's stdout as the flake text.

Observability: each run is wrapped in a logfire.span() with the script
path and exit code.
"""

from __future__ import annotations

import logging
from pathlib import Path

import logfire

from flakesmith.config import get_settings
from flakesmith.tools.cli import CommandResult, run_command

logger = logging.getLogger(__name__)


class ScriptExecutionError(Exception):
    """Raised when a flake script exits non-zero or cannot be started."""


async def run_flake_script(path: Path) -> CommandResult:
    """Run the flake script with the configured interpreter.

    Separated from execute_flake_script for testability — tests mock this function.
    """
    settings = get_settings()
    return await run_command(
        settings.python_executable,
        str(path),
        timeout_seconds=settings.script_timeout_seconds,
        cwd=path.parent,
    )


async def execute_flake_script(path: Path) -> str:
    """Execute a flake script and return its (stripped) stdout.

    Args:
        path: Absolute path to the script.

    Returns:
        The script's stdout. May be empty; callers decide whether that is an error.

    Raises:
        ScriptExecutionError: If the interpreter is missing or the script exits non-zero.
        TimeoutError: If the script exceeds the configured timeout.
    """
    with logfire.span("script.execute", script=str(path)):
        try:
            result = await run_flake_script(path)
        except FileNotFoundError as e:
            raise ScriptExecutionError(f"Failed to execute flake script: {e}") from e

        if not result.success:
            logfire.error(
                "Flake script failed with code {returncode}",
                returncode=result.returncode,
                command=result.command,
                stderr=result.stderr,
            )
            raise ScriptExecutionError(
                f"Execution failed with code {result.returncode}:\n{result.stderr}"
            )

        if result.stderr:
            logger.warning("Flake script wrote to stderr: %s", result.stderr)

        logfire.info("Flake script produced {size} characters", size=len(result.stdout))
        return result.stdout
