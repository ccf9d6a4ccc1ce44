"""Subprocess helper shared by flake script runs and nixpkgs discovery.

Two external programs are ever launched: the Python interpreter that runs a
user's flake script, and `nix eval` when the package allow-list is refreshed.
Both go through run_command(), which returns a CommandResult instead of raw
bytes and kills the child if it outlives its timeout.

Output is decoded as UTF-8 with replacement characters, since a flake script
may print anything, and trimmed of surrounding whitespace so callers can
write it to disk or hand it to json.loads() directly.
"""

from __future__ import annotations

import asyncio
import logging
import shlex
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

# Script runs and `nix eval` pass their own timeouts from settings.
DEFAULT_TIMEOUT_SECONDS = 60


@dataclass
class CommandResult:
    """Exit status and trimmed output of one finished command."""

    stdout: str
    stderr: str
    returncode: int
    args: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        self.stdout = self.stdout.strip()
        self.stderr = self.stderr.strip()

    @property
    def success(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        """The argument vector as a shell-quoted string, for messages."""
        return shlex.join(self.args)


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace") if data else ""


async def run_command(
    *args: str,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    cwd: str | Path | None = None,
) -> CommandResult:
    """Launch `args` without a shell and wait for it to finish.

    Args:
        *args: Executable and its arguments, e.g. ("python3", "flake.py").
        timeout_seconds: Seconds to wait before the child is killed.
        cwd: Directory to run in. None keeps the caller's working directory.

    Raises:
        TimeoutError: The child ran past timeout_seconds. It has been killed
            and reaped before this is raised.
        FileNotFoundError: The executable is not on PATH.
    """
    logger.debug("Running %s (cwd=%s)", shlex.join(args), cwd)
    proc = await asyncio.create_subprocess_exec(
        *args,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=cwd,
    )

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout_seconds)
    except TimeoutError:
        proc.kill()
        await proc.wait()
        raise TimeoutError(
            f"Command timed out after {timeout_seconds}s: {shlex.join(args)}"
        ) from None

    return CommandResult(
        stdout=_decode(stdout),
        stderr=_decode(stderr),
        returncode=proc.returncode or 0,
        args=args,
    )
