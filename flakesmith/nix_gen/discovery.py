"""Package discovery — queries python3Packages attribute names from nixpkgs.

The bundled allow-list (nix_gen/data/python-packages.json) is a snapshot.
`flakesmith refresh-packages` regenerates it by calling

    nix eval <nixpkgs_ref>#python3Packages --apply builtins.attrNames --json

and writing the sorted result. builtins.attrNames does not force the
package derivations, so the eval stays cheap apart from fetching nixpkgs.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path

import logfire

from flakesmith.config import get_settings
from flakesmith.tools.cli import CommandResult, run_command

logger = logging.getLogger(__name__)


class PackageDiscoveryError(Exception):
    """Raised when package discovery fails."""


async def run_nix_eval() -> CommandResult:
    """Run `nix eval <nixpkgs_ref>#python3Packages --apply builtins.attrNames --json`.

    Separated from discover_python_packages for testability — tests mock this function.
    """
    settings = get_settings()
    return await run_command(
        "nix",
        "eval",
        f"{settings.nixpkgs_ref}#python3Packages",
        "--apply",
        "builtins.attrNames",
        "--json",
        timeout_seconds=settings.nix_eval_timeout_seconds,
    )


async def discover_python_packages() -> list[str]:
    """Discover python3Packages attribute names from nixpkgs.

    Returns:
        Sorted list of package attribute names.

    Raises:
        PackageDiscoveryError: If nix eval fails, returns unparseable output,
            or returns an unexpected type.
    """
    with logfire.span("packages.discover", nixpkgs_ref=get_settings().nixpkgs_ref):
        result = await run_nix_eval()

        if result.returncode != 0:
            logfire.error("nix eval failed", returncode=result.returncode, stderr=result.stderr)
            raise PackageDiscoveryError(
                f"nix eval failed (exit {result.returncode}): {result.stderr}"
            )

        try:
            parsed = json.loads(result.stdout)
        except (json.JSONDecodeError, ValueError) as e:
            raise PackageDiscoveryError(f"Failed to parse nix eval output as JSON: {e}") from e

        if not isinstance(parsed, list):
            raise PackageDiscoveryError(
                f"Expected a list of package names, got {type(parsed).__name__}"
            )

        if not all(isinstance(name, str) for name in parsed):
            bad = [type(name).__name__ for name in parsed if not isinstance(name, str)]
            raise PackageDiscoveryError(
                f"Expected all package names to be strings, got: {', '.join(bad)}"
            )

        packages = sorted(parsed)
        logfire.info("Discovered {count} Python packages", count=len(packages))

    return packages


def write_package_list(names: Iterable[str], path: Path) -> Path:
    """Write package names as a sorted, deduplicated JSON list.

    Returns:
        The path written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(sorted(set(names)), indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote package list to %s", path)
    return path
