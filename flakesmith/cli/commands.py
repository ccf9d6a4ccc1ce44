"""Command handlers for the flakesmith CLI.

Each handler takes the parsed arguments it needs and returns a process exit
code (0 on success, 1 on failure). Handlers catch the errors they expect,
print a one-line `Error: ...` to stderr and leave no partial output behind.

The async handlers are driven by asyncio.run() from cli/app.py.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from flakesmith import __version__
from flakesmith.config import get_settings
from flakesmith.nix_gen.discovery import (
    PackageDiscoveryError,
    discover_python_packages,
    write_package_list,
)
from flakesmith.nix_gen.packages import BUNDLED_PYTHON_PACKAGES_FILE
from flakesmith.tools.script import ScriptExecutionError, execute_flake_script

logger = logging.getLogger(__name__)

SCRIPT_SUFFIXES = (".py",)
OUTPUT_SUFFIX = ".nix"
DEFAULT_TEMPLATE_NAME = "flake.py"

TEMPLATE = '''\
from flakesmith import FlakeBuilder

# Create a basic flake with a development shell
flake = (
    FlakeBuilder()
    .with_description("My Nix flake built with flakesmith")
    .with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")
    .add_dev_shell(
        "default",
        lambda shell: shell.with_packages(["git", "nodejs", "python3"]).with_python_packages(
            ["numpy", "pandas"]
        ),
    )
    .build()
)

# Output the generated flake
print(flake)
'''


def _error(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def default_output_path(script: Path) -> Path:
    """Return the output path for a script: same directory, `.nix` suffix."""
    return script.with_suffix(OUTPUT_SUFFIX)


async def build_flake(input_file: str, output_file: str | None = None) -> int:
    """Run a flake script and write its output to a `.nix` file.

    Args:
        input_file: Path to the flake script (relative to the working directory).
        output_file: Explicit output path. Defaults to the script path with
            `.py` replaced by `.nix`.
    """
    script = Path(input_file).resolve()

    if not script.exists():
        return _error(f"Input file not found: {input_file}")

    if script.suffix not in SCRIPT_SUFFIXES:
        return _error("Input file must be a Python file (.py)")

    print(f"Building Nix flake from: {input_file}")

    try:
        output = await execute_flake_script(script)
    except (ScriptExecutionError, TimeoutError) as e:
        logger.error("Building %s failed: %s", script, e)
        return _error(f"Building flake failed:\n{e}")

    if not output:
        return _error(
            "No output generated. Make sure your script prints the flake, "
            "e.g. print(flake.build())"
        )

    destination = Path(output_file) if output_file else default_output_path(script)
    try:
        destination.write_text(output + "\n", encoding="utf-8")
    except OSError as e:
        return _error(f"Failed to write {destination}: {e}")

    print(f"✓ Generated: {destination}")
    return 0


def init_template(output_file: str | None = None) -> int:
    """Write a starter flake script, refusing to overwrite an existing file."""
    file_name = output_file or DEFAULT_TEMPLATE_NAME
    destination = Path(file_name).resolve()

    if destination.exists():
        print(f"Error: File already exists: {file_name}", file=sys.stderr)
        print("Please choose a different name or remove the existing file.", file=sys.stderr)
        return 1

    destination.write_text(TEMPLATE, encoding="utf-8")
    print(f"✓ Created template: {file_name}")
    print("\nNext steps:")
    print(f"  1. Edit {file_name} to customize your flake")
    print(f"  2. Run: flakesmith build {file_name}")
    print("  3. Use the generated .nix file with: nix develop")
    return 0


async def refresh_packages(output_file: str | None = None) -> int:
    """Regenerate the Python package allow-list from nixpkgs.

    Writes to output_file, else FLAKESMITH_PYTHON_PACKAGES_FILE, else the
    bundled data file.
    """
    destination = Path(
        output_file or get_settings().python_packages_file or BUNDLED_PYTHON_PACKAGES_FILE
    )

    try:
        packages = await discover_python_packages()
    except (PackageDiscoveryError, TimeoutError, FileNotFoundError) as e:
        logger.error("Package discovery failed: %s", e)
        return _error(f"Package discovery failed: {e}")

    if not packages:
        return _error("Package discovery returned no packages; keeping the existing list.")

    write_package_list(packages, destination)
    print(f"✓ Wrote {len(packages)} Python packages to {destination}")
    return 0


def print_version() -> int:
    print(f"flakesmith v{__version__}")
    return 0
