"""Python package allow-list — validates python3Packages attribute names.

Dev shells reference Python packages as `pkgs.python3Packages.<name>`.
A typo there only surfaces when `nix develop` evaluates the flake, so
DevShellBuilder checks names up front against a static list of known
attribute names bundled in nix_gen/data/python-packages.json.

The list is regenerated from nixpkgs by `flakesmith refresh-packages`
(see nix_gen/discovery.py). FLAKESMITH_PYTHON_PACKAGES_FILE points the
loader at a different file, e.g. one refreshed against a pinned nixpkgs.

Base packages and home-manager packages are deliberately not validated.

Results are cached by default since the data file does not change at
runtime. Call clear_cache() after swapping the file (tests do).
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Protocol

from flakesmith.config import get_settings

logger = logging.getLogger(__name__)

BUNDLED_PYTHON_PACKAGES_FILE = Path(__file__).parent / "data" / "python-packages.json"

# Module-level cache for the loaded allow-list.
# Populated on first call to load_python_packages(), cleared by clear_cache().
_cache: PackageSet | None = None


class PackageListError(Exception):
    """Raised when the package list file is missing or malformed."""


class InvalidPackagesError(ValueError):
    """Raised when package names are not present in the allow-list.

    Carries every offending name from a single call in `invalid`, in the
    order they were supplied.
    """

    def __init__(self, invalid: Iterable[str]) -> None:
        self.invalid = list(invalid)
        super().__init__(f"Invalid Python packages: {', '.join(self.invalid)}")


class PackageAllowList(Protocol):
    """Anything that can report which package names it does not know."""

    def filter_invalid(self, names: Iterable[str]) -> list[str]: ...


class PackageSet:
    """Immutable set of valid package attribute names."""

    def __init__(self, names: Iterable[str]) -> None:
        self._names = frozenset(names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._names))

    def __len__(self) -> int:
        return len(self._names)

    def filter_invalid(self, names: Iterable[str]) -> list[str]:
        """Return the names not in this set, in input order (duplicates kept)."""
        return [name for name in names if name not in self._names]

    @classmethod
    def from_file(cls, path: Path) -> PackageSet:
        """Load a JSON list of package names.

        Raises:
            PackageListError: If the file cannot be read, is not valid JSON,
                or is not a list of strings.
        """
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PackageListError(f"Failed to read package list {path}: {e}") from e

        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, ValueError) as e:
            raise PackageListError(f"Failed to parse package list {path} as JSON: {e}") from e

        if not isinstance(parsed, list):
            raise PackageListError(
                f"Expected a list of package names in {path}, got {type(parsed).__name__}"
            )

        if not all(isinstance(name, str) for name in parsed):
            bad = [type(name).__name__ for name in parsed if not isinstance(name, str)]
            raise PackageListError(
                f"Expected all package names in {path} to be strings, got: {', '.join(bad)}"
            )

        return cls(parsed)


def _resolve_packages_file() -> Path:
    """Return the configured package list path, falling back to the bundled file."""
    override = get_settings().python_packages_file
    if override:
        return Path(override)
    return BUNDLED_PYTHON_PACKAGES_FILE


def load_python_packages(*, use_cache: bool = True) -> PackageSet:
    """Load the Python package allow-list.

    Args:
        use_cache: If True (default), returns the set loaded by a previous
            call if available. Set to False to force a fresh read.

    Returns:
        The allow-list as a PackageSet.

    Raises:
        PackageListError: If the package list file is missing or malformed.
    """
    global _cache  # noqa: PLW0603

    if use_cache and _cache is not None:
        return _cache

    path = _resolve_packages_file()
    packages = PackageSet.from_file(path)
    logger.debug("Loaded %d Python package names from %s", len(packages), path)

    if use_cache:
        _cache = packages

    return packages


def validate_python_packages(names: Iterable[str]) -> list[str]:
    """Return the names not present in the default Python allow-list."""
    return load_python_packages().filter_invalid(names)


def clear_cache() -> None:
    """Clear the allow-list cache so the next load re-reads the file."""
    global _cache  # noqa: PLW0603
    _cache = None
