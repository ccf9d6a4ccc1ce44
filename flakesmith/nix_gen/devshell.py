"""Dev shell builder — one `pkgs.mkShell` entry of a flake's devShells.

Generated block (as embedded by FlakeBuilder):

      default = pkgs.mkShell {
        buildInputs = [ pkgs.git pkgs.python3Packages.numpy ];
      };

Base packages come first, then Python packages, each group in the order it
was added. Neither group is deduplicated.

Python package names are checked against a PackageAllowList before they are
recorded; base package names are passed through untouched.
"""

from __future__ import annotations

from collections.abc import Iterable

from flakesmith.config import get_settings
from flakesmith.nix_gen.models import DevShellConfig
from flakesmith.nix_gen.packages import InvalidPackagesError, PackageAllowList, load_python_packages
from flakesmith.nix_gen.serializer import nix_list

PKGS_PREFIX = "pkgs."
PYTHON_PKGS_PREFIX = "pkgs.python3Packages."


def _as_names(pkgs: Iterable[str] | str) -> list[str]:
    # A bare string would otherwise be iterated character by character.
    if isinstance(pkgs, str):
        return [pkgs]
    return list(pkgs)


class DevShellBuilder:
    """Fluent builder for a single development shell.

    Every with_* method mutates the builder and returns it for chaining.
    A builder can be created standalone and attached to a FlakeBuilder
    later; the flake renders whatever state the builder has at build time.
    """

    def __init__(
        self,
        name: str,
        *,
        system: str | None = None,
        allow_list: PackageAllowList | None = None,
    ) -> None:
        self.name = name
        self.system = system or get_settings().default_system
        self.packages: list[str] = []
        self.python_packages: list[str] = []
        self._allow_list = allow_list

    @property
    def allow_list(self) -> PackageAllowList:
        """Allow-list used for Python packages (the bundled one by default)."""
        if self._allow_list is None:
            return load_python_packages()
        return self._allow_list

    def with_packages(self, pkgs: Iterable[str] | str) -> DevShellBuilder:
        self.packages.extend(_as_names(pkgs))
        return self

    def with_python_packages(self, pkgs: Iterable[str] | str) -> DevShellBuilder:
        """Append Python packages after validating every name.

        Raises:
            InvalidPackagesError: If any name is unknown. Nothing from this
                call is appended in that case.
        """
        names = _as_names(pkgs)
        invalid = self.allow_list.filter_invalid(names)
        if invalid:
            raise InvalidPackagesError(invalid)
        self.python_packages.extend(names)
        return self

    def with_system(self, system: str) -> DevShellBuilder:
        self.system = system
        return self

    def build_inputs(self) -> list[str]:
        """Package references in render order: base packages, then Python packages."""
        return [f"{PKGS_PREFIX}{p}" for p in self.packages] + [
            f"{PYTHON_PKGS_PREFIX}{p}" for p in self.python_packages
        ]

    def build_ast(self) -> DevShellConfig:
        return DevShellConfig(
            name=self.name,
            system=self.system,
            packages=list(self.packages),
            python_packages=list(self.python_packages),
        )

    def to_nix(self) -> str:
        """Render this shell as an attribute of a devShells.<system> set."""
        return f"""\
      {self.name} = pkgs.mkShell {{
        buildInputs = {nix_list(self.build_inputs())};
      }};"""
