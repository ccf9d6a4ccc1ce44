"""flakesmith — a fluent Python DSL that generates Nix flakes.

Public API:
  FlakeBuilder        — top-level flake (inputs, description, outputs)
  DevShellBuilder     — one `pkgs.mkShell` development shell
  HomeManagerBuilder  — one home-manager user configuration
  to_nix_value        — serialize plain Python values to Nix syntax

Typical usage:
    from flakesmith import FlakeBuilder

    flake = (
        FlakeBuilder()
        .with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")
        .add_dev_shell("default", lambda shell: shell.with_packages(["git"]))
        .build()
    )
    print(flake)
"""

from flakesmith.nix_gen.devshell import DevShellBuilder
from flakesmith.nix_gen.flake import FlakeBuilder
from flakesmith.nix_gen.home_manager import HomeManagerBuilder
from flakesmith.nix_gen.packages import (
    InvalidPackagesError,
    PackageAllowList,
    PackageSet,
    load_python_packages,
    validate_python_packages,
)
from flakesmith.nix_gen.serializer import to_nix_value

__version__ = "0.1.0"

__all__ = [
    "DevShellBuilder",
    "FlakeBuilder",
    "HomeManagerBuilder",
    "InvalidPackagesError",
    "PackageAllowList",
    "PackageSet",
    "__version__",
    "load_python_packages",
    "to_nix_value",
    "validate_python_packages",
]
