"""Flake builder — assembles a complete flake.nix from dev shells and home configurations.

This module is the single place where the flake scaffold (description,
inputs, outputs function) is written. Dev shells and home configurations
render their own fragments; FlakeBuilder places them.

Generated structure (dev shells and home configurations both present):

    {
      description = "My flake";
      inputs = {
        nixpkgs.url = "github:NixOS/nixpkgs/nixos-24.05";
        home-manager.url = "github:nix-community/home-manager/release-24.05";
      };

      outputs = { self, nixpkgs, home-manager }: let
        pkgs = import nixpkgs { system = "x86_64-linux"; };
      in {
        devShells.x86_64-linux = {
          default = pkgs.mkShell {
            buildInputs = [ pkgs.git ];
          };
        };

        homeConfigurations = {
          alice = home-manager.lib.homeManagerConfiguration {
            pkgs = nixpkgs.legacyPackages.x86_64-linux;
            modules = [
              {
                home.username = "alice";
                ...
              }
            ];
          };
        };
      };
    }

The outputs function only takes `home-manager` when at least one home
configuration exists, so a shells-only flake never requires that input.
A flake with neither renders `outputs = { self, nixpkgs }: {};`.

Dev shells are grouped by platform under devShells.<system>. A group on a
platform other than the flake's own system rebinds `pkgs` for that platform.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from flakesmith.config import get_settings
from flakesmith.nix_gen.devshell import DevShellBuilder
from flakesmith.nix_gen.home_manager import HomeManagerBuilder
from flakesmith.nix_gen.models import FlakeConfig
from flakesmith.nix_gen.packages import PackageAllowList
from flakesmith.nix_gen.serializer import nix_string


class FlakeBuilder:
    """Fluent builder for a flake.

    Dev shells and home configurations can be added three ways:

        flake.add_dev_shell("default", lambda s: s.with_packages(["git"]))   # returns flake
        shell = flake.begin_dev_shell("ml")                                  # returns shell
        flake.add_dev_shell_builder(DevShellBuilder("frontend"))            # attach existing

    Attached builders are held by reference — build() renders their
    current state, including changes made after they were attached.
    """

    def __init__(
        self,
        *,
        system: str | None = None,
        allow_list: PackageAllowList | None = None,
    ) -> None:
        self.system = system or get_settings().default_system
        self.description = ""
        self._inputs: dict[str, str] = {}
        self._dev_shells: list[DevShellBuilder] = []
        self._home_configurations: list[HomeManagerBuilder] = []
        self._allow_list = allow_list

    @property
    def inputs(self) -> dict[str, str]:
        return dict(self._inputs)

    @property
    def dev_shells(self) -> list[DevShellBuilder]:
        return list(self._dev_shells)

    @property
    def home_configurations(self) -> list[HomeManagerBuilder]:
        return list(self._home_configurations)

    # ── Top-level attributes ────────────────────────────────────────────────

    def with_input(self, name: str, url: str) -> FlakeBuilder:
        """Declare a flake input. A repeated name replaces the earlier URL."""
        self._inputs[name] = url
        return self

    def with_description(self, description: str) -> FlakeBuilder:
        self.description = description
        return self

    # ── Dev shells ──────────────────────────────────────────────────────────

    def begin_dev_shell(self, name: str) -> DevShellBuilder:
        """Add a dev shell and return its builder for further configuration."""
        builder = DevShellBuilder(name, allow_list=self._allow_list)
        self._dev_shells.append(builder)
        return builder

    def add_dev_shell(self, name: str, configure: Callable[[DevShellBuilder], Any]) -> FlakeBuilder:
        """Add a dev shell configured by a callback and return the flake."""
        configure(self.begin_dev_shell(name))
        return self

    def add_dev_shell_builder(self, builder: DevShellBuilder) -> FlakeBuilder:
        """Attach a pre-built dev shell (held by reference)."""
        self._dev_shells.append(builder)
        return self

    # ── Home configurations ─────────────────────────────────────────────────

    def begin_home_configuration(self, username: str) -> HomeManagerBuilder:
        """Add a home configuration and return its builder for further configuration."""
        builder = HomeManagerBuilder(username)
        self._home_configurations.append(builder)
        return builder

    def add_home_configuration(
        self, username: str, configure: Callable[[HomeManagerBuilder], Any]
    ) -> FlakeBuilder:
        """Add a home configuration configured by a callback and return the flake."""
        configure(self.begin_home_configuration(username))
        return self

    def add_home_configuration_builder(self, builder: HomeManagerBuilder) -> FlakeBuilder:
        """Attach a pre-built home configuration (held by reference)."""
        self._home_configurations.append(builder)
        return self

    # ── Output ──────────────────────────────────────────────────────────────

    def build_ast(self) -> FlakeConfig:
        return FlakeConfig(
            description=self.description,
            system=self.system,
            inputs=self.inputs,
            dev_shells=[shell.build_ast() for shell in self._dev_shells],
            home_configurations=[home.build_ast() for home in self._home_configurations],
        )

    def _render_dev_shells(self) -> str:
        """Render devShells.<system> blocks, one per platform in first-seen order."""
        groups: dict[str, list[DevShellBuilder]] = {}
        for shell in self._dev_shells:
            groups.setdefault(shell.system, []).append(shell)

        blocks = []
        for system, shells in groups.items():
            body = "\n".join(shell.to_nix() for shell in shells)
            if system == self.system:
                blocks.append(f"    devShells.{system} = {{\n{body}\n    }};")
            else:
                blocks.append(
                    f"    devShells.{system} = let\n"
                    f"      pkgs = import nixpkgs {{ system = {nix_string(system)}; }};\n"
                    f"    in {{\n{body}\n    }};"
                )
        return "\n".join(blocks)

    def _render_home_configuration(self, home: HomeManagerBuilder) -> str:
        modules = "".join(f"        {module}\n" for module in home.modules)
        return f"""\
      {home.username} = home-manager.lib.homeManagerConfiguration {{
        pkgs = nixpkgs.legacyPackages.{self.system};
        modules = [
{modules}          {{
{home.to_nix()}
          }}
        ];
      }};"""

    def _render_outputs(self) -> str:
        has_dev_shells = bool(self._dev_shells)
        has_home_configs = bool(self._home_configurations)

        if not has_dev_shells and not has_home_configs:
            return "  outputs = { self, nixpkgs }: {};"

        sections = []
        if has_dev_shells:
            sections.append(self._render_dev_shells())
        if has_home_configs:
            homes = "\n".join(self._render_home_configuration(h) for h in self._home_configurations)
            sections.append(f"    homeConfigurations = {{\n{homes}\n    }};")

        args = "{ self, nixpkgs, home-manager }" if has_home_configs else "{ self, nixpkgs }"
        body = "\n\n".join(sections)
        return f"""\
  outputs = {args}: let
    pkgs = import nixpkgs {{ system = {nix_string(self.system)}; }};
  in {{
{body}
  }};"""

    def build(self) -> str:
        """Render the flake to Nix source text.

        Reads the current state of every attached builder and mutates
        nothing, so repeated calls return identical text.
        """
        input_lines = "".join(
            f"    {name}.url = {nix_string(url)};\n" for name, url in self._inputs.items()
        )

        return f"""\
{{
  description = {nix_string(self.description)};
  inputs = {{
{input_lines}  }};

{self._render_outputs()}
}}"""
