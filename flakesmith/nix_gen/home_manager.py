"""Home-manager builder — one user's home configuration inside a flake.

Generated body (as embedded by FlakeBuilder inside the module list of a
home-manager.lib.homeManagerConfiguration call):

    home.username = "alice";
    home.homeDirectory = "/home/alice";
    home.stateVersion = "24.05";
    home.packages = with pkgs; [ pkgs.git pkgs.tmux ];
    programs.git = {
      enable = true;
      userName = "Alice";
    };
    home.sessionVariables = {
      EDITOR = "nvim";
    };

Programs, services and extra `home.*` settings are freeform values rendered
with to_nix_value(), so any option home-manager accepts can be expressed
without this module knowing about it.

Values are deep-copied when they are stored. Later dotted-path writes
(set("programs.git.userName", ...)) therefore never mutate an object the
caller still holds.
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from flakesmith.config import get_settings
from flakesmith.nix_gen.models import HomeManagerConfig
from flakesmith.nix_gen.serializer import NixValue, nix_string, to_nix_value

# Indent level of a program/service/home value. The attribute line sits at
# four spaces, so the value's inner lines land at six.
_VALUE_INDENT = 2
_LINE_PAD = "    "


def _set_nested(target: dict[str, Any], parts: list[str], value: Any) -> None:
    """Assign value at the dotted path `parts` below target.

    Missing or non-mapping intermediate levels are replaced by fresh dicts.
    Sibling keys at every level are left alone.
    """
    current = target
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


class HomeManagerBuilder:
    """Fluent builder for a home-manager configuration.

    Every mutating method returns the builder for chaining. The username is
    fixed at construction.
    """

    def __init__(self, username: str, *, state_version: str | None = None) -> None:
        self._username = username
        self.home_directory: str | None = None
        self.state_version = state_version or get_settings().state_version
        self.packages: list[str] = []
        self.programs: dict[str, Any] = {}
        self.services: dict[str, Any] = {}
        self.home: dict[str, Any] = {}
        self._modules: list[str] = []

    @property
    def username(self) -> str:
        return self._username

    @property
    def modules(self) -> list[str]:
        """Custom module paths, in the order they were added."""
        return list(self._modules)

    # ── Scalar settings ─────────────────────────────────────────────────────

    def with_home_directory(self, path: str) -> HomeManagerBuilder:
        self.home_directory = path
        return self

    def with_state_version(self, version: str) -> HomeManagerBuilder:
        """Set home.stateVersion (e.g. "24.05", "23.11")."""
        self.state_version = version
        return self

    def with_packages(self, pkgs: Iterable[str] | str) -> HomeManagerBuilder:
        if isinstance(pkgs, str):
            pkgs = [pkgs]
        self.packages.extend(pkgs)
        return self

    # ── Freeform settings ───────────────────────────────────────────────────

    def enable_program(self, name: str, config: NixValue = None) -> HomeManagerBuilder:
        """Enable and configure a program, replacing any earlier config for it.

        Args:
            name: home-manager program name (e.g. "git", "bash").
            config: Program options. Defaults to {"enable": True}.
        """
        self.programs[name] = {"enable": True} if config is None else copy.deepcopy(config)
        return self

    def enable_service(self, name: str, config: NixValue = None) -> HomeManagerBuilder:
        """Enable and configure a service. Same semantics as enable_program."""
        self.services[name] = {"enable": True} if config is None else copy.deepcopy(config)
        return self

    def set_home_config(self, path: str, value: NixValue) -> HomeManagerBuilder:
        """Set `home.<path>` to value, replacing only that exact key.

        The path is used verbatim as the key, so "file.x" becomes a single
        attribute `home.file.x` rather than a nested mapping.
        """
        self.home[path] = copy.deepcopy(value)
        return self

    def set(self, path: str, value: NixValue) -> HomeManagerBuilder:
        """Set any home-manager option by dotted path.

        - "programs.<name>" / "services.<name>" replace that whole entry.
        - Longer paths under programs/services/home create intermediate
          mappings as needed and replace only the leaf:
              set("programs.git.enable", True)
              set("programs.git.userName", "Alice")   # enable is kept
        - "home" alone merges the mapping's keys into the extra home settings.
        - Any other path is ignored.
        """
        head, *rest = path.split(".")
        value = copy.deepcopy(value)

        if head in ("programs", "services") and rest:
            target = self.programs if head == "programs" else self.services
            name, *sub = rest
            if not sub:
                target[name] = value
                return self
            entry = target.get(name)
            if not isinstance(entry, dict):
                entry = {}
                target[name] = entry
            _set_nested(entry, sub, value)
        elif head == "home" and rest:
            _set_nested(self.home, rest, value)
        elif head == "home" and isinstance(value, Mapping):
            self.home.update(value)

        return self

    def add_module(self, module_path: str) -> HomeManagerBuilder:
        """Add a custom home-manager module path (e.g. "./modules/shell.nix").

        Paths are listed verbatim ahead of the generated body in the flake's
        homeManagerConfiguration modules list.
        """
        self._modules.append(module_path)
        return self

    # ── Output ──────────────────────────────────────────────────────────────

    def build_ast(self) -> HomeManagerConfig:
        return HomeManagerConfig(
            username=self.username,
            home_directory=self.home_directory,
            state_version=self.state_version,
            packages=list(self.packages),
            programs=copy.deepcopy(self.programs),
            services=copy.deepcopy(self.services),
            home=copy.deepcopy(self.home),
            modules=self.modules,
        )

    def to_nix(self) -> str:
        """Render the configuration body (one attribute per line group)."""
        lines = [f"{_LINE_PAD}home.username = {nix_string(self.username)};"]

        if self.home_directory:
            lines.append(f"{_LINE_PAD}home.homeDirectory = {nix_string(self.home_directory)};")

        lines.append(f"{_LINE_PAD}home.stateVersion = {nix_string(self.state_version)};")

        if self.packages:
            refs = " ".join(f"pkgs.{p}" for p in self.packages)
            lines.append(f"{_LINE_PAD}home.packages = with pkgs; [ {refs} ];")

        for prefix, entries in (
            ("programs", self.programs),
            ("services", self.services),
            ("home", self.home),
        ):
            for name, config in entries.items():
                lines.append(f"{_LINE_PAD}{prefix}.{name} = {to_nix_value(config, _VALUE_INDENT)};")

        return "\n".join(lines)
