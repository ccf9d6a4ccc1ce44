"""Pydantic snapshot models for flake builders.

Each builder's build_ast() returns one of these models: a frozen copy of
the builder's state at the time of the call. They are the structured
(non-Nix) view of a flake and serialize to JSON with model_dump_json(),
which is useful for diffing configurations or feeding other tooling.

The builders stay the source of truth — these models are never rendered
to Nix directly and mutating a builder after build_ast() does not affect
a snapshot already taken.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DevShellConfig(BaseModel):
    """Snapshot of one dev shell."""

    model_config = ConfigDict(frozen=True)

    name: str
    system: str
    packages: list[str] = Field(default_factory=list)
    python_packages: list[str] = Field(default_factory=list)


class HomeManagerConfig(BaseModel):
    """Snapshot of one home-manager configuration.

    `home` holds the extra settings rendered as `home.<key> = ...;`.
    `modules` holds the custom module paths listed ahead of the profile
    body in the flake's homeManagerConfiguration call.
    """

    model_config = ConfigDict(frozen=True)

    username: str
    home_directory: str | None = None
    state_version: str
    packages: list[str] = Field(default_factory=list)
    programs: dict[str, Any] = Field(default_factory=dict)
    services: dict[str, Any] = Field(default_factory=dict)
    home: dict[str, Any] = Field(default_factory=dict)
    modules: list[str] = Field(default_factory=list)


class FlakeConfig(BaseModel):
    """Snapshot of a whole flake."""

    model_config = ConfigDict(frozen=True)

    description: str = ""
    system: str
    inputs: dict[str, str] = Field(default_factory=dict)
    dev_shells: list[DevShellConfig] = Field(default_factory=list)
    home_configurations: list[HomeManagerConfig] = Field(default_factory=list)

    @property
    def needs_home_manager(self) -> bool:
        """True if the rendered flake declares home-manager in its outputs."""
        return bool(self.home_configurations)
