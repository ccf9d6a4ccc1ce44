"""flakesmith configuration — centralized environment variable management.

Every tunable default the builders and the command line rely on is declared
here. No module should call os.environ directly — import settings from here
instead.

Usage:
    from flakesmith.config import get_settings

    settings = get_settings()
    system = settings.default_system

Environment variables (all optional, prefixed with FLAKESMITH_):

    FLAKESMITH_DEFAULT_SYSTEM           — Platform for dev shells and the flake's
                                          `pkgs` binding. Default: "x86_64-linux".
    FLAKESMITH_STATE_VERSION            — home-manager stateVersion used when a
                                          profile never sets one. Default: "24.05".
    FLAKESMITH_PYTHON_EXECUTABLE        — Interpreter that runs flake scripts for
                                          `flakesmith build`. Default: the current one.
    FLAKESMITH_SCRIPT_TIMEOUT_SECONDS   — Timeout for a flake script run. Default: 120.
    FLAKESMITH_NIXPKGS_REF              — Flake reference queried by
                                          `flakesmith refresh-packages`. Default: "nixpkgs".
    FLAKESMITH_NIX_EVAL_TIMEOUT_SECONDS — Timeout for the discovery `nix eval`. Default: 300.
    FLAKESMITH_PYTHON_PACKAGES_FILE     — JSON file replacing the bundled Python
                                          package allow-list.
    FLAKESMITH_LOG_LEVEL                — CLI logging level. Default: "WARNING".
    FLAKESMITH_LOGFIRE_TOKEN            — Logfire project token. If unset, logfire
                                          runs in local mode (no remote export).
"""

from __future__ import annotations

import logging
import sys
from functools import lru_cache

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class FlakesmithSettings(BaseSettings):
    """Centralized configuration for flakesmith.

    Field names map to env vars by uppercasing and adding the prefix:
    default_system → FLAKESMITH_DEFAULT_SYSTEM.

    Instantiate via get_settings() to benefit from caching.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLAKESMITH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Nix output ──────────────────────────────────────────────────────────

    default_system: str = "x86_64-linux"
    """Platform a dev shell targets until with_system() is called.

    Also the system the flake's shared `pkgs` binding and every
    home-manager configuration's legacyPackages lookup are built for."""

    state_version: str = "24.05"
    """home-manager stateVersion used when a profile never sets one."""

    # ── Script execution ────────────────────────────────────────────────────

    python_executable: str = Field(default_factory=lambda: sys.executable or "python3")
    """Interpreter used to run a flake script. The script prints the flake."""

    script_timeout_seconds: float = 120
    """Maximum runtime of a flake script before it is killed."""

    # ── Package allow-list ──────────────────────────────────────────────────

    nixpkgs_ref: str = "nixpkgs"
    """Flake reference whose python3Packages attribute names are discovered."""

    nix_eval_timeout_seconds: float = 300
    """Discovery timeout. The first eval on a cold store fetches nixpkgs."""

    python_packages_file: str | None = None
    """Path to a JSON list of package names used instead of the bundled file."""

    # ── Observability ───────────────────────────────────────────────────────

    log_level: str = "WARNING"
    """Root logging level for the CLI (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    logfire_token: SecretStr | None = None
    """Logfire project token. Optional — if unset, logfire runs in local mode."""

    # ── Computed properties ─────────────────────────────────────────────────

    @property
    def log_level_value(self) -> int:
        """Numeric logging level for logging.basicConfig."""
        return logging.getLevelName(self.log_level)

    # ── Validators ──────────────────────────────────────────────────────────

    @field_validator("default_system", "state_version")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            msg = "Value must not be blank"
            raise ValueError(msg)
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            msg = f"Unknown log level '{v}'. Expected one of: {', '.join(_LOG_LEVELS)}"
            raise ValueError(msg)
        return level


@lru_cache(maxsize=1)
def get_settings() -> FlakesmithSettings:
    """Return the cached FlakesmithSettings instance.

    Reads from environment on first call, then caches for the process lifetime.
    Call clear_settings_cache() in tests to reset between test cases.
    """
    return FlakesmithSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Use in tests that need to vary environment variables between cases:

        def test_something(monkeypatch):
            monkeypatch.setenv("FLAKESMITH_DEFAULT_SYSTEM", "aarch64-linux")
            clear_settings_cache()
            settings = get_settings()
            ...
    """
    get_settings.cache_clear()
