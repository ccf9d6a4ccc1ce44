"""Tests for package discovery — querying python3Packages names from nixpkgs."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from flakesmith.config import clear_settings_cache
from flakesmith.nix_gen.discovery import (
    PackageDiscoveryError,
    discover_python_packages,
    run_nix_eval,
    write_package_list,
)
from flakesmith.tools.cli import CommandResult


@pytest.fixture(autouse=True)
def _clear_settings():
    """Clear settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


def make_result(stdout: str = "", stderr: str = "", returncode: int = 0) -> CommandResult:
    return CommandResult(stdout=stdout, stderr=stderr, returncode=returncode)


class TestRunNixEval:
    """run_nix_eval builds the `nix eval` invocation from settings."""

    async def test_default_arguments(self):
        with patch(
            "flakesmith.nix_gen.discovery.run_command",
            new_callable=AsyncMock,
            return_value=make_result("[]"),
        ) as mock_run:
            await run_nix_eval()

        mock_run.assert_called_once()
        assert mock_run.call_args[0] == (
            "nix",
            "eval",
            "nixpkgs#python3Packages",
            "--apply",
            "builtins.attrNames",
            "--json",
        )
        assert mock_run.call_args[1]["timeout_seconds"] == 300

    async def test_nixpkgs_ref_from_settings(self, monkeypatch):
        monkeypatch.setenv("FLAKESMITH_NIXPKGS_REF", "github:NixOS/nixpkgs/nixos-24.05")
        clear_settings_cache()

        with patch(
            "flakesmith.nix_gen.discovery.run_command",
            new_callable=AsyncMock,
            return_value=make_result("[]"),
        ) as mock_run:
            await run_nix_eval()

        assert "github:NixOS/nixpkgs/nixos-24.05#python3Packages" in mock_run.call_args[0]


class TestDiscoverPythonPackages:
    """discover_python_packages parses and validates the nix eval output."""

    async def test_returns_sorted_list(self):
        result = make_result(json.dumps(["pandas", "numpy", "django"]))

        with patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result):
            packages = await discover_python_packages()

        assert packages == ["django", "numpy", "pandas"]

    async def test_nix_eval_failure_raises(self):
        result = make_result(stderr="error: cannot find flake 'flake:nixpkgs'", returncode=1)

        with (
            patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result),
            pytest.raises(PackageDiscoveryError, match="nix eval"),
        ):
            await discover_python_packages()

    async def test_failure_message_includes_stderr(self):
        result = make_result(stderr="error: boom", returncode=1)

        with (
            patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result),
            pytest.raises(PackageDiscoveryError, match="boom"),
        ):
            await discover_python_packages()

    async def test_invalid_json_raises(self):
        result = make_result("not valid json")

        with (
            patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result),
            pytest.raises(PackageDiscoveryError, match="parse"),
        ):
            await discover_python_packages()

    async def test_unexpected_type_raises(self):
        result = make_result(json.dumps({"numpy": "derivation"}))

        with (
            patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result),
            pytest.raises(PackageDiscoveryError, match="list"),
        ):
            await discover_python_packages()

    async def test_non_string_names_raise(self):
        result = make_result(json.dumps(["numpy", 1]))

        with (
            patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result),
            pytest.raises(PackageDiscoveryError, match="strings"),
        ):
            await discover_python_packages()

    async def test_empty_list_is_valid(self):
        result = make_result(json.dumps([]))

        with patch("flakesmith.nix_gen.discovery.run_nix_eval", return_value=result):
            packages = await discover_python_packages()

        assert packages == []


class TestWritePackageList:
    def test_writes_sorted_unique_json(self, tmp_path):
        path = tmp_path / "packages.json"
        write_package_list(["pandas", "numpy", "pandas"], path)
        assert json.loads(path.read_text(encoding="utf-8")) == ["numpy", "pandas"]

    def test_creates_parent_directories(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "packages.json"
        assert write_package_list(["numpy"], path) == path
        assert path.is_file()

    def test_output_ends_with_newline(self, tmp_path):
        path = tmp_path / "packages.json"
        write_package_list(["numpy"], path)
        assert path.read_text(encoding="utf-8").endswith("]\n")
