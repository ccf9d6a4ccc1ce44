"""The scripts in examples/ run cleanly and print a complete flake."""

import runpy
from pathlib import Path

import pytest

from flakesmith.config import clear_settings_cache
from flakesmith.nix_gen.packages import clear_cache

EXAMPLES_DIR = Path(__file__).resolve().parents[2] / "examples"
EXAMPLE_SCRIPTS = sorted(EXAMPLES_DIR.glob("*.py"))


@pytest.fixture(autouse=True)
def _clear_caches(monkeypatch):
    """Run every example against the bundled allow-list and default settings."""
    monkeypatch.delenv("FLAKESMITH_PYTHON_PACKAGES_FILE", raising=False)
    monkeypatch.delenv("GPU_ENABLED", raising=False)
    clear_settings_cache()
    clear_cache()
    yield
    clear_settings_cache()
    clear_cache()


def test_examples_present():
    names = {path.name for path in EXAMPLE_SCRIPTS}
    assert {"simple.py", "composition_styles.py", "home_manager.py"} <= names


@pytest.mark.parametrize("script", EXAMPLE_SCRIPTS, ids=lambda path: path.stem)
def test_example_prints_flake(script, capsys):
    runpy.run_path(str(script), run_name="__main__")

    output = capsys.readouterr().out
    assert output.startswith("{\n  description = ")
    assert "  outputs = { self, nixpkgs" in output
    assert output.rstrip().endswith("}")


class TestCompositionStyles:
    """All three ways of attaching a shell end up in the rendered flake."""

    def test_every_shell_rendered(self, capsys):
        runpy.run_path(str(EXAMPLES_DIR / "composition_styles.py"), run_name="__main__")
        output = capsys.readouterr().out

        for name in ("testing", "frontend", "data-science", "backend"):
            assert f"      {name} = pkgs.mkShell {{" in output
        assert "pkgs.python3Packages.django" in output
        assert "cudatoolkit" not in output

    def test_conditional_package_added_after_attach(self, capsys, monkeypatch):
        monkeypatch.setenv("GPU_ENABLED", "1")
        runpy.run_path(str(EXAMPLES_DIR / "composition_styles.py"), run_name="__main__")

        assert "pkgs.cudatoolkit" in capsys.readouterr().out


class TestHomeManagerExample:
    def test_home_configuration_rendered(self, capsys):
        runpy.run_path(str(EXAMPLES_DIR / "home_manager.py"), run_name="__main__")
        output = capsys.readouterr().out

        assert "home-manager.lib.homeManagerConfiguration" in output
        assert "{ self, nixpkgs, home-manager }" in output
        assert 'editor = "nvim";' in output
        assert "services.syncthing = {\n      enable = true;\n    };" in output
