"""Tests for FlakeBuilder — flake scaffold, output branching and composition styles.

The builder is pure string assembly; tests verify structure and exact
fragments of the output without evaluating Nix.
"""

import pytest

from flakesmith.config import clear_settings_cache
from flakesmith.nix_gen.devshell import DevShellBuilder
from flakesmith.nix_gen.flake import FlakeBuilder
from flakesmith.nix_gen.home_manager import HomeManagerBuilder
from flakesmith.nix_gen.packages import PackageSet

NIXPKGS = "github:NixOS/nixpkgs/nixos-24.05"
HOME_MANAGER = "github:nix-community/home-manager/release-24.05"
ALLOW_LIST = PackageSet(["numpy", "pandas"])


@pytest.fixture(autouse=True)
def _clear_settings():
    """Clear settings cache before and after each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


def make_flake() -> FlakeBuilder:
    return FlakeBuilder(allow_list=ALLOW_LIST).with_input("nixpkgs", NIXPKGS)


class TestFlakeScaffold:
    def test_returns_string(self):
        assert isinstance(make_flake().build(), str)

    def test_description(self):
        flake = make_flake().with_description("My flake").build()
        assert '  description = "My flake";' in flake

    def test_description_overwrites(self):
        flake = make_flake().with_description("a").with_description("b").build()
        assert 'description = "b";' in flake
        assert 'description = "a";' not in flake

    def test_empty_description_by_default(self):
        assert 'description = "";' in make_flake().build()

    def test_inputs_in_insertion_order(self):
        flake = make_flake().with_input("home-manager", HOME_MANAGER).build()
        assert f'    nixpkgs.url = "{NIXPKGS}";\n    home-manager.url = "{HOME_MANAGER}";' in flake

    def test_duplicate_input_overwrites(self):
        flake = make_flake().with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-unstable").build()
        assert flake.count("nixpkgs.url") == 1
        assert 'nixpkgs.url = "github:NixOS/nixpkgs/nixos-unstable";' in flake

    def test_no_inputs(self):
        flake = FlakeBuilder().build()
        assert "  inputs = {\n  };" in flake

    def test_starts_and_ends_with_braces(self):
        flake = make_flake().build()
        assert flake.startswith("{\n")
        assert flake.endswith("\n}")


class TestEmptyFlake:
    """A flake with no shells and no home configurations is legal."""

    def test_exact_output(self):
        flake = FlakeBuilder().with_input("base", "locator-X").with_description("d").build()
        assert flake == (
            "{\n"
            '  description = "d";\n'
            "  inputs = {\n"
            '    base.url = "locator-X";\n'
            "  };\n"
            "\n"
            "  outputs = { self, nixpkgs }: {};\n"
            "}"
        )


class TestDevShellOutputs:
    def test_end_to_end_scenario(self):
        flake = (
            FlakeBuilder()
            .with_input("base", "locator-X")
            .with_description("d")
            .add_dev_shell("default", lambda shell: shell.with_packages(["git"]))
            .build()
        )
        assert "default = " in flake
        assert flake.index("default = ") < flake.index("git")
        assert flake.count('base.url = "locator-X";') == 1
        assert flake.count(".url = ") == 1

    def test_exact_shells_only_output(self):
        flake = (
            make_flake()
            .with_description("Simple")
            .add_dev_shell("default", lambda s: s.with_packages(["nodejs", "git"]))
            .build()
        )
        assert flake == (
            "{\n"
            '  description = "Simple";\n'
            "  inputs = {\n"
            f'    nixpkgs.url = "{NIXPKGS}";\n'
            "  };\n"
            "\n"
            "  outputs = { self, nixpkgs }: let\n"
            '    pkgs = import nixpkgs { system = "x86_64-linux"; };\n'
            "  in {\n"
            "    devShells.x86_64-linux = {\n"
            "      default = pkgs.mkShell {\n"
            "        buildInputs = [ pkgs.nodejs pkgs.git ];\n"
            "      };\n"
            "    };\n"
            "  };\n"
            "}"
        )

    def test_shells_only_does_not_declare_home_manager(self):
        flake = make_flake().add_dev_shell("default", lambda s: s.with_packages(["git"])).build()
        assert "home-manager" not in flake
        assert "homeConfigurations" not in flake

    def test_shells_in_order(self):
        flake = (
            make_flake()
            .add_dev_shell("first", lambda s: None)
            .add_dev_shell("second", lambda s: None)
            .build()
        )
        assert flake.index("first = pkgs.mkShell") < flake.index("second = pkgs.mkShell")

    def test_python_packages_in_output(self):
        flake = (
            make_flake()
            .add_dev_shell(
                "py", lambda s: s.with_python_packages(["numpy"]).with_packages(["python3"])
            )
            .build()
        )
        assert "buildInputs = [ pkgs.python3 pkgs.python3Packages.numpy ];" in flake

    def test_other_platform_rebinds_pkgs(self):
        flake = (
            make_flake()
            .add_dev_shell("linux", lambda s: s.with_packages(["git"]))
            .add_dev_shell("mac", lambda s: s.with_packages(["git"]).with_system("aarch64-darwin"))
            .build()
        )
        assert "    devShells.x86_64-linux = {\n      linux = pkgs.mkShell" in flake
        assert (
            "    devShells.aarch64-darwin = let\n"
            '      pkgs = import nixpkgs { system = "aarch64-darwin"; };\n'
            "    in {\n"
            "      mac = pkgs.mkShell {"
        ) in flake

    def test_shells_grouped_by_platform(self):
        flake = (
            make_flake()
            .add_dev_shell("a", lambda s: None)
            .add_dev_shell("b", lambda s: s.with_system("aarch64-linux"))
            .add_dev_shell("c", lambda s: None)
            .build()
        )
        assert flake.count("devShells.x86_64-linux") == 1
        assert flake.count("devShells.aarch64-linux") == 1
        linux_block = flake.index("devShells.x86_64-linux")
        assert linux_block < flake.index("c = pkgs.mkShell") < flake.index("devShells.aarch64-linux")

    def test_flake_system_from_settings(self, monkeypatch):
        monkeypatch.setenv("FLAKESMITH_DEFAULT_SYSTEM", "aarch64-linux")
        clear_settings_cache()
        flake = make_flake().add_dev_shell("default", lambda s: None).build()
        assert 'pkgs = import nixpkgs { system = "aarch64-linux"; };' in flake
        assert "devShells.aarch64-linux = {" in flake


class TestHomeConfigurationOutputs:
    def test_home_only_declares_home_manager(self):
        flake = make_flake().add_home_configuration("alice", lambda h: None).build()
        assert "  outputs = { self, nixpkgs, home-manager }: let" in flake
        assert "devShells" not in flake

    def test_home_configuration_block(self):
        flake = (
            make_flake()
            .add_home_configuration("alice", lambda h: h.with_home_directory("/home/alice"))
            .build()
        )
        assert (
            "    homeConfigurations = {\n"
            "      alice = home-manager.lib.homeManagerConfiguration {\n"
            "        pkgs = nixpkgs.legacyPackages.x86_64-linux;\n"
            "        modules = [\n"
            "          {\n"
            '    home.username = "alice";\n'
            '    home.homeDirectory = "/home/alice";\n'
            '    home.stateVersion = "24.05";\n'
            "          }\n"
            "        ];\n"
            "      };\n"
            "    };"
        ) in flake

    def test_modules_listed_before_body(self):
        flake = (
            make_flake()
            .add_home_configuration(
                "alice", lambda h: h.add_module("./shell.nix").add_module("./git.nix")
            )
            .build()
        )
        assert (
            "        modules = [\n"
            "        ./shell.nix\n"
            "        ./git.nix\n"
            "          {\n"
        ) in flake

    def test_mixed_declares_home_manager_once(self):
        flake = (
            make_flake()
            .with_input("home-manager", HOME_MANAGER)
            .add_dev_shell("default", lambda s: s.with_packages(["git"]))
            .add_home_configuration("alice", lambda h: h.enable_program("git"))
            .build()
        )
        assert flake.count("outputs = { self, nixpkgs, home-manager }") == 1
        assert flake.index("devShells.x86_64-linux") < flake.index("homeConfigurations")
        assert "    };\n\n    homeConfigurations = {" in flake

    def test_profile_program_rendered(self):
        flake = (
            make_flake()
            .add_home_configuration(
                "alice", lambda h: h.enable_program("git", {"enable": True, "userName": "A"})
            )
            .build()
        )
        assert '    programs.git = {\n      enable = true;\n      userName = "A";\n    };' in flake

    def test_profiles_in_order(self):
        flake = (
            make_flake()
            .add_home_configuration("zoe", lambda h: None)
            .add_home_configuration("adam", lambda h: None)
            .build()
        )
        assert flake.index("zoe = home-manager") < flake.index("adam = home-manager")


class TestCompositionStyles:
    """Shells and homes can be configured inline, via handle, or attached."""

    def test_add_dev_shell_returns_flake(self):
        flake = make_flake()
        assert flake.add_dev_shell("default", lambda s: None) is flake

    def test_begin_dev_shell_returns_shell(self):
        flake = make_flake()
        shell = flake.begin_dev_shell("ml")
        assert isinstance(shell, DevShellBuilder)
        assert shell.name == "ml"
        assert flake.dev_shells == [shell]

    def test_begin_dev_shell_later_mutation_rendered(self):
        flake = make_flake()
        shell = flake.begin_dev_shell("ml").with_packages(["git"])
        shell.with_python_packages(["pandas"])
        assert "[ pkgs.git pkgs.python3Packages.pandas ]" in flake.build()

    def test_begin_dev_shell_uses_flake_allow_list(self):
        shell = FlakeBuilder(allow_list=PackageSet(["only-this"])).begin_dev_shell("x")
        shell.with_python_packages(["only-this"])
        assert shell.python_packages == ["only-this"]

    def test_attached_builder_held_by_reference(self):
        shell = DevShellBuilder("frontend", allow_list=ALLOW_LIST).with_packages(["nodejs"])
        flake = make_flake().add_dev_shell_builder(shell)
        shell.with_packages(["yarn"])
        assert "[ pkgs.nodejs pkgs.yarn ]" in flake.build()

    def test_add_dev_shell_builder_returns_flake(self):
        flake = make_flake()
        assert flake.add_dev_shell_builder(DevShellBuilder("x")) is flake

    def test_begin_home_configuration_returns_builder(self):
        flake = make_flake()
        home = flake.begin_home_configuration("alice")
        assert isinstance(home, HomeManagerBuilder)
        home.enable_program("git")
        assert "programs.git = {" in flake.build()

    def test_attached_home_held_by_reference(self):
        home = HomeManagerBuilder("alice")
        flake = make_flake().add_home_configuration_builder(home)
        home.with_packages(["tmux"])
        assert "home.packages = with pkgs; [ pkgs.tmux ];" in flake.build()

    def test_add_home_configuration_returns_flake(self):
        flake = make_flake()
        assert flake.add_home_configuration("alice", lambda h: None) is flake


class TestIdempotence:
    def test_build_twice_identical(self):
        flake = (
            make_flake()
            .with_description("d")
            .add_dev_shell("default", lambda s: s.with_packages(["git"]).with_python_packages(["numpy"]))
            .add_home_configuration(
                "alice",
                lambda h: h.set("programs.git.enable", True).set("home.sessionVariables.EDITOR", "vim"),
            )
        )
        assert flake.build() == flake.build()

    def test_build_does_not_mutate(self):
        flake = make_flake().add_dev_shell("default", lambda s: s.with_packages(["git"]))
        before = flake.build_ast()
        flake.build()
        assert flake.build_ast() == before


class TestFlakeAst:
    def test_build_ast(self):
        flake = (
            make_flake()
            .with_description("d")
            .add_dev_shell("default", lambda s: s.with_packages(["git"]))
            .add_home_configuration("alice", lambda h: None)
        )
        ast = flake.build_ast()
        assert ast.description == "d"
        assert ast.inputs == {"nixpkgs": NIXPKGS}
        assert [s.name for s in ast.dev_shells] == ["default"]
        assert [h.username for h in ast.home_configurations] == ["alice"]
        assert ast.needs_home_manager is True

    def test_empty_ast(self):
        ast = FlakeBuilder().build_ast()
        assert ast.dev_shells == []
        assert ast.needs_home_manager is False

    def test_ast_json(self):
        ast = make_flake().add_dev_shell("default", lambda s: s.with_packages(["git"])).build_ast()
        assert '"packages":["git"]' in ast.model_dump_json()
