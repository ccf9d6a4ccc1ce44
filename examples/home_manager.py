"""A personal home-manager configuration with programs and session variables."""

from flakesmith import FlakeBuilder


def configure(home):
    home.with_home_directory("/home/myuser").with_state_version("24.05")
    home.with_packages(["git", "neovim", "tmux", "ripgrep", "fd", "bat", "fzf"])
    home.enable_program(
        "git",
        {
            "enable": True,
            "userName": "Your Name",
            "userEmail": "your.email@example.com",
            "extraConfig": {
                "init": {"defaultBranch": "main"},
                "pull": {"rebase": False},
            },
        },
    )
    home.enable_program(
        "bash",
        {
            "enable": True,
            "enableCompletion": True,
            "shellAliases": {"ll": "ls -la", "gs": "git status", "gd": "git diff"},
        },
    )
    home.enable_service("syncthing")
    home.set("home", {"sessionVariables": {"EDITOR": "nvim", "VISUAL": "nvim"}})
    home.set("programs.git.extraConfig.core.editor", "nvim")


flake = (
    FlakeBuilder()
    .with_description("Personal home-manager configuration")
    .with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")
    .with_input("home-manager", "github:nix-community/home-manager/release-24.05")
    .add_home_configuration("myuser", configure)
    .build()
)

print(flake)
