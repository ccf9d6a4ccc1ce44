"""A single default dev shell with a few tools and Python packages.

    flakesmith build examples/simple.py
"""

from flakesmith import FlakeBuilder

flake = (
    FlakeBuilder()
    .with_description("My simple Nix flake")
    .with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")
    .add_dev_shell(
        "default",
        lambda shell: shell.with_packages(["git", "curl", "python3"]).with_python_packages(
            ["requests", "numpy"]
        ),
    )
    .build()
)

print(flake)
