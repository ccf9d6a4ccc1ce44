"""Separate shells for the frontend, the backend and data work."""

from flakesmith import FlakeBuilder

flake = (
    FlakeBuilder()
    .with_description("Project with multiple development environments")
    .with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")
    .add_dev_shell("frontend", lambda shell: shell.with_packages(["nodejs", "yarn", "git"]))
    .add_dev_shell(
        "backend", lambda shell: shell.with_packages(["go", "postgresql", "redis", "git"])
    )
    .add_dev_shell(
        "data",
        lambda shell: shell.with_packages(["python3", "git"]).with_python_packages(
            ["pandas", "numpy", "sqlalchemy"]
        ),
    )
    .build()
)

print(flake)
