"""The three ways to attach a dev shell to a flake.

1. add_dev_shell(name, configure): configure inline, keep chaining the flake.
2. begin_dev_shell(name): get the shell back and keep modifying it.
3. add_dev_shell_builder(shell): attach a shell built elsewhere, e.g. by a
   shared factory function.

All shells are read when build() is called, so changes made after attaching
still show up in the output.
"""

import os

from flakesmith import DevShellBuilder, FlakeBuilder

NIXPKGS = "github:NixOS/nixpkgs/nixos-24.05"


def node_shell(name):
    return DevShellBuilder(name).with_packages(["nodejs", "yarn", "git"])


def data_science_shell(name):
    return (
        DevShellBuilder(name)
        .with_packages(["git", "python3"])
        .with_python_packages(["numpy", "pandas", "scikit-learn", "matplotlib", "seaborn"])
    )


flake = (
    FlakeBuilder()
    .with_input("nixpkgs", NIXPKGS)
    .with_description("Composition styles example")
    # 1. Callback
    .add_dev_shell(
        "testing",
        lambda shell: shell.with_python_packages(["pytest", "pytest-cov"]).with_packages("git"),
    )
    # 3. External builders
    .add_dev_shell_builder(node_shell("frontend"))
    .add_dev_shell_builder(data_science_shell("data-science"))
)

# 2. Returned builder, modified conditionally afterwards
backend = flake.begin_dev_shell("backend")
backend.with_packages(["postgresql", "redis", "git"]).with_python_packages(["django", "celery"])
if os.environ.get("GPU_ENABLED"):
    backend.with_packages("cudatoolkit")

print(flake.build())
