"""A machine-learning shell, plus an aarch64 copy for ARM workstations."""

from flakesmith import DevShellBuilder, FlakeBuilder

ML_PACKAGES = ["numpy", "pandas", "scikit-learn", "matplotlib", "jupyter", "torch"]

flake = FlakeBuilder().with_description("Python machine learning environment")
flake.with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")

flake.begin_dev_shell("ml").with_packages(["python3", "git"]).with_python_packages(ML_PACKAGES)

# Rendered under devShells.aarch64-linux with its own pkgs.
arm = DevShellBuilder("ml", system="aarch64-linux")
arm.with_packages(["python3", "git"]).with_python_packages(ML_PACKAGES)
flake.add_dev_shell_builder(arm)

print(flake.build())
