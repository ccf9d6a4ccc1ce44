"""Argument parser for the flakesmith CLI."""

from __future__ import annotations

import argparse

SUBCOMMANDS = ("build", "init", "refresh-packages")

EPILOG = """\
Examples:
  flakesmith build my_flake.py            Creates my_flake.nix
  flakesmith build config.py -o flake.nix Creates flake.nix
  flakesmith init my_config.py            Creates a starter template

Your Python file should print the flake:

  from flakesmith import FlakeBuilder

  flake = (
      FlakeBuilder()
      .with_input("nixpkgs", "github:NixOS/nixpkgs/nixos-24.05")
      .add_dev_shell("default", lambda shell: shell.with_packages(["git", "nodejs"]))
      .build()
  )

  print(flake)
"""


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="flakesmith",
        description="Python DSL for building Nix flakes",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-v",
        "--version",
        action="store_true",
        help="Show version",
    )

    subparsers = parser.add_subparsers(dest="subcommand", metavar="<command>")

    build = subparsers.add_parser("build", help="Build a Nix flake from a Python file")
    build.add_argument("input_file", nargs="?", help="Flake script (.py)")
    build.add_argument("-o", "--output", dest="output_file", help="Output file name")
    build.add_argument(
        "-w",
        "--watch",
        action="store_true",
        help="Watch mode (not yet implemented)",
    )

    init = subparsers.add_parser("init", help="Create a starter template")
    init.add_argument("output_file", nargs="?", help="Template file to create (default: flake.py)")

    refresh = subparsers.add_parser(
        "refresh-packages",
        help="Regenerate the Python package allow-list from nixpkgs",
    )
    refresh.add_argument("-o", "--output", dest="output_file", help="Package list file to write")

    return parser
