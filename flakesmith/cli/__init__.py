"""flakesmith command line interface.

Public API:
  run            — parse arguments and dispatch, returning the exit code
  create_parser  — the argparse parser (for docs / completion tooling)

Typical usage:
    python -m flakesmith.cli build my_flake.py
"""

from flakesmith.cli.app import run
from flakesmith.cli.parser import create_parser

__all__ = [
    "create_parser",
    "run",
]
