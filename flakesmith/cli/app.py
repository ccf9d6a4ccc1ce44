"""flakesmith application wiring — observability setup and command dispatch.

main() is the console script entry point. run() does the argument parsing
and dispatch and returns the exit code, so tests can call it directly
without logging or Logfire being configured.

Logging and Logfire are configured in main() so every command run is
captured under a single process.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import logfire

from flakesmith.cli.commands import build_flake, init_template, print_version, refresh_packages
from flakesmith.cli.parser import SUBCOMMANDS, create_parser
from flakesmith.config import get_settings

logger = logging.getLogger(__name__)


def _configure_observability() -> None:
    settings = get_settings()

    logging.basicConfig(
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        level=settings.log_level_value,
    )

    # Token is optional; if unset logfire runs in local mode and exports nothing.
    logfire_token = settings.logfire_token
    logfire.configure(
        token=logfire_token.get_secret_value() if logfire_token else None,
        service_name="flakesmith",
        console=False,
    )


def run(argv: list[str] | None = None) -> int:
    """Parse argv and dispatch to a command handler. Returns the exit code."""
    if argv is None:
        argv = sys.argv[1:]

    # `flakesmith file.py` is shorthand for `flakesmith build file.py`.
    if argv and not argv[0].startswith("-") and argv[0] not in SUBCOMMANDS:
        argv = ["build", *argv]

    parser = create_parser()
    args = parser.parse_args(argv)

    if args.version:
        return print_version()

    if args.subcommand == "build":
        if not args.input_file:
            print("Error: No input file specified\n", file=sys.stderr)
            parser.print_help(sys.stderr)
            return 1
        if args.watch:
            print("Error: Watch mode is not yet implemented", file=sys.stderr)
            return 1
        return asyncio.run(build_flake(args.input_file, args.output_file))

    if args.subcommand == "init":
        return init_template(args.output_file)

    if args.subcommand == "refresh-packages":
        return asyncio.run(refresh_packages(args.output_file))

    parser.print_help()
    return 0


def main(argv: list[str] | None = None) -> None:
    """Console script entry point. Calls sys.exit with the command's exit code."""
    _configure_observability()
    logger.debug("flakesmith invoked with %s", argv if argv is not None else sys.argv[1:])
    sys.exit(run(argv))
