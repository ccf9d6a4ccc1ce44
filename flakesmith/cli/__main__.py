"""Entry point for the flakesmith command line.

Run as a module or through the installed console script:

    python -m flakesmith.cli build my_flake.py
    flakesmith build my_flake.py -o flake.nix

A bare script path is treated as `build`:

    flakesmith my_flake.py
"""

from flakesmith.cli.app import main

if __name__ == "__main__":
    main()
