"""nix_gen — Nix source generation for flakesmith.

This package owns the Python side of the Python-to-Nix boundary:
- The recursive value serializer (serializer.py)
- Dev shell, home-manager and flake builders
- Pydantic snapshot models returned by build_ast()
- The Python package allow-list and its nixpkgs discovery
"""
