"""Nix value serializer — turns plain Python values into Nix expression text.

This module is the single place where freeform configuration values
(program settings, service settings, extra home options) become Nix syntax.
Both builders call it; neither writes nested Nix by hand.

Mapping of Python values to Nix:

    "text"            →  "text"
    True / False      →  true / false
    42, 1.5           →  42, 1.5
    nan, inf          →  null
    [] / ()           →  []
    [1, 2]            →  [\\n  1\\n  2\\n]
    {}                →  {}
    {"a": 1}          →  {\\n  a = 1;\\n}
    anything else     →  null

Output is byte-stable: two-space indentation, mapping keys in insertion order,
one list element or attribute per line. Strings and keys are emitted verbatim
(no escaping), so callers must not pass values containing `"` or `${`.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Union

NixValue = Union[str, int, float, bool, None, list[Any], tuple[Any, ...], Mapping[str, Any]]

INDENT = "  "


def nix_string(value: str) -> str:
    """Wrap a Python string as a Nix string literal (verbatim, unescaped)."""
    return f'"{value}"'


def nix_list(items: list[str]) -> str:
    """Format already-rendered Nix expressions as a single-line Nix list.

    Example: ["pkgs.git", "pkgs.curl"] → '[ pkgs.git pkgs.curl ]'
    """
    if not items:
        return "[ ]"
    return "[ " + " ".join(items) + " ]"


def attrset_body(value: Mapping[str, Any], indent: int = 0) -> str:
    """Render only the `key = value;` lines of a mapping, without braces.

    Lines are indented one level deeper than `indent`, which is where they
    sit when the mapping is rendered with to_nix_value(value, indent).
    """
    pad = INDENT * (indent + 1)
    return "\n".join(
        f"{pad}{key} = {to_nix_value(item, indent + 1)};" for key, item in value.items()
    )


def to_nix_value(value: Any, indent: int = 0) -> str:
    """Serialize a structured Python value to Nix syntax.

    Args:
        value: A string, number, boolean, list/tuple, mapping, or None.
            Unsupported types render as `null`.
        indent: Nesting level of the value. Closing brackets are indented
            at this level; nested elements one level deeper.

    Returns:
        The Nix expression text. Never raises.
    """
    if isinstance(value, str):
        return nix_string(value)
    # bool is a subclass of int, so it must be matched first.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(value) if math.isfinite(value) else "null"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        pad = INDENT * (indent + 1)
        items = "\n".join(f"{pad}{to_nix_value(item, indent + 1)}" for item in value)
        return f"[\n{items}\n{INDENT * indent}]"
    if isinstance(value, Mapping):
        if not value:
            return "{}"
        return f"{{\n{attrset_body(value, indent)}\n{INDENT * indent}}}"
    return "null"
