"""Load the bundled Java support sources."""

from __future__ import annotations

import importlib.resources

FUNCTION_NAME_PLACEHOLDER = "{{FUNCTION_NAME}}"

VAR_CLASS = "Var.java"
TO_STRING_HELPER = "BlocklyToString.java"


def load_source(name: str) -> list[str]:
    """Return the lines of bundled Java source *name*."""
    pkg = importlib.resources.files("blockjava.runtime")
    return pkg.joinpath(name).read_text(encoding="utf-8").rstrip("\n").split("\n")
