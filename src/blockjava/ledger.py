"""Declarations collected during a pass and emitted ahead of the body.

Functions, global fields, imports and auxiliary classes can be discovered
anywhere in the block walk; they are written once here and rendered only
after the whole workspace has been visited.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Union

from blockjava.java_runtime import FUNCTION_NAME_PLACEHOLDER
from blockjava.java_types import default_initializer
from blockjava.names import NameKind, NameRegistry

if TYPE_CHECKING:
    from blockjava.java_types import TypeResolver

_BLANK_RUN = re.compile(r"\n\n+")


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class Producer:
    produce: Callable[[], str]


DeclarationBody = Union[Text, Producer]


def is_static(text: str) -> bool:
    """A definition is static when ``static`` is among its first three words.

    Leading ``//`` comment lines are not part of the declaration.
    """
    lines = text.split("\n")
    while lines and lines[0].lstrip().startswith("//"):
        lines.pop(0)
    return "static" in "\n".join(lines).split(None, 3)[:3]


def normalize_preamble(text: str) -> str:
    """Collapse blank-line runs to one and end with exactly two blank lines."""
    text = _BLANK_RUN.sub("\n\n", text)
    if not text.strip():
        return ""
    return text.rstrip("\n") + "\n\n\n"


class DeclarationLedger:
    def __init__(self) -> None:
        self._definitions: dict[str, DeclarationBody] = {}
        self._function_names: dict[str, str] = {}
        self._globals: dict[str, str] = {}
        self._imports: set[str] = set()
        self._classes: dict[str, str] = {}

    # ── Registration ───────────────────────────────────────────

    def define(self, name: str, body: DeclarationBody | str | Callable[[], str]) -> None:
        """Register a definition. Re-registering *name* replaces it."""
        if isinstance(body, str):
            body = Text(body)
        elif not isinstance(body, (Text, Producer)):
            body = Producer(body)
        self._definitions[name] = body

    def provide_function(
        self, desired_name: str, lines: list[str], names: NameRegistry,
    ) -> str:
        """Define a helper function once per pass and return its identifier.

        ``{{FUNCTION_NAME}}`` in *lines* is replaced by the identifier
        actually allocated, which avoids clashing with user procedures.
        """
        existing = self._function_names.get(desired_name)
        if existing is not None:
            return existing
        func_name = names.get_distinct_name(desired_name, NameKind.PROCEDURE)
        self._function_names[desired_name] = func_name
        code = "\n".join(lines).replace(FUNCTION_NAME_PLACEHOLDER, func_name)
        self.define(func_name, code)
        return func_name

    def define_global(self, name: str, initializer: str = "") -> None:
        self._globals[name] = initializer

    def add_import(self, qualified_name: str) -> None:
        self._imports.add(qualified_name)

    def define_class(self, name: str, code: str | list[str]) -> None:
        if isinstance(code, list):
            code = "\n".join(code)
        self._classes[name] = code.rstrip("\n") + "\n"

    def has_definition(self, name: str) -> bool:
        return name in self._definitions

    def has_class(self, name: str) -> bool:
        return name in self._classes

    @property
    def imports(self) -> frozenset[str]:
        return frozenset(self._imports)

    # ── Rendering ──────────────────────────────────────────────

    def render_imports(self) -> str:
        return "\n".join(f"import {name};" for name in sorted(self._imports))

    def render_globals(self, types: TypeResolver, names: NameRegistry) -> str:
        out: list[str] = []
        for name, initializer in self._globals.items():
            java_type = types.resolve_type(name)
            if initializer:
                init = f" = {initializer}"
            else:
                default = default_initializer(java_type)
                init = f" = {default}" if default else ""
            var_name = names.get_name(name, NameKind.VARIABLE)
            out.append(f"protected {java_type} {var_name}{init};\n")
        return "".join(out)

    def render_definitions(self) -> str:
        """Static definitions first, then instance ones, each sorted by name."""
        resolved: dict[str, str] = {}
        # Producers may define more entries; keep going until none are new.
        while True:
            pending = [(n, b) for n, b in list(self._definitions.items()) if n not in resolved]
            if not pending:
                break
            for name, body in pending:
                if isinstance(body, Producer):
                    resolved[name] = body.produce()
                else:
                    resolved[name] = body.text

        statics = sorted(n for n, text in resolved.items() if is_static(text))
        instance = sorted(n for n, text in resolved.items() if not is_static(text))
        return "".join(resolved[n] + "\n\n" for n in statics + instance)

    def render_preamble(self, types: TypeResolver, names: NameRegistry) -> str:
        # Definitions first: producers may still register globals.
        definitions = self.render_definitions()
        return normalize_preamble(self.render_globals(types, names) + definitions)

    def render_classes(self) -> str:
        code = "".join(self._classes.values())
        if code:
            code += "\n\n"
        return code
