"""Blockly type tag -> Java type mapping."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from blockjava.errors import MISSING_TYPE, UNKNOWN_TYPE, DiagnosticLog
from blockjava.java_runtime import VAR_CLASS, load_source

if TYPE_CHECKING:
    from blockjava.config import GeneratorConfig
    from blockjava.ledger import DeclarationLedger


@dataclass(frozen=True)
class JavaType:
    """A Java type representation."""

    decl: str  # type as written in a declaration, e.g. "double", "HashMap"
    import_name: str | None = None  # import needed, e.g. "java.util.HashMap"
    dynamic: bool = False  # backed by the Var wrapper class


OBJECT = JavaType("Object")
LIST = JavaType("LinkedList", import_name="java.util.LinkedList")
MAP = JavaType("HashMap", import_name="java.util.HashMap")
VAR = JavaType("Var", dynamic=True)
BOOLEAN = JavaType("boolean")
STRING = JavaType("String")
DOUBLE = JavaType("double")

_TAG_MAP: dict[str, JavaType] = {
    "Object": OBJECT,
    "Array": LIST,
    "Map": MAP,
    "Var": VAR,
    "Boolean": BOOLEAN,
    "String": STRING,
    "Colour": STRING,
    "Number": DOUBLE,
}


def map_tag(tag: str | None, class_types: dict[str, str] | None = None) -> JavaType | None:
    """Map a Blockly type tag to a Java type, or None when it is not known.

    An empty or missing tag maps to ``Object``.
    """
    if not tag:
        return OBJECT
    known = _TAG_MAP.get(tag)
    if known is not None:
        return known
    if class_types and tag in class_types:
        return JavaType(class_types[tag])
    return None


def default_initializer(decl: str) -> str:
    """Initializer for a field of type *decl* declared without one."""
    if decl == VAR.decl:
        return "new Var(0)"
    if decl in ("boolean", "Boolean"):
        return "false"
    if decl == "String":
        return '""'
    return ""


class TypeResolver:
    """Resolves the Java type of every variable seen during one pass.

    Resolution is total: unknown or missing tags fall back to ``Var`` or
    ``Object`` with a warning, never an exception.
    """

    def __init__(
        self,
        ledger: DeclarationLedger,
        config: GeneratorConfig,
        diagnostics: DiagnosticLog,
    ) -> None:
        self._ledger = ledger
        self._config = config
        self._diagnostics = diagnostics
        self._class_types = dict(config.class_types)
        self._tags: dict[str, str | None] = {}
        self._resolved: dict[str, JavaType] = {}
        # Procedure parameters, innermost last; they shadow workspace variables.
        self._scopes: list[dict[str, JavaType]] = []

    def declare(self, name: str, tag: str | None) -> None:
        self._tags[name] = tag
        self._resolved.pop(name, None)

    def push_scope(self, params: dict[str, str | None]) -> None:
        """Enter a procedure body with the given parameter tags."""
        self._scopes.append({name: self._map(name, tag) for name, tag in params.items()})

    def pop_scope(self) -> None:
        self._scopes.pop()

    def resolve(self, name: str) -> JavaType:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        cached = self._resolved.get(name)
        if cached is not None:
            return cached
        java_type = self._map(name, self._tags.get(name))
        self._resolved[name] = java_type
        return java_type

    def _map(self, name: str, tag: str | None) -> JavaType:
        java_type = map_tag(tag, self._class_types)
        if java_type is None:
            self._diagnostics.warn(
                UNKNOWN_TYPE, f"Unknown type for {name} using Var for {tag}",
            )
            java_type = VAR
        elif not tag:
            self._diagnostics.warn(MISSING_TYPE, f"Unknown type for {name} using Object")
        self._use(java_type)
        return java_type

    def resolve_type(self, name: str) -> str:
        return self.resolve(name).decl

    def type_for_tag(self, tag: str | None, subject: str = "") -> str:
        """Java type for a bare tag, e.g. a procedure's return type."""
        java_type = map_tag(tag, self._class_types)
        if java_type is None:
            self._diagnostics.warn(
                UNKNOWN_TYPE, f"Unknown type for {subject or tag} using Var for {tag}",
            )
            java_type = VAR
        self._use(java_type)
        return java_type.decl

    def is_dynamic(self, name: str) -> bool:
        return self.resolve(name).dynamic

    def _use(self, java_type: JavaType) -> None:
        if java_type.import_name:
            self._ledger.add_import(java_type.import_name)
        if java_type.dynamic:
            self.provide_var_class()

    def provide_var_class(self) -> None:
        """Make the Var wrapper class available to the generated code."""
        if self._config.inline_var_class:
            if not self._ledger.has_class(VAR.decl):
                self._ledger.define_class(VAR.decl, load_source(VAR_CLASS))
        elif self._config.package:
            self._ledger.add_import(f"{self._config.package}.{VAR.decl}")
