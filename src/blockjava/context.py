"""Per-pass generation state."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from blockjava.config import GeneratorConfig
from blockjava.errors import DiagnosticLog
from blockjava.java_types import TypeResolver
from blockjava.ledger import DeclarationLedger
from blockjava.names import RESERVED_WORDS, NameKind, NameRegistry

logger = logging.getLogger(__name__)


@dataclass
class CompilationContext:
    """Everything one pass mutates, built fresh for every pass.

    Nothing here is shared between passes, so independent workspaces can be
    compiled concurrently with separate contexts.
    """

    config: GeneratorConfig
    names: NameRegistry = field(default_factory=lambda: NameRegistry(RESERVED_WORDS))
    ledger: DeclarationLedger = field(default_factory=DeclarationLedger)
    diagnostics: DiagnosticLog = field(default_factory=lambda: DiagnosticLog(logger))
    types: TypeResolver = field(init=False)

    def __post_init__(self) -> None:
        self.types = TypeResolver(self.ledger, self.config, self.diagnostics)

    def app_name(self) -> str:
        return self.names.get_name(self.config.app_name, NameKind.CLASS)

    def base_class(self) -> str:
        if not self.config.base_class:
            return ""
        return self.names.get_name(self.config.base_class, NameKind.CLASS)

    def variable(self, name: str) -> str:
        return self.names.get_name(name, NameKind.VARIABLE)

    def procedure(self, name: str) -> str:
        return self.names.get_name(name, NameKind.PROCEDURE)
