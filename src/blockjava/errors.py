"""Generator diagnostics, their collection and colored terminal rendering."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    NOTE = "note"


# ANSI color codes
_COLORS = {
    Severity.ERROR: "\033[1;31m",    # bold red
    Severity.WARNING: "\033[1;33m",  # bold yellow
    Severity.NOTE: "\033[1;36m",     # bold cyan
}
_BOLD = "\033[1m"
_BLUE = "\033[1;34m"
_RESET = "\033[0m"

# Diagnostic codes
UNKNOWN_TYPE = "W101"
MISSING_TYPE = "W102"
UNSUPPORTED_BLOCK = "W103"
UNKNOWN_OPERATOR = "W104"
BLOCK_CYCLE = "E201"


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding made while generating code."""

    severity: Severity
    code: str
    message: str
    block_id: str = ""


class DiagnosticRenderer:
    """Renders diagnostics as one header line plus an optional block pointer."""

    def __init__(self, *, color: bool = True) -> None:
        self.color = color

    def _c(self, code: str) -> str:
        return code if self.color else ""

    def render(self, diag: Diagnostic) -> str:
        color = _COLORS[diag.severity]
        lines = [
            f"{self._c(color)}{diag.severity.value}[{diag.code}]{self._c(_RESET)}"
            f"{self._c(_BOLD)}: {diag.message}{self._c(_RESET)}"
        ]
        if diag.block_id:
            lines.append(
                f"  {self._c(_BLUE)}-->{self._c(_RESET)} block {diag.block_id}"
            )
        return "\n".join(lines)


class ContractError(Exception):
    """The caller handed the generator something it cannot work with.

    Raised for collaborator bugs (e.g. no workspace at all), never for
    problems inside the block graph itself.
    """


class DiagnosticLog:
    """Collects the diagnostics of one pass and mirrors them to *logger*."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("blockjava")
        self.diagnostics: list[Diagnostic] = []

    def report(
        self, severity: Severity, code: str, message: str, block_id: str = "",
    ) -> Diagnostic:
        diag = Diagnostic(severity, code, message, block_id)
        self.diagnostics.append(diag)
        level = logging.ERROR if severity is Severity.ERROR else logging.WARNING
        self._logger.log(level, "%s: %s", code, message)
        return diag

    def warn(self, code: str, message: str, block_id: str = "") -> Diagnostic:
        return self.report(Severity.WARNING, code, message, block_id)

    def error(self, code: str, message: str, block_id: str = "") -> Diagnostic:
        return self.report(Severity.ERROR, code, message, block_id)

    def has_errors(self) -> bool:
        return any(d.severity is Severity.ERROR for d in self.diagnostics)
