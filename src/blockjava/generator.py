"""Full generation pass: workspace -> Java source text."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from blockjava.blocks import Workspace
from blockjava.config import GeneratorConfig
from blockjava.context import CompilationContext
from blockjava.emitter import INDENT, JavaEmitter, prefix_lines
from blockjava.errors import ContractError, Diagnostic, Severity

logger = logging.getLogger(__name__)


@dataclass
class GenerateResult:
    """Outcome of a generation pass."""

    code: str
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not any(d.severity is Severity.ERROR for d in self.diagnostics)


def generate(workspace: Workspace, config: GeneratorConfig | None = None) -> GenerateResult:
    """Run one pass over *workspace*.

    Always returns text for a well-formed call; problems inside the block
    graph are reported as diagnostics. Raises ContractError when the caller
    passes no workspace or no block list.
    """
    if workspace is None or workspace.blocks is None:
        raise ContractError("generate() requires a workspace with a block list")

    ctx = CompilationContext(config or GeneratorConfig())
    emitter = JavaEmitter(ctx)
    _init_pass(ctx, workspace)

    body: list[str] = []
    for block in workspace.blocks:
        body.append(emitter.block_to_code(block))
    code = "".join(body)

    # Preamble before imports: rendering globals may still add imports.
    preamble = ctx.ledger.render_preamble(ctx.types, ctx.names)
    if ctx.config.wrap_class:
        final = _wrap_in_class(ctx, preamble, code)
    else:
        final = _assemble(ctx, preamble + code)
    logger.debug(
        "generated %d lines with %d diagnostic(s)",
        final.count("\n"), len(ctx.diagnostics.diagnostics),
    )
    return GenerateResult(code=final, diagnostics=list(ctx.diagnostics.diagnostics))


def compile_workspace(workspace: Workspace, config: GeneratorConfig | None = None) -> str:
    """Generate Java for *workspace* and return only the source text."""
    return generate(workspace, config).code


def _init_pass(ctx: CompilationContext, workspace: Workspace) -> None:
    config = ctx.config
    if config.wrap_class:
        ctx.app_name()
        ctx.base_class()
    for name in config.default_imports:
        ctx.ledger.add_import(name)
    for name in config.extra_imports or ():
        ctx.ledger.add_import(name)

    for binding in workspace.variables:
        ctx.types.declare(binding.name, binding.type)
        ctx.ledger.define_global(binding.name)
    # Reserve user variable names before helpers allocate theirs.
    for binding in workspace.variables:
        ctx.variable(binding.name)


def _imports_header(ctx: CompilationContext) -> str:
    imports = ctx.ledger.render_imports()
    return imports + "\n\n" if imports else ""


def _assemble(ctx: CompilationContext, code: str) -> str:
    final = _imports_header(ctx) + code
    if final and not final.endswith("\n"):
        final += "\n"
    return final + ctx.ledger.render_classes()


def _wrap_in_class(ctx: CompilationContext, preamble: str, code: str) -> str:
    header = f"public class {ctx.app_name()}"
    base = ctx.base_class()
    if base:
        header += f" extends {base}"
    members = prefix_lines((preamble + code).rstrip("\n") + "\n", INDENT)
    members = members.replace(INDENT + "\n", "\n")
    text = f"{header} {{\n{members}}}\n"
    if ctx.config.package:
        text = f"package {ctx.config.package};\n\n" + _imports_header(ctx) + text
    else:
        text = _imports_header(ctx) + text
    classes = ctx.ledger.render_classes()
    if classes:
        text += "\n" + classes
    return text
