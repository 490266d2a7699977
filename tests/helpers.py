"""Block builders shared by the blockjava test suite."""

from __future__ import annotations

from blockjava.blocks import Block, Input, InputKind, VariableBinding, Workspace
from blockjava.config import GeneratorConfig
from blockjava.context import CompilationContext
from blockjava.emitter import JavaEmitter


def value(block_type: str, fields: dict | None = None, **inputs: Block | None) -> Block:
    return Block(
        type=block_type,
        fields=fields or {},
        inputs=[Input(name, InputKind.VALUE, b) for name, b in inputs.items()],
        output=True,
    )


def stmt(
    block_type: str,
    fields: dict | None = None,
    *,
    values: dict | None = None,
    statements: dict | None = None,
    next: Block | None = None,
    comment: str | None = None,
    mutation: dict | None = None,
) -> Block:
    inputs = [Input(n, InputKind.VALUE, b) for n, b in (values or {}).items()]
    inputs += [Input(n, InputKind.STATEMENT, b) for n, b in (statements or {}).items()]
    return Block(
        type=block_type,
        fields=fields or {},
        inputs=inputs,
        next=next,
        comment=comment,
        mutation=mutation or {},
    )


def num(n: str | int | float) -> Block:
    return value("math_number", {"NUM": str(n)})


def text(s: str) -> Block:
    return value("text", {"TEXT": s})


def var(name: str) -> Block:
    return value("variables_get", {"VAR": name})


def arith(op: str, a: Block | None, b: Block | None) -> Block:
    return value("math_arithmetic", {"OP": op}, A=a, B=b)


def compare(op: str, a: Block | None, b: Block | None) -> Block:
    return value("logic_compare", {"OP": op}, A=a, B=b)


def boolean(flag: bool) -> Block:
    return value("logic_boolean", {"BOOL": "TRUE" if flag else "FALSE"})


def print_(item: Block | None, **kw) -> Block:
    return stmt("text_print", values={"TEXT": item}, **kw)


def set_(name: str, item: Block | None, **kw) -> Block:
    return stmt("variables_set", {"VAR": name}, values={"VALUE": item}, **kw)


def chain(*blocks: Block) -> Block:
    """Link statement blocks through ``next`` and return the first."""
    for prev, nxt in zip(blocks, blocks[1:]):
        prev.next = nxt
    return blocks[0]


def workspace(*blocks: Block, variables: dict[str, str | None] | None = None) -> Workspace:
    return Workspace(
        blocks=list(blocks),
        variables=[VariableBinding(n, t) for n, t in (variables or {}).items()],
    )


def make_emitter(
    config: GeneratorConfig | None = None,
    variables: dict[str, str | None] | None = None,
) -> tuple[JavaEmitter, CompilationContext]:
    ctx = CompilationContext(config or GeneratorConfig())
    for name, tag in (variables or {}).items():
        ctx.types.declare(name, tag)
    return JavaEmitter(ctx), ctx


def expr(block: Block, **kw) -> str:
    """Emit *block* as a naked value and return the expression text."""
    emitter, _ = make_emitter(**kw)
    return emitter.block_to_code(block).rstrip("\n").removesuffix(";")
