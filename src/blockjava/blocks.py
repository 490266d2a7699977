"""Block graph definitions consumed by the Java generator.

Blocks are produced by the editor (or by ``blockjava.loader``) and are only
read during generation, never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class InputKind(Enum):
    VALUE = "value"
    STATEMENT = "statement"
    DUMMY = "dummy"


class BlockKind(Enum):
    """Every block type the generator has an emission rule for."""

    # Values
    MATH_NUMBER = "math_number"
    MATH_ARITHMETIC = "math_arithmetic"
    MATH_SINGLE = "math_single"
    MATH_MODULO = "math_modulo"
    TEXT = "text"
    TEXT_JOIN = "text_join"
    LOGIC_BOOLEAN = "logic_boolean"
    LOGIC_NULL = "logic_null"
    LOGIC_COMPARE = "logic_compare"
    LOGIC_OPERATION = "logic_operation"
    LOGIC_NEGATE = "logic_negate"
    LOGIC_TERNARY = "logic_ternary"
    VARIABLES_GET = "variables_get"
    PROCEDURES_CALLRETURN = "procedures_callreturn"

    # Statements
    VARIABLES_SET = "variables_set"
    CONTROLS_IF = "controls_if"
    CONTROLS_WHILE_UNTIL = "controls_whileUntil"
    CONTROLS_REPEAT_EXT = "controls_repeat_ext"
    CONTROLS_FLOW_STATEMENTS = "controls_flow_statements"
    CONTROLS_SYNCHRONIZED = "controls_synchronized"
    TEXT_PRINT = "text_print"
    PROCEDURES_DEFNORETURN = "procedures_defnoreturn"
    PROCEDURES_DEFRETURN = "procedures_defreturn"
    PROCEDURES_CALLNORETURN = "procedures_callnoreturn"
    PROCEDURES_IFRETURN = "procedures_ifreturn"

    UNKNOWN = ""

    @classmethod
    def from_tag(cls, tag: str) -> BlockKind:
        try:
            return cls(tag)
        except ValueError:
            return cls.UNKNOWN


@dataclass
class Input:
    name: str
    kind: InputKind = InputKind.VALUE
    block: Block | None = None


@dataclass(eq=False)
class Block:
    type: str
    id: str = ""
    fields: dict[str, str] = field(default_factory=dict)
    inputs: list[Input] = field(default_factory=list)
    next: Block | None = None
    output: bool = False
    output_check: str | None = None
    comment: str | None = None
    mutation: dict[str, Any] = field(default_factory=dict)

    @property
    def kind(self) -> BlockKind:
        return BlockKind.from_tag(self.type)

    def field_value(self, name: str, default: str = "") -> str:
        value = self.fields.get(name)
        return default if value is None else str(value)

    def get_input(self, name: str) -> Input | None:
        for inp in self.inputs:
            if inp.name == name:
                return inp
        return None

    def input_target(self, name: str) -> Block | None:
        """Return the block connected to input *name*, if any."""
        inp = self.get_input(name)
        return inp.block if inp is not None else None

    def value_children(self) -> Iterator[Block]:
        for inp in self.inputs:
            if inp.kind is InputKind.VALUE and inp.block is not None:
                yield inp.block

    def children(self) -> Iterator[Block]:
        """All directly connected blocks: inputs first, then ``next``."""
        for inp in self.inputs:
            if inp.block is not None:
                yield inp.block
        if self.next is not None:
            yield self.next

    def descendants(self) -> Iterator[Block]:
        """Depth-first walk of this block and everything below it.

        Guards against cycles so a malformed graph cannot loop forever.
        """
        seen: set[int] = set()
        stack: list[Block] = [self]
        while stack:
            block = stack.pop()
            if id(block) in seen:
                continue
            seen.add(id(block))
            yield block
            stack.extend(reversed(list(block.children())))


@dataclass(frozen=True)
class VariableBinding:
    name: str
    type: str | None = None


@dataclass
class Workspace:
    blocks: list[Block] = field(default_factory=list)
    variables: list[VariableBinding] = field(default_factory=list)


VALUE_KINDS: frozenset[BlockKind] = frozenset({
    BlockKind.MATH_NUMBER,
    BlockKind.MATH_ARITHMETIC,
    BlockKind.MATH_SINGLE,
    BlockKind.MATH_MODULO,
    BlockKind.TEXT,
    BlockKind.TEXT_JOIN,
    BlockKind.LOGIC_BOOLEAN,
    BlockKind.LOGIC_NULL,
    BlockKind.LOGIC_COMPARE,
    BlockKind.LOGIC_OPERATION,
    BlockKind.LOGIC_NEGATE,
    BlockKind.LOGIC_TERNARY,
    BlockKind.VARIABLES_GET,
    BlockKind.PROCEDURES_CALLRETURN,
})
