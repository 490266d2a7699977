"""Generate Java source text from a block graph."""

from __future__ import annotations

import re
from dataclasses import dataclass

from blockjava.blocks import VALUE_KINDS, Block, BlockKind
from blockjava.context import CompilationContext
from blockjava.errors import BLOCK_CYCLE, UNKNOWN_OPERATOR, UNSUPPORTED_BLOCK
from blockjava.java_runtime import TO_STRING_HELPER, load_source
from blockjava.names import NameKind
from blockjava.order import Order, needs_parens, tighter

INDENT = "    "
# Java accepts empty bodies, but an explicit no-op keeps them visible.
PASS = INDENT + ";\n"

_NUMBER = re.compile(r"\s*-?\d+(\.\d+)?\s*")
_INNER_NEWLINE = re.compile(r"(?!\n\Z)\n")

# Definitions carry their own comment into the ledger.
_DEFINITION_KINDS = frozenset({
    BlockKind.PROCEDURES_DEFNORETURN,
    BlockKind.PROCEDURES_DEFRETURN,
})

_ARITHMETIC: dict[str, tuple[str, Order]] = {
    "ADD": (" + ", Order.ADDITIVE),
    "MINUS": (" - ", Order.ADDITIVE),
    "MULTIPLY": (" * ", Order.MULTIPLICATIVE),
    "DIVIDE": (" / ", Order.MULTIPLICATIVE),
}

_COMPARE: dict[str, tuple[str, Order]] = {
    "EQ": (" == ", Order.EQUALITY),
    "NEQ": (" != ", Order.EQUALITY),
    "LT": (" < ", Order.RELATIONAL),
    "LTE": (" <= ", Order.RELATIONAL),
    "GT": (" > ", Order.RELATIONAL),
    "GTE": (" >= ", Order.RELATIONAL),
}

_MATH_FUNCTIONS: dict[str, str] = {
    "ABS": "Math.abs",
    "ROOT": "Math.sqrt",
    "LN": "Math.log",
    "LOG10": "Math.log10",
    "EXP": "Math.exp",
}


@dataclass(frozen=True)
class StatementResult:
    """Output of one statement rule.

    ``trailing`` is appended after everything that follows the block in its
    chain, and ``next_indent`` prefixes each of those following lines. Both
    affect only this block's successors.
    """

    text: str
    trailing: str = ""
    next_indent: str = ""


def prefix_lines(text: str, prefix: str) -> str:
    """Prefix every line of *text*; a final newline gets no prefix after it."""
    if not text:
        return ""
    return prefix + _INNER_NEWLINE.sub("\n" + prefix, text)


def is_number(text: str) -> bool:
    return _NUMBER.fullmatch(text) is not None


def quote(text: str) -> str:
    """Encode *text* as a Java string literal, complete with quotes."""
    out: list[str] = ['"']
    for ch in text:
        if ch == "\\":
            out.append("\\\\")
        elif ch == '"':
            out.append('\\"')
        elif ch == "\n":
            out.append("\\n")
        elif ch == "\r":
            out.append("\\r")
        elif ch == "\t":
            out.append("\\t")
        elif ord(ch) < 0x20 or ord(ch) > 0x7E:
            if ord(ch) > 0xFFFF:
                # Java strings are UTF-16: emit a surrogate pair.
                encoded = ch.encode("utf-16-be")
                out.append(f"\\u{encoded[0]:02x}{encoded[1]:02x}")
                out.append(f"\\u{encoded[2]:02x}{encoded[3]:02x}")
            else:
                out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(ch)
    out.append('"')
    return "".join(out)


class JavaEmitter:
    """Emit Java for the blocks of one pass."""

    def __init__(self, ctx: CompilationContext) -> None:
        self._ctx = ctx
        # Blocks whose emission is in progress, for cycle detection.
        self._active: set[int] = set()

    # ── Statements ─────────────────────────────────────────────

    def block_to_code(self, block: Block | None) -> str:
        """Generate a block and every block chained after it."""
        chain: list[tuple[Block, StatementResult]] = []
        entered: list[int] = []
        current = block
        while current is not None:
            if id(current) in self._active:
                self._ctx.diagnostics.error(
                    BLOCK_CYCLE,
                    f"Cycle detected at block '{current.type}', chain truncated",
                    current.id,
                )
                break
            self._active.add(id(current))
            entered.append(id(current))
            chain.append((current, self._emit_statement(current)))
            current = current.next
        for key in entered:
            self._active.discard(key)

        code = ""
        for current, result in reversed(chain):
            if result.next_indent:
                code = prefix_lines(code, result.next_indent)
            code = self._comments(current) + result.text + code + result.trailing
        return code

    def statement_to_code(self, block: Block, name: str) -> str:
        """Generate the statement input *name*, indented one level."""
        target = block.input_target(name)
        return prefix_lines(self.block_to_code(target), INDENT)

    def _comments(self, block: Block) -> str:
        if block.kind in _DEFINITION_KINDS:
            return ""
        code = ""
        if block.comment:
            code += prefix_lines(block.comment, "// ") + "\n"
        # Comments on nested statements are emitted with those statements.
        for child in block.value_children():
            nested = "\n".join(b.comment for b in child.descendants() if b.comment)
            if nested:
                code += prefix_lines(nested, "// ") + "\n"
        return code

    def _emit_statement(self, block: Block) -> StatementResult:
        kind = block.kind
        if block.output or kind in VALUE_KINDS:
            code, _ = self._dispatch_value(block)
            # A naked value: top-level block with an unplugged output.
            return StatementResult(code + ";\n" if code else "")
        if kind is BlockKind.VARIABLES_SET:
            return self._emit_variables_set(block)
        if kind is BlockKind.CONTROLS_IF:
            return self._emit_if(block)
        if kind is BlockKind.CONTROLS_WHILE_UNTIL:
            return self._emit_while_until(block)
        if kind is BlockKind.CONTROLS_REPEAT_EXT:
            return self._emit_repeat(block)
        if kind is BlockKind.CONTROLS_FLOW_STATEMENTS:
            return self._emit_flow_statement(block)
        if kind is BlockKind.CONTROLS_SYNCHRONIZED:
            return self._emit_synchronized(block)
        if kind is BlockKind.TEXT_PRINT:
            text = self.to_text(block, "TEXT") or '""'
            return StatementResult(f"System.out.println({text});\n")
        if kind in _DEFINITION_KINDS:
            return self._emit_procedure_def(block)
        if kind is BlockKind.PROCEDURES_CALLNORETURN:
            code, _ = self._emit_call(block)
            return StatementResult(code + ";\n")
        if kind is BlockKind.PROCEDURES_IFRETURN:
            return self._emit_if_return(block)
        self._ctx.diagnostics.warn(
            UNSUPPORTED_BLOCK, f"Unsupported block type '{block.type}'", block.id,
        )
        return StatementResult(f"// Unsupported block: {block.type}\n")

    def _emit_variables_set(self, block: Block) -> StatementResult:
        name = block.field_value("VAR")
        var = self._ctx.variable(name)
        value = self.value_to_code(block, "VALUE", Order.ASSIGNMENT) or "0"
        if self._ctx.types.is_dynamic(name):
            return StatementResult(f"{var} = new Var({value});\n")
        return StatementResult(f"{var} = {value};\n")

    def _emit_if(self, block: Block) -> StatementResult:
        elseif_count = self._numbered_count(block, ("elseIfCount", "elseif"), "IF|DO", offset=1)
        code = ""
        for n in range(elseif_count + 1):
            cond = self.value_to_code(block, f"IF{n}", Order.NONE) or "false"
            branch = self.statement_to_code(block, f"DO{n}") or PASS
            keyword = "} else if" if n else "if"
            code += f"{keyword} ({cond}) {{\n{branch}"
        has_else = block.mutation.get("hasElse") or block.mutation.get("else")
        if has_else or block.input_target("ELSE") is not None:
            branch = self.statement_to_code(block, "ELSE") or PASS
            code += f"}} else {{\n{branch}"
        return StatementResult(code + "}\n")

    def _numbered_count(
        self, block: Block, keys: tuple[str, ...], prefix: str, offset: int = 0,
    ) -> int:
        """Count of numbered inputs (``IF0``, ``ADD1``, ...) a block carries.

        The mutation's declared count is honored, but never below what the
        highest connected input needs. *offset* is subtracted from the input
        count, for mutations that count extra branches only.
        """
        pattern = re.compile(rf"(?:{prefix})(\d+)")
        present = 0
        for inp in block.inputs:
            match = pattern.fullmatch(inp.name)
            if match is not None:
                present = max(present, int(match.group(1)) + 1 - offset)
        for key in keys:
            raw = block.mutation.get(key)
            if raw is None:
                continue
            try:
                declared = int(raw)
            except (TypeError, ValueError):
                self._ctx.diagnostics.warn(
                    UNKNOWN_OPERATOR, f"Bad '{key}' value {raw!r} on '{block.type}'", block.id,
                )
                break
            return max(declared, present)
        return present

    def _emit_while_until(self, block: Block) -> StatementResult:
        until = block.field_value("MODE") == "UNTIL"
        order = Order.LOGICAL_NOT if until else Order.NONE
        cond = self.value_to_code(block, "BOOL", order) or "false"
        if until:
            cond = "!" + cond
        branch = self.statement_to_code(block, "DO") or PASS
        return StatementResult(f"while ({cond}) {{\n{branch}}}\n")

    def _emit_repeat(self, block: Block) -> StatementResult:
        times = self.value_to_code(block, "TIMES", Order.RELATIONAL) or "0"
        branch = self.statement_to_code(block, "DO") or PASS
        loop_var = self._ctx.names.get_distinct_name("count", NameKind.VARIABLE)
        return StatementResult(
            f"for (int {loop_var} = 0; {loop_var} < {times}; {loop_var}++) {{\n"
            f"{branch}}}\n"
        )

    def _emit_flow_statement(self, block: Block) -> StatementResult:
        flow = block.field_value("FLOW")
        if flow == "BREAK":
            return StatementResult("break;\n")
        if flow == "CONTINUE":
            return StatementResult("continue;\n")
        self._ctx.diagnostics.warn(
            UNKNOWN_OPERATOR, f"Unknown flow statement '{flow}'", block.id,
        )
        return StatementResult("")

    def _emit_synchronized(self, block: Block) -> StatementResult:
        # Wraps the rest of the chain rather than a nested body.
        lock = self.value_to_code(block, "LOCK", Order.NONE) or "this"
        return StatementResult(
            f"synchronized ({lock}) {{\n", trailing="}\n", next_indent=INDENT,
        )

    def _emit_procedure_def(self, block: Block) -> StatementResult:
        types = self._ctx.types
        func_name = self._ctx.procedure(block.field_value("NAME"))

        params: dict[str, str | None] = {}
        for param in block.mutation.get("params", []):
            if isinstance(param, dict):
                params[str(param.get("name", ""))] = param.get("type")
            else:
                params[str(param)] = None
        types.push_scope(params)
        try:
            args = [
                f"{types.resolve_type(pname)} {self._ctx.variable(pname)}" for pname in params
            ]
            branch = self.statement_to_code(block, "STACK")
            if block.kind is BlockKind.PROCEDURES_DEFRETURN:
                ret_type = types.type_for_tag(block.mutation.get("returns"), func_name)
                ret = self.value_to_code(block, "RETURN", Order.NONE)
                ret_code = f"{INDENT}return {ret};\n" if ret else ""
            else:
                ret_type = "void"
                ret_code = ""
        finally:
            types.pop_scope()

        static = "static " if block.mutation.get("static") else ""
        comment = prefix_lines(block.comment, "// ") + "\n" if block.comment else ""
        code = (
            f"{comment}public {static}{ret_type} {func_name}({', '.join(args)}) {{\n"
            f"{branch}{ret_code}}}"
        )
        self._ctx.ledger.define(func_name, code)
        return StatementResult("")

    def _emit_if_return(self, block: Block) -> StatementResult:
        cond = self.value_to_code(block, "CONDITION", Order.NONE) or "false"
        if block.mutation.get("value", True) and block.get_input("VALUE") is not None:
            value = self.value_to_code(block, "VALUE", Order.NONE) or "null"
            ret = f"return {value};"
        else:
            ret = "return;"
        return StatementResult(f"if ({cond}) {{\n{INDENT}{ret}\n}}\n")

    # ── Values ─────────────────────────────────────────────────

    def value_to_code(self, block: Block, name: str, order: Order) -> str:
        """Generate the value input *name*, parenthesized when its own
        precedence binds looser than *order*. Empty when unconnected."""
        target = block.input_target(name)
        if target is None:
            return ""
        code, inner = self._emit_value(target)
        if not code:
            return ""
        if needs_parens(inner, order):
            code = f"({code})"
        return code

    def value_type(self, block: Block, name: str) -> str:
        """Declared output type tag of the block plugged into *name*."""
        target = block.input_target(name)
        if target is None:
            return ""
        return target.output_check or ""

    def to_text(self, block: Block, name: str) -> str:
        """Generate input *name* as an expression of Java type String."""
        target = block.input_target(name)
        if target is None:
            return ""
        code, order = self._emit_value(target)
        item = code.strip()
        if not item:
            return ""
        if item.startswith('"'):
            return f"({item})" if needs_parens(order, Order.ADDITIVE) else item

        if target.kind is BlockKind.VARIABLES_GET:
            if self._ctx.types.is_dynamic(target.field_value("VAR")):
                return item + ".toString()"
        if is_number(item):
            return f'"{item}"'
        if target.output_check == "Var":
            if needs_parens(order, Order.MEMBER):
                item = f"({item})"
            return item + ".toString()"

        ledger = self._ctx.ledger
        ledger.add_import("java.text.DecimalFormat")
        ledger.add_import("java.text.NumberFormat")
        func_name = ledger.provide_function(
            "blocklyToString", load_source(TO_STRING_HELPER), self._ctx.names,
        )
        return f"{func_name}({item})"

    def _emit_value(self, block: Block) -> tuple[str, Order]:
        if id(block) in self._active:
            self._ctx.diagnostics.error(
                BLOCK_CYCLE, f"Cycle detected at block '{block.type}'", block.id,
            )
            return "", Order.ATOMIC
        self._active.add(id(block))
        try:
            return self._dispatch_value(block)
        finally:
            self._active.discard(id(block))

    def _dispatch_value(self, block: Block) -> tuple[str, Order]:
        kind = block.kind
        if kind is BlockKind.MATH_NUMBER:
            return self._emit_number(block)
        if kind is BlockKind.TEXT:
            return quote(block.field_value("TEXT")), Order.ATOMIC
        if kind is BlockKind.LOGIC_BOOLEAN:
            value = "true" if block.field_value("BOOL") == "TRUE" else "false"
            return value, Order.ATOMIC
        if kind is BlockKind.LOGIC_NULL:
            return "null", Order.ATOMIC
        if kind is BlockKind.VARIABLES_GET:
            return self._ctx.variable(block.field_value("VAR")), Order.ATOMIC
        if kind is BlockKind.MATH_ARITHMETIC:
            return self._emit_arithmetic(block)
        if kind is BlockKind.MATH_SINGLE:
            return self._emit_math_single(block)
        if kind is BlockKind.MATH_MODULO:
            a = self.value_to_code(block, "DIVIDEND", Order.MULTIPLICATIVE) or "0"
            b = self.value_to_code(block, "DIVISOR", tighter(Order.MULTIPLICATIVE)) or "0"
            return f"{a} % {b}", Order.MULTIPLICATIVE
        if kind is BlockKind.LOGIC_COMPARE:
            return self._emit_compare(block)
        if kind is BlockKind.LOGIC_OPERATION:
            return self._emit_logic_operation(block)
        if kind is BlockKind.LOGIC_NEGATE:
            value = self.value_to_code(block, "BOOL", Order.LOGICAL_NOT) or "true"
            return "!" + value, Order.LOGICAL_NOT
        if kind is BlockKind.LOGIC_TERNARY:
            cond = self.value_to_code(block, "IF", tighter(Order.CONDITIONAL)) or "false"
            then = self.value_to_code(block, "THEN", Order.CONDITIONAL) or "null"
            other = self.value_to_code(block, "ELSE", Order.CONDITIONAL) or "null"
            return f"{cond} ? {then} : {other}", Order.CONDITIONAL
        if kind is BlockKind.TEXT_JOIN:
            return self._emit_text_join(block)
        if kind is BlockKind.PROCEDURES_CALLRETURN:
            return self._emit_call(block)
        self._ctx.diagnostics.warn(
            UNSUPPORTED_BLOCK, f"Unsupported value block type '{block.type}'", block.id,
        )
        return "", Order.ATOMIC

    def _emit_number(self, block: Block) -> tuple[str, Order]:
        raw = block.field_value("NUM", "0").strip()
        if is_number(raw):
            code = raw
        else:
            try:
                code = repr(float(raw))
            except ValueError:
                self._ctx.diagnostics.warn(
                    UNKNOWN_OPERATOR, f"Not a number: '{raw}'", block.id,
                )
                code = "0"
        order = Order.UNARY_SIGN if code.startswith("-") else Order.ATOMIC
        return code, order

    def _emit_arithmetic(self, block: Block) -> tuple[str, Order]:
        op = block.field_value("OP")
        if op == "POWER":
            a = self.value_to_code(block, "A", Order.NONE) or "0"
            b = self.value_to_code(block, "B", Order.NONE) or "0"
            return f"Math.pow({a}, {b})", Order.FUNCTION_CALL
        if op not in _ARITHMETIC:
            self._ctx.diagnostics.warn(
                UNKNOWN_OPERATOR, f"Unknown arithmetic operator '{op}'", block.id,
            )
            return "", Order.ATOMIC
        operator, order = _ARITHMETIC[op]
        # a - (b - c) and a / (b / c) keep their parentheses.
        right = tighter(order) if op in ("MINUS", "DIVIDE") else order
        a = self.value_to_code(block, "A", order) or "0"
        b = self.value_to_code(block, "B", right) or "0"
        return a + operator + b, order

    def _emit_math_single(self, block: Block) -> tuple[str, Order]:
        op = block.field_value("OP")
        if op == "NEG":
            value = self.value_to_code(block, "NUM", Order.UNARY_SIGN) or "0"
            if value.startswith("-"):
                # --3 would be a decrement.
                value = " " + value
            return "-" + value, Order.UNARY_SIGN
        value = self.value_to_code(block, "NUM", Order.NONE) or "0"
        if op == "POW10":
            return f"Math.pow(10, {value})", Order.FUNCTION_CALL
        func = _MATH_FUNCTIONS.get(op)
        if func is None:
            self._ctx.diagnostics.warn(
                UNKNOWN_OPERATOR, f"Unknown math operator '{op}'", block.id,
            )
            return "", Order.ATOMIC
        return f"{func}({value})", Order.FUNCTION_CALL

    def _emit_compare(self, block: Block) -> tuple[str, Order]:
        op = block.field_value("OP")
        if op not in _COMPARE:
            self._ctx.diagnostics.warn(
                UNKNOWN_OPERATOR, f"Unknown comparison '{op}'", block.id,
            )
            return "", Order.ATOMIC
        operator, order = _COMPARE[op]
        a = self.value_to_code(block, "A", order) or "0"
        b = self.value_to_code(block, "B", tighter(order)) or "0"
        return a + operator + b, order

    def _emit_logic_operation(self, block: Block) -> tuple[str, Order]:
        if block.field_value("OP") == "AND":
            operator, order = " && ", Order.LOGICAL_AND
        else:
            operator, order = " || ", Order.LOGICAL_OR
        a = self.value_to_code(block, "A", order)
        b = self.value_to_code(block, "B", order)
        if not a and not b:
            a = b = "false"
        else:
            # Single missing operand: pick the value that doesn't change the result.
            default = "true" if order is Order.LOGICAL_AND else "false"
            a = a or default
            b = b or default
        return a + operator + b, order

    def _emit_text_join(self, block: Block) -> tuple[str, Order]:
        count = self._numbered_count(block, ("itemCount", "items"), "ADD")
        if count == 0:
            return '""', Order.ATOMIC
        parts = [self.to_text(block, f"ADD{n}") or '""' for n in range(count)]
        return " + ".join(parts), Order.ADDITIVE

    def _emit_call(self, block: Block) -> tuple[str, Order]:
        func_name = self._ctx.procedure(block.field_value("NAME"))
        arg_names = [inp.name for inp in block.inputs if re.fullmatch(r"ARG\d+", inp.name)]
        arg_names.sort(key=lambda n: int(n[3:]))
        args = [self.value_to_code(block, n, Order.NONE) or "null" for n in arg_names]
        return f"{func_name}({', '.join(args)})", Order.FUNCTION_CALL
