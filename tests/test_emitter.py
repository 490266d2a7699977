"""Tests for emitter: Java expressions and statement chains from blocks."""

from __future__ import annotations

from helpers import (
    arith,
    boolean,
    chain,
    compare,
    expr,
    make_emitter,
    num,
    print_,
    set_,
    stmt,
    text,
    value,
    var,
)

from blockjava.blocks import Block, Input, InputKind
from blockjava.emitter import is_number, prefix_lines, quote
from blockjava.errors import BLOCK_CYCLE, UNSUPPORTED_BLOCK


class TestPrecedence:
    def test_lower_precedence_child_is_wrapped(self):
        block = arith("MULTIPLY", arith("ADD", var("a"), var("b")), var("c"))
        assert expr(block) == "(a + b) * c"

    def test_higher_precedence_child_is_inlined(self):
        block = arith("ADD", var("a"), arith("MULTIPLY", var("b"), var("c")))
        assert expr(block) == "a + b * c"

    def test_associative_chain_has_no_parens(self):
        block = arith("ADD", arith("ADD", var("a"), var("b")), var("c"))
        assert expr(block) == "a + b + c"

    def test_subtraction_right_operand_keeps_parens(self):
        block = arith("MINUS", var("a"), arith("MINUS", var("b"), var("c")))
        assert expr(block) == "a - (b - c)"

    def test_division_right_operand_keeps_parens(self):
        block = arith("DIVIDE", var("a"), arith("MULTIPLY", var("b"), var("c")))
        assert expr(block) == "a / (b * c)"

    def test_comparison_of_sums(self):
        block = compare("LT", arith("ADD", var("a"), num(1)), var("b"))
        assert expr(block) == "a + 1 < b"

    def test_logic_inside_negation(self):
        inner = value("logic_operation", {"OP": "AND"}, A=var("a"), B=var("b"))
        block = value("logic_negate", BOOL=inner)
        assert expr(block) == "!(a && b)"

    def test_or_inside_and(self):
        inner = value("logic_operation", {"OP": "OR"}, A=var("a"), B=var("b"))
        block = value("logic_operation", {"OP": "AND"}, A=inner, B=var("c"))
        assert expr(block) == "(a || b) && c"

    def test_power_is_a_call(self):
        block = arith("MULTIPLY", arith("POWER", var("a"), num(2)), var("b"))
        assert expr(block) == "Math.pow(a, 2) * b"

    def test_negative_number_in_product(self):
        block = arith("MULTIPLY", var("a"), num(-2))
        assert expr(block) == "a * -2"

    def test_ternary_condition_wrapped_when_ternary(self):
        inner = value("logic_ternary", IF=var("p"), THEN=var("q"), ELSE=var("r"))
        block = value("logic_ternary", IF=inner, THEN=num(1), ELSE=num(2))
        assert expr(block) == "(p ? q : r) ? 1 : 2"

    def test_modulo(self):
        block = value("math_modulo", DIVIDEND=arith("ADD", var("a"), var("b")), DIVISOR=num(3))
        assert expr(block) == "(a + b) % 3"


class TestValueDefaults:
    def test_missing_arithmetic_operands(self):
        assert expr(arith("ADD", None, None)) == "0 + 0"

    def test_missing_logic_operands(self):
        block = value("logic_operation", {"OP": "AND"}, A=var("a"), B=None)
        assert expr(block) == "a && true"
        block = value("logic_operation", {"OP": "OR"}, A=None, B=None)
        assert expr(block) == "false || false"

    def test_unconnected_socket_is_empty(self):
        emitter, _ = make_emitter()
        block = arith("ADD", None, None)
        assert emitter.value_to_code(block, "A", 0) == ""
        assert emitter.value_to_code(block, "MISSING", 0) == ""

    def test_negation_of_negative(self):
        block = value("math_single", {"OP": "NEG"}, NUM=num(-3))
        assert expr(block) == "- -3"

    def test_math_functions(self):
        assert expr(value("math_single", {"OP": "ROOT"}, NUM=num(9))) == "Math.sqrt(9)"
        assert expr(value("math_single", {"OP": "POW10"}, NUM=num(2))) == "Math.pow(10, 2)"


class TestLiterals:
    def test_text_is_quoted(self):
        assert expr(text('say "hi"\n')) == '"say \\"hi\\"\\n"'

    def test_booleans_and_null(self):
        assert expr(boolean(True)) == "true"
        assert expr(boolean(False)) == "false"
        assert expr(value("logic_null")) == "null"

    def test_variable_name_is_made_safe(self):
        assert expr(var("for")) == "for2"

    def test_quote_non_ascii(self):
        assert quote("é") == '"\\u00e9"'

    def test_is_number(self):
        assert is_number("42")
        assert is_number("-1.5")
        assert not is_number("a1")
        assert not is_number("1e3")


class TestToText:
    def test_quoted_literal_untouched(self):
        emitter, _ = make_emitter()
        assert emitter.to_text(print_(text("hi")), "TEXT") == '"hi"'

    def test_number_is_quoted(self):
        emitter, _ = make_emitter()
        assert emitter.to_text(print_(num(42)), "TEXT") == '"42"'

    def test_dynamic_variable_uses_to_string(self):
        emitter, ctx = make_emitter(variables={"v": "Var"})
        assert emitter.to_text(print_(var("v")), "TEXT") == "v.toString()"
        assert not ctx.ledger.has_definition("blocklyToString")

    def test_var_typed_output_uses_to_string(self):
        emitter, _ = make_emitter()
        call = value("procedures_callreturn", {"NAME": "lookup"})
        call.output_check = "Var"
        assert emitter.to_text(print_(call), "TEXT") == "lookup().toString()"

    def test_other_values_use_helper(self):
        emitter, ctx = make_emitter(variables={"n": "Number"})
        code = emitter.to_text(print_(arith("ADD", var("n"), num(1))), "TEXT")
        assert code == "blocklyToString(n + 1)"
        assert ctx.ledger.has_definition("blocklyToString")
        assert {"java.text.DecimalFormat", "java.text.NumberFormat"} <= ctx.ledger.imports

    def test_helper_registered_once_for_many_call_sites(self):
        emitter, ctx = make_emitter()
        body = chain(
            print_(var("a")),
            print_(var("b")),
            print_(arith("ADD", var("a"), var("b"))),
        )
        code = emitter.block_to_code(body)
        assert code.count("blocklyToString(") == 3
        preamble = ctx.ledger.render_preamble(ctx.types, ctx.names)
        assert preamble.count("public static String blocklyToString(Object object)") == 1
        assert '"UNKNOWN"' in preamble

    def test_unconnected_is_empty(self):
        emitter, _ = make_emitter()
        assert emitter.to_text(print_(None), "TEXT") == ""

    def test_value_type(self):
        emitter, _ = make_emitter()
        block = num(1)
        block.output_check = "Number"
        holder = print_(block)
        assert emitter.value_type(holder, "TEXT") == "Number"
        assert emitter.value_type(print_(None), "TEXT") == ""


class TestStatements:
    def test_naked_value_gets_semicolon(self):
        emitter, _ = make_emitter()
        assert emitter.block_to_code(var("x")) == "x;\n"

    def test_chain_concatenates(self):
        emitter, _ = make_emitter(variables={"x": "Number"})
        code = emitter.block_to_code(chain(set_("x", num(1)), set_("x", num(2))))
        assert code == "x = 1;\nx = 2;\n"

    def test_dynamic_assignment_wraps_in_var(self):
        emitter, _ = make_emitter(variables={"v": "Var"})
        assert emitter.block_to_code(set_("v", num(3))) == "v = new Var(3);\n"

    def test_if_elseif_else(self):
        emitter, _ = make_emitter(variables={"x": "Number"})
        block = stmt(
            "controls_if",
            values={"IF0": var("a"), "IF1": var("b")},
            statements={"DO0": set_("x", num(1)), "DO1": None, "ELSE": set_("x", num(3))},
            mutation={"elseif": 1, "else": True},
        )
        assert emitter.block_to_code(block) == (
            "if (a) {\n"
            "    x = 1;\n"
            "} else if (b) {\n"
            "    ;\n"
            "} else {\n"
            "    x = 3;\n"
            "}\n"
        )

    def test_while_until_negates(self):
        emitter, _ = make_emitter()
        block = stmt(
            "controls_whileUntil", {"MODE": "UNTIL"},
            values={"BOOL": compare("EQ", var("a"), num(1))},
            statements={"DO": print_(text("x"))},
        )
        assert emitter.block_to_code(block) == (
            "while (!(a == 1)) {\n"
            '    System.out.println("x");\n'
            "}\n"
        )

    def test_repeat_loop_variable_is_fresh(self):
        emitter, ctx = make_emitter()
        ctx.variable("count")
        block = stmt("controls_repeat_ext", values={"TIMES": num(3)})
        assert emitter.block_to_code(block) == (
            "for (int count2 = 0; count2 < 3; count2++) {\n"
            "    ;\n"
            "}\n"
        )

    def test_flow_statements(self):
        emitter, _ = make_emitter()
        assert emitter.block_to_code(stmt("controls_flow_statements", {"FLOW": "BREAK"})) == "break;\n"
        assert emitter.block_to_code(stmt("controls_flow_statements", {"FLOW": "CONTINUE"})) == "continue;\n"

    def test_nested_blocks_indent(self):
        emitter, _ = make_emitter()
        inner = stmt("controls_if", values={"IF0": var("b")}, statements={"DO0": print_(text("hi"))})
        outer = stmt("controls_if", values={"IF0": var("a")}, statements={"DO0": inner})
        assert emitter.block_to_code(outer) == (
            "if (a) {\n"
            "    if (b) {\n"
            '        System.out.println("hi");\n'
            "    }\n"
            "}\n"
        )


class TestComments:
    def test_block_comment_prefixed(self):
        emitter, _ = make_emitter()
        block = print_(text("x"), comment="first\nsecond")
        assert emitter.block_to_code(block) == (
            '// first\n// second\nSystem.out.println("x");\n'
        )

    def test_value_input_comments_collected(self):
        emitter, _ = make_emitter()
        operand = var("a")
        operand.comment = "operand"
        block = print_(arith("ADD", operand, num(1)))
        assert emitter.block_to_code(block).startswith("// operand\n")

    def test_nested_statement_comments_not_duplicated(self):
        emitter, _ = make_emitter()
        body = print_(text("x"), comment="inside")
        block = stmt("controls_if", values={"IF0": var("a")}, statements={"DO0": body})
        code = emitter.block_to_code(block)
        assert code.count("// inside") == 1
        assert "    // inside\n" in code


class TestChainDecorations:
    def test_synchronized_wraps_successors(self):
        emitter, _ = make_emitter()
        block = chain(
            stmt("controls_synchronized", values={"LOCK": var("lock")}),
            print_(text("a")),
            print_(text("b")),
        )
        assert emitter.block_to_code(block) == (
            "synchronized (lock) {\n"
            '    System.out.println("a");\n'
            '    System.out.println("b");\n'
            "}\n"
        )

    def test_decoration_does_not_leak_past_enclosing_chain(self):
        emitter, _ = make_emitter()
        sync = chain(stmt("controls_synchronized"), print_(text("in")))
        block = chain(
            stmt("controls_if", values={"IF0": var("a")}, statements={"DO0": sync}),
            print_(text("after")),
        )
        assert emitter.block_to_code(block) == (
            "if (a) {\n"
            "    synchronized (this) {\n"
            '        System.out.println("in");\n'
            "    }\n"
            "}\n"
            'System.out.println("after");\n'
        )


class TestProcedures:
    def test_definition_goes_to_ledger(self):
        emitter, ctx = make_emitter()
        block = stmt(
            "procedures_defreturn", {"NAME": "add one"},
            values={"RETURN": arith("ADD", var("n"), num(1))},
            mutation={"params": [{"name": "n", "type": "Number"}], "returns": "Number"},
            comment="Adds one.",
        )
        assert emitter.block_to_code(block) == ""
        out = ctx.ledger.render_preamble(ctx.types, ctx.names)
        assert out == (
            "// Adds one.\n"
            "public double add_one(double n) {\n"
            "    return n + 1;\n"
            "}\n\n\n"
        )

    def test_static_procedure_sorted_first(self):
        emitter, ctx = make_emitter()
        emitter.block_to_code(stmt("procedures_defnoreturn", {"NAME": "a"}))
        emitter.block_to_code(
            stmt("procedures_defnoreturn", {"NAME": "z"}, mutation={"static": True})
        )
        out = ctx.ledger.render_preamble(ctx.types, ctx.names)
        assert out.index("public static void z()") < out.index("public void a()")

    def test_calls(self):
        emitter, _ = make_emitter()
        call = stmt("procedures_callnoreturn", {"NAME": "go"}, values={"ARG1": num(2), "ARG0": num(1)})
        assert emitter.block_to_code(call) == "go(1, 2);\n"
        ret = value("procedures_callreturn", {"NAME": "go"}, ARG0=None)
        assert expr(ret) == "go(null)"

    def test_if_return(self):
        emitter, _ = make_emitter()
        block = stmt("procedures_ifreturn", values={"CONDITION": var("done"), "VALUE": num(0)})
        assert emitter.block_to_code(block) == "if (done) {\n    return 0;\n}\n"


class TestDegradation:
    def test_unknown_statement_block_stubbed(self):
        emitter, ctx = make_emitter()
        block = chain(stmt("robot_dance"), print_(text("still here")))
        code = emitter.block_to_code(block)
        assert code == '// Unsupported block: robot_dance\nSystem.out.println("still here");\n'
        assert ctx.diagnostics.diagnostics[0].code == UNSUPPORTED_BLOCK

    def test_unknown_value_block_is_empty(self):
        emitter, ctx = make_emitter()
        block = arith("ADD", value("mystery_value"), num(1))
        assert emitter.block_to_code(block) == "0 + 1;\n"
        assert not ctx.diagnostics.has_errors()

    def test_next_cycle_truncated(self):
        emitter, ctx = make_emitter()
        first = print_(text("a"))
        second = print_(text("b"))
        first.next = second
        second.next = first
        code = emitter.block_to_code(first)
        assert code == 'System.out.println("a");\nSystem.out.println("b");\n'
        assert ctx.diagnostics.diagnostics[-1].code == BLOCK_CYCLE

    def test_cycle_through_nested_statement(self):
        emitter, ctx = make_emitter()
        loop = stmt("controls_whileUntil", {"MODE": "WHILE"}, values={"BOOL": boolean(True)})
        body = print_(text("x"))
        loop.inputs.append(Input("DO", InputKind.STATEMENT, body))
        body.next = loop
        code = emitter.block_to_code(loop)
        assert code.startswith("while (true) {\n")
        assert ctx.diagnostics.has_errors()

    def test_value_cycle(self):
        emitter, ctx = make_emitter()
        block = arith("ADD", None, num(1))
        block.inputs[0] = Input("A", InputKind.VALUE, block)
        assert emitter.block_to_code(block) == "0 + 1;\n"
        assert ctx.diagnostics.diagnostics[-1].code == BLOCK_CYCLE


class TestPrefixLines:
    def test_final_newline_not_prefixed(self):
        assert prefix_lines("a\nb\n", "  ") == "  a\n  b\n"

    def test_empty(self):
        assert prefix_lines("", "  ") == ""

    def test_no_trailing_newline(self):
        assert prefix_lines("a\nb", "// ") == "// a\n// b"


def test_blocks_are_not_mutated():
    emitter, _ = make_emitter()
    block = Block("text_print", inputs=[Input("TEXT", InputKind.VALUE, text("x"))])
    before = repr(block)
    emitter.block_to_code(block)
    assert repr(block) == before
