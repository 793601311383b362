import io

import pytest

from ast_nodes import Block, Compare, Display, If, Number, Program
from errors import ArithmeticFault, InputFormatFault, TabscriptRuntimeError
from interpreter import Interpreter, execute, truncating_div
from memory import Memory
from parser import parse_source


@pytest.mark.parametrize("literal", [0, 7, 42, 2147483647, 123456789012345678901234567890])
def test_display_after_assignment(output_of, literal):
    assert output_of(f"let x := {literal}\ndisplay x") == [str(literal)]


def test_left_associative_subtraction(output_of):
    assert output_of("display (8 - 3 - 2)") == ["3"]


def test_precedence(output_of):
    assert output_of("display (2 + 3 * 4)") == ["14"]
    assert output_of("display (2 + 3) * 4") == ["20"]


def test_division_truncates_toward_zero(output_of):
    assert output_of("display (7 / 2)") == ["3"]
    assert output_of("let a := 0 - 7\ndisplay a / 2") == ["-3"]
    assert output_of("display 7 / (0 - 2)") == ["-3"]
    assert truncating_div(-8, -3) == 2


def test_division_by_zero_is_an_arithmetic_fault(run_source):
    with pytest.raises(ArithmeticFault) as info:
        run_source("let z := 0\ndisplay 1\ndisplay (1 / z)")
    assert info.value.row == 2
    assert "division by zero" in str(info.value)


def test_negation_applies_to_following_expression(output_of):
    assert output_of("display -2 + 3") == ["-5"]
    assert output_of("display 10 - (-4)") == ["14"]


def test_variables_are_case_insensitive(output_of):
    assert output_of("let X := 5\ndisplay x") == ["5"]
    assert output_of("LET Count := 1\nLet count := Count + 1\nDisplay COUNT") == ["2"]


def test_unset_variable_reads_as_zero(output_of):
    assert output_of("display y") == ["0"]
    assert output_of("let a := b + 1\ndisplay a") == ["1"]


def test_for_loop_is_inclusive(output_of):
    assert output_of("for i in 1 .. 3:\n\tdisplay i") == ["1", "2", "3"]
    assert output_of("for i in 1 .. 3: display i") == ["1", "2", "3"]


def test_for_loop_with_start_after_end_never_runs(output_of):
    assert output_of("for i in 5 .. 1:\n\tdisplay i") == []


def test_for_loop_variable_is_global_and_keeps_last_value(run_source):
    out, memory = run_source("let i := 100\nfor i in 2 .. 4:\n\tlet s := s + i\ndisplay i")
    assert out.splitlines() == ["4"]
    assert memory.get("s") == 9


def test_for_bounds_are_evaluated_once(output_of):
    source = (
        "let n := 3\n"
        "for i in 1 .. n:\n"
        "\tlet n := n + 10\n"
        "\tdisplay i\n"
    )
    assert output_of(source) == ["1", "2", "3"]


def test_if_elif_else_selects_one_branch(output_of):
    source = "let x := 5\nif x < 0: display 1 elif x == 5: display 2 else: display 3"
    assert output_of(source) == ["2"]

    block_source = (
        "let x := {x}\n"
        "if x < 0:\n"
        "\tdisplay 1\n"
        "elif x = 5:\n"
        "\tdisplay 2\n"
        "elif x >= 5:\n"
        "\tdisplay 4\n"
        "else:\n"
        "\tdisplay 3\n"
    )
    assert output_of(block_source.format(x=-1)) == ["1"]
    assert output_of(block_source.format(x=5)) == ["2"]
    assert output_of(block_source.format(x=9)) == ["4"]
    assert output_of(block_source.format(x=2)) == ["3"]


def test_if_without_matching_branch_is_a_no_op(output_of):
    assert output_of("if 1 > 2:\n\tdisplay 1\nelif 1 /= 1:\n\tdisplay 2\ndisplay 3") == ["3"]


def test_relational_operators(output_of):
    source = (
        "if 1 < 2: display 1\n"
        "if 2 <= 2: display 2\n"
        "if 3 > 2: display 3\n"
        "if 2 >= 3: display 99\n"
        "if 4 = 4: display 4\n"
        "if 4 /= 4: display 99\n"
    )
    assert output_of(source) == ["1", "2", "3", "4"]


def test_while_loop(output_of):
    source = (
        "let n := 1\n"
        "while n <= 100:\n"
        "\tlet n := n * 2\n"
        "display n\n"
    )
    assert output_of(source) == ["128"]


def test_nested_loops(output_of):
    source = (
        "for i in 1 .. 3:\n"
        "\tfor j in 1 .. i:\n"
        "\t\tif j = i:\n"
        "\t\t\tdisplay i * 10 + j\n"
    )
    assert output_of(source) == ["11", "22", "33"]


def test_input_reads_integers(run_source):
    out, memory = run_source("input a\ninput B\ndisplay a + b", stdin="12\n  -5  \n")
    assert out.splitlines() == ["7"]
    assert memory.get("b") == -5


def test_input_prompt(run_source):
    out, _memory = run_source("input age", stdin="30\n", prompts=True)
    assert out == "Enter value for age: "


@pytest.mark.parametrize("text", ["abc\n", "1.5\n", "\n", "3 4\n"])
def test_input_rejects_non_integers(run_source, text):
    with pytest.raises(InputFormatFault) as info:
        run_source("display 1\ninput n\ndisplay 2", stdin=text)
    assert info.value.row == 1


def test_input_at_end_of_stream(run_source):
    with pytest.raises(InputFormatFault) as info:
        run_source("input n")
    assert "no input available" in info.value.message


def test_run_aborts_at_first_fault():
    out = io.StringIO()
    interp = Interpreter(stdout=out, stdin=io.StringIO(""), prompts=False)
    with pytest.raises(ArithmeticFault):
        interp.run(parse_source("display 1\nlet x := 1 / 0\ndisplay 2"))
    assert out.getvalue() == "1\n"


def test_same_source_evaluates_identically():
    source = "input n\nlet f := 1\nfor i in 1 .. n:\n\tlet f := f * i\ndisplay f\n"
    outputs = []
    for _ in range(2):
        out = io.StringIO()
        execute(parse_source(source), stdout=out, stdin=io.StringIO("6\n"), prompts=False)
        outputs.append(out.getvalue())
    assert outputs == ["720\n", "720\n"]


def test_execute_uses_given_memory():
    memory = Memory()
    memory.put("seed", 4)
    out = io.StringIO()
    result = execute(parse_source("let doubled := seed * 2"), memory, stdout=out)
    assert result is memory
    assert memory.get("DOUBLED") == 8


def test_step_limit_stops_runaway_loops(run_source):
    with pytest.raises(TabscriptRuntimeError) as info:
        run_source("while 1 = 1:\n\tlet x := x + 1", max_steps=50)
    assert "Step limit" in info.value.message


def test_trace_writes_one_line_per_statement():
    trace = io.StringIO()
    execute(parse_source("let a := 1\nif a = 1:\n\tdisplay a"), stdout=io.StringIO(),
            trace=True, trace_stream=trace)
    assert trace.getvalue().splitlines() == [
        "TRACE line 1: Assign",
        "TRACE line 2: If",
        "TRACE line 3: Display",
    ]


def test_run_requires_a_program():
    with pytest.raises(TypeError):
        Interpreter().run([])
    assert isinstance(parse_source(""), Program)


def test_long_sum_evaluates(output_of):
    assert output_of("let x := 1" + " + 1" * 2000 + "\ndisplay x") == ["2001"]


def test_deeply_nested_parentheses_evaluate(output_of):
    assert output_of("display " + "(" * 500 + "7" + ")" * 500) == ["7"]
    left_nested = "(" * 600 + "1" + " + 1)" * 600
    assert output_of(f"display {left_nested}") == ["601"]


def test_long_chain_keeps_left_to_right_order(output_of):
    assert output_of("display 100" + " - 1" * 1500) == ["-1400"]
    assert output_of("display 1000000 / 10 / 10 * 3 - 1") == ["29999"]


def test_execution_too_deep_is_a_runtime_error():
    always = Compare(Number(1), "=", Number(1))
    body = Block([Display(Number(1))])
    for _ in range(3000):
        nested = If([(always, body)])
        nested.line = 0
        body = Block([nested])
    program = Program(body.statements)

    with pytest.raises(TabscriptRuntimeError) as info:
        execute(program, stdout=io.StringIO())
    assert info.value.row == 0
    assert "nested too deeply" in info.value.message
