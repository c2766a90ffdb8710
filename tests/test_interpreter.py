# =============================================================================
# test_interpreter.py - End-to-End Pipeline Tests
# =============================================================================
# Runs source text through lexer, parser, compiler and VM and checks the
# printed output and the completion status.
# =============================================================================

import pytest
from minirb import run_source
from minirb.errors import (
    DivisionByZeroError,
    ModuloByZeroError,
    ParseError,
    UnexpectedTokenError,
    UnknownMethodError,
)
from minirb.interpreter import Interpreter, InterpreterOptions, RunResult, STAGES
from minirb.lexer import TokenType
from minirb.status import InterpreterResult
from minirb.vm import Integer, RawText


# =============================================================================
# Helper Function
# =============================================================================

def output_of(source: str) -> list:
    result = run_source(source)
    assert result.status is InterpreterResult.OK, result.errors
    return result.output


# =============================================================================
# Program Behaviour Tests
# =============================================================================

class TestPrograms:

    @pytest.mark.parametrize("n", ["0", "7", "42", "007", "123456789012345678901234567890"])
    def test_assign_then_print(self, n):
        """Printing an assigned literal gives back exactly its text."""
        assert output_of(f"x = {n}\nputs x") == [n]

    @pytest.mark.parametrize("a, b", [(7, 2), (2, 7), (100, 3), (5, 5), (0, 9), (12, 1)])
    def test_arithmetic_round_trip(self, a, b):
        for op, expected in [
            ("+", a + b),
            ("-", a - b),
            ("*", a * b),
            ("/", a // b),
            ("%", a % b),
        ]:
            assert output_of(f"x = {a} {op} {b}\nputs x") == [str(expected)]

    def test_left_associativity(self):
        assert output_of("x = 10 - 3 - 2\nputs x") == ["5"]

    def test_precedence(self):
        assert output_of("x = 2 + 3 * 4\nputs x") == ["14"]

    def test_precedence_mixed(self):
        assert output_of("puts 20 - 6 / 3 % 4 * 2") == ["16"]

    def test_identifier_read_back(self):
        assert output_of("a = 5\nb = a + 2\nputs b") == ["7"]

    def test_puts_prints_aliased_value(self):
        assert output_of("a = 5\nb = a\nputs b") == ["5"]

    def test_arithmetic_on_alias_uses_name(self):
        """b holds the name a, and arithmetic looks it up only once."""
        assert output_of("a = 5 b = a c = b + 1 puts c") == ["1"]

    def test_alias_chain_of_three(self):
        assert output_of("a = 5 b = a c = b puts c") == ["a"]

    def test_reassignment(self):
        assert output_of("x = 1 puts x x = x + 1 puts x") == ["1", "2"]

    def test_negative_results(self):
        assert output_of("x = 3 - 10 puts x puts x / 2 puts x % 4") == ["-7", "-4", "1"]

    def test_unbound_identifier_prints_its_name(self):
        assert output_of("puts hello") == ["hello"]

    def test_expression_statement_has_no_output(self):
        assert output_of("1 + 2 x") == []

    def test_empty_program(self):
        result = run_source("")
        assert result.status is InterpreterResult.OK
        assert result.output == []

    def test_whitespace_variants(self):
        assert output_of("x=4\tputs\n\nx") == ["4"]


# =============================================================================
# Status and Error Tests
# =============================================================================

class TestStatus:

    def test_division_by_zero(self):
        result = run_source("x = 1 / 0\nputs x")
        assert result.status is InterpreterResult.RUNTIME_ERROR
        assert result.output == []
        assert isinstance(result.errors[0], DivisionByZeroError)

    def test_modulo_by_zero(self):
        result = run_source("x = 1 % 0\nputs x")
        assert result.status is InterpreterResult.RUNTIME_ERROR
        assert result.output == []
        assert isinstance(result.errors[0], ModuloByZeroError)

    def test_output_before_runtime_error_kept(self):
        result = run_source("puts 1\nputs 1 / 0\nputs 2")
        assert result.status is InterpreterResult.RUNTIME_ERROR
        assert result.output == ["1"]

    def test_unknown_method(self):
        result = run_source("foo 1")
        assert result.status is InterpreterResult.RUNTIME_ERROR
        assert isinstance(result.errors[0], UnknownMethodError)
        assert result.errors[0].name == "foo"

    def test_bad_token_is_compiler_error(self):
        result = run_source("x = 1 $ puts x")
        assert result.status is InterpreterResult.COMPILER_ERROR
        assert result.output == []
        assert result.program is None
        assert result.bytecode == []
        assert any(isinstance(e, UnexpectedTokenError) for e in result.errors)
        assert len(result.warnings) == 1

    def test_syntax_error_is_compiler_error(self):
        result = run_source("x = * 2")
        assert result.status is InterpreterResult.COMPILER_ERROR
        assert result.statements == []

    def test_status_descriptions(self):
        assert InterpreterResult.OK.describe() == "Execution finished successfully."
        assert "compiler error" in InterpreterResult.COMPILER_ERROR.describe()
        assert "runtime error" in InterpreterResult.RUNTIME_ERROR.describe()

    def test_status_values(self):
        assert InterpreterResult.RUNTIME_ERROR == 0
        assert InterpreterResult.COMPILER_ERROR == 1
        assert InterpreterResult.OK == 2
        assert InterpreterResult.OK.ok


# =============================================================================
# Pipeline Tests
# =============================================================================

class TestPipeline:

    def test_intermediate_forms_exposed(self):
        result = run_source("x = 1 + 2")
        assert [t.type for t in result.tokens][:2] == [TokenType.IDENTIFIER, TokenType.SINGLE_EQUALS]
        assert len(result.statements) == 1
        assert len(result.bytecode) == 8
        assert result.locals == {"x": Integer(3)}

    def test_locals_keep_raw_text(self):
        assert run_source("x = 007").locals == {"x": RawText("007")}

    def test_idempotent(self):
        source = "a = 6 b = a * 7 puts b puts a % 4 c = b - a puts c"
        first = run_source(source)
        second = run_source(source)
        assert first.output == second.output == ["42", "2", "36"]

    def test_same_interpreter_reused(self):
        interpreter = Interpreter(InterpreterOptions(output=lambda line: None))
        first = interpreter.run_source("x = 1 puts x")
        second = interpreter.run_source("puts x")
        assert first.output == ["1"]
        assert second.output == ["x"]

    def test_output_sink(self):
        printed = []
        interpreter = Interpreter(InterpreterOptions(output=printed.append))
        result = interpreter.run_source("puts 3 puts 4")
        assert printed == ["3", "4"]
        assert result.output == ["3", "4"]

    def test_stage_hook_order(self):
        seen = []
        options = InterpreterOptions(
            output=lambda line: None,
            stage_hook=lambda stage, result: seen.append(stage),
        )
        Interpreter(options).run_source("puts 1")
        assert seen == ["lexer", "parser", "compiler"]
        assert tuple(seen) == STAGES[:3]

    def test_stage_hook_stops_at_failing_stage(self):
        seen = []
        options = InterpreterOptions(stage_hook=lambda stage, result: seen.append(stage))
        Interpreter(options).run_source("x = $")
        assert seen == ["lexer"]

    def test_trace_option(self):
        trace = []
        options = InterpreterOptions(
            trace=True,
            output=lambda line: None,
            trace_output=trace.append,
        )
        Interpreter(options).run_source("puts 1")
        assert len(trace) == 3

    def test_run_file(self, tmp_path):
        source_file = tmp_path / "prog.rb"
        source_file.write_text("x = 6 * 7\nputs x\n")
        result = Interpreter(InterpreterOptions(output=lambda line: None)).run_file(source_file)
        assert result.output == ["42"]
        assert result.filename == str(source_file)

    def test_run_file_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Interpreter().run_file(tmp_path / "missing.rb")

    def test_errors_carry_filename(self, tmp_path):
        source_file = tmp_path / "bad.rb"
        source_file.write_text("x = $\n")
        result = Interpreter().run_file(source_file)
        assert str(result.errors[0]).startswith(f"{source_file}:1:5: error:")

    def test_runtime_errors_exported(self):
        import minirb
        for name in ("MissingOperandError", "StackUnderflowError", "UnknownOpcodeError"):
            assert name in minirb.__all__
            assert issubclass(getattr(minirb, name), minirb.MinirbRuntimeError)

    def test_result_defaults(self):
        result = RunResult()
        assert result.success
        assert result.bytecode == []
