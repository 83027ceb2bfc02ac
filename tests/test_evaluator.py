## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from prayog.config import Config
from prayog.evaluator import Evaluator, Value, Void, ExitRequested, Failure, FailureKind


@pytest.fixture
def ev():
    return Evaluator()


def test_bare_expression_yields_its_value(ev):
    assert ev.evaluate("2 + 2") == Value(4)


def test_assignment_is_void_and_binding_persists(ev):
    assert ev.evaluate("$x = 42;") == Void()
    assert ev.evaluate("$x + 1") == Value(43)
    assert ev.get_variables() == {'x': 42}


def test_echo_output_is_shown_with_trailing_newline(ev, capsys):
    assert ev.evaluate('echo "hi";') == Void()
    assert capsys.readouterr().out == "hi\n"


def test_output_already_ending_in_newline_is_not_doubled(ev, capsys):
    ev.evaluate('echo "a\\n";')
    assert capsys.readouterr().out == "a\n"


@pytest.mark.parametrize("token", ["exit", "exit()", "quit", "quit()", "  exit  ", "exit;"])
def test_exit_tokens_request_termination(ev, token):
    assert ev.evaluate(token) == ExitRequested()


class ExplodingRuntime:
    def run(self, source, bindings=None):
        raise AssertionError("engine should not run")


@pytest.mark.parametrize("token", ["exit", "quit()", "exit;"])
def test_exit_tokens_never_reach_the_engine(token):
    assert Evaluator(ExplodingRuntime()).evaluate(token) == ExitRequested()


def test_block_statement_without_terminator_is_void(ev):
    assert ev.evaluate("if (true) {\n}\n") == Void()


def test_runtime_failure_keeps_bindings_and_discards_output(ev, capsys):
    ev.evaluate("$x = 1;")
    outcome = ev.evaluate('$x = 2; $y = 3; echo "partial"; throw new RuntimeException("boom");')
    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.RUNTIME
    assert outcome.error_type == 'RuntimeException'
    assert outcome.message == "boom"
    assert ev.get_variables() == {'x': 1}
    assert capsys.readouterr().out == ""


def test_syntax_failure_is_reported_as_parse_error(ev):
    outcome = ev.evaluate("$x = ;")
    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.SYNTAX
    assert outcome.error_type == 'ParseError'
    assert "syntax error" in outcome.message


def test_undefined_function_is_a_runtime_failure(ev):
    outcome = ev.evaluate("nope()")
    assert outcome == Failure(FailureKind.RUNTIME, "Call to undefined function nope()", 'Error')


def test_runaway_recursion_is_an_engine_failure(ev):
    ev.evaluate("function down($n) { return down($n + 1); }")
    outcome = ev.evaluate("down(0)")
    assert isinstance(outcome, Failure)
    assert outcome.kind is FailureKind.ENGINE


def test_empty_and_open_tag_units_are_void(ev):
    assert ev.evaluate("") == Void()
    assert ev.evaluate("   \n") == Void()
    assert ev.evaluate("<?php") == Void()
    assert ev.evaluate("<?php 1 + 1") == Value(2)


def test_null_expression_is_void(ev):
    assert ev.evaluate("null") == Void()


def test_explicit_return_in_statement_unit_yields_value(ev):
    assert ev.evaluate("return 5;") == Value(5)


def test_arrays_are_copied_into_the_store(ev):
    ev.evaluate("$a = [1, 2];")
    ev.evaluate("$b = $a;")
    ev.evaluate("$b[] = 3;")
    assert ev.get_variables() == {'a': [1, 2], 'b': [1, 2, 3]}


def test_private_names_are_not_adopted(ev):
    ev.evaluate("$_tmp = 1;")
    assert ev.get_variables() == {}


def test_host_injected_variables_are_visible(ev):
    ev.set_variable('name', 'world')
    ev.set_variables({'n': 2})
    assert ev.evaluate('"hello $name"') == Value("hello world")
    assert ev.evaluate("$n * 21") == Value(42)


def test_functions_and_classes_persist_across_units(ev):
    assert ev.evaluate("function twice($x) { return $x * 2; }") == Void()
    assert ev.evaluate("class Box { public $v = 3; }") == Void()
    assert ev.evaluate("twice((new Box)->v)") == Value(6)


def test_redeclaring_a_function_fails(ev):
    ev.evaluate("function f() {}")
    outcome = ev.evaluate("function f() {}")
    assert isinstance(outcome, Failure)
    assert "Cannot redeclare" in outcome.message


def test_as_statement_runs_unit_without_wrapping(ev):
    assert ev.evaluate("2 + 2;", as_statement=True) == Void()


def test_custom_config_changes_filtering():
    ev = Evaluator(config=Config(private_prefix=''))
    ev.evaluate("$_tmp = 1;")
    assert ev.get_variables() == {'_tmp': 1}
