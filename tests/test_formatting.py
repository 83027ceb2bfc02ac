## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io

import pytest

from prayog.types import ScriptClass, ScriptObject, Closure, Resource
from prayog.evaluator import Failure, FailureKind
from prayog.formatting import Formatter, write_without_ansi, RED, RESET, CYAN


@pytest.fixture
def fmt():
    return Formatter(colorize=False)


@pytest.mark.parametrize("value,text", [
    (None, "null"),
    (True, "true"),
    (False, "false"),
    (42, "42"),
    (2.5, "2.5"),
    (float('inf'), "INF"),
    ("it's", "'it\\'s'"),
])
def test_scalars(fmt, value, text):
    assert fmt.format(value) == text


def test_array_preview_limits_items(fmt):
    assert fmt.format([]) == "array(0) []"
    assert fmt.format([1, 2]) == "array(2) [0 => 1, 1 => 2]"
    assert fmt.format([1, 2, 3, 4]) == "array(4) [0 => 1, 1 => 2, 2 => 3, ...]"


def test_array_preview_quotes_string_keys_and_nests(fmt):
    value = {'a': [1, 2, 3], 'b': 'x'}
    assert fmt.format(value) == "array(2) ['a' => [0 => ..., 1 => ..., ...], 'b' => 'x']"


def test_array_preview_depth_is_limited(fmt):
    assert fmt.format([[[1]]]) == "array(1) [0 => [0 => ...]]"


def test_long_strings_are_truncated_in_previews(fmt):
    assert fmt.format(["abcdefghijklmnopqrstuvwxyz"]) == "array(1) [0 => abcdefghijklmnopqrst...]"


def test_objects_closures_and_resources(fmt):
    obj = ScriptObject(ScriptClass('Point', None, {}, {}))
    assert fmt.format(obj) == "object(Point)"
    assert fmt.format(Closure([], [])) == "object(Closure)"
    assert fmt.format(Resource('stream', io.StringIO())) == "resource(stream)"
    assert fmt.format([obj]) == "array(1) [0 => Point]"


def test_colors_wrap_the_rendered_text():
    assert Formatter(colorize=True).format(7) == f"{CYAN}7{RESET}"


def test_error_rendering():
    failure = Failure(FailureKind.RUNTIME, "boom", 'RuntimeException')
    assert Formatter(colorize=False).format_error(failure) == "Error (RuntimeException): boom"
    assert Formatter(colorize=True).format_error(failure) == f"{RED}Error (RuntimeException): boom{RESET}"


def test_write_without_ansi_strips_codes():
    written = []
    write = write_without_ansi(written.append)
    write(f"{RED}red{RESET} plain")
    assert written == ["red plain"]
