## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from prayog import operators as ops
from prayog.errors import PrayogRuntimeError, PrayogTypeError, PrayogArgumentCountError, PrayogDivisionByZeroError
from prayog.runtime import Runtime


@pytest.fixture(scope="module")
def rt():
    return Runtime()


def php(rt, code: str):
    return rt.run(code).value


## STRINGS
@pytest.mark.parametrize("fmt,args,expected", [
    ("%d items", [3], "3 items"),
    ("%05.2f", [3.14159], "03.14"),
    ("%-5s|", ["ab"], "ab   |"),
    ("%'*8s", ["x"], "*******x"),
    ("%+d", [5], "+5"),
    ("%x/%X/%b/%o", [255, 255, 5, 8], "ff/FF/101/10"),
    ("100%%", [], "100%"),
    ("%.3s", ["abcdef"], "abc"),
])
def test_sprintf(fmt, args, expected):
    assert ops.fn_sprintf(fmt, *args) == expected


def test_sprintf_missing_argument():
    with pytest.raises(PrayogRuntimeError):
        ops.fn_sprintf("%s %s", "a")


def test_string_helpers():
    assert ops.fn_str_pad("5", 3, "0", ops.STR_PAD_LEFT) == "005"
    assert ops.fn_str_pad("ab", 6, "-", ops.STR_PAD_BOTH) == "--ab--"
    assert ops.fn_ucwords("hello big world") == "Hello Big World"
    assert ops.fn_substr("abcdef", -3, 2) == "de"
    assert ops.fn_substr("abcdef", 1, -2) == "bcd"
    assert ops.fn_strpos("hello", "l") == 2
    assert ops.fn_strpos("hello", "z") is False
    assert ops.fn_explode(",", "a,b,c", 2) == ["a", "b,c"]
    assert ops.fn_implode(", ", [1, 2, 3]) == "1, 2, 3"
    assert ops.fn_str_replace(["a", "b"], ["1", "2"], "aabbc") == "1122c"
    assert ops.fn_number_format(1234567.891, 2) == "1,234,567.89"
    assert ops.fn_wordwrap("The quick brown fox", 10) == "The quick\nbrown fox"


def test_explode_rejects_empty_separator():
    with pytest.raises(PrayogRuntimeError):
        ops.fn_explode("", "abc")


## MATH
def test_math_helpers():
    assert ops.fn_max(1, 5, 3) == 5
    assert ops.fn_min([4, 2, 8]) == 2
    assert ops.fn_round(2.5) == 3.0
    assert ops.fn_round(-2.5) == -3.0
    assert ops.fn_intdiv(-7, 2) == -3
    assert ops.fn_array_sum([1, 2.5, "3"]) == 6.5
    with pytest.raises(PrayogDivisionByZeroError):
        ops.fn_intdiv(1, 0)


## ARRAYS
def test_array_helpers():
    assert ops.fn_array_merge([1, 2], {'a': 1}, [3]) == {0: 1, 1: 2, 'a': 1, 2: 3}
    assert ops.fn_array_merge([1], [2]) == [1, 2]
    assert ops.fn_array_slice([1, 2, 3, 4], 1, 2) == [2, 3]
    assert ops.fn_array_slice([1, 2, 3, 4], -2, None, True) == {2: 3, 3: 4}
    assert ops.fn_array_reverse(['a', 'b']) == ['b', 'a']
    assert ops.fn_array_unique([1, "1", 2, 1]) == {0: 1, 2: 2}
    assert ops.fn_array_flip(['a', 'b']) == {'a': 0, 'b': 1}
    assert ops.fn_array_search("2", [1, 2, 3]) == 1
    assert ops.fn_in_array("2", [1, 2, 3], True) is False
    assert ops.fn_array_column([{'id': 1, 'n': 'a'}, {'id': 2, 'n': 'b'}], 'n', 'id') == {1: 'a', 2: 'b'}
    assert ops.fn_array_chunk([1, 2, 3], 2) == [[1, 2], [3]]
    assert ops.fn_range(0, 10, 5) == [0, 5, 10]
    assert ops.fn_range('a', 'c') == ['a', 'b', 'c']
    assert ops.fn_range(3, 1) == [3, 2, 1]


def test_count_rejects_scalars():
    with pytest.raises(PrayogTypeError):
        ops.fn_count(5)


def test_json_roundtrip_shapes():
    assert ops.fn_json_encode({'a': 1, 'b': [1, 2]}) == '{"a":1,"b":[1,2]}'
    assert ops.fn_json_encode("a/b") == '"a\\/b"'
    assert ops.fn_json_encode(1.0) == '1'
    assert ops.fn_json_decode('{"x": [1, 2], "0": true}') == {'x': [1, 2], 0: True}
    assert ops.fn_json_decode('not json') is None


def test_by_reference_helpers_return_new_value():
    assert ops.ref_sort([3, 1, 2]) == (True, [1, 2, 3])
    assert ops.ref_ksort({'b': 1, 'a': 2}) == (True, {'a': 2, 'b': 1})
    assert ops.ref_array_push([1], 2, 3) == (3, [1, 2, 3])
    assert ops.ref_array_pop([1, 2]) == (2, [1])
    assert ops.ref_array_shift({'a': 1, 5: 2}) == (1, [2])
    assert ops.ref_array_splice([1, 2, 3, 4], 1, 2, ['x']) == ([2, 3], [1, 'x', 4])


## OUTPUT
def test_print_r_and_var_export():
    assert ops.print_r_text([1, 'a']) == "Array\n(\n    [0] => 1\n    [1] => a\n)\n"
    assert ops.var_export_text({'k': 1.0}) == "array (\n  'k' => 1.0,\n)"
    assert ops.var_dump_text("héllo") == 'string(6) "héllo"\n'
    assert ops.var_dump_text([True]) == "array(1) {\n  [0]=>\n  bool(true)\n}\n"


## THROUGH THE ENGINE
def test_by_reference_builtins_write_back(rt):
    assert php(rt, "$a = [3, 1, 2]; sort($a); return $a;") == [1, 2, 3]
    assert php(rt, "$s = []; array_push($s, 'x', 'y'); return $s;") == ['x', 'y']
    assert php(rt, "$s = [1, 2, 3]; $last = array_pop($s); return [$last, $s];") == [3, [1, 2]]


def test_callbacks(rt):
    assert php(rt, "return array_map(fn($x) => $x * 2, [1, 2, 3]);") == [2, 4, 6]
    assert php(rt, "return array_filter([1, 0, 2, null, 3]);") == {0: 1, 2: 2, 4: 3}
    assert php(rt, "return array_filter(['a' => 1, 'b' => 2], fn($k) => $k == 'b', ARRAY_FILTER_USE_KEY);") == {'b': 2}
    assert php(rt, "return array_reduce([1, 2, 3], fn($c, $x) => $c + $x, 10);") == 16
    assert php(rt, "$a = [3, 1, 2]; usort($a, fn($x, $y) => $y <=> $x); return $a;") == [3, 2, 1]
    assert php(rt, "return call_user_func_array('max', [4, 9, 2]);") == 9
    assert php(rt, "return array_map(null, [1, 2], ['a', 'b']);") == [[1, 'a'], [2, 'b']]


def test_introspection(rt):
    assert php(rt, "return function_exists('strlen');") is True
    assert php(rt, "return class_exists('InvalidArgumentException');") is True
    assert php(rt, "return is_a(new InvalidArgumentException(), 'LogicException');") is True
    assert php(rt, "return is_callable('no_such_function');") is False


def test_python_argument_errors_become_script_errors(rt):
    with pytest.raises(PrayogArgumentCountError):
        php(rt, "strlen();")


def test_output_builtins_write_to_stdout(rt, capsys):
    php(rt, "print_r(['a' => 1]); printf('%s-%d', 'x', 7);")
    assert capsys.readouterr().out == "Array\n(\n    [a] => 1\n)\nx-7"


def test_memory_stream(rt):
    assert php(rt, "$f = fopen('php://memory', 'w+'); fwrite($f, 'abc'); rewind($f); return fgets($f);") == 'abc'
    assert php(rt, "$f = tmpfile(); fputs($f, 'tmp'); rewind($f); $s = stream_get_contents($f); fclose($f); return $s;") == 'tmp'
