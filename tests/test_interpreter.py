## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import pytest

from prayog.runtime import Runtime
from prayog.types import ScriptObject, Closure
from prayog.errors import (PrayogRuntimeError, PrayogNameError, PrayogTypeError, PrayogArgumentCountError,
                           PrayogDivisionByZeroError, PrayogThrown)


@pytest.fixture
def rt():
    return Runtime()


def php(rt, code: str, bindings: dict | None = None):
    return rt.run(code, bindings).value


def output(rt, code: str, capsys) -> str:
    rt.run(code)
    return capsys.readouterr().out


## VALUES & OPERATORS
@pytest.mark.parametrize("code,expected", [
    ("return 7 / 2;", 3.5),
    ("return 8 / 2;", 4),
    ("return -7 % 3;", -1),
    ("return 2 ** 10;", 1024),
    ("return '5' + 3;", 8),
    ("return '1.5' + 1;", 2.5),
    ("return 'a' . 1 . true . null;", 'a11'),
    ("return 0x1F + 0b11 + 010;", 31 + 3 + 8),
    ("return 1 <=> 2;", -1),
    ("return '10' == '1e1';", True),
    ("return 0 == 'a';", False),
    ("return null ?? 'd';", 'd'),
    ("return 0 ?: 'e';", 'e'),
    ("return true ? 'y' : 'n';", 'y'),
    ("return (int) '12abc';", 12),
    ("return (bool) '0';", False),
    ("return (string) 1.0;", '1'),
    ("return (array) 'x';", ['x']),
    ("return PHP_INT_MAX + 1;", float(2**63)),
    ("return !empty([0]);", True),
])
def test_expressions(rt, code, expected):
    assert php(rt, code) == expected


def test_division_by_zero(rt):
    with pytest.raises(PrayogDivisionByZeroError):
        php(rt, "return 1 / 0;")


def test_increment_and_compound_assignment(rt):
    assert php(rt, "$i = 1; $j = $i++; ++$i; $i += 10; $s = 'a'; $s .= 'b'; return [$i, $j, $s];") == [13, 1, 'ab']
    assert php(rt, "$n ??= 5; $n ??= 6; return $n;") == 5


## STRINGS
def test_interpolation(rt):
    bindings = {'name': 'Ada', 'list': ['x', 'y'], 'map': {'k': 'v'}}
    assert php(rt, 'return "Hi $name! $list[1] {$map[\'k\']} \\$name\\t.";', bindings) == "Hi Ada! y v $name\t."
    assert php(rt, "return 'no $name\\n';", bindings) == "no $name\\n"


def test_string_offsets(rt):
    assert php(rt, "$s = 'abc'; return $s[0] . $s[-1];") == 'ac'


## ARRAYS
def test_arrays_are_values(rt):
    assert php(rt, "$a = [1]; $b = $a; $b[] = 2; return [$a, $b];") == [[1], [1, 2]]


def test_array_keys_and_conversion(rt):
    assert php(rt, "$a = []; $a['x'] = 1; $a[] = 2; return $a;") == {'x': 1, 0: 2}
    assert php(rt, "$a = [1, 2]; $a[5] = 3; $a[] = 4; return $a;") == {0: 1, 1: 2, 5: 3, 6: 4}


def test_nested_array_write(rt):
    assert php(rt, "$m = []; $m['a']['b'] = 1; $m['a']['c'] = 2; return $m;") == {'a': {'b': 1, 'c': 2}}


def test_unset_element(rt):
    assert php(rt, "$a = [1, 2, 3]; unset($a[1]); return $a;") == {0: 1, 2: 3}
    assert php(rt, "$a = ['k' => 1]; unset($a['k']); return $a;") == {}


## CONTROL FLOW
def test_loops(rt, capsys):
    assert output(rt, "for ($i = 0; $i < 5; $i++) { if ($i == 1) { continue; } if ($i == 3) { break; } echo $i; }",
                  capsys) == "02"
    assert output(rt, "$n = 3; while ($n > 0) { echo $n--; }", capsys) == "321"
    assert output(rt, "do { echo 'once'; } while (false);", capsys) == "once"
    assert output(rt, "foreach (['a' => 1, 'b' => 2] as $k => $v) { echo \"$k=$v \"; }", capsys) == "a=1 b=2 "


def test_foreach_iterates_over_a_copy(rt):
    assert php(rt, "$a = [1, 2]; foreach ($a as $v) { $a[] = $v; } return $a;") == [1, 2, 1, 2]


def test_undefined_variable_warns_and_is_null(rt, capsys):
    assert php(rt, "return $missing;") is None
    assert capsys.readouterr().out == "Warning: Undefined variable $missing\n"


def test_silence_operator_hides_warnings(rt, capsys):
    assert php(rt, "return @$missing['x'];") is None
    assert capsys.readouterr().out == ""


def test_isset_and_empty_do_not_warn(rt, capsys):
    assert php(rt, "return [isset($a), isset($b['x']), empty($c)];") == [False, False, True]
    assert capsys.readouterr().out == ""


## FUNCTIONS & CLOSURES
def test_functions_are_hoisted(rt):
    assert php(rt, "return twice(4); function twice($x) { return $x * 2; }") == 8


def test_default_parameters_and_recursion(rt):
    assert php(rt, "function fact($n, $acc = 1) { return $n <= 1 ? $acc : fact($n - 1, $acc * $n); } return fact(5);") == 120


def test_too_few_arguments(rt):
    with pytest.raises(PrayogArgumentCountError, match="Too few arguments to function f\\(\\), 0 passed and exactly 1"):
        php(rt, "function f($x) {} f();")


def test_arguments_are_passed_by_value(rt):
    assert php(rt, "function add(array $a) { $a[] = 9; return $a; } $x = [1]; $y = add($x); return [$x, $y];") \
        == [[1], [1, 9]]


def test_closures_capture_by_value(rt):
    code = "$n = 1; $f = function ($x) use ($n) { return $x + $n; }; $n = 100; return $f(1);"
    assert php(rt, code) == 2


def test_arrow_functions_capture_scope(rt):
    assert php(rt, "$k = 3; $f = fn($x) => $x * $k; return $f(2);") == 6


def test_closure_value_is_returned(rt):
    assert isinstance(php(rt, "return fn() => 1;"), Closure)


def test_undefined_function(rt):
    with pytest.raises(PrayogNameError, match="Call to undefined function nope"):
        php(rt, "nope();")


## CLASSES & OBJECTS
CLASSES = """
class Animal {
    const KINGDOM = 'animalia';
    protected $name;
    public function __construct($name) { $this->name = $name; }
    public function speak() { return $this->name . ' makes ' . $this->sound(); }
    public function sound() { return '...'; }
    public static function create($name) { return new static($name); }
}
class Dog extends Animal {
    public function sound() { return 'woof'; }
    public function speak() { return strtoupper(parent::speak()); }
    public function __toString() { return 'Dog(' . $this->name . ')'; }
}
"""


def test_inheritance_and_parent_calls(rt):
    assert php(rt, CLASSES + "return (new Dog('rex'))->speak();") == 'REX MAKES WOOF'


def test_to_string_and_instanceof(rt):
    assert php(rt, CLASSES + "$d = new Dog('rex'); return [\"$d\", $d instanceof Animal, $d instanceof Exception];") \
        == ['Dog(rex)', True, False]


def test_class_constants_and_static_calls(rt):
    assert php(rt, CLASSES + "return [Dog::KINGDOM, Dog::class, Animal::create('cat')->speak()];") \
        == ['animalia', 'Dog', 'cat makes ...']


def test_objects_are_shared_handles(rt):
    obj = php(rt, "$a = new stdClass; $b = $a; $b->x = 1; return $a;")
    assert isinstance(obj, ScriptObject) and obj.props == {'x': 1}


def test_class_redeclaration_fails(rt):
    with pytest.raises(PrayogRuntimeError, match="Cannot declare class A"):
        php(rt, "class A {} class A {}")


def test_unknown_class(rt):
    with pytest.raises(PrayogNameError, match='Class "Nope" not found'):
        php(rt, "new Nope();")


## EXCEPTIONS
def test_try_catch_finally(rt, capsys):
    code = """
        try {
            throw new InvalidArgumentException('bad', 3);
        } catch (RuntimeException $e) {
            echo 'wrong';
        } catch (LogicException $e) {
            echo get_class($e), ':', $e->getMessage(), ':', $e->getCode();
        } finally {
            echo '|done';
        }
    """
    assert output(rt, code, capsys) == "InvalidArgumentException:bad:3|done"


def test_engine_errors_are_catchable(rt):
    assert php(rt, "try { intdiv(1, 0); } catch (DivisionByZeroError $e) { return $e->getMessage(); }") == "Division by zero"
    assert php(rt, "try { strlen(); } catch (ArgumentCountError $e) { return get_class($e); }") == "ArgumentCountError"
    assert php(rt, "try { nope(); } catch (Throwable $e) { return 'caught'; }") == "caught"


def test_exception_does_not_catch_errors(rt):
    with pytest.raises(PrayogTypeError):
        php(rt, "try { strtoupper(); } catch (Exception $e) { return 'no'; }")


def test_uncaught_exception(rt):
    with pytest.raises(PrayogThrown) as info:
        php(rt, "throw new RuntimeException('boom');")
    assert info.value.php_class == 'RuntimeException'
    assert info.value.message == 'boom'


def test_only_throwables_can_be_thrown(rt):
    with pytest.raises(PrayogRuntimeError, match="Can only throw objects"):
        php(rt, "throw new stdClass;")


## RUNTIME API
def test_bindings_are_copied_in_and_returned(rt):
    bindings = {'a': [1, 2]}
    result = rt.run("$a[] = 3; $b = count($a);", bindings)
    assert bindings == {'a': [1, 2]}
    assert result.bindings['a'] == [1, 2, 3] and result.bindings['b'] == 3
    assert '_SERVER' in result.bindings


def test_register_function_and_constant(rt):
    rt.register_function('triple', lambda x: x * 3)
    rt.register_constant('ANSWER', 42)
    assert php(rt, "return triple(ANSWER);") == 126
    assert 'triple' in rt.list_functions()
    assert 'Exception' in rt.list_classes()


def test_runtime_without_prelude():
    bare = Runtime(prelude=False)
    assert bare.list_classes() == []
    with pytest.raises(PrayogNameError):
        bare.run("new Exception('x');")
