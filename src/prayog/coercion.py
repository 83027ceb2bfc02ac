## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# Type juggling between script values, following the rules of the target language.
#

import re
import math

from .types import ScriptObject, Closure, Resource
from .errors import PrayogRuntimeError, PrayogTypeError, PrayogDivisionByZeroError


_NUMERIC_RE = re.compile(r'^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?\s*$')
_LEADING_INT_RE = re.compile(r'^\s*[+-]?\d+')
_LEADING_FLOAT_RE = re.compile(r'^\s*[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?')
_CANONICAL_INT_RE = re.compile(r'^(?:0|-?[1-9]\d*)$')
_INT_MAX, _INT_MIN = 2**63 - 1, -2**63


def is_array(x) -> bool: return isinstance(x, (list, dict))

def is_numeric(x) -> bool:
    if isinstance(x, bool): return False
    if isinstance(x, (int, float)): return True
    return isinstance(x, str) and _NUMERIC_RE.match(x) is not None

def array_items(arr):
    return enumerate(arr) if isinstance(arr, list) else arr.items()


def type_name(x) -> str:
    match x:
        case None: return 'null'
        case bool(): return 'bool'
        case int(): return 'int'
        case float(): return 'float'
        case str(): return 'string'
        case list() | dict(): return 'array'
        case ScriptObject(): return x.cls.name
        case Closure(): return 'Closure'
        case Resource(): return 'resource'
    return type(x).__name__


def format_float(f: float) -> str:
    if math.isnan(f): return 'NAN'
    if math.isinf(f): return 'INF' if f > 0 else '-INF'
    text = f'{f:.14G}'
    if 'E' in text:
        mantissa, exponent = text.split('E')
        if '.' not in mantissa: mantissa += '.0'
        return f"{mantissa}E{exponent[0]}{exponent[1:].lstrip('0') or '0'}"
    return text


def to_bool(x) -> bool:
    match x:
        case None: return False
        case bool(): return x
        case int() | float(): return x != 0
        case str(): return x not in ('', '0')
        case list() | dict(): return len(x) > 0
    return True

def to_string(x) -> str:
    match x:
        case None: return ''
        case bool(): return '1' if x else ''
        case int(): return str(x)
        case float(): return format_float(x)
        case str(): return x
        case list() | dict(): return 'Array'
        case Resource(): return f'Resource id #{x.id}'
    raise PrayogRuntimeError(f"Object of class {type_name(x)} could not be converted to string")

def to_int(x) -> int:
    match x:
        case None: return 0
        case bool() | int(): return int(x)
        case float(): return 0 if (math.isnan(x) or math.isinf(x)) else int(x)
        case str():
            if is_numeric(x): return to_int(float(x)) if not _LEADING_INT_RE.fullmatch(x.strip()) else int(x)
            return int(m.group()) if (m := _LEADING_INT_RE.match(x)) else 0
        case list() | dict(): return 1 if x else 0
    return 1

def to_float(x) -> float:
    if isinstance(x, str):
        return float(m.group()) if (m := _LEADING_FLOAT_RE.match(x)) else 0.0
    return float(to_int(x)) if not isinstance(x, float) else x

def to_number(x, op: str = '+', other=None) -> int | float:
    match x:
        case None: return 0
        case bool(): return int(x)
        case int() | float(): return x
        case str() if is_numeric(x):
            value = float(x)
            return int(x) if _LEADING_INT_RE.fullmatch(x.strip()) else value
    raise PrayogTypeError(f"Unsupported operand types: {type_name(x)} {op} {type_name(other)}")


def normalize_key(key) -> int | str:
    match key:
        case None: return ''
        case bool(): return int(key)
        case int(): return key
        case float(): return to_int(key)
        case str(): return int(key) if _CANONICAL_INT_RE.match(key) else key
    raise PrayogTypeError("Illegal offset type")


def copy_value(x):
    """Arrays are values: copy them recursively, but share object and resource handles."""
    if isinstance(x, list): return [copy_value(v) for v in x]
    if isinstance(x, dict): return {k: copy_value(v) for k, v in x.items()}
    return x


def export_string(s: str) -> str:
    return "'" + s.replace('\\', '\\\\').replace("'", "\\'") + "'"


def strict_equals(a, b) -> bool:
    if is_array(a) and is_array(b):
        left, right = list(array_items(a)), list(array_items(b))
        return len(left) == len(right) and all(
            ka == kb and strict_equals(va, vb) for (ka, va), (kb, vb) in zip(left, right))
    if type(a) is not type(b): return False
    if isinstance(a, (ScriptObject, Closure, Resource)): return a is b
    return a == b

def loose_equals(a, b) -> bool:
    if a is None and b is None: return True
    if isinstance(a, bool) or isinstance(b, bool): return to_bool(a) == to_bool(b)
    if a is None or b is None:
        other = b if a is None else a
        return other == '' if isinstance(other, str) else not to_bool(other)
    if isinstance(a, str) and isinstance(b, str):
        return float(a) == float(b) if is_numeric(a) and is_numeric(b) else a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)): return a == b
    if isinstance(a, (int, float)) and isinstance(b, str):
        return a == to_number(b) if is_numeric(b) else to_string(a) == b
    if isinstance(a, str) and isinstance(b, (int, float)):
        return loose_equals(b, a)
    if is_array(a) and is_array(b):
        left, right = dict(array_items(a)), dict(array_items(b))
        return left.keys() == right.keys() and all(loose_equals(v, right[k]) for k, v in left.items())
    if isinstance(a, ScriptObject) and isinstance(b, ScriptObject):
        return a is b or (a.cls is b.cls and loose_equals(a.props, b.props))
    return a is b

def compare(a, b) -> int:
    """Three-way comparison as performed by `<=>` and the relational operators."""
    def _cmp(x, y): return (x > y) - (x < y)

    if isinstance(a, str) and isinstance(b, str):
        return _cmp(float(a), float(b)) if is_numeric(a) and is_numeric(b) else _cmp(a, b)
    if isinstance(a, bool) or isinstance(b, bool):
        return _cmp(to_bool(a), to_bool(b))
    if a is None and isinstance(b, str): return _cmp('', b)
    if b is None and isinstance(a, str): return _cmp(a, '')
    if a is None or b is None:
        return _cmp(to_bool(a), to_bool(b))
    if is_array(a) and is_array(b):
        if len(a) != len(b): return _cmp(len(a), len(b))
        right = dict(array_items(b))
        for k, v in array_items(a):
            if k not in right: return 1
            if (c := compare(v, right[k])) != 0: return c
        return 0
    if isinstance(a, str) and not is_numeric(a) and isinstance(b, (int, float)):
        return _cmp(a, to_string(b))
    if isinstance(b, str) and not is_numeric(b) and isinstance(a, (int, float)):
        return _cmp(to_string(a), b)
    if isinstance(a, (int, float, str)) and isinstance(b, (int, float, str)):
        return _cmp(to_number(a), to_number(b))
    return 0 if loose_equals(a, b) else 1


def _fit(n):
    """Integers overflow into floats outside of the 64-bit range."""
    if isinstance(n, int) and not (_INT_MIN <= n <= _INT_MAX):
        try:
            return float(n)
        except OverflowError:
            return math.inf if n > 0 else -math.inf
    return n

def arithmetic(op: str, a, b):
    if op == '+' and is_array(a) and is_array(b):
        result = dict(array_items(a))
        for k, v in array_items(b): result.setdefault(k, v)
        return list(result.values()) if list(result.keys()) == list(range(len(result))) else result
    x, y = to_number(a, op, b), to_number(b, op, a)

    match op:
        case '+': return _fit(x + y)
        case '-': return _fit(x - y)
        case '*': return _fit(x * y)
        case '/':
            if y == 0: raise PrayogDivisionByZeroError("Division by zero")
            if isinstance(x, int) and isinstance(y, int) and x % y == 0: return x // y
            return x / y
        case '%':
            x, y = to_int(x), to_int(y)
            if y == 0: raise PrayogDivisionByZeroError("Modulo by zero")
            r = abs(x) % abs(y)
            return -r if x < 0 else r
        case '**':
            if isinstance(x, int) and isinstance(y, int) and 0 <= y < 4096: return _fit(x ** y)
            try:
                return math.pow(x, y)
            except ValueError:
                return math.nan
            except OverflowError:
                return math.inf
    raise PrayogRuntimeError(f"Unknown operator `{op}`.")
