## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io
import re
import sys
import json
import base64
import hashlib
import functools
import os
import math
import time
import random
import tempfile
from typing import Any

from .types import ScriptObject, Closure, Resource
from .errors import PrayogRuntimeError, PrayogTypeError, PrayogDivisionByZeroError
from .coercion import (is_array, is_numeric, array_items, type_name, format_float, export_string,
                       to_bool, to_string, to_int, to_float, to_number, normalize_key, compare, loose_equals,
                       strict_equals, copy_value)


num = int | float
array = list | dict

JSON_UNESCAPED_SLASHES, JSON_PRETTY_PRINT, JSON_UNESCAPED_UNICODE, JSON_PRESERVE_ZERO_FRACTION = 64, 128, 256, 1024
STR_PAD_LEFT, STR_PAD_RIGHT, STR_PAD_BOTH = 0, 1, 2


def _from_pairs(pairs) -> array:
    result = dict(pairs)
    return list(result.values()) if list(result.keys()) == list(range(len(result))) else result

def _values(arr: array) -> list: return list(arr) if isinstance(arr, list) else list(arr.values())

def _write(text: str) -> None: sys.stdout.write(text)


## STRINGS
def fn_strlen(s: str) -> int: return len(to_string(s))
def fn_strtoupper(s: str) -> str: return to_string(s).upper()
def fn_strtolower(s: str) -> str: return to_string(s).lower()
def fn_ucfirst(s: str) -> str: s = to_string(s); return s[:1].upper() + s[1:]
def fn_lcfirst(s: str) -> str: s = to_string(s); return s[:1].lower() + s[1:]
def fn_ucwords(s: str) -> str: return re.sub(r'(^|\s)(\S)', lambda m: m.group(1) + m.group(2).upper(), to_string(s))
def fn_strrev(s: str) -> str: return to_string(s)[::-1]
def fn_trim(s: str, chars: str = " \t\n\r\0\x0B") -> str: return to_string(s).strip(chars)
def fn_ltrim(s: str, chars: str = " \t\n\r\0\x0B") -> str: return to_string(s).lstrip(chars)
def fn_rtrim(s: str, chars: str = " \t\n\r\0\x0B") -> str: return to_string(s).rstrip(chars)
def fn_str_repeat(s: str, times: int) -> str: return to_string(s) * to_int(times)
def fn_str_contains(haystack: str, needle: str) -> bool: return to_string(needle) in to_string(haystack)
def fn_str_starts_with(haystack: str, needle: str) -> bool: return to_string(haystack).startswith(to_string(needle))
def fn_str_ends_with(haystack: str, needle: str) -> bool: return to_string(haystack).endswith(to_string(needle))
def fn_nl2br(s: str) -> str: return re.sub(r'(\r\n|\n|\r)', r'<br />\1', to_string(s))
def fn_htmlspecialchars(s: str) -> str:
    s = to_string(s)
    for a, b in (('&', '&amp;'), ('<', '&lt;'), ('>', '&gt;'), ('"', '&quot;'), ("'", '&#039;')): s = s.replace(a, b)
    return s
def fn_chr(n: int) -> str: return chr(to_int(n) % 256)
def fn_ord(s: str) -> int: return ord(to_string(s)[0]) if to_string(s) else 0
def fn_wordwrap(s: str, width: int = 75, brk: str = "\n") -> str:
    words, lines, current = to_string(s).split(' '), [], ''
    for w in words:
        if current and len(current) + 1 + len(w) > to_int(width):
            lines.append(current); current = w
        else:
            current = f"{current} {w}" if current else w
    return to_string(brk).join(lines + [current])

def fn_strpos(haystack: str, needle: str, offset: int = 0) -> int | bool:
    index = to_string(haystack).find(to_string(needle), to_int(offset))
    return False if index < 0 else index

def fn_stripos(haystack: str, needle: str, offset: int = 0) -> int | bool:
    return fn_strpos(to_string(haystack).lower(), to_string(needle).lower(), offset)

def fn_strrpos(haystack: str, needle: str) -> int | bool:
    index = to_string(haystack).rfind(to_string(needle))
    return False if index < 0 else index

def fn_substr(s: str, start: int, length: int | None = None) -> str:
    s, start = to_string(s), to_int(start)
    if start < 0: start = max(0, len(s) + start)
    if length is None: return s[start:]
    length = to_int(length)
    return s[start:start + length] if length >= 0 else s[start:len(s) + length]

def fn_substr_count(haystack: str, needle: str) -> int:
    if not to_string(needle): raise PrayogRuntimeError("substr_count(): Argument #2 ($needle) cannot be empty")
    return to_string(haystack).count(to_string(needle))

def fn_str_replace(search, replace, subject):
    def _one(text: str) -> str:
        pairs = zip(_values(search), _values(replace) if is_array(replace) else [replace] * len(search)) \
            if is_array(search) else [(search, replace)]
        for s, r in pairs:
            if (s := to_string(s)): text = text.replace(s, to_string(r))
        return text
    if is_array(subject): return _from_pairs((k, _one(to_string(v))) for k, v in array_items(subject))
    return _one(to_string(subject))

def fn_str_pad(s: str, length: int, pad: str = ' ', pad_type: int = 1) -> str:
    s, length, pad = to_string(s), to_int(length), to_string(pad)
    missing = length - len(s)
    if missing <= 0 or not pad: return s
    if pad_type == STR_PAD_LEFT: return (pad * length)[:missing] + s
    if pad_type == STR_PAD_BOTH:
        left = missing // 2
        return (pad * length)[:left] + s + (pad * length)[:missing - left]
    return s + (pad * length)[:missing]

def fn_str_split(s: str, size: int = 1) -> list:
    s, size = to_string(s), to_int(size)
    if size < 1: raise PrayogRuntimeError("str_split(): Argument #2 ($length) must be greater than 0")
    return [s[i:i + size] for i in range(0, len(s), size)] or ['']

def fn_explode(separator: str, s: str, limit: int | None = None) -> list:
    separator, s = to_string(separator), to_string(s)
    if not separator: raise PrayogRuntimeError('explode(): Argument #1 ($separator) cannot be empty')
    if limit is None or to_int(limit) == 0: return s.split(separator)
    limit = to_int(limit)
    if limit > 0: return s.split(separator, limit - 1)
    return s.split(separator)[:limit]

def fn_implode(glue, pieces=None) -> str:
    if pieces is None: glue, pieces = '', glue
    if is_array(glue): glue, pieces = pieces, glue
    return to_string(glue).join(to_string(v) for v in _values(pieces))

_FORMAT_RE = re.compile(r"%((?:[-+ 0]|'.)*)(\d+)?(?:\.(\d+))?([bcdeEfFgGosuxX%])")

def fn_sprintf(fmt: str, *args) -> str:
    args, index = list(args), 0
    def _replace(m: re.Match) -> str:
        nonlocal index
        flags, width, precision, conv = m.group(1), m.group(2), m.group(3), m.group(4)
        if conv == '%': return '%'
        if index >= len(args):
            raise PrayogRuntimeError(f"{len(args) + 1} arguments are required, {len(args)} given")
        value, index = args[index], index + 1
        fill = flags[flags.index("'") + 1] if "'" in flags else ('0' if '0' in flags else ' ')
        match conv:
            case 'd': text = str(to_int(value)); text = ('+' + text if '+' in flags and to_int(value) >= 0 else text)
            case 'u': text = str(to_int(value) % 2**64)
            case 'f' | 'F': text = f"{to_float(value):.{int(precision) if precision else 6}f}"
            case 'e' | 'E': text = f"{to_float(value):.{int(precision) if precision else 6}{conv}}"
            case 'g' | 'G': text = f"{to_float(value):{conv}}"
            case 'x': text = f"{to_int(value):x}"
            case 'X': text = f"{to_int(value):X}"
            case 'o': text = f"{to_int(value):o}"
            case 'b': text = f"{to_int(value):b}"
            case 'c': text = chr(to_int(value))
            case _:
                text = to_string(value)
                if precision: text = text[:int(precision)]
        if width and len(text) < int(width):
            if '-' in flags: text = text.ljust(int(width), ' ' if fill == '0' else fill)
            elif fill == '0' and text[:1] in '+-' and conv in 'dfFeE': text = text[0] + text[1:].rjust(int(width) - 1, '0')
            else: text = text.rjust(int(width), fill)
        return text
    return _FORMAT_RE.sub(_replace, to_string(fmt))

def fn_printf(fmt: str, *args) -> int:
    text = fn_sprintf(fmt, *args)
    _write(text)
    return len(text)

def fn_number_format(n: num, decimals: int = 0, point: str = '.', thousands: str = ',') -> str:
    value = round(to_float(n), to_int(decimals))
    text = f"{abs(value):,.{to_int(decimals)}f}"
    whole, _, frac = text.partition('.')
    whole = whole.replace(',', to_string(thousands))
    sign = '-' if value < 0 and float(text.replace(',', '')) != 0 else ''
    return sign + (whole + to_string(point) + frac if frac else whole)


## MATH
def fn_abs(n: num) -> num: return abs(to_number(n))
def fn_max(*args) -> Any:
    values = _values(args[0]) if len(args) == 1 and is_array(args[0]) else list(args)
    if not values: raise PrayogRuntimeError("max(): Argument #1 ($value) must contain at least one element")
    best = values[0]
    for v in values[1:]:
        if compare(v, best) > 0: best = v
    return best
def fn_min(*args) -> Any:
    values = _values(args[0]) if len(args) == 1 and is_array(args[0]) else list(args)
    if not values: raise PrayogRuntimeError("min(): Argument #1 ($value) must contain at least one element")
    best = values[0]
    for v in values[1:]:
        if compare(v, best) < 0: best = v
    return best
def fn_floor(n: num) -> float: return float(math.floor(to_float(n)))
def fn_ceil(n: num) -> float: return float(math.ceil(to_float(n)))
def fn_round(n: num, precision: int = 0) -> float:
    value, factor = to_float(n), 10 ** to_int(precision)
    return math.copysign(math.floor(abs(value) * factor + 0.5) / factor, value)
def fn_sqrt(n: num) -> float: return math.sqrt(x) if (x := to_float(n)) >= 0 else math.nan
def fn_pow(base: num, exp: num) -> num:
    base, exp = to_number(base), to_number(exp)
    return base ** exp if isinstance(base, int) and isinstance(exp, int) and exp >= 0 else math.pow(base, exp)
def fn_intdiv(a: int, b: int) -> int:
    a, b = to_int(a), to_int(b)
    if b == 0:
        raise PrayogDivisionByZeroError("Division by zero")
    return int(a / b)
def fn_fmod(a: num, b: num) -> float: return math.fmod(to_float(a), to_float(b)) if to_float(b) else math.nan
def fn_pi() -> float: return math.pi
def fn_sin(n: num) -> float: return math.sin(to_float(n))
def fn_cos(n: num) -> float: return math.cos(to_float(n))
def fn_tan(n: num) -> float: return math.tan(to_float(n))
def fn_exp(n: num) -> float: return math.exp(to_float(n))
def fn_log(n: num, base: num | None = None) -> float:
    x = to_float(n)
    if x <= 0: return -math.inf if x == 0 else math.nan
    return math.log(x) if base is None else math.log(x, to_float(base))
def fn_log10(n: num) -> float: return math.log10(to_float(n)) if to_float(n) > 0 else math.nan
def fn_rand(lo: int = 0, hi: int = 2**31 - 1) -> int: return random.randint(to_int(lo), to_int(hi))
def fn_mt_rand(lo: int = 0, hi: int = 2**31 - 1) -> int: return random.randint(to_int(lo), to_int(hi))
def fn_random_int(lo: int, hi: int) -> int: return random.randint(to_int(lo), to_int(hi))
def fn_array_sum(arr: array) -> num: return sum((to_number(v) for v in _values(arr)), 0)
def fn_array_product(arr: array) -> num: return math.prod(to_number(v) for v in _values(arr))


## TYPES & INTROSPECTION
def fn_gettype(x: Any) -> str:
    match x:
        case None: return 'NULL'
        case bool(): return 'boolean'
        case int(): return 'integer'
        case float(): return 'double'
        case str(): return 'string'
        case list() | dict(): return 'array'
        case Resource(): return 'resource' if not x.closed else 'resource (closed)'
    return 'object'
def fn_get_debug_type(x: Any) -> str: return type_name(x)
def fn_get_class(x: Any) -> str:
    if isinstance(x, ScriptObject): return x.cls.name
    if isinstance(x, Closure): return 'Closure'
    raise PrayogTypeError(f"get_class(): Argument #1 ($object) must be of type object, {type_name(x)} given")
def fn_get_parent_class(x: Any) -> str | bool:
    return x.cls.parent.name if isinstance(x, ScriptObject) and x.cls.parent else False
def fn_get_object_vars(x: ScriptObject) -> dict: return {k: copy_value(v) for k, v in x.props.items()}
def fn_is_int(x: Any) -> bool: return isinstance(x, int) and not isinstance(x, bool)
def fn_is_integer(x: Any) -> bool: return fn_is_int(x)
def fn_is_float(x: Any) -> bool: return isinstance(x, float)
def fn_is_string(x: Any) -> bool: return isinstance(x, str)
def fn_is_bool(x: Any) -> bool: return isinstance(x, bool)
def fn_is_array(x: Any) -> bool: return is_array(x)
def fn_is_null(x: Any) -> bool: return x is None
def fn_is_numeric(x: Any) -> bool: return is_numeric(x)
def fn_is_object(x: Any) -> bool: return isinstance(x, (ScriptObject, Closure))
def fn_is_resource(x: Any) -> bool: return isinstance(x, Resource) and not x.closed
def fn_is_scalar(x: Any) -> bool: return isinstance(x, (bool, int, float, str))
def fn_is_nan(x: num) -> bool: return math.isnan(to_float(x))
def fn_is_infinite(x: num) -> bool: return math.isinf(to_float(x))
def fn_intval(x: Any, base: int = 10) -> int:
    if isinstance(x, str) and to_int(base) != 10:
        try:
            return int(x.strip(), to_int(base))
        except ValueError:
            return 0
    return to_int(x)
def fn_floatval(x: Any) -> float: return to_float(x)
def fn_strval(x: Any) -> str: return to_string(x)
def fn_boolval(x: Any) -> bool: return to_bool(x)


## ARRAYS
def fn_count(x: Any) -> int:
    if is_array(x): return len(x)
    raise PrayogTypeError(f"count(): Argument #1 ($value) must be of type Countable|array, {type_name(x)} given")
def fn_sizeof(x: Any) -> int: return fn_count(x)
def fn_array_keys(arr: array) -> list: return [k for k, _ in array_items(arr)]
def fn_array_values(arr: array) -> list: return [copy_value(v) for v in _values(arr)]
def fn_array_merge(*arrays) -> array: return _reindex(pair for arr in arrays for pair in array_items(arr))
def fn_array_combine(keys: array, values: array) -> array:
    if len(keys) != len(values):
        raise PrayogRuntimeError("array_combine(): Argument #1 ($keys) and argument #2 ($values) must have the same number of elements")
    return _from_pairs((normalize_key(k), copy_value(v)) for k, v in zip(_values(keys), _values(values)))
def fn_array_flip(arr: array) -> array: return _from_pairs((normalize_key(v), k) for k, v in array_items(arr))
def _reindex(pairs) -> array:
    """Renumber integer keys from zero while keeping string keys, like array_merge() of a single array."""
    result, index = {}, 0
    for k, v in pairs:
        if isinstance(k, int): result[index] = copy_value(v); index += 1
        else: result[k] = copy_value(v)
    return _from_pairs(result.items())

def _span(size: int, offset: int, length: int | None) -> tuple[int, int]:
    start = max(0, size + offset) if offset < 0 else min(offset, size)
    if length is None: return start, size
    stop = start + length if length >= 0 else size + length
    return start, max(start, min(stop, size))

def fn_array_reverse(arr: array, preserve_keys: bool = False) -> array:
    items = list(array_items(arr))[::-1]
    if to_bool(preserve_keys): return _from_pairs((k, copy_value(v)) for k, v in items)
    return _reindex(items)
def fn_array_slice(arr: array, offset: int, length: int | None = None, preserve_keys: bool = False) -> array:
    items = list(array_items(arr))
    start, stop = _span(len(items), to_int(offset), None if length is None else to_int(length))
    if to_bool(preserve_keys): return _from_pairs((k, copy_value(v)) for k, v in items[start:stop])
    return _reindex(items[start:stop])
def fn_array_search(needle: Any, haystack: array, strict: bool = False) -> Any:
    equals = strict_equals if strict else loose_equals
    return next((k for k, v in array_items(haystack) if equals(v, needle)), False)
def fn_in_array(needle: Any, haystack: array, strict: bool = False) -> bool:
    return fn_array_search(needle, haystack, strict) is not False
def fn_array_key_exists(key: Any, arr: array) -> bool:
    key = normalize_key(key)
    return (isinstance(key, int) and 0 <= key < len(arr)) if isinstance(arr, list) else key in arr
def fn_key_exists(key: Any, arr: array) -> bool: return fn_array_key_exists(key, arr)
def fn_array_key_first(arr: array) -> Any: return next((k for k, _ in array_items(arr)), None)
def fn_array_key_last(arr: array) -> Any: return list(array_items(arr))[-1][0] if arr else None
def fn_array_unique(arr: array) -> array:
    seen, result = [], {}
    for k, v in array_items(arr):
        if not any(to_string(v) == to_string(s) for s in seen):
            seen.append(v); result[k] = copy_value(v)
    return _from_pairs(result.items())
def fn_array_count_values(arr: array) -> array:
    result = {}
    for v in _values(arr):
        result[normalize_key(v)] = result.get(normalize_key(v), 0) + 1
    return _from_pairs(result.items())
def fn_array_fill(start: int, count: int, value: Any) -> array:
    return _from_pairs((to_int(start) + i, copy_value(value)) for i in range(to_int(count)))
def fn_array_fill_keys(keys: array, value: Any) -> array:
    return _from_pairs((normalize_key(k), copy_value(value)) for k in _values(keys))
def fn_array_pad(arr: array, size: int, value: Any) -> list:
    values, size = fn_array_values(arr), to_int(size)
    missing = [copy_value(value)] * max(0, abs(size) - len(values))
    return values + missing if size > 0 else missing + values
def fn_array_chunk(arr: array, size: int, preserve_keys: bool = False) -> list:
    items, size = list(array_items(arr)), to_int(size)
    if size < 1: raise PrayogRuntimeError("array_chunk(): Argument #2 ($length) must be greater than 0")
    chunks = [items[i:i + size] for i in range(0, len(items), size)]
    return [_from_pairs(c) if preserve_keys else [copy_value(v) for _, v in c] for c in chunks]
def fn_array_column(rows: array, column: Any, index: Any = None) -> array:
    pairs, position = [], 0
    for row in _values(rows):
        row = row.props if isinstance(row, ScriptObject) else dict(array_items(row))
        if (key := normalize_key(column)) in row:
            if index is not None and normalize_key(index) in row: pairs.append((normalize_key(row[normalize_key(index)]), row[key]))
            else: pairs.append((position, row[key])); position += 1
    return _from_pairs((k, copy_value(v)) for k, v in pairs)
def fn_array_diff(arr: array, *others) -> array:
    excluded = {to_string(v) for other in others for v in _values(other)}
    return _from_pairs((k, copy_value(v)) for k, v in array_items(arr) if to_string(v) not in excluded)
def fn_array_diff_key(arr: array, *others) -> array:
    excluded = {k for other in others for k, _ in array_items(other)}
    return _from_pairs((k, copy_value(v)) for k, v in array_items(arr) if k not in excluded)
def fn_array_intersect(arr: array, *others) -> array:
    return _from_pairs((k, copy_value(v)) for k, v in array_items(arr)
                       if all(to_string(v) in {to_string(o) for o in _values(other)} for other in others))
def fn_array_intersect_key(arr: array, *others) -> array:
    return _from_pairs((k, copy_value(v)) for k, v in array_items(arr)
                       if all(k in dict(array_items(other)) for other in others))
def fn_range(start: Any, end: Any, step: num = 1) -> list:
    if isinstance(start, str) and isinstance(end, str) and len(start) == 1 and len(end) == 1 \
            and not start.isdigit() and not end.isdigit():
        lo, hi = ord(start), ord(end)
        return [chr(c) for c in (range(lo, hi + 1, abs(to_int(step)) or 1) if lo <= hi else range(lo, hi - 1, -(abs(to_int(step)) or 1)))]
    start, end, step = to_number(start), to_number(end), abs(to_number(step))
    if step == 0: raise PrayogRuntimeError("range(): Argument #3 ($step) cannot be 0")
    if any(isinstance(x, float) for x in (start, end, step)):
        count = int(abs(end - start) / step + 1e-9) + 1
        return [start + i * step * (1 if end >= start else -1) for i in range(count)]
    return list(range(start, end + 1, step) if start <= end else range(start, end - 1, -step))
def fn_array_is_list(arr: array) -> bool: return isinstance(arr, list) or list(arr.keys()) == list(range(len(arr)))
def fn_json_encode(value: Any, flags: int = 0) -> str:
    def _convert(x):
        match x:
            case list(): return [_convert(v) for v in x]
            case dict(): return {to_string(k): _convert(v) for k, v in x.items()}
            case ScriptObject(): return {k: _convert(v) for k, v in x.props.items()}
            case float() if x.is_integer() and abs(x) < 1e15: return x if to_int(flags) & JSON_PRESERVE_ZERO_FRACTION else int(x)
        return x
    flags = to_int(flags)
    pretty = bool(flags & JSON_PRETTY_PRINT)
    text = json.dumps(_convert(value), indent=4 if pretty else None, ensure_ascii=not (flags & JSON_UNESCAPED_UNICODE),
                      separators=(',', ': ') if pretty else (',', ':'))
    return text if flags & JSON_UNESCAPED_SLASHES else text.replace('/', '\\/')
def fn_json_decode(text: str, assoc: bool = False) -> Any:
    def _convert(x):
        match x:
            case list(): return [_convert(v) for v in x]
            case dict(): return _from_pairs((normalize_key(k), _convert(v)) for k, v in x.items())
        return x
    try:
        return _convert(json.loads(to_string(text)))
    except ValueError:
        return None


## BY-REFERENCE: receive the current value of the first argument, return (result, new value).
def _sorted_pairs(arr: array, by_key: bool, reverse: bool = False) -> list:
    position = 0 if by_key else 1
    return sorted(array_items(arr), key=functools.cmp_to_key(lambda a, b: compare(a[position], b[position])), reverse=reverse)

def ref_sort(arr: array) -> tuple[bool, list]: return True, [v for _, v in _sorted_pairs(arr, False)]
def ref_rsort(arr: array) -> tuple[bool, list]: return True, [v for _, v in _sorted_pairs(arr, False, reverse=True)]
def ref_asort(arr: array) -> tuple[bool, array]: return True, _from_pairs(_sorted_pairs(arr, False))
def ref_arsort(arr: array) -> tuple[bool, array]: return True, _from_pairs(_sorted_pairs(arr, False, reverse=True))
def ref_ksort(arr: array) -> tuple[bool, array]: return True, _from_pairs(_sorted_pairs(arr, True))
def ref_krsort(arr: array) -> tuple[bool, array]: return True, _from_pairs(_sorted_pairs(arr, True, reverse=True))
def ref_shuffle(arr: array) -> tuple[bool, list]:
    values = _values(arr)
    random.shuffle(values)
    return True, values

def ref_array_push(arr: array, *values) -> tuple[int, array]:
    arr = copy_value(arr) if arr is not None else []
    for v in values:
        if isinstance(arr, list): arr.append(copy_value(v))
        else: arr[max((k for k in arr if isinstance(k, int)), default=-1) + 1] = copy_value(v)
    return len(arr), arr

def ref_array_pop(arr: array) -> tuple[Any, array]:
    if not arr: return None, arr
    items = list(array_items(arr))
    return items[-1][1], _from_pairs(items[:-1]) if isinstance(arr, dict) else [v for _, v in items[:-1]]

def ref_array_shift(arr: array) -> tuple[Any, array]:
    if not arr: return None, arr
    items = list(array_items(arr))
    return items[0][1], _reindex(items[1:])

def ref_array_unshift(arr: array, *values) -> tuple[int, array]:
    result = _reindex([(i, v) for i, v in enumerate(values)] + list(array_items(arr)))
    return len(result), result

def ref_array_splice(arr: array, offset: int, length: int | None = None, replacement: Any = None) -> tuple[list, list]:
    values = _values(arr)
    start, stop = _span(len(values), to_int(offset), None if length is None else to_int(length))
    insert = [] if replacement is None else (_values(replacement) if is_array(replacement) else [replacement])
    return values[start:stop], values[:start] + [copy_value(v) for v in insert] + values[stop:]


## OUTPUT
def print_r_text(x: Any, indent: int = 0) -> str:
    if is_array(x) or isinstance(x, ScriptObject):
        header = 'Array' if is_array(x) else f'{x.cls.name} Object'
        pairs = array_items(x) if is_array(x) else x.props.items()
        pad = ' ' * indent
        lines = [f"{header}\n{pad}(\n"]
        for k, v in pairs:
            lines.append(f"{pad}    [{k}] => {print_r_text(v, indent + 8)}\n")
        return ''.join(lines) + f"{pad})\n"
    if isinstance(x, Closure): return 'Closure Object\n(\n)\n'
    return to_string(x)

def _dump_key(k) -> str: return str(k) if isinstance(k, int) else f'"{k}"'

def var_dump_text(x: Any, indent: int = 0) -> str:
    pad = ' ' * indent
    match x:
        case None: return f"{pad}NULL\n"
        case bool(): return f"{pad}bool({'true' if x else 'false'})\n"
        case int(): return f"{pad}int({x})\n"
        case float():
            return f"{pad}float({format_float(x)})\n"
        case str(): return f'{pad}string({len(x.encode())}) "{x}"\n'
        case list() | dict():
            inner = ''.join(f"{pad}  [{_dump_key(k)}]=>\n{var_dump_text(v, indent + 2)}"
                            for k, v in array_items(x))
            return f"{pad}array({len(x)}) {{\n{inner}{pad}}}\n"
        case ScriptObject():
            inner = ''.join(f'{pad}  ["{k}"]=>\n{var_dump_text(v, indent + 2)}' for k, v in x.props.items())
            return f"{pad}object({x.cls.name})#{x.handle} ({len(x.props)}) {{\n{inner}{pad}}}\n"
        case Closure(): return f"{pad}object(Closure)#0 (0) {{\n{pad}}}\n"
        case Resource(): return f"{pad}resource({x.id}) of type ({x.kind})\n"
    return f"{pad}{x!r}\n"

def var_export_text(x: Any, indent: int = 0) -> str:
    pad = ' ' * indent
    match x:
        case None: return 'NULL'
        case bool(): return 'true' if x else 'false'
        case int(): return str(x)
        case float():
            text = format_float(x)
            return text + '.0' if re.fullmatch(r'-?\d+', text) else text
        case str(): return export_string(x)
        case list() | dict():
            inner = ''.join(f"{pad}  {k if isinstance(k, int) else export_string(k)} => {var_export_text(v, indent + 2)},\n"
                            for k, v in array_items(x))
            return f"array (\n{inner}{pad})"
        case ScriptObject():
            inner = ''.join(f"{pad}   '{k}' => {var_export_text(v, indent + 2)},\n" for k, v in x.props.items())
            return f"\\{x.cls.name}::__set_state(array(\n{inner}{pad}))"
    return 'NULL'

def fn_print_r(x: Any, return_: bool = False) -> str | bool:
    text = print_r_text(x)
    if to_bool(return_): return text
    _write(text)
    return True

def fn_var_dump(*values) -> None:
    for v in values: _write(var_dump_text(v))

def fn_var_export(x: Any, return_: bool = False) -> str | None:
    text = var_export_text(x)
    if to_bool(return_): return text
    _write(text)
    return None


## STREAMS & TIME
def fn_fopen(path: str, mode: str = 'r') -> Resource | bool:
    match to_string(path):
        case "php://stdin": return Resource("stream", _StandardStream("stdin"))
        case "php://stdout" | "php://output": return Resource("stream", _StandardStream("stdout"))
        case "php://stderr": return Resource("stream", _StandardStream("stderr"))
        case 'php://memory' | 'php://temp': return Resource('stream', io.StringIO())
    try:
        return Resource('stream', open(to_string(path), to_string(mode).replace('b', '') or 'r'))
    except OSError:
        return False

class _StandardStream:
    """Process stream looked up on every access, so redirected output is honoured."""
    def __init__(self, name: str): self.name = name
    def __getattr__(self, attr): return getattr(getattr(sys, self.name), attr)
    def close(self): getattr(sys, self.name).flush()

def fn_fwrite(handle: Resource, data: str) -> int:
    text = to_string(data)
    _stream(handle, 'fwrite').write(text)
    return len(text)
def fn_fputs(handle: Resource, data: str) -> int: return fn_fwrite(handle, data)
def fn_fgets(handle: Resource) -> str | bool: return _stream(handle, 'fgets').readline() or False
def fn_fread(handle: Resource, length: int) -> str: return _stream(handle, 'fread').read(to_int(length))
def fn_rewind(handle: Resource) -> bool: _stream(handle, 'rewind').seek(0); return True
def fn_stream_get_contents(handle: Resource) -> str: return _stream(handle, 'stream_get_contents').read()
def fn_fclose(handle: Resource) -> bool: _stream(handle, 'fclose'); handle.close(); return True
def fn_file_get_contents(path: str) -> str | bool:
    try:
        with open(to_string(path), 'r') as f: return f.read()
    except OSError:
        return False
def fn_file_put_contents(path: str, data: Any) -> int | bool:
    text = fn_implode('', data) if is_array(data) else to_string(data)
    try:
        with open(to_string(path), 'w') as f: return f.write(text)
    except OSError:
        return False
def fn_tmpfile() -> Resource:
    return Resource("stream", tempfile.TemporaryFile("w+"))

def fn_file_exists(path: str) -> bool:
    return os.path.exists(to_string(path))

def _stream(handle: Any, name: str):
    if not isinstance(handle, Resource):
        raise PrayogTypeError(f"{name}(): Argument #1 ($stream) must be of type resource, {type_name(handle)} given")
    if handle.closed:
        raise PrayogTypeError(f"{name}(): supplied resource is not a valid stream resource")
    return handle.handle

def fn_time() -> int: return int(time.time())
def fn_microtime(as_float: bool = False) -> float | str:
    now = time.time()
    return now if to_bool(as_float) else f"{now - int(now):.8f} {int(now)}"
def fn_hrtime(as_number: bool = False) -> int | list:
    ns = time.perf_counter_ns()
    return ns if to_bool(as_number) else [ns // 10**9, ns % 10**9]
def fn_date(fmt: str, timestamp: int | None = None) -> str:
    moment = time.localtime(time.time() if timestamp is None else to_int(timestamp))
    codes = {'Y': '%Y', 'y': '%y', 'm': '%m', 'd': '%d', 'H': '%H', 'i': '%M', 's': '%S', 'D': '%a', 'l': '%A',
             'M': '%b', 'F': '%B', 'N': None, 'j': None, 'n': None, 'G': None, 'A': '%p'}
    out = []
    for ch in to_string(fmt):
        match ch:
            case 'j': out.append(str(moment.tm_mday))
            case 'n': out.append(str(moment.tm_mon))
            case 'G': out.append(str(moment.tm_hour))
            case 'N': out.append(str(moment.tm_wday + 1))
            case 'a': out.append(time.strftime('%p', moment).lower())
            case _ if ch in codes: out.append(time.strftime(codes[ch], moment))
            case _: out.append(ch)
    return ''.join(out)
def fn_usleep(micro: int) -> None: time.sleep(to_int(micro) / 1e6)
def fn_sleep(seconds: int) -> int: time.sleep(to_int(seconds)); return 0
def fn_phpversion() -> str: return '8.3.0'
def fn_uniqid(prefix: str = '') -> str:
    now = time.time()
    return f"{to_string(prefix)}{int(now):8x}{int((now % 1) * 1e6):05x}"
def fn_md5(s: str) -> str:
    return hashlib.md5(to_string(s).encode()).hexdigest()
def fn_sha1(s: str) -> str:
    return hashlib.sha1(to_string(s).encode()).hexdigest()
def fn_base64_encode(s: str) -> str:
    return base64.b64encode(to_string(s).encode()).decode()
def fn_base64_decode(s: str) -> str:
    return base64.b64decode(to_string(s).encode()).decode(errors='replace')
