## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import functools

from .types import ScriptObject, Closure
from .errors import PrayogTypeError
from .coercion import is_array, array_items, type_name, to_bool, to_int, to_string, copy_value


def _from_pairs(pairs):
    result = dict(pairs)
    return list(result.values()) if list(result.keys()) == list(range(len(result))) else result

def _require_callable(interp, callback, name: str, position: int = 1):
    if not interp.is_callable(callback):
        raise PrayogTypeError(f"{name}(): Argument #{position} ($callback) must be a valid callback, "
                              f"{type_name(callback)} given")


def comb_array_map(interp, callback, arr, *others):
    """Applies the callback to every element; with several arrays the callback receives one item of each,
    and a null callback zips them together.
    """
    if not others:
        if callback is None: return copy_value(arr)
        _require_callable(interp, callback, 'array_map')
        mapped = [(k, interp.call_value(callback, [copy_value(v)])) for k, v in array_items(arr)]
        return [v for _, v in mapped] if isinstance(arr, list) else _from_pairs(mapped)

    columns = [list(v for _, v in array_items(a)) for a in (arr,) + others]
    rows = [[col[i] if i < len(col) else None for col in columns] for i in range(max(map(len, columns)))]
    if callback is None: return rows
    _require_callable(interp, callback, 'array_map')
    return [interp.call_value(callback, row) for row in rows]

def comb_array_filter(interp, arr, callback=None, mode: int = 0):
    """Keeps the elements for which the callback is truthy, preserving their keys."""
    def keep(k, v):
        if callback is None: return to_bool(v)
        match to_int(mode):
            case 2: args = [k]          # ARRAY_FILTER_USE_KEY
            case 1: args = [v, k]       # ARRAY_FILTER_USE_BOTH
            case _: args = [v]
        return to_bool(interp.call_value(callback, args))

    if callback is not None: _require_callable(interp, callback, 'array_filter', 2)
    return _from_pairs((k, copy_value(v)) for k, v in array_items(arr) if keep(k, v))

def comb_array_reduce(interp, arr, callback, initial=None):
    _require_callable(interp, callback, 'array_reduce', 2)
    carry = initial
    for _, v in array_items(arr):
        carry = interp.call_value(callback, [carry, copy_value(v)])
    return carry

def comb_array_walk(interp, arr, callback):
    _require_callable(interp, callback, 'array_walk', 2)
    for k, v in array_items(arr):
        interp.call_value(callback, [copy_value(v), k])
    return True, arr

def _user_sorted(interp, arr, callback, name: str, position: int):
    _require_callable(interp, callback, name, 2)
    compare = lambda a, b: to_int(interp.call_value(callback, [a[position], b[position]]))
    return sorted(array_items(arr), key=functools.cmp_to_key(compare))

def comb_usort(interp, arr, callback):
    return True, [v for _, v in _user_sorted(interp, arr, callback, 'usort', 1)]

def comb_uasort(interp, arr, callback):
    return True, _from_pairs(_user_sorted(interp, arr, callback, 'uasort', 1))

def comb_uksort(interp, arr, callback):
    return True, _from_pairs(_user_sorted(interp, arr, callback, 'uksort', 0))

def comb_call_user_func(interp, callback, *args):
    _require_callable(interp, callback, 'call_user_func')
    return interp.call_value(callback, [copy_value(a) for a in args])

def comb_call_user_func_array(interp, callback, args):
    _require_callable(interp, callback, 'call_user_func_array')
    if not is_array(args):
        raise PrayogTypeError(f"call_user_func_array(): Argument #2 ($args) must be of type array, {type_name(args)} given")
    return interp.call_value(callback, [copy_value(v) for _, v in array_items(args)])

def comb_is_callable(interp, value) -> bool: return interp.is_callable(value)

def comb_function_exists(interp, name) -> bool: return interp.library.has_function(to_string(name).lstrip('\\'))

def comb_class_exists(interp, name) -> bool: return to_string(name).lstrip('\\').lower() in interp.library.classes

def comb_method_exists(interp, target, method) -> bool:
    if isinstance(target, ScriptObject): cls = target.cls
    elif (cls := interp.library.classes.get(to_string(target).lower())) is None: return False
    return cls.find_method(to_string(method)) is not None

def comb_property_exists(interp, target, prop) -> bool:
    if isinstance(target, ScriptObject) and to_string(prop) in target.props: return True
    cls = target.cls if isinstance(target, ScriptObject) else interp.library.classes.get(to_string(target).lower())
    return cls is not None and any(to_string(prop) in c.properties for c in cls.lineage())

def comb_is_a(interp, value, class_name) -> bool:
    if isinstance(value, Closure): return to_string(class_name).lower() == 'closure'
    return isinstance(value, ScriptObject) and value.cls.is_subclass_of(to_string(class_name).lstrip('\\'))

def comb_get_class_methods(interp, target) -> list:
    cls = target.cls if isinstance(target, ScriptObject) else interp.library.get_class(to_string(target))
    seen = {}
    for c in cls.lineage():
        for method in c.methods.values(): seen.setdefault(method.name.lower(), method.name)
    return list(seen.values())
