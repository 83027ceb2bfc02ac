## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
import math

from . import operators
from . import combinators as C
from .library import Library


def load_builtins_library():
    constants = {
        'PHP_EOL': "\n",
        'PHP_INT_MAX': sys.maxsize,
        'PHP_INT_MIN': -sys.maxsize - 1,
        'PHP_INT_SIZE': 8,
        'PHP_FLOAT_EPSILON': sys.float_info.epsilon,
        'PHP_FLOAT_MAX': sys.float_info.max,
        'PHP_VERSION': operators.fn_phpversion(),
        'PHP_OS': sys.platform.capitalize(),
        'M_PI': math.pi,
        'M_E': math.e,
        'INF': math.inf,
        'NAN': math.nan,
        'SORT_REGULAR': 0,
        'COUNT_RECURSIVE': 1,
        'ARRAY_FILTER_USE_BOTH': 1,
        'ARRAY_FILTER_USE_KEY': 2,
        'STR_PAD_LEFT': operators.STR_PAD_LEFT,
        'STR_PAD_RIGHT': operators.STR_PAD_RIGHT,
        'STR_PAD_BOTH': operators.STR_PAD_BOTH,
        'JSON_UNESCAPED_SLASHES': operators.JSON_UNESCAPED_SLASHES,
        'JSON_PRETTY_PRINT': operators.JSON_PRETTY_PRINT,
        'JSON_UNESCAPED_UNICODE': operators.JSON_UNESCAPED_UNICODE,
        'JSON_PRESERVE_ZERO_FRACTION': operators.JSON_PRESERVE_ZERO_FRACTION,
    }
    lib = Library(builtins={}, combinators={}, by_ref=set(), constants=constants)

    for k in dir(operators):
        if k.startswith('fn_'):
            lib.add_builtin(k[3:], getattr(operators, k))
        elif k.startswith('ref_'):
            lib.add_builtin(k[4:], getattr(operators, k))
            lib.by_ref.add(k[4:])

    for k in dir(C):
        if not k.startswith('comb_'): continue
        lib.combinators[k[5:]] = getattr(C, k)
    lib.by_ref.update({'usort', 'uasort', 'uksort', 'array_walk'})

    return lib
