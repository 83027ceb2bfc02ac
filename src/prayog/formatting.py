## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re

from .types import ScriptObject, Closure, Resource
from .coercion import array_items, format_float, export_string, to_string


GREY, YELLOW, CYAN, GREEN, MAGENTA, BLUE, RED = (f'\033[{c}m' for c in (90, 33, 36, 32, 35, 34, 31))
RESET = '\033[0m'


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))


class Formatter:
    """Renders script values and failures for display in the session."""

    def __init__(self, colorize: bool = True):
        self.colorize = colorize

    def _paint(self, color: str, text: str) -> str:
        return f"{color}{text}{RESET}" if self.colorize else text

    def format(self, value) -> str:
        match value:
            case None: return self._paint(GREY, 'null')
            case bool(): return self._paint(YELLOW, 'true' if value else 'false')
            case int(): return self._paint(CYAN, str(value))
            case float(): return self._paint(CYAN, format_float(value))
            case str(): return self._paint(GREEN, export_string(value))
            case list() | dict(): return self._paint(MAGENTA, f"array({len(value)}) {self.array_preview(value)}")
            case ScriptObject(): return self._paint(BLUE, f"object({value.cls.name})")
            case Closure(): return self._paint(BLUE, "object(Closure)")
            case Resource(): return self._paint(RED, f"resource({value.kind})")
        return str(value)

    def array_preview(self, array, max_depth: int = 2, max_items: int = 3) -> str:
        if not array: return '[]'
        items = []
        for count, (key, value) in enumerate(array_items(array)):
            if count >= max_items:
                items.append('...')
                break
            key_text = export_string(key) if isinstance(key, str) else str(key)
            items.append(f"{key_text} => {self.value_preview(value, max_depth - 1)}")
        return '[' + ', '.join(items) + ']'

    def value_preview(self, value, max_depth: int) -> str:
        if max_depth <= 0: return '...'
        match value:
            case list() | dict(): return self.array_preview(value, max_depth, 2)
            case ScriptObject(): return value.cls.name
            case Closure(): return 'Closure'
            case str(): return value[:20] + '...' if len(value) > 20 else export_string(value)
        return to_string(value)

    def format_error(self, failure) -> str:
        return self._paint(RED, f"Error ({failure.error_type}): {failure.message}")
