## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import enum

from .accumulator import leading_word, TERMINATOR


STATEMENT_KEYWORDS = frozenset({
    'if', 'else', 'elseif', 'for', 'foreach', 'while', 'do', 'switch', 'function', 'class',
    'interface', 'trait', 'namespace', 'use', 'declare', 'return', 'echo', 'print', 'unset',
    'try', 'throw', 'break', 'continue', 'global', 'static',
})

# `$name` followed by any chain of `[...]` or `->prop`, then an assignment operator (not `==`/`=>`).
_ASSIGNMENT_RE = re.compile(
    r'^\s*\$[A-Za-z_]\w*(?:\s*\[(?:[^\[\]]|\[[^\]]*\])*\]|\s*->\s*[A-Za-z_]\w*)*\s*'
    r'(?:=(?![=>])|\+=|-=|\*\*=|\*=|/=|\.=|%=|\?\?=)')


class UnitKind(enum.Enum):
    STATEMENT = 'statement'
    EXPRESSION = 'expression'


def classify(unit: str) -> UnitKind:
    if leading_word(unit) in STATEMENT_KEYWORDS:
        return UnitKind.STATEMENT
    if _ASSIGNMENT_RE.match(unit):
        return UnitKind.STATEMENT
    return UnitKind.EXPRESSION


def strip_terminator(unit: str) -> str:
    text = unit.strip()
    return text[:-len(TERMINATOR)].rstrip() if text.endswith(TERMINATOR) else text


def wrap_unit(unit: str) -> tuple[UnitKind, str]:
    """Classifies the unit and rewrites expressions so that the engine returns their value."""
    if (kind := classify(unit)) is UnitKind.STATEMENT:
        return kind, unit
    return kind, f"return {strip_terminator(unit)};"
