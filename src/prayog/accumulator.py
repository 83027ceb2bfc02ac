## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# Decides when the lines typed so far form one unit that is ready to evaluate.
#

from dataclasses import dataclass


CONTINUATION_MARKER = '\\'
TERMINATOR = ';'
BLOCK_KEYWORDS = frozenset({
    'if', 'else', 'elseif', 'for', 'foreach', 'while', 'do', 'switch', 'function', 'class',
    'interface', 'trait', 'namespace', 'use', 'declare', 'try',
})
_PAIRS = (('{', '}'), ('[', ']'), ('(', ')'))


@dataclass(frozen=True)
class Complete:
    unit: str

@dataclass(frozen=True)
class Incomplete:
    pass

INCOMPLETE = Incomplete()


def leading_word(text: str) -> str:
    """First identifier-like word of the text, lower-cased; empty when it starts with a symbol."""
    stripped = text.lstrip()
    end = 0
    while end < len(stripped) and (stripped[end].isalnum() or stripped[end] == '_'):
        end += 1
    return stripped[:end].lower()


def delimiter_balance(text: str) -> tuple[int, int, int]:
    # Literal-blind: delimiters inside strings and comments are counted too.
    return tuple(text.count(opening) - text.count(closing) for opening, closing in _PAIRS)


def is_complete_statement(text: str) -> bool:
    if any(delimiter_balance(text)):
        return False
    trimmed = text.strip()
    if not trimmed:
        return False
    if trimmed.endswith(TERMINATOR):
        return True
    if leading_word(trimmed) in BLOCK_KEYWORDS:
        return True
    # Balanced text without terminator is taken as a single bare expression.
    return True


def ends_with_continuation(line: str) -> bool:
    """True for a trailing `\\` marker that is not itself escaped by another backslash."""
    trimmed = line.rstrip()
    if not trimmed.endswith(CONTINUATION_MARKER):
        return False
    run = len(trimmed) - len(trimmed.rstrip(CONTINUATION_MARKER))
    return run % 2 == 1


class StatementAccumulator:

    def __init__(self):
        self._buffer: list[str] = []
        self.unit_number = 1

    @property
    def has_pending(self) -> bool:
        return len(self._buffer) > 0

    @property
    def pending(self) -> str:
        return ''.join(self._buffer)

    def accept(self, line: str) -> Complete | Incomplete:
        if not self._buffer and not line.strip():
            return INCOMPLETE

        if ends_with_continuation(line):
            self._buffer.append(line.rstrip()[:-len(CONTINUATION_MARKER)])
            return INCOMPLETE

        self._buffer.append(line + '\n')
        text = self.pending
        if not is_complete_statement(text):
            return INCOMPLETE

        self.reset()
        self.unit_number += 1
        return Complete(text)

    def reset(self) -> None:
        self._buffer.clear()
