## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import sys
from pathlib import Path
from typing import TextIO


class ReadlineInput:
    """Interactive line source with persistent history, backed by GNU readline where available."""

    def __init__(self, history_file: str | None = None):
        self.history_file = history_file
        try:
            import readline
        except ImportError:
            readline = None
        self.readline = readline

        if self.readline is not None:
            self.readline.set_auto_history(False)
            if history_file and Path(history_file).exists():
                self.readline.read_history_file(history_file)

    def read_line(self, prompt: str = '') -> str | None:
        try:
            return input(prompt)
        except EOFError:
            return None

    def record_line(self, text: str) -> None:
        if self.readline is not None and text.strip():
            self.readline.add_history(text)

    def save_history(self) -> None:
        if self.readline is None or not self.history_file: return
        path = Path(self.history_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.readline.write_history_file(str(path))


class StreamInput:
    """Line source over any text stream, e.g. piped standard input; prompts are not echoed."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream if stream is not None else sys.stdin

    def read_line(self, prompt: str = '') -> str | None:
        line = self.stream.readline()
        if line == '':
            return None
        return line.rstrip('\r\n')

    def record_line(self, text: str) -> None:
        pass

    def save_history(self) -> None:
        pass
