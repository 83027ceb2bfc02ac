## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import os
import tempfile
from pathlib import Path
from dataclasses import dataclass

from .operators import fn_phpversion


DEFAULT_PROMPT = "prayog> "
DEFAULT_HISTORY_NAME = ".prayog_history"
PHP_VERSION = fn_phpversion()

# Names the engine injects into every scope; never tracked as session variables.
DEFAULT_INTERNAL_NAMES = frozenset({
    'GLOBALS', '_SERVER', '_GET', '_POST', '_FILES', '_COOKIE', '_SESSION', '_REQUEST', '_ENV', 'this',
})


@dataclass(frozen=True)
class Config:
    prompt: str = DEFAULT_PROMPT
    history_file: str | None = None
    color_output: bool = True
    welcome_message: str | None = None
    internal_names: frozenset[str] = DEFAULT_INTERNAL_NAMES
    private_prefix: str = "_"

    def get_history_file(self) -> str:
        if self.history_file:
            return self.history_file
        if (env := os.environ.get('PRAYOG_HISTORY')):
            return env
        if (home := os.environ.get('HOME') or os.environ.get('USERPROFILE')):
            return str(Path(home) / DEFAULT_HISTORY_NAME)
        return str(Path(tempfile.gettempdir()) / DEFAULT_HISTORY_NAME)

    def get_welcome_message(self) -> str:
        if self.welcome_message is not None:
            return self.welcome_message
        return f"Prayog (प्रयोग) - PHP REPL\nPHP {PHP_VERSION}\nType 'exit' or press Ctrl+D to quit.\n"
