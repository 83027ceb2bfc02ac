## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import os
import sys
import time
import logging
from typing import Any, Callable
from pathlib import Path
from dataclasses import dataclass

from .types import ScriptValue
from .parser import parse
from .library import Library
from .builtins import load_builtins_library
from .coercion import copy_value
from .interpreter import Interpreter, Frame


log = logging.getLogger(__name__)

PRELUDE_PATH = Path(__file__).resolve().parent / 'libs' / 'prelude.php'


@dataclass
class RunResult:
    value: ScriptValue
    bindings: dict[str, ScriptValue]


class Runtime:
    """Execution engine facade: runs units of script code against a caller-supplied variable scope."""

    def __init__(self, library: Library | None = None, *, prelude: bool = True):
        self.library = library or load_builtins_library()
        self.interpreter = Interpreter(self.library)
        if prelude:
            self.load(PRELUDE_PATH.read_text(encoding="utf-8"), filename=str(PRELUDE_PATH))

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def run(self, source: str, bindings: dict[str, Any] | None = None, filename: str | None = None) -> RunResult:
        """Parse and execute `source` with a copy of `bindings` as its scope.  The returned bindings are the
        scope after execution, so callers can tell which variables were created or changed.
        """
        tree = parse(source, filename=filename)
        scope = {name: copy_value(value) for name, value in (bindings or {}).items()}
        scope.update(self.superglobals())
        frame = Frame(scope)
        log.debug("Running %d statement(s) with %d binding(s).", len(tree.children), len(scope))
        value = self.interpreter.run_unit(tree.children, frame)
        return RunResult(value, frame.vars)

    def superglobals(self) -> dict[str, Any]:
        return {
            '_SERVER': {'argv': list(sys.argv), 'argc': len(sys.argv), 'PHP_SELF': sys.argv[0] if sys.argv else '',
                        'REQUEST_TIME': int(time.time()), 'REQUEST_TIME_FLOAT': time.time()},
            '_ENV': dict(os.environ),
        }

    # Loading ─────────────────────────────────────────────────────────────────────────────────
    def load(self, source: str, filename: str | None = None) -> None:
        self.run(source, filename=filename)

    # Registration ────────────────────────────────────────────────────────────────────────────
    def register_function(self, name: str, func: Callable) -> None:
        self.library.add_builtin(name, func)

    def register_constant(self, name: str, value: Any) -> None:
        self.library.constants[name] = value

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def list_functions(self) -> list[str]:
        return sorted(set(self.library.builtins) | set(self.library.combinators) | set(self.library.functions))

    def list_classes(self) -> list[str]:
        return sorted(cls.name for cls in self.library.classes.values())
