## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import io
import sys
import enum
import logging
import contextlib
from typing import Any
from dataclasses import dataclass

from .types import ScriptValue
from .errors import PrayogSyntaxError, PrayogRuntimeError
from .config import Config
from .parser import strip_open_tag
from .runtime import Runtime
from .classifier import wrap_unit, strip_terminator, UnitKind
from .environment import EnvironmentStore


log = logging.getLogger(__name__)

EXIT_TOKENS = frozenset({'exit', 'exit()', 'quit', 'quit()'})


class FailureKind(enum.Enum):
    SYNTAX = 'syntax'
    RUNTIME = 'runtime'
    ENGINE = 'engine'


@dataclass(frozen=True)
class Value:
    value: ScriptValue

@dataclass(frozen=True)
class Void:
    pass

@dataclass(frozen=True)
class ExitRequested:
    pass

@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    error_type: str = 'Error'

Outcome = Value | Void | ExitRequested | Failure


def failure_from_exception(exc: Exception) -> Failure:
    match exc:
        case PrayogSyntaxError():
            return Failure(FailureKind.SYNTAX, exc.message, exc.php_class)
        case PrayogRuntimeError():
            return Failure(FailureKind.RUNTIME, exc.message, exc.php_class)
        case RecursionError():
            return Failure(FailureKind.ENGINE, "Maximum function nesting level reached", 'Error')
    return Failure(FailureKind.ENGINE, str(exc) or type(exc).__name__, type(exc).__name__)


class Evaluator:
    """Runs one unit at a time against the persistent environment, capturing output and failures."""

    def __init__(self, runtime: Runtime | None = None, config: Config | None = None):
        self.config = config or Config()
        self.runtime = runtime or Runtime()
        self.store = EnvironmentStore(self.config.internal_names, self.config.private_prefix)

    def evaluate(self, code: str, *, as_statement: bool = False) -> Outcome:
        code = strip_open_tag(code.strip()).strip()
        if not code:
            return Void()
        if strip_terminator(code) in EXIT_TOKENS:
            return ExitRequested()

        kind, wrapped = (UnitKind.STATEMENT, code) if as_statement else wrap_unit(code)
        log.debug("Unit classified as %s: %r", kind.value, wrapped)

        before = self.store.get()
        captured = io.StringIO()
        try:
            with contextlib.redirect_stdout(captured):
                result = self.runtime.run(wrapped, before, filename='<REPL>')
        except Exception as exc:
            log.debug("Evaluation failed, discarding %d character(s) of output.", len(captured.getvalue()), exc_info=True)
            return failure_from_exception(exc)

        self.emit(captured.getvalue())
        changed = self.store.reconcile(before, result.bindings)
        if changed: log.debug("Reconciled bindings: %s", ', '.join(changed))
        return Void() if result.value is None else Value(result.value)

    def emit(self, output: str) -> None:
        if not output: return
        sys.stdout.write(output)
        if not output.endswith('\n'):
            sys.stdout.write('\n')
        sys.stdout.flush()

    # Variables ───────────────────────────────────────────────────────────────────────────────
    def set_variable(self, name: str, value: Any) -> None:
        self.store.set(name, value)

    def set_variables(self, variables: dict[str, Any]) -> None:
        self.store.merge(variables)

    def get_variables(self) -> dict[str, Any]:
        return self.store.get()
