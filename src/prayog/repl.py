## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import enum
import logging
from typing import Any

from .config import Config
from .evaluator import Evaluator, Value, Void, ExitRequested, Failure
from .formatting import Formatter
from .accumulator import StatementAccumulator, Complete


log = logging.getLogger(__name__)

CONTINUATION_PROMPT = '*> '


class SessionState(enum.Enum):
    RUNNING = 'running'
    TERMINATING = 'terminating'
    TERMINATED = 'terminated'


class Repl:
    """Read, evaluate, print, loop: pulls lines from a line source until end-of-input or `exit`."""

    def __init__(self, line_source, config: Config | None = None, evaluator: Evaluator | None = None,
                 formatter: Formatter | None = None):
        self.config = config or Config()
        self.input = line_source
        self.evaluator = evaluator or Evaluator(config=self.config)
        self.formatter = formatter or Formatter(self.config.color_output)
        self.accumulator = StatementAccumulator()
        self.state = SessionState.RUNNING

    def set_variable(self, name: str, value: Any) -> None:
        self.evaluator.set_variable(name, value)

    def set_variables(self, variables: dict[str, Any]) -> None:
        self.evaluator.set_variables(variables)

    def prompt(self) -> str:
        current = self.config.prompt
        if self.accumulator.has_pending:
            current = CONTINUATION_PROMPT.rjust(len(self.config.prompt))
        return f"[{self.accumulator.unit_number}] {current}"

    def _transition(self, state: SessionState) -> None:
        log.debug("Session %s -> %s", self.state.value, state.value)
        self.state = state

    # Session ─────────────────────────────────────────────────────────────────────────────────
    def start(self) -> None:
        print(self.config.get_welcome_message())
        while self.state is not SessionState.TERMINATED:
            match self.state:
                case SessionState.RUNNING: self.step()
                case SessionState.TERMINATING: self.finish()

    def step(self) -> None:
        try:
            line = self.input.read_line(self.prompt())
        except KeyboardInterrupt:
            line = None

        if line is None:
            if self.accumulator.has_pending:
                pending = self.accumulator.pending
                self.accumulator.reset()
                self.present(self.evaluator.evaluate(pending))
            return self._transition(SessionState.TERMINATING)

        self.input.record_line(line)
        if isinstance(result := self.accumulator.accept(line), Complete):
            outcome = self.evaluator.evaluate(result.unit)
            if isinstance(outcome, ExitRequested):
                return self._transition(SessionState.TERMINATING)
            self.present(outcome)

    def present(self, outcome) -> None:
        match outcome:
            case Value(value=value):
                print(self.formatter.format(value))
            case Failure():
                self.accumulator.reset()
                print(self.formatter.format_error(outcome))
            case Void() | ExitRequested():
                pass

    def finish(self) -> None:
        self.input.save_history()
        print("\nGoodbye!")
        self._transition(SessionState.TERMINATED)
