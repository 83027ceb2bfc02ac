## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any, Callable
from dataclasses import dataclass, field

from .types import FunctionDef, ScriptClass
from .errors import PrayogNameError, PrayogRuntimeError


@dataclass
class Library:
    builtins: dict[str, Callable[..., Any]]
    combinators: dict[str, Callable[..., Any]]     # Called with the interpreter as first argument.
    by_ref: set[str]                               # First argument is written back: returns (result, new_value).
    constants: dict[str, Any]
    functions: dict[str, FunctionDef] = field(default_factory=dict)
    classes: dict[str, ScriptClass] = field(default_factory=dict)

    # Registration helpers
    def add_builtin(self, name: str, fn: Callable[..., Any]) -> None:
        self.builtins[name.lower()] = fn

    def add_function(self, fn: FunctionDef) -> None:
        if self.has_function(fn.name):
            raise PrayogRuntimeError(f"Cannot redeclare function {fn.name}()")
        self.functions[fn.name.lower()] = fn

    def add_class(self, cls: ScriptClass) -> None:
        if cls.name.lower() in self.classes:
            raise PrayogRuntimeError(f"Cannot declare class {cls.name}, because the name is already in use")
        self.classes[cls.name.lower()] = cls

    # Lookup helpers
    def has_function(self, name: str) -> bool:
        lname = name.lower()
        return any(lname in registry for registry in (self.functions, self.builtins, self.combinators))

    def get_class(self, name: str) -> ScriptClass:
        if (cls := self.classes.get(name.lower())) is not None:
            return cls
        raise PrayogNameError(f'Class "{name}" not found')

    def get_constant(self, name: str) -> Any:
        if (lname := name.lower()) in ('true', 'false', 'null'):
            return {'true': True, 'false': False, 'null': None}[lname]
        if name in self.constants:
            return self.constants[name]
        raise PrayogNameError(f'Undefined constant "{name}"')
