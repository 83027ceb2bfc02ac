## prayog — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import itertools
from typing import Any
from dataclasses import dataclass, field

import lark


@dataclass
class Parameter:
    name: str
    default: lark.Tree | None = None     # Expression evaluated at call time, or None when required.


@dataclass
class FunctionDef:
    name: str
    params: list[Parameter]
    body: list                           # list[lark.Tree] of statements
    owner: 'ScriptClass | None' = None

    def required_count(self) -> int:
        return sum(1 for p in self.params if p.default is None)


@dataclass
class ScriptClass:
    name: str
    parent: 'ScriptClass | None'
    properties: dict[str, lark.Tree | None]        # Declared property name to default expression.
    methods: dict[str, FunctionDef]                # Lower-cased method name to definition.
    constants: dict[str, Any] = field(default_factory=dict)

    def find_method(self, name: str) -> FunctionDef | None:
        cls = self
        while cls is not None:
            if (method := cls.methods.get(name.lower())) is not None:
                return method
            cls = cls.parent
        return None

    def find_constant(self, name: str):
        for cls in self.lineage():
            if name in cls.constants:
                return cls.constants[name]
        raise KeyError(name)

    def lineage(self):
        cls = self
        while cls is not None:
            yield cls
            cls = cls.parent

    def is_subclass_of(self, name: str) -> bool:
        return any(c.name.lower() == name.lower() for c in self.lineage())


_handle_ids = itertools.count(1)


class ScriptObject:
    """Instance of a script class; shared by handle, never copied on assignment."""

    def __init__(self, cls: ScriptClass, props: dict[str, Any] | None = None):
        self.cls = cls
        self.props = {} if props is None else props
        self.handle = next(_handle_ids)

    def __repr__(self):
        return f"object({self.cls.name})#{self.handle}"


@dataclass(eq=False)
class Closure:
    params: list[Parameter]
    body: list | lark.Tree               # Statement list, or a single expression for arrow functions.
    captured: dict[str, Any] = field(default_factory=dict)
    arrow: bool = False
    bound_this: ScriptObject | None = None

    def __repr__(self):
        return "object(Closure)"


class Resource:
    """Opaque handle wrapping a host stream, reported to scripts as `resource(stream)`."""

    def __init__(self, kind: str, handle):
        self.kind = kind
        self.handle = handle
        self.id = next(_handle_ids)
        self.closed = False

    def close(self) -> None:
        if not self.closed:
            self.handle.close()
            self.closed = True
            self.kind = 'Unknown'

    def __repr__(self):
        return f"resource({self.kind})#{self.id}"


# The closed set of values a unit of script code can produce or store in a binding.
ScriptValue = bool | int | float | str | list | dict | ScriptObject | Closure | Resource | None
