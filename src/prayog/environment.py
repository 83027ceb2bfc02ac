## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Any
from collections.abc import Mapping, Set

from .coercion import strict_equals
from .config import DEFAULT_INTERNAL_NAMES


def reconcile(tracked: Mapping[str, Any], before: Mapping[str, Any], after: Mapping[str, Any],
              internal_names: Set[str] = DEFAULT_INTERNAL_NAMES, private_prefix: str = "_") -> dict[str, Any]:
    """Returns the bindings to store after an evaluation that started from `before` and ended with
    `after`.  New names are adopted unless internal, or private and not already tracked; tracked names
    take their latest value.  Names missing from `after` keep their stored value.
    """
    result = dict(tracked)
    for name, value in after.items():
        if name in before:
            if name in tracked and not strict_equals(tracked[name], value):
                result[name] = value
            continue
        if name in internal_names:
            continue
        if private_prefix and name.startswith(private_prefix) and name not in tracked:
            continue
        result[name] = value
    return result


class EnvironmentStore:

    def __init__(self, internal_names: Set[str] = DEFAULT_INTERNAL_NAMES, private_prefix: str = "_"):
        self._bindings: dict[str, Any] = {}
        self.internal_names = internal_names
        self.private_prefix = private_prefix

    def get(self) -> dict[str, Any]:
        return dict(self._bindings)

    def set(self, name: str, value: Any) -> None:
        self._bindings[name] = value

    def merge(self, values: Mapping[str, Any]) -> None:
        self._bindings.update(values)

    def reconcile(self, before: Mapping[str, Any], after: Mapping[str, Any]) -> list[str]:
        """Folds an evaluation's resulting bindings into the store, returning the names that changed."""
        updated = reconcile(self._bindings, before, after, self.internal_names, self.private_prefix)
        changed = [n for n, v in updated.items() if n not in self._bindings or self._bindings[n] is not v]
        self._bindings = updated
        return changed

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
