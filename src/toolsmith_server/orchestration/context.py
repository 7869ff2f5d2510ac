"""Execution context shared by the steps of one plan run."""

import copy
from typing import Any


class ExecutionContext:
    """Binding name -> last bound step result.

    Bindings are only ever added or overwritten. The context lives for a
    single plan run.
    """

    def __init__(self) -> None:
        self._bindings: dict[str, Any] = {}

    def bind(self, name: str, value: Any) -> None:
        self._bindings[name] = value

    def get(self, name: str) -> Any:
        return self._bindings.get(name)

    @property
    def variables(self) -> dict[str, Any]:
        return self._bindings

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self._bindings)

    def __contains__(self, name: object) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)
