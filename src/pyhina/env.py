"""
Hina Environment
Flat, mutable binding table used for variables and closure capture

Unlike a scope chain there is no parent link: re-binding a name overwrites it
in place and nothing is restored when the binding's region ends. Instances are
shared by reference, so a mutation is visible to every holder.
"""

from __future__ import annotations
from typing import Dict, Iterator, Optional

from pyhina.types import Bound


class Environment:
    """
    Mutable identifier -> bound item mapping.

    A bound item is either a raw node (bound by Let, re-evaluated on every
    access) or an evaluated value (bound as a call argument).
    """

    def __init__(self, bindings: Optional[Dict[str, Bound]] = None):
        self._bindings: Dict[str, Bound] = dict(bindings) if bindings else {}

    def get(self, name: str) -> Optional[Bound]:
        """Look up a binding; None when the name is unbound"""
        return self._bindings.get(name)

    def set(self, name: str, item: Bound) -> None:
        """Bind or re-bind a name"""
        self._bindings[name] = item

    def names(self) -> Iterator[str]:
        """Iterate over bound names in insertion order"""
        return iter(list(self._bindings))

    def __contains__(self, name: str) -> bool:
        return name in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"Environment({sorted(self._bindings)})"


def copy_merge(source: Environment, target: Environment) -> None:
    """
    Insert every binding of `source` whose name is absent from `target`.

    Existing target bindings are never overwritten. One-directional and
    non-recursive: bound items are shared, not copied.
    """
    for name in source.names():
        if name in target:
            continue
        target.set(name, source.get(name))


def empty_env() -> Environment:
    """
    Create an empty environment.

    Returns:
        New Environment with no bindings
    """
    return Environment()
