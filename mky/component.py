"""
Component: an included template, useful for splitting a view into several
small reusable parts. A component is isolated from its parent: it only sees
the values explicitly bound to it.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Union

from . import bindpath
from .partial import Partial, escape_bound
from .types import BindMap, DirectoryType, RepeatFn, Scope
from .view_compiler import ViewCompiler

if TYPE_CHECKING:
    from .environment import Environment

logger = logging.getLogger(__name__)

Binds = Union[BindMap, RepeatFn, str, None]


class Component(Partial):
    """
    Renderable component with conditional gate, fixed-count repetition
    (for_), data-driven repetition (each) and an empty-state template.
    """

    def __init__(self, environment: "Environment", component: str):
        self.set_view_compiler(environment, component)
        self.variables: Scope = {}
        self.for_count = 0
        self.for_closure: Optional[RepeatFn] = None
        self.condition: Optional[bool] = None
        self.for_data: Any = []
        self.other_view = ""

    def set_view_compiler(self, environment: "Environment", component: str) -> None:
        self.view_compiler = ViewCompiler(environment, component)

    def bind(self, name: str, value: Any) -> "Component":
        self.variables[name] = escape_bound(value)
        return self

    def if_(self, condition: bool) -> "Component":
        """Renders nothing when condition is False."""
        self.condition = bool(condition)
        return self

    def for_(self, count: int, closure: Optional[Callable[[Scope, int], Optional[Scope]]] = None) -> "Component":
        """
        Repeats the component count times.

        Args:
            count: Number of repetitions
            closure: Called as closure(scope, index) before each pass
        """
        self.for_count = max(int(count), 0)
        if closure is None:
            self.for_closure = None
        else:
            self.for_closure = lambda variables, index, _data: closure(variables, index)
        return self

    def each(self, data: Any, binds: Binds = None, other_view: str = "") -> "Component":
        """
        Repeats the component once per item of data.

        Args:
            data: Mapping (iterated over its values) or sequence
            binds: {target: "dotted.path"} mapping resolved against each item,
                a single name receiving the whole item, or a callable
                (scope, index, data) -> scope; None binds nothing
            other_view: Component rendered instead when data is empty
        """
        if not isinstance(data, (Mapping, Sequence)):
            data = list(data)
        self.other_view = other_view
        self.for_data = data
        self.for_count = len(data)

        if isinstance(binds, Mapping):
            bind_map = dict(binds)

            def closure(variables: Scope, index: int, items: Any) -> Scope:
                current = _item_at(items, index)
                for target, path in bind_map.items():
                    variables[target] = escape_bound(
                        bindpath.resolve(current, path, self.get_view())
                    )
                return variables

            self.for_closure = closure
        elif isinstance(binds, str):
            target = binds

            def closure(variables: Scope, index: int, items: Any) -> Scope:
                variables[target] = escape_bound(_item_at(items, index))
                return variables

            self.for_closure = closure
        elif binds is None or callable(binds):
            self.for_closure = binds
        else:
            raise TypeError(
                f"each() binds must be a mapping, a name or a callable, got {type(binds).__name__}"
            )
        return self

    def component(self, name: str) -> "Component":
        return Component(self.view_compiler.get_environment(), name)

    def render(self) -> str:
        if self.condition is False:
            return ""

        if self.for_count:
            parts: List[str] = []
            closure = self.for_closure
            for i in range(self.for_count):
                if closure is not None:
                    updated = closure(self.variables, i, self.for_data)
                    if updated is not None:
                        self.variables = updated
                self.view_compiler.set_variables(self.variables)
                parts.append(self.view_compiler.render(DirectoryType.COMPONENT, self))
            logger.debug(f"Rendered component '{self.get_view()}' {self.for_count} time(s)")
            return "".join(parts)
        elif self.other_view:
            self.set_view_compiler(self.view_compiler.get_environment(), self.other_view)
        elif self.for_closure is not None:
            return ""

        self.view_compiler.set_variables(self.variables)
        return self.view_compiler.render(DirectoryType.COMPONENT, self)

    def get_view(self) -> str:
        return self.view_compiler.get_view()

    def __repr__(self) -> str:
        return f"Component({self.get_view()!r})"


def _item_at(data: Any, index: int) -> Any:
    if isinstance(data, Mapping):
        return data[list(data.keys())[index]]
    return data[index]


__all__ = ["Component"]
