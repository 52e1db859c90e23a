from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Mapping

from markupsafe import escape

if TYPE_CHECKING:
    from .component import Component


def escape_bound(value: Any) -> Any:
    """
    HTML-escapes textual values before they enter a scope.
    Markup instances are already safe and pass through unchanged.
    """
    if isinstance(value, str):
        return str(escape(value)) if not hasattr(value, "__html__") else value
    return value


class Partial(ABC):
    """
    Renderable unit with its own variable scope.
    Rendering happens lazily on render() or str().
    """

    @abstractmethod
    def bind(self, name: str, value: Any) -> "Partial":
        ...

    def multiple_bind(self, variables: Mapping[str, Any]) -> "Partial":
        for name, value in variables.items():
            self.bind(name, value)
        return self

    @abstractmethod
    def render(self) -> str:
        ...

    @abstractmethod
    def get_view(self) -> str:
        ...

    @abstractmethod
    def component(self, name: str) -> "Component":
        """Child component on the same environment with an empty scope."""
        ...

    def __str__(self) -> str:
        return self.render()


__all__ = ["Partial", "escape_bound"]
