from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from .component import Component
from .partial import Partial, escape_bound
from .types import DirectoryType, Scope
from .view_compiler import ViewCompiler

if TYPE_CHECKING:
    from .environment import Environment

logger = logging.getLogger(__name__)

# Scope name receiving the rendered view inside its layout
CONTENT_NAME = "content"


class View(Partial):
    """
    Page-level template. The rendered view is optionally wrapped into a
    layout, which receives the view scope plus the view output as ``content``.
    """

    def __init__(self, environment: "Environment", view: str):
        self.view_compiler = ViewCompiler(environment, view)
        self.variables: Scope = {}
        self.layout: Optional[str] = None

    def bind(self, name: str, value: Any) -> "View":
        self.variables[name] = escape_bound(value)
        return self

    def extends(self, layout: Optional[str]) -> "View":
        self.layout = layout or None
        return self

    def component(self, name: str) -> Component:
        return Component(self.view_compiler.get_environment(), name)

    def render(self) -> str:
        self.view_compiler.set_variables(dict(self.variables))
        content = self.view_compiler.render(DirectoryType.VIEW, self)
        if not self.layout:
            return content

        layout = ViewCompiler(self.view_compiler.get_environment(), self.layout)
        layout.set_variables({**self.variables, CONTENT_NAME: content})
        logger.debug(f"Wrapping view '{self.get_view()}' into layout '{self.layout}'")
        return layout.render(DirectoryType.LAYOUT, self)

    def get_view(self) -> str:
        return self.view_compiler.get_view()

    def __repr__(self) -> str:
        return f"View({self.get_view()!r})"


__all__ = ["View", "CONTENT_NAME"]
