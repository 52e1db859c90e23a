"""
Directive definitions.

Each directive maps its opening tag onto the native block opener of the
evaluation substrate and its closing tag onto the native block closer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping


@dataclass(frozen=True)
class DirectiveSpec:
    """
    Lowering rule for one directive kind.

    Attributes:
        name: Tag name inside the namespace (``if`` for ``<mky:if>``)
        attribute: The single required attribute holding the expression
        open_template: Native opener, ``{expr}`` is replaced by the attribute value
        close_text: Native closer
    """
    name: str
    attribute: str
    open_template: str
    close_text: str

    def lower_open(self, expr: str) -> str:
        return self.open_template.replace("{expr}", expr)


IF_DIRECTIVE = DirectiveSpec(
    name="if",
    attribute="cond",
    open_template="{% if {expr} %}",
    close_text="{% endif %}",
)

DEFAULT_DIRECTIVES: Mapping[str, DirectiveSpec] = {
    IF_DIRECTIVE.name: IF_DIRECTIVE,
}


def default_directives() -> Dict[str, DirectiveSpec]:
    return dict(DEFAULT_DIRECTIVES)


__all__ = ["DirectiveSpec", "IF_DIRECTIVE", "DEFAULT_DIRECTIVES", "default_directives"]
