"""
Template compilation and component rendering engine.

Templates are markup with ``<mky:if cond="...">`` directives lowered into
Jinja2 blocks, cached per (role, name) and rendered through components.
"""

from __future__ import annotations

from .component import Component
from .environment import Environment
from .errors import (
    CompileError,
    ConfigError,
    DirectiveError,
    DirectiveSyntaxError,
    MkyUserError,
    RenderError,
    TemplateNotFound,
    UnbalancedDirective,
    UnknownDirective,
    UsageError,
    VariableNotFound,
)
from .types import CompiledArtifact, DirectoryType, TemplateId
from .view import View

__all__ = [
    "Environment",
    "Component",
    "View",
    "DirectoryType",
    "TemplateId",
    "CompiledArtifact",
    "MkyUserError",
    "ConfigError",
    "UsageError",
    "TemplateNotFound",
    "DirectiveError",
    "UnknownDirective",
    "UnbalancedDirective",
    "DirectiveSyntaxError",
    "CompileError",
    "VariableNotFound",
    "RenderError",
]
