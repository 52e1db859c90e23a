"""
Engine exceptions.

All expected errors that should be displayed to the user
as clean messages (without stack traces) inherit from MkyUserError.

Programming errors and bugs should NOT inherit from MkyUserError —
they will propagate with full tracebacks.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .types import TemplateId


class MkyUserError(Exception):
    """
    Base class for all user-facing engine errors.

    These errors indicate problems that the template author can fix:
    missing templates, malformed directives, bad bind paths, etc.
    """
    pass


class ConfigError(MkyUserError):
    """Invalid mky.yaml or environment configuration."""
    pass


class UsageError(MkyUserError):
    """Invalid command-line arguments."""
    pass


class TemplateNotFound(MkyUserError):
    """A (role, name) pair does not resolve to an existing source file."""

    def __init__(self, template: "TemplateId", path: Optional[Path] = None):
        self.template = template
        self.path = path
        where = f" (looked at {path})" if path is not None else ""
        super().__init__(f"Template '{template}' not found{where}")


class DirectiveError(MkyUserError):
    """Malformed directive dialect in template source."""

    def __init__(self, message: str, tag: str, line: int, column: int):
        super().__init__(f"{message} at {line}:{column}")
        self.tag = tag
        self.line = line
        self.column = column


class UnknownDirective(DirectiveError):
    def __init__(self, name: str, tag: str, line: int, column: int):
        self.name = name
        super().__init__(f"Unknown directive '{name}' in {tag!r}", tag, line, column)


class UnbalancedDirective(DirectiveError):
    def __init__(self, message: str, tag: str, line: int, column: int):
        super().__init__(message, tag, line, column)


class DirectiveSyntaxError(DirectiveError):
    pass


class CompileError(MkyUserError):
    """Compilation of a template failed; the directive error is the cause."""

    def __init__(self, template: "TemplateId", cause: DirectiveError):
        self.template = template
        self.cause = cause
        super().__init__(f"Failed to compile '{template}': {cause}")


class VariableNotFound(MkyUserError):
    """A dotted bind path segment could not be located in the current item."""

    def __init__(self, kind: str, segment: str, template: str):
        self.kind = kind
        self.segment = segment
        self.template = template
        super().__init__(
            f"Variable '{segment}' not found in {kind} data (template '{template}')"
        )


class RenderError(MkyUserError):
    """The evaluation substrate faulted while executing a compiled artifact."""

    def __init__(self, template: "TemplateId", cause: BaseException):
        self.template = template
        self.cause = cause
        super().__init__(f"Failed to render '{template}': {cause}")


__all__ = [
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
