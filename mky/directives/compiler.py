"""
Directive compiler.

Lowers directive tags into native block syntax of the evaluation substrate
in a single linear pass. Directive bodies, native else markers and
interpolation are passed through byte-for-byte; only the open/close
boundaries of each directive are substituted.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional

from .lexer import DirectiveLexer, Token
from .registry import DirectiveSpec, default_directives
from ..errors import DirectiveSyntaxError, UnbalancedDirective, UnknownDirective

logger = logging.getLogger(__name__)


class DirectiveCompiler:
    """
    Pure source → compiled text transformation. No I/O, deterministic.
    """

    def __init__(self, namespace: str = "mky", directives: Optional[Mapping[str, DirectiveSpec]] = None):
        self.namespace = namespace
        self.lexer = DirectiveLexer(namespace)
        self.directives: Dict[str, DirectiveSpec] = (
            dict(directives) if directives is not None else default_directives()
        )

    def compile(self, source: str) -> str:
        """
        Compiles template source.

        Args:
            source: Raw template text

        Returns:
            Text directly executable by the evaluation substrate

        Raises:
            UnknownDirective: Tag name is not a registered directive
            UnbalancedDirective: Open/close tags do not pair up
            DirectiveSyntaxError: Tag is malformed
        """
        out: List[str] = []
        stack: List[Token] = []

        for token in self.lexer.tokenize(source):
            if token.type == "TEXT":
                out.append(token.value)
            elif token.type == "OPEN":
                spec = self._lookup(token)
                out.append(spec.lower_open(self._expression(spec, token)))
                stack.append(token)
            elif token.type == "CLOSE":
                spec = self._lookup(token)
                if not stack:
                    raise UnbalancedDirective(
                        f"Closing tag '{token.value}' without opening tag",
                        token.value, token.line, token.column,
                    )
                opener = stack.pop()
                if opener.name != token.name:
                    raise UnbalancedDirective(
                        f"Closing tag '{token.value}' does not match '{opener.value}' "
                        f"opened at {opener.line}:{opener.column}",
                        token.value, token.line, token.column,
                    )
                out.append(spec.close_text)
            elif token.type == "EOF" and stack:
                opener = stack[-1]
                raise UnbalancedDirective(
                    f"Directive '{opener.value}' is never closed",
                    opener.value, opener.line, opener.column,
                )

        compiled = "".join(out)
        logger.debug(f"Compiled {len(source)} chars of source into {len(compiled)} chars")
        return compiled

    def _lookup(self, token: Token) -> DirectiveSpec:
        spec = self.directives.get(token.name)
        if spec is None:
            raise UnknownDirective(f"{self.namespace}:{token.name}", token.value, token.line, token.column)
        return spec

    @staticmethod
    def _expression(spec: DirectiveSpec, token: Token) -> str:
        if token.self_closing:
            raise DirectiveSyntaxError(
                f"Directive '{spec.name}' requires a body", token.value, token.line, token.column
            )
        extra = set(token.attrs) - {spec.attribute}
        if extra:
            raise DirectiveSyntaxError(
                f"Unexpected attribute(s) {', '.join(sorted(extra))} on '{spec.name}'",
                token.value, token.line, token.column,
            )
        expr = token.attrs.get(spec.attribute, "").strip()
        if not expr:
            raise DirectiveSyntaxError(
                f"Directive '{spec.name}' requires a non-empty '{spec.attribute}' attribute",
                token.value, token.line, token.column,
            )
        return expr


_default: Optional[DirectiveCompiler] = None


def compile_source(source: str) -> str:
    """Compiles with the default namespace and directive set."""
    global _default
    if _default is None:
        _default = DirectiveCompiler()
    return _default.compile(source)


__all__ = ["DirectiveCompiler", "compile_source"]
