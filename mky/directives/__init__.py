"""
Directive dialect: lexer, lowering rules and compiler.
"""

from __future__ import annotations

from .compiler import DirectiveCompiler, compile_source
from .lexer import DirectiveLexer, Token
from .registry import DirectiveSpec, IF_DIRECTIVE, DEFAULT_DIRECTIVES

__all__ = [
    "DirectiveCompiler",
    "compile_source",
    "DirectiveLexer",
    "Token",
    "DirectiveSpec",
    "IF_DIRECTIVE",
    "DEFAULT_DIRECTIVES",
]
