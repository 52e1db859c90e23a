"""
Lexer for the directive dialect.

Splits template source into a flat token stream:
- TEXT: everything that is not a directive tag (passed through verbatim)
- OPEN: ``<ns:name attr="...">`` (or self-closing ``<ns:name ... />``)
- CLOSE: ``</ns:name>``
- EOF
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List

from ..errors import DirectiveSyntaxError


@dataclass
class Token:
    """
    Directive token with position information for diagnostics.

    Attributes:
        type: TEXT, OPEN, CLOSE or EOF
        value: Raw source text of the token
        position: Offset in the source text
        line: Line number (starting from 1)
        column: Column number (starting from 1)
        name: Directive name for OPEN/CLOSE
        attrs: Parsed attributes for OPEN
        self_closing: OPEN tag ended with ``/>``
    """
    type: str
    value: str
    position: int
    line: int
    column: int
    name: str = ""
    attrs: Dict[str, str] = field(default_factory=dict)
    self_closing: bool = False

    def __repr__(self):
        return f"Token({self.type}, {self.value!r}, {self.line}:{self.column})"


# Quoted values may contain '>' (cond="a > b"), so the tag body is matched
# as a sequence of quoted strings and non-quote characters.
_TAG_BODY = r"""(?:"[^"]*"|'[^']*'|[^'">])*"""

_ATTR_RE = re.compile(r"""\s+([A-Za-z_][\w:.-]*)\s*=\s*(?:"([^"]*)"|'([^']*)')""")
_TAIL_RE = re.compile(r"\s*(/?)\s*$")


class DirectiveLexer:
    """
    Lexer for a single directive namespace.

    Only tags of the configured namespace are tokens; all other markup,
    native blocks and interpolation stay inside TEXT tokens.
    """

    def __init__(self, namespace: str = "mky"):
        if not re.match(r"^[A-Za-z_][\w-]*$", namespace):
            raise ValueError(f"Invalid directive namespace: {namespace!r}")
        self.namespace = namespace
        self._tag_re = re.compile(
            rf"<(?P<slash>/)?{re.escape(namespace)}:(?P<name>[^\s/>]*)(?P<rest>{_TAG_BODY})>"
        )

    def tokenize(self, text: str) -> List[Token]:
        """
        Splits the source into tokens.

        Raises:
            DirectiveSyntaxError: On a malformed directive tag
        """
        tokens: List[Token] = []
        last = 0

        for match in self._tag_re.finditer(text):
            start = match.start()
            if start > last:
                tokens.append(self._make(text, "TEXT", text[last:start], last))

            tag = match.group(0)
            name = match.group("name")
            rest = match.group("rest")
            if match.group("slash"):
                if rest.strip():
                    line, column = _line_col(text, start)
                    raise DirectiveSyntaxError(
                        f"Closing tag {tag!r} cannot carry attributes", tag, line, column
                    )
                token = self._make(text, "CLOSE", tag, start)
                token.name = name
            else:
                token = self._make(text, "OPEN", tag, start)
                token.name = name
                token.attrs, token.self_closing = self._parse_attrs(text, tag, rest, start)
            tokens.append(token)
            last = match.end()

        if last < len(text):
            tokens.append(self._make(text, "TEXT", text[last:], last))

        tokens.append(self._make(text, "EOF", "", len(text)))
        return tokens

    @staticmethod
    def _make(text: str, type_: str, value: str, position: int) -> Token:
        line, column = _line_col(text, position)
        return Token(type=type_, value=value, position=position, line=line, column=column)

    @staticmethod
    def _parse_attrs(text: str, tag: str, rest: str, position: int) -> tuple[Dict[str, str], bool]:
        attrs: Dict[str, str] = {}
        pos = 0
        while True:
            match = _ATTR_RE.match(rest, pos)
            if not match:
                break
            key = match.group(1)
            value = match.group(2) if match.group(2) is not None else match.group(3)
            if key in attrs:
                line, column = _line_col(text, position)
                raise DirectiveSyntaxError(f"Duplicate attribute '{key}' in {tag!r}", tag, line, column)
            attrs[key] = value
            pos = match.end()

        tail = _TAIL_RE.match(rest, pos)
        if tail is None:
            line, column = _line_col(text, position)
            raise DirectiveSyntaxError(f"Malformed attributes in {tag!r}", tag, line, column)
        return attrs, bool(tail.group(1))


def _line_col(text: str, position: int) -> tuple[int, int]:
    line = text.count("\n", 0, position) + 1
    column = position - (text.rfind("\n", 0, position) + 1) + 1
    return line, column


__all__ = ["Token", "DirectiveLexer"]
