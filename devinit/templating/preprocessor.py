"""Directive and comment preprocessing for raw template bodies.

Directives use the ``{: OPCODE operand... :}`` syntax and are consumed before
a body reaches Jinja2. The only opcode is ``SPECIFY key value``; the ``NAME``
key sets the template identifier and other keys are ignored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from ..errors import (
    IncorrectArgsError,
    InvalidTokenError,
    MalformedExpressionError,
    TemplateSyntaxError,
)

DIRECTIVE_PATTERN = re.compile(r"\{:\s*(.*?)\s*:\}")
COMMENT_PATTERN = re.compile(r"\{#.*#\}")

_QUOTES = ("\"", "'")


@dataclass
class Statement:
    """A directive found in a template body, e.g. ``SPECIFY NAME "foo"``."""

    tokens: list[str]
    line_number: int


def find_statements(literal: str) -> list[Statement]:
    """Find and tokenise every directive in *literal*, line by line."""
    statements = []
    for index, line in enumerate(literal.splitlines(), start=1):
        for match in DIRECTIVE_PATTERN.finditer(line):
            tokens = split_tokens(match.group(1), index)
            statements.append(Statement(tokens=tokens, line_number=index))
    return statements


def split_tokens(text: str, line_number: int) -> list[str]:
    """Split directive text on whitespace, keeping quoted spans as one token.

    Quote characters are removed from quoted spans. A quote with no content,
    a closing quote without an opening one and an unterminated span are all
    syntax errors.
    """
    tokens: list[str] = []
    span: list[str] | None = None

    for word in text.split():
        opens = word.startswith(_QUOTES)
        closes = word.endswith(_QUOTES)

        if span is None and not opens:
            if closes:
                raise TemplateSyntaxError(
                    f"Unmatched quotation mark in {word}", line_number
                )
            tokens.append(word)
            continue

        stripped = word.replace("\"", "").replace("'", "")
        if not stripped:
            raise TemplateSyntaxError("Illegal isolated quotation mark", line_number)

        if span is None:
            span = []
        span.append(stripped)

        if closes:
            tokens.append(" ".join(span))
            span = None

    if span is not None:
        raise TemplateSyntaxError(
            f"Unterminated quoted string {' '.join(span)}", line_number
        )

    return tokens


def strip_directives(literal: str) -> str:
    return _remove_all(literal, DIRECTIVE_PATTERN)


def strip_comments(literal: str) -> str:
    return _remove_all(literal, COMMENT_PATTERN)


def _remove_all(text: str, pattern: re.Pattern[str]) -> str:
    """Remove every match of *pattern*, collapsing blank lines left behind."""
    result = text
    removed = 0

    for match in pattern.finditer(text):
        start = match.start() - removed
        end = match.end() - removed
        result = result[:start] + result[end:]
        removed += end - start

        blank = _blank_line_at(result, start)
        if blank is not None:
            at, count = blank
            result = result[:at] + result[at + count :]
            removed += count

    return result


def _blank_line_at(text: str, i: int) -> tuple[int, int] | None:
    """Locate a line break made redundant by a removal at index *i*.

    Returns ``(index, length)`` of the break to delete, or None when the
    removal left a non-empty line. LF and CRLF breaks are both handled.
    """
    length = len(text)
    if length == 0:
        return None

    if i >= length:
        # removal at the very end of the body
        if text.endswith("\r\n"):
            return length - 2, 2
        if text.endswith("\n"):
            return length - 1, 1
        return None

    if i == 0:
        if text.startswith("\r\n"):
            return 0, 2
        if text.startswith("\n"):
            return 0, 1
        return None

    if text[i - 1] == "\n" and text[i] == "\n":
        return i - 1, 1
    if i >= 2 and text[i - 2 : i] == "\r\n" and text[i : i + 2] == "\r\n":
        return i - 2, 2
    return None


@dataclass
class Preprocessor:
    """Result of preprocessing a raw template body.

    Attributes:
        statements: Directives found in the body
        id: Template identifier set with ``SPECIFY NAME``, empty if unset
        clean_literal: The body without directives or comments
    """

    statements: list[Statement] = field(default_factory=list)
    id: str = ""
    clean_literal: str = ""

    @classmethod
    def run(cls, literal: str) -> Preprocessor:
        statements = find_statements(literal)
        directives = [_tokenise_directive(s) for s in statements]

        clean = strip_comments(strip_directives(literal))
        result = cls(statements=statements, clean_literal=clean)
        for key, value in directives:
            result._evaluate(key, value)
        return result

    def _evaluate(self, key: str, value: str) -> None:
        if key == "NAME":
            self.id = value


def _tokenise_directive(statement: Statement) -> tuple[str, str]:
    """Validate a statement as ``SPECIFY key value``, returning the operands."""
    if not statement.tokens:
        raise MalformedExpressionError("Empty directive", statement.line_number)

    opcode, *operands = statement.tokens
    if opcode != "SPECIFY":
        raise InvalidTokenError(opcode, statement.line_number)
    if len(operands) != 2:
        raise IncorrectArgsError(
            f"SPECIFY expression expects 2 arguments, got {len(operands)}",
            statement.line_number,
        )
    return operands[0], operands[1]
