# gemlock/lockfile/errors.py
"""Lockfile parse errors.

All of them are `SyntaxError`s positioned in the lockfile text, so callers
that only care about "did it parse" can catch `ParseError` (or even
`SyntaxError`) and still get `line`, `column` and the offending `context`
line.
"""

from __future__ import annotations
from typing import Optional, Tuple

LOCKFILE_NAME = "<lockfile>"


class ParseError(SyntaxError):
    """Base class; `line`/`column` are 1-based, `offset` is a char offset."""

    def __init__(self, message: str, *, line: int = 1, column: int = 1,
                 context: str = "", offset: int = 0,
                 filename: Optional[str] = None):
        super().__init__(message, (filename or LOCKFILE_NAME, line, column, context))
        self.message = message
        self.line = line
        self.column = column
        self.context = context
        self.char_offset = offset

    @property
    def snippet(self) -> str:
        caret = " " * (self.column - 1) + "^"
        return f"{self.context}\n{caret}"

    def __str__(self) -> str:
        return f"{self.message}\n{self.snippet}"


class LockfileSyntaxError(ParseError):
    """Grammar did not match; `expected` is a label, e.g. "expected gem specification line"."""

    def __init__(self, message: str, *, expected: str,
                 expected_tokens: Tuple[str, ...] = (), **kw):
        super().__init__(message, **kw)
        self.expected = expected
        self.expected_tokens = expected_tokens


class EmptyInputError(ParseError):
    """Input is empty or whitespace only (PLATFORMS and DEPENDENCIES are mandatory)."""


class LockfileEncodingError(ParseError):
    """Input bytes are not valid UTF-8."""
