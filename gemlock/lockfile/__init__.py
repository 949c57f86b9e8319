# gemlock/lockfile/__init__.py
"""Bundler lockfile parser.

    >>> lock = parse_lockfile(open("Gemfile.lock", "rb").read())
    >>> [s.name for s in lock.specs()]

`parse_lockfile` is pure: no I/O, no shared mutable state, one fresh packrat
engine per call. It either returns a `Lockfile` or raises a `ParseError`;
there is no partial result.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional, Tuple, Union

from ..peg import PegNode, PegRunner
from .builder import ParseContext, build_lockfile
from .diagnostics import LineIndex, caret_snippet, syntax_error_from_failure
from .errors import (
    ParseError, LockfileSyntaxError, EmptyInputError, LockfileEncodingError,
)
from .grammar import GEMFILE_LOCK, GEMFILE_LOCK_GRAMMAR
from .model import GemRef, Lockfile, Source, SourceKind, Spec

logger = logging.getLogger(__name__)

Content = Union[str, bytes, bytearray]


def _strip_bom(text: str) -> str:
    return text[1:] if text.startswith("\ufeff") else text


def decode_lockfile(content: Content, filename: Optional[str] = None) -> str:
    """Lockfile text as the parser sees it: UTF-8 decoded, leading BOM removed."""
    if isinstance(content, str):
        return _strip_bom(content)
    data = bytes(content)
    try:
        return _strip_bom(data.decode("utf-8"))
    except UnicodeDecodeError as e:
        # position the error on the first bad byte
        head = _strip_bom(data[:e.start].decode("utf-8"))
        index = LineIndex(head)
        line, col = index.position(len(head))
        tail = data[e.start:].split(b"\n", 1)[0].decode("utf-8", errors="replace")
        raise LockfileEncodingError(
            f"Lockfile is not valid UTF-8 at {line}:{col}: {e.reason}",
            line=line, column=col, context=index.line_text(line) + tail,
            offset=len(head), filename=filename,
        ) from e


def _match(text: str, filename: Optional[str]) -> Tuple[PegNode, ...]:
    if not text.strip():
        raise EmptyInputError(
            "Lockfile is empty: PLATFORMS and DEPENDENCIES sections are required",
            filename=filename,
        )
    m = PegRunner(GEMFILE_LOCK).match(text)
    if not m.ok:
        err = syntax_error_from_failure(text, m.failure, filename=filename)
        logger.debug("lockfile parse failed at offset %s: %s", err.char_offset, err.expected)
        raise err
    return m.nodes


def parse_tree(content: Content, filename: Optional[str] = None) -> Tuple[PegNode, ...]:
    """Structural parse tree of a lockfile (no semantic pass).

    Node offsets index into `decode_lockfile(content)`.
    """
    return _match(decode_lockfile(content, filename), filename)


def parse_lockfile(content: Content, filename: Optional[str] = None) -> Lockfile:
    """Parse lockfile text (str or UTF-8 bytes) into a `Lockfile`.

    Raises `LockfileSyntaxError`, `EmptyInputError` or `LockfileEncodingError`,
    all subclasses of `ParseError`.
    """
    text = decode_lockfile(content, filename)
    lock = build_lockfile(_match(text, filename), text)
    logger.debug(
        "parsed lockfile %s: %d chars, %d sources, %d specs, %d dependencies",
        filename or "<lockfile>", len(text), len(lock.sources),
        sum(len(s.specs) for s in lock.sources), len(lock.dependencies),
    )
    return lock


def parse_lockfile_path(path: Union[str, Path]) -> Lockfile:
    """Read `path` and parse it; I/O errors propagate as OSError."""
    p = Path(path)
    return parse_lockfile(p.read_bytes(), filename=str(p))


__all__ = [
    "parse_lockfile", "parse_lockfile_path", "parse_tree", "decode_lockfile",
    "Lockfile", "Source", "SourceKind", "Spec", "GemRef", "ParseContext",
    "ParseError", "LockfileSyntaxError", "EmptyInputError", "LockfileEncodingError",
    "GEMFILE_LOCK_GRAMMAR", "caret_snippet",
]
