# gemlock/__init__.py
"""gemlock: a PEG-based parser for Bundler lockfiles (Gemfile.lock)."""

from .lockfile import (
    parse_lockfile, parse_lockfile_path, parse_tree, decode_lockfile,
    Lockfile, Source, SourceKind, Spec, GemRef, ParseContext,
    ParseError, LockfileSyntaxError, EmptyInputError, LockfileEncodingError,
)

__version__ = "0.1.0"
