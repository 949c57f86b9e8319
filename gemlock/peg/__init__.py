# gemlock/peg/__init__.py
"""PEG submodule for gemlock.

This package provides:
- AST nodes and combinator helpers for a small PEG subset
- A PEG grammar parser (parses grammar text such as the lockfile grammar)
- A Packrat (memoizing) PEG engine/runtime that builds an immutable parse tree

It knows nothing about lockfiles; gemlock.lockfile builds on top of it.
"""

from .ast import (
    Literal, CharClass, Any, Seq, Choice, Repeat, And, Not, Ref,
    RuleDef, PegGrammar,
    literal, char_class, seq, choice, repeat, optional, not_, end_of_input,
)
from .parser import parse_peg_grammar
from .engine import Packrat, PegNode, PegFailure
from .runtime import PegProgram, PegRunner, PegMatch
