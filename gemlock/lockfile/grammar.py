# gemlock/lockfile/grammar.py
"""Bundler lockfile (Gemfile.lock) grammar.

Indentation is structural: a nesting level is exactly two literal spaces, so
`Indent2/4/6` are bounded repeats of ' ' and never accept tabs or "at least N"
spaces. `Spec`, `SpecDep` and `Dependency` share the `GemVersion` shape and
differ only by indentation; which list a line belongs to is decided later by
the builder from the tree, not here.
"""

from __future__ import annotations
from typing import Dict, Optional, Sequence

from ..peg import PegProgram

GEMFILE_LOCK_GRAMMAR = r"""
Gemfile      <- Source* Platforms Dependencies EndOfFile

# ---- source blocks ----
Source       <- Gem / Git / SVN / Path
Gem          <- 'GEM' LineEnd SourceBody
Git          <- 'GIT' LineEnd SourceBody
SVN          <- 'SVN' LineEnd SourceBody
Path         <- 'PATH' LineEnd SourceBody
SourceBody   <- Option* Specs LineEnd

Option       <- Indent2 OptionKey ': ' OptionValue LineEnd
OptionKey    <- [a-zA-Z]+
OptionValue  <- (!EndOfLine .)*

Specs        <- Indent2 'specs:' LineEnd Spec+
Spec         <- Indent4 GemVersion SpecDep*
SpecDep      <- Indent6 GemVersion

# ---- top level sections ----
Platforms    <- 'PLATFORMS' LineEnd Platform+ LineEnd
Platform     <- Indent2 PlatformName LineEnd
PlatformName <- NotWhitespace+

Dependencies <- 'DEPENDENCIES' LineEnd Dependency+
Dependency   <- Indent2 GemVersion

# ---- gem lines ----
GemVersion   <- GemName Spaces Version? LineEnd
GemName      <- [a-zA-Z0-9_!\-]+
Version      <- '(' Constraint (', ' Constraint)* ')'
Constraint   <- VersionOp? Spaces [0-9]+ ('.' [0-9]+)*
VersionOp    <- Eq / Neq / Leq / Lt / Geq / Gt / TwiddleWakka

Eq           <- '='
Neq          <- '!='
Leq          <- '<='
Lt           <- '<'
Geq          <- '>='
Gt           <- '>'
TwiddleWakka <- '~>'

# ---- whitespace ----
Space        <- ' ' / '\t'
Spaces       <- Space*
Indent2      <- ' '{2}
Indent4      <- ' '{4}
Indent6      <- ' '{6}
EndOfLine    <- '\r\n' / '\n' / '\r'
NotWhitespace <- !(Space / EndOfLine) .
LineEnd      <- Spaces (EndOfLine / !.)
EndOfFile    <- EndOfLine* !.
"""

# Rules kept as nodes in the parse tree; everything else is spliced away.
CAPTURED_RULES = frozenset({
    "Gemfile",
    "Gem", "Git", "SVN", "Path",
    "Option", "OptionKey", "OptionValue",
    "Specs", "Spec", "SpecDep",
    "Platforms", "Platform", "PlatformName",
    "Dependencies", "Dependency",
    "GemVersion", "GemName", "Version", "Constraint", "VersionOp",
})

# Descriptive labels for diagnostics, keyed by rule name.
RULE_LABELS: Dict[str, str] = {
    "Source": "expected source block (GEM, GIT, SVN or PATH)",
    "SourceBody": "expected source options or 'specs:'",
    "Option": "expected source option line ('key: value')",
    "Specs": "expected 'specs:' section",
    "Spec": "expected gem specification line",
    "Platforms": "expected PLATFORMS section",
    "Platform": "expected platform line",
    "Dependencies": "expected DEPENDENCIES section",
    "Dependency": "expected dependency line",
    "GemName": "expected gem name",
    "Version": "expected version constraint",
    "Constraint": "expected version constraint",
    "LineEnd": "expected end of line",
    "EndOfFile": "expected end of file",
    "Gemfile": "expected lockfile section",
}

GEMFILE_LOCK = PegProgram.from_source(GEMFILE_LOCK_GRAMMAR, captures=CAPTURED_RULES)


def label_for(stack: Sequence[str]) -> Optional[str]:
    """Label of the innermost labelled rule on a rule stack."""
    for name in reversed(stack):
        label = RULE_LABELS.get(name)
        if label is not None:
            return label
    return None
