# gemlock/peg/runtime.py
from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional, Tuple
from .ast import PegGrammar
from .parser import parse_peg_grammar
from .engine import Packrat, PegNode, PegFailure

@dataclass(frozen=True)
class PegProgram:
    """Compiled PEG program.

    `captures` names the rules that become `PegNode`s in the parse tree;
    None keeps every rule. A program is never mutated, so one instance can be
    shared by any number of concurrent runners.
    """
    grammar: PegGrammar
    captures: Optional[FrozenSet[str]] = None

    @classmethod
    def from_source(cls, src: str, captures: Optional[Iterable[str]] = None) -> "PegProgram":
        g = parse_peg_grammar(src)
        caps = None
        if captures is not None:
            caps = frozenset(captures)
            for name in caps:
                g.require_rule(name)
        return cls(g, caps)

    @property
    def start(self) -> str:
        return self.grammar.start


@dataclass(frozen=True)
class PegMatch:
    ok: bool
    end: int
    nodes: Tuple[PegNode, ...]
    failure: Optional[PegFailure]


class PegRunner:
    """Execute PEG program on input text at a given position."""
    def __init__(self, program: PegProgram):
        self.program = program

    def run(self, rule_name: str, text: str, pos: int = 0) -> Tuple[bool, int]:
        engine = Packrat(self.program.grammar, self.program.captures)
        return engine.parse(rule_name, text, pos)

    def match(self, text: str, rule_name: Optional[str] = None, pos: int = 0) -> PegMatch:
        """Run `rule_name` (default: start rule) and keep the tree and failure info.

        `ok` is only true when the rule matched and consumed the whole input.
        """
        engine = Packrat(self.program.grammar, self.program.captures)
        ok, end, nodes = engine.match(rule_name or self.program.start, text, pos)
        failure = engine.failure()
        if ok and end != len(text):
            ok = False
            if failure is None or failure.pos < end:
                failure = PegFailure(pos=end, expected=frozenset({"end of input"}),
                                     stacks=((rule_name or self.program.start,),))
        return PegMatch(ok=ok, end=end, nodes=nodes if ok else (), failure=None if ok else failure)
