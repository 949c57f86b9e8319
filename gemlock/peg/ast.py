# gemlock/peg/ast.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple, Dict, Optional, Union

# ---- PEG AST node definitions ----

@dataclass(frozen=True)
class Literal:
    text: str  # unescaped text

@dataclass(frozen=True)
class CharClass:
    negated: bool
    # ranges are inclusive (lo..hi). singles is a tuple of single codepoints (as str of length 1)
    ranges: Tuple[Tuple[int, int], ...] = ()
    singles: Tuple[str, ...] = ()

@dataclass(frozen=True)
class Any:
    pass

@dataclass(frozen=True)
class Ref:
    name: str

@dataclass(frozen=True)
class And:
    node: "Node"  # positive lookahead (&)

@dataclass(frozen=True)
class Not:
    node: "Node"  # negative lookahead (!)

@dataclass(frozen=True)
class Repeat:
    node: "Node"
    min: int = 0
    max: Optional[int] = None  # None = unbounded

    @property
    def kind(self) -> str:
        """Suffix form used by the grammar text ('?', '*', '+', '{n,m}')."""
        if (self.min, self.max) == (0, 1):
            return "?"
        if self.max is None and self.min in (0, 1):
            return "*" if self.min == 0 else "+"
        if self.max == self.min:
            return f"{{{self.min}}}"
        hi = "" if self.max is None else str(self.max)
        return f"{{{self.min},{hi}}}"

@dataclass(frozen=True)
class Seq:
    items: Tuple["Node", ...]

@dataclass(frozen=True)
class Choice:
    alts: Tuple["Node", ...]

Node = Union[Literal, CharClass, Any, Ref, And, Not, Repeat, Seq, Choice]

# ---- Combinator helpers ----
# Thin constructors so grammars can be composed in Python as well as parsed from text.

def literal(text: str) -> Literal:
    return Literal(text)

def char_class(*items: str, negated: bool = False) -> CharClass:
    """Build a class from single chars and 'a-z' style ranges."""
    ranges: List[Tuple[int, int]] = []
    singles: List[str] = []
    for it in items:
        if len(it) == 3 and it[1] == "-":
            lo, hi = sorted((ord(it[0]), ord(it[2])))
            ranges.append((lo, hi))
        else:
            singles.extend(it)
    return CharClass(negated=negated, ranges=tuple(ranges), singles=tuple(singles))

def seq(*items: Node) -> Seq:
    return Seq(tuple(items))

def choice(*alts: Node) -> Choice:
    return Choice(tuple(alts))

def repeat(node: Node, min: int = 0, max: Optional[int] = None) -> Repeat:
    if min < 0 or (max is not None and max < min):
        raise ValueError(f"invalid repeat bounds {{{min},{max}}}")
    return Repeat(node, min, max)

def optional(node: Node) -> Repeat:
    return Repeat(node, 0, 1)

def not_(node: Node) -> Not:
    return Not(node)

def end_of_input() -> Not:
    # `!.` : nothing left to consume
    return Not(Any())

@dataclass
class RuleDef:
    name: str
    expr: Node

@dataclass
class PegGrammar:
    rules: Dict[str, RuleDef]
    start: str

    def require_rule(self, name: str) -> RuleDef:
        try:
            return self.rules[name]
        except KeyError:
            raise SyntaxError(f"PEG: undefined rule '{name}'")

    def check_refs(self) -> None:
        """Fail early on references to rules that are never defined."""
        for rule in self.rules.values():
            for ref in _iter_refs(rule.expr):
                self.require_rule(ref)


def _iter_refs(node: Node):
    if isinstance(node, Ref):
        yield node.name
    elif isinstance(node, (And, Not, Repeat)):
        yield from _iter_refs(node.node)
    elif isinstance(node, Seq):
        for it in node.items:
            yield from _iter_refs(it)
    elif isinstance(node, Choice):
        for it in node.alts:
            yield from _iter_refs(it)
