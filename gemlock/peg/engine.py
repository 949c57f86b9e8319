# gemlock/peg/engine.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple, List, Optional, FrozenSet, Set
from .ast import (
    Literal, CharClass, Any, Ref, And, Not, Repeat, Seq, Choice,
    PegGrammar, Node
)

# Packrat engine:
# - Memoize rule applications (rule_name, pos, quiet) -> (ok, end_pos, nodes)
# - Left recursion is not supported (typical PEG restriction).
# - Evaluation is pure with respect to the input: every step returns a new
#   position and an immutable tuple of tree nodes, so an abandoned alternative
#   leaves nothing behind.
# - Scratch state (memo, rule stack, farthest failure) lives on one Packrat
#   instance, which serves a single top-level parse.

@dataclass(frozen=True)
class PegNode:
    """One captured rule application covering text[begin:end]."""
    rule: str
    begin: int
    end: int
    children: Tuple["PegNode", ...] = ()

    def text(self, src: str) -> str:
        return src[self.begin:self.end]

    def child(self, rule: str) -> Optional["PegNode"]:
        for c in self.children:
            if c.rule == rule:
                return c
        return None

    def children_of(self, rule: str) -> Tuple["PegNode", ...]:
        return tuple(c for c in self.children if c.rule == rule)

    def walk(self, depth: int = 0):
        """Pre-order (depth, node) pairs."""
        yield depth, self
        for c in self.children:
            yield from c.walk(depth + 1)


@dataclass(frozen=True)
class PegFailure:
    """Farthest point the engine reached before giving up."""
    pos: int
    expected: FrozenSet[str]
    # rule stacks (outermost first) active when a terminal failed at `pos`
    stacks: Tuple[Tuple[str, ...], ...]

    @property
    def deepest_stack(self) -> Tuple[str, ...]:
        best: Tuple[str, ...] = ()
        for st in self.stacks:
            if len(st) > len(best):
                best = st
        return best


Nodes = Tuple[PegNode, ...]
_Result = Tuple[bool, int, Nodes]

_EMPTY: Nodes = ()


def _class_match(cc: CharClass, ch: str) -> bool:
    ok = False
    cp = ord(ch)
    for (lo, hi) in cc.ranges:
        if lo <= cp <= hi:
            ok = True
            break
    if not ok and cc.singles:
        if ch in cc.singles:
            ok = True
    return (not ok) if cc.negated else ok


def describe(node: Node) -> str:
    """Human readable form of a terminal, used in 'expected ...' messages."""
    if isinstance(node, Literal):
        return repr(node.text)
    if isinstance(node, Any):
        return "any character"
    if isinstance(node, CharClass):
        parts = []
        for lo, hi in node.ranges:
            parts.append(f"{chr(lo)}-{chr(hi)}")
        for s in node.singles:
            parts.append(s.encode("unicode_escape").decode("ascii"))
        return "[" + ("^" if node.negated else "") + "".join(parts) + "]"
    return repr(node)


class Packrat:
    def __init__(self, g: PegGrammar, captures: Optional[FrozenSet[str]] = None):
        self.g = g
        # None captures every rule
        self.captures = captures
        # memo: (rule_name, pos, quiet) -> (visited_flag:int, ok:bool, end:int, nodes)
        # visited_flag: 1=in progress, 2=done
        self.memo: Dict[Tuple[str, int, bool], Tuple[int, bool, int, Nodes]] = {}
        self._stack: List[str] = []
        self._quiet = 0  # >0 while inside a lookahead
        self._far = -1
        self._far_expected: Set[str] = set()
        self._far_stacks: List[Tuple[str, ...]] = []

    # ---- Public entrypoint for one rule ----
    def parse(self, rule_name: str, text: str, pos: int = 0) -> Tuple[bool, int]:
        ok, end, _ = self.match(rule_name, text, pos)
        return ok, end

    def match(self, rule_name: str, text: str, pos: int = 0) -> _Result:
        # Fresh scratch state per top-level run
        self.memo.clear()
        self._stack.clear()
        self._quiet = 0
        self._far = -1
        self._far_expected = set()
        self._far_stacks = []
        return self._apply_rule(rule_name, text, pos)

    def failure(self) -> Optional[PegFailure]:
        if self._far < 0:
            return None
        return PegFailure(
            pos=self._far,
            expected=frozenset(self._far_expected),
            stacks=tuple(self._far_stacks),
        )

    # ---- Failure bookkeeping ----
    def _fail_at(self, what: str, pos: int) -> None:
        if self._quiet:
            return
        if pos > self._far:
            self._far = pos
            self._far_expected = set()
            self._far_stacks = []
        if pos == self._far:
            self._far_expected.add(what)
            st = tuple(self._stack)
            if st not in self._far_stacks:
                self._far_stacks.append(st)

    # ---- Rule application with memoization ----
    def _apply_rule(self, name: str, text: str, pos: int) -> _Result:
        # lookahead runs are memoized apart so that failures are still recorded
        # when the same rule is later applied for real
        key = (name, pos, self._quiet > 0)
        m = self.memo.get(key)
        if m is not None:
            flag, ok, end, nodes = m
            if flag == 1:
                # left recursion or re-entry -> fail (PEG disallows left recursion)
                return False, pos, _EMPTY
            return ok, end, nodes

        # mark in-progress
        self.memo[key] = (1, False, pos, _EMPTY)
        rule = self.g.require_rule(name)
        self._stack.append(name)
        ok, end, nodes = self._eval(rule.expr, text, pos)
        self._stack.pop()
        if not ok:
            nodes = _EMPTY
        elif self.captures is None or name in self.captures:
            nodes = (PegNode(name, pos, end, nodes),)
        self.memo[key] = (2, ok, end, nodes)
        return ok, end, nodes

    # ---- Evaluator for expressions ----
    def _eval(self, node: Node, text: str, pos: int) -> _Result:
        if isinstance(node, Literal):
            if text.startswith(node.text, pos):
                return True, pos + len(node.text), _EMPTY
            self._fail_at(describe(node), pos)
            return False, pos, _EMPTY

        if isinstance(node, Any):
            # Python string index is already char-based
            if pos < len(text):
                return True, pos + 1, _EMPTY
            self._fail_at(describe(node), pos)
            return False, pos, _EMPTY

        if isinstance(node, CharClass):
            if pos < len(text) and _class_match(node, text[pos]):
                return True, pos + 1, _EMPTY
            self._fail_at(describe(node), pos)
            return False, pos, _EMPTY

        if isinstance(node, Ref):
            return self._apply_rule(node.name, text, pos)

        if isinstance(node, (And, Not)):
            self._quiet += 1
            try:
                ok, _, _ = self._eval(node.node, text, pos)
            finally:
                self._quiet -= 1
            if isinstance(node, Not):
                ok = not ok
            if not ok and isinstance(node, Not) and isinstance(node.node, Any):
                self._fail_at("end of input", pos)
            return ok, pos, _EMPTY

        if isinstance(node, Repeat):
            cur = pos
            count = 0
            out: List[PegNode] = []
            while node.max is None or count < node.max:
                ok, end, nodes = self._eval(node.node, text, cur)
                if not ok:
                    break
                out.extend(nodes)
                count += 1
                if end == cur:
                    # empty match: every further iteration matches empty too
                    count = max(count, node.min)
                    break
                cur = end
            if count < node.min:
                return False, pos, _EMPTY
            return True, cur, tuple(out)

        if isinstance(node, Seq):
            cur = pos
            out = []
            for it in node.items:
                ok, end, nodes = self._eval(it, text, cur)
                if not ok:
                    return False, pos, _EMPTY
                out.extend(nodes)
                cur = end
            return True, cur, tuple(out)

        if isinstance(node, Choice):
            for it in node.alts:
                ok, end, nodes = self._eval(it, text, pos)
                if ok:
                    return True, end, nodes
            return False, pos, _EMPTY

        raise AssertionError(f"unknown node: {node!r}")
