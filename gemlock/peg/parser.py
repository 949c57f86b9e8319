# gemlock/peg/parser.py
from __future__ import annotations
from typing import Optional, List, Tuple, Dict
from .ast import (
    Literal, CharClass, Any, Ref, And, Not, Repeat, Seq, Choice,
    RuleDef, PegGrammar, Node
)

# Grammar text accepted here:
#   grammar  := rule+
#   rule     := IDENT "<-" expr
#   expr     := seq ("/" seq)*
#   seq      := prefix*
#   prefix   := ("&" | "!")? suffix
#   suffix   := primary ("?" | "*" | "+" | "{" INT ("," INT?)? "}")?
#   primary  := IDENT | literal | class | "." | "(" expr ")"
#   literal  := '...' | "..."        escapes: \n \r \t, anything else is itself
#   class    := "[" "^"? (char ("-" char)?)+ "]"
# "#" starts a comment that runs to the end of the line.

_ESCAPES = {"n": "\n", "r": "\r", "t": "\t"}


class _TS:
    def __init__(self, src: str):
        self.s = src
        self.i = 0

    def _peek(self, k: int = 0) -> Optional[str]:
        j = self.i + k
        return self.s[j] if j < len(self.s) else None

    def _at(self, lit: str) -> bool:
        return self.s.startswith(lit, self.i)

    def _err(self, msg: str) -> SyntaxError:
        line = self.s.count("\n", 0, self.i) + 1
        col = self.i - self.s.rfind("\n", 0, self.i)
        return SyntaxError(f"PEG parse error at {line}:{col}: {msg}")

    def _skip_ws(self) -> None:
        while self.i < len(self.s):
            ch = self.s[self.i]
            if ch == "#":
                nl = self.s.find("\n", self.i)
                self.i = len(self.s) if nl == -1 else nl
            elif ch.isspace():
                self.i += 1
            else:
                return

    def _accept(self, lit: str) -> bool:
        self._skip_ws()
        if self._at(lit):
            self.i += len(lit)
            return True
        return False

    def _expect(self, lit: str) -> None:
        if not self._accept(lit):
            raise self._err(f"expected {lit!r}")

    def _ident(self) -> str:
        self._skip_ws()
        start = self.i
        ch = self._peek()
        if ch is None or not (ch.isalpha() or ch == "_"):
            raise self._err("expected IDENT")
        while self._peek() is not None and (self.s[self.i].isalnum() or self.s[self.i] == "_"):
            self.i += 1
        return self.s[start:self.i]

    def _int(self) -> int:
        self._skip_ws()
        start = self.i
        while self._peek() is not None and self.s[self.i].isdigit():
            self.i += 1
        if start == self.i:
            raise self._err("expected integer")
        return int(self.s[start:self.i])

    def _char(self, what: str) -> str:
        """One source character, with a backslash escape applied."""
        ch = self._peek()
        if ch is None:
            raise self._err(f"unterminated {what}")
        self.i += 1
        if ch != "\\":
            return ch
        esc = self._peek()
        if esc is None:
            raise self._err(f"unterminated {what}")
        self.i += 1
        return _ESCAPES.get(esc, esc)

    def _literal(self) -> Literal:
        quote = self.s[self.i]
        self.i += 1
        out: List[str] = []
        while not self._at(quote):
            out.append(self._char("string"))
        self.i += 1
        return Literal("".join(out))

    def _class(self) -> CharClass:
        self.i += 1  # '['
        negated = self._at("^")
        if negated:
            self.i += 1
        ranges: List[Tuple[int, int]] = []
        singles: List[str] = []
        # whitespace inside [...] is significant, e.g. [ \t]
        while not self._at("]"):
            lo = self._char("char class")
            if self._at("-") and self._peek(1) not in (None, "]"):
                self.i += 1
                hi = self._char("char class")
                a, b = sorted((ord(lo), ord(hi)))
                ranges.append((a, b))
            else:
                singles.append(lo)
        self.i += 1
        if not ranges and not singles:
            raise self._err("empty char class")
        return CharClass(negated=negated, ranges=tuple(ranges), singles=tuple(singles))

    def parse_grammar(self) -> PegGrammar:
        rules: Dict[str, RuleDef] = {}
        while True:
            self._skip_ws()
            if self._peek() is None:
                break
            name = self._ident()
            self._expect("<-")
            expr = self._parse_expr()
            if name in rules:
                raise self._err(f"duplicate rule '{name}'")
            rules[name] = RuleDef(name, expr)
        if not rules:
            raise self._err("empty PEG grammar")
        g = PegGrammar(rules=rules, start=next(iter(rules)))
        g.check_refs()
        return g

    def _parse_expr(self) -> Node:
        alts = [self._parse_seq()]
        while self._accept("/"):
            alts.append(self._parse_seq())
        return alts[0] if len(alts) == 1 else Choice(tuple(alts))

    def _at_rule_head(self) -> bool:
        """IDENT followed by '<-' starts the next rule, not a reference."""
        save = self.i
        try:
            self._ident()
            return self._accept("<-")
        finally:
            self.i = save

    def _parse_seq(self) -> Node:
        items: List[Node] = []
        while True:
            self._skip_ws()
            ch = self._peek()
            if ch is None or ch in ")/":
                break
            if (ch.isalpha() or ch == "_") and self._at_rule_head():
                break
            items.append(self._parse_prefix())
        if len(items) == 1:
            return items[0]
        return Seq(tuple(items))

    def _parse_prefix(self) -> Node:
        if self._accept("&"):
            return And(self._parse_suffix())
        if self._accept("!"):
            return Not(self._parse_suffix())
        return self._parse_suffix()

    def _parse_suffix(self) -> Node:
        node = self._parse_primary()
        # suffixes bind tightly: no whitespace before them
        ch = self._peek()
        if ch is not None and ch in "?*+":
            self.i += 1
            return Repeat(node, 1 if ch == "+" else 0, 1 if ch == "?" else None)
        if ch != "{":
            return node
        self.i += 1
        lo = self._int()
        hi: Optional[int] = lo
        if self._accept(","):
            self._skip_ws()
            hi = None if self._at("}") else self._int()
        self._expect("}")
        if hi is not None and hi < lo:
            raise self._err(f"invalid repeat bounds {{{lo},{hi}}}")
        return Repeat(node, lo, hi)

    def _parse_primary(self) -> Node:
        self._skip_ws()
        ch = self._peek()
        if ch == "(":
            self.i += 1
            e = self._parse_expr()
            self._expect(")")
            return e
        if ch == ".":
            self.i += 1
            return Any()
        if ch in ("'", '"'):
            return self._literal()
        if ch == "[":
            return self._class()
        return Ref(self._ident())


def parse_peg_grammar(src: str) -> PegGrammar:
    """Parse PEG grammar text into a `PegGrammar`; the first rule is the start rule."""
    return _TS(src).parse_grammar()
