from __future__ import annotations

from gemlock.peg import (
    Packrat, PegGrammar, PegProgram, PegRunner, RuleDef,
    char_class, choice, end_of_input, literal, not_, optional, repeat, seq,
)
from gemlock.peg.ast import Ref


def _grammar(**rules) -> PegGrammar:
    start = next(iter(rules))
    return PegGrammar({name: RuleDef(name, expr) for name, expr in rules.items()}, start)


def _run(expr, text: str):
    return Packrat(_grammar(S=expr)).parse("S", text)


def test_literal_and_char_class() -> None:
    assert _run(literal("GEM"), "GEM\n") == (True, 3)
    assert _run(literal("GEM"), "GIT\n") == (False, 0)
    assert _run(char_class("a-z", "_"), "_x") == (True, 1)
    assert _run(char_class("a-z", negated=True), "x") == (False, 0)


def test_sequence_restores_position_on_failure() -> None:
    assert _run(seq(literal("a"), literal("b"), literal("c")), "abx") == (False, 0)
    assert _run(seq(literal("a"), literal("b")), "abx") == (True, 2)


def test_choice_is_ordered_and_backtracks() -> None:
    op = choice(literal("<"), literal("<="))
    # first alternative wins even though the second would match more
    assert _run(op, "<=") == (True, 1)
    assert _run(choice(seq(literal("G"), literal("IT")), literal("GEM")), "GEM") == (True, 3)


def test_repeat_bounds() -> None:
    space = literal(" ")
    assert _run(repeat(space, 4, 4), "     x") == (True, 4)
    assert _run(repeat(space, 4, 4), "   x") == (False, 0)
    assert _run(repeat(space, 0, None), "x") == (True, 0)
    assert _run(repeat(space, 2, 3), "     ") == (True, 3)
    assert _run(optional(literal("a")), "b") == (True, 0)


def test_repeat_of_empty_match_terminates() -> None:
    assert _run(repeat(optional(literal("a")), 2, None), "b") == (True, 0)


def test_negative_lookahead_consumes_nothing() -> None:
    not_newline = seq(not_(literal("\n")), char_class("a-z", "\n"))
    assert _run(not_newline, "a") == (True, 1)
    assert _run(not_newline, "\n") == (False, 0)
    assert _run(end_of_input(), "") == (True, 0)
    assert _run(end_of_input(), "x") == (False, 0)


def test_left_recursion_fails_instead_of_looping() -> None:
    g = _grammar(S=choice(seq(Ref("S"), literal("a")), literal("a")))
    assert Packrat(g).parse("S", "aa") == (True, 1)


def test_tree_contains_only_captured_rules() -> None:
    prog = PegProgram.from_source("""
        Line <- Name ' '* Num !.
        Name <- [a-z]+
        Num  <- [0-9]+
    """, captures={"Line", "Name", "Num"})

    m = PegRunner(prog).match("rake 10")

    assert m.ok
    (line,) = m.nodes
    assert (line.rule, line.begin, line.end) == ("Line", 0, 7)
    assert [c.rule for c in line.children] == ["Name", "Num"]
    assert line.child("Num").text("rake 10") == "10"


def test_abandoned_alternative_leaves_no_nodes() -> None:
    prog = PegProgram.from_source("""
        Top   <- Long / Short
        Long  <- Word ' ' Word '!'
        Short <- Word ' ' Word
        Word  <- [a-z]+
    """, captures={"Long", "Short", "Word"})

    m = PegRunner(prog).match("ab cd")

    assert m.ok
    (short,) = m.nodes
    assert short.rule == "Short"
    assert [w.text("ab cd") for w in short.children] == ["ab", "cd"]


def test_failure_records_farthest_position_and_stack() -> None:
    prog = PegProgram.from_source("""
        Top  <- Pair+ !.
        Pair <- [a-z]+ '=' [0-9]+ '\n'
    """)

    m = PegRunner(prog).match("a=1\nb=x\n")

    assert not m.ok
    assert m.nodes == ()
    assert m.failure.pos == 6
    assert m.failure.expected == frozenset({"[0-9]"})
    assert m.failure.deepest_stack == ("Top", "Pair")


def test_lookahead_failures_are_not_reported() -> None:
    prog = PegProgram.from_source("""
        Top <- (!'x' [a-z])+ !.
    """)

    m = PegRunner(prog).match("abx")

    assert not m.ok
    assert m.failure.pos == 2
    assert "'x'" not in m.failure.expected
    assert "end of input" in m.failure.expected


def test_partial_match_is_not_ok() -> None:
    prog = PegProgram.from_source("Top <- 'ab'")

    runner = PegRunner(prog)

    assert runner.run("Top", "abc") == (True, 2)
    m = runner.match("abc")
    assert not m.ok
    assert m.failure.pos == 2
