from __future__ import annotations

import pytest

from gemlock.peg import (
    Any, CharClass, Choice, Literal, Not, Ref, Repeat, Seq, parse_peg_grammar,
)


def test_first_rule_is_start_rule() -> None:
    g = parse_peg_grammar("""
        Top  <- Word+ !.
        Word <- [a-z]+ ' '?
    """)

    assert g.start == "Top"
    assert set(g.rules) == {"Top", "Word"}
    assert g.rules["Top"].expr == Seq((Repeat(Ref("Word"), 1, None), Not(Any())))


def test_ordered_choice_and_suffixes() -> None:
    g = parse_peg_grammar("Op <- '<=' / '<' / '~>'? ")

    expr = g.rules["Op"].expr
    assert isinstance(expr, Choice)
    assert expr.alts[0] == Literal("<=")
    assert expr.alts[1] == Literal("<")
    assert expr.alts[2] == Repeat(Literal("~>"), 0, 1)
    assert expr.alts[2].kind == "?"


def test_bounded_repetition() -> None:
    g = parse_peg_grammar("""
        Indent <- ' '{4}
        Digits <- [0-9]{1,3}
        Many   <- 'x'{2,}
    """)

    assert g.rules["Indent"].expr == Repeat(Literal(" "), 4, 4)
    assert g.rules["Digits"].expr == Repeat(CharClass(False, ((48, 57),), ()), 1, 3)
    assert g.rules["Many"].expr == Repeat(Literal("x"), 2, None)
    assert g.rules["Indent"].expr.kind == "{4}"
    assert g.rules["Many"].expr.kind == "{2,}"


def test_char_class_escapes_and_literal_spaces() -> None:
    g = parse_peg_grammar(r"""
        Name  <- [a-zA-Z0-9_!\-]
        Blank <- [ \t]
        Other <- [^\n]
    """)

    name = g.rules["Name"].expr
    assert name.ranges == ((97, 122), (65, 90), (48, 57))
    assert name.singles == ("_", "!", "-")
    assert g.rules["Blank"].expr.singles == (" ", "\t")
    other = g.rules["Other"].expr
    assert other.negated and other.singles == ("\n",)


def test_literal_escapes() -> None:
    g = parse_peg_grammar(r"""
        Eol <- '\r\n' / "\"q\"" / 'é'
    """)

    assert g.rules["Eol"].expr.alts == (Literal("\r\n"), Literal("\"q\""), Literal("é"))


def test_comments_are_ignored() -> None:
    g = parse_peg_grammar("""
        # hash comment
        A <- 'a'   # trailing comment
        B <- A '#'
    """)

    assert list(g.rules) == ["A", "B"]
    assert g.rules["B"].expr == Seq((Ref("A"), Literal("#")))


@pytest.mark.parametrize(
    "src, fragment",
    [
        ("", "empty PEG grammar"),
        ("A <- 'a'\nA <- 'b'", "duplicate rule 'A'"),
        ("A <- 'abc", "unterminated string"),
        ("A <- [abc", "unterminated char class"),
        ("A <- 'a'{3,1}", "invalid repeat bounds"),
        ("A <- B", "undefined rule 'B'"),
        ("A <- ('a'", "expected ')'"),
    ],
)
def test_grammar_errors(src: str, fragment: str) -> None:
    with pytest.raises(SyntaxError) as excinfo:
        parse_peg_grammar(src)

    assert fragment in str(excinfo.value)


def test_error_reports_line_and_column() -> None:
    with pytest.raises(SyntaxError) as excinfo:
        parse_peg_grammar("A <- 'a'\nB <- ( 'b'\n")

    assert "at 3:1" in str(excinfo.value)
