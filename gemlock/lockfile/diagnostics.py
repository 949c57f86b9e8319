# gemlock/lockfile/diagnostics.py
r"""Lockfile 진단(diagnostics): 실패 오프셋을 줄/칸(1-based)으로 바꾸고 스니펫을 만든다.

- 줄바꿈은 문법과 동일하게 `\r\n`, `\n`, `\r` 세 가지를 모두 인정한다.
- 실패 위치는 엔진이 기록한 **가장 먼 실패 지점**(farthest failure)이며,
  라벨은 그 지점에서 가장 깊은 규칙 스택의 가장 안쪽 라벨을 쓴다.
"""

from __future__ import annotations
from bisect import bisect_right
from typing import List, Optional, Tuple

import regex as re

from ..peg import PegFailure
from .errors import LockfileSyntaxError
from .grammar import label_for

_LINE_BREAK_RE = re.compile(r"\r\n|\n|\r")

_DEFAULT_LABEL = "unexpected input"


class LineIndex:
    """Line start offsets of a text, computed in one scan."""

    def __init__(self, text: str):
        self.text = text
        self._starts: List[int] = [0]
        self._ends: List[int] = []
        for m in _LINE_BREAK_RE.finditer(text):
            self._ends.append(m.start())
            self._starts.append(m.end())
        self._ends.append(len(text))

    @property
    def line_count(self) -> int:
        return len(self._starts)

    def position(self, offset: int) -> Tuple[int, int]:
        """offset -> (line, column), both 1-based."""
        offset = max(0, min(offset, len(self.text)))
        idx = bisect_right(self._starts, offset) - 1
        # an offset inside a '\r\n' pair belongs to the line it terminates
        return idx + 1, offset - self._starts[idx] + 1

    def line_text(self, line: int) -> str:
        """줄 번호(1-based)의 원문, 줄바꿈 문자 제외."""
        idx = line - 1
        return self.text[self._starts[idx]:self._ends[idx]]


def caret_snippet(text: str, offset: int, index: Optional[LineIndex] = None) -> str:
    """해당 절대 오프셋 pos에 캐럿(^)을 찍은 스니펫을 생성."""
    index = index or LineIndex(text)
    line, col = index.position(offset)
    caret = " " * (col - 1) + "^"
    return f"{index.line_text(line)}\n{caret}"


def _found(text: str, offset: int) -> str:
    if offset >= len(text):
        return "end of input"
    m = _LINE_BREAK_RE.match(text, offset)
    if m:
        return "end of line"
    return repr(text[offset])


def syntax_error_from_failure(text: str, failure: Optional[PegFailure],
                              filename: Optional[str] = None) -> LockfileSyntaxError:
    """Render the engine's farthest failure as a positioned `LockfileSyntaxError`."""
    index = LineIndex(text)
    if failure is None:
        # nothing was attempted past the start (cannot happen with a non-empty grammar)
        offset, tokens, label = 0, (), _DEFAULT_LABEL
    else:
        offset = failure.pos
        tokens = tuple(sorted(failure.expected))
        label = label_for(failure.deepest_stack) or _DEFAULT_LABEL
    line, col = index.position(offset)
    found = _found(text, offset)
    msg = f"Parse error at {line}:{col}: {label}, found {found}"
    if tokens:
        msg += f" (expected one of {{{', '.join(tokens)}}})"
    return LockfileSyntaxError(
        msg,
        expected=label,
        expected_tokens=tokens,
        line=line,
        column=col,
        context=index.line_text(line),
        offset=offset,
        filename=filename,
    )
