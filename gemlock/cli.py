# gemlock/cli.py
"""gemlock – Gemfile.lock CLI

사용 예)
    $ gemlock check Gemfile.lock
    $ gemlock dump  Gemfile.lock --indent 2
    $ gemlock tree  Gemfile.lock -D

기능
----
- check : lockfile을 파싱해 소스/스펙/의존성 개수를 한 줄로 요약
- dump  : 파싱 결과(Lockfile)를 JSON으로 출력
- tree  : 구조적 파스 트리(캡처된 규칙 노드)를 깊이별 들여쓰기로 출력

디버그 모드(-D/--debug)를 켜면 파서의 DEBUG 로그를 stderr로 출력합니다.
파싱/입출력 오류는 종료 코드 2로 보고합니다.
"""

from __future__ import annotations
import argparse
import functools
import json
import logging
import pathlib
import sys
from typing import Callable, Optional

# ------------------------------
# 헬퍼
# ------------------------------

def _eprint(*args, **kw) -> None:
    print(*args, file=sys.stderr, **kw)


def _setup_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        stream=sys.stderr,
        format="[%(levelname)s] %(name)s: %(message)s",
    )


def _read(path: str) -> bytes:
    return pathlib.Path(path).read_bytes()


def _reports_errors(cmd: Callable[[argparse.Namespace], int]) -> Callable[[argparse.Namespace], int]:
    """파싱/입출력 오류를 stderr로 보고하고 종료 코드 2를 돌려줍니다."""
    @functools.wraps(cmd)
    def run(args: argparse.Namespace) -> int:
        from .lockfile import ParseError
        try:
            return cmd(args)
        except ParseError as e:
            _eprint("[SYNTAX ERROR]")
            _eprint(str(e))
            return 2
        except OSError as e:
            _eprint("[ERROR]", type(e).__name__, str(e))
            return 2
    return run

# ------------------------------
# 커맨드 구현
# ------------------------------

@_reports_errors
def cmd_check(args) -> int:
    from .lockfile import parse_lockfile
    lock = parse_lockfile(_read(args.file), filename=args.file)
    n_specs = sum(len(s.specs) for s in lock.sources)
    print(f"[CHECK OK] sources={len(lock.sources)} specs={n_specs} "
          f"platforms={len(lock.platforms)} dependencies={len(lock.dependencies)}")
    return 0


@_reports_errors
def cmd_dump(args) -> int:
    from .lockfile import parse_lockfile
    lock = parse_lockfile(_read(args.file), filename=args.file)
    indent = args.indent if args.indent > 0 else None
    print(json.dumps(lock.as_dict(), indent=indent))
    return 0


@_reports_errors
def cmd_tree(args) -> int:
    """구조적 파스 트리를 보여줍니다(규칙 이름 + 원문 조각)."""
    from .lockfile import decode_lockfile, parse_tree
    text = decode_lockfile(_read(args.file), filename=args.file)
    nodes = parse_tree(text, filename=args.file)
    for root in nodes:
        for depth, node in root.walk():
            if node.rule == "Gemfile":
                print(f"{node.rule} [{node.begin}:{node.end}]")
                continue
            lexeme = node.text(text).rstrip("\r\n")
            if "\n" in lexeme or "\r" in lexeme:
                lexeme = lexeme.splitlines()[0] + " ..."
            print(f"{'  ' * depth}{node.rule} [{node.begin}:{node.end}] {lexeme!r}")
    return 0

# ------------------------------
# 엔트리포인트
# ------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    ap = argparse.ArgumentParser(prog="gemlock", description="Gemfile.lock parser CLI")
    sub = ap.add_subparsers(dest="cmd", required=True)

    p_check = sub.add_parser("check", help="lockfile을 파싱하고 요약을 출력합니다")
    p_check.add_argument("file", help="Gemfile.lock 경로")
    p_check.add_argument("-D", "--debug", action="store_true", help="디버그 로그를 출력")
    p_check.set_defaults(func=cmd_check)

    p_dump = sub.add_parser("dump", help="파싱 결과를 JSON으로 출력합니다")
    p_dump.add_argument("file", help="Gemfile.lock 경로")
    p_dump.add_argument("--indent", type=int, default=2, help="JSON 들여쓰기(0이면 한 줄)")
    p_dump.add_argument("-D", "--debug", action="store_true", help="디버그 로그를 출력")
    p_dump.set_defaults(func=cmd_dump)

    p_tree = sub.add_parser("tree", help="구조적 파스 트리를 출력합니다")
    p_tree.add_argument("file", help="Gemfile.lock 경로")
    p_tree.add_argument("-D", "--debug", action="store_true", help="디버그 로그를 출력")
    p_tree.set_defaults(func=cmd_tree)

    args = ap.parse_args(argv)
    _setup_logging(args.debug)
    return int(args.func(args))

if __name__ == "__main__":
    sys.exit(main())
