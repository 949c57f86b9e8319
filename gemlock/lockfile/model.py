# gemlock/lockfile/model.py
"""Lockfile result types.

Every value is a frozen dataclass and every ordered collection a tuple: a
`Lockfile` is built once per parse and never changes afterwards. Order always
follows the file.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, Optional, Tuple


class SourceKind(Enum):
    """Where a block of specs was resolved from, keyed by its header keyword."""
    RUBYGEMS = "GEM"
    GIT = "GIT"
    SVN = "SVN"
    PATH = "PATH"


def split_constraints(version: Optional[str]) -> Tuple[str, ...]:
    """'(>= 1.16, < 3)' -> ('>= 1.16', '< 3')."""
    if not version:
        return ()
    inner = version.strip()
    if inner.startswith("(") and inner.endswith(")"):
        inner = inner[1:-1]
    return tuple(part.strip() for part in inner.split(","))


@dataclass(frozen=True)
class GemRef:
    """A gem name plus its raw constraint clause, if the line had one."""
    name: str
    version: Optional[str] = None

    @property
    def constraints(self) -> Tuple[str, ...]:
        return split_constraints(self.version)

    def as_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "version": self.version}


@dataclass(frozen=True)
class Spec:
    """A resolved gem listed under `specs:`.

    `version` is the raw parenthesized text, e.g. "(4.1.7)"; it is "" when the
    line carries no version at all.
    """
    name: str
    version: str = ""
    dependencies: Tuple[GemRef, ...] = ()

    @property
    def constraints(self) -> Tuple[str, ...]:
        return split_constraints(self.version)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": [d.as_dict() for d in self.dependencies],
        }


@dataclass(frozen=True)
class Source:
    kind: SourceKind
    options: Dict[str, str] = field(default_factory=dict)
    specs: Tuple[Spec, ...] = ()

    @property
    def remote(self) -> Optional[str]:
        return self.options.get("remote")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "options": dict(self.options),
            "specs": [s.as_dict() for s in self.specs],
        }


@dataclass(frozen=True)
class Lockfile:
    sources: Tuple[Source, ...] = ()
    platforms: Tuple[str, ...] = ()
    dependencies: Tuple[GemRef, ...] = ()

    def specs(self) -> Iterator[Spec]:
        """Every spec of every source, in file order."""
        for src in self.sources:
            yield from src.specs

    def find_spec(self, name: str) -> Optional[Spec]:
        for spec in self.specs():
            if spec.name == name:
                return spec
        return None

    def as_dict(self) -> Dict[str, Any]:
        return {
            "sources": [s.as_dict() for s in self.sources],
            "platforms": list(self.platforms),
            "dependencies": [d.as_dict() for d in self.dependencies],
        }
