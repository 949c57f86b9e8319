# gemlock/lockfile/builder.py
"""Parse tree -> `Lockfile`.

The engine only produces a structural tree; this module walks it once,
bottom-up, after the whole parse has succeeded. The same `GemVersion` node
shape shows up under `Spec`, `SpecDep` and `Dependency`; a `ParseContext`
argument tells `build_gem_version` which of those it is looking at.
"""

from __future__ import annotations
from enum import Enum
from typing import Dict, Sequence, Tuple, Union

from ..peg import PegNode
from .model import GemRef, Lockfile, Source, SourceKind, Spec


class ParseContext(Enum):
    TOP_LEVEL_DEPENDENCY = "dependency"
    SOURCE_SPEC = "spec"
    SPEC_SUB_DEPENDENCY = "spec_dependency"


_SOURCE_KINDS: Dict[str, SourceKind] = {
    "Gem": SourceKind.RUBYGEMS,
    "Git": SourceKind.GIT,
    "SVN": SourceKind.SVN,
    "Path": SourceKind.PATH,
}


def _require(node: PegNode, rule: str) -> PegNode:
    c = node.child(rule)
    if c is None:
        # grammar and builder disagree; not an input error
        raise AssertionError(f"{node.rule} node without {rule} child")
    return c


def _gem_ref(node: PegNode, text: str) -> GemRef:
    version = node.child("Version")
    return GemRef(
        name=_require(node, "GemName").text(text),
        version=version.text(text) if version is not None else None,
    )


def build_gem_version(node: PegNode, text: str,
                      context: ParseContext) -> Union[Spec, GemRef]:
    """Turn one GemVersion node into a Spec (SOURCE_SPEC) or a GemRef."""
    ref = _gem_ref(node, text)
    if context is ParseContext.SOURCE_SPEC:
        return Spec(name=ref.name, version=ref.version or "")
    return ref


def build_spec(node: PegNode, text: str) -> Spec:
    head = _gem_ref(_require(node, "GemVersion"), text)
    deps = tuple(
        _gem_ref(_require(dep, "GemVersion"), text)
        for dep in node.children_of("SpecDep")
    )
    return Spec(name=head.name, version=head.version or "", dependencies=deps)


def build_source(node: PegNode, text: str) -> Source:
    kind = _SOURCE_KINDS[node.rule]
    options: Dict[str, str] = {}
    for opt in node.children_of("Option"):
        key = _require(opt, "OptionKey").text(text)
        options[key] = _require(opt, "OptionValue").text(text)
    specs: Tuple[Spec, ...] = ()
    block = node.child("Specs")
    if block is not None:
        specs = tuple(build_spec(s, text) for s in block.children_of("Spec"))
    return Source(kind=kind, options=options, specs=specs)


def build_platforms(node: PegNode, text: str) -> Tuple[str, ...]:
    return tuple(
        _require(p, "PlatformName").text(text)
        for p in node.children_of("Platform")
    )


def build_dependencies(node: PegNode, text: str) -> Tuple[GemRef, ...]:
    return tuple(
        _gem_ref(_require(d, "GemVersion"), text)
        for d in node.children_of("Dependency")
    )


def build_lockfile(nodes: Sequence[PegNode], text: str) -> Lockfile:
    """Build a Lockfile from the tree returned for the `Gemfile` rule."""
    if len(nodes) != 1 or nodes[0].rule != "Gemfile":
        raise AssertionError(f"expected a single Gemfile node, got {[n.rule for n in nodes]}")
    root = nodes[0]
    sources = tuple(
        build_source(c, text) for c in root.children if c.rule in _SOURCE_KINDS
    )
    return Lockfile(
        sources=sources,
        platforms=build_platforms(_require(root, "Platforms"), text),
        dependencies=build_dependencies(_require(root, "Dependencies"), text),
    )
