"""Relations between package declarations.

A missing package declaration is the empty package: its segment sequence is
empty, so it is a prefix of every package and related to all of them.
"""

from __future__ import annotations

from typing import List, Optional, Union

from protoc_scope.parser.proto_ast import ProtoDocument, ProtoPackage

PackageLike = Union[ProtoPackage, str, None]


def segments_of(package: PackageLike) -> List[str]:
    """Dotted-name segments of a package (empty for no package)."""
    if package is None:
        return []
    name = package.name if isinstance(package, ProtoPackage) else package
    return [s for s in name.split(".") if s]


def package_of(document: ProtoDocument) -> Optional[ProtoPackage]:
    return document.package


def _is_prefix(prefix: List[str], segments: List[str]) -> bool:
    return len(prefix) <= len(segments) and segments[: len(prefix)] == prefix


def are_related(p1: PackageLike, p2: PackageLike) -> bool:
    """True when one package's segments are a prefix of (or equal to) the other's."""
    s1 = segments_of(p1)
    s2 = segments_of(p2)
    return _is_prefix(s1, s2) or _is_prefix(s2, s1)


def common_prefix(p1: PackageLike, p2: PackageLike) -> List[str]:
    """Leading segments shared by both packages."""
    shared: List[str] = []
    for a, b in zip(segments_of(p1), segments_of(p2)):
        if a != b:
            break
        shared.append(a)
    return shared
