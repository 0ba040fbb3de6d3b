"""Name generation for declarations.

An element is named by its package segments followed by the names of its
named containers. Enum values are the exception: like in C++, they live in
the scope that contains their enum, so the enum's own name is skipped.
``extend`` blocks, oneofs and options never contribute a segment.
"""

from __future__ import annotations

from typing import List, Optional

from protoc_scope.packages import PackageLike, common_prefix, segments_of
from protoc_scope.parser.proto_ast import (
    ProtoDocument,
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoGroup,
    ProtoMessage,
    ProtoNode,
    ProtoRpc,
    ProtoService,
)

# Declarations that contribute a segment to qualified names.
NAMED_TYPES = (ProtoMessage, ProtoGroup, ProtoEnum, ProtoEnumValue, ProtoField, ProtoService, ProtoRpc)


def relative_segments(element: ProtoNode) -> List[str]:
    """Name segments of ``element`` inside its file, without the package."""
    segments: List[str] = []
    current: Optional[ProtoNode] = element
    while current is not None and not isinstance(current, ProtoDocument):
        if isinstance(current, NAMED_TYPES):
            skip = isinstance(current, ProtoEnum) and current is not element
            if not skip:
                segments.append(current.name)
        current = current.parent
    segments.reverse()
    return segments


def qualified_segments(element: ProtoNode) -> List[str]:
    current = element
    while current.parent is not None:
        current = current.parent
    package = current.package if isinstance(current, ProtoDocument) else None
    return segments_of(package) + relative_segments(element)


def fully_qualified_name(element: ProtoNode) -> str:
    return ".".join(qualified_segments(element))


def _suffixes(segments: List[str], min_length: int = 1) -> List[str]:
    """Dotted suffixes of ``segments``, shortest first."""
    return [".".join(segments[-n:]) for n in range(max(min_length, 1), len(segments) + 1)]


def local_names(element: ProtoNode, level: int = 0) -> List[str]:
    """Names usable from a scope ``level`` containers above the element.

    An element nested ``level`` messages below the searched scope needs at
    least ``level + 1`` segments, so the shortest suffixes are dropped.
    """
    return _suffixes(qualified_segments(element), level + 1)


def descriptor_names(element: ProtoNode, level: int = 0) -> List[str]:
    """Names of a built-in declaration: file-relative suffixes plus the full name."""
    names = _suffixes(relative_segments(element), level + 1)
    names.append(fully_qualified_name(element))
    return names


def imported_names(element: ProtoNode, from_importer: PackageLike, from_imported: PackageLike) -> List[str]:
    """Names an importer in an unrelated package may use.

    The fully-qualified name always works. Package segments the two packages
    share may be left out, since lookup walks outwards through the
    importer's enclosing packages.
    """
    segments = qualified_segments(element)
    shared = len(common_prefix(from_importer, from_imported))
    return [".".join(segments[k:]) for k in range(shared, -1, -1)]
