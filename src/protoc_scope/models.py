from __future__ import annotations

from dataclasses import dataclass

from protoc_scope.parser.proto_ast import ProtoDocument, ProtoNode


@dataclass(frozen=True)
class Match:
    """One way of naming a visible declaration from a reference site.

    ``element`` and ``document`` hash by identity, so the same declaration
    reached through two import paths collapses into one match per name.
    """

    name: str
    element: ProtoNode
    document: ProtoDocument

    @property
    def uri(self) -> str:
        return self.document.uri
