"""Computes the declarations visible from a reference site.

Visibility combines two walks:

* the local walk climbs the containment tree from the reference site to the
  document root and collects matches at every level (outer levels are not
  shadowed by inner ones);
* the import walk expands the document's imports. Public imports of an
  imported file are followed transitively when that file was itself reached
  through a public import (or always, with ``strict_reexports`` off);
  ordinary imports of imported files are never followed. A file
  whose package is related to the importer's (prefix or equal) is searched
  like a local scope; any other file is scanned whole and the delegate names
  its declarations as seen from the importer's package.

Each file is expanded at most once per query, which keeps cyclic import
graphs finite.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Dict, FrozenSet, Optional, Set

import structlog

from protoc_scope.models import Match
from protoc_scope.packages import PackageLike, are_related
from protoc_scope.parser.proto_ast import (
    ProtoDocument,
    ProtoImport,
    ProtoNode,
    all_contents,
    root_of,
    scoped_contents,
)
from protoc_scope.resources import ImportResolver

from .cancellation import CancellationToken
from .delegate import FinderDelegate

log = structlog.get_logger()


class ModelElementFinder:
    def __init__(self, import_resolver: ImportResolver):
        self.import_resolver = import_resolver

    def find(
        self,
        start: ProtoNode,
        delegate: FinderDelegate,
        criteria: Any,
        cancel_token: Optional[CancellationToken] = None,
    ) -> FrozenSet[Match]:
        """Candidates for a reference made inside ``start``'s containers.

        Passing a ProtoDocument is the same as calling find_in_document.
        """
        if isinstance(start, ProtoDocument):
            return self.find_in_document(start, delegate, criteria, cancel_token)
        delegate.check_criteria(criteria)
        matches: Set[Match] = set()
        current = start.parent
        while current is not None:
            _check(cancel_token)
            matches |= self._local(current, delegate, criteria)
            current = current.parent
        matches |= self._imported(root_of(start), delegate, criteria, cancel_token)
        return frozenset(matches)

    def find_in_document(
        self,
        start: ProtoDocument,
        delegate: FinderDelegate,
        criteria: Any,
        cancel_token: Optional[CancellationToken] = None,
    ) -> FrozenSet[Match]:
        """Candidates for a reference made at the top level of ``start``."""
        delegate.check_criteria(criteria)
        _check(cancel_token)
        matches = self._local(start, delegate, criteria)
        matches |= self._imported(start, delegate, criteria, cancel_token)
        return frozenset(matches)

    def _local(self, start: ProtoNode, delegate: FinderDelegate, criteria: Any) -> Set[Match]:
        matches: Set[Match] = set()
        for element, level in scoped_contents(start):
            matches |= delegate.local(element, criteria, level)
        return matches

    def _imported(
        self,
        start: ProtoDocument,
        delegate: FinderDelegate,
        criteria: Any,
        cancel_token: Optional[CancellationToken],
    ) -> Set[Match]:
        imports = start.imports
        if not imports:
            return set()

        from_importer = start.package
        resolver = self.import_resolver
        strict = resolver.config.strict_reexports
        matches: Set[Match] = set()
        # document -> whether its re-exports have been queued
        visited: Dict[ProtoDocument, bool] = {start: True}
        pending: Deque[ProtoImport] = deque(imports)

        while pending:
            _check(cancel_token)
            an_import = pending.popleft()
            if resolver.is_importing_descriptor(an_import):
                matches |= delegate.in_descriptor(an_import, criteria)
                continue

            imported = resolver.resolve(an_import)
            if imported is None:
                continue
            if not resolver.is_supported_dialect(imported):
                log.debug("import_skipped_dialect", path=an_import.path, syntax=imported.syntax)
                continue
            follow = an_import.is_public or not strict
            seen = visited.get(imported)
            if seen is not None and (seen or not follow):
                log.debug("import_already_visited", path=an_import.path)
                continue
            visited[imported] = follow

            # re-exports are visible whatever the package relation
            if follow:
                pending.extend(i for i in imported.imports if i.is_public)
            if seen is not None:
                continue

            from_imported = imported.package
            if are_related(from_importer, from_imported):
                matches |= self._local(imported, delegate, criteria)
                continue
            matches |= self._imported_resource(from_importer, from_imported, imported, delegate, criteria)

        return matches

    def _imported_resource(
        self,
        from_importer: PackageLike,
        from_imported: PackageLike,
        document: ProtoDocument,
        delegate: FinderDelegate,
        criteria: Any,
    ) -> Set[Match]:
        matches: Set[Match] = set()
        for node in all_contents(document):
            matches |= delegate.imported(from_importer, from_imported, node, criteria)
        return matches


def _check(cancel_token: Optional[CancellationToken]) -> None:
    if cancel_token is not None and cancel_token.is_cancelled:
        log.info("resolution_cancelled")
        cancel_token.raise_if_cancelled()
