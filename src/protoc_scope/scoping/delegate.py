"""Strategy interface used by the element finder.

One delegate exists per kind of reference (type, extension, custom option,
enum literal). The finder owns the traversal; the delegate decides, for each
visited node, which declarations it contributes and under which names.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Set

from protoc_scope.descriptor import DescriptorProvider
from protoc_scope.models import Match
from protoc_scope.packages import PackageLike
from protoc_scope.parser.proto_ast import ProtoImport, ProtoNode, root_of, scoped_contents

from .qualified_names import descriptor_names, imported_names, local_names


class FinderDelegate:
    """Base class for finder delegates.

    Subclasses implement ``check_criteria`` and ``targets``; the three match
    methods are shared.
    """

    def __init__(self, descriptors: Optional[DescriptorProvider] = None):
        self.descriptors = descriptors or DescriptorProvider()

    def check_criteria(self, criteria: Any) -> None:
        """Raise InvalidCriteriaError if ``criteria`` is not meaningful here."""
        raise NotImplementedError

    def targets(self, candidate: ProtoNode, criteria: Any) -> Iterable[ProtoNode]:
        """Declarations ``candidate`` contributes for ``criteria`` (often none)."""
        raise NotImplementedError

    def local(self, candidate: ProtoNode, criteria: Any, level: int) -> Set[Match]:
        matches: Set[Match] = set()
        for element in self.targets(candidate, criteria):
            document = root_of(element)
            for name in local_names(element, level):
                matches.add(Match(name, element, document))
        return matches

    def in_descriptor(self, an_import: ProtoImport, criteria: Any) -> Set[Match]:
        matches: Set[Match] = set()
        document = self.descriptors.descriptor(an_import.path)
        if document is None:
            return matches
        for candidate, level in scoped_contents(document):
            for element in self.targets(candidate, criteria):
                for name in descriptor_names(element, level):
                    matches.add(Match(name, element, document))
        return matches

    def imported(
        self,
        from_importer: PackageLike,
        from_imported: PackageLike,
        candidate: ProtoNode,
        criteria: Any,
    ) -> Set[Match]:
        matches: Set[Match] = set()
        for element in self.targets(candidate, criteria):
            document = root_of(element)
            for name in imported_names(element, from_importer, from_imported):
                matches.add(Match(name, element, document))
        return matches
