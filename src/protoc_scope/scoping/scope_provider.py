"""Reference-site facade over the element finder.

A ``Scope`` answers "what may this reference denote" for one reference site;
``ScopeProvider`` builds scopes for the four reference kinds and resolves a
field's type name to a single declaration.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Any, Dict, FrozenSet, Iterable, Iterator, List, Optional

import structlog

from protoc_scope.config import ScopeConfig
from protoc_scope.descriptor import SCALAR_TYPE_NAMES, DescriptorProvider
from protoc_scope.models import Match
from protoc_scope.parser.proto_ast import (
    ProtoDocument,
    ProtoField,
    ProtoGroup,
    ProtoMessage,
    ProtoNode,
    ProtoOption,
    ProtoRpc,
    all_contents,
)
from protoc_scope.resources import ImportResolver, ResourceSet

from .cancellation import CancellationToken
from .element_finder import ModelElementFinder
from .finders import (
    ANY_ENUM,
    ANY_TYPE,
    CustomOptionFinderDelegate,
    EnumCriteria,
    ExtensionFinderDelegate,
    LiteralFinderDelegate,
    OptionType,
    TypeFinderDelegate,
)
from .qualified_names import NAMED_TYPES, fully_qualified_name, qualified_segments, relative_segments

log = structlog.get_logger()

SCALAR_TYPES = frozenset(SCALAR_TYPE_NAMES.values())


class Scope:
    """The candidates visible from one reference site, indexed by name."""

    def __init__(self, matches: Iterable[Match]):
        self._matches: FrozenSet[Match] = frozenset(matches)
        self._by_name: Dict[str, List[Match]] = defaultdict(list)
        for match in self._matches:
            self._by_name[match.name].append(match)

    def lookup(self, name: str) -> List[ProtoNode]:
        """Declarations ``name`` may denote from the reference site.

        A leading dot makes the name absolute: only the fully-qualified form
        of a declaration matches it.
        """
        if name.startswith("."):
            wanted = name[1:]
            matches = [m for m in self._by_name.get(wanted, []) if fully_qualified_name(m.element) == wanted]
        else:
            matches = self._by_name.get(name, [])
        return _unique_elements(matches)

    def names(self) -> List[str]:
        return sorted(self._by_name)

    def elements(self) -> List[ProtoNode]:
        return _unique_elements(sorted(self._matches, key=lambda m: m.name))

    @property
    def matches(self) -> FrozenSet[Match]:
        return self._matches

    def __contains__(self, name: str) -> bool:
        return bool(self.lookup(name))

    def __iter__(self) -> Iterator[Match]:
        return iter(sorted(self._matches, key=lambda m: (m.name, m.uri)))

    def __len__(self) -> int:
        return len(self._matches)


def _unique_elements(matches: Iterable[Match]) -> List[ProtoNode]:
    seen = set()
    elements: List[ProtoNode] = []
    for match in matches:
        if id(match.element) not in seen:
            seen.add(id(match.element))
            elements.append(match.element)
    return elements


def element_at(document: ProtoDocument, dotted_name: str) -> Optional[ProtoNode]:
    """The declaration named ``dotted_name`` relative to the document's package.

    An empty name denotes the document itself.
    """
    if not dotted_name:
        return document
    wanted = [s for s in dotted_name.split(".") if s]
    for node in all_contents(document):
        if not isinstance(node, NAMED_TYPES):
            continue
        if relative_segments(node) == wanted:
            return node
    return None


class ScopeProvider:
    """Builds scopes for reference sites in documents of one resource set."""

    def __init__(
        self,
        resource_set: Optional[ResourceSet] = None,
        config: Optional[ScopeConfig] = None,
        descriptors: Optional[DescriptorProvider] = None,
    ):
        self.config = config or ScopeConfig()
        self.resource_set = resource_set or ResourceSet(file_extension=self.config.file_extension)
        self.descriptors = descriptors or DescriptorProvider(self.config.descriptor_bundles)
        self.finder = ModelElementFinder(ImportResolver(self.resource_set, self.config))
        self.types = TypeFinderDelegate(self.descriptors)
        self.extensions = ExtensionFinderDelegate(self.descriptors)
        self.custom_options = CustomOptionFinderDelegate(self.descriptors)
        self.literals = LiteralFinderDelegate(self.descriptors)

    def document(self, path: str) -> Optional[ProtoDocument]:
        return self.resource_set.get_document(path)

    def _scope(self, site: ProtoNode, delegate: Any, criteria: Any, cancel_token: Optional[CancellationToken]) -> Scope:
        return Scope(self.finder.find(site, delegate, criteria, cancel_token))

    def scope_for_type(
        self,
        site: ProtoNode,
        kinds: Any = ANY_TYPE,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Scope:
        """Messages, groups and enums a type reference at ``site`` may name."""
        return self._scope(site, self.types, kinds, cancel_token)

    def scope_for_extension(
        self,
        site: ProtoNode,
        extended: Any,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Scope:
        """Extensions of ``extended`` (a message or its dotted name) visible at ``site``."""
        return self._scope(site, self.extensions, extended, cancel_token)

    def scope_for_custom_option(
        self,
        site: ProtoNode,
        option_type: Optional[OptionType] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Scope:
        """Custom options usable at ``site``.

        Without ``option_type`` the kind is taken from what the option is
        attached to: ``site`` itself, or its container when ``site`` is an
        option.
        """
        if option_type is None:
            container = site.parent if isinstance(site, ProtoOption) else site
            option_type = OptionType.of(container)
        return self._scope(site, self.custom_options, option_type, cancel_token)

    def scope_for_literal(
        self,
        site: ProtoNode,
        enum: EnumCriteria = ANY_ENUM,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Scope:
        """Enum values a literal at ``site`` may name."""
        return self._scope(site, self.literals, enum, cancel_token)

    def resolve_type(
        self,
        site: ProtoNode,
        type_name: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> Optional[ProtoNode]:
        """The single declaration a type name at ``site`` denotes.

        ``type_name`` defaults to a field's type or an rpc's input type.
        Scalar types, unknown names and unresolved ambiguities give None.
        When a relative name matches several declarations, the one found in
        the innermost enclosing scope wins, as in protoc.
        """
        if type_name is None:
            if isinstance(site, ProtoField):
                type_name = site.type_name
            elif isinstance(site, ProtoRpc):
                type_name = site.input_type
            else:
                raise TypeError(f"Cannot infer a type name from {type(site).__name__}")
        if type_name in SCALAR_TYPES:
            return None

        candidates = self.scope_for_type(site, cancel_token=cancel_token).lookup(type_name)
        if len(candidates) <= 1:
            return candidates[0] if candidates else None
        if not type_name.startswith("."):
            by_name = {fully_qualified_name(c): c for c in candidates}
            enclosing = _enclosing_scope(site)
            wanted = [s for s in type_name.split(".") if s]
            for k in range(len(enclosing), -1, -1):
                found = by_name.get(".".join(enclosing[:k] + wanted))
                if found is not None:
                    return found
        log.info("type_ambiguous", name=type_name, candidates=sorted(fully_qualified_name(c) for c in candidates))
        return None


def _enclosing_scope(site: ProtoNode) -> List[str]:
    """Qualified segments of the innermost message, group or package around ``site``."""
    current = site.parent
    while current is not None and not isinstance(current, (ProtoMessage, ProtoGroup, ProtoDocument)):
        current = current.parent
    if current is None:
        return []
    return qualified_segments(current)
