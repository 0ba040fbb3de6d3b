"""AST node definitions for protobuf (.proto) files.

Nodes compare and hash by identity: two structurally equal messages in
different files are still different declarations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple, Union


@dataclass(eq=False)
class ProtoNode:
    """Common base: every node knows its direct container."""

    parent: Optional[ProtoNode] = field(default=None, init=False, repr=False)

    def children(self) -> List[ProtoNode]:
        return []


@dataclass(eq=False)
class ProtoPackage(ProtoNode):
    """package foo.bar;"""

    name: str = ""


@dataclass(eq=False)
class ProtoImport(ProtoNode):
    """import [public|weak] "path/to/file.proto";"""

    path: str = ""
    is_public: bool = False
    is_weak: bool = False


@dataclass(eq=False)
class ProtoOption(ProtoNode):
    """option name = value; (also used for [name = value] field options)"""

    name: str = ""
    value: Union[str, int, float, bool, None] = None


@dataclass(eq=False)
class ProtoField(ProtoNode):
    """A field declaration: [modifier] Type name = number [options];"""

    type_name: str = ""
    name: str = ""
    number: int = 0
    modifier: Optional[str] = None
    map_key_type: Optional[str] = None
    oneof: Optional[str] = None
    options: List[ProtoOption] = field(default_factory=list)


@dataclass(eq=False)
class ProtoEnumValue(ProtoNode):
    name: str = ""
    number: int = 0


@dataclass(eq=False)
class ProtoEnum(ProtoNode):
    name: str = ""
    elements: List[ProtoNode] = field(default_factory=list)

    def children(self) -> List[ProtoNode]:
        return self.elements

    @property
    def values(self) -> List[ProtoEnumValue]:
        return [e for e in self.elements if isinstance(e, ProtoEnumValue)]


@dataclass(eq=False)
class ProtoMessage(ProtoNode):
    """A message definition, possibly containing nested declarations."""

    name: str = ""
    elements: List[ProtoNode] = field(default_factory=list)

    def children(self) -> List[ProtoNode]:
        return self.elements


@dataclass(eq=False)
class ProtoGroup(ProtoNode):
    """[modifier] group Name = number { ... } -- a field and a nested type at once."""

    name: str = ""
    number: int = 0
    modifier: Optional[str] = None
    elements: List[ProtoNode] = field(default_factory=list)

    def children(self) -> List[ProtoNode]:
        return self.elements


@dataclass(eq=False)
class ProtoExtend(ProtoNode):
    """extend Target { extension fields }"""

    target: str = ""
    elements: List[ProtoNode] = field(default_factory=list)

    def children(self) -> List[ProtoNode]:
        return self.elements


@dataclass(eq=False)
class ProtoRpc(ProtoNode):
    name: str = ""
    input_type: str = ""
    output_type: str = ""
    client_streaming: bool = False
    server_streaming: bool = False


@dataclass(eq=False)
class ProtoService(ProtoNode):
    name: str = ""
    elements: List[ProtoNode] = field(default_factory=list)

    def children(self) -> List[ProtoNode]:
        return self.elements


@dataclass(eq=False)
class ProtoDocument(ProtoNode):
    """Top-level parsed representation of a .proto file."""

    uri: str = ""
    syntax: Optional[str] = None
    statements: List[ProtoNode] = field(default_factory=list)

    def children(self) -> List[ProtoNode]:
        return self.statements

    @property
    def package(self) -> Optional[ProtoPackage]:
        for statement in self.statements:
            if isinstance(statement, ProtoPackage):
                return statement
        return None

    @property
    def imports(self) -> List[ProtoImport]:
        return [s for s in self.statements if isinstance(s, ProtoImport)]


# Declarations that open a new naming scope for nested declarations.
SCOPE_TYPES = (ProtoMessage, ProtoGroup)

# Declarations usable as a field's type.
COMPLEX_TYPES = (ProtoMessage, ProtoGroup, ProtoEnum)


def link_parents(node: ProtoNode) -> None:
    """Set the parent back-reference of every node below ``node``."""
    stack = [node]
    while stack:
        current = stack.pop()
        for child in current.children():
            child.parent = current
            stack.append(child)
        if isinstance(current, ProtoField):
            for option in current.options:
                option.parent = current


def all_contents(node: ProtoNode) -> Iterator[ProtoNode]:
    """Yield ``node`` and every node below it, parents before children."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children()))


def root_of(node: ProtoNode) -> ProtoDocument:
    current = node
    while current.parent is not None:
        current = current.parent
    if not isinstance(current, ProtoDocument):
        raise ValueError(f"{node!r} is not attached to a document")
    return current


def scoped_contents(start: ProtoNode) -> Iterator[Tuple[ProtoNode, int]]:
    """Yield (node, level) for every node visible below ``start``.

    Level starts at 0 for direct children and grows by one each time the
    walk enters a message or group; other containers are not descended into.
    """
    stack: List[Tuple[ProtoNode, int]] = [(start, 0)]
    while stack:
        node, level = stack.pop()
        for child in node.children():
            yield child, level
            if isinstance(child, SCOPE_TYPES):
                stack.append((child, level + 1))
