"""Finder delegates, one per kind of reference."""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Tuple, Union

from protoc_scope.errors import InvalidCriteriaError
from protoc_scope.parser.proto_ast import (
    COMPLEX_TYPES,
    ProtoDocument,
    ProtoEnum,
    ProtoEnumValue,
    ProtoExtend,
    ProtoField,
    ProtoGroup,
    ProtoMessage,
    ProtoNode,
    ProtoRpc,
    ProtoService,
)

from .delegate import FinderDelegate
from .qualified_names import fully_qualified_name

# Criteria for "any type usable as a field type".
ANY_TYPE: Tuple[type, ...] = COMPLEX_TYPES


class _AnyEnum:
    def __repr__(self) -> str:
        return "ANY_ENUM"


# Criteria for "values of every visible enum".
ANY_ENUM = _AnyEnum()


class TypeFinderDelegate(FinderDelegate):
    """Messages, groups and enums, filtered by class.

    Criteria: one of ProtoMessage, ProtoGroup, ProtoEnum, or a tuple of them.
    """

    def check_criteria(self, criteria: Any) -> None:
        kinds = criteria if isinstance(criteria, tuple) else (criteria,)
        if not kinds or not all(isinstance(k, type) and issubclass(k, COMPLEX_TYPES) for k in kinds):
            raise InvalidCriteriaError(
                f"Type criteria must be ProtoMessage, ProtoGroup, ProtoEnum or a tuple of them, got {criteria!r}"
            )

    def targets(self, candidate: ProtoNode, criteria: Any) -> List[ProtoNode]:
        if isinstance(candidate, criteria):
            return [candidate]
        return []


def _name_segments(name: str) -> List[str]:
    return [s for s in name.split(".") if s]


def _is_suffix(shorter: List[str], longer: List[str]) -> bool:
    return bool(shorter) and len(shorter) <= len(longer) and longer[len(longer) - len(shorter):] == shorter


class ExtensionFinderDelegate(FinderDelegate):
    """Extension fields declared in ``extend`` blocks for a given message.

    Criteria: the extended ProtoMessage/ProtoGroup, or its dotted name. An
    ``extend`` target matches when one name is a dotted suffix of the other,
    so ``extend FileOptions`` and ``extend .google.protobuf.FileOptions``
    both match ``google.protobuf.FileOptions``.
    """

    def check_criteria(self, criteria: Any) -> None:
        if isinstance(criteria, (ProtoMessage, ProtoGroup)):
            return
        if isinstance(criteria, str) and _name_segments(criteria):
            return
        raise InvalidCriteriaError(
            f"Extension criteria must be a message or a non-empty dotted name, got {criteria!r}"
        )

    def _extended_segments(self, criteria: Any) -> List[str]:
        if isinstance(criteria, (ProtoMessage, ProtoGroup)):
            return _name_segments(fully_qualified_name(criteria))
        return _name_segments(criteria)

    def extends(self, extend: ProtoExtend, criteria: Any) -> bool:
        target = _name_segments(extend.target)
        extended = self._extended_segments(criteria)
        return _is_suffix(target, extended) or _is_suffix(extended, target)

    def targets(self, candidate: ProtoNode, criteria: Any) -> List[ProtoNode]:
        if not isinstance(candidate, ProtoExtend) or not self.extends(candidate, criteria):
            return []
        return [e for e in candidate.elements if isinstance(e, (ProtoField, ProtoGroup))]


class OptionType(Enum):
    """Kinds of declarations an option can be attached to."""

    FILE = "FileOptions"
    MESSAGE = "MessageOptions"
    FIELD = "FieldOptions"
    ENUM = "EnumOptions"
    ENUM_VALUE = "EnumValueOptions"
    SERVICE = "ServiceOptions"
    METHOD = "MethodOptions"

    @property
    def message_name(self) -> str:
        return f"google.protobuf.{self.value}"

    @classmethod
    def of(cls, container: ProtoNode) -> OptionType:
        """Option type for an option declared directly inside ``container``."""
        for node_type, option_type in _OPTION_TYPES_BY_CONTAINER:
            if isinstance(container, node_type):
                return option_type
        raise InvalidCriteriaError(f"Options cannot be declared in {type(container).__name__}")


_OPTION_TYPES_BY_CONTAINER: Tuple[Tuple[type, OptionType], ...] = (
    (ProtoDocument, OptionType.FILE),
    (ProtoMessage, OptionType.MESSAGE),
    (ProtoGroup, OptionType.MESSAGE),
    (ProtoField, OptionType.FIELD),
    (ProtoEnum, OptionType.ENUM),
    (ProtoEnumValue, OptionType.ENUM_VALUE),
    (ProtoService, OptionType.SERVICE),
    (ProtoRpc, OptionType.METHOD),
)


class CustomOptionFinderDelegate(ExtensionFinderDelegate):
    """Custom options: extensions of the matching google.protobuf.*Options message.

    Criteria: an OptionType.
    """

    def check_criteria(self, criteria: Any) -> None:
        if not isinstance(criteria, OptionType):
            raise InvalidCriteriaError(f"Custom option criteria must be an OptionType, got {criteria!r}")

    def targets(self, candidate: ProtoNode, criteria: Any) -> List[ProtoNode]:
        return super().targets(candidate, criteria.message_name)


EnumCriteria = Union[ProtoEnum, _AnyEnum]


class LiteralFinderDelegate(FinderDelegate):
    """Enum values, named as siblings of their enum.

    Criteria: a specific ProtoEnum, or ANY_ENUM.
    """

    def check_criteria(self, criteria: Any) -> None:
        if criteria is ANY_ENUM or isinstance(criteria, ProtoEnum):
            return
        raise InvalidCriteriaError(f"Literal criteria must be a ProtoEnum or ANY_ENUM, got {criteria!r}")

    def targets(self, candidate: ProtoNode, criteria: Any) -> List[ProtoNode]:
        if not isinstance(candidate, ProtoEnum):
            return []
        if criteria is not ANY_ENUM and candidate is not criteria:
            return []
        return list(candidate.values)
