"""Built-in descriptor bundles.

The well-known .proto files ship compiled inside the protobuf runtime, so
their declarations are read from the ``*_pb2`` modules instead of being parsed
from source. Each bundle is materialized once into a ProtoDocument; delegates
then treat built-in types like any parsed declaration.
"""

from __future__ import annotations

import importlib
from functools import lru_cache
from typing import Dict, List, Optional

import structlog
from google.protobuf.descriptor import Descriptor, EnumDescriptor, FieldDescriptor, FileDescriptor

from protoc_scope.config import WELL_KNOWN_BUNDLES
from protoc_scope.parser.proto_ast import (
    ProtoDocument,
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoMessage,
    ProtoNode,
    ProtoPackage,
    link_parents,
)

log = structlog.get_logger()

SCALAR_TYPE_NAMES: Dict[int, str] = {
    FieldDescriptor.TYPE_DOUBLE: "double",
    FieldDescriptor.TYPE_FLOAT: "float",
    FieldDescriptor.TYPE_INT64: "int64",
    FieldDescriptor.TYPE_UINT64: "uint64",
    FieldDescriptor.TYPE_INT32: "int32",
    FieldDescriptor.TYPE_FIXED64: "fixed64",
    FieldDescriptor.TYPE_FIXED32: "fixed32",
    FieldDescriptor.TYPE_BOOL: "bool",
    FieldDescriptor.TYPE_STRING: "string",
    FieldDescriptor.TYPE_BYTES: "bytes",
    FieldDescriptor.TYPE_UINT32: "uint32",
    FieldDescriptor.TYPE_SFIXED32: "sfixed32",
    FieldDescriptor.TYPE_SFIXED64: "sfixed64",
    FieldDescriptor.TYPE_SINT32: "sint32",
    FieldDescriptor.TYPE_SINT64: "sint64",
}


def _type_name(fd: FieldDescriptor) -> str:
    if fd.message_type is not None:
        return "." + fd.message_type.full_name
    if fd.enum_type is not None:
        return "." + fd.enum_type.full_name
    return SCALAR_TYPE_NAMES.get(fd.type, "bytes")


def _is_map_entry(desc: Descriptor) -> bool:
    return desc.GetOptions().map_entry


def _build_field(fd: FieldDescriptor) -> ProtoField:
    if fd.message_type is not None and _is_map_entry(fd.message_type):
        entry = fd.message_type
        return ProtoField(
            type_name=_type_name(entry.fields_by_name["value"]),
            name=fd.name,
            number=fd.number,
            map_key_type=_type_name(entry.fields_by_name["key"]),
        )
    return ProtoField(type_name=_type_name(fd), name=fd.name, number=fd.number)


def _build_enum(desc: EnumDescriptor) -> ProtoEnum:
    values = [ProtoEnumValue(name=v.name, number=v.number) for v in desc.values]
    return ProtoEnum(name=desc.name, elements=list(values))


def _build_message(desc: Descriptor) -> ProtoMessage:
    elements: List[ProtoNode] = []
    for nested in desc.nested_types:
        if _is_map_entry(nested):
            continue
        elements.append(_build_message(nested))
    for enum in desc.enum_types:
        elements.append(_build_enum(enum))
    for fd in desc.fields:
        elements.append(_build_field(fd))
    return ProtoMessage(name=desc.name, elements=elements)


def document_from_file_descriptor(file_descriptor: FileDescriptor) -> ProtoDocument:
    """Materialize a compiled FileDescriptor as a ProtoDocument."""
    document = ProtoDocument(uri=file_descriptor.name)
    if file_descriptor.package:
        document.statements.append(ProtoPackage(name=file_descriptor.package))
    for message in file_descriptor.message_types_by_name.values():
        document.statements.append(_build_message(message))
    for enum in file_descriptor.enum_types_by_name.values():
        document.statements.append(_build_enum(enum))
    link_parents(document)
    return document


@lru_cache(maxsize=None)
def _load_bundle(module_name: str) -> ProtoDocument:
    module = importlib.import_module(module_name)
    document = document_from_file_descriptor(module.DESCRIPTOR)
    log.debug("descriptor_bundle_loaded", module=module_name, uri=document.uri)
    return document


class DescriptorProvider:
    """Maps well-known import paths to their built-in documents."""

    def __init__(self, bundles: Optional[Dict[str, str]] = None):
        self._bundles = dict(WELL_KNOWN_BUNDLES if bundles is None else bundles)

    def is_descriptor_import(self, import_path: str) -> bool:
        return import_path in self._bundles

    def descriptor(self, import_path: str) -> Optional[ProtoDocument]:
        module_name = self._bundles.get(import_path)
        if module_name is None:
            return None
        try:
            return _load_bundle(module_name)
        except ImportError as e:
            log.warning("descriptor_bundle_unavailable", module=module_name, error=str(e))
            return None
