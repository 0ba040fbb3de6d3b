from .proto_ast import (
    ProtoDocument,
    ProtoEnum,
    ProtoEnumValue,
    ProtoExtend,
    ProtoField,
    ProtoGroup,
    ProtoImport,
    ProtoMessage,
    ProtoNode,
    ProtoOption,
    ProtoPackage,
    ProtoRpc,
    ProtoService,
    all_contents,
    root_of,
)
from .proto_parser import parse_proto_file, parse_proto_text

__all__ = [
    "ProtoDocument",
    "ProtoEnum",
    "ProtoEnumValue",
    "ProtoExtend",
    "ProtoField",
    "ProtoGroup",
    "ProtoImport",
    "ProtoMessage",
    "ProtoNode",
    "ProtoOption",
    "ProtoPackage",
    "ProtoRpc",
    "ProtoService",
    "all_contents",
    "parse_proto_file",
    "parse_proto_text",
    "root_of",
]
