from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

PROTO_FILE_EXTENSION = ".proto"

# Only files of these syntaxes take part in cross-file resolution.
DEFAULT_SUPPORTED_SYNTAXES: Tuple[str, ...] = ("proto2",)

# A file without a syntax statement is proto2.
DEFAULT_SYNTAX = "proto2"

# Import path -> compiled module of the protobuf runtime that carries it.
WELL_KNOWN_BUNDLES: Dict[str, str] = {
    "google/protobuf/descriptor.proto": "google.protobuf.descriptor_pb2",
    "google/protobuf/any.proto": "google.protobuf.any_pb2",
    "google/protobuf/duration.proto": "google.protobuf.duration_pb2",
    "google/protobuf/empty.proto": "google.protobuf.empty_pb2",
    "google/protobuf/field_mask.proto": "google.protobuf.field_mask_pb2",
    "google/protobuf/struct.proto": "google.protobuf.struct_pb2",
    "google/protobuf/timestamp.proto": "google.protobuf.timestamp_pb2",
    "google/protobuf/wrappers.proto": "google.protobuf.wrappers_pb2",
}


@dataclass
class ScopeConfig:
    """Settings for import resolution and scoping."""

    include_paths: List[str] = field(default_factory=list)
    file_extension: str = PROTO_FILE_EXTENSION
    supported_syntaxes: Tuple[str, ...] = DEFAULT_SUPPORTED_SYNTAXES
    descriptor_bundles: Dict[str, str] = field(default_factory=lambda: dict(WELL_KNOWN_BUNDLES))
    # When True, an imported file's public re-exports are followed only if the
    # import reaching that file is itself public. When False, every imported
    # file's public imports are followed, as protoc does.
    strict_reexports: bool = True
    log_level: str = "WARNING"
