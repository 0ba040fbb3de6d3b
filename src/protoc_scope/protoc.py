"""Running protoc and turning its diagnostics into markers."""

from __future__ import annotations

import os
import re
import subprocess
import tempfile
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import structlog

from protoc_scope.config import PROTO_FILE_EXTENSION
from protoc_scope.errors import ProtocNotFoundError

log = structlog.get_logger()

# file:line:column: message, file:line: message, or file: message
_DIAGNOSTIC = re.compile(r"^(?P<file>[^:]+?):(?:(?P<line>\d+):(?:(?P<column>\d+):)?)?\s*(?P<message>.+)$")

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"


@dataclass(frozen=True)
class ProtocMarker:
    """One diagnostic reported by protoc."""

    file: str
    line: int
    message: str
    column: Optional[int] = None
    severity: str = SEVERITY_ERROR


def parse_protoc_line(text: str) -> Optional[ProtocMarker]:
    """Parse one line of protoc's stderr; None when it is not a diagnostic."""
    match = _DIAGNOSTIC.match(text.strip())
    if match is None:
        return None
    message = match.group("message").strip()
    severity = SEVERITY_ERROR
    if message.lower().startswith("warning:"):
        severity = SEVERITY_WARNING
        message = message[len("warning:"):].strip()
    line = int(match.group("line")) if match.group("line") else 0
    column = int(match.group("column")) if match.group("column") else None
    return ProtocMarker(file=match.group("file"), line=line, message=message, column=column, severity=severity)


class MarkerSet:
    """Markers for one compilation, without duplicates.

    Two diagnostics with the same message on the same line are reported once.
    """

    def __init__(self, existing: Sequence[ProtocMarker] = ()):
        self._markers: List[ProtocMarker] = list(existing)

    def contains(self, message: str, line: int) -> bool:
        return any(m.message == message and m.line == line for m in self._markers)

    def create_error_if_necessary(self, marker: ProtocMarker) -> bool:
        """Add ``marker`` unless an equal one is known; True when added."""
        if self.contains(marker.message, marker.line):
            return False
        self._markers.append(marker)
        return True

    def parse_and_add(self, text: str) -> Optional[ProtocMarker]:
        marker = parse_protoc_line(text)
        if marker is None:
            log.debug("protoc_output_ignored", line=text)
            return None
        self.create_error_if_necessary(marker)
        return marker

    @property
    def errors(self) -> List[ProtocMarker]:
        return [m for m in self._markers if m.severity == SEVERITY_ERROR]

    def __iter__(self):
        return iter(self._markers)

    def __len__(self) -> int:
        return len(self._markers)


@dataclass
class CompileResult:
    proto_path: str
    command: List[str] = field(default_factory=list)
    returncode: int = 0
    markers: MarkerSet = field(default_factory=MarkerSet)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.markers.errors


def build_command(
    proto_path: str,
    include_paths: Sequence[str],
    outputs: Sequence[str],
    protoc: str = "protoc",
) -> List[str]:
    includes = [os.path.dirname(os.path.abspath(proto_path))]
    includes.extend(include_paths)

    # de-dup while preserving order
    seen = set()
    cmd = [protoc]
    for inc in includes:
        if inc and inc not in seen:
            seen.add(inc)
            cmd.extend(["-I", inc])
    cmd.extend(outputs)
    cmd.append(proto_path)
    return cmd


def compile_proto(
    proto_path: str,
    include_paths: Sequence[str] = (),
    out_dir: Optional[str] = None,
    languages: Sequence[str] = ("python",),
    protoc: str = "protoc",
) -> CompileResult:
    """Compile one .proto file and collect protoc's diagnostics.

    With ``out_dir`` code is generated there for each of ``languages``;
    without it only a descriptor set is written to a temporary directory, so
    the call just validates the file. Files with another extension are not
    compiled and give an empty result.
    """
    result = CompileResult(proto_path=proto_path)
    if not proto_path.endswith(PROTO_FILE_EXTENSION):
        log.debug("protoc_skipped", path=proto_path)
        return result

    with tempfile.TemporaryDirectory() as td:
        if out_dir is None:
            outputs = [f"--descriptor_set_out={os.path.join(td, 'descriptor_set.pb')}"]
        else:
            outputs = [f"--{lang}_out={out_dir}" for lang in languages]
        result.command = build_command(proto_path, include_paths, outputs, protoc=protoc)
        log.debug("protoc_command", command=" ".join(result.command))
        try:
            completed = subprocess.run(result.command, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ProtocNotFoundError(
                f"'{protoc}' not found. Please install Protocol Buffers compiler and ensure it is in PATH."
            ) from e

    result.returncode = completed.returncode
    for line in completed.stderr.splitlines():
        if line.strip():
            result.markers.parse_and_add(line)
    log.info("protoc_finished", path=proto_path, returncode=completed.returncode, markers=len(result.markers))
    return result
