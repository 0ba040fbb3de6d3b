"""Loading and caching of imported documents.

``ResourceSet`` is the shared document cache: many resolutions read from it
concurrently, loads are serialized behind a lock, and a document is never
mutated once it has been published to the cache.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional

import structlog

from protoc_scope.config import DEFAULT_SYNTAX, ScopeConfig
from protoc_scope.errors import ProtoParseError
from protoc_scope.parser.proto_ast import ProtoDocument, ProtoImport, root_of
from protoc_scope.parser.proto_parser import parse_proto_file, parse_proto_text

log = structlog.get_logger()

DocumentLoader = Callable[[str], ProtoDocument]


def _normalize_uri(path: str) -> str:
    return str(Path(path).expanduser().resolve())


class ResourceSet:
    """Cache of parsed documents keyed by absolute path."""

    def __init__(self, loader: DocumentLoader = parse_proto_file, file_extension: str = ".proto"):
        self._loader = loader
        self._file_extension = file_extension
        self._documents: Dict[str, ProtoDocument] = {}
        self._overlays: Dict[str, ProtoDocument] = {}
        self._lock = threading.RLock()
        self.load_count = 0

    def add_document(self, path: str, text: str) -> ProtoDocument:
        """Register in-memory source (an unsaved editor buffer) for ``path``.

        Overlays win over files on disk until invalidated.
        """
        uri = _normalize_uri(path)
        document = parse_proto_text(text, uri=uri)
        with self._lock:
            self._overlays[uri] = document
            self._documents.pop(uri, None)
        return document

    def invalidate(self, path: str) -> None:
        """Drop a cached document (and its overlay) so the next access re-parses it."""
        uri = _normalize_uri(path)
        with self._lock:
            self._documents.pop(uri, None)
            self._overlays.pop(uri, None)

    def cached(self, path: str) -> Optional[ProtoDocument]:
        uri = _normalize_uri(path)
        return self._overlays.get(uri) or self._documents.get(uri)

    def get_document(self, path: str) -> Optional[ProtoDocument]:
        """Load ``path`` or return the cached document.

        Returns None when the file is missing, unreadable, not a schema file
        or fails to parse.
        """
        uri = _normalize_uri(path)
        document = self._overlays.get(uri) or self._documents.get(uri)
        if document is not None:
            return document
        if not uri.endswith(self._file_extension):
            log.debug("resource_skipped_extension", path=uri)
            return None

        with self._lock:
            # another thread may have loaded it while we waited
            document = self._overlays.get(uri) or self._documents.get(uri)
            if document is not None:
                return document
            try:
                if not Path(uri).is_file():
                    return None
                document = self._loader(uri)
            except (OSError, UnicodeDecodeError) as e:
                log.warning("resource_unreadable", path=uri, error=str(e))
                return None
            except ProtoParseError as e:
                log.warning("resource_parse_failed", path=uri, error=str(e))
                return None
            self.load_count += 1
            self._documents[uri] = document
            log.debug("resource_loaded", path=uri)
            return document

    def __contains__(self, path: str) -> bool:
        uri = _normalize_uri(path)
        return uri in self._documents or uri in self._overlays

    def __len__(self) -> int:
        return len(set(self._documents) | set(self._overlays))


def syntax_of(document: ProtoDocument) -> str:
    return document.syntax or DEFAULT_SYNTAX


class ImportResolver:
    """Locates the document an import statement refers to."""

    def __init__(self, resource_set: ResourceSet, config: Optional[ScopeConfig] = None):
        self.resource_set = resource_set
        self.config = config or ScopeConfig()

    def is_importing_descriptor(self, an_import: ProtoImport) -> bool:
        return an_import.path in self.config.descriptor_bundles

    def is_supported_dialect(self, document: ProtoDocument) -> bool:
        return syntax_of(document) in self.config.supported_syntaxes

    def candidate_paths(self, an_import: ProtoImport) -> List[Path]:
        """Importer's directory first, then each include root, in order."""
        candidates: List[Path] = []
        importer_uri = root_of(an_import).uri
        if importer_uri:
            candidates.append(Path(importer_uri).parent / an_import.path)
        for include in self.config.include_paths:
            candidates.append(Path(include) / an_import.path)
        return candidates

    def resolve(self, an_import: ProtoImport) -> Optional[ProtoDocument]:
        """Return the imported document, or None if it cannot be loaded."""
        if not an_import.path.endswith(self.config.file_extension):
            log.debug("import_skipped_extension", path=an_import.path)
            return None
        for candidate in self.candidate_paths(an_import):
            document = self.resource_set.get_document(str(candidate))
            if document is not None:
                return document
        log.info("import_unresolved", path=an_import.path, importer=root_of(an_import).uri)
        return None
