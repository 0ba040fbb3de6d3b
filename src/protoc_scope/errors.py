"""Exception hierarchy shared across the package."""

from __future__ import annotations


class ProtoScopeError(Exception):
    """Base class for all errors raised by protoc_scope."""


class ProtoParseError(ProtoScopeError):
    """Raised when the parser encounters unexpected input."""

    def __init__(self, message: str, line: int | None = None, col: int | None = None):
        self.line = line
        self.col = col
        if line is not None:
            super().__init__(f"Line {line}:{col}: {message}")
        else:
            super().__init__(message)


class ValueConverterError(ProtoScopeError, ValueError):
    """Raised when a literal token cannot be converted to a value."""


class ScopingError(ProtoScopeError):
    """Raised when the resolution engine is used incorrectly."""


class InvalidCriteriaError(ScopingError, TypeError):
    """Raised when a finder delegate receives criteria it does not understand."""


class ResolutionCancelled(ScopingError):
    """Raised when a resolution is abandoned through its cancellation token."""


class ProtocError(ProtoScopeError, RuntimeError):
    """Raised when protoc cannot be run."""


class ProtocNotFoundError(ProtocError):
    """Raised when the protoc executable is not on PATH."""
