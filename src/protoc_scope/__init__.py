"""Name resolution for Protocol Buffers schema files."""

from protoc_scope.config import ScopeConfig
from protoc_scope.models import Match
from protoc_scope.resources import ImportResolver, ResourceSet
from protoc_scope.scoping import ScopeProvider

__version__ = "0.1.0"

__all__ = ["ImportResolver", "Match", "ResourceSet", "ScopeConfig", "ScopeProvider", "__version__"]
