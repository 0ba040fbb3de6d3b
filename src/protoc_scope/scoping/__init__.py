from .cancellation import CancellationToken
from .delegate import FinderDelegate
from .element_finder import ModelElementFinder
from .finders import (
    ANY_ENUM,
    ANY_TYPE,
    CustomOptionFinderDelegate,
    ExtensionFinderDelegate,
    LiteralFinderDelegate,
    OptionType,
    TypeFinderDelegate,
)
from .scope_provider import Scope, ScopeProvider, element_at

__all__ = [
    "ANY_ENUM",
    "ANY_TYPE",
    "CancellationToken",
    "CustomOptionFinderDelegate",
    "ExtensionFinderDelegate",
    "FinderDelegate",
    "LiteralFinderDelegate",
    "ModelElementFinder",
    "OptionType",
    "Scope",
    "ScopeProvider",
    "TypeFinderDelegate",
    "element_at",
]
