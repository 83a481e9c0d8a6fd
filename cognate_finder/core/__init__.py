"""Core domain models and types.

Barrel export for clean imports across the application.
"""

from .types import (
    WordRef,
    CognateEdge,
    SearchParams,
    SparqlQuery,
    CognateRaw,
    CognateChain,
    CognateError,
    CognateResult,
    is_cognate_error,
    CognateKey,
    cognate_key,
)

__all__ = [
    "WordRef",
    "CognateEdge",
    "SearchParams",
    "SparqlQuery",
    "CognateRaw",
    "CognateChain",
    "CognateError",
    "CognateResult",
    "is_cognate_error",
    "CognateKey",
    "cognate_key",
]
