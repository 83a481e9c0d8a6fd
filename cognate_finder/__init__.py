"""Cognate Finder - cognate search over an etymology knowledge graph.

Resolves a word in one language to its cognates in another by walking
derivation edges up to shared ancestors and back down.
"""

__version__ = "0.1.0"

# Observability exports for convenience
from cognate_finder.observ import get_logger, timer
from cognate_finder.errors import (
    CognateFinderError,
    ErrorCode,
    ValidationError,
    EmptyWordError,
    InvalidLanguageError,
    RateLimitError,
    ServiceError,
    GraphStoreError,
)

__all__ = [
    # Version
    "__version__",
    # Logging
    "get_logger",
    "timer",
    # Errors
    "CognateFinderError",
    "ErrorCode",
    "ValidationError",
    "EmptyWordError",
    "InvalidLanguageError",
    "RateLimitError",
    "ServiceError",
    "GraphStoreError",
]
