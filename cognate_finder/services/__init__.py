"""Service layer implementations.

Barrel export for business logic services.
"""

from .cognate import CognateService
from .definitions import DefinitionService
from .hydrate import HydrationCache, hydrate
from .query import build_sparql_query
from .suggestions import SuggestionService
from .throttle import SubmitThrottle

__all__ = [
    "CognateService",
    "DefinitionService",
    "HydrationCache",
    "hydrate",
    "build_sparql_query",
    "SuggestionService",
    "SubmitThrottle",
]
