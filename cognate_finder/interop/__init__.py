"""Interoperability layer for external services.

Provides clients for:
- Etymology triple-store: SPARQL queries over HTTP
- Wiktionary: page sections and title suggestions
"""

from .sparql_client import SparqlClient
from .wiktionary_client import WiktionaryClient

__all__ = [
    "SparqlClient",
    "WiktionaryClient",
]
