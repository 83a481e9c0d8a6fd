"""Service contracts and interfaces.

Defines protocols for dependency injection and testing.
"""

from typing import Protocol, Union

from .schemas import SparqlResults, SparqlError, WiktionarySection


class IGraphStoreClient(Protocol):
    """Contract for graph-store query execution.

    Implementations return errors as values; they never raise across the
    call boundary.
    """

    async def execute(self, query: str) -> Union[SparqlResults, SparqlError]:
        """Run a SPARQL query and return its bindings or an error."""
        ...


class IWiktionaryClient(Protocol):
    """Contract for the Wiktionary endpoints used by auxiliary lookups."""

    async def fetch_sections(self, word: str) -> list[WiktionarySection]:
        """Fetch the sections of the page for ``word``."""
        ...

    async def opensearch(self, text: str) -> list[str]:
        """Fetch title suggestions for partial input ``text``."""
        ...
