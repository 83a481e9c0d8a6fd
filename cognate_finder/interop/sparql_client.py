"""HTTP client for the etymology triple-store (SPARQL endpoint).

Single attempt per query, no retry: retry policy belongs to callers.
Failures come back as ``SparqlError`` values rather than exceptions.
"""

from time import perf_counter
from typing import Optional, Union

import httpx

from cognate_finder.core.contracts import IGraphStoreClient
from cognate_finder.core.schemas import SparqlError, SparqlResults
from cognate_finder.observ import get_logger, log_service_call

logger = get_logger(__name__)

SPARQL_RESULTS_JSON = "application/sparql-results+json"


class SparqlClient(IGraphStoreClient):
    """Executes SPARQL queries over HTTP GET.

    Usage:
        async with SparqlClient(endpoint) as client:
            result = await client.execute(query)
    """

    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self._endpoint = endpoint
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def execute(self, query: str) -> Union[SparqlResults, SparqlError]:
        """Run ``query`` and return its bindings, or an error value."""
        start = perf_counter()

        try:
            response = await self._http.get(
                self._endpoint,
                params={"query": query},
                headers={"Accept": SPARQL_RESULTS_JSON},
            )
        except httpx.HTTPError as e:
            log_service_call(
                logger, "graph_store", "query",
                duration_ms=(perf_counter() - start) * 1000,
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SparqlError(error=str(e) or type(e).__name__)

        duration_ms = (perf_counter() - start) * 1000

        if not response.is_success:
            log_service_call(
                logger, "graph_store", "query",
                duration_ms=duration_ms,
                success=False,
                status_code=response.status_code,
            )
            return SparqlError(status=response.status_code, error=response.text)

        try:
            payload = response.json()
        except ValueError:
            logger.warning("graph_store_malformed_json", body_preview=response.text[:100])
            payload = None

        results = SparqlResults.parse(payload)
        log_service_call(
            logger, "graph_store", "query",
            duration_ms=duration_ms,
            rows=len(results.results.bindings),
        )
        return results

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "SparqlClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
