"""HTTP client for Wiktionary (REST page sections + OpenSearch).

Unlike the graph-store client this one raises ``httpx.HTTPError``; the
services built on it decide whether a failure is swallowed (definitions)
or propagated (suggestions).
"""

from time import perf_counter
from typing import Optional
from urllib.parse import quote, unquote

import httpx

from cognate_finder.core.contracts import IWiktionaryClient
from cognate_finder.core.schemas import (
    MobileSectionsResponse,
    WiktionarySection,
    parse_opensearch,
)
from cognate_finder.observ import get_logger, log_service_call

logger = get_logger(__name__)


def wikify(word: str) -> str:
    """Page title for ``word`` as it appears in a Wiktionary URL path."""
    return quote(word.replace(" ", "_"), safe="")


def unwikify(title: str) -> str:
    """Inverse of :func:`wikify`."""
    return unquote(title).replace("_", " ")


class WiktionaryClient(IWiktionaryClient):
    """Async client for the Wiktionary endpoints used by auxiliary lookups."""

    def __init__(
        self,
        rest_api: str,
        action_api: str,
        timeout: float = 30.0,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self._rest_api = rest_api.rstrip("/")
        self._action_api = action_api
        self._owns_http = http is None
        self._http = http or httpx.AsyncClient(timeout=timeout)

    async def fetch_sections(self, word: str) -> list[WiktionarySection]:
        """Sections of the page for ``word``; empty if the payload lacks them."""
        url = f"{self._rest_api}/rest_v1/page/mobile-sections/{wikify(word)}"
        response = await self._get("mobile_sections", url)
        sections = MobileSectionsResponse.parse(response.json()).sections
        logger.debug("wiktionary_sections_fetched", word=word, sections=len(sections))
        return sections

    async def opensearch(self, text: str) -> list[str]:
        """Title suggestions for the partial input ``text``."""
        response = await self._get(
            "opensearch",
            self._action_api,
            params={"action": "opensearch", "search": text, "format": "json"},
        )
        return parse_opensearch(response.json())

    async def _get(self, operation: str, url: str, **kwargs) -> httpx.Response:
        start = perf_counter()
        try:
            response = await self._http.get(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            log_service_call(
                logger, "wiktionary", operation,
                duration_ms=(perf_counter() - start) * 1000,
                success=False,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        log_service_call(
            logger, "wiktionary", operation,
            duration_ms=(perf_counter() - start) * 1000,
        )
        return response

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def __aenter__(self) -> "WiktionaryClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
