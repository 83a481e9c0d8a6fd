"""Cognate retrieval service.

Orchestrates query building, graph-store execution and result mapping.
Outcomes are classified into two shapes:

- ``CognateRaw``: the query ran; it may hold zero edges ("no cognates for
  this word"), which is not an error
- ``CognateError``: the query could not be run or the store failed

Raw results are memoized per search; failures are not, so a repeated
search retries.
"""

from typing import Optional

from cognate_finder.config import Settings, get_settings
from cognate_finder.core import (
    CognateChain,
    CognateEdge,
    CognateError,
    CognateRaw,
    CognateResult,
    SearchParams,
    cognate_key,
)
from cognate_finder.core.contracts import IGraphStoreClient
from cognate_finder.core.schemas import SparqlError
from cognate_finder.errors import ValidationError
from cognate_finder.observ import get_logger, timer
from cognate_finder.services.hydrate import hydrate
from cognate_finder.services.query import RESULT_VARS, build_sparql_query
from cognate_finder.storage.cache import MemoCache

logger = get_logger(__name__)


class _FetchFailed(Exception):
    """Carries a CognateError out of the memoized call so it is not cached."""

    def __init__(self, error: CognateError):
        self.error = error
        super().__init__(error.error)


def rows_to_edges(rows: list[dict[str, str]]) -> tuple[CognateEdge, ...]:
    """Map result rows to edges, skipping rows with a missing or empty value."""
    edges = []
    for row in rows:
        values = [row.get(var) for var in RESULT_VARS]
        if not all(values):
            continue
        child_word, child_lang, parent_word, parent_lang = values
        edges.append(CognateEdge(
            child_word=child_word,
            child_lang=child_lang,
            parent_word=parent_word,
            parent_lang=parent_lang,
        ))
    return tuple(edges)


class CognateService:
    """Fetches raw cognate edges and hydrates them into chains."""

    def __init__(
        self,
        graph_store: IGraphStoreClient,
        settings: Optional[Settings] = None,
        cache: Optional[MemoCache] = None,
    ):
        self._graph_store = graph_store
        self._settings = settings or get_settings()
        self._cache = cache if cache is not None else MemoCache()
        self._fetch_raw = self._cache.wrap(self._query_edges, key_getter=cognate_key)

    @property
    def cache(self) -> MemoCache:
        return self._cache

    async def fetch_cognates(
        self,
        word: str,
        src_lang: str,
        trg_lang: str,
        allow_prefixes_and_suffixes: bool = False,
    ) -> CognateResult:
        """Fetch the raw derivation edges connecting ``word`` to ``trg_lang``.

        Never raises for expected failures: invalid input and graph-store
        failures are returned as ``CognateError``.
        """
        params = SearchParams(
            word=word,
            src_lang=src_lang,
            trg_lang=trg_lang,
            allow_prefixes_and_suffixes=allow_prefixes_and_suffixes,
        )

        try:
            query = build_sparql_query(params, self._settings)
        except ValidationError as e:
            logger.info("cognate_query_rejected", reason=e.message, field=e.field)
            return CognateError(error=e.message, status=400)

        try:
            return await self._fetch_raw(
                query.params.word,
                query.params.src_lang,
                query.params.trg_lang,
                query.params.allow_prefixes_and_suffixes,
            )
        except _FetchFailed as e:
            return e.error

    def hydrate(self, raw: CognateRaw) -> list[CognateChain]:
        """Chains for ``raw`` under the configured identity-chain policy."""
        with timer(logger, "hydrate", word=raw.params.word, edges=len(raw.edges)):
            return hydrate(raw, self._settings.include_identity_chains)

    async def _query_edges(
        self,
        word: str,
        src_lang: str,
        trg_lang: str,
        allow_prefixes_and_suffixes: bool,
    ) -> CognateRaw:
        query = build_sparql_query(
            SearchParams(
                word=word,
                src_lang=src_lang,
                trg_lang=trg_lang,
                allow_prefixes_and_suffixes=allow_prefixes_and_suffixes,
            ),
            self._settings,
        )

        result = await self._graph_store.execute(query.sparql)

        if isinstance(result, SparqlError):
            logger.warning(
                "cognate_fetch_failed",
                word=word,
                src_lang=src_lang,
                trg_lang=trg_lang,
                status=result.status,
            )
            raise _FetchFailed(CognateError(error=result.error, status=result.status))

        edges = rows_to_edges(result.rows)
        logger.info(
            "cognates_fetched",
            word=word,
            src_lang=src_lang,
            trg_lang=trg_lang,
            rows=len(result.rows),
            edges=len(edges),
        )
        return CognateRaw(edges=edges, params=query.params, query=query.sparql)
