"""FastAPI route definitions.

Thin routing layer that delegates to services.
Graph-store failures surface as application errors, rendered by the
exception handlers in ``cognate_finder.main``.
"""

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from cognate_finder.config import Settings
from cognate_finder.core import (
    CognateChain,
    CognateError,
    CognateRaw,
    SearchParams,
    is_cognate_error,
)
from cognate_finder.core.params import paginate, to_query_string
from cognate_finder.services import (
    CognateService,
    DefinitionService,
    HydrationCache,
    SubmitThrottle,
    SuggestionService,
)
from cognate_finder.services.query import validate_params
from cognate_finder.storage import SessionStore
from cognate_finder.api.dependencies import (
    get_app_settings,
    get_cognate_service,
    get_definition_service,
    get_hydration_cache,
    get_session_store,
    get_submit_throttle,
    get_suggestion_service,
)
from cognate_finder.observ import bind_search, get_logger
from cognate_finder.errors import GraphStoreError, RateLimitError


logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1")


class CognatesPage(BaseModel):
    """One page of hydrated chains for a search."""

    status: Literal["ok", "empty"]
    params: SearchParams
    page: int
    max_page: int
    total: int
    chains: list[CognateChain]
    query: str
    share: str


class SessionView(BaseModel):
    """Resumable state: distinguishes never-searched from empty results."""

    status: Literal["never_searched", "ok", "empty"]
    params: Optional[SearchParams] = None
    total: int = 0
    query: Optional[str] = None
    share: Optional[str] = None


class SearchRequest(BaseModel):
    word: str
    src_lang: str
    trg_lang: str
    allow_prefixes_and_suffixes: bool = False


def _raise_for_error(error: CognateError) -> None:
    # Input is validated up front, so any error here came from the graph store
    raise GraphStoreError(error.error, upstream_status=error.status)


def _page_of(
    raw: CognateRaw,
    chains: list[CognateChain],
    page: int,
    page_size: int,
) -> CognatesPage:
    items, max_page = paginate(chains, page, page_size)
    page = min(max(1, page), max_page)
    return CognatesPage(
        status="ok" if chains else "empty",
        params=raw.params,
        page=page,
        max_page=max_page,
        total=len(chains),
        chains=items,
        query=raw.query,
        share=to_query_string(raw.params, page),
    )


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@router.get("/cognates")
async def get_cognates(
    word: str = Query(..., min_length=1),
    src_lang: str = Query(..., alias="srcLang"),
    trg_lang: str = Query(..., alias="trgLang"),
    allow_prefixes_and_suffixes: bool = Query(False, alias="allowPrefixesAndSuffixes"),
    page: int = Query(1, ge=1),
    cognates: CognateService = Depends(get_cognate_service),
    hydrated: HydrationCache = Depends(get_hydration_cache),
    settings: Settings = Depends(get_app_settings),
) -> CognatesPage:
    """Find cognates of ``word`` in ``trgLang``; does not touch the session."""
    bind_search(word, src_lang, trg_lang)
    params = validate_params(SearchParams(
        word=word,
        src_lang=src_lang,
        trg_lang=trg_lang,
        allow_prefixes_and_suffixes=allow_prefixes_and_suffixes,
    ))
    logger.info("cognates_requested", word=word, src_lang=src_lang, trg_lang=trg_lang)

    result = await cognates.fetch_cognates(
        params.word, params.src_lang, params.trg_lang, params.allow_prefixes_and_suffixes
    )
    if is_cognate_error(result):
        _raise_for_error(result)

    return _page_of(result, hydrated(result), page, settings.page_size)


@router.post("/search")
async def submit_search(
    request: SearchRequest,
    cognates: CognateService = Depends(get_cognate_service),
    hydrated: HydrationCache = Depends(get_hydration_cache),
    throttle: SubmitThrottle = Depends(get_submit_throttle),
    session: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_app_settings),
) -> CognatesPage:
    """Submit a search: rate limited, and recorded as the session's current one."""
    bind_search(request.word, request.src_lang, request.trg_lang)
    params = validate_params(SearchParams(**request.model_dump()))
    if not throttle.try_acquire():
        raise RateLimitError(1, f"{throttle.interval:g}s", retry_after=throttle.retry_after())

    result = await cognates.fetch_cognates(
        params.word, params.src_lang, params.trg_lang, params.allow_prefixes_and_suffixes
    )
    if is_cognate_error(result):
        _raise_for_error(result)

    session.record_search(result)
    return _page_of(result, hydrated(result), 1, settings.page_size)


@router.get("/session")
async def get_session(
    session: SessionStore = Depends(get_session_store),
    hydrated: HydrationCache = Depends(get_hydration_cache),
) -> SessionView:
    """Last submitted search, for resuming a client."""
    state = session.state
    if state.values is None or state.cognates is None:
        return SessionView(status="never_searched")

    total = len(hydrated(state.cognates))
    return SessionView(
        status="ok" if total else "empty",
        params=state.values,
        total=total,
        query=state.query,
        share=to_query_string(state.values),
    )


@router.get("/definitions")
async def get_definition(
    word: str = Query(..., min_length=1),
    lang: str = Query(..., min_length=2),
    definitions: DefinitionService = Depends(get_definition_service),
    session: SessionStore = Depends(get_session_store),
) -> dict[str, str]:
    """Definition list HTML for ``word`` in ``lang`` ("" when unavailable)."""
    html = await definitions.fetch_definition_html(word, lang)

    values = session.state.values
    if html and values is not None and (values.word, values.src_lang) == (word, lang):
        session.record_definition(word, lang, html)

    return {"html": html}


@router.get("/suggestions")
async def get_suggestions(
    q: str = Query(""),
    suggestions: SuggestionService = Depends(get_suggestion_service),
) -> dict:
    """Autocomplete; a request superseded by a newer one returns no options."""
    result = await suggestions.suggest(q)
    return {"suggestions": result or [], "superseded": result is None}
