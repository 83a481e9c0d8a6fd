"""Shareable search parameters.

Search state is mirrored into a URL query string so searches can be
bookmarked and shared:

    ?word=dedo&srcLang=spa&trgLang=eng&allowPrefixesAndSuffixes=false&page=2
"""

from typing import Optional, Sequence, TypeVar
from urllib.parse import parse_qs, urlencode

from .types import SearchParams


T = TypeVar("T")

DEFAULT_PARAMS = SearchParams(word="", src_lang="spa", trg_lang="eng")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


def to_query_string(params: SearchParams, page: Optional[int] = None) -> str:
    """Encode search parameters (and optionally the page) as a query string."""
    fields = {
        "word": params.word,
        "srcLang": params.src_lang,
        "trgLang": params.trg_lang,
        "allowPrefixesAndSuffixes": "true" if params.allow_prefixes_and_suffixes else "false",
    }
    if page is not None:
        fields["page"] = str(page)
    return urlencode(fields)


def from_query_string(
    query: str,
    defaults: SearchParams = DEFAULT_PARAMS,
) -> tuple[SearchParams, int]:
    """Decode a query string into search parameters and a page number.

    Missing or unparseable values fall back to ``defaults`` and page 1.
    """
    qs = parse_qs(query.lstrip("?"), keep_blank_values=True)

    def first(key: str) -> Optional[str]:
        values = qs.get(key)
        return values[0] if values else None

    flag = (first("allowPrefixesAndSuffixes") or "").strip().lower()
    if flag in _TRUE:
        allow = True
    elif flag in _FALSE:
        allow = False
    else:
        allow = defaults.allow_prefixes_and_suffixes

    word = first("word")

    params = SearchParams(
        word=word if word is not None else defaults.word,
        src_lang=first("srcLang") or defaults.src_lang,
        trg_lang=first("trgLang") or defaults.trg_lang,
        allow_prefixes_and_suffixes=allow,
    )

    try:
        page = max(1, int(first("page") or 1))
    except ValueError:
        page = 1

    return params, page


def make_cognate_finder_url(
    base_url: str,
    word: str,
    src_lang: str,
    trg_lang: Optional[str] = None,
) -> str:
    """Link to a search for ``word``; target language is optional."""
    fields = {"word": word, "srcLang": src_lang}
    if trg_lang:
        fields["trgLang"] = trg_lang
    return f"{base_url.rstrip('/')}/?{urlencode(fields)}"


def paginate(
    items: Sequence[T],
    page: int,
    page_size: int = 50,
) -> tuple[list[T], int]:
    """Return the items on ``page`` (1-based) and the last page number.

    Out-of-range pages are clamped; an empty sequence has one empty page.
    """
    max_page = max(1, -(-len(items) // page_size))
    page = min(max(1, page), max_page)
    start = (page - 1) * page_size
    return list(items[start:start + page_size]), max_page
