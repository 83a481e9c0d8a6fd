"""Dictionary definitions from Wiktionary.

Locates the definition list for a word in a given language within the
page's sections and rewrites its links so that Wiktionary entries point back
into cognate searches. Link rewriting is a pure transform over a parsed
BeautifulSoup tree.
"""

import copy
from typing import Mapping, Optional, Sequence
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from cognate_finder.config import Settings, get_settings
from cognate_finder.core.contracts import IWiktionaryClient
from cognate_finder.core.languages import DEFAULT_LANGUAGE_NAMES, language_name
from cognate_finder.core.params import make_cognate_finder_url
from cognate_finder.core.schemas import WiktionarySection
from cognate_finder.interop.wiktionary_client import unwikify
from cognate_finder.observ import get_logger
from cognate_finder.storage.cache import MemoCache

logger = get_logger(__name__)


# https://en.wiktionary.org/wiki/Wiktionary:Entry_layout#Part_of_speech
PARTS_OF_SPEECH = frozenset({
    # General
    "adjective", "adverb", "ambiposition", "article", "circumposition",
    "classifier", "conjunction", "contraction", "counter", "determiner",
    "ideophone", "interjection", "noun", "numeral", "participle", "particle",
    "postposition", "preposition", "pronoun", "proper noun", "verb",
    # Morphemes
    "circumfix", "combining form", "infix", "interfix", "prefix", "root",
    "suffix",
    # Symbols and characters
    "diacritical mark", "letter", "ligature", "number", "punctuation mark",
    "syllable", "symbol",
    # Phrases
    "phrase", "proverb", "prepositional phrase",
    # Han characters and language-specific varieties
    "han character", "hanzi", "kanji", "hanja",
    # Other
    "romanization", "logogram",
})

LANGUAGE_HEADING_LEVEL = 1
DEFAULT_LINK_LANG = "eng"
NEW_TAB = {"target": "_blank", "rel": "noreferrer noopener"}


def definition_key(word: str, lang_code: str) -> tuple[str, str]:
    """Cache key for a definition lookup."""
    return (word, lang_code)


def select_definition_section(
    sections: Sequence[WiktionarySection],
    language: str,
) -> str:
    """HTML of the first part-of-speech section under ``language``'s heading.

    Returns an empty string when the language heading or a part-of-speech
    section is missing.
    """
    start = next(
        (
            i for i, s in enumerate(sections)
            if s.toclevel == LANGUAGE_HEADING_LEVEL and s.line == language
        ),
        None,
    )
    if start is None:
        return ""

    end = next(
        (
            i for i in range(start + 1, len(sections))
            if sections[i].toclevel == LANGUAGE_HEADING_LEVEL
        ),
        len(sections),
    )

    for section in sections[start:end]:
        if section.line.strip().lower() in PARTS_OF_SPEECH:
            return section.text
    return ""


def rewrite_definition_tree(
    tree: BeautifulSoup,
    word: str,
    wiktionary_web: str,
    cognate_finder_url: str,
    language_codes: Mapping[str, str],
) -> BeautifulSoup:
    """Return a copy of ``tree`` with cleaned markup and rewritten links.

    - ``.maintenance-line`` elements are dropped
    - links off Wiktionary open in a new tab
    - links to a word in a known language become cognate searches
    - hash-only links (``#Latin``) search for ``word`` itself
    - special pages (title containing ``:`` or ``/``) and unknown languages
      become absolute Wiktionary links opening in a new tab

    Args:
        language_codes: Wiktionary language heading -> language code
    """
    tree = copy.copy(tree)
    wiki = urlparse(wiktionary_web)

    for element in tree.select(".maintenance-line"):
        element.decompose()

    for link in tree.select("a[href]"):
        raw_href = link["href"]
        url = urlparse(urljoin(wiktionary_web, raw_href))

        if (url.scheme, url.netloc) != (wiki.scheme, wiki.netloc):
            link.attrs.update(NEW_TAB)
            continue

        raw_word = url.path.removeprefix("/wiki/").lstrip("/")
        lang_name = unwikify(url.fragment)
        lang_code = language_codes.get(lang_name) if lang_name else DEFAULT_LINK_LANG
        is_hash_only = raw_href.startswith("#")

        if not is_hash_only and (not raw_word or ":" in raw_word or "/" in raw_word):
            special = True
        else:
            special = lang_code is None

        if special:
            link["href"] = url.geturl()
            link.attrs.update(NEW_TAB)
        else:
            target_word = word if is_hash_only else unwikify(raw_word)
            link["href"] = make_cognate_finder_url(
                cognate_finder_url, target_word, lang_code
            )

    return tree


def rewrite_definition_html(
    html: str,
    word: str,
    wiktionary_web: str,
    cognate_finder_url: str,
    language_codes: Mapping[str, str],
) -> str:
    """Rewrite a definition section and return its first ``<ol>`` (or "")."""
    if not html:
        return ""
    tree = rewrite_definition_tree(
        BeautifulSoup(html, "lxml"),
        word,
        wiktionary_web,
        cognate_finder_url,
        language_codes,
    )
    definitions = tree.find("ol")
    return str(definitions) if definitions else ""


class DefinitionService:
    """Fetches definition HTML for a word in a language, with caching.

    Page sections are cached per word; rendered definitions per
    ``(word, lang_code)``. The definition cache may be seeded from
    persisted session state.
    """

    def __init__(
        self,
        wiktionary: IWiktionaryClient,
        settings: Optional[Settings] = None,
        language_names: Mapping[str, str] = DEFAULT_LANGUAGE_NAMES,
        cache: Optional[MemoCache] = None,
    ):
        self._wiktionary = wiktionary
        self._settings = settings or get_settings()
        self._language_names = language_names
        self._language_codes = {name: code for code, name in language_names.items()}
        self._cache = cache if cache is not None else MemoCache()
        self._fetch_sections = MemoCache().wrap(self._wiktionary.fetch_sections)
        self._fetch_html = self._cache.wrap(self._render, key_getter=definition_key)

    @property
    def cache(self) -> MemoCache:
        return self._cache

    async def fetch_word_sections(self, word: str) -> list[WiktionarySection]:
        """Page sections for ``word``, fetched once per process."""
        return await self._fetch_sections(word)

    async def fetch_definition_html(self, word: str, lang_code: str) -> str:
        """Definition list HTML for ``word`` in ``lang_code``; "" if none."""
        return await self._fetch_html(word, lang_code)

    async def _render(self, word: str, lang_code: str) -> str:
        try:
            sections = await self._fetch_sections(word)
        except (httpx.HTTPError, ValueError) as e:
            logger.error(
                "definition_fetch_failed",
                word=word,
                lang_code=lang_code,
                error=str(e),
                error_type=type(e).__name__,
            )
            return ""

        html = select_definition_section(
            sections, language_name(lang_code, self._language_names)
        )
        return rewrite_definition_html(
            html,
            word,
            self._settings.wiktionary_web,
            self._settings.cognate_finder_url,
            self._language_codes,
        )
