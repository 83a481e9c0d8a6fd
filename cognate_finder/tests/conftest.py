"""Shared fixtures: settings, edge builders and a fake graph store."""

import asyncio
from typing import Optional

import pytest

from cognate_finder.config import Settings
from cognate_finder.core import CognateEdge, CognateRaw, SearchParams
from cognate_finder.core.schemas import SparqlError, SparqlResults


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        session_file=str(tmp_path / "session.json"),
        wiktionary_web="https://en.wiktionary.org/wiki/",
        cognate_finder_url="https://cognates.test/",
        include_identity_chains=False,
    )


def edge(child: str, child_lang: str, parent: str, parent_lang: str) -> CognateEdge:
    return CognateEdge(
        child_word=child,
        child_lang=child_lang,
        parent_word=parent,
        parent_lang=parent_lang,
    )


def raw_for(
    edges: list[CognateEdge],
    word: str = "dedo",
    src_lang: str = "spa",
    trg_lang: str = "eng",
    allow_prefixes_and_suffixes: bool = False,
) -> CognateRaw:
    return CognateRaw(
        edges=tuple(edges),
        params=SearchParams(
            word=word,
            src_lang=src_lang,
            trg_lang=trg_lang,
            allow_prefixes_and_suffixes=allow_prefixes_and_suffixes,
        ),
    )


def binding(child: str, child_lang: str, parent: str, parent_lang: str) -> dict:
    """One SPARQL JSON result row."""
    return {
        "childWord": {"type": "literal", "value": child},
        "childLang": {"type": "literal", "value": child_lang},
        "parentWord": {"type": "literal", "value": parent},
        "parentLang": {"type": "literal", "value": parent_lang},
    }


DIGITUS_ROWS = [
    binding("dedo", "spa", "digitus", "lat"),
    binding("digit", "eng", "digitus", "lat"),
]


class FakeGraphStore:
    """Records queries and answers with canned rows or an error."""

    def __init__(
        self,
        rows: Optional[list[dict]] = None,
        error: Optional[SparqlError] = None,
        delay: float = 0.0,
    ):
        self.rows = rows or []
        self.error = error
        self.delay = delay
        self.queries: list[str] = []

    async def execute(self, query: str):
        self.queries.append(query)
        await asyncio.sleep(self.delay)
        if self.error is not None:
            return self.error
        return SparqlResults.parse({
            "head": {"vars": ["childWord", "childLang", "parentWord", "parentLang"]},
            "results": {"bindings": self.rows},
        })


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds
