"""Tests for CognateService: result classification, caching, hydration."""

import asyncio

import pytest

from cognate_finder.core import CognateError, CognateRaw, cognate_key, is_cognate_error
from cognate_finder.core.schemas import SparqlError
from cognate_finder.services import CognateService
from cognate_finder.services.cognate import rows_to_edges
from cognate_finder.storage import MemoCache

from conftest import DIGITUS_ROWS, FakeGraphStore, binding, raw_for


class TestFetchCognates:
    """fetch_cognates outcomes."""

    @pytest.mark.asyncio
    async def test_rows_become_edges(self, settings):
        store = FakeGraphStore(DIGITUS_ROWS)
        service = CognateService(store, settings)

        result = await service.fetch_cognates("dedo", "spa", "eng")

        assert isinstance(result, CognateRaw)
        assert [(e.child_word, e.parent_word) for e in result.edges] == [
            ("dedo", "digitus"),
            ("digit", "digitus"),
        ]
        assert result.params.word == "dedo"
        assert result.query == store.queries[0]

    @pytest.mark.asyncio
    async def test_zero_rows_is_not_an_error(self, settings):
        service = CognateService(FakeGraphStore([]), settings)

        result = await service.fetch_cognates("qwxz", "spa", "eng")

        assert not is_cognate_error(result)
        assert result.edges == ()

    @pytest.mark.asyncio
    async def test_store_failure_is_error_value(self, settings):
        store = FakeGraphStore(error=SparqlError(error="Bad Gateway", status=502))
        service = CognateService(store, settings)

        result = await service.fetch_cognates("dedo", "spa", "eng")

        assert result == CognateError(error="Bad Gateway", status=502)

    @pytest.mark.asyncio
    async def test_errors_are_not_cached(self, settings):
        store = FakeGraphStore(error=SparqlError(error="timeout"))
        service = CognateService(store, settings)

        first = await service.fetch_cognates("dedo", "spa", "eng")
        assert is_cognate_error(first)
        assert first.status is None

        store.error = None
        store.rows = DIGITUS_ROWS
        second = await service.fetch_cognates("dedo", "spa", "eng")

        assert isinstance(second, CognateRaw)
        assert len(store.queries) == 2

    @pytest.mark.asyncio
    async def test_success_is_cached(self, settings):
        store = FakeGraphStore(DIGITUS_ROWS)
        service = CognateService(store, settings)

        first = await service.fetch_cognates("dedo", "spa", "eng")
        second = await service.fetch_cognates(" dedo ", "spa", "eng")

        assert second is first
        assert len(store.queries) == 1
        assert cognate_key("dedo", "spa", "eng", False) in service.cache

    @pytest.mark.asyncio
    async def test_concurrent_searches_share_one_query(self, settings):
        store = FakeGraphStore(DIGITUS_ROWS, delay=0.02)
        service = CognateService(store, settings)

        results = await asyncio.gather(
            *(service.fetch_cognates("dedo", "spa", "eng") for _ in range(3))
        )

        assert len(store.queries) == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.asyncio
    async def test_affix_flag_is_part_of_the_key(self, settings):
        store = FakeGraphStore(DIGITUS_ROWS)
        service = CognateService(store, settings)

        await service.fetch_cognates("dedo", "spa", "eng", False)
        await service.fetch_cognates("dedo", "spa", "eng", True)

        assert len(store.queries) == 2

    @pytest.mark.asyncio
    async def test_empty_word_rejected_without_query(self, settings):
        store = FakeGraphStore(DIGITUS_ROWS)
        service = CognateService(store, settings)

        result = await service.fetch_cognates("   ", "spa", "eng")

        assert is_cognate_error(result)
        assert result.status == 400
        assert store.queries == []

    @pytest.mark.asyncio
    async def test_invalid_language_rejected(self, settings):
        store = FakeGraphStore(DIGITUS_ROWS)
        service = CognateService(store, settings)

        result = await service.fetch_cognates("dedo", "spa", "not a code")

        assert result.status == 400
        assert "not a code" in result.error
        assert store.queries == []

    @pytest.mark.asyncio
    async def test_seeded_cache_skips_store(self, settings):
        raw = raw_for([])
        store = FakeGraphStore(DIGITUS_ROWS)
        cache = MemoCache({cognate_key("dedo", "spa", "eng"): raw})
        service = CognateService(store, settings, cache=cache)

        assert await service.fetch_cognates("dedo", "spa", "eng") is raw
        assert store.queries == []


class TestHydration:

    @pytest.mark.asyncio
    async def test_fetch_then_hydrate(self, settings):
        service = CognateService(FakeGraphStore(DIGITUS_ROWS), settings)

        raw = await service.fetch_cognates("dedo", "spa", "eng")
        chains = service.hydrate(raw)

        assert len(chains) == 1
        assert str(chains[0].ancestor) == "digitus (lat)"
        assert [str(r) for r in chains[0].src] == ["dedo (spa)"]
        assert [str(r) for r in chains[0].trg] == ["digit (eng)"]

    @pytest.mark.asyncio
    async def test_identity_policy_follows_settings(self, settings):
        rows = [
            binding("dedo", "spa", "digitus", "lat"),
            binding("dedal", "spa", "digitus", "lat"),
        ]
        strict = CognateService(FakeGraphStore(rows), settings)
        loose = CognateService(
            FakeGraphStore(rows),
            settings.model_copy(update={"include_identity_chains": True}),
        )

        raw = await strict.fetch_cognates("dedo", "spa", "spa")

        assert len(strict.hydrate(raw)) == 1
        assert len(loose.hydrate(raw)) == 3


class TestRowsToEdges:

    def test_skips_incomplete_rows(self):
        rows = [
            {"childWord": "dedo", "childLang": "spa", "parentWord": "digitus", "parentLang": "lat"},
            {"childWord": "digit", "childLang": "eng", "parentWord": "digitus"},
            {"childWord": "", "childLang": "eng", "parentWord": "digitus", "parentLang": "lat"},
        ]

        edges = rows_to_edges(rows)

        assert len(edges) == 1
        assert edges[0].child_word == "dedo"
