"""Tests for the SPARQL endpoint client, using httpx.MockTransport."""

import httpx
import pytest

from cognate_finder.core.schemas import SparqlError, SparqlResults
from cognate_finder.interop import SparqlClient

from conftest import DIGITUS_ROWS

ENDPOINT = "https://etytree.test/sparql"


def client_for(handler) -> SparqlClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return SparqlClient(ENDPOINT, http=http)


class TestSparqlClient:
    """execute() outcomes."""

    @pytest.mark.asyncio
    async def test_sends_query_as_get_parameter(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"head": {"vars": []}, "results": {"bindings": []}})

        async with client_for(handler) as client:
            await client.execute("SELECT * WHERE { ?s ?p ?o }")

        request = seen[0]
        assert request.method == "GET"
        assert request.url.params["query"] == "SELECT * WHERE { ?s ?p ?o }"
        assert request.headers["accept"] == "application/sparql-results+json"
        assert str(request.url).startswith(ENDPOINT)

    @pytest.mark.asyncio
    async def test_success_returns_rows(self):
        def handler(request):
            return httpx.Response(200, json={
                "head": {"vars": ["childWord", "childLang", "parentWord", "parentLang"]},
                "results": {"bindings": DIGITUS_ROWS},
            })

        async with client_for(handler) as client:
            result = await client.execute("q")

        assert isinstance(result, SparqlResults)
        assert result.rows == [
            {"childWord": "dedo", "childLang": "spa", "parentWord": "digitus", "parentLang": "lat"},
            {"childWord": "digit", "childLang": "eng", "parentWord": "digitus", "parentLang": "lat"},
        ]

    @pytest.mark.asyncio
    async def test_non_success_status_is_error_value(self):
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        async with client_for(handler) as client:
            result = await client.execute("q")

        assert result == SparqlError(error="Service Unavailable", status=503)

    @pytest.mark.asyncio
    async def test_transport_failure_has_no_status(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as client:
            result = await client.execute("q")

        assert isinstance(result, SparqlError)
        assert result.status is None
        assert "connection refused" in result.error

    @pytest.mark.asyncio
    async def test_malformed_json_is_empty_result(self):
        def handler(request):
            return httpx.Response(200, text="<html>not json</html>")

        async with client_for(handler) as client:
            result = await client.execute("q")

        assert isinstance(result, SparqlResults)
        assert result.rows == []

    @pytest.mark.asyncio
    async def test_missing_results_is_empty(self):
        def handler(request):
            return httpx.Response(200, json={"head": {"vars": ["childWord"]}})

        async with client_for(handler) as client:
            result = await client.execute("q")

        assert result.rows == []
        assert result.head.vars == ["childWord"]

    @pytest.mark.asyncio
    async def test_injected_http_client_is_not_closed(self):
        http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))

        async with SparqlClient(ENDPOINT, http=http):
            pass

        assert not http.is_closed
        await http.aclose()


class TestSparqlResultsParse:

    @pytest.mark.parametrize("payload", [None, [], "text", {"results": "nope"}])
    def test_malformed_payloads_degrade_to_empty(self, payload):
        assert SparqlResults.parse(payload).rows == []
