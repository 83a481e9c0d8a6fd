"""Autocomplete suggestions for the search box.

Lookups form a stream: each new request supersedes and cancels the one
still in flight. A superseded request resolves to ``None``; any other
failure propagates to the caller.
"""

import asyncio
from typing import Optional

from cognate_finder.core.contracts import IWiktionaryClient
from cognate_finder.observ import get_logger

logger = get_logger(__name__)


class SuggestionService:
    """One cancellable suggestion stream over the Wiktionary OpenSearch API."""

    def __init__(self, wiktionary: IWiktionaryClient):
        self._wiktionary = wiktionary
        self._inflight: Optional[asyncio.Task] = None

    async def suggest(self, text: str) -> Optional[list[str]]:
        """Suggestions for ``text``, or None if a newer request superseded it."""
        if not text:
            return []

        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()

        task = asyncio.ensure_future(self._wiktionary.opensearch(text))
        self._inflight = task

        try:
            return await task
        except asyncio.CancelledError:
            if self._inflight is not task:
                logger.debug("suggestion_superseded", text=text)
                return None
            raise
        finally:
            if self._inflight is task:
                self._inflight = None

    def cancel(self) -> None:
        """Abandon the in-flight request, if any."""
        if self._inflight is not None and not self._inflight.done():
            task, self._inflight = self._inflight, None
            task.cancel()
