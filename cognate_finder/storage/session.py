"""Durable session state.

Keeps the last submitted search, its raw result, the generated query and
the last fetched definition in a JSON file, so a restarted process can
resume where the user left off and pre-seed its caches without a network
round trip.
"""

from pathlib import Path
from typing import Optional

import orjson
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as SchemaError

from cognate_finder.core import CognateKey, CognateRaw, SearchParams, cognate_key
from cognate_finder.observ import get_logger

logger = get_logger(__name__)


class DefinitionRecord(BaseModel):
    """Rendered definition HTML for one (word, language)."""
    model_config = ConfigDict(frozen=True)

    word: str
    lang_code: str
    html: str


class SessionState(BaseModel):
    """Everything persisted between runs. All fields empty until a search."""
    model_config = ConfigDict(frozen=True)

    values: Optional[SearchParams] = None
    cognates: Optional[CognateRaw] = None
    query: Optional[str] = None
    definition: Optional[DefinitionRecord] = None


class SessionStore:
    """JSON-file backed session state.

    A missing or unreadable file yields an empty session rather than an error.
    """

    def __init__(self, filepath: Path | str):
        self.filepath = Path(filepath)
        self.state = SessionState()
        self._load()

    def _load(self) -> None:
        """Load session from disk."""
        if not self.filepath.exists():
            return
        try:
            with open(self.filepath, "rb") as f:
                self.state = SessionState.model_validate(orjson.loads(f.read()))
        except (OSError, orjson.JSONDecodeError, SchemaError) as e:
            logger.warning("session_load_failed", path=str(self.filepath), error=str(e))
            self.state = SessionState()

    def save(self) -> None:
        """Save session to disk."""
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(self.filepath, "wb") as f:
            f.write(orjson.dumps(self.state.model_dump(mode="json")))

    @property
    def has_searched(self) -> bool:
        return self.state.values is not None

    def record_search(self, raw: CognateRaw) -> None:
        """Make ``raw`` the current result, superseding the previous search."""
        self.state = self.state.model_copy(update={
            "values": raw.params,
            "cognates": raw,
            "query": raw.query,
        })
        self.save()
        logger.debug("session_search_recorded", word=raw.params.word, edges=len(raw.edges))

    def record_definition(self, word: str, lang_code: str, html: str) -> None:
        self.state = self.state.model_copy(update={
            "definition": DefinitionRecord(word=word, lang_code=lang_code, html=html),
        })
        self.save()

    def definition_seed(self) -> dict[tuple[str, str], str]:
        """Entries to pre-seed the definition cache with."""
        record = self.state.definition
        if record is None:
            return {}
        return {(record.word, record.lang_code): record.html}

    def cognate_seed(self) -> dict[CognateKey, CognateRaw]:
        """Entries to pre-seed the cognate cache with."""
        raw = self.state.cognates
        if raw is None:
            return {}
        params = raw.params
        key = cognate_key(
            params.word, params.src_lang, params.trg_lang, params.allow_prefixes_and_suffixes
        )
        return {key: raw}
