"""Core type definitions for cognate resolution.

Provides immutable domain models with strict typing.
All entities are Pydantic models for validation and serialization.
"""

from typing import Optional, Union
from pydantic import BaseModel, Field, ConfigDict


class WordRef(BaseModel):
    """A word in a given language. Identity is (word, lang_code)."""
    model_config = ConfigDict(frozen=True)

    word: str
    lang_code: str

    @property
    def key(self) -> tuple[str, str]:
        return (self.word, self.lang_code)

    def __str__(self) -> str:
        return f"{self.word} ({self.lang_code})"


class CognateEdge(BaseModel):
    """One derivation step: child is derived from parent."""
    model_config = ConfigDict(frozen=True)

    child_word: str
    child_lang: str
    parent_word: str
    parent_lang: str

    @property
    def child(self) -> WordRef:
        return WordRef(word=self.child_word, lang_code=self.child_lang)

    @property
    def parent(self) -> WordRef:
        return WordRef(word=self.parent_word, lang_code=self.parent_lang)


class SearchParams(BaseModel):
    """Parameters of one cognate search."""
    model_config = ConfigDict(frozen=True)

    word: str
    src_lang: str
    trg_lang: str
    allow_prefixes_and_suffixes: bool = False

    @property
    def source(self) -> WordRef:
        return WordRef(word=self.word.strip(), lang_code=self.src_lang)


class SparqlQuery(BaseModel):
    """Generated query text along with the parameters it encodes."""
    model_config = ConfigDict(frozen=True)

    sparql: str
    params: SearchParams


class CognateRaw(BaseModel):
    """Unprocessed query result: derivation edges plus their origin."""
    model_config = ConfigDict(frozen=True)

    edges: tuple[CognateEdge, ...] = ()
    params: SearchParams
    query: str = ""


class CognateChain(BaseModel):
    """Hydrated lineage from a common ancestor to source and target words.

    ``src`` runs from the word just below ``ancestor`` down to the source
    word; ``trg`` likewise down to the target word.
    """
    model_config = ConfigDict(frozen=True)

    ancestor: WordRef
    src: tuple[WordRef, ...] = Field(min_length=1)
    trg: tuple[WordRef, ...] = Field(min_length=1)

    @property
    def target(self) -> WordRef:
        return self.trg[-1]


class CognateError(BaseModel):
    """Terminal, non-retryable failure of a cognate request."""
    model_config = ConfigDict(frozen=True)

    error: str
    status: Optional[int] = None


CognateResult = Union[CognateRaw, CognateError]


def is_cognate_error(result: CognateResult) -> bool:
    """Discriminate a failed fetch from a (possibly empty) raw result."""
    return isinstance(result, CognateError)


CognateKey = tuple[str, str, str, bool]


def cognate_key(
    word: str,
    src_lang: str,
    trg_lang: str,
    allow_prefixes_and_suffixes: bool = False,
) -> CognateKey:
    """Cache key for one search."""
    return (word.strip(), src_lang, trg_lang, bool(allow_prefixes_and_suffixes))
