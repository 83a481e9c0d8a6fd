"""Response schemas for external endpoints.

Every endpoint response is narrowed here, at the boundary. Absent or
malformed fields fall back to the documented empty defaults instead of
raising, so a quirky upstream payload degrades to "no results".
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError


# ═════════════════════════════════════════════════════════════════════════════
# SPARQL 1.1 Query Results JSON
# ═════════════════════════════════════════════════════════════════════════════

class SparqlTerm(BaseModel):
    """One bound RDF term: {"type": "literal", "value": "dedo", ...}."""
    model_config = ConfigDict(extra="ignore")

    type: str = "literal"
    value: str = ""


class SparqlHead(BaseModel):
    model_config = ConfigDict(extra="ignore")

    vars: list[str] = Field(default_factory=list)


class SparqlResultSet(BaseModel):
    model_config = ConfigDict(extra="ignore")

    bindings: list[dict[str, SparqlTerm]] = Field(default_factory=list)


class SparqlResults(BaseModel):
    """Successful response of the graph store.

    Missing ``head`` or ``results`` default to empty.
    """
    model_config = ConfigDict(extra="ignore")

    head: SparqlHead = Field(default_factory=SparqlHead)
    results: SparqlResultSet = Field(default_factory=SparqlResultSet)

    @property
    def rows(self) -> list[dict[str, str]]:
        """Bindings flattened to plain variable -> value mappings."""
        return [
            {name: term.value for name, term in binding.items()}
            for binding in self.results.bindings
        ]

    @classmethod
    def parse(cls, payload: Any) -> "SparqlResults":
        """Narrow an arbitrary decoded JSON payload; never raises."""
        if not isinstance(payload, dict):
            return cls()
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return cls()


class SparqlError(BaseModel):
    """Failed graph-store request. ``status`` is None for transport errors."""
    model_config = ConfigDict(frozen=True)

    error: str
    status: Optional[int] = None


# ═════════════════════════════════════════════════════════════════════════════
# Wiktionary REST: page/mobile-sections
# ═════════════════════════════════════════════════════════════════════════════

class WiktionarySection(BaseModel):
    """One section of a Wiktionary page."""
    model_config = ConfigDict(extra="ignore")

    toclevel: int = 0
    line: str = ""
    text: str = ""


class _Remaining(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sections: list[WiktionarySection] = Field(default_factory=list)


class MobileSectionsResponse(BaseModel):
    """``{"remaining": {"sections": [...]}}``; ``remaining`` is optional."""
    model_config = ConfigDict(extra="ignore")

    remaining: Optional[_Remaining] = None

    @property
    def sections(self) -> list[WiktionarySection]:
        return self.remaining.sections if self.remaining else []

    @classmethod
    def parse(cls, payload: Any) -> "MobileSectionsResponse":
        if not isinstance(payload, dict):
            return cls()
        try:
            return cls.model_validate(payload)
        except ValidationError:
            return cls()


# ═════════════════════════════════════════════════════════════════════════════
# Wiktionary action API: opensearch
# ═════════════════════════════════════════════════════════════════════════════

def parse_opensearch(payload: Any) -> list[str]:
    """Extract suggestions from ``[input, suggestions, descriptions, urls]``."""
    if not isinstance(payload, list) or len(payload) < 2:
        return []
    suggestions = payload[1]
    if not isinstance(suggestions, list):
        return []
    return [s for s in suggestions if isinstance(s, str)]
