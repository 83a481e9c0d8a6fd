"""Application configuration management.

Loads settings from environment with validation.
"""

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COGNATES_",
        case_sensitive=False
    )

    # Graph store (etytree)
    sparql_endpoint: str = "https://etytree-virtuoso.wmflabs.org/sparql"
    sparql_prefixes: dict[str, str] = Field(default={
        "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
        "dcterms": "http://purl.org/dc/terms/",
        "ety": "http://etytree-virtuoso.wmflabs.org/dbnaryetymology#",
    })
    derivation_predicate: str = "ety:etymologicallyDerivesFrom"
    label_predicate: str = "rdfs:label"
    language_predicate: str = "dcterms:language"

    # Wiktionary
    wiktionary_rest_api: str = "https://en.wiktionary.org/api"
    wiktionary_action_api: str = "https://en.wiktionary.org/w/api.php"
    wiktionary_web: str = "https://en.wiktionary.org/wiki/"

    # Links generated into rewritten definitions
    cognate_finder_url: str = "http://localhost:8000/"

    # HTTP
    http_timeout: float = 30.0

    # Search behaviour
    page_size: int = 50
    include_identity_chains: bool = False
    submit_interval: float = 1.0
    session_file: str = ".cognate_finder/session.json"

    # API
    api_port: int = 8000
    api_host: str = "0.0.0.0"
    cors_origins: list[str] = Field(default=["http://localhost:5173"])

    # Development
    debug: bool = False
    log_level: str = "INFO"

    @property
    def sparql_prologue(self) -> str:
        """PREFIX declarations for every generated query."""
        return "\n".join(
            f"PREFIX {name}: <{iri}>"
            for name, iri in self.sparql_prefixes.items()
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
