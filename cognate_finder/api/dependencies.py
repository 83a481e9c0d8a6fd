"""Dependency injection container for services.

Provides singleton service instances so HTTP connection pools and caches
are shared across requests. Services are initialized once at application
startup and reused until shutdown.
"""

from typing import Optional

from cognate_finder.config import Settings, get_settings
from cognate_finder.interop import SparqlClient, WiktionaryClient
from cognate_finder.observ import get_logger
from cognate_finder.services import (
    CognateService,
    DefinitionService,
    HydrationCache,
    SubmitThrottle,
    SuggestionService,
)
from cognate_finder.storage import MemoCache, SessionStore

logger = get_logger(__name__)


class ServiceContainer:
    """Container for singleton service instances."""

    _sparql_client: Optional[SparqlClient] = None
    _wiktionary_client: Optional[WiktionaryClient] = None
    _cognate_service: Optional[CognateService] = None
    _definition_service: Optional[DefinitionService] = None
    _suggestion_service: Optional[SuggestionService] = None
    _submit_throttle: Optional[SubmitThrottle] = None
    _session_store: Optional[SessionStore] = None
    _hydration_cache: Optional[HydrationCache] = None

    @classmethod
    def initialize(cls, settings: Optional[Settings] = None) -> None:
        """Initialize all services at application startup.

        Caches are seeded from the persisted session so the last search and
        definition are served without a network round trip.
        """
        settings = settings or get_settings()
        logger.info("services_initializing", sparql_endpoint=settings.sparql_endpoint)

        cls._session_store = SessionStore(settings.session_file)

        cls._sparql_client = SparqlClient(
            settings.sparql_endpoint,
            timeout=settings.http_timeout,
        )
        cls._wiktionary_client = WiktionaryClient(
            settings.wiktionary_rest_api,
            settings.wiktionary_action_api,
            timeout=settings.http_timeout,
        )

        cls._cognate_service = CognateService(
            graph_store=cls._sparql_client,
            settings=settings,
            cache=MemoCache(cls._session_store.cognate_seed()),
        )
        cls._definition_service = DefinitionService(
            wiktionary=cls._wiktionary_client,
            settings=settings,
            cache=MemoCache(cls._session_store.definition_seed()),
        )
        cls._suggestion_service = SuggestionService(cls._wiktionary_client)
        cls._submit_throttle = SubmitThrottle(settings.submit_interval)
        cls._hydration_cache = HydrationCache(settings.include_identity_chains)

        logger.info("services_initialized", resumed=cls._session_store.has_searched)

    @classmethod
    def _require(cls, attr: str, name: str):
        service = getattr(cls, attr)
        if service is None:
            raise RuntimeError(
                f"{name} not initialized. "
                "Ensure ServiceContainer.initialize() is called at startup."
            )
        return service

    @classmethod
    def get_cognate_service(cls) -> CognateService:
        """Get singleton cognate service instance."""
        return cls._require("_cognate_service", "CognateService")

    @classmethod
    def get_definition_service(cls) -> DefinitionService:
        """Get singleton definition service instance."""
        return cls._require("_definition_service", "DefinitionService")

    @classmethod
    def get_suggestion_service(cls) -> SuggestionService:
        """Get singleton suggestion service instance."""
        return cls._require("_suggestion_service", "SuggestionService")

    @classmethod
    def get_submit_throttle(cls) -> SubmitThrottle:
        return cls._require("_submit_throttle", "SubmitThrottle")

    @classmethod
    def get_session_store(cls) -> SessionStore:
        return cls._require("_session_store", "SessionStore")

    @classmethod
    def get_hydration_cache(cls) -> HydrationCache:
        return cls._require("_hydration_cache", "HydrationCache")

    @classmethod
    async def cleanup(cls) -> None:
        """Close HTTP clients and drop references at application shutdown."""
        if cls._sparql_client is not None:
            await cls._sparql_client.aclose()
        if cls._wiktionary_client is not None:
            await cls._wiktionary_client.aclose()

        cls._sparql_client = None
        cls._wiktionary_client = None
        cls._cognate_service = None
        cls._definition_service = None
        cls._suggestion_service = None
        cls._submit_throttle = None
        cls._session_store = None
        cls._hydration_cache = None
        logger.info("services_cleaned_up")


# FastAPI dependency functions
def get_cognate_service() -> CognateService:
    """Provide cognate service instance for dependency injection."""
    return ServiceContainer.get_cognate_service()


def get_definition_service() -> DefinitionService:
    """Provide definition service instance for dependency injection."""
    return ServiceContainer.get_definition_service()


def get_suggestion_service() -> SuggestionService:
    """Provide suggestion service instance for dependency injection."""
    return ServiceContainer.get_suggestion_service()


def get_submit_throttle() -> SubmitThrottle:
    return ServiceContainer.get_submit_throttle()


def get_session_store() -> SessionStore:
    return ServiceContainer.get_session_store()


def get_hydration_cache() -> HydrationCache:
    return ServiceContainer.get_hydration_cache()


def get_app_settings() -> Settings:
    return get_settings()
