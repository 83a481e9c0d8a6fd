"""Type-safe exception hierarchy and error codes.

Provides structured error handling with:
- Domain-specific exception taxonomy
- HTTP status code mapping
- Structured error details
- FastAPI integration via exception handlers

Fetch boundaries (graph store, Wiktionary) do not raise these; they return
error values. The exceptions here are raised at the edges where a caller
has to be told no: input validation, API responses and rate limiting.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class ErrorCode(str, Enum):
    """Type-safe error codes for API responses."""

    # Validation errors (400)
    INVALID_INPUT = "invalid_input"
    INVALID_LANGUAGE = "invalid_language"
    EMPTY_WORD = "empty_word"

    # Resource limits (429)
    RATE_LIMIT_EXCEEDED = "rate_limit_exceeded"

    # Service errors (500/502)
    INTERNAL_ERROR = "internal_error"
    GRAPH_STORE_ERROR = "graph_store_error"


class ErrorDetail(BaseModel):
    """Structured error information for API responses."""

    code: ErrorCode
    message: str
    field: Optional[str] = None
    context: dict = Field(default_factory=dict)


class CognateFinderError(Exception):
    """Base exception for all application errors.

    Provides structured error information and HTTP status mapping.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        field: Optional[str] = None,
        status_code: int = 500,
        **context
    ):
        self.code = code
        self.message = message
        self.field = field
        self.status_code = status_code
        self.context = context
        super().__init__(message)

    def to_detail(self) -> ErrorDetail:
        """Convert to API error detail."""
        return ErrorDetail(
            code=self.code,
            message=self.message,
            field=self.field,
            context=self.context
        )


# ═════════════════════════════════════════════════════════════════════════════
# Validation Errors (400)
# ═════════════════════════════════════════════════════════════════════════════

class ValidationError(CognateFinderError):
    """Invalid input data."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.INVALID_INPUT,
        field: Optional[str] = None,
        **context
    ):
        super().__init__(
            code=code,
            message=message,
            field=field,
            status_code=400,
            **context
        )


class EmptyWordError(ValidationError):
    """Search word is empty after trimming."""

    def __init__(self):
        super().__init__(
            message="Word must not be empty",
            code=ErrorCode.EMPTY_WORD,
            field="word"
        )


class InvalidLanguageError(ValidationError):
    """Language code is not supported or malformed."""

    def __init__(self, language: str, field: str = "language"):
        super().__init__(
            message=f"Invalid language code: {language}",
            code=ErrorCode.INVALID_LANGUAGE,
            field=field,
            language=language
        )


# ═════════════════════════════════════════════════════════════════════════════
# Rate Limiting (429)
# ═════════════════════════════════════════════════════════════════════════════

class RateLimitError(CognateFinderError):
    """Rate limit exceeded."""

    def __init__(self, limit: int, window: str, retry_after: Optional[float] = None):
        message = f"Rate limit exceeded: {limit} requests per {window}"
        if retry_after:
            message += f". Retry after {retry_after:.1f}s"

        super().__init__(
            code=ErrorCode.RATE_LIMIT_EXCEEDED,
            message=message,
            status_code=429,
            limit=limit,
            window=window,
            retry_after=retry_after
        )


# ═════════════════════════════════════════════════════════════════════════════
# Service Errors (502)
# ═════════════════════════════════════════════════════════════════════════════

class ServiceError(CognateFinderError):
    """External service failure."""

    def __init__(
        self,
        service: str,
        reason: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        **context
    ):
        super().__init__(
            code=code,
            message=f"Service error in {service}: {reason}",
            status_code=status_code,
            service=service,
            reason=reason,
            **context
        )


class GraphStoreError(ServiceError):
    """The SPARQL endpoint rejected or failed a cognate query."""

    def __init__(self, reason: str, upstream_status: Optional[int] = None):
        super().__init__(
            service="graph_store",
            reason=reason,
            code=ErrorCode.GRAPH_STORE_ERROR,
            status_code=502,
            upstream_status=upstream_status
        )
