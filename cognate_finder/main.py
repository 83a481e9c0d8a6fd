"""FastAPI application entry point.

Wires the service container into the app lifespan, renders every error as
``{"error": {"code", "message", "field", "context"}}`` and logs one
``api_request`` event per request.
"""

import uuid
from contextlib import asynccontextmanager
from time import perf_counter

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from cognate_finder import __version__
from cognate_finder.api import router
from cognate_finder.api.dependencies import ServiceContainer
from cognate_finder.config import get_settings
from cognate_finder.errors import CognateFinderError, ErrorCode, ErrorDetail, RateLimitError
from cognate_finder.observ import clear_context, get_logger, log_api_request, set_request_id

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the service container on startup and close its clients on shutdown."""
    logger.info("application_startup", version=app.version)
    ServiceContainer.initialize()
    try:
        yield
    finally:
        logger.info("application_shutdown")
        await ServiceContainer.cleanup()


app = FastAPI(
    title="Cognate Finder API",
    description="Find cognates of a word across languages via shared etymological ancestors",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)

app.include_router(router)


def _error_response(status_code: int, detail: ErrorDetail, headers: dict = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": detail.model_dump(mode="json")},
        headers=headers,
    )


# ═════════════════════════════════════════════════════════════════════════════
# Error Handlers
# ═════════════════════════════════════════════════════════════════════════════

@app.exception_handler(CognateFinderError)
async def application_error_handler(request: Request, exc: CognateFinderError) -> JSONResponse:
    """Render application errors with their own status code."""
    logger.warning(
        "application_error",
        error_code=exc.code.value,
        error_message=exc.message,
        path=request.url.path,
        **exc.context
    )

    headers = None
    if isinstance(exc, RateLimitError) and exc.context.get("retry_after"):
        headers = {"Retry-After": str(max(1, round(exc.context["retry_after"])))}

    return _error_response(exc.status_code, exc.to_detail(), headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed query parameters or bodies are a 400, like domain validation."""
    details = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    logger.warning("request_validation_error", path=request.url.path, errors=details)

    return _error_response(400, ErrorDetail(
        code=ErrorCode.INVALID_INPUT,
        message="Invalid request data",
        context={"details": details},
    ))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.warning(
        "http_error",
        status_code=exc.status_code,
        path=request.url.path,
        detail=exc.detail
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": "http_error", "message": exc.detail}},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_error",
        error_type=type(exc).__name__,
        error_message=str(exc),
        path=request.url.path,
        exc_info=True
    )
    return _error_response(500, ErrorDetail(
        code=ErrorCode.INTERNAL_ERROR,
        message="An unexpected error occurred",
    ))


# ═════════════════════════════════════════════════════════════════════════════
# Request Logging Middleware
# ═════════════════════════════════════════════════════════════════════════════

@app.middleware("http")
async def logging_middleware(request: Request, call_next) -> Response:
    """Tag the request with an ID, time it and log the outcome."""
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
    set_request_id(request_id)
    start = perf_counter()

    try:
        response = await call_next(request)
        log_api_request(
            logger,
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=(perf_counter() - start) * 1000,
            query=str(request.url.query) or None,
        )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response
    finally:
        clear_context()


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "cognate_finder.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
