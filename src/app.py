"""FastAPI application factory for the Contract Billing API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from src.config import settings
from src.database.engine import engine
from src.exceptions import AppException
from src.middleware.request_id import RequestIdMiddleware
from src.modules.sales.router import limiter
from src.schemas.responses import ErrorBody, ErrorDetail, ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Contract Billing API starting (environment=%s)", settings.environment)
    yield
    await engine.dispose()


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: list[dict] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorBody(
            code=code,
            message=message,
            details=[ErrorDetail(**d) for d in details or []],
            request_id=getattr(request.state, "request_id", "unknown"),
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return _error_response(request, exc.status_code, exc.code, exc.message, exc.details)


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(part) for part in err.get("loc", [])), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    return _error_response(request, 422, "VALIDATION_ERROR", "Validation failed", details)


async def handle_rate_limit(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return _error_response(request, 429, "RATE_LIMITED", str(exc.detail))


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(request, 500, "INTERNAL_ERROR", "An unexpected error occurred.")


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    logging.basicConfig(level=settings.log_level.upper())

    application = FastAPI(
        title="Contract Billing API",
        description="Billing lifecycle, recurring invoices and monthly sales reporting.",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
    )

    # Per-route limits on the sales reports
    application.state.limiter = limiter

    # Last added runs first: request IDs wrap CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestIdMiddleware)

    from src.api.v1 import v1_router

    application.include_router(v1_router)

    application.add_exception_handler(AppException, handle_app_exception)
    application.add_exception_handler(RequestValidationError, handle_request_validation)
    application.add_exception_handler(RateLimitExceeded, handle_rate_limit)
    application.add_exception_handler(Exception, handle_unexpected)

    @application.get("/health")
    async def health_check() -> dict:
        return {"status": "ok"}

    return application


app = create_app()
