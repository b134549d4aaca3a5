# src/xpforge/main.py

"""Main FastAPI application for XPForge."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from . import __version__, config
from .api import rank, users
from .db.session import engine, get_db
from .exceptions import (
    AwardRejectedError,
    ResourceNotFoundError,
    StorageError,
    ValidationError,
    XPForgeError,
)
from .middleware.logging import RequestLoggingMiddleware

logger = logging.getLogger(__name__)

# Driver messages that mean a unique key already holds the value
_DUPLICATE_MARKERS = ("UNIQUE constraint failed", "duplicate key")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan context manager for startup and shutdown events."""
    config.configure_logging()
    # Fail at startup rather than on the first capped award
    logger.info("Daily caps use timezone %s", config.get_rank_timezone().key)
    yield
    await engine.dispose()


app = FastAPI(title="XPForge API", version=__version__, lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)


def _error_response(status_code: int, detail: str, error_type: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "error_type": error_type},
    )


def _xpforge_response(status_code: int, exc: XPForgeError) -> JSONResponse:
    return _error_response(status_code, exc.message, type(exc).__name__)


# =============================================================================
# Global Exception Handlers
# =============================================================================


@app.exception_handler(ResourceNotFoundError)
async def resource_not_found_handler(
    request: Request, exc: ResourceNotFoundError
) -> JSONResponse:
    """Handle all resource not found errors -> 404."""
    logger.warning("Resource not found: %s", exc.message, extra=exc.details)
    return _xpforge_response(404, exc)


@app.exception_handler(ValidationError)
async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Handle unknown activities and invalid users -> 422."""
    logger.warning("Validation error: %s", exc.message, extra=exc.details)
    return _xpforge_response(422, exc)


@app.exception_handler(AwardRejectedError)
async def award_rejected_handler(
    request: Request, exc: AwardRejectedError
) -> JSONResponse:
    """Handle awards refused by a daily limit -> 429.

    The triggering action (match, lobby, ...) is unaffected; only the XP is
    withheld.
    """
    logger.warning("Award rejected: %s", exc.message, extra=exc.details)
    return _xpforge_response(429, exc)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Handle ledger/total write failures -> 503 (retry with the same reference)."""
    logger.error("Storage error: %s", exc.message, extra=exc.details, exc_info=True)
    return _xpforge_response(503, exc)


@app.exception_handler(XPForgeError)
async def xpforge_error_handler(request: Request, exc: XPForgeError) -> JSONResponse:
    """Catch-all for any other XPForge errors -> 500."""
    logger.error("XPForge error: %s", exc.message, extra=exc.details, exc_info=True)
    return _xpforge_response(500, exc)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(
    request: Request, exc: IntegrityError
) -> JSONResponse:
    """Map a constraint violation that escaped a route to 409 or 400.

    Duplicate keys are conflicts; any other violation (foreign key, check)
    means the request referenced or produced invalid data.
    """
    reason = str(exc.orig if exc.orig is not None else exc)
    logger.warning("Constraint violation on %s: %s", request.url.path, reason)

    if any(marker in reason for marker in _DUPLICATE_MARKERS):
        return _error_response(
            409, "A record with these values already exists", "Conflict"
        )
    return _error_response(
        400, "The request violates a data constraint", "ConstraintViolation"
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    """Database failures outside the award path -> 500."""
    logger.error("Database error on %s", request.url.path, exc_info=exc)
    return _error_response(
        500, "The rank database could not serve the request", "DatabaseError"
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Anything else -> 500, without leaking internals to the caller."""
    logger.error(
        "Unhandled %s on %s", type(exc).__name__, request.url.path, exc_info=exc
    )
    return _error_response(500, "An internal server error occurred", "InternalError")


app.include_router(users.router)
app.include_router(rank.router)


@app.get("/", tags=["Root"])
async def read_root() -> dict[str, str]:
    """Service name and version."""
    return {"service": "XPForge API", "version": __version__}


@app.get("/health", tags=["Health"])
async def health_check(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Liveness plus a round trip to the rank database.

    Answers 503 when the database cannot be reached, so a load balancer can
    stop routing awards to this instance.
    """
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.error("Health check could not reach the database", exc_info=True)
        return JSONResponse(
            status_code=503, content={"status": "unhealthy", "database": "unreachable"}
        )
    return JSONResponse(content={"status": "healthy", "database": "ok"})


def serve() -> None:
    """Console entry point: run the API under uvicorn.

    Host, port and reload come from API_HOST, API_PORT and API_RELOAD.
    """
    import uvicorn

    uvicorn.run(
        "xpforge.main:app",
        host=config.API_HOST,
        port=config.API_PORT,
        reload=config.API_RELOAD,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    serve()
