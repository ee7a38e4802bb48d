from contextlib import asynccontextmanager
import uuid

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from urlshortener.api import health, shortener
from urlshortener.core.config import settings
from urlshortener.core.exceptions import GenerationExhaustedError, StoreUnavailableError
from urlshortener.core.logging_config import configure_logging, correlation_id_var
from urlshortener.db import database
from urlshortener.db.models import Base

CORRELATION_ID_HEADER = "X-Correlation-ID"

logger = configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application '{settings.PROJECT_NAME}' starting up.")
    Base.metadata.create_all(bind=database.engine)
    logger.info("Database models initialized/checked.")
    database.verify_database_connection()
    database.verify_redis_connection()
    yield
    logger.info("Shutting down gracefully...")
    database.dispose()


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="URL Shortener Service",
    lifespan=lifespan,
)

# health first: GET /{short_code} would otherwise swallow /health and /ready
app.include_router(health.router)
app.include_router(shortener.router)


@app.middleware("http")
async def correlation_id_middleware(request: Request, call_next):
    correlation_id = request.headers.get(CORRELATION_ID_HEADER) or uuid.uuid4().hex
    token = correlation_id_var.set(correlation_id)
    try:
        logger.info(f"NEW REQUEST: {request.method} {request.url.path}")
        response = await call_next(request)
    except Exception as exc:
        # answered here so the body still carries the correlation id
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        response = _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
    finally:
        correlation_id_var.reset(token)
    response.headers[CORRELATION_ID_HEADER] = correlation_id
    return response


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "correlation_id": correlation_id_var.get()},
    )


@app.exception_handler(StoreUnavailableError)
async def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error(f"Store unavailable: {exc}", exc_info=True)
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Service unavailable")


@app.exception_handler(GenerationExhaustedError)
async def generation_exhausted_handler(request: Request, exc: GenerationExhaustedError):
    logger.error(f"Short code generation exhausted: {exc}")
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
