"""FastAPI server for the hospital CMS admin dashboard.

Features:
- CRUD for doctors, users and doctor time slots
- Grouped schedules and availability views
- Global exception handling with a uniform ErrorResponse body
- Health check endpoint with circuit breaker state
- Structured logging with request IDs
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from hospital_cms import __version__
from hospital_cms.api.dependencies import get_store
from hospital_cms.api.errors import APIError
from hospital_cms.api.models import ErrorResponse
from hospital_cms.api.routes import api_router
from hospital_cms.config import get_settings
from hospital_cms.logging_config import (
    REQUEST_ID_HEADER,
    RequestIDMiddleware,
    get_logger,
    setup_structured_logging,
)

settings = get_settings()
setup_structured_logging(settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    logger.info("Hospital CMS API starting up", store_backend=settings.store_backend)

    # Fail at startup, not on the first request, when the store is misconfigured
    try:
        store = app.dependency_overrides.get(get_store, get_store)()
    except ValueError as e:
        logger.error("Document store configuration invalid", error=str(e))
        raise

    yield

    session = getattr(store, "session", None)
    if session is not None:
        session.close()
    logger.info("Hospital CMS API shutting down")


app = FastAPI(
    title="Hospital CMS Admin API",
    description="Doctors, users and doctor availability for the hospital admin dashboard",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
    expose_headers=[REQUEST_ID_HEADER],
)


@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.error,
            detail=exc.detail,
            code=exc.code
        ).model_dump()
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors consistently."""
    logger.warning("Validation error", errors=str(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=ErrorResponse(
            error="Validation Error",
            detail=str(exc.errors()),
            code="VALIDATION_ERROR"
        ).model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected exceptions."""
    logger.error("Unexpected error", error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal Server Error",
            detail="An unexpected error occurred. Please try again later.",
            code="INTERNAL_ERROR"
        ).model_dump()
    )


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for load balancers."""
    store = app.dependency_overrides.get(get_store, get_store)()
    breaker = getattr(store, "circuit_breaker", None)

    return {
        "status": "healthy",
        "service": "hospital-cms-api",
        "version": __version__,
        "store": {
            "backend": type(store).__name__,
            "circuit": breaker.state if breaker is not None else None,
        },
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API info."""
    return {
        "message": "Hospital CMS Admin API",
        "docs": "/docs",
        "health": "/health"
    }


app.include_router(api_router)


def main():
    """Run the API with uvicorn."""
    import os
    import uvicorn

    uvicorn.run(
        "hospital_cms.api_server:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
