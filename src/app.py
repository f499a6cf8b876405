"""Main FastAPI application module.

This module initializes the FastAPI application, registers all route handlers
and maps domain errors onto HTTP responses.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from api.routes import admin, auth, dashboard, diary, leaves, projects, queries, resources
from config import API_HOST, API_PORT, CORS_ALLOWED_ORIGINS
from core.exceptions import (
    CapacityError,
    DuplicateError,
    IneligibleError,
    InternshipPortalError,
    InvalidTransitionError,
    LockedError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from core.logging_config import setup_logging

# Setup logging
setup_logging()

logger = logging.getLogger(__name__)

ERROR_STATUS_CODES = {
    ValidationError: 422,
    UnauthorizedError: 403,
    IneligibleError: 403,
    InvalidTransitionError: 409,
    DuplicateError: 409,
    CapacityError: 409,
    LockedError: 423,
    NotFoundError: 404,
    StoreError: 503,
}

# Initialize FastAPI application
app = FastAPI(
    title="Internship Portal API",
    description="Backend API service for the internship lifecycle portal.",
    version="1.0.0",
)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register route handlers
app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(diary.router)
app.include_router(projects.router)
app.include_router(leaves.router)
app.include_router(queries.router)
app.include_router(resources.router)
app.include_router(dashboard.router)


def status_code_for(exc: InternshipPortalError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


@app.exception_handler(InternshipPortalError)
def handle_portal_error(request: Request, exc: InternshipPortalError) -> JSONResponse:
    """Render a domain error as ``{"error", "category", "detail"}``."""
    return JSONResponse(status_code=status_code_for(exc), content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # Reads outside a transaction() block surface here
    logger.error("Store failure on %s %s: %s", request.method, request.url.path, exc)
    error = StoreError("The data store is unavailable; please try again later")
    return JSONResponse(status_code=503, content=error.to_dict())


@app.get("/", summary="API root", tags=["Info"])
def root() -> dict:
    """API root, returning API information and documentation links.

    Returns:
        Dictionary with API information and documentation links.
    """
    return {
        "name": "Internship Portal API",
        "version": "1.0.0",
        "description": "Backend API service for the internship lifecycle portal.",
        "docs": {
            "swagger": "/docs",
            "redoc": "/redoc",
        },
        "health": "/api/health",
    }


@app.get("/api/health", summary="Health check", tags=["Health"])
def health() -> dict:
    """Health check endpoint.

    Returns:
        Dictionary with status "ok".
    """
    return {"status": "ok"}


# --- Startup code for direct execution ---
if __name__ == "__main__":
    import uvicorn

    server_url = f"http://{API_HOST}:{API_PORT}"
    logger.info("Starting Internship Portal API at %s (docs: %s/docs)", server_url, server_url)

    # reload=True enables auto-reload on code changes
    uvicorn.run("app:app", host=API_HOST, port=API_PORT, reload=True)
