"""
FastAPI Application Entrypoint.

Sets up CORS, maps ledger errors to JSON responses, includes all routers,
and initializes the database with seed data on first startup.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scheme_ledger.core.config import get_settings
from scheme_ledger.core.database import init_db, SessionLocal
from scheme_ledger.core.exceptions import InvalidEnrollmentError, InvalidInputError, SchemeLedgerError
from scheme_ledger.api import (
    health_router,
    enrollments_router,
    payments_router,
    rates_router,
    ledger_router,
)
from scheme_ledger.services.seed_data import seed_database

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()

ERROR_STATUS = {
    InvalidInputError: 422,
    InvalidEnrollmentError: 409,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: init DB and seed on startup."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Initialize database tables
    init_db()
    logger.info("Database tables initialized")

    if settings.SEED_DEMO_DATA:
        db = SessionLocal()
        try:
            seed_database(db)
        finally:
            db.close()

    yield

    logger.info("Shutting down...")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Gold and silver savings scheme ledger: gram allocation, billing "
        "schedules, dues and redemption eligibility."
    ),
    lifespan=lifespan,
)


@app.exception_handler(SchemeLedgerError)
async def ledger_error_handler(request: Request, exc: SchemeLedgerError):
    # Bad input or corrupt records; never retried, so surface them as-is
    status_code = ERROR_STATUS.get(type(exc), 400)
    logger.warning(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status_code,
        content={"error": {"code": exc.code, "message": exc.message}},
    )


# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include all routers under /api/v1
app.include_router(health_router, prefix=settings.API_PREFIX)
app.include_router(enrollments_router, prefix=settings.API_PREFIX)
app.include_router(payments_router, prefix=settings.API_PREFIX)
app.include_router(rates_router, prefix=settings.API_PREFIX)
app.include_router(ledger_router, prefix=settings.API_PREFIX)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs",
        "health": f"{settings.API_PREFIX}/health",
    }
