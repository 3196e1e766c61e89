"""LifeMate - job application lifecycle service."""

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings
from app.core.exceptions import DomainError
from app.core.storage import init_models
from app.routers import (
    admin_router,
    applications_router,
    employers_router,
    jobs_router,
    notifications_router,
)
from app.services.dispatcher import side_effects
from app.services.scheduler_service import scheduler_service
from app.utils.responses import error_response, success_response

log_level = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Initializing application...")
    await init_models()

    if settings.scheduler_enabled:
        logger.info("Starting scheduler...")
        await scheduler_service.start()
        logger.info("Scheduler started")

    logger.info("Application initialized")

    yield

    logger.info("Shutting down...")
    await scheduler_service.stop()
    await side_effects.drain(timeout=10)
    logger.info("Shutdown complete")


app = FastAPI(
    title="LifeMate",
    description="Job application lifecycle API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return error_response(exc.status_code, exc.message, exc.errors)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"][1:])
            or str(error["loc"][0]),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return error_response(400, "Validation failed", errors)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


app.include_router(jobs_router)
app.include_router(applications_router)
app.include_router(notifications_router)
app.include_router(employers_router)
app.include_router(admin_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return success_response(
        message="Service healthy",
        data={
            "service": "lifemate",
            "scheduler": scheduler_service.get_status(),
            "pending_side_effects": side_effects.pending,
        },
    )
