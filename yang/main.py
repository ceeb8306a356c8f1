"""FastAPI application entry point."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from yang.api import auth, inquiries, notifications
from yang.config import get_settings
from yang.database import init_db
from yang.exceptions import StorageError, YangError
from yang.logging_config import setup_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown events."""
    setup_logging()
    logger.info(f"Starting Yang API ({settings.environment})")
    if settings.database_url.startswith("sqlite"):
        # Local SQLite runs have no migrations applied
        init_db()
    if not settings.smtp_user or not settings.smtp_pass:
        logger.warning("SMTP credentials are not set; password mails will fail")
    yield
    logger.info("Yang API stopped")


app = FastAPI(
    title="Yang API",
    description="Accounts, credentials, notifications and support inquiries for Yang",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware for development
if settings.is_development:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.app_base_url, "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    try:
        response = await call_next(request)
    except Exception:
        ms = int((time.time() - start) * 1000)
        logger.exception(f"Unhandled error {request.method} {request.url.path} ({ms}ms)")
        raise
    ms = int((time.time() - start) * 1000)
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({ms}ms)")
    return response


@app.exception_handler(YangError)
async def yang_error_handler(request: Request, exc: YangError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "; ".join(messages) or "Please check the submitted fields."},
    )


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception(f"Database error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": StorageError.default_message},
    )


# Register routers
app.include_router(auth.router)
app.include_router(notifications.router)
app.include_router(inquiries.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "environment": settings.environment}
