"""
QuickInk Signed Document Service - Main FastAPI Application
Produces signed PDFs and signing certificates for completed signatures.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from quickink.config import get_cors_origins, get_settings
from quickink.exceptions import (
    AppException,
    app_exception_handler,
    generic_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from quickink.routers import health, signed_documents
from quickink.utils.logging import RequestIdMiddleware, get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    setup_logging(
        environment=settings.environment,
        level=logging.DEBUG if settings.debug else logging.INFO,
    )
    logger.info(f"Starting {settings.product_name} Signed Document Service v1.0.0 ({settings.environment})")
    yield
    logger.info("Shutting down Signed Document Service")


app = FastAPI(
    title="QuickInk Signed Document Service",
    description="""Generates signed PDF artifacts for completed e-signatures.

- With a source document URL the signature block is embedded into the PDF.
- Without one a standalone signing certificate is generated.
""",
    version="1.0.0",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "signed-documents", "description": "Signed PDF generation"},
        {"name": "health", "description": "Health check endpoints"},
    ],
)

# Middleware
app.add_middleware(RequestIdMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)

# Routers
app.include_router(health.router)
app.include_router(signed_documents.router)
