"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .config import settings
from .services.profile_loader import get_profile_loader
from .utils import APIError, ErrorCode
from .models import ErrorResponse


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    # Startup
    logger.info("Application starting up...")
    logger.info(f"Settings: host={settings.backend_host}, port={settings.backend_port}")
    logger.info(f"Profiles directory: {settings.profiles_dir_path}")

    # Warm the default profile so a broken file shows up in the startup log
    get_profile_loader().load_profile_or_default(settings.default_profile)

    yield

    # Shutdown
    logger.info("Application shutting down...")
    get_profile_loader().clear_cache()
    logger.info("Application stopped")


# Create FastAPI app
app = FastAPI(
    title="Treatment pricing engine",
    description="Window-treatment fabric, cost and quotation calculations",
    version="0.1.0",
    lifespan=lifespan,
)


# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error handler for APIError
@app.exception_handler(APIError)
async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle API errors with proper response format."""
    error_response = ErrorResponse(
        success=False,
        message=exc.message,
        error_code=exc.error_code.value,
        details=exc.details if isinstance(exc.details, dict) else None,
    )
    logger.error(f"APIError: {exc.error_code} - {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(mode="json"),
    )


# Model validation raised inside a handler (e.g. while mapping a raw record)
@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle pydantic validation errors raised outside request parsing."""
    error_response = ErrorResponse(
        success=False,
        message=f"Data validation failed: {exc.error_count()} error(s)",
        error_code=ErrorCode.VALIDATION_ERROR.value,
        details={"errors": exc.errors(include_url=False, include_context=False)},
    )
    logger.error(f"ValidationError: {exc}")
    return JSONResponse(
        status_code=422,
        content=error_response.model_dump(mode="json"),
    )


# General exception handler
@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions."""
    error_response = ErrorResponse(
        success=False,
        message="Internal server error",
        error_code=ErrorCode.INTERNAL_ERROR.value,
    )
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=error_response.model_dump(mode="json"),
    )


# Register API routers
from .api.routes import health, pricing, quotes

app.include_router(health.router)
app.include_router(pricing.router)
app.include_router(quotes.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.backend_host,
        port=settings.backend_port,
        reload=settings.backend_debug,
    )
