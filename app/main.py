"""Chronicle API - Main Application Module.

This module initializes the FastAPI application with proper configuration,
middleware, routing, and lifecycle management for the community chat service.
"""

import logging
import sys
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

# Add the project root to Python path if running directly
if __name__ == "__main__":
    project_root = Path(__file__).parent.parent
    sys.path.insert(0, str(project_root))

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import ConfigValidator, get_config_summary, settings
from app.core.dependencies import get_store
from app.database import create_tables, dispose_engine
from app.shared.clock import utcnow
from app.store.base import RecordStore

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.value,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Manage application lifecycle events."""
    # Startup
    configure_logging()
    logger.info("🚀 Starting Chronicle API...")
    try:
        ConfigValidator.validate_required_settings()
    except ValueError as e:
        logger.error(f"❌ {str(e)}")
        raise
    logger.info(f"Configuration: {get_config_summary()}")

    # Development mode: auto-create tables for the SQL store
    if settings.uses_sql_store and settings.is_development:
        logger.info("📝 Development mode: Creating/updating database tables...")
        await create_tables()
        logger.info("✅ Database tables created/verified")
    else:
        logger.info(f"✅ Application started with the {settings.store_backend.value} store")

    yield

    # Shutdown
    logger.info("🛑 Shutting down Chronicle API...")
    if settings.uses_sql_store:
        await dispose_engine()
        logger.info("✅ Database connections closed")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        description="Community chat rooms with AI-assisted chat-to-post publishing",
        version=settings.version,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Add middleware
    setup_middleware(app)

    # Add exception handlers
    setup_exception_handlers(app)

    # Include routers
    setup_routers(app)

    # Uploaded files
    app.mount(
        "/uploads",
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

    return app


def setup_middleware(app: FastAPI):
    """Configure application middleware."""
    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request ID middleware
    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


def _error_body(request: Request, message: str, error_code: str, details) -> dict:
    return {
        "status": "error",
        "message": message,
        "error_code": error_code,
        "details": details,
        "timestamp": utcnow().isoformat(),
        "request_id": getattr(request.state, "request_id", None),
    }


def setup_exception_handlers(app: FastAPI):
    """Configure global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Handle custom exceptions that have structured detail
        if isinstance(exc.detail, dict) and "message" in exc.detail:
            message = exc.detail["message"]
            error_code = exc.detail.get("error_code", "HTTP_ERROR")
            details = exc.detail.get("details")
        else:
            message = str(exc.detail) if exc.detail else "An error occurred"
            error_code = "HTTP_ERROR"
            details = None

        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(request, message, error_code, details),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Convert errors to JSON-serializable format
        errors = []
        for error in exc.errors():
            error_dict = {
                "loc": list(error.get("loc", [])),
                "msg": str(error.get("msg", "Validation error")),
                "type": error.get("type", "value_error"),
            }
            # Handle custom input if present
            if "input" in error:
                error_dict["input"] = str(error["input"])
            errors.append(error_dict)

        return JSONResponse(
            status_code=422,
            content=_error_body(request, "Validation error", "VALIDATION_ERROR", errors),
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
        return JSONResponse(
            status_code=500,
            content=_error_body(request, "Internal server error", "INTERNAL_ERROR", None),
        )


def setup_routers(app: FastAPI):
    """Configure application routers."""
    # Import routers
    from app.domains.ai.controller import router as ai_router
    from app.domains.comment.controller import router as comment_router
    from app.domains.post.controller import router as post_router
    from app.domains.room.controller import router as room_router
    from app.domains.upload.controller import router as upload_router
    from app.domains.user.controller import router as user_router

    # Health check endpoint
    @app.get("/health")
    async def health_check(store: RecordStore = Depends(get_store)):
        """Record store reachability and AI configuration."""
        store_status = "healthy" if await store.ping() else "unhealthy"
        ai_status = "configured" if settings.has_ai_enabled else "not_configured"

        return JSONResponse(
            status_code=200 if store_status == "healthy" else 503,
            content={
                "status": "healthy" if store_status == "healthy" else "degraded",
                "version": settings.version,
                "environment": settings.environment.value,
                "timestamp": utcnow().isoformat(),
                "services": {
                    "store": store_status,
                    "store_backend": settings.store_backend.value,
                    "ai_service": ai_status,
                },
            },
        )

    @app.get("/")
    async def root():
        """Root endpoint with API information."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "description": "Community chat rooms with AI-assisted chat-to-post publishing",
            "docs_url": "/docs" if settings.is_development else None,
        }

    # Include domain routers
    app.include_router(user_router)
    app.include_router(room_router)
    app.include_router(post_router)
    app.include_router(comment_router)
    app.include_router(ai_router)
    app.include_router(upload_router)


# Create the application instance
app = create_app()


def main():
    """Entry point for running the application directly."""
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level.value.lower(),
    )


if __name__ == "__main__":
    main()
