"""Track My Startup Financials API - Main Application"""
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.api.v1.router import api_router
from app.api.attachments import attachments_router, attachment_route_prefix
from app.api.websocket import websocket_router, manager
from app.models.database import init_db, close_db
from app.services.errors import (
    AppError,
    ValidationError,
    NotFoundError,
    PersistenceError,
    AttachmentUploadError,
)

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
settings = get_settings()

# Domain error -> HTTP status
ERROR_STATUS_CODES = {
    ValidationError: 400,
    AttachmentUploadError: 400,
    NotFoundError: 404,
    PersistenceError: 503,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Track My Startup Financials API", version=settings.app_version)

    # Initialize database
    await init_db()
    logger.info("Database initialized")

    # Start websocket change notifications
    await manager.start()

    yield

    # Cleanup
    await manager.stop()
    await close_db()
    logger.info("Track My Startup Financials API shutdown complete")


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate domain errors raised by the services into JSON responses"""
    status_code = 500
    for error_type, code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_type):
            status_code = code
            break

    if status_code >= 500:
        logger.error("Request failed", path=request.url.path, error=str(exc), error_type=type(exc).__name__)
    else:
        logger.info("Request rejected", path=request.url.path, error=str(exc), status_code=status_code)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """Create FastAPI application"""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="API for startup financial ledgers, investment records and funding reconciliation",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AppError, app_error_handler)

    # Include routers
    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(websocket_router)
    app.include_router(
        attachments_router,
        prefix=attachment_route_prefix(settings.attachment_base_url),
        tags=["Attachments"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "version": settings.app_version,
        }

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
