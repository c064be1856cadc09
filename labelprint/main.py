"""
Label Print Service - FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from labelprint.config import settings
from labelprint.label_generation import LabelPDFRenderer
from labelprint.logger import get_logger, configure_logging
from labelprint.middleware import RequestBodyLimitMiddleware
from labelprint.models.common import ErrorResponse
from labelprint.printing import (
    PrintDispatchQueue,
    PrintNodeAPIError,
    PrintNodeConfigError,
    ThreadingScheduler,
    get_printnode_client,
)
from labelprint.storage.template_store import TemplateNotFoundError, TemplateStore

# Configure logging
configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    renderer = LabelPDFRenderer()
    app.state.renderer = renderer
    app.state.relay_factory = get_printnode_client
    app.state.print_queue = PrintDispatchQueue(
        renderer=renderer,
        relay_factory=get_printnode_client,
        scheduler=ThreadingScheduler(),
        delay_seconds=settings.queue_debounce_seconds,
        group_by_printer=settings.queue_group_by_printer
    )
    app.state.template_store = TemplateStore(settings.templates_dir)

    logger.info("Label Print Service starting", extra={
        "environment": settings.environment,
        "log_level": settings.log_level,
        "relay_configured": bool(settings.printnode_api_key),
        "templates_dir": settings.templates_dir,
        "queue_debounce_seconds": settings.queue_debounce_seconds
    })

    if not settings.printnode_api_key:
        logger.warning("PRINTNODE_API_KEY is not set; relay calls will fail")

    yield

    # Shutdown
    app.state.print_queue.shutdown()
    logger.info("Label Print Service shutting down")


# Create FastAPI app
app = FastAPI(
    title="Label Print Service",
    description="Label template rendering and PrintNode cloud printing",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request body size limit
app.add_middleware(RequestBodyLimitMiddleware)


@app.exception_handler(PrintNodeConfigError)
async def printnode_config_exception_handler(request: Request, exc: PrintNodeConfigError):
    """Relay credential missing."""
    logger.error("PrintNode API key not configured", extra={"path": request.url.path})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="API_KEY_NOT_CONFIGURED",
            message="API key not configured",
            details=str(exc)
        ).model_dump(mode="json")
    )


@app.exception_handler(PrintNodeAPIError)
async def printnode_api_exception_handler(request: Request, exc: PrintNodeAPIError):
    """Relay failure, surfaced with the relay's own status and body."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="PRINTNODE_ERROR",
            message=str(exc),
            details={"status": exc.status_code, "body": exc.body}
        ).model_dump(mode="json")
    )


@app.exception_handler(TemplateNotFoundError)
async def template_not_found_exception_handler(request: Request, exc: TemplateNotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(
            error_code="TEMPLATE_NOT_FOUND",
            message=str(exc)
        ).model_dump(mode="json")
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle uncaught exceptions."""
    logger.error("Unhandled exception", extra={
        "path": request.url.path,
        "method": request.method,
        "error": str(exc)
    }, exc_info=True)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error_code="INTERNAL_ERROR",
            message="An unexpected error occurred",
            details={"error": str(exc)} if settings.is_development else {}
        ).model_dump(mode="json")
    )


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "environment": settings.environment,
        "relay_configured": bool(settings.printnode_api_key)
    }


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "service": "Label Print Service",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from labelprint.routes.render_routes import router as render_router
from labelprint.routes.print_routes import router as print_router
from labelprint.routes.printnode_routes import router as printnode_router
from labelprint.routes.template_routes import router as template_router

app.include_router(render_router, prefix="/api", tags=["render"])
app.include_router(print_router, prefix="/api", tags=["print"])
app.include_router(printnode_router, prefix="/api", tags=["printnode"])
app.include_router(template_router, prefix="/api", tags=["templates"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "labelprint.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.is_development,
        log_level=settings.log_level
    )
