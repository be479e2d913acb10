"""FastAPI application entry point.

This module creates and configures the FastAPI application instance with:
- Application metadata and OpenAPI documentation
- Middleware (CORS, RequestID, Timing)
- Exception handlers
- API routers (v1)
- Health check endpoints (/health, /ready)
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from knowledge_import.api.v1 import health
from knowledge_import.api.v1.router import router as v1_router
from knowledge_import.config import get_settings
from knowledge_import.middleware import setup_middleware
from knowledge_import.utils.errors import KnowledgeImportException
from knowledge_import.utils.logging import get_logger, log_error, setup_logging

# Set up logging first
setup_logging()
logger = get_logger("main")

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log service startup and shutdown."""
    logger.info("Starting Knowledge Import service...")
    logger.info(
        f"Allowed file types: {', '.join(settings.allowed_file_types)}; "
        f"completion provider configured: {settings.test_generation.is_configured}"
    )
    yield
    logger.info("Knowledge Import service shut down")


app = FastAPI(
    title="Knowledge Import Service",
    description="Parses uploaded training documents and generates tests from their content",
    version="0.1.0",
    docs_url="/docs" if not settings.is_production else None,
    redoc_url="/redoc" if not settings.is_production else None,
    openapi_url="/openapi.json" if not settings.is_production else None,
    lifespan=lifespan,
)

setup_middleware(app)


@app.exception_handler(KnowledgeImportException)
async def knowledge_import_exception_handler(request: Request, exc: KnowledgeImportException):
    """Handle KnowledgeImportException."""
    log_error(exc, context={"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    log_error(exc, context={"path": request.url.path, "method": request.method}, expected=True)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": {
                "message": exc.detail,
                "code": "HTTP_ERROR",
                "status_code": exc.status_code,
            }
        },
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors."""
    log_error(exc, context={"path": request.url.path, "method": request.method}, expected=True)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "message": "Validation error",
                "code": "VALIDATION_ERROR",
                "status_code": 422,
                "details": jsonable_errors(exc),
            }
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all other exceptions."""
    log_error(exc, context={"path": request.url.path, "method": request.method})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "message": "Internal server error",
                "code": "INTERNAL_ERROR",
                "status_code": 500,
            }
        },
    )


def jsonable_errors(exc: RequestValidationError):
    """Validation errors with non-serialisable context values dropped."""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


app.include_router(v1_router)


# Root-level health checks for container orchestrators; also under /api/v1
@app.get("/health", tags=["health"], include_in_schema=False)
async def root_health_check():
    """Root-level health check endpoint."""
    return await health.health_check()


@app.get("/ready", tags=["health"], include_in_schema=False)
async def root_readiness_check():
    """Root-level readiness check endpoint."""
    return await health.readiness_check()


@app.get("/", tags=["root"])
async def root():
    """Root endpoint."""
    return {
        "service": "knowledge-import",
        "version": "0.1.0",
        "status": "running",
        "environment": settings.environment.value,
    }


def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    uvicorn.run(
        "knowledge_import.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload and settings.is_development,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
