"""
AI Biographer FastAPI Backend

Main application entry point with ASGI server.
"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from biographer import __version__
from biographer.core.config import settings
from biographer.core.exceptions import BiographerError
from biographer.core.logging_config import setup_logging, get_logger
from biographer.api.deps import limiter
from biographer.api.routers import functions, health, stories

logger = get_logger("api.main")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    setup_logging(settings.log_level)
    logger.info("Starting AI Biographer API...")
    yield
    logger.info("Shutting down AI Biographer API...")


app = FastAPI(
    title="AI Biographer API",
    description="Turns narrated memories into illustrated cartoon panels",
    version=__version__,
    lifespan=lifespan,
)

# Add rate limiter to app state
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Browser clients call every endpoint cross-origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(BiographerError)
async def biographer_error_handler(request: Request, exc: BiographerError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")

    content = {"error": exc.message}
    code = getattr(exc, "code", None)
    if code:
        content["code"] = code
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return JSONResponse(status_code=422, content={"error": "; ".join(problems) or "Invalid request"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})


# =============================================================================
# ROUTES
# =============================================================================

app.include_router(health.router, tags=["Health"])
app.include_router(functions.router, prefix="/functions", tags=["Functions"])
app.include_router(stories.router, prefix="/api/stories", tags=["Stories"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "AI Biographer API",
        "version": __version__,
        "status": "running",
    }


def run():
    """Run the server."""
    setup_logging(settings.log_level)
    uvicorn.run(
        "biographer.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level="info",
    )


if __name__ == "__main__":
    run()
