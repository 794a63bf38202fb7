from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from palette_maker import __version__
from palette_maker.api.v1 import router as v1_router
from palette_maker.config import config
from palette_maker.schemas import ErrorResponse, HealthResponse
from palette_maker.utils.logging import configure_logging
from palette_maker.utils.metrics import get_metrics

configure_logging()
config.check()

app = FastAPI(
    title="Palette Maker",
    description="Dominant color palette extraction for photographs",
    version=__version__
)

origins = config.allowed_origins()
if origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"]
    )

app.include_router(v1_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log unexpected failures and answer with an ErrorResponse 500."""
    logger.exception(f"Unhandled error on {request.url.path}: {exc}")
    get_metrics().increment_failure_count(type(exc).__name__)
    error = ErrorResponse(detail="Internal server error")
    return JSONResponse(status_code=500, content=error.model_dump())


@app.get("/healthz", response_model=HealthResponse)
def health_check():
    """Health check endpoint"""
    return HealthResponse(ok=True, version=__version__)


@app.get("/")
def root():
    """Root endpoint"""
    return {
        "message": "Palette Maker API",
        "version": __version__,
        "docs": "/docs"
    }
