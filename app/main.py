from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from routers import video
from services.video_services import shutdown_pipeline

from vidluxe.exceptions import (
    AnalysisFailedException,
    ConfigurationException,
    NoFramesExtractedException,
    ProviderException,
    ResourceNotFoundException,
    SpawnException,
    TaskFailedException,
    TimeoutException,
    UnknownDurationException,
    ValidationException,
    VidLuxeException,
)
from vidluxe.utils.error_handler import ErrorHandler

# Checked in order; subclasses before their bases
_STATUS_CODES = [
    (ValidationException, 400),
    (ResourceNotFoundException, 404),
    (UnknownDurationException, 422),
    (NoFramesExtractedException, 422),
    (AnalysisFailedException, 422),
    (TaskFailedException, 502),
    (ProviderException, 502),
    (TimeoutException, 504),
    (SpawnException, 500),
    (ConfigurationException, 500),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await shutdown_pipeline()


app = FastAPI(
    title="VidLuxe API",
    description="Keyframe ranking, color grading and AI cover generation for short videos",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=True
)

app.include_router(video.router)


def status_code_for(exc: Exception) -> int:
    for exc_type, status_code in _STATUS_CODES:
        if isinstance(exc, exc_type):
            return status_code
    return 500


@app.exception_handler(VidLuxeException)
async def vidluxe_exception_handler(request: Request, exc: VidLuxeException):
    return JSONResponse(
        status_code=status_code_for(exc),
        content=ErrorHandler.to_result(exc, context=f"{request.method} {request.url.path}"),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=ErrorHandler.to_result(exc))


@app.get("/", tags=["root"])
async def root():
    """Root endpoint providing API information."""
    return {
        "message": "VidLuxe API",
        "version": "1.0.0",
        "docs_url": "/docs",
        "redoc_url": "/redoc",
        "openapi_url": "/openapi.json"
    }


@app.get("/health", tags=["health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "vidluxe"}
