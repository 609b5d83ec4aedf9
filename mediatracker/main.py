import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings, settings as default_settings
from .db import Database
from .errors import MediaTrackerError, StorageError
from .log import setup_logging
from .routers import auth, leaderboard, media, profile, reading

logger = structlog.get_logger()


def setup_error_handlers(app: FastAPI) -> None:
    """Every error leaves as ``{"error": message}``."""

    @app.exception_handler(MediaTrackerError)
    async def service_error_handler(request: Request, exc: MediaTrackerError) -> JSONResponse:
        message = exc.message
        if isinstance(exc, StorageError):
            # Details were logged where the failure happened
            message = "Internal server error"
        return JSONResponse(status_code=exc.status_code, content={"error": message})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Validation error", "errors": jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances that JSONResponse cannot encode
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings)
    database = Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.init()
        os.makedirs(settings.upload_dir, exist_ok=True)
        yield
        database.dispose()

    app = FastAPI(title=settings.app_name, version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = database

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_error_handlers(app)

    app.include_router(auth.router, prefix="/api", tags=["auth"])
    app.include_router(profile.router, prefix="/api/profile", tags=["profile"])
    app.include_router(media.router, prefix="/api/media", tags=["media"])
    app.include_router(reading.router, prefix="/api", tags=["reading"])
    app.include_router(leaderboard.router, prefix="/api/leaderboard", tags=["leaderboard"])

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")
    return app


app = create_app()
