"""
TourStack Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routers, the
       /uploads static mount and (in production) the built editor SPA.
Who:   uvicorn (`uvicorn tourstack.main:app` or `python -m tourstack`).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │    /api/health  /api/templates  /api/tours  /api/stops   │
    │    /api/media   /api/google-translate  /api/google-tts   │
    │    /api/vision  /api/gemini                              │
    │                                                          │
    │  Static:      /uploads/*   (+ SPA fallback in production)│
    │                                                          │
    │  Errors:      TourStackError → its status, {"error": ...} │
    │               request validation → 400                   │
    │               anything else → 500 "Internal server error"│
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → uploads directories → tables → key warnings
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from tourstack import __version__
from tourstack.config import settings
from tourstack.database import create_all, dispose_engine
from tourstack.exceptions import NotFoundError, TourStackError
from tourstack.middleware.logging import RequestLoggingMiddleware
from tourstack.middleware.request_id import RequestIDMiddleware, request_id_var
from tourstack.routes import (
    gemini,
    google_translate,
    google_tts,
    health,
    media,
    stops,
    templates,
    tours,
    vision,
)
from tourstack.services.file_service import PUBLIC_PREFIX, file_service

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-05-01T09:30:00 [INFO] tourstack.services.tour_service: Tour created: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # These log every connection / statement / request at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("TourStack Backend %s starting up (%s)", __version__, settings.node_env)

    file_service.ensure_directories()
    await create_all()
    logger.info("Database ready: %s", settings.sqlalchemy_url.split("@")[-1])

    for key in settings.missing_optional_keys():
        logger.warning("%s is not set; endpoints that need it will fail", key)

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("TourStack Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to `{"error": <message>, "details"?: ...}` bodies.

    Handler hierarchy:
        TourStackError (and subclasses) → exc.status_code
        RequestValidationError          → 400 (malformed JSON, wrong types)
        Exception (fallback)            → 500 "Internal server error"

    Driver errors, file paths and stack traces stay in the log; only the
    message and the optional `details` payload reach the client.
    """

    @app.exception_handler(TourStackError)
    async def handle_tourstack_error(request: Request, exc: TourStackError):
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context)
        else:
            logger.warning("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        content = {"error": exc.message}
        if exc.details is not None:
            content["details"] = jsonable_encoder(exc.details)
        return JSONResponse(status_code=exc.status_code, content=content)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Request validation failed: %s", rid, exc.errors())
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


# ══════════════════════════════════════════════════════════════════════════
# Single-Page App (production)
# ══════════════════════════════════════════════════════════════════════════

def register_spa(app: FastAPI, dist_dir: Path) -> None:
    """
    Serve the built editor from `dist_dir`: real files as-is, every other
    GET outside /api and /uploads gets index.html so client-side routes
    survive a reload. Registered last so API routes always win.
    """
    dist_root = dist_dir.resolve()
    index_file = dist_root / "index.html"

    @app.get("/{full_path:path}", include_in_schema=False)
    async def spa_fallback(full_path: str):
        if full_path.startswith("api/") or full_path == "api" or full_path.startswith("uploads/"):
            raise NotFoundError(resource="Route", resource_id=full_path)

        candidate = (dist_root / full_path).resolve()
        if full_path and dist_root in candidate.parents and candidate.is_file():
            return FileResponse(candidate)
        if not index_file.is_file():
            raise NotFoundError(resource="Page", resource_id=full_path)
        return FileResponse(index_file)

    logger.info("Serving SPA from %s", dist_root)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="TourStack API",
        description=(
            "Authoring API for guided museum tours: tours, stops, templates, media, "
            "and proxies to Google Translate, Text-to-Speech, Vision and Gemini."
        ),
        version=__version__,
        docs_url="/api/docs",
        redoc_url=None,
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router, prefix="/api")
    app.include_router(templates.router)
    app.include_router(tours.router)
    app.include_router(stops.router)
    app.include_router(media.router)
    app.include_router(google_translate.router)
    app.include_router(google_tts.router)
    app.include_router(vision.router)
    app.include_router(gemini.router)

    # ── Static Files ──────────────────────────────────────────────────────
    # check_dir=False: the directory is created by the lifespan hook
    app.mount(
        PUBLIC_PREFIX,
        StaticFiles(directory=str(file_service.uploads_root), check_dir=False),
        name="uploads",
    )

    if settings.is_production:
        register_spa(app, Path(settings.dist_dir))

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
