import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from contentkit import __version__
from contentkit.adapters.sqlite.migrator import SQLiteMigrator
from contentkit.api.deps import get_settings
from contentkit.domain.errors import CONFLICT, ContentKitError
from contentkit.rules.loader import load_rules

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger("contentkit.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        load_rules(settings.rules_path)
        logger.info("Rules loaded from %s", settings.rules_path)
    except (FileNotFoundError, ValueError) as e:
        logger.critical("Rules load failed: %s", e)
        raise

    if settings.storage == "sqlite":
        applied = SQLiteMigrator(settings.db_path).run_migrations()
        if applied:
            logger.info("Applied migrations: %s", ", ".join(applied))

    yield


app = FastAPI(
    title="ContentKit API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(ContentKitError)
async def contentkit_error_handler(request: Request, exc: ContentKitError) -> JSONResponse:
    status_code = 409 if exc.code == CONFLICT else 500
    if status_code == 500:
        logger.error("Unexpected failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# --- Routers ---
from contentkit.api.routes import content_items, content_models  # noqa: E402

# Models first so "/api/content/models" is not taken as a model slug.
app.include_router(content_models.router, prefix="/api/content/models", tags=["Content Models"])
app.include_router(content_items.router, prefix="/api/content", tags=["Content"])


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "contentkit"}
