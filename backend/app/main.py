from contextlib import asynccontextmanager
import logging
from logging.config import dictConfig

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

# Support both execution modes:
# - "uvicorn backend.app.main:app" (package-relative imports)
# - "uvicorn main:app" with sys.path pointing to backend/app (flat imports)
try:
    from .core.config import settings  # type: ignore
    from .core.errors import install_exception_handlers  # type: ignore
    from .core.logging_config import get_uvicorn_log_config  # type: ignore
    from .api.v1.health import router as health_router  # type: ignore
    from .api.v1.videos import router as videos_router  # type: ignore
    from .db.session import engine, Base  # type: ignore
    from .db.models import models as _models  # type: ignore  # noqa: F401  (registers tables)
except Exception:  # pragma: no cover
    from core.config import settings  # type: ignore
    from core.errors import install_exception_handlers  # type: ignore
    from core.logging_config import get_uvicorn_log_config  # type: ignore
    from api.v1.health import router as health_router  # type: ignore
    from api.v1.videos import router as videos_router  # type: ignore
    from db.session import engine, Base  # type: ignore
    from db.models import models as _models  # type: ignore  # noqa: F401

# Apply logging configuration as early as possible (module import time)
dictConfig(get_uvicorn_log_config(settings.log_level))
logger = logging.getLogger("backend.app")


async def init_db(bind=engine) -> None:
    """Create tables; PostgreSQL additionally needs pg_trgm for similarity()."""
    async with bind.begin() as conn:
        if conn.dialect.name == "postgresql":
            await conn.exec_driver_sql("CREATE EXTENSION IF NOT EXISTS pg_trgm")
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s %s ready (database=%s)", settings.app_name, settings.version, engine.url.render_as_string(hide_password=True))
    yield
    await engine.dispose()


tags_metadata = [
    {"name": "health", "description": "Health checks and basic service info."},
    {"name": "videos", "description": "Ranked catalog listings, search, autocomplete and view counts."},
]

app = FastAPI(
    title=settings.app_name,
    version=settings.version,
    description=(
        "Browse tracked videos: paginated popularity/recency listings, free-text and fuzzy"
        " search over titles and channels, per-user bookmark overlays and name autocompletion."
    ),
    openapi_tags=tags_metadata,
    # Serve docs under /api/* to match API prefix
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    contact={"name": settings.app_name},
    license_info={
        "name": "MIT",
    },
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# Routes
app.include_router(health_router, prefix="/api/v1")
app.include_router(videos_router, prefix="/api/v1")


@app.get("/api")
def api_root():
    return {"name": settings.app_name, "version": settings.version}


# Convenience redirects for default FastAPI docs paths
@app.get("/docs", include_in_schema=False)
async def docs_redirect():
    return RedirectResponse(url="/api/docs")


@app.get("/redoc", include_in_schema=False)
async def redoc_redirect():
    return RedirectResponse(url="/api/redoc")
