from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel
try:
    from ..app_meta import __version__, __app_name__  # type: ignore
except Exception:  # pragma: no cover
    from app_meta import __version__, __app_name__  # type: ignore


# Load environment variables from .env files without overriding existing env vars.
# Priority: backend/.env first (co-located with app), then project-root/.env as fallback.
_backend_env = Path(__file__).resolve().parents[2] / ".env"
_root_env = Path(__file__).resolve().parents[3] / ".env"
load_dotenv(dotenv_path=str(_backend_env), override=False)
load_dotenv(dotenv_path=str(_root_env), override=False)


def _split_csv(value: str | None) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


class Settings(BaseModel):
    # Name and version are sourced from code, not environment
    app_name: str = __app_name__
    version: str = __version__

    # CORS
    cors_origins: List[str] = _split_csv(os.environ.get("CORS_ORIGINS")) or [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Database
    database_url: str = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./catalog.db")
    database_echo: bool = os.environ.get("DATABASE_ECHO", "0") in {"1", "true", "TRUE", "True"}

    # Upper bound for a single catalog query (seconds); 0 disables the bound
    query_timeout_seconds: float = _float_env("QUERY_TIMEOUT_SECONDS", 10.0)

    log_level: str = os.environ.get("APP_LOG_LEVEL", "INFO").upper()


settings = Settings()
