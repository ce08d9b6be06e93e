"""Error taxonomy for the catalog core.

The boundary layer maps these to responses (see ``install_exception_handlers``);
the core never retries or degrades on its own.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger("backend.app.errors")


class CatalogError(Exception):
    """Base class for every failure the catalog core reports."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class CatalogValidationError(CatalogError):
    """Caller-correctable input problem; raised before any storage access."""

    status_code = 400


class VideoNotFoundError(CatalogError):
    status_code = 404

    def __init__(self, video_id: object) -> None:
        super().__init__(f"Video {video_id} not found")
        self.video_id = video_id


class StorageError(CatalogError):
    """Any failure from the backing store (connectivity, constraint, timeout)."""

    status_code = 500


async def _catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    if isinstance(exc, StorageError):
        logger.error("storage failure on %s %s: %s", request.method, request.url.path, exc.message, exc_info=exc.__cause__ or exc)
        # Storage details stay in the log
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal Server Error"})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, _catalog_error_handler)  # type: ignore[arg-type]
