"""
Exception -> JSON response translation.

Routers raise; this module turns every failure into exactly one response
shaped as `{"error": "...", "kind": "..."}`.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from .db import StoreError
from .media import MediaUploadError

logger = logging.getLogger(__name__)


def error_body(kind: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"error": message, "kind": kind, **extra}


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    logger.error("store_error method=%s path=%s error=%s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=error_body("store_error", str(exc)))


async def _media_error_handler(request: Request, exc: MediaUploadError) -> JSONResponse:
    logger.error("media_upload_error method=%s path=%s error=%s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content=error_body("media_upload_error", str(exc)))


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = jsonable_encoder(exc.errors())
    missing = [".".join(str(p) for p in err.get("loc", ())[1:]) for err in details]
    message = "Invalid request: " + ", ".join(m for m in missing if m) if missing else "Invalid request."
    logger.warning("validation_error method=%s path=%s fields=%s", request.method, request.url.path, missing)
    return JSONResponse(
        status_code=422,
        content=error_body("validation_error", message, details=details),
    )


async def _http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("http_error method=%s path=%s status=%s", request.method, request.url.path, exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body("http_error", str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_error method=%s path=%s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("internal_error", "Internal server error."))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(MediaUploadError, _media_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
