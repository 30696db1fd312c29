"""
FastAPI router for product image uploads.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from core.errors import error_body
from core.media import MediaConfig

from . import dependencies, service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/upload")
async def upload_images(
    img1: UploadFile | None = File(default=None),
    img2: UploadFile | None = File(default=None),
    img3: UploadFile | None = File(default=None),
    config: MediaConfig = Depends(dependencies.get_media_config),
    settings: service.UploadSettings = Depends(dependencies.get_upload_settings),
):
    """
    Forward up to three images to the media host.

    Success: {"img1": url|null, "img2": url|null, "img3": url|null}.
    Any failed slot turns the response into a 500 that still carries the
    URLs of the slots that did upload, plus `failed: {slot: message}`.
    """
    files = {"img1": img1, "img2": img2, "img3": img3}
    logger.info("upload_received slots=%s", [slot for slot, f in files.items() if f is not None])

    outcome = await service.upload_images(files, config=config, settings=settings)
    if not outcome.ok:
        slots = ", ".join(sorted(outcome.failed))
        return JSONResponse(
            status_code=500,
            content=error_body(
                "media_upload_error",
                f"Upload failed for {slots}.",
                failed=outcome.failed,
                **outcome.urls,
            ),
        )

    logger.info("upload_complete urls=%s", outcome.urls)
    return outcome.urls
