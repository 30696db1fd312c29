"""
Upload aggregation "service layer".

This file contains logic that is independent of FastAPI's routing layer:
- Stage each incoming image in scratch storage (with a size limit)
- Forward the staged images to the media host concurrently
- Collect a per-slot result, so one failed slot does not hide the others

Staged files are always removed, whatever happens to the remote upload.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
import tempfile
import time
from collections.abc import AsyncIterator
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

from fastapi import HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from core import media

SLOTS = ("img1", "img2", "img3")

# Keep this conservative in dev; you can raise it later.
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UploadSettings:
    scratch_dir: Path
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES


@dataclass
class UploadOutcome:
    urls: dict[str, str | None] = field(default_factory=lambda: {slot: None for slot in SLOTS})
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


def max_upload_bytes_from_env() -> int:
    """
    Read MAX_UPLOAD_BYTES from env, falling back to a sane default.
    """
    raw = os.environ.get("MAX_UPLOAD_BYTES", "").strip()
    if not raw:
        return DEFAULT_MAX_UPLOAD_BYTES

    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError("Invalid MAX_UPLOAD_BYTES. It must be an integer.") from exc

    if value <= 0:
        raise RuntimeError("Invalid MAX_UPLOAD_BYTES. It must be > 0.")

    return value


def upload_settings_from_env() -> UploadSettings:
    """
    Read once at startup; a bad value stops the process instead of failing every upload.
    """
    raw = os.environ.get("UPLOAD_SCRATCH_DIR", "").strip()
    directory = Path(raw) if raw else Path(tempfile.gettempdir()) / "shop-uploads"
    directory.mkdir(parents=True, exist_ok=True)
    return UploadSettings(scratch_dir=directory, max_bytes=max_upload_bytes_from_env())


def safe_filename(filename: str | None) -> str:
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).strip("._")
    return name[:100] or "upload"


@asynccontextmanager
async def staged_file(file: UploadFile, *, directory: Path, max_bytes: int) -> AsyncIterator[Path]:
    """
    Write the upload to a uniquely named scratch file and delete it on exit.

    Name is `<epoch ms>-<random>-<original name>`. Disk writes run in the
    threadpool so a large upload does not stall other requests.
    """
    fd, raw_path = await run_in_threadpool(
        tempfile.mkstemp,
        dir=directory,
        prefix=f"{int(time.time() * 1000)}-",
        suffix=f"-{safe_filename(file.filename)}",
    )
    path = Path(raw_path)
    try:
        chunk_size = 1024 * 1024  # 1 MiB
        written = 0
        fh = os.fdopen(fd, "wb")
        try:
            while True:
                chunk = await file.read(chunk_size)
                if not chunk:
                    break
                written += len(chunk)
                if written > max_bytes:
                    raise HTTPException(
                        status_code=413,
                        detail=f"File too large. Max is {max_bytes} bytes.",
                    )
                await run_in_threadpool(fh.write, chunk)
        finally:
            await run_in_threadpool(fh.close)
        yield path
    finally:
        await run_in_threadpool(path.unlink, missing_ok=True)


async def _upload_slot(
    slot: str,
    path: Path,
    *,
    config: media.MediaConfig,
    filename: str,
) -> tuple[str, str | None, str | None]:
    try:
        url = await media.upload_file(path, config=config, resource_type="auto", filename=filename)
    except media.MediaUploadError as exc:
        logger.error("media_upload_failed slot=%s error=%s", slot, exc)
        return slot, None, str(exc)
    return slot, url, None


async def upload_images(
    files: dict[str, UploadFile | None],
    *,
    config: media.MediaConfig,
    settings: UploadSettings,
) -> UploadOutcome:
    """
    Stage and forward every attached slot. Slots without a file stay None.
    """
    outcome = UploadOutcome()
    attached = {slot: files.get(slot) for slot in SLOTS if files.get(slot) is not None}
    # Browsers send an empty part for an untouched file input.
    attached = {slot: f for slot, f in attached.items() if f.filename}
    if not attached:
        return outcome

    async with AsyncExitStack() as stack:
        staged: dict[str, Path] = {}
        for slot, upload in attached.items():
            staged[slot] = await stack.enter_async_context(
                staged_file(upload, directory=settings.scratch_dir, max_bytes=settings.max_bytes)
            )

        results = await asyncio.gather(
            *(
                _upload_slot(slot, path, config=config, filename=safe_filename(attached[slot].filename))
                for slot, path in staged.items()
            )
        )

    for slot, url, error in results:
        if error is not None:
            outcome.failed[slot] = error
        else:
            outcome.urls[slot] = url
    return outcome
