"""
Media host (Cloudinary-compatible) upload client.

Used endpoint:
- POST /v1_1/{cloud_name}/{resource_type}/upload  -> {"secure_url": "https://..."}

Credentials live in an immutable `MediaConfig` built once at startup and
passed into every call.
"""

from __future__ import annotations

import hashlib
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx
from fastapi.concurrency import run_in_threadpool

DEFAULT_UPLOAD_URL = "https://api.cloudinary.com"
DEFAULT_FOLDER = "my_images"
DEFAULT_TIMEOUT_S = 60.0


# Media host failures are explicit and separable from other runtime errors.
class MediaUploadError(RuntimeError):
    pass


@dataclass(frozen=True)
class MediaConfig:
    cloud_name: str
    api_key: str
    api_secret: str
    folder: str = DEFAULT_FOLDER
    upload_url: str = DEFAULT_UPLOAD_URL
    timeout_s: float = DEFAULT_TIMEOUT_S

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)


def media_config_from_env() -> MediaConfig:
    raw_timeout = os.environ.get("MEDIA_UPLOAD_TIMEOUT_S", "").strip()
    try:
        timeout_s = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT_S
    except ValueError:
        timeout_s = DEFAULT_TIMEOUT_S

    return MediaConfig(
        cloud_name=os.environ.get("CLOUD_NAME", "").strip(),
        api_key=os.environ.get("CLOUD_API_KEY", "").strip(),
        api_secret=os.environ.get("CLOUD_API_SECRET", "").strip(),
        folder=os.environ.get("MEDIA_FOLDER", DEFAULT_FOLDER).strip() or DEFAULT_FOLDER,
        upload_url=os.environ.get("MEDIA_UPLOAD_URL", DEFAULT_UPLOAD_URL).strip() or DEFAULT_UPLOAD_URL,
        timeout_s=timeout_s,
    )


def sign_params(params: dict[str, Any], api_secret: str) -> str:
    """
    Signature over the signed params: `k1=v1&k2=v2` sorted by key, secret appended, SHA-1 hex.
    """
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


async def upload_file(
    path: str | Path,
    *,
    config: MediaConfig,
    resource_type: str = "auto",
    filename: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """
    Upload a local file into `config.folder` and return its secure URL.
    """
    if not config.is_configured:
        raise MediaUploadError("Media host credentials are not configured.")

    path = Path(path)
    try:
        data = await run_in_threadpool(path.read_bytes)
    except OSError as exc:
        raise MediaUploadError(f"Could not read staged file: {exc}") from exc

    signed = {"folder": config.folder, "timestamp": int(time.time())}
    form = {
        **{k: str(v) for k, v in signed.items()},
        "api_key": config.api_key,
        "signature": sign_params(signed, config.api_secret),
    }
    url = f"/v1_1/{config.cloud_name}/{resource_type}/upload"

    try:
        async with httpx.AsyncClient(
            base_url=config.upload_url.rstrip("/"),
            timeout=config.timeout_s,
            transport=transport,
        ) as client:
            resp = await client.post(url, data=form, files={"file": (filename or path.name, data)})
    except httpx.TimeoutException as exc:
        raise MediaUploadError(f"Media upload timed out after {config.timeout_s}s.") from exc
    except httpx.HTTPError as exc:
        raise MediaUploadError(f"Media upload request failed: {exc}") from exc

    if resp.status_code != 200:
        # Avoid dumping huge bodies; include a small snippet.
        body = resp.text[:500]
        raise MediaUploadError(f"Media upload failed: {resp.status_code} {body}")

    try:
        payload: dict[str, Any] = resp.json()
    except ValueError as exc:
        raise MediaUploadError("Media host returned a non-JSON response.") from exc

    secure_url = payload.get("secure_url")
    if not isinstance(secure_url, str) or not secure_url:
        raise MediaUploadError("Media host returned no secure_url.")
    return secure_url
