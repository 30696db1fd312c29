"""
Dependencies for routes that talk to the media host.
"""

from __future__ import annotations

from fastapi import Request

from core.media import MediaConfig

from .service import UploadSettings


def get_media_config(request: Request) -> MediaConfig:
    # Built once in the app lifespan; never mutated afterwards.
    return request.app.state.media_config


def get_upload_settings(request: Request) -> UploadSettings:
    return request.app.state.upload_settings
