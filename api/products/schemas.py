"""
Product API schemas (request models).

Image fields carry URLs previously returned by `POST /upload`.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class ProductRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., max_length=5000)
    price: Decimal = Field(..., ge=0)
    img1: str | None = None
    img2: str | None = None
    img3: str | None = None

    @field_validator("img1", "img2", "img3", mode="before")
    @classmethod
    def _blank_image_is_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProductUpdateRequest(ProductRequest):
    id: int
