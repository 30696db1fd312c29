"""
Order API schemas (request models).

Field names follow the checkout form the storefront posts
(`fName`, `lName`, `adress`, `apart`).
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OrderCreateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    first: str = Field(..., alias="fName", min_length=1, max_length=200)
    second: str = Field(..., alias="lName", min_length=1, max_length=200)
    address: str = Field(..., alias="adress", min_length=1, max_length=500)
    phone: str = Field(..., min_length=1, max_length=50)
    building: str = Field(..., max_length=100)
    apartment: str | None = Field(default=None, alias="apart", max_length=100)
    # Frozen snapshot of the cart line items; never reconciled with products.
    cart: list[Any]

    @field_validator("cart", mode="before")
    @classmethod
    def _decode_form_cart(cls, value: Any) -> Any:
        # HTML forms can only post the cart as JSON text.
        if isinstance(value, str):
            try:
                return json.loads(value)
            except ValueError:
                return value
        return value
