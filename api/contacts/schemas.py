"""
Contact API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ContactCreateRequest(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=320)
    phone: str = Field(..., min_length=1, max_length=50)
    message: str = Field(..., max_length=5000)
