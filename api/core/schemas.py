"""
Request models shared by several feature routers.
"""

from __future__ import annotations

from pydantic import BaseModel


class DeleteByIdRequest(BaseModel):
    id: int
