"""
Contact form endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from core.body import parsed_body
from core.schemas import DeleteByIdRequest

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/contact")
async def list_contacts() -> list[dict]:
    return await repository.list_contacts()


@router.post("/contact")
async def create_contact(
    request: schemas.ContactCreateRequest = Depends(parsed_body(schemas.ContactCreateRequest)),
) -> dict:
    row = await repository.create_contact(
        name=request.name,
        email=request.email,
        phone=request.phone,
        message=request.message,
    )
    logger.info("contact_created id=%s", row["id"])
    return row


@router.post("/delete/contact")
async def delete_contact(
    request: DeleteByIdRequest = Depends(parsed_body(DeleteByIdRequest)),
) -> dict:
    # Unknown ids are not an error: delete is idempotent.
    await repository.delete_contact(request.id)
    logger.info("contact_deleted id=%s", request.id)
    return {"success": True}
