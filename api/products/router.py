"""
Product catalog endpoints.

`/add` and `/update` both answer with the stored row.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from core.body import parsed_body
from core.schemas import DeleteByIdRequest

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/products")
async def list_products() -> list[dict]:
    return await repository.list_products()


@router.post("/add")
async def add_product(
    request: schemas.ProductRequest = Depends(parsed_body(schemas.ProductRequest)),
) -> dict:
    row = await repository.create_product(
        name=request.name,
        description=request.description,
        price=request.price,
        image1=request.img1,
        image2=request.img2,
        image3=request.img3,
    )
    logger.info("product_created id=%s", row["id"])
    return row


@router.post("/update")
async def update_product(
    request: schemas.ProductUpdateRequest = Depends(parsed_body(schemas.ProductUpdateRequest)),
) -> dict | None:
    row = await repository.update_product(
        request.id,
        name=request.name,
        description=request.description,
        price=request.price,
        image1=request.img1,
        image2=request.img2,
        image3=request.img3,
    )
    if row is None:
        logger.info("product_update_missed id=%s", request.id)
    return row


@router.post("/delete/product")
async def delete_product(
    request: DeleteByIdRequest = Depends(parsed_body(DeleteByIdRequest)),
) -> dict:
    await repository.delete_product(request.id)
    logger.info("product_deleted id=%s", request.id)
    return {"success": True}
