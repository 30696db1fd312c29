"""
Checkout / order endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from core.body import parsed_body
from core.schemas import DeleteByIdRequest

from . import repository, schemas

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/orders")
async def list_orders() -> list[dict]:
    return await repository.list_orders()


@router.post("/order")
async def create_order(
    request: schemas.OrderCreateRequest = Depends(parsed_body(schemas.OrderCreateRequest)),
) -> dict:
    row = await repository.create_order(
        first=request.first,
        second=request.second,
        address=request.address,
        phone=request.phone,
        building=request.building,
        apartment=request.apartment,
        cart=request.cart,
    )
    logger.info("order_created id=%s items=%s", row["id"], len(request.cart))
    return row


@router.post("/delete/order")
async def delete_order(
    request: DeleteByIdRequest = Depends(parsed_body(DeleteByIdRequest)),
) -> dict:
    await repository.delete_order(request.id)
    logger.info("order_deleted id=%s", request.id)
    return {"success": True}
