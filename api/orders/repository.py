"""
Order persistence (raw SQL).
"""

from __future__ import annotations

import json
from typing import Any

from core import db

_COLUMNS = "id, first, second, address, phone, building, apartment, cart"


def _json_arg(value: list[Any]) -> str:
    """
    asyncpg does not automatically encode Python lists for json/jsonb parameters.
    We pass JSON as a string and cast to jsonb in SQL.
    """
    return json.dumps(value, ensure_ascii=False)


async def list_orders() -> list[dict]:
    """
    `cart` comes back as JSON text; clients decode it.
    """
    return await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM orders
        ORDER BY id ASC
        """
    )


async def create_order(
    *,
    first: str,
    second: str,
    address: str,
    phone: str,
    building: str,
    apartment: str | None,
    cart: list[Any],
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO orders (first, second, address, phone, building, apartment, cart)
        VALUES ($1, $2, $3, $4, $5, $6, $7::jsonb)
        RETURNING {_COLUMNS}
        """,
        first,
        second,
        address,
        phone,
        building,
        apartment,
        _json_arg(cart),
    )
    if row is None:
        raise db.StoreError("Failed to insert order.")
    return row


async def delete_order(order_id: int) -> None:
    await db.execute("DELETE FROM orders WHERE id = $1", order_id)
