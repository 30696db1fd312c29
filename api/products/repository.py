"""
Product catalog persistence (raw SQL).
"""

from __future__ import annotations

from decimal import Decimal

from core import db

_COLUMNS = "id, name, description, price, image1, image2, image3"


def _to_product(row: dict) -> dict:
    """
    `numeric` comes back as Decimal; the API sends price as a JSON number.
    """
    price = row.get("price")
    if isinstance(price, Decimal):
        row["price"] = float(price)
    return row


async def list_products() -> list[dict]:
    rows = await db.fetch_all(
        f"""
        SELECT {_COLUMNS}
        FROM products
        ORDER BY id ASC
        """
    )
    return [_to_product(row) for row in rows]


async def create_product(
    *,
    name: str,
    description: str,
    price: Decimal,
    image1: str | None = None,
    image2: str | None = None,
    image3: str | None = None,
) -> dict:
    row = await db.fetch_one(
        f"""
        INSERT INTO products (name, description, price, image1, image2, image3)
        VALUES ($1, $2, $3, $4, $5, $6)
        RETURNING {_COLUMNS}
        """,
        name,
        description,
        price,
        image1,
        image2,
        image3,
    )
    if row is None:
        raise db.StoreError("Failed to insert product.")
    return _to_product(row)


async def update_product(
    product_id: int,
    *,
    name: str,
    description: str,
    price: Decimal,
    image1: str | None = None,
    image2: str | None = None,
    image3: str | None = None,
) -> dict | None:
    """
    Replace every column of one product. Returns None when the id does not exist.
    """
    row = await db.fetch_one(
        f"""
        UPDATE products
        SET name = $1,
            description = $2,
            price = $3,
            image1 = $4,
            image2 = $5,
            image3 = $6
        WHERE id = $7
        RETURNING {_COLUMNS}
        """,
        name,
        description,
        price,
        image1,
        image2,
        image3,
        product_id,
    )
    return _to_product(row) if row is not None else None


async def delete_product(product_id: int) -> None:
    await db.execute("DELETE FROM products WHERE id = $1", product_id)
