"""
Contact persistence (raw SQL).
"""

from __future__ import annotations

from core import db


async def list_contacts() -> list[dict]:
    return await db.fetch_all(
        """
        SELECT id, name, email, phone, message
        FROM contact
        ORDER BY id ASC
        """
    )


async def create_contact(*, name: str, email: str, phone: str, message: str) -> dict:
    row = await db.fetch_one(
        """
        INSERT INTO contact (name, email, phone, message)
        VALUES ($1, $2, $3, $4)
        RETURNING id, name, email, phone, message
        """,
        name,
        email,
        phone,
        message,
    )
    if row is None:
        raise db.StoreError("Failed to insert contact.")
    return row


async def delete_contact(contact_id: int) -> None:
    await db.execute("DELETE FROM contact WHERE id = $1", contact_id)
