"""Scheduled call queries using SQLAlchemy Core."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import scheduled_calls


async def get_call(conn: AsyncConnection, call_id: str) -> dict[str, Any] | None:
    """Get a scheduled call row by id."""
    result = await conn.execute(
        select(scheduled_calls).where(scheduled_calls.c.call_id == call_id)
    )
    row = result.mappings().first()
    return dict(row) if row else None


async def upsert_call(conn: AsyncConnection, values: dict[str, Any]) -> None:
    """
    Insert a call row, or overwrite every column of the row with the same id.

    Concurrent writers to the same call: the last one wins.
    """
    values = {**values, "updated_at": datetime.now(timezone.utc)}
    stmt = insert(scheduled_calls).values(**values)
    stmt = stmt.on_conflict_do_update(
        index_elements=[scheduled_calls.c.call_id],
        set_={key: stmt.excluded[key] for key in values if key != "call_id"},
    )
    await conn.execute(stmt)
