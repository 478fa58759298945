"""In-app notification queries using SQLAlchemy Core."""

from typing import Any

from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncConnection

from ..tables import notifications


async def create_notification(
    conn: AsyncConnection,
    user_id: str,
    message: str,
    link: str,
) -> dict[str, Any]:
    """Create an unread in-app notification and return the created record."""
    result = await conn.execute(
        insert(notifications)
        .values(user_id=user_id, message=message, link=link, read=False)
        .returning(notifications)
    )
    return dict(result.mappings().first())
