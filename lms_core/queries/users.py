"""User and notification-preference queries using SQLAlchemy Core."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncConnection

from ..enums import UserRole
from ..tables import users


async def get_user(conn: AsyncConnection, user_id: str) -> dict[str, Any] | None:
    """Get a user by id."""
    result = await conn.execute(select(users).where(users.c.user_id == user_id))
    row = result.mappings().first()
    return dict(row) if row else None


async def get_users(conn: AsyncConnection, user_ids: list[str]) -> list[dict[str, Any]]:
    """Get the users with the given ids, in the order the ids were given."""
    if not user_ids:
        return []
    result = await conn.execute(select(users).where(users.c.user_id.in_(user_ids)))
    by_id = {row["user_id"]: dict(row) for row in result.mappings()}
    return [by_id[user_id] for user_id in user_ids if user_id in by_id]


async def get_admin_users(conn: AsyncConnection) -> list[dict[str, Any]]:
    """Get every admin and super admin."""
    result = await conn.execute(
        select(users)
        .where(users.c.role.in_([UserRole.admin, UserRole.super_admin]))
        .order_by(users.c.user_id)
    )
    return [dict(row) for row in result.mappings()]


async def get_notification_preferences(
    conn: AsyncConnection,
    user_id: str,
) -> dict[str, Any] | None:
    """
    Get a user's stored notification preferences.

    Returns:
        {"enabled", "methods", "timings"}, or None if the user is unknown or
        never saved preferences
    """
    result = await conn.execute(
        select(
            users.c.notifications_enabled,
            users.c.notification_methods,
            users.c.notification_timings,
        ).where(users.c.user_id == user_id)
    )
    row = result.mappings().first()
    if not row or row["notifications_enabled"] is None:
        return None
    return {
        "enabled": row["notifications_enabled"],
        "methods": row["notification_methods"] or [],
        "timings": row["notification_timings"] or [],
    }
