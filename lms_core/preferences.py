"""
Notification preference resolution.

DEFAULT_NOTIFICATION_PREFERENCE is the single source of the fallback policy:
users who never set preferences get it as-is, and users whose methods or
timings resolve to nothing get its methods/timings.
"""

import logging
from dataclasses import dataclass

from .enums import NotificationMethod, ReminderTiming
from .repositories import PreferenceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NotificationPreference:
    enabled: bool
    methods: tuple[NotificationMethod, ...]
    timings: tuple[ReminderTiming, ...]

    def allows(self, method: NotificationMethod) -> bool:
        return self.enabled and method in self.methods


DEFAULT_NOTIFICATION_PREFERENCE = NotificationPreference(
    enabled=True,
    methods=(NotificationMethod.email,),
    timings=(ReminderTiming.ten_minutes,),
)


def _coerce(values, enum_cls, user_id: str) -> tuple:
    """Keep known members in order, dropping duplicates and unknown values."""
    result = []
    for value in values or ():
        try:
            member = enum_cls(value)
        except ValueError:
            logger.info(f"Ignoring unknown {enum_cls.__name__} {value!r} for user {user_id}")
            continue
        if member not in result:
            result.append(member)
    return tuple(result)


def normalize_preference(raw: dict | None, user_id: str = "?") -> NotificationPreference:
    """
    Build a NotificationPreference from a stored preference mapping.

    Args:
        raw: {"enabled": bool, "methods": [...], "timings": [...]} or None
            when the user never set preferences

    Returns:
        The resolved preference; empty methods fall back to email and empty
        timings to 10min
    """
    if raw is None:
        return DEFAULT_NOTIFICATION_PREFERENCE

    methods = _coerce(raw.get("methods"), NotificationMethod, user_id)
    timings = _coerce(raw.get("timings"), ReminderTiming, user_id)
    return NotificationPreference(
        enabled=bool(raw.get("enabled", DEFAULT_NOTIFICATION_PREFERENCE.enabled)),
        methods=methods or DEFAULT_NOTIFICATION_PREFERENCE.methods,
        timings=timings or DEFAULT_NOTIFICATION_PREFERENCE.timings,
    )


class PreferenceResolver:
    """Resolves a recipient's enabled channels and reminder lead times."""

    def __init__(self, repository: PreferenceRepository):
        self.repository = repository

    async def resolve(self, user_id: str) -> NotificationPreference:
        raw = await self.repository.get_preferences(user_id)
        return normalize_preference(raw, user_id)
