"""
Contracts for the collaborators the engine depends on.

Persistence, user records and delivery transports live outside the engine;
SQLAlchemy-backed implementations are in lms_core.store, channel adapters in
lms_core.notifications.channels.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .calls import ScheduledCall
    from .enums import EventKind
    from .notifications.events import Notification, Recipient
    from .report_cards import ReportCard


class CallRepository(Protocol):
    async def get_by_id(self, call_id: str) -> "ScheduledCall":
        """Return the call; raise NotFound for unknown ids."""
        ...

    async def save(self, call: "ScheduledCall") -> None:
        """Insert or overwrite the record with this id."""
        ...


class PreferenceRepository(Protocol):
    async def get_preferences(self, user_id: str) -> dict | None:
        """{"enabled", "methods", "timings"}, or None if never set."""
        ...


class UserDirectory(Protocol):
    async def get_user(self, user_id: str) -> "Recipient":
        """Return the user as a recipient; raise NotFound for unknown ids."""
        ...

    async def get_users(self, user_ids: list[str]) -> list["Recipient"]:
        """Return the known users among user_ids, in the given order."""
        ...

    async def get_admins(self) -> list["Recipient"]:
        """Return every admin and super admin."""
        ...


class ReportCardRepository(Protocol):
    async def create(self, report_card: "ReportCard") -> None:
        ...


class NotificationRepository(Protocol):
    async def create(self, notification: "Notification") -> "Notification":
        ...


class EmailAdapter(Protocol):
    async def send(self, kind: "EventKind", template_data: dict) -> None:
        """Render and send one email; raise on any failure."""
        ...


class PushAdapter(Protocol):
    async def emit_to_user(self, user_id: str, payload: dict) -> None:
        """Best-effort live push; no delivery confirmation."""
        ...
