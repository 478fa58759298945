"""Query layer for database operations using SQLAlchemy Core."""

from .calls import get_call, upsert_call
from .notifications import create_notification
from .report_cards import create_report_card
from .users import get_admin_users, get_notification_preferences, get_user, get_users

__all__ = [
    # Calls
    "get_call",
    "upsert_call",
    # Users
    "get_user",
    "get_users",
    "get_admin_users",
    "get_notification_preferences",
    # Notifications
    "create_notification",
    # Report cards
    "create_report_card",
]
