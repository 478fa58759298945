"""
Notification fan-out over email and in-app push.

Public API:
    NotificationDispatcher(preferences, notifications, email, push) - Fan-out engine
    NotificationEvent, Recipient - What to send, and to whom
    DispatchReport - Per-recipient, per-channel outcome

Channel adapters:
    SendGridEmailAdapter - Email via SendGrid
    SocketPushAdapter - Live push via a Socket.IO-style server
"""

from .events import (
    Recipient,
    NotificationEvent,
    Notification,
    ChannelResult,
    RecipientReport,
    DispatchReport,
)
from .dispatcher import NotificationDispatcher
from .channels import SendGridEmailAdapter, SocketPushAdapter
from .channels.push import set_socket_server

__all__ = [
    # Types
    "Recipient",
    "NotificationEvent",
    "Notification",
    "ChannelResult",
    "RecipientReport",
    "DispatchReport",
    # Dispatch
    "NotificationDispatcher",
    # Channels
    "SendGridEmailAdapter",
    "SocketPushAdapter",
    "set_socket_server",
]
