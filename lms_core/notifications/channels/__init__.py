"""Delivery channel adapters."""

from .email import SendGridEmailAdapter
from .push import SocketPushAdapter

__all__ = ["SendGridEmailAdapter", "SocketPushAdapter"]
