"""
Real-time push channel.

Emits to a Socket.IO-style server where each user's clients have joined a
room named after the user id. The server object is set by the host process
when it starts (anything with `emit(event, data, room=...)`).
"""

import inspect

from lms_core.errors import DeliveryFailure

NOTIFICATION_EVENT = "notification"

# Set by the host process when its socket server starts
_socket_server = None


def set_socket_server(server) -> None:
    """Set the socket server used for live notifications."""
    global _socket_server
    _socket_server = server


class SocketPushAdapter:
    """Push adapter. Fire-and-forget: no delivery confirmation."""

    def __init__(self, server=None, event_name: str = NOTIFICATION_EVENT):
        self._server = server
        self.event_name = event_name

    async def emit_to_user(self, user_id: str, payload: dict) -> None:
        server = self._server or _socket_server
        if server is None:
            raise DeliveryFailure("Socket server not initialized")

        result = server.emit(self.event_name, payload, room=str(user_id))
        if inspect.isawaitable(result):
            await result
