"""Exceptions raised by the arena server."""


class ArenaError(Exception):
    """Base exception for arena errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")


class MalformedMessage(ArenaError):
    """Inbound frame that cannot be understood; dropped, connection kept."""


class OutboxClosed(ArenaError):
    """Send attempted on a connection whose writer has stopped."""
    def __init__(self, message: str = "connection is closed"):
        super().__init__(OUTBOX_CLOSED, message)


# Error codes
INVALID_JSON   = "INVALID_JSON"
INVALID_MESSAGE = "INVALID_MESSAGE"
UNKNOWN_TYPE   = "UNKNOWN_TYPE"
OUTBOX_CLOSED  = "OUTBOX_CLOSED"
