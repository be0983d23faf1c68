"""Error taxonomy for the chat core.

Routers let these propagate; ``app.main`` maps each one to an HTTP status.
"""

from __future__ import annotations


class ChatError(Exception):
    """Base class for errors raised by the chat core."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message or self.__class__.__name__


class AuthenticationError(ChatError):
    """No resolved user for the request. Never retried."""

    status_code = 401


class AuthorizationError(ChatError):
    """The user is not allowed to act on the target (delete, report, mark read)."""

    status_code = 403


class NotFoundError(ChatError):
    status_code = 404


class ConflictError(ChatError):
    """A concurrent writer created the same record first.

    Recovered inside RoomService; it does not reach callers.
    """

    status_code = 409


class TransientIOError(ChatError):
    """Storage or transport timed out; safe to retry with backoff."""

    status_code = 503


class InvalidMessageError(ChatError, ValueError):
    status_code = 422


class InvalidRoomKeyError(ChatError, ValueError):
    status_code = 422


class InvalidContactError(ChatError, ValueError):
    status_code = 422
