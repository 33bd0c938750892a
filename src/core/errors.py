"""Reminder Bot — error types.

Every error carries a user-facing message: the router replies with
``str(exc)`` for anything the user can fix by retrying.
"""

from __future__ import annotations


class ReminderBotError(Exception):
    """Base class for all bot errors."""


class InvalidFormatError(ReminderBotError):
    """Input has the wrong shape (token count, non-numeric parts)."""


class InvalidValueError(ReminderBotError):
    """Input is well-formed but a value is outside its allowed range."""


class OutOfRangeError(ReminderBotError):
    """A selected event number does not exist in the current list."""

    def __init__(self, number: int) -> None:
        super().__init__(f"Invalid number: {number}. Please try again.")
        self.number = number


class NotFoundError(ReminderBotError):
    """The user document for a chat does not exist."""


class UpstreamError(ReminderBotError):
    """A collaborator (store or messenger) call failed."""


class StoreError(UpstreamError):
    """Raised when any durable store operation fails."""


class MessengerError(UpstreamError):
    """Raised when sending or deleting a chat message fails."""
