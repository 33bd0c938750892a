"""
Reminder Bot — Data Models.

A user document is keyed by chat id and owns its list of events. Events have
no identity of their own: they are addressed by position in the date-sorted
list shown to the user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Event:
    """A single reminder scheduled by a chat."""

    when: datetime          # naive, combined date + time
    description: str        # free text, may be empty


@dataclass
class User:
    """A chat registered via /start, with its reminders."""

    chat_id: int
    kind: str                               # "user" (private chat) | "group"
    events: list[Event] = field(default_factory=list)
    created_at: str = ""

    def sorted_events(self) -> list[Event]:
        """Events in display order (ascending by scheduled instant)."""
        return sorted(self.events, key=lambda ev: ev.when)


@dataclass
class IncomingMessage:
    """A normalized inbound chat message, decoded from a webhook update."""

    chat_id: int
    chat_kind: str          # Telegram chat type: "private", "group", ...
    text: str
    message_id: int

    @property
    def user_kind(self) -> str:
        return "user" if self.chat_kind == "private" else "group"
