"""Event store port — abstract interface for user document persistence.

Core modules depend on this protocol, never on a specific database.
Every operation addresses a single user document keyed by chat id.
"""

from __future__ import annotations

from typing import Protocol

from src.core.errors import StoreError
from src.data.models import Event, User

__all__ = ["EventStorePort", "StoreError"]


class EventStorePort(Protocol):
    """Abstract store interface used by the command router."""

    def is_registered(self, chat_id: int) -> bool: ...

    def get_user(self, chat_id: int) -> User | None: ...

    def add_user(self, chat_id: int, kind: str) -> User: ...

    def replace_events(self, chat_id: int, events: list[Event]) -> None: ...

    def ping(self) -> None: ...
