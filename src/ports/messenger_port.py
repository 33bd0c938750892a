"""Messenger port — abstract interface for talking back to a chat.

Core modules depend on this protocol, never on a specific messaging provider.
"""

from __future__ import annotations

from typing import Protocol

from src.core.errors import MessengerError

__all__ = ["MessengerPort", "MessengerError"]


class MessengerPort(Protocol):
    """Abstract messenger interface used by the command router."""

    async def send_message(self, chat_id: int, text: str) -> None: ...

    async def delete_message(self, chat_id: int, message_id: int) -> None: ...
