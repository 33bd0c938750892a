"""
Reminder Bot — Conversation State.

Holds the in-progress /add conversation and the pending /delete selection for
each chat. State lives in process memory only and is lost on restart.

Handling of a single chat is serialized through ``session(chat_id)``; different
chats never share state or locks.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum

logger = logging.getLogger(__name__)


class AddStep(Enum):
    AWAITING_DATE = "awaiting_date"
    AWAITING_TIME = "awaiting_time"
    AWAITING_DESCRIPTION = "awaiting_description"


@dataclass
class AddCommandState:
    """Fields collected so far by the /add conversation."""

    step: AddStep = AddStep.AWAITING_DATE
    date: date | None = None
    time: time | None = None
    description: str | None = None
    updated_at: datetime = field(default_factory=datetime.now)

    def combined(self) -> datetime:
        """The event instant. Only valid once date and time are collected."""
        if self.date is None or self.time is None:
            raise ValueError(f"Cannot combine incomplete state at step {self.step.value}")
        return datetime.combine(self.date, self.time)


class ConversationStateStore:
    """Per-chat conversation state for the add and delete flows.

    Args:
        ttl_seconds: Drop an /add conversation untouched for this long.
            0 keeps it until completion or process exit.
    """

    def __init__(self, ttl_seconds: int = 0) -> None:
        self._ttl_seconds = max(0, int(ttl_seconds))
        self._add_states: dict[int, AddCommandState] = {}
        self._deleting: set[int] = set()
        # chat id -> (lock, number of sessions holding or waiting on it)
        self._locks: dict[int, tuple[asyncio.Lock, int]] = {}

    @asynccontextmanager
    async def session(self, chat_id: int) -> AsyncIterator[None]:
        """Hold this chat's lock for the duration of the block.

        The lock exists only while some session holds or waits on it, so
        idle chats leave nothing behind.
        """
        lock, users = self._locks.get(chat_id, (None, 0))
        if lock is None:
            lock = asyncio.Lock()
        self._locks[chat_id] = (lock, users + 1)
        try:
            async with lock:
                yield
        finally:
            lock, users = self._locks[chat_id]
            if users == 1:
                del self._locks[chat_id]
            else:
                self._locks[chat_id] = (lock, users - 1)

    def tracked_chats(self) -> int:
        """Number of chats holding any state or lock."""
        return len(set(self._add_states) | self._deleting | set(self._locks))

    # -- /add -----------------------------------------------------------------

    def get_add_state(
        self, chat_id: int, now: datetime | None = None,
    ) -> AddCommandState | None:
        state = self._add_states.get(chat_id)
        if state is None or not self._ttl_seconds:
            return state

        current = now or datetime.now()
        if (current - state.updated_at).total_seconds() > self._ttl_seconds:
            logger.info("Add conversation for chat %d expired at step %s", chat_id, state.step.value)
            del self._add_states[chat_id]
            return None
        return state

    def has_add_state(self, chat_id: int, now: datetime | None = None) -> bool:
        return self.get_add_state(chat_id, now=now) is not None

    def set_add_state(self, chat_id: int, state: AddCommandState) -> None:
        state.updated_at = datetime.now()
        self._add_states[chat_id] = state

    def clear_add_state(self, chat_id: int) -> None:
        self._add_states.pop(chat_id, None)

    # -- /delete --------------------------------------------------------------

    def is_deleting(self, chat_id: int) -> bool:
        return chat_id in self._deleting

    def set_deleting(self, chat_id: int) -> None:
        self._deleting.add(chat_id)

    def clear_deleting(self, chat_id: int) -> None:
        self._deleting.discard(chat_id)
