"""Shared test fixtures and configuration.

Sets up fake environment variables so src.config doesn't sys.exit(),
and provides common fixtures like a temp DB and a recording messenger.
"""

import os

# Patch env vars BEFORE any src imports
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "fake-token-for-tests")
os.environ.setdefault("BOT_USERNAME", "reminder_test_bot")

import pytest
from unittest.mock import AsyncMock, MagicMock


@pytest.fixture
def tmp_db_path(tmp_path):
    """Return a temporary SQLite DB path."""
    return str(tmp_path / "test_reminders.db")


@pytest.fixture
def user_db(tmp_db_path):
    """Return a UserDB instance backed by a temp file."""
    from src.data.db import UserDB
    return UserDB(db_path=tmp_db_path)


@pytest.fixture
def messenger():
    """Return a mock messenger that records sent and deleted messages."""
    mock = MagicMock()
    mock.send_message = AsyncMock()
    mock.delete_message = AsyncMock()
    return mock


@pytest.fixture
def states():
    from src.core.conversation_state import ConversationStateStore
    return ConversationStateStore()


@pytest.fixture
def router(user_db, messenger, states):
    """Return a CommandRouter wired to a temp DB and the mock messenger."""
    from src.core.command_router import CommandRouter
    return CommandRouter(user_db, messenger, states, bot_username="reminder_test_bot")
