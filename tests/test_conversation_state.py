"""Tests for src.core.conversation_state — per-chat add/delete state."""

import asyncio

import pytest
from datetime import date, datetime, time, timedelta

from src.core.conversation_state import AddCommandState, AddStep, ConversationStateStore


class TestAddState:
    def test_empty_by_default(self, states):
        assert states.get_add_state(1) is None
        assert states.has_add_state(1) is False

    def test_set_and_get(self, states):
        states.set_add_state(1, AddCommandState())
        state = states.get_add_state(1)
        assert state is not None
        assert state.step is AddStep.AWAITING_DATE

    def test_clear(self, states):
        states.set_add_state(1, AddCommandState())
        states.clear_add_state(1)
        assert states.has_add_state(1) is False

    def test_clear_missing_is_noop(self, states):
        states.clear_add_state(42)

    def test_chats_are_independent(self, states):
        states.set_add_state(1, AddCommandState(step=AddStep.AWAITING_TIME))
        assert states.has_add_state(2) is False
        assert states.get_add_state(1).step is AddStep.AWAITING_TIME


class TestAddStateTTL:
    def test_no_ttl_never_expires(self):
        store = ConversationStateStore()
        store.set_add_state(1, AddCommandState())
        far_future = datetime.now() + timedelta(days=365)
        assert store.has_add_state(1, now=far_future) is True

    def test_expires_after_ttl(self):
        store = ConversationStateStore(ttl_seconds=60)
        store.set_add_state(1, AddCommandState())
        later = datetime.now() + timedelta(seconds=61)
        assert store.get_add_state(1, now=later) is None
        # dropped, not just hidden
        assert store.get_add_state(1) is None

    def test_alive_within_ttl(self):
        store = ConversationStateStore(ttl_seconds=60)
        store.set_add_state(1, AddCommandState())
        assert store.has_add_state(1, now=datetime.now() + timedelta(seconds=30)) is True


class TestCombined:
    def test_combines_date_and_time(self):
        state = AddCommandState(date=date(2025, 3, 15), time=time(14, 30))
        assert state.combined() == datetime(2025, 3, 15, 14, 30)

    def test_incomplete_raises(self):
        with pytest.raises(ValueError):
            AddCommandState(date=date(2025, 3, 15)).combined()


class TestDeleteFlag:
    def test_false_by_default(self, states):
        assert states.is_deleting(1) is False

    def test_set_and_clear(self, states):
        states.set_deleting(1)
        assert states.is_deleting(1) is True
        states.clear_deleting(1)
        assert states.is_deleting(1) is False

    def test_independent_from_add_state(self, states):
        states.set_deleting(1)
        assert states.has_add_state(1) is False


class TestSessions:
    @pytest.mark.asyncio
    async def test_lock_dropped_after_session(self, states):
        async with states.session(1):
            assert states.tracked_chats() == 1
        assert states.tracked_chats() == 0

    @pytest.mark.asyncio
    async def test_lock_dropped_after_error(self, states):
        with pytest.raises(RuntimeError):
            async with states.session(1):
                raise RuntimeError("boom")
        assert states.tracked_chats() == 0

    @pytest.mark.asyncio
    async def test_same_chat_serialized(self, states):
        order = []

        async def worker(name):
            async with states.session(1):
                order.append(f"{name} in")
                await asyncio.sleep(0)
                await asyncio.sleep(0)
                order.append(f"{name} out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order == ["a in", "a out", "b in", "b out"]
        assert states.tracked_chats() == 0

    @pytest.mark.asyncio
    async def test_different_chats_not_blocked(self, states):
        async with states.session(1):
            await asyncio.wait_for(self._enter(states, 2), timeout=1)

    @staticmethod
    async def _enter(states, chat_id):
        async with states.session(chat_id):
            pass

    def test_cleared_delete_flag_forgotten(self, states):
        states.set_deleting(1)
        states.clear_deleting(1)
        assert states.tracked_chats() == 0

    def test_cleared_add_state_forgotten(self, states):
        states.set_add_state(1, AddCommandState())
        states.clear_add_state(1)
        assert states.tracked_chats() == 0
