"""
Reminder Bot — Command Router.

The conversational engine: every inbound text message is classified against
the chat's conversation state and the known command prefixes, then handled
by exactly one flow (start, add, ping, list, delete, delete-response).

Dispatch order is fixed and first match wins. An active /add conversation
captures every message except /start, including one that would otherwise
answer a pending /delete.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.conversation_state import AddCommandState, AddStep, ConversationStateStore
from src.core.datetime_parser import parse_date, parse_time
from src.core.errors import (
    InvalidFormatError,
    InvalidValueError,
    NotFoundError,
    OutOfRangeError,
    StoreError,
    UpstreamError,
)
from src.core.range_selector import parse_selection
from src.data.models import Event, IncomingMessage, User

if TYPE_CHECKING:
    from src.ports.event_store_port import EventStorePort
    from src.ports.messenger_port import MessengerPort

logger = logging.getLogger(__name__)

_EVENT_TIME_FORMAT = "%d-%m-%y %H:%M"

MSG_WELCOME_BACK = "Hello, welcome back!"
MSG_WELCOME = "Hello, welcome to our bot!"
MSG_DATE_PROMPT = (
    "Enter date of event (format dd-mm-yyyy or dd-mm or dd. "
    "You can use - , . or space as a separator)"
)
MSG_TIME_PROMPT = "Enter time of event (format hh:mm)"
MSG_DESCRIPTION_PROMPT = "Enter description of event"
MSG_ADDED = "Successfully added new event!"
MSG_NO_PROFILE = "I couldn't find your profile. Send /start first, then try /add again."
MSG_PING_OK = "Don't worry! Everything is ok!"
MSG_NO_EVENTS = "You have no events!"
MSG_LIST_HEADER = "Here are your events:"
MSG_DELETE_INSTRUCTIONS = (
    "Reply with the number(s) of the event(s) you want to delete. "
    "You can enter multiple numbers or ranges (e.g. '2, 4-7, 9')."
)
MSG_DELETED = "Event(s) deleted!"
MSG_UPSTREAM_FAILURE = "Something went wrong. Please try again later."


def format_event(event: Event) -> str:
    return f"{event.when.strftime(_EVENT_TIME_FORMAT)}: {event.description}"


def render_event_list(events: list[Event]) -> str:
    """Render the /list reply for events already in display order."""
    lines = [f"🔘 {format_event(ev)}" for ev in events]
    return "\n".join([MSG_LIST_HEADER, *lines])


def render_delete_menu(events: list[Event]) -> str:
    """Render the numbered /delete menu for events already in display order."""
    lines = [f"{i}. {format_event(ev)}" for i, ev in enumerate(events, start=1)]
    return "\n".join([MSG_LIST_HEADER, *lines]) + "\n\n" + MSG_DELETE_INSTRUCTIONS


def remove_selected(events: list[Event], numbers: list[int]) -> list[Event]:
    """Return ``events`` without the 1-based positions in ``numbers``.

    All numbers are validated before anything is removed, so an invalid
    number leaves the selection entirely unapplied.

    Raises:
        OutOfRangeError: for the first number (largest first) outside 1..len(events).
    """
    for number in sorted(numbers, reverse=True):
        if number < 1 or number > len(events):
            raise OutOfRangeError(number)

    selected = set(numbers)
    return [ev for i, ev in enumerate(events, start=1) if i not in selected]


class CommandRouter:
    """Routes chat messages to the command flows.

    Args:
        store: User document persistence (EventStorePort).
        messenger: Outbound chat messages (MessengerPort).
        states: Per-chat conversation state shared across messages.
        bot_username: Accepted in ``/add@<bot_username>``. Any name is
            accepted when empty.
    """

    def __init__(
        self,
        store: EventStorePort,
        messenger: MessengerPort,
        states: ConversationStateStore | None = None,
        bot_username: str = "",
    ) -> None:
        self._store = store
        self._messenger = messenger
        self._states = states if states is not None else ConversationStateStore()
        self._bot_username = bot_username.lstrip("@").lower()

    async def handle(self, message: IncomingMessage) -> None:
        """Handle one inbound message. Never raises for upstream failures."""
        async with self._states.session(message.chat_id):
            try:
                await self._dispatch(message)
            except UpstreamError as exc:
                logger.exception("Upstream failure in chat %d: %s", message.chat_id, exc)
                await self._reply_failure(message.chat_id)

    async def _dispatch(self, message: IncomingMessage) -> None:
        text = message.text
        chat_id = message.chat_id

        if text.startswith("/start"):
            await self._handle_start(message)
        elif text.startswith("/add") or self._states.has_add_state(chat_id):
            await self._handle_add(message)
        elif text.startswith("/ping"):
            await self._handle_ping(message)
        elif text.startswith("/list"):
            await self._handle_list(message)
        elif text.startswith("/delete"):
            await self._handle_delete(message)
        elif self._states.is_deleting(chat_id):
            await self._handle_delete_response(message)
        else:
            logger.debug("Ignoring message in chat %d", chat_id)

    def _require_user(self, chat_id: int) -> User:
        user = self._store.get_user(chat_id)
        if user is None:
            raise NotFoundError(f"No user document for chat {chat_id}")
        return user

    async def _reply_failure(self, chat_id: int) -> None:
        try:
            await self._messenger.send_message(chat_id, MSG_UPSTREAM_FAILURE)
        except UpstreamError as exc:
            logger.error("Could not report failure to chat %d: %s", chat_id, exc)

    # -----------------------------------------------------------------------
    # /start
    # -----------------------------------------------------------------------

    async def _handle_start(self, message: IncomingMessage) -> None:
        chat_id = message.chat_id
        if self._store.is_registered(chat_id):
            await self._messenger.send_message(chat_id, MSG_WELCOME_BACK)
            await self._messenger.delete_message(chat_id, message.message_id)
            return

        self._store.add_user(chat_id, message.user_kind)
        await self._messenger.send_message(chat_id, MSG_WELCOME)

    # -----------------------------------------------------------------------
    # /add conversation
    # -----------------------------------------------------------------------

    def _is_add_command(self, text: str) -> bool:
        if text == "/add":
            return True
        if not text.startswith("/add@"):
            return False
        name = text[len("/add@"):]
        if not self._bot_username:
            return bool(name) and " " not in name
        return name.lower() == self._bot_username

    async def _handle_add(self, message: IncomingMessage) -> None:
        chat_id = message.chat_id

        if self._is_add_command(message.text):
            self._states.set_add_state(chat_id, AddCommandState(step=AddStep.AWAITING_DATE))
            logger.info("Chat %d started /add", chat_id)
            await self._messenger.send_message(chat_id, MSG_DATE_PROMPT)
            return

        state = self._states.get_add_state(chat_id)
        if state is None:
            # "/addsomething" with no conversation in progress
            return

        if state.step is AddStep.AWAITING_DATE:
            await self._add_receive_date(message, state)
        elif state.step is AddStep.AWAITING_TIME:
            await self._add_receive_time(message, state)
        else:
            await self._add_receive_description(message, state)

    async def _add_receive_date(self, message: IncomingMessage, state: AddCommandState) -> None:
        try:
            state.date = parse_date(message.text)
        except (InvalidFormatError, InvalidValueError) as exc:
            await self._messenger.send_message(message.chat_id, str(exc))
            return

        state.step = AddStep.AWAITING_TIME
        self._states.set_add_state(message.chat_id, state)
        logger.info("Chat %d /add: date %s, awaiting time", message.chat_id, state.date)
        await self._messenger.send_message(message.chat_id, MSG_TIME_PROMPT)

    async def _add_receive_time(self, message: IncomingMessage, state: AddCommandState) -> None:
        try:
            state.time = parse_time(message.text)
        except (InvalidFormatError, InvalidValueError) as exc:
            await self._messenger.send_message(message.chat_id, str(exc))
            return

        state.step = AddStep.AWAITING_DESCRIPTION
        self._states.set_add_state(message.chat_id, state)
        logger.info("Chat %d /add: time %s, awaiting description", message.chat_id, state.time)
        await self._messenger.send_message(message.chat_id, MSG_DESCRIPTION_PROMPT)

    async def _add_receive_description(
        self, message: IncomingMessage, state: AddCommandState,
    ) -> None:
        chat_id = message.chat_id
        state.description = message.text
        event = Event(when=state.combined(), description=state.description)

        try:
            user = self._require_user(chat_id)
        except NotFoundError as exc:
            logger.warning("Cannot add event: %s", exc)
            self._states.clear_add_state(chat_id)
            await self._messenger.send_message(chat_id, MSG_NO_PROFILE)
            return

        user.events.append(event)
        self._store.replace_events(chat_id, user.events)
        self._states.clear_add_state(chat_id)
        logger.info("Chat %d added event at %s", chat_id, event.when.isoformat())
        await self._messenger.send_message(chat_id, MSG_ADDED)

    # -----------------------------------------------------------------------
    # /ping
    # -----------------------------------------------------------------------

    async def _handle_ping(self, message: IncomingMessage) -> None:
        chat_id = message.chat_id
        try:
            self._store.ping()
        except StoreError as exc:
            logger.error("Ping failed: %s", exc)
            await self._messenger.send_message(chat_id, str(exc))
            return

        await self._messenger.send_message(chat_id, MSG_PING_OK)
        await self._messenger.delete_message(chat_id, message.message_id)

    # -----------------------------------------------------------------------
    # /list
    # -----------------------------------------------------------------------

    async def _handle_list(self, message: IncomingMessage) -> None:
        chat_id = message.chat_id
        user = self._store.get_user(chat_id)

        if user is None or not user.events:
            await self._messenger.send_message(chat_id, MSG_NO_EVENTS)
        else:
            await self._messenger.send_message(chat_id, render_event_list(user.sorted_events()))
        await self._messenger.delete_message(chat_id, message.message_id)

    # -----------------------------------------------------------------------
    # /delete
    # -----------------------------------------------------------------------

    async def _handle_delete(self, message: IncomingMessage) -> None:
        chat_id = message.chat_id
        user = self._store.get_user(chat_id)

        if user is None or not user.events:
            await self._messenger.send_message(chat_id, MSG_NO_EVENTS)
            return

        await self._messenger.send_message(chat_id, render_delete_menu(user.sorted_events()))
        self._states.set_deleting(chat_id)
        logger.info("Chat %d awaiting delete selection", chat_id)

    async def _handle_delete_response(self, message: IncomingMessage) -> None:
        chat_id = message.chat_id
        user = self._store.get_user(chat_id)
        events = user.sorted_events() if user is not None else []

        try:
            numbers = parse_selection(message.text, limit=len(events))
            remaining = remove_selected(events, numbers)
        except (InvalidFormatError, OutOfRangeError) as exc:
            await self._messenger.send_message(chat_id, str(exc))
            return

        self._store.replace_events(chat_id, remaining)
        # flag is cleared as soon as the deletion is saved, whatever happens to the reply
        self._states.clear_deleting(chat_id)
        logger.info("Chat %d deleted %d event(s)", chat_id, len(events) - len(remaining))
        await self._messenger.send_message(chat_id, MSG_DELETED)
