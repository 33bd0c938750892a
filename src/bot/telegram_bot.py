"""
Reminder Bot — Telegram Bot.

Telegram is the only user interface. Each webhook delivery carries one
update; this module decodes it into an IncomingMessage and hands it to the
CommandRouter, which owns all conversation logic.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from telegram import Update
from telegram.ext import (
    Application,
    ApplicationBuilder,
    ContextTypes,
    MessageHandler,
    filters,
)

from src.config import settings
from src.core.command_router import CommandRouter
from src.core.conversation_state import ConversationStateStore
from src.data.models import IncomingMessage

if TYPE_CHECKING:
    from src.ports.event_store_port import EventStorePort
    from src.ports.messenger_port import MessengerPort

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Update decoding
# ---------------------------------------------------------------------------


def to_incoming(update: Update) -> IncomingMessage | None:
    """Normalize a Telegram update, or None if there is nothing to handle.

    Updates without a message, without a sender, or with empty text are
    acknowledged and dropped.
    """
    message = update.message
    if message is None or message.from_user is None or not message.text:
        return None

    return IncomingMessage(
        chat_id=message.chat.id,
        chat_kind=str(message.chat.type),
        text=message.text,
        message_id=message.message_id,
    )


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route every text message (commands included) through the CommandRouter."""
    incoming = to_incoming(update)
    if incoming is None:
        return

    router: CommandRouter = context.bot_data["router"]
    logger.debug("Chat %d: %r", incoming.chat_id, incoming.text[:80])
    await router.handle(incoming)


async def handle_error(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Log anything a handler let escape; the update is still acknowledged."""
    logger.error("Unhandled error while processing update %s", update, exc_info=context.error)


# ---------------------------------------------------------------------------
# Application wiring
# ---------------------------------------------------------------------------


def build_app(
    store: EventStorePort | None = None,
    messenger: MessengerPort | None = None,
) -> Application:
    """Build and configure the Telegram Application.

    Args:
        store: Event store implementation. Defaults to UserDB.
        messenger: Messenger implementation. Defaults to TelegramMessenger
                   (created from the bot instance after app is built).
    """
    app = ApplicationBuilder().token(settings.TELEGRAM_BOT_TOKEN).build()

    # Wire default adapters if not provided
    if store is None:
        from src.data.db import UserDB
        store = UserDB()

    if messenger is None:
        from src.adapters.telegram_messenger import TelegramMessenger
        messenger = TelegramMessenger(app.bot)

    states = ConversationStateStore(ttl_seconds=settings.CONVERSATION_TTL_SECONDS)
    app.bot_data["router"] = CommandRouter(
        store, messenger, states, bot_username=settings.BOT_USERNAME,
    )

    app.add_handler(MessageHandler(filters.UpdateType.MESSAGE & filters.TEXT, handle_message))
    app.add_error_handler(handle_error)

    logger.info("Telegram bot application built with %d handlers", len(app.handlers[0]))
    return app


def main() -> None:
    """Entry point: build the app and serve the webhook (or poll when no URL is set)."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger.info("Starting Reminder Bot...")
    app = build_app()

    if not settings.WEBHOOK_URL:
        logger.info("WEBHOOK_URL not set, falling back to polling")
        app.run_polling(allowed_updates=[Update.MESSAGE])
        return

    webhook_url = f"{settings.WEBHOOK_URL.rstrip('/')}/{settings.WEBHOOK_PATH}"
    logger.info(
        "Serving webhook on %s:%d/%s",
        settings.WEBHOOK_LISTEN, settings.WEBHOOK_PORT, settings.WEBHOOK_PATH,
    )
    app.run_webhook(
        listen=settings.WEBHOOK_LISTEN,
        port=settings.WEBHOOK_PORT,
        url_path=settings.WEBHOOK_PATH,
        webhook_url=webhook_url,
        secret_token=settings.WEBHOOK_SECRET_TOKEN or None,
        allowed_updates=[Update.MESSAGE],
    )


if __name__ == "__main__":
    main()
