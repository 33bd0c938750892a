"""
Reminder Bot — Entry Point.

Single entry point: `python main.py` starts the Telegram bot. Logging is
configured by main() from LOG_LEVEL.
"""

from src.bot.telegram_bot import main

if __name__ == "__main__":
    main()
