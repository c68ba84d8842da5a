import logging
import sys

import discord
from discord.ext import commands

from vice_bot.bot import Bot
from vice_bot.config import settings
from vice_bot.errors import MissingTokenError
from vice_bot.logging import setup_logging


def main() -> None:
    """Main function to run the application."""
    setup_logging(settings.log_level, settings.log_dir)
    log = logging.getLogger("vice_bot")

    try:
        token = settings.require_token()
    except MissingTokenError:
        log.critical("No Discord token configured, set DISCORD_TOKEN in the environment or .env")
        sys.exit(1)

    # Mention prefix keeps owner text commands usable without the message content intent
    bot = Bot(command_prefix=commands.when_mentioned_or(settings.prefix), intents=discord.Intents.default())
    try:
        bot.run(token, log_handler=None)
    except discord.LoginFailure:
        log.critical("Discord rejected the configured token")
        sys.exit(1)


if __name__ == "__main__":
    main()
