import logging

import discord
from discord import app_commands
from discord.ext import commands

from vice_bot.config import settings
from vice_bot.errors import UserFriendlyError
from vice_bot.exts.tickets._machine import TicketCounters
from vice_bot.ui.embeds import error_embed
from vice_bot.utils import EXTENSIONS


class Bot(commands.AutoShardedBot):
    """Bot class for the Vice ticket bot."""

    def __init__(self, *args: object, **kwargs: object) -> None:
        """Initialize the bot and its in-memory ticket counters."""
        super().__init__(*args, **kwargs)  # type: ignore[arg-type]
        self.log = logging.getLogger(__name__)
        self.ticket_counters = TicketCounters()

    async def setup_hook(self) -> None:
        """Run before the bot starts."""
        self.tree.on_error = self.on_tree_error  # type: ignore
        await self.load_extensions()
        if settings.sync_commands_on_startup:
            await self.sync_commands()

    async def close(self) -> None:
        """Close bot resources before shutting down."""
        # Commands can only be removed once login has provided an application ID
        if settings.clear_commands_on_shutdown and self.application_id is not None and not self.is_closed():
            try:
                await self.clear_commands()
            except discord.DiscordException:
                self.log.exception("Failed to remove application commands on shutdown")
        await super().close()

    def _sync_guild(self) -> discord.Object | None:
        if settings.debug_guild_id:
            return discord.Object(id=settings.debug_guild_id)
        return None

    async def sync_commands(self) -> list[app_commands.AppCommand]:
        """Register application commands with Discord.

        Commands are synced globally, or only to the debug guild if one is configured.

        #! Note: This operation can be rate limited
        """
        guild = self._sync_guild()
        if guild is not None:
            self.tree.copy_global_to(guild=guild)
        synced = await self.tree.sync(guild=guild)
        self.log.info("Synced %s application commands: %s", len(synced), [cmd.name for cmd in synced])
        return synced

    async def clear_commands(self) -> None:
        """Remove this bot's application commands from Discord."""
        guild = self._sync_guild()
        self.tree.clear_commands(guild=guild)
        await self.tree.sync(guild=guild)
        self.log.info("Removed application commands")

    def _get_logger_for_command(
        self, command: app_commands.Command | app_commands.ContextMenu | commands.Command | None
    ) -> logging.Logger:
        if command and hasattr(command, "module") and command.module:
            return logging.getLogger(command.module)
        return self.log

    async def on_tree_error(self, interaction: discord.Interaction, error: app_commands.AppCommandError) -> None:
        """Handle errors in slash commands.

        Failures only abort the current command; the bot keeps running.
        """
        # Unpack CommandInvokeError to get the original exception
        actual_error = error
        if isinstance(error, app_commands.CommandInvokeError):
            actual_error = error.original

        if isinstance(actual_error, UserFriendlyError):
            embed = error_embed(description=actual_error.user_message)
            await self._send_error(interaction, embed)
            return

        # Generic error handling
        logger = self._get_logger_for_command(interaction.command)
        logger.exception("Slash command error: %s", error)
        embed = error_embed(description="An unexpected error occurred. Please try again later.")
        await self._send_error(interaction, embed)

    async def _send_error(self, interaction: discord.Interaction, embed: discord.Embed) -> None:
        try:
            if interaction.response.is_done():
                await interaction.followup.send(embed=embed, ephemeral=True)
            else:
                await interaction.response.send_message(embed=embed, ephemeral=True)
        except discord.HTTPException:
            self.log.warning("Could not report error to user for interaction %s", interaction.id)

    async def on_command_error(self, ctx: commands.Context, error: commands.CommandError) -> None:
        """Handle errors in prefix commands."""
        if isinstance(error, commands.CommandNotFound):
            return

        actual_error = error
        if isinstance(error, commands.CommandInvokeError):
            actual_error = error.original

        if isinstance(actual_error, UserFriendlyError):
            embed = error_embed(description=actual_error.user_message)
            await ctx.send(embed=embed)
            return

        if isinstance(actual_error, commands.NotOwner):
            return

        # Generic error handling
        logger = self._get_logger_for_command(ctx.command)
        logger.exception("Prefix command error: %s", error)
        embed = error_embed(description="An unexpected error occurred. Please try again later.")
        await ctx.send(embed=embed)

    async def load_extensions(self) -> None:
        """Load all enabled extensions."""
        for extension in sorted(EXTENSIONS):
            try:
                await self.load_extension(extension)
                self.log.info("Loaded extension: %s", extension)
            except Exception:
                self.log.exception("Failed to load extension: %s", extension)
