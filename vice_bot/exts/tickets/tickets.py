"""Ticket commands for bug report and feature request threads."""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from vice_bot.config import settings
from vice_bot.errors import PlatformError
from vice_bot.exts import tickets

from ._machine import TicketCounters, TicketOutcome, TicketStateMachine
from ._schemas import TicketCategory


class Tickets(commands.Cog):
    """Cog that turns public threads into tracked tickets."""

    def __init__(self, bot: commands.Bot, machine: TicketStateMachine | None = None) -> None:
        """Initialize the Tickets cog.

        The ticket counters live on the bot so that numbering survives a reload
        of this extension.
        """
        self.bot = bot
        self.log = logging.getLogger(__name__)
        if machine is None:
            counters: TicketCounters | None = getattr(bot, "ticket_counters", None)
            if counters is None:
                counters = TicketCounters()
                setattr(bot, "ticket_counters", counters)  # noqa: B010
            machine = TicketStateMachine(
                counters,
                tag_prefix=settings.ticket_tag_prefix,
                team_name=settings.team_name,
            )
        self.machine = machine
        self.log.info("Tickets cog initialized")

    # -- Discord helpers -----------------------------------------------------

    async def _resolve_channel(self, interaction: discord.Interaction) -> discord.abc.Messageable | None:
        """Return the channel the command was used in, fetching it if only a partial is cached."""
        channel = interaction.channel
        if channel is not None and not isinstance(channel, discord.PartialMessageable):
            return channel

        if interaction.channel_id is None:
            return None

        try:
            return await self.bot.fetch_channel(interaction.channel_id)
        except discord.HTTPException as e:
            raise PlatformError("fetch channel", e) from e

    @staticmethod
    def _is_public_thread(channel: discord.abc.Messageable | None) -> bool:
        return isinstance(channel, discord.Thread) and channel.type is discord.ChannelType.public_thread

    async def _original_poster(self, thread: discord.Thread, limit: int) -> str:
        """Mention the author of the oldest of the ``limit`` most recent messages."""
        try:
            # History is returned newest first
            messages = [message async for message in thread.history(limit=limit)]
        except discord.HTTPException as e:
            raise PlatformError("fetch thread history", e) from e

        if not messages:
            return tickets.UNKNOWN_POSTER
        return messages[-1].author.mention

    async def _join(self, thread: discord.Thread) -> None:
        try:
            await thread.join()
        except discord.HTTPException as e:
            raise PlatformError("join thread", e) from e

    async def _apply(
        self,
        interaction: discord.Interaction,
        channel: discord.abc.Messageable | None,
        command: str,
        outcome: TicketOutcome,
    ) -> None:
        """Rename the thread and send the reply described by ``outcome``."""
        if outcome.error is not None or not isinstance(channel, discord.Thread):
            self.log.info(
                "/%s refused for user %s (channel ID: %s): %s",
                command,
                interaction.user,
                interaction.channel_id,
                outcome.error,
            )
            await self._send(interaction, outcome.reply)
            return

        try:
            await channel.edit(name=outcome.title)
        except discord.HTTPException as e:
            raise PlatformError("rename thread", e) from e

        await self._send(interaction, outcome.reply)
        self.log.info(
            "/%s renamed thread %s to '%s' (status: %s)",
            command,
            channel.id,
            outcome.title,
            outcome.ticket.status if outcome.ticket else "untracked",
        )

    async def _send(self, interaction: discord.Interaction, content: str) -> None:
        try:
            await interaction.followup.send(content)
        except discord.HTTPException as e:
            raise PlatformError("send reply", e) from e

    async def _open(self, interaction: discord.Interaction, category: TicketCategory, name: str) -> None:
        await interaction.response.defer(thinking=True)

        channel = await self._resolve_channel(interaction)
        in_public_thread = self._is_public_thread(channel)
        poster = tickets.UNKNOWN_POSTER
        if in_public_thread:
            await self._join(channel)  # type: ignore[arg-type]
            poster = await self._original_poster(channel, tickets.DEFAULT_HISTORY_LIMIT)  # type: ignore[arg-type]

        outcome = self.machine.open_ticket(
            category,
            name,
            getattr(channel, "name", None) or "",
            in_public_thread=in_public_thread,
            original_poster=poster,
        )
        await self._apply(interaction, channel, category.value, outcome)
        if outcome.ok:
            self.log.info("%s accepted for: %s", category.verbose.capitalize(), poster)

    # -- Commands ------------------------------------------------------------

    @app_commands.command(name="bug", description="Submit a bug report.")
    @app_commands.describe(name="Name of the bug report.")
    async def bug(self, interaction: discord.Interaction, name: app_commands.Range[str, 1, 100]) -> None:
        """Open the current thread as a bug report."""
        await self._open(interaction, TicketCategory.BUG, name)

    @app_commands.command(name="feature", description="Submit a feature request.")
    @app_commands.describe(name="Name of the feature request.")
    async def feature(self, interaction: discord.Interaction, name: app_commands.Range[str, 1, 100]) -> None:
        """Open the current thread as a feature request."""
        await self._open(interaction, TicketCategory.FEATURE, name)

    @app_commands.command(name="complete", description="Mark a bug report or feature request as complete.")
    async def complete(self, interaction: discord.Interaction) -> None:
        """Mark the current thread's ticket as complete."""
        await interaction.response.defer(thinking=True)

        channel = await self._resolve_channel(interaction)
        in_public_thread = self._is_public_thread(channel)
        poster = tickets.UNKNOWN_POSTER
        if in_public_thread:
            # The newest message is usually the bot's own reply, so look further back
            poster = await self._original_poster(channel, tickets.COMPLETE_HISTORY_LIMIT)  # type: ignore[arg-type]

        outcome = self.machine.complete(
            getattr(channel, "name", None) or "",
            in_public_thread=in_public_thread,
            original_poster=poster,
        )
        await self._apply(interaction, channel, "complete", outcome)

    @app_commands.command(name="notdoing", description="Mark a feature request as not going to be implemented.")
    async def notdoing(self, interaction: discord.Interaction) -> None:
        """Mark the current thread's ticket as rejected."""
        await interaction.response.defer(thinking=True)

        channel = await self._resolve_channel(interaction)
        in_public_thread = self._is_public_thread(channel)
        poster = tickets.UNKNOWN_POSTER
        if in_public_thread:
            poster = await self._original_poster(channel, tickets.DEFAULT_HISTORY_LIMIT)  # type: ignore[arg-type]

        outcome = self.machine.reject(
            getattr(channel, "name", None) or "",
            in_public_thread=in_public_thread,
            original_poster=poster,
        )
        await self._apply(interaction, channel, "notdoing", outcome)


async def setup(bot: commands.Bot) -> None:
    """Set up the Tickets cog."""
    await bot.add_cog(Tickets(bot))
