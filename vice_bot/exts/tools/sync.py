"""Command synchronization cog.

This module handles synchronizing application commands with Discord:
- Manual sync via prefix command (owner only)
- Slash command sync (administrators)
"""

import logging

import discord
from discord import app_commands
from discord.ext import commands

from vice_bot.bot import Bot


class SyncCog(commands.Cog):
    """Cog for synchronizing application commands."""

    def __init__(self, bot: Bot) -> None:
        """Initialize the SyncCog."""
        self.bot = bot
        self.log = logging.getLogger(__name__)

    @staticmethod
    def _describe(synced: list[app_commands.AppCommand]) -> str:
        return f"Synced {len(synced)} commands: {[cmd.name for cmd in synced]}"

    @commands.command(name="sync", hidden=True)
    @commands.is_owner()
    async def sync(self, ctx: commands.Context[commands.Bot]) -> None:
        """Sync commands manually (owner only)."""
        self.log.info("sync invoked user: %s", ctx.author.id)
        synced = await self.bot.sync_commands()
        await ctx.send(self._describe(synced))

    @app_commands.command(name="sync", description="Sync application commands")
    @app_commands.default_permissions(administrator=True)
    async def sync_slash(self, interaction: discord.Interaction) -> None:
        """Sync commands via slash command."""
        self.log.info("/sync invoked user: %s guild: %s", interaction.user.id, interaction.guild_id)
        await interaction.response.defer(ephemeral=True)
        synced = await self.bot.sync_commands()
        await interaction.followup.send(self._describe(synced), ephemeral=True)


async def setup(bot: Bot) -> None:
    """Set up the Sync cog."""
    await bot.add_cog(SyncCog(bot))
