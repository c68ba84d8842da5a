"""Standard embed factory functions and colors for consistent UI."""

import discord

# Standard colors for different embed types
STATUS_ERROR = discord.Color.red()


def error_embed(
    title: str = "❌ Error",
    description: str | None = None,
) -> discord.Embed:
    """Create an error embed.

    Args:
        title: The embed title
        description: Optional description

    Returns:
        A red embed describing what went wrong
    """
    return discord.Embed(
        title=title,
        description=description,
        color=STATUS_ERROR,
    )
