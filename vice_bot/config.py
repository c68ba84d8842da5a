import logging
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vice_bot.errors import MissingTokenError


class EnvConfig(BaseSettings):
    """Environment configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )


class Settings(EnvConfig):
    """Manages application settings using Pydantic."""

    log_level: int = logging.INFO
    log_dir: Path = Path("logs")
    prefix: str = "!"
    token: str = Field(default="", validation_alias=AliasChoices("discord_token", "token"))
    debug_guild_id: int | None = None

    # Ticket System Configuration
    ticket_tag_prefix: str = Field(default="VICE", min_length=1)
    team_name: str = "Vice Development Team"

    # Command registration
    sync_commands_on_startup: bool = True
    clear_commands_on_shutdown: bool = False

    def require_token(self) -> str:
        """Return the Discord token, raising if it was not configured."""
        if self.token:
            return self.token

        msg = "DISCORD_TOKEN must be set to start the bot"
        raise MissingTokenError(msg)


settings = Settings()
