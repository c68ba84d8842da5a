class ViceBotError(Exception):
    """Base exception class for all Vice bot errors."""

    pass


class UserFriendlyError(ViceBotError):
    """An exception that can be safely displayed to the user.

    Attributes:
        user_message (str): The message to display to the user.
    """

    def __init__(self, message: str, user_message: str) -> None:
        """Initialize the error.

        Args:
            message: Internal log message.
            user_message: User-facing message.
        """
        super().__init__(message)
        self.user_message = user_message


class InvalidContextError(UserFriendlyError):
    """A ticket command was used outside of a public thread."""

    USER_MESSAGE = "This command can only be used in a thread."

    def __init__(self, command: str) -> None:
        """Initialize the error for the given command name."""
        super().__init__(f"/{command} invoked outside of a public thread", self.USER_MESSAGE)
        self.command = command


class TitleTooLongError(UserFriendlyError):
    """The new thread title would exceed Discord's channel name limit."""

    def __init__(self, command: str, title: str, limit: int) -> None:
        """Initialize the error for a rejected title."""
        super().__init__(
            f"/{command} would set a {len(title)} character title (limit {limit})",
            f"That would make the thread title {len(title)} characters long, "
            f"but Discord allows at most {limit}. Please use a shorter name.",
        )
        self.command = command
        self.title = title
        self.limit = limit


class PlatformError(ViceBotError):
    """A request to the Discord API failed while handling a command.

    Attributes:
        action (str): What the bot was trying to do, e.g. ``"rename thread"``.
    """

    def __init__(self, action: str, original: Exception) -> None:
        """Initialize the error.

        Args:
            action: Short description of the failed platform call.
            original: The exception raised by discord.py.
        """
        super().__init__(f"Failed to {action}: {original}")
        self.action = action
        self.original = original


class MissingTokenError(ViceBotError):
    """The bot was started without a Discord token."""
