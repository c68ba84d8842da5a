"""Thread-based ticket system for bug reports and feature requests."""

# Status glyphs embedded in thread titles
COMPLETE_GLYPH = "✅"
REJECTED_GLYPH = "❌"

# Fallback used in replies when the thread has no message history
UNKNOWN_POSTER = "unknown user"

INVALID_CONTEXT_MESSAGE = "This command can only be used in a thread."

# Discord rejects channel and thread names longer than this
MAX_TITLE_LENGTH = 100

# How many recent messages are fetched to find the original poster.
# The oldest message of the fetched page is treated as the original post.
COMPLETE_HISTORY_LIMIT = 50
DEFAULT_HISTORY_LIMIT = 1

OPEN_REPLY = (
    "Good news, {poster}! Your {kind} was accepted by the {team}. "
    "We will notify you when it’s complete! Your ticket number is {number}. "
    "Please do not reply to this message.\n\n"
    "If you have any questions, please contact the {team} on Discord.\n\n"
    "Thank you for your patience!"
)
COMPLETE_REPLY = (
    "Good news, {poster}! Your bug report or feature request has been marked as complete. "
    "Thank you for your patience! ✅"
)
REJECT_REPLY = (
    "Unfortunately, {poster}, your feature request will not be implemented at this time. "
    "We appreciate your suggestion and encourage you to keep submitting ideas in the future."
)
