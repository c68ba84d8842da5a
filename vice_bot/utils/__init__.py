from vice_bot.utils.extensions import walk_extensions

EXTENSIONS = frozenset(walk_extensions())
