"""Discord bot that tracks bug reports and feature requests in forum threads."""

__version__ = "0.1.0"
