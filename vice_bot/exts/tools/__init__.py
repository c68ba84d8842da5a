"""Maintenance commands for bot operators."""
