"""Shared UI helpers."""
