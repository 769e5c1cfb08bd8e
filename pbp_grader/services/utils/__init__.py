"""Shared helpers used by the NFL and betting services."""
