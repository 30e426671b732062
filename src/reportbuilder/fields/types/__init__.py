"""Concrete field type handlers."""
