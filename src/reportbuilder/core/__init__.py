"""Core configuration and utilities for Report Builder."""

from reportbuilder.core.config import settings
from reportbuilder.core.logging import setup_logging

__all__ = ["settings", "setup_logging"]
