"""Utility helpers for the site backup pipeline."""

from site_backup.utils.logging import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
