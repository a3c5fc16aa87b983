"""Helpers for locating the usage history file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from platformdirs import user_desktop_path

from .config import STATS_FILENAME
from .errors import ConfigError

logger = logging.getLogger(__name__)


def get_desktop_dir() -> Path:
    """Return the user's desktop directory, which must already exist."""
    path = Path(user_desktop_path())
    if not path.is_dir():
        raise ConfigError(f"Desktop directory not found at {path}")
    return path


def get_stats_path(
    filename: str = STATS_FILENAME, directory: Optional[Path] = None
) -> Path:
    """Resolve where usage history is stored, falling back to the cwd."""
    if directory is not None:
        return Path(directory) / filename
    try:
        base = get_desktop_dir()
    except ConfigError as exc:
        logger.warning("%s. Using current directory instead.", exc)
        base = Path.cwd()
    return base / filename
