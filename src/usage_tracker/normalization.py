"""Derive a resource locator from a browser's window title."""

from __future__ import annotations

import re
from typing import Optional

from .categories import is_browser

_BROWSER_BRANDS = frozenset(
    {
        "Google Chrome",
        "Chromium",
        "Microsoft Edge",
        "Mozilla Firefox",
        "Firefox",
        "Brave",
        "Opera",
    }
)

_TITLE_SEPARATOR = re.compile(r"\s+[-–—]\s+")
_OPEN_TABS_SUFFIX = re.compile(r"\s+and\s+\d+\s+more\s+(?:tabs?|pages?)$", re.IGNORECASE)


def tab_label(entity_id: str, window_title: Optional[str]) -> Optional[str]:
    """Return the active tab's label for a browser window, else ``None``.

    Windows and X11 expose no tab URL, so the window title stands in for it
    once the trailing browser brand and "and N more pages" counter are gone.
    """
    if not window_title or not is_browser(entity_id):
        return None
    label = window_title.strip()

    separators = list(_TITLE_SEPARATOR.finditer(label))
    if separators and label[separators[-1].end():] in _BROWSER_BRANDS:
        label = label[: separators[-1].start()]

    label = _OPEN_TABS_SUFFIX.sub("", label)
    return " ".join(label.split()) or None
