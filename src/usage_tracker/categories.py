"""Classification of tracked applications."""

from __future__ import annotations

from typing import Mapping, Optional

# macOS bundle identifiers, Windows executables and X11 process names.
BROWSER_IDS: frozenset[str] = frozenset(
    {
        "com.google.Chrome",
        "com.google.Chrome.canary",
        "com.apple.Safari",
        "com.brave.Browser",
        "com.microsoft.edgemac",
        "company.thebrowser.dia",
        "chrome.exe",
        "msedge.exe",
        "firefox.exe",
        "brave.exe",
        "opera.exe",
        "chrome",
        "google-chrome",
        "chromium",
        "msedge",
        "firefox",
        "brave",
        "opera",
    }
)

DEFAULT_CATEGORIES: dict[str, str] = {
    **{browser_id: "Browser" for browser_id in BROWSER_IDS},
    "com.apple.Terminal": "Terminal",
    "com.apple.iTerm2": "Terminal",
    "com.googlecode.iterm2": "Terminal",
    "WindowsTerminal.exe": "Terminal",
    "gnome-terminal-server": "Terminal",
    "com.apple.mail": "Email",
    "com.microsoft.Outlook": "Email",
    "outlook.exe": "Email",
    "com.apple.Slack": "Communication",
    "com.tinyspeck.slackmacgap": "Communication",
    "com.microsoft.Teams": "Communication",
    "slack.exe": "Communication",
    "teams.exe": "Communication",
    "com.apple.Notes": "Productivity",
    "com.apple.TextEdit": "Productivity",
}


def is_browser(entity_id: str) -> bool:
    return entity_id in BROWSER_IDS or entity_id.lower() in BROWSER_IDS


class CategoryMap:
    """Static id → category table that callers can extend.

    Keys are matched case-insensitively, so ``Chrome.exe`` and ``chrome.exe``
    resolve to the same entry.
    """

    def __init__(self, overrides: Optional[Mapping[str, str]] = None) -> None:
        self._mapping: dict[str, str] = {}
        for entity_id, category in DEFAULT_CATEGORIES.items():
            self.register(entity_id, category)
        for entity_id, category in (overrides or {}).items():
            self.register(entity_id, category)

    def register(self, entity_id: str, category: str) -> None:
        self._mapping[entity_id.lower()] = category

    def lookup(self, entity_id: str) -> Optional[str]:
        return self._mapping.get(entity_id.lower())
