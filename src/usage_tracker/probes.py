"""Platform probes that report the foreground application."""

from __future__ import annotations

import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Optional

import psutil

from .errors import ConfigError, ProbeError
from .normalization import tab_label

DEFAULT_TIMEOUT = 5.0


class ActiveEntitySource(ABC):
    """Platform-independent probe interface.

    Implementations raise :class:`ProbeError` when the underlying call fails;
    returning ``None`` means the probe worked but nothing is in front.
    """

    @abstractmethod
    def get_active_app(self) -> Optional[tuple[str, str]]:
        """Return ``(entity_id, display_name)`` for the foreground app."""

    @abstractmethod
    def get_resource_locator(self, entity_id: str) -> Optional[str]:
        """Return the active tab URL or document for ``entity_id``."""


def run_command(args: list[str], timeout: float) -> str:
    """Run a probe command and return its trimmed stdout."""
    try:
        result = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise ProbeError(f"{args[0]} timed out after {timeout:.1f}s") from exc
    except OSError as exc:
        raise ProbeError(f"Failed to execute {args[0]}: {exc}") from exc

    if result.returncode < 0:
        raise ProbeError(f"{args[0]} terminated by signal {-result.returncode}")
    if result.returncode != 0:
        raise ProbeError(f"{args[0]} error: {result.stderr.strip()}")
    stdout = result.stdout.strip()
    if not stdout or stdout == "missing value":
        raise ProbeError(f"{args[0]} returned missing value or empty string")
    return stdout


class AppleScriptSource(ActiveEntitySource):
    """macOS probe driven by ``osascript``."""

    _BUNDLE_ID_SCRIPT = (
        'tell application "System Events" to get bundle identifier '
        "of first process whose frontmost is true"
    )
    _NAME_SCRIPT = (
        'tell application "System Events" to get name '
        "of first process whose frontmost is true"
    )
    _CHROMIUM_TAB_SCRIPT = (
        'tell application id "{bundle_id}" to get URL of active tab of front window'
    )
    _SAFARI_TAB_SCRIPT = (
        'tell application "Safari" to get URL of current tab of front window'
    )
    _CHROMIUM_IDS = frozenset(
        {
            "com.google.Chrome",
            "com.google.Chrome.canary",
            "com.brave.Browser",
            "com.microsoft.edgemac",
            "company.thebrowser.dia",
        }
    )

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def run_osascript(self, script: str) -> str:
        return run_command(["osascript", "-e", script], self.timeout)

    def get_active_app(self) -> Optional[tuple[str, str]]:
        bundle_id = self.run_osascript(self._BUNDLE_ID_SCRIPT)
        name = self.run_osascript(self._NAME_SCRIPT)
        return bundle_id, name

    def get_resource_locator(self, entity_id: str) -> Optional[str]:
        if entity_id == "com.apple.Safari":
            return self.run_osascript(self._SAFARI_TAB_SCRIPT)
        if entity_id not in self._CHROMIUM_IDS:
            return None
        try:
            return self.run_osascript(
                self._CHROMIUM_TAB_SCRIPT.format(bundle_id=entity_id)
            )
        except ProbeError:
            if entity_id != "com.brave.Browser":
                raise
            # Older Brave builds only answer to the Chrome scripting id.
            return self.run_osascript(
                self._CHROMIUM_TAB_SCRIPT.format(bundle_id="com.google.Chrome")
            )


class WindowsSource(ActiveEntitySource):
    """Retrieves the foreground window title and process name via Win32."""

    def __init__(self) -> None:
        import ctypes

        self._ctypes = ctypes
        self._user32 = ctypes.windll.user32  # type: ignore[attr-defined]

    def _foreground(self) -> tuple[Optional[str], Optional[str]]:
        from ctypes import wintypes

        ctypes = self._ctypes
        hwnd = self._user32.GetForegroundWindow()
        if not hwnd:
            return None, None

        length = self._user32.GetWindowTextLengthW(hwnd)
        buffer = ctypes.create_unicode_buffer(length + 1)
        self._user32.GetWindowTextW(hwnd, buffer, length + 1)
        window_title = buffer.value.strip() or None

        pid = wintypes.DWORD()
        self._user32.GetWindowThreadProcessId(hwnd, ctypes.byref(pid))
        if not pid.value:
            return None, window_title
        try:
            process_name = psutil.Process(pid.value).name()
        except (psutil.Error, ProcessLookupError) as exc:
            raise ProbeError(f"Could not inspect process {pid.value}: {exc}") from exc
        return process_name, window_title

    def get_active_app(self) -> Optional[tuple[str, str]]:
        process_name, _ = self._foreground()
        if not process_name:
            return None
        display_name = process_name[:-4] if process_name.lower().endswith(".exe") else process_name
        return process_name.lower(), display_name

    def get_resource_locator(self, entity_id: str) -> Optional[str]:
        process_name, window_title = self._foreground()
        if not process_name or process_name.lower() != entity_id:
            return None
        return tab_label(entity_id, window_title)


class XdotoolSource(ActiveEntitySource):
    """X11 probe built on ``xdotool`` and ``psutil``."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.timeout = timeout

    def _xdotool(self, *args: str) -> str:
        return run_command(["xdotool", "getactivewindow", *args], self.timeout)

    def get_active_app(self) -> Optional[tuple[str, str]]:
        raw_pid = self._xdotool("getwindowpid")
        try:
            process_name = psutil.Process(int(raw_pid)).name()
        except ValueError as exc:
            raise ProbeError(f"Unexpected window pid {raw_pid!r}") from exc
        except psutil.Error as exc:
            raise ProbeError(f"Could not inspect process {raw_pid}: {exc}") from exc
        return process_name, process_name

    def get_resource_locator(self, entity_id: str) -> Optional[str]:
        return tab_label(entity_id, self._xdotool("getwindowname"))


def default_source(timeout: float = DEFAULT_TIMEOUT) -> ActiveEntitySource:
    """Pick the probe for the running platform."""
    if sys.platform == "darwin":
        return AppleScriptSource(timeout=timeout)
    if sys.platform == "win32":
        return WindowsSource()
    if sys.platform.startswith("linux"):
        return XdotoolSource(timeout=timeout)
    raise ConfigError(f"No active-window probe available for platform {sys.platform!r}")
