from __future__ import annotations

import subprocess
import sys

import pytest

from usage_tracker import probes
from usage_tracker.errors import ConfigError, ProbeError
from usage_tracker.probes import AppleScriptSource, XdotoolSource, default_source, run_command


def _fake_run(stdout: str = "", returncode: int = 0, stderr: str = ""):
    def _run(args, **kwargs):
        assert kwargs["timeout"] == 1.5
        return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)

    return _run


def test_run_command_returns_trimmed_stdout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(probes.subprocess, "run", _fake_run(" com.apple.Terminal\n"))

    assert run_command(["osascript", "-e", "x"], timeout=1.5) == "com.apple.Terminal"


@pytest.mark.parametrize(
    "fake",
    [
        _fake_run("missing value\n"),
        _fake_run("   "),
        _fake_run(returncode=1, stderr="execution of AppleScript failed"),
    ],
)
def test_run_command_rejects_unusable_output(monkeypatch: pytest.MonkeyPatch, fake) -> None:
    monkeypatch.setattr(probes.subprocess, "run", fake)

    with pytest.raises(ProbeError):
        run_command(["osascript", "-e", "x"], timeout=1.5)


def test_run_command_reports_killed_process(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(probes.subprocess, "run", _fake_run(returncode=-9))

    with pytest.raises(ProbeError, match="osascript terminated by signal 9"):
        run_command(["osascript", "-e", "x"], timeout=1.5)


def test_run_command_timeout_is_probe_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _hang(args, **kwargs):
        raise subprocess.TimeoutExpired(args, kwargs["timeout"])

    monkeypatch.setattr(probes.subprocess, "run", _hang)

    with pytest.raises(ProbeError, match="timed out"):
        run_command(["osascript"], timeout=1.5)


def test_run_command_missing_binary_is_probe_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def _missing(args, **kwargs):
        raise FileNotFoundError(2, "No such file or directory", args[0])

    monkeypatch.setattr(probes.subprocess, "run", _missing)

    with pytest.raises(ProbeError):
        run_command(["xdotool"], timeout=1.5)


class ScriptedAppleScript(AppleScriptSource):
    def __init__(self, responses: dict[str, object]) -> None:
        super().__init__(timeout=1.0)
        self.responses = responses
        self.scripts: list[str] = []

    def run_osascript(self, script: str) -> str:
        self.scripts.append(script)
        for needle, response in self.responses.items():
            if needle in script:
                if isinstance(response, Exception):
                    raise response
                return response
        raise ProbeError("missing value")


def test_applescript_active_app() -> None:
    source = ScriptedAppleScript(
        {"bundle identifier": "com.apple.Safari", "get name": "Safari"}
    )

    assert source.get_active_app() == ("com.apple.Safari", "Safari")


def test_applescript_brave_falls_back_to_chrome_id() -> None:
    source = ScriptedAppleScript(
        {
            'id "com.brave.Browser"': ProbeError("osascript error: no such app"),
            'id "com.google.Chrome"': "https://brave.example",
        }
    )

    assert source.get_resource_locator("com.brave.Browser") == "https://brave.example"
    assert len(source.scripts) == 2


def test_applescript_ignores_non_browsers() -> None:
    source = ScriptedAppleScript({})

    assert source.get_resource_locator("com.apple.Terminal") is None
    assert source.scripts == []


def test_xdotool_rejects_garbage_pid(monkeypatch: pytest.MonkeyPatch) -> None:
    source = XdotoolSource(timeout=1.0)
    monkeypatch.setattr(source, "_xdotool", lambda *args: "not-a-pid")

    with pytest.raises(ProbeError):
        source.get_active_app()


def test_xdotool_locator_uses_tab_label(monkeypatch: pytest.MonkeyPatch) -> None:
    source = XdotoolSource(timeout=1.0)
    monkeypatch.setattr(
        source, "_xdotool", lambda *args: "Python docs - Mozilla Firefox"
    )

    assert source.get_resource_locator("firefox") == "Python docs"


def test_default_source_per_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "platform", "darwin")
    assert isinstance(default_source(timeout=2.0), AppleScriptSource)

    monkeypatch.setattr(sys, "platform", "linux")
    assert isinstance(default_source(timeout=2.0), XdotoolSource)

    monkeypatch.setattr(sys, "platform", "sunos5")
    with pytest.raises(ConfigError):
        default_source()
