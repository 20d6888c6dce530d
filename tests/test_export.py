import subprocess

import pytest

from composite_studio import export
from composite_studio.errors import ExportFailure


def test_primary_wins_when_it_works():
    seen = []

    def primary(text):
        seen.append(("primary", text))

    def fallback(text):
        seen.append(("fallback", text))

    assert export.copy_text("print(1)", primary=primary, fallback=fallback) == "primary"
    assert seen == [("primary", "print(1)")]


def test_empty_text_is_not_copied():
    with pytest.raises(ExportFailure):
        export.copy_text("", primary=lambda t: None, fallback=lambda t: None)


def test_command_clipboard_without_tools(monkeypatch):
    monkeypatch.setattr(export.shutil, "which", lambda name: None)
    with pytest.raises(RuntimeError):
        export.command_clipboard("x")


def test_command_clipboard_pipes_text(monkeypatch):
    calls = []

    def fake_run(cmd, input=None, **kw):
        calls.append((cmd, input))
        return subprocess.CompletedProcess(cmd, 0, b"", b"")

    monkeypatch.setattr(export.sys, "platform", "darwin")
    monkeypatch.setattr(export.shutil, "which", lambda name: "/usr/bin/" + name)
    monkeypatch.setattr(export.subprocess, "run", fake_run)
    export.command_clipboard("héllo")
    assert calls == [(["pbcopy"], "héllo".encode("utf-8"))]


def test_command_clipboard_tries_next_tool_on_error(monkeypatch):
    calls = []

    def fake_run(cmd, input=None, **kw):
        calls.append(cmd[0])
        code = 1 if cmd[0] == "wl-copy" else 0
        return subprocess.CompletedProcess(cmd, code, b"", b"no wayland")

    monkeypatch.setattr(export.sys, "platform", "linux")
    monkeypatch.setattr(export.shutil, "which", lambda name: "/usr/bin/" + name)
    monkeypatch.setattr(export.subprocess, "run", fake_run)
    export.command_clipboard("x")
    assert calls == ["wl-copy", "xclip"]
