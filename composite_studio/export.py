from __future__ import annotations
import logging
import shutil
import subprocess
import sys
from typing import Callable, List

from .errors import ExportFailure

log = logging.getLogger(__name__)

Mechanism = Callable[[str], None]


def tk_clipboard(text: str) -> None:
    import tkinter as tk

    root = tk.Tk()
    try:
        root.withdraw()
        root.clipboard_clear()
        root.clipboard_append(text)
        # The selection owner has to process events or nothing lands on the clipboard
        root.update()
    finally:
        root.destroy()


def _clipboard_commands() -> List[List[str]]:
    if sys.platform == "darwin":
        return [["pbcopy"]]
    if sys.platform.startswith("win"):
        return [["clip"]]
    return [["wl-copy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]]


def command_clipboard(text: str) -> None:
    tried = []
    for cmd in _clipboard_commands():
        if not shutil.which(cmd[0]):
            continue
        tried.append(cmd[0])
        r = subprocess.run(cmd, input=text.encode("utf-8"), stdout=subprocess.DEVNULL,
                           stderr=subprocess.PIPE, timeout=10)
        if r.returncode == 0:
            return
        log.warning("%s exited with %d: %s", cmd[0], r.returncode, r.stderr.decode(errors="replace").strip())
    raise RuntimeError("no clipboard command succeeded" + (f" (tried {', '.join(tried)})" if tried else ""))


def copy_text(text: str, primary: Mechanism = tk_clipboard, fallback: Mechanism = command_clipboard) -> str:
    """Put ``text`` on the system clipboard; returns the mechanism that worked."""
    if not text:
        raise ExportFailure("Nothing to copy.")
    try:
        primary(text)
        return getattr(primary, "__name__", "primary")
    except Exception as e:
        log.error("Failed to copy script using %s: %s", getattr(primary, "__name__", "primary"), e)
    try:
        fallback(text)
        return getattr(fallback, "__name__", "fallback")
    except Exception as e:
        log.error("Failed to copy script using %s: %s", getattr(fallback, "__name__", "fallback"), e)
    raise ExportFailure()
