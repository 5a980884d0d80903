"""Terminal detection for the client's User-Agent label.

The label is computed once per process, on first use, and cached for every
later call even if the environment changes afterwards. Concurrent first
callers all observe the same value; detection runs at most once.
"""

import os
import threading
from typing import Mapping, Optional

_lock = threading.Lock()
_terminal: Optional[str] = None


def user_agent() -> str:
    """Process-wide terminal label (e.g. "iTerm.app/3.5.0", "kitty", "xterm-256color")."""
    global _terminal
    cached = _terminal
    if cached is not None:
        return cached
    with _lock:
        if _terminal is None:
            _terminal = detect_terminal()
        return _terminal


def _non_blank(value: Optional[str]) -> bool:
    return value is not None and value.strip() != ""


def _with_version(name: str, version: Optional[str]) -> str:
    if _non_blank(version):
        return f"{name}/{version}"
    return name


def detect_terminal(environ: Optional[Mapping[str, str]] = None) -> str:
    """Identify the terminal from environment variables. First match wins.

    Args:
        environ: Mapping to read instead of ``os.environ``.
    """
    env = os.environ if environ is None else environ

    term_program = env.get("TERM_PROGRAM")
    if _non_blank(term_program):
        return _with_version(term_program, env.get("TERM_PROGRAM_VERSION"))

    if "WEZTERM_VERSION" in env:
        return _with_version("WezTerm", env["WEZTERM_VERSION"])

    term = env.get("TERM")

    if "KITTY_WINDOW_ID" in env or (term is not None and "kitty" in term):
        return "kitty"

    if "ALACRITTY_SOCKET" in env or term == "alacritty":
        return "Alacritty"

    if "KONSOLE_VERSION" in env:
        return _with_version("Konsole", env["KONSOLE_VERSION"])

    if "GNOME_TERMINAL_SCREEN" in env:
        return "gnome-terminal"

    if "VTE_VERSION" in env:
        return _with_version("VTE", env["VTE_VERSION"])

    if "WT_SESSION" in env:
        return "WindowsTerminal"

    return term if term is not None else "unknown"


def _reset_for_tests() -> None:
    global _terminal
    with _lock:
        _terminal = None
