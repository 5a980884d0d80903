"""Tests for responses_client/terminal.py -- detection order and memoization."""

import threading
import time
from unittest.mock import patch

import pytest

import responses_client.terminal as terminal
from responses_client.terminal import detect_terminal, user_agent

_TERMINAL_VARS = (
    "TERM_PROGRAM",
    "TERM_PROGRAM_VERSION",
    "WEZTERM_VERSION",
    "TERM",
    "KITTY_WINDOW_ID",
    "ALACRITTY_SOCKET",
    "KONSOLE_VERSION",
    "GNOME_TERMINAL_SCREEN",
    "VTE_VERSION",
    "WT_SESSION",
)


@pytest.fixture(autouse=True)
def _fresh_terminal(monkeypatch):
    for name in _TERMINAL_VARS:
        monkeypatch.delenv(name, raising=False)
    terminal._reset_for_tests()
    yield
    terminal._reset_for_tests()


class TestDetectTerminal:
    @pytest.mark.parametrize(
        "env, expected",
        [
            ({"TERM_PROGRAM": "iTerm.app", "TERM_PROGRAM_VERSION": "3.5.0"}, "iTerm.app/3.5.0"),
            ({"TERM_PROGRAM": "Apple_Terminal"}, "Apple_Terminal"),
            ({"TERM_PROGRAM": "vscode", "TERM_PROGRAM_VERSION": "  "}, "vscode"),
            ({"WEZTERM_VERSION": "20240203"}, "WezTerm/20240203"),
            ({"WEZTERM_VERSION": ""}, "WezTerm"),
            ({"KITTY_WINDOW_ID": "1"}, "kitty"),
            ({"TERM": "xterm-kitty"}, "kitty"),
            ({"ALACRITTY_SOCKET": "/tmp/a.sock"}, "Alacritty"),
            ({"TERM": "alacritty"}, "Alacritty"),
            ({"KONSOLE_VERSION": "230804"}, "Konsole/230804"),
            ({"KONSOLE_VERSION": ""}, "Konsole"),
            ({"GNOME_TERMINAL_SCREEN": "/org/gnome/Terminal/screen/1"}, "gnome-terminal"),
            ({"VTE_VERSION": "7600"}, "VTE/7600"),
            ({"WT_SESSION": "abc"}, "WindowsTerminal"),
            ({"TERM": "xterm-256color"}, "xterm-256color"),
            ({}, "unknown"),
        ],
    )
    def test_detection(self, env, expected):
        assert detect_terminal(env) == expected

    def test_blank_term_program_falls_through(self):
        env = {"TERM_PROGRAM": "   ", "TERM": "screen"}
        assert detect_terminal(env) == "screen"

    def test_first_match_wins(self):
        env = {
            "TERM_PROGRAM": "WezTerm",
            "TERM_PROGRAM_VERSION": "1",
            "WEZTERM_VERSION": "2",
            "KITTY_WINDOW_ID": "3",
        }
        assert detect_terminal(env) == "WezTerm/1"

    def test_reads_process_environment_by_default(self, monkeypatch):
        monkeypatch.setenv("TERM", "xterm-256color")
        assert detect_terminal() == "xterm-256color"


class TestUserAgentMemoization:
    def test_value_is_cached_for_the_process(self, monkeypatch):
        monkeypatch.setenv("TERM_PROGRAM", "iTerm.app")
        monkeypatch.setenv("TERM_PROGRAM_VERSION", "3.5.0")
        assert user_agent() == "iTerm.app/3.5.0"

        monkeypatch.setenv("TERM_PROGRAM", "ghostty")
        assert user_agent() == "iTerm.app/3.5.0"

    def test_concurrent_first_callers_share_one_detection(self):
        calls = []

        def slow_detect():
            calls.append(1)
            time.sleep(0.05)
            return "slow-term"

        results = []
        with patch("responses_client.terminal.detect_terminal", side_effect=slow_detect):
            threads = [threading.Thread(target=lambda: results.append(user_agent())) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        assert results == ["slow-term"] * 8
        assert len(calls) == 1
