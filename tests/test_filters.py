"""Test filter functions."""

from __future__ import annotations

import pytest

from termpix.filters import in_screen, in_tmux


def test_in_tmux(monkeypatch: pytest.MonkeyPatch) -> None:
    """Tmux is detected from its environment variable."""
    monkeypatch.delenv("TMUX", raising=False)
    assert not in_tmux()
    monkeypatch.setenv("TMUX", "/tmp/tmux-1000/default,1,0")
    assert in_tmux()


def test_in_screen(monkeypatch: pytest.MonkeyPatch) -> None:
    """GNU screen is detected from the terminal type or session name."""
    monkeypatch.delenv("STY", raising=False)
    monkeypatch.setenv("TERM", "xterm-256color")
    assert not in_screen()
    monkeypatch.setenv("TERM", "screen.xterm-256color")
    assert in_screen()
    monkeypatch.setenv("TERM", "xterm-256color")
    monkeypatch.setenv("STY", "1234.pts-0.host")
    assert in_screen()
