"""Define common filters."""

from __future__ import annotations

import os

from prompt_toolkit.filters import Condition


@Condition
def in_tmux() -> bool:
    """Determine if running inside :program:`tmux`."""
    return os.environ.get("TMUX") is not None


@Condition
def in_screen() -> bool:
    """Determine if running inside GNU :program:`screen`."""
    return bool(os.environ.get("STY")) or os.environ.get("TERM", "").startswith(
        "screen"
    )

