from __future__ import annotations

import os
from pathlib import Path

DEFAULT_MONTHLY_GOAL = 20


def base_dir() -> Path:
    """
    Per-user base directory:
      ~/.local/share/studytrack

    Override with STUDYTRACK_HOME env var.
    """
    env = os.getenv("STUDYTRACK_HOME")
    if env:
        return Path(env).expanduser().resolve()

    return (Path.home() / ".local" / "share" / "studytrack").resolve()


def data_dir() -> Path:
    return base_dir() / "data"


def log_dir() -> Path:
    return base_dir() / "logs"
