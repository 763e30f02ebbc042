from __future__ import annotations

import os
from pathlib import Path


VERSION = "0.1.0"

DEFAULT_DURATION_MINUTES = 25
MAX_DURATION_MINUTES = 24 * 60
STATE_FILE_NAME = ".pomcli.json"
LOG_FILE_NAME = "pomodoros.log"

STATE_FILE_ENV = "POMCLI_STATE_FILE"
LOG_FILE_ENV = "POMCLI_LOG_FILE"


def default_state_path() -> Path:
    """Path of the persisted timer record, `$POMCLI_STATE_FILE` or the current directory."""
    override = os.environ.get(STATE_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / STATE_FILE_NAME


def default_log_path() -> Path:
    override = os.environ.get(LOG_FILE_ENV)
    if override:
        return Path(override).expanduser()
    return Path.cwd() / LOG_FILE_NAME
