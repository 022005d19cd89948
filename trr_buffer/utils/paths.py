"""
Path resolver for trr_buffer.

Rules
-----
* data_dir → $TRR_BUFFER_HOME, else ~/.trr_buffer  (created on demand);
  fallback to the system temp dir when the home directory is read-only
* logs_dir → $TRR_BUFFER_LOG_DIR, else data_dir/logs

NEVER use os.getcwd() or relative Path("...") strings in runtime code;
always call one of the functions below.
"""

import os
import tempfile
from pathlib import Path

HOME_ENV_VAR = "TRR_BUFFER_HOME"
LOG_DIR_ENV_VAR = "TRR_BUFFER_LOG_DIR"


def _try_writable(path: Path) -> bool:
    """
    Return True if *path* can be created and used as a writable directory.

    Uses a canary-file probe so permission issues are detected up front.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        canary = path / ".write_probe"
        canary.touch()
        canary.unlink()
        return True
    except (OSError, PermissionError):
        return False


def get_data_dir() -> Path:
    """Return the writable per-user data directory."""
    override = os.environ.get(HOME_ENV_VAR)
    primary = Path(override) if override else Path.home() / ".trr_buffer"
    if _try_writable(primary):
        return primary
    fallback = Path(tempfile.gettempdir()) / "trr_buffer"
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def get_logs_dir() -> Path:
    """Return the directory for rotating log files."""
    override = os.environ.get(LOG_DIR_ENV_VAR)
    if override:
        return Path(override)
    return get_data_dir() / "logs"
