"""
Project configuration and constants.

Constants fix the unit convention of the engine: the forecaster works in
periods (months of demand history) while horizons are entered in days and
converted with DAYS_PER_PERIOD.  User-facing defaults live in
``PlannerSettings`` and can be overridden by a JSON settings file.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Engine constants
# ---------------------------------------------------------------------------

# Demand history is monthly: 30 days per period
DAYS_PER_PERIOD = 30

# Search bound for the reverse solver (2 years)
MAX_HORIZON_DAYS = 730

# Minimum sample size for a meaningful Anderson-Darling test
MIN_SAMPLE_SIZE = 5

# p-value threshold below which normality is rejected
NORMALITY_ALPHA = 0.05

# Service level fraction is clamped before the quantile lookup
SERVICE_LEVEL_FLOOR = 0.5
SERVICE_LEVEL_CEILING = 0.9999

# Monte Carlo
DEFAULT_ITERATIONS = 50000
MIN_ITERATIONS = 10000
MAX_ITERATIONS = 100000

# Reverse solver binary search
SEARCH_MIN_PERIODS = 0.01
SEARCH_MAX_STEPS = 40
SEARCH_TOLERANCE = 0.01  # periods (~0.3 days)

# Caller-side input bounds
MAX_DEMAND_POINTS = 48
MIN_SERVICE_LEVEL_PERCENT = 50.0
MAX_SERVICE_LEVEL_PERCENT = 99.99
MIN_ALPHA = 0.01
MAX_ALPHA = 1.0


# ---------------------------------------------------------------------------
# User defaults
# ---------------------------------------------------------------------------

SETTINGS_ENV_VAR = "TRR_BUFFER_SETTINGS"
SETTINGS_SECTION = "planner"


@dataclass
class PlannerSettings:
    """Default parameters for a planning run."""
    service_level_percent: float = 90.0
    alpha: float = 0.15
    horizon_days: float = 9.0
    iterations: int = DEFAULT_ITERATIONS
    random_seed: int = 0  # 0 = unseeded
    n_workers: int = 1


DEFAULTS = PlannerSettings()

# (min, max) per numeric setting; None = unbounded
_BOUNDS: Dict[str, tuple] = {
    "service_level_percent": (MIN_SERVICE_LEVEL_PERCENT, MAX_SERVICE_LEVEL_PERCENT),
    "alpha": (MIN_ALPHA, MAX_ALPHA),
    "horizon_days": (0.0, None),
    "iterations": (MIN_ITERATIONS, MAX_ITERATIONS),
    "random_seed": (0, None),
    "n_workers": (1, None),
}

_DESCRIPTIONS = {
    "service_level_percent": "Target cycle service level (%)",
    "alpha": "Croston smoothing constant",
    "horizon_days": "TRR / lead time in days",
    "iterations": "Monte Carlo trials per simulation",
    "random_seed": "Random seed for Monte Carlo (0 = random)",
    "n_workers": "Worker processes for Monte Carlo trials",
}


def default_settings_path() -> Path:
    """
    Resolve the settings file location.

    TRR_BUFFER_SETTINGS wins; otherwise <user data dir>/settings.json.
    """
    override = os.environ.get(SETTINGS_ENV_VAR)
    if override:
        return Path(override)
    from trr_buffer.utils.paths import get_data_dir  # noqa: PLC0415
    return get_data_dir() / "settings.json"


def _clamp(key: str, raw: Any, default: Union[int, float]) -> Union[int, float]:
    cast = int if isinstance(default, int) else float
    try:
        value = cast(raw)
    except (ValueError, TypeError, OverflowError):
        logger.warning("Invalid setting %s=%r, using default %r", key, raw, default)
        return default
    if value != value:  # nan
        return default
    low, high = _BOUNDS[key]
    if low is not None and value < low:
        value = cast(low)
    if high is not None and value > high:
        value = cast(high)
    return value


def normalize_settings(section: Dict[str, Any]) -> PlannerSettings:
    """
    Build PlannerSettings from a ``{"key": {"value": ...}}`` section.

    Values are clamped to their bounds; malformed values fall back to the
    default.  Never raises.
    """
    values = {}
    for key, default in asdict(DEFAULTS).items():
        entry = section.get(key, {})
        raw = entry.get("value", default) if isinstance(entry, dict) else entry
        values[key] = _clamp(key, raw, default)
    return PlannerSettings(**values)


def load_settings(path: Optional[Union[str, Path]] = None) -> PlannerSettings:
    """
    Load planner settings from JSON.

    Missing or unreadable files yield the defaults.

    Args:
        path: settings file (defaults to default_settings_path())

    Returns:
        PlannerSettings
    """
    settings_file = Path(path) if path is not None else default_settings_path()
    if not settings_file.exists():
        return PlannerSettings()

    try:
        with open(settings_file, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Cannot read settings %s: %s", settings_file, exc)
        return PlannerSettings()

    if not isinstance(data, dict):
        return PlannerSettings()
    section = data.get(SETTINGS_SECTION, {})
    if not isinstance(section, dict):
        return PlannerSettings()
    return normalize_settings(section)


def save_settings(settings: PlannerSettings, path: Optional[Union[str, Path]] = None) -> bool:
    """
    Write settings to JSON, preserving other sections of the file.

    Returns:
        True if successful, False otherwise
    """
    settings_file = Path(path) if path is not None else default_settings_path()

    data: Dict[str, Any] = {}
    if settings_file.exists():
        try:
            with open(settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            data = {}
        if not isinstance(data, dict):
            data = {}

    data[SETTINGS_SECTION] = {
        key: {"value": value, "description": _DESCRIPTIONS[key]}
        for key, value in asdict(settings).items()
    }

    try:
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        with open(settings_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)
        return True
    except OSError as exc:
        logger.error("Cannot write settings %s: %s", settings_file, exc)
        return False
