"""
config.py — Environment-Backed Configuration
=============================================
Reads the archive access token and runtime parameters from a ``.env`` file
(via python-dotenv) so that credentials never appear in source code.

Every tunable the pipeline uses lives on :class:`Settings`; components take
a ``Settings`` at construction instead of reading module globals.

Usage
-----
>>> from activity_timeline.config import load_settings
>>> settings = load_settings()
>>> settings.window_days
7
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass, replace
from typing import Any

from dotenv import load_dotenv

from activity_timeline.utils import get_logger

logger = get_logger("timeline.config")


# ── locate .env relative to project root ────────────────────────────────────

_PROJECT_ROOT = pathlib.Path(__file__).resolve().parent.parent
_ENV_PATH = _PROJECT_ROOT / ".env"

load_dotenv(dotenv_path=_ENV_PATH)

TOKEN_ENV_VAR = "ACCESS_TOKEN"


class ConfigError(EnvironmentError):
    """Raised when required configuration is missing or invalid."""


# ── typed settings object ───────────────────────────────────────────────────

@dataclass(frozen=True)
class Settings:
    """Immutable container for all environment-sourced config."""

    access_token: str

    # Archive API
    base_url: str = "https://socialmediaarchive.sl.nsw.gov.au"
    activities_path: str = "/api/activities"
    collection_id: str = "slnsw"

    # Window & display curve
    window_days: int = 7
    curve_degree: float = 3
    divisor: float = 50

    # HTTP behaviour
    request_timeout: float = 30.0
    max_retries: int = 3
    backoff_seconds: float = 1.0
    max_workers: int = 8

    # Output artifact
    output_path: pathlib.Path = pathlib.Path("data.json")
    output_date_format: str = "%m-%d-%Y"

    def __post_init__(self) -> None:
        checks = [
            (self.window_days >= 1, f"window_days must be >= 1, got {self.window_days}"),
            (self.curve_degree > 0, f"curve_degree must be > 0, got {self.curve_degree}"),
            (self.divisor > 0, f"divisor must be > 0, got {self.divisor}"),
            (self.request_timeout > 0, f"request_timeout must be > 0, got {self.request_timeout}"),
            (self.max_retries >= 0, f"max_retries must be >= 0, got {self.max_retries}"),
            (self.backoff_seconds >= 0, f"backoff_seconds must be >= 0, got {self.backoff_seconds}"),
            (self.max_workers >= 1, f"max_workers must be >= 1, got {self.max_workers}"),
        ]
        for ok, message in checks:
            if not ok:
                raise ConfigError(message)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with the non-None ``overrides`` applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        if "output_path" in changes:
            changes["output_path"] = pathlib.Path(changes["output_path"])
        return replace(self, **changes) if changes else self


def load_settings(*, require_token: bool = True, **overrides: Any) -> Settings:
    """
    Build a ``Settings`` instance from the environment.

    Parameters
    ----------
    require_token : bool
        If True (default), raise ``ConfigError`` when ``ACCESS_TOKEN`` is
        missing.  Set to False for offline tooling that never hits the API.
    **overrides
        Explicit field values; these win over the environment.
    """
    access_token = os.getenv(TOKEN_ENV_VAR, "").strip()

    if require_token and not access_token and not overrides.get("access_token"):
        logger.debug("%s not set in environment or .env", TOKEN_ENV_VAR)
        raise ConfigError(
            "An access token is required to access the social media archive "
            f"API. Please provide it via the {TOKEN_ENV_VAR} environment "
            "variable (or a .env file)."
        )

    env_values: dict[str, Any] = {"access_token": access_token}
    if os.getenv("ARCHIVE_BASE_URL"):
        env_values["base_url"] = os.environ["ARCHIVE_BASE_URL"].rstrip("/")
    if os.getenv("ARCHIVE_SET"):
        env_values["collection_id"] = os.environ["ARCHIVE_SET"]
    if os.getenv("ACTIVITY_OUTPUT_PATH"):
        env_values["output_path"] = pathlib.Path(os.environ["ACTIVITY_OUTPUT_PATH"])

    settings = Settings(**env_values).with_overrides(**overrides)
    logger.debug(
        "Settings loaded: endpoint=%s%s set=%s window_days=%d curve=(p=%s, D=%s) output=%s",
        settings.base_url, settings.activities_path, settings.collection_id,
        settings.window_days, settings.curve_degree, settings.divisor, settings.output_path,
    )
    return settings
