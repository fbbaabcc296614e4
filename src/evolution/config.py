# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Configuration constants and environment-driven settings."""

import logging
import math
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from evolution.errors import ConfigError

logger = logging.getLogger(__name__)

CATALOG_URL: str = "https://download.swift.org/swift-evolution/v1/evolution.json"
PROPOSALS_BASE_URL: str = "https://github.com/apple/swift-evolution/blob/main/proposals"
FETCH_TIMEOUT_SECONDS: float = 8.0
CACHE_DIR_NAME: str = "launchbar-swift-evolution"
CACHE_FILE_NAME: str = "evolution-cache.json"
ITEM_ICON: str = "icon.png"

DEBUG_ENV_VAR: str = "SWIFT_EV_LOG_DEBUG"
CACHE_DIR_ENV_VAR: str = "SWIFT_EV_CACHE_DIR"
FETCH_TIMEOUT_ENV_VAR: str = "SWIFT_EV_FETCH_TIMEOUT"
CATALOG_URL_ENV_VAR: str = "SWIFT_EV_CATALOG_URL"


@dataclass(frozen=True)
class ActionSettings:
    """Represent runtime settings resolved once at startup.

    Attributes:
        cache_file: Snapshot file location.
        fetch_timeout: Timeout in seconds for the catalog request.
        catalog_url: Remote catalog endpoint.
    """

    cache_file: Path
    fetch_timeout: float = FETCH_TIMEOUT_SECONDS
    catalog_url: str = CATALOG_URL

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "ActionSettings":
        """Build settings from environment variables.

        Args:
            environ: Process environment mapping.

        Returns:
            Resolved settings.

        Raises:
            ConfigError: If the timeout override is not a positive number.
        """
        override_dir = environ.get(CACHE_DIR_ENV_VAR)
        cache_dir = (
            Path(override_dir)
            if override_dir
            else default_cache_root(environ) / CACHE_DIR_NAME
        )
        return cls(
            cache_file=cache_dir / CACHE_FILE_NAME,
            fetch_timeout=_parse_timeout(environ.get(FETCH_TIMEOUT_ENV_VAR)),
            catalog_url=environ.get(CATALOG_URL_ENV_VAR) or CATALOG_URL,
        )


def debug_enabled(environ: Mapping[str, str], debug_flag: bool = False) -> bool:
    """Return whether verbose diagnostics are requested.

    Args:
        environ: Process environment mapping.
        debug_flag: Whether ``--debug`` was passed on the command line.

    Returns:
        ``True`` when the flag was passed or the debug variable is set.
    """
    return debug_flag or DEBUG_ENV_VAR in environ


def default_cache_root(environ: Mapping[str, str]) -> Path:
    """Return the per-user platform cache directory.

    Args:
        environ: Process environment mapping.

    Returns:
        ``~/Library/Caches`` on macOS, otherwise ``$XDG_CACHE_HOME`` or
        ``~/.cache``.
    """
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches"
    xdg_cache_home = environ.get("XDG_CACHE_HOME")
    if xdg_cache_home:
        return Path(xdg_cache_home)
    return Path.home() / ".cache"


def _parse_timeout(raw: str | None) -> float:
    if raw is None or not raw.strip():
        return FETCH_TIMEOUT_SECONDS
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(
            f"{FETCH_TIMEOUT_ENV_VAR} must be a number, got '{raw}'."
        ) from exc
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{FETCH_TIMEOUT_ENV_VAR} must be > 0, got '{raw}'.")
    return value
