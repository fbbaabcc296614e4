# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error taxonomy for the proposal search pipeline."""

import logging

logger = logging.getLogger(__name__)


class EvolutionError(RuntimeError):
    """Represent any failure raised by the proposal search pipeline."""


class CatalogParseError(EvolutionError):
    """Represent a malformed catalog document."""


class NetworkError(EvolutionError):
    """Represent a transport failure, timeout, or unexpected HTTP status."""


class CacheError(EvolutionError):
    """Represent a cache read or write fault. Never escapes the cache store."""


class ConfigError(EvolutionError):
    """Represent an invalid environment configuration value."""


def format_error(exc: BaseException) -> str:
    """Render an exception and its cause chain as stable text.

    Args:
        exc: Exception to render.

    Returns:
        One ``Type: message`` line for ``exc`` followed by one
        ``caused by Type: message`` line per chained cause.
    """
    lines = [_describe(exc)]
    seen = {id(exc)}
    current = _next_cause(exc)
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        lines.append(f"caused by {_describe(current)}")
        current = _next_cause(current)
    return "\n".join(lines)


def _describe(exc: BaseException) -> str:
    message = str(exc)
    name = type(exc).__name__
    return f"{name}: {message}" if message else name


def _next_cause(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__
