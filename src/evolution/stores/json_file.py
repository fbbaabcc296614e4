# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cache store implementation backed by a single JSON file."""

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from evolution.cache import CachedProposal, CacheSnapshot
from evolution.errors import CacheError
from evolution.model import LaunchBarItem
from evolution.status import parse_timestamp

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class JsonFileCacheStore:
    """Persist cache snapshots to one JSON file, best-effort."""

    def __init__(self, cache_file: Path) -> None:
        """Initialize the store.

        Args:
            cache_file: Snapshot file path. The parent directory is created on
                first save.
        """
        self._cache_file = cache_file

    @property
    def cache_file(self) -> Path:
        return self._cache_file

    def load(self) -> CacheSnapshot | None:
        """Load the stored snapshot.

        Returns:
            Snapshot, or ``None`` when the file is missing, unreadable, or
            malformed.
        """
        try:
            return self._read()
        except CacheError as exc:
            logger.debug(f"Cache unavailable (path={self._cache_file} error={exc})")
            return None

    def save(self, snapshot: CacheSnapshot) -> None:
        """Atomically replace the stored snapshot; failures are discarded.

        Args:
            snapshot: Snapshot to write.
        """
        try:
            self._write(snapshot)
        except CacheError as exc:
            logger.debug(f"Cache write skipped (path={self._cache_file} error={exc})")

    def _read(self) -> CacheSnapshot:
        """Read and decode the snapshot file.

        Raises:
            CacheError: If the file cannot be read or decoded.
        """
        try:
            raw = self._cache_file.read_bytes()
        except OSError as exc:
            raise CacheError(f"Cannot read cache file: {exc}") from exc
        try:
            payload = json.loads(raw)
            return snapshot_from_json(payload)
        except (KeyError, RecursionError, TypeError, ValueError) as exc:
            raise CacheError(f"Malformed cache file: {exc}") from exc

    def _write(self, snapshot: CacheSnapshot) -> None:
        """Write the snapshot through a temporary file and rename.

        Raises:
            CacheError: If the directory, temporary file, or rename fails.
        """
        directory = self._cache_file.parent
        temp_path: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            data = json.dumps(snapshot_to_json(snapshot), sort_keys=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self._cache_file.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_path = handle.name
                handle.write(data)
            os.replace(temp_path, self._cache_file)
            temp_path = None
        except (OSError, TypeError, ValueError) as exc:
            raise CacheError(f"Cannot write cache file: {exc}") from exc
        finally:
            if temp_path is not None:
                _remove_quietly(Path(temp_path))


def snapshot_to_json(snapshot: CacheSnapshot) -> dict[str, Any]:
    """Encode a snapshot as its JSON file object."""
    payload: dict[str, Any] = {
        "cachedAt": snapshot.cached_at.astimezone(timezone.utc).strftime(
            TIMESTAMP_FORMAT
        ),
        "proposals": [_cached_proposal_to_json(entry) for entry in snapshot.proposals],
    }
    if snapshot.etag is not None:
        payload["etag"] = snapshot.etag
    if snapshot.last_modified is not None:
        payload["lastModified"] = snapshot.last_modified
    return payload


def snapshot_from_json(payload: Any) -> CacheSnapshot:
    """Decode a snapshot from its JSON file object.

    Args:
        payload: Decoded JSON value.

    Returns:
        Snapshot.

    Raises:
        ValueError: If the structure is malformed.
    """
    if not isinstance(payload, dict):
        raise ValueError("Cache root must be an object.")
    raw_cached_at = payload.get("cachedAt")
    cached_at = parse_timestamp(raw_cached_at) if isinstance(raw_cached_at, str) else None
    if cached_at is None:
        raise ValueError("Cache field 'cachedAt' must be an ISO-8601 timestamp.")
    raw_proposals = payload.get("proposals")
    if not isinstance(raw_proposals, list):
        raise ValueError("Cache field 'proposals' must be a list.")
    return CacheSnapshot(
        etag=_optional_str(payload, "etag"),
        last_modified=_optional_str(payload, "lastModified"),
        cached_at=cached_at,
        proposals=[_cached_proposal_from_json(entry) for entry in raw_proposals],
    )


def _cached_proposal_to_json(entry: CachedProposal) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "item": entry.item.to_json(),
        "searchText": entry.search_text,
    }
    if entry.number is not None:
        payload["number"] = entry.number
    return payload


def _cached_proposal_from_json(entry: Any) -> CachedProposal:
    if not isinstance(entry, dict):
        raise ValueError("Cached proposal must be an object.")
    item = entry.get("item")
    if not isinstance(item, dict):
        raise ValueError("Cached proposal field 'item' must be an object.")
    search_text = entry.get("searchText")
    if not isinstance(search_text, str):
        raise ValueError("Cached proposal field 'searchText' must be a string.")
    number = entry.get("number")
    if number is not None and (isinstance(number, bool) or not isinstance(number, int)):
        raise ValueError("Cached proposal field 'number' must be an integer.")
    return CachedProposal(
        item=LaunchBarItem.from_json(item),
        search_text=search_text,
        number=number,
    )


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Cache field '{key}' must be a string.")
    return value


def _remove_quietly(path: Path) -> None:
    try:
        path.unlink()
    except OSError as exc:
        logger.debug(f"Temporary cache file left behind (path={path} error={exc})")
