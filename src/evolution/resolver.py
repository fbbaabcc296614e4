# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cache-aware query resolution for the proposal catalog."""

import logging
from datetime import datetime, timezone
from typing import Callable

from evolution.cache import CacheSnapshot, CacheStore, build_snapshot
from evolution.catalog import parse_catalog
from evolution.config import PROPOSALS_BASE_URL
from evolution.errors import EvolutionError, NetworkError
from evolution.fetcher import CatalogFetcher, NewData, NotModified
from evolution.matcher import matches_query
from evolution.model import LaunchBarItem


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class Resolver:
    """Answer queries from the catalog, falling back to the local cache."""

    def __init__(
        self,
        store: CacheStore,
        fetcher: CatalogFetcher,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] = _utc_now,
        base_url: str = PROPOSALS_BASE_URL,
    ) -> None:
        """Initialize the resolver.

        Args:
            store: Cache snapshot store.
            fetcher: Conditional catalog fetcher.
            logger: Diagnostic logger; defaults to this module's logger.
            clock: Source of snapshot timestamps.
            base_url: Base URL that proposal links are relative to.
        """
        self._store = store
        self._fetcher = fetcher
        self._logger = logger or logging.getLogger(__name__)
        self._clock = clock
        self._base_url = base_url

    def resolve(self, query: str) -> list[LaunchBarItem]:
        """Return the result rows for a query.

        Args:
            query: Free-text or numeric query.

        Returns:
            Matching items ordered by proposal number, newest first, or a
            single error item when no catalog data is available at all.
        """
        try:
            snapshot = self.current_snapshot()
        except EvolutionError as exc:
            self._logger.debug(f"Returning error item (error={exc})")
            return [LaunchBarItem.from_error(exc)]

        matching = [
            entry
            for entry in snapshot.proposals
            if matches_query(query, number=entry.number, search_text=entry.search_text)
        ]
        matching.sort(key=lambda entry: entry.number or 0, reverse=True)
        self._logger.debug(
            f"Filtered results (query={query!r} matched={len(matching)} "
            f"total={len(snapshot.proposals)})"
        )
        return [entry.item for entry in matching]

    def current_snapshot(self) -> CacheSnapshot:
        """Return the freshest usable snapshot.

        Returns:
            Snapshot reused from cache, or rebuilt from a new catalog response.

        Raises:
            NetworkError: If the fetch fails and no cache exists.
            CatalogParseError: If new data is malformed and no cache exists.
        """
        cache = self._store.load()
        if cache is None:
            self._logger.debug("No cache loaded")
        else:
            self._logger.debug(
                f"Loaded cache (proposals={len(cache.proposals)} etag={cache.etag} "
                f"last_modified={cache.last_modified} cached_at={cache.cached_at.isoformat()})"
            )

        try:
            return self._refresh(cache)
        except EvolutionError as exc:
            if cache is None:
                raise
            self._logger.debug(f"Fetch failed; falling back to cache (error={exc})")
            return cache

    def _refresh(self, cache: CacheSnapshot | None) -> CacheSnapshot:
        """Fetch with the cache's validators and decide which snapshot to use.

        Args:
            cache: Loaded snapshot, if any.

        Returns:
            Snapshot to answer the query from.

        Raises:
            NetworkError: On fetch failure, or 304 without a cache.
            CatalogParseError: If the new catalog cannot be decoded.
        """
        result = self._fetcher.fetch(
            etag=cache.etag if cache else None,
            last_modified=cache.last_modified if cache else None,
        )
        if isinstance(result, NotModified):
            if cache is None:
                raise NetworkError(
                    "Server reported the catalog as not modified, but no cache exists."
                )
            self._logger.debug("Using cached payload (not modified)")
            return cache

        if not isinstance(result, NewData):
            raise NetworkError(f"Unexpected fetch result: {result!r}")
        if cache is not None and _validators_match(cache, result):
            self._logger.debug(
                f"Received 200 with matching validators; reusing cache "
                f"(etag={result.etag} last_modified={result.last_modified})"
            )
            return cache

        document = parse_catalog(result.body)
        snapshot = build_snapshot(
            document,
            etag=result.etag,
            last_modified=result.last_modified,
            cached_at=self._clock(),
            base_url=self._base_url,
        )
        self._store.save(snapshot)
        self._logger.debug(
            f"Saved new cache (proposals={len(snapshot.proposals)} etag={result.etag} "
            f"last_modified={result.last_modified} schema_version={document.schema_version})"
        )
        return snapshot


def _validators_match(cache: CacheSnapshot, result: NewData) -> bool:
    """Return whether either response validator equals the cached one."""
    if result.etag is not None and result.etag == cache.etag:
        return True
    return result.last_modified is not None and result.last_modified == cache.last_modified
