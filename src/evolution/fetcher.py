# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Conditional catalog fetch abstractions."""

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class NotModified:
    """Represent a ``304 Not Modified`` response."""


@dataclass(frozen=True)
class NewData:
    """Represent a ``200 OK`` response.

    Attributes:
        body: Raw response body.
        etag: Response ``ETag`` header, if present.
        last_modified: Response ``Last-Modified`` header, if present.
    """

    body: bytes
    etag: str | None = None
    last_modified: str | None = None


FetchResult = NotModified | NewData


class CatalogFetcher(Protocol):
    """Define conditional catalog retrieval behavior."""

    def fetch(self, etag: str | None, last_modified: str | None) -> FetchResult:
        """Fetch the catalog unless it matches the given validators.

        Args:
            etag: Validator sent as ``If-None-Match``.
            last_modified: Validator sent as ``If-Modified-Since``.

        Returns:
            ``NotModified`` or ``NewData``.

        Raises:
            NetworkError: On transport failure, timeout, or unexpected status.
        """
