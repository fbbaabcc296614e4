# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Conditional catalog fetcher built on requests."""

import logging
import time

import requests

from evolution.config import CATALOG_URL, FETCH_TIMEOUT_SECONDS
from evolution.errors import NetworkError
from evolution.fetcher import FetchResult, NewData, NotModified

logger = logging.getLogger(__name__)


class RequestsFetcher:
    """Issue one conditional GET for the catalog per call."""

    def __init__(
        self,
        url: str = CATALOG_URL,
        timeout: float = FETCH_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize fetcher configuration.

        Args:
            url: Catalog endpoint URL.
            timeout: Request timeout in seconds. Expiry is a failure, not a
                retry trigger.
            session: Optional session to send the request through. Without one,
                each fetch opens and closes its own session.
        """
        self._url = url
        self._timeout = timeout
        self._session = session

    def fetch(self, etag: str | None, last_modified: str | None) -> FetchResult:
        """Fetch the catalog with conditional request headers.

        Args:
            etag: Prior ``ETag`` sent as ``If-None-Match``.
            last_modified: Prior ``Last-Modified`` sent as ``If-Modified-Since``.

        Returns:
            ``NotModified`` for 304, ``NewData`` for 200.

        Raises:
            NetworkError: On transport failure, timeout, or any other status.
        """
        headers: dict[str, str] = {}
        if etag is not None:
            headers["If-None-Match"] = etag
        if last_modified is not None:
            headers["If-Modified-Since"] = last_modified
        logger.debug(
            f"Starting fetch (url={self._url} etag={etag} last_modified={last_modified})"
        )

        started_at = time.monotonic()
        try:
            if self._session is not None:
                response = self._send(self._session, headers)
            else:
                with requests.Session() as session:
                    response = self._send(session, headers)
        except requests.RequestException as exc:
            logger.warning(f"Catalog request failed (url={self._url} error={exc})")
            raise NetworkError(f"Catalog request failed: {exc}") from exc
        elapsed_ms = int((time.monotonic() - started_at) * 1000)

        status_code = response.status_code
        if status_code == 304:
            logger.debug(f"Fetch 304 Not Modified (elapsed_ms={elapsed_ms})")
            return NotModified()
        if status_code == 200:
            body = response.content
            response_etag = response.headers.get("ETag")
            response_last_modified = response.headers.get("Last-Modified")
            logger.debug(
                f"Fetch 200 OK (bytes={len(body)} etag={response_etag} "
                f"last_modified={response_last_modified} elapsed_ms={elapsed_ms})"
            )
            return NewData(
                body=body, etag=response_etag, last_modified=response_last_modified
            )

        logger.warning(
            f"Unexpected catalog response (url={self._url} status={status_code} "
            f"elapsed_ms={elapsed_ms})"
        )
        raise NetworkError(f"Unexpected HTTP status {status_code} from {self._url}")

    def _send(
        self, session: requests.Session, headers: dict[str, str]
    ) -> requests.Response:
        return session.get(self._url, headers=headers, timeout=self._timeout)
