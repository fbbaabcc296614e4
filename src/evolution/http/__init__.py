# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""HTTP catalog fetcher implementations."""

from evolution.http.requests_fetcher import RequestsFetcher

__all__ = ["RequestsFetcher"]
