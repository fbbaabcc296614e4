# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cache store backends."""

from evolution.stores.json_file import JsonFileCacheStore

__all__ = ["JsonFileCacheStore"]
