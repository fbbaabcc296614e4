# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import io
import json
import logging
from datetime import datetime, timezone
from pathlib import Path

import pytest

from cli.launchbar_action import parse_command_line, run, write_items
from evolution.cache import CachedProposal, CacheSnapshot
from evolution.config import ActionSettings, debug_enabled
from evolution.errors import ConfigError, NetworkError
from evolution.fetcher import FetchResult, NewData, NotModified
from evolution.model import LaunchBarItem
from evolution.resolver import Resolver


class _StaticStore:
    def __init__(self, snapshot: CacheSnapshot | None) -> None:
        self._snapshot = snapshot

    def load(self) -> CacheSnapshot | None:
        return self._snapshot

    def save(self, snapshot: CacheSnapshot) -> None:
        self._snapshot = snapshot


class _FailingFetcher:
    def __init__(self) -> None:
        self.calls = 0

    def fetch(self, etag: str | None, last_modified: str | None) -> FetchResult:
        self.calls += 1
        raise NetworkError("Catalog request failed: timed out")


class _NotModifiedFetcher:
    def fetch(self, etag: str | None, last_modified: str | None) -> FetchResult:
        return NotModified()


class _NewDataFetcher:
    def __init__(self, body: bytes) -> None:
        self._body = body

    def fetch(self, etag: str | None, last_modified: str | None) -> FetchResult:
        return NewData(self._body, etag='"v2"')


def _snapshot() -> CacheSnapshot:
    return CacheSnapshot(
        etag='"v1"',
        last_modified=None,
        cached_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
        proposals=[
            CachedProposal(
                item=LaunchBarItem(
                    title="SE-0296: Async/await",
                    subtitle="Implemented (Swift 5.5) · Feature flag: none",
                    url="https://github.com/apple/swift-evolution/blob/main/proposals/0296-async-await.md",
                    icon="icon.png",
                ),
                search_text="se-0296 296 async/await implemented (swift 5.5) ",
                number=296,
            ),
            CachedProposal(
                item=LaunchBarItem(title="SE-0306: Actors", subtitle="Implemented (Swift 5.5)"),
                search_text="se-0306 306 actors implemented (swift 5.5) ",
                number=306,
            ),
        ],
    )


def _run(argv: list[str], resolver: Resolver | None = None, environ: dict[str, str] | None = None):  # type: ignore[no-untyped-def]
    stdout = io.StringIO()
    stderr = io.StringIO()
    exit_code = run(argv, stdout=stdout, stderr=stderr, environ=environ or {}, resolver=resolver)
    return exit_code, stdout.getvalue(), stderr.getvalue()


def test_parse_command_line_joins_query_and_recognizes_flags() -> None:
    options = parse_command_line(["async", "-d", "await", "--verbose", "-x"])

    assert options.query == "async await --verbose -x"
    assert options.debug is True
    assert options.help is False


def test_parse_command_line_recognizes_help_aliases() -> None:
    assert parse_command_line(["-h"]).help is True
    assert parse_command_line(["--help", "actors"]).help is True
    assert parse_command_line(["--deb"]).debug is False


def test_help_prints_usage_and_skips_fetch() -> None:
    fetcher = _FailingFetcher()
    resolver = Resolver(store=_StaticStore(None), fetcher=fetcher)

    exit_code, stdout, _ = _run(["--help"], resolver=resolver)

    assert exit_code == 0
    assert stdout.startswith("usage: swift-evolution [--debug|-d] [--help|-h] [query...]")
    assert "--debug" in stdout
    assert fetcher.calls == 0


def test_run_prints_sorted_pretty_json_array() -> None:
    resolver = Resolver(store=_StaticStore(_snapshot()), fetcher=_NotModifiedFetcher())

    exit_code, stdout, stderr = _run([], resolver=resolver)

    assert exit_code == 0
    payload = json.loads(stdout)
    assert [item["title"] for item in payload] == ["SE-0306: Actors", "SE-0296: Async/await"]
    assert payload[1] == {
        "alwaysShowsSubtitle": True,
        "icon": "icon.png",
        "subtitle": "Implemented (Swift 5.5) · Feature flag: none",
        "title": "SE-0296: Async/await",
        "url": "https://github.com/apple/swift-evolution/blob/main/proposals/0296-async-await.md",
    }
    assert stdout.startswith('[\n  {\n    "alwaysShowsSubtitle": true,\n    "subtitle"')
    assert stderr == ""


def test_run_joins_arguments_into_query() -> None:
    resolver = Resolver(store=_StaticStore(_snapshot()), fetcher=_NotModifiedFetcher())

    _, stdout, _ = _run(["async/await", "zzz"], resolver=resolver)

    assert [item["title"] for item in json.loads(stdout)] == ["SE-0296: Async/await"]


def test_run_prints_single_error_item_when_no_data_available() -> None:
    resolver = Resolver(store=_StaticStore(None), fetcher=_FailingFetcher())

    exit_code, stdout, _ = _run(["actors"], resolver=resolver)

    assert exit_code == 0
    payload = json.loads(stdout)
    assert len(payload) == 1
    assert payload[0]["title"] == "Error: Catalog request failed: timed out"
    assert payload[0]["actionArgument"].startswith(payload[0]["title"] + "\n")


def test_debug_flag_logs_to_stderr_only() -> None:
    resolver = Resolver(
        store=_StaticStore(_snapshot()),
        fetcher=_FailingFetcher(),
        logger=logging.getLogger("evolution.resolver"),
    )

    _, stdout, stderr = _run(["-d", "actors"], resolver=resolver)

    assert [item["title"] for item in json.loads(stdout)] == ["SE-0306: Actors"]
    assert "falling back to cache" in stderr


def test_debug_environment_variable_enables_logging() -> None:
    resolver = Resolver(
        store=_StaticStore(_snapshot()),
        fetcher=_NotModifiedFetcher(),
        logger=logging.getLogger("evolution.resolver"),
    )

    _, _, stderr = _run(["actors"], resolver=resolver, environ={"SWIFT_EV_LOG_DEBUG": "1"})

    assert "Using cached payload" in stderr


def test_invalid_configuration_is_reported_as_error_item(tmp_path: Path) -> None:
    exit_code, stdout, _ = _run(
        ["actors"],
        environ={"SWIFT_EV_FETCH_TIMEOUT": "soon", "SWIFT_EV_CACHE_DIR": str(tmp_path)},
    )

    assert exit_code == 0
    payload = json.loads(stdout)
    assert len(payload) == 1
    assert payload[0]["title"].startswith("Error: SWIFT_EV_FETCH_TIMEOUT must be a number")


def test_settings_from_environ_uses_overrides(tmp_path: Path) -> None:
    settings = ActionSettings.from_environ(
        {
            "SWIFT_EV_CACHE_DIR": str(tmp_path),
            "SWIFT_EV_FETCH_TIMEOUT": "2.5",
            "SWIFT_EV_CATALOG_URL": "https://example.invalid/evolution.json",
        }
    )

    assert settings.cache_file == tmp_path / "evolution-cache.json"
    assert settings.fetch_timeout == 2.5
    assert settings.catalog_url == "https://example.invalid/evolution.json"


def test_settings_from_environ_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("evolution.config.sys.platform", "linux")

    settings = ActionSettings.from_environ({"XDG_CACHE_HOME": str(tmp_path)})

    assert settings.cache_file == tmp_path / "launchbar-swift-evolution" / "evolution-cache.json"
    assert settings.fetch_timeout == 8.0
    assert settings.catalog_url == "https://download.swift.org/swift-evolution/v1/evolution.json"


@pytest.mark.parametrize("raw", ["0", "-1", "nan"])
def test_settings_reject_non_positive_timeout(raw: str, tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        ActionSettings.from_environ({"SWIFT_EV_CACHE_DIR": str(tmp_path), "SWIFT_EV_FETCH_TIMEOUT": raw})


def test_debug_enabled_reads_flag_and_environment() -> None:
    assert debug_enabled({}) is False
    assert debug_enabled({}, debug_flag=True) is True
    assert debug_enabled({"SWIFT_EV_LOG_DEBUG": ""}) is True
    assert debug_enabled({"OTHER": "1"}) is False


def _surrogate_catalog() -> bytes:
    return json.dumps(
        {
            "creationDate": "2024-05-14T13:38:30Z",
            "schemaVersion": "1.0.0",
            "proposals": [
                {
                    "id": "SE-0300",
                    "title": "Bad \ud800 title",
                    "link": "0300-bad.md",
                    "status": {"state": "accepted"},
                }
            ],
        }
    ).encode("utf-8")


def _run_utf8(resolver: Resolver) -> tuple[int, str]:
    buffer = io.BytesIO()
    stdout = io.TextIOWrapper(buffer, encoding="utf-8")
    exit_code = run([], stdout=stdout, stderr=io.StringIO(), environ={}, resolver=resolver)
    stdout.flush()
    return exit_code, buffer.getvalue().decode("utf-8")


def test_invalid_unicode_in_catalog_prints_error_item_to_utf8_stream() -> None:
    resolver = Resolver(store=_StaticStore(None), fetcher=_NewDataFetcher(_surrogate_catalog()))

    exit_code, stdout = _run_utf8(resolver)

    assert exit_code == 0
    payload = json.loads(stdout)
    assert len(payload) == 1
    assert payload[0]["title"] == "Error: Field 'proposals[0].title' is not valid Unicode."


def test_invalid_unicode_in_catalog_falls_back_to_cache_on_utf8_stream() -> None:
    resolver = Resolver(
        store=_StaticStore(_snapshot()), fetcher=_NewDataFetcher(_surrogate_catalog())
    )

    _, stdout = _run_utf8(resolver)

    assert [item["title"] for item in json.loads(stdout)] == [
        "SE-0306: Actors",
        "SE-0296: Async/await",
    ]


def test_write_items_replaces_unencodable_items_with_error_item() -> None:
    buffer = io.BytesIO()
    stdout = io.TextIOWrapper(buffer, encoding="utf-8")

    write_items([LaunchBarItem(title="Bad \ud800 title")], stdout=stdout)
    stdout.flush()

    payload = json.loads(buffer.getvalue().decode("utf-8"))
    assert len(payload) == 1
    assert payload[0]["title"].startswith("Error: 'utf-8' codec can't encode")
