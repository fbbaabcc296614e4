# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from rich.logging import RichHandler


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()


@pytest.fixture(autouse=True)
def _reset_action_logging() -> Iterator[None]:
    """Undo logging configuration installed by the CLI entry point."""
    package_logger = logging.getLogger("evolution")
    level = package_logger.level
    yield
    package_logger.setLevel(level)
    root_logger = logging.getLogger()
    for handler in [h for h in root_logger.handlers if isinstance(h, RichHandler)]:
        root_logger.removeHandler(handler)
