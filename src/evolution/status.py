# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Proposal review status variants and their rendering."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, get_args

from evolution.catalog import StatusFields

logger = logging.getLogger(__name__)

StatusKind = Literal[
    "awaitingReview",
    "scheduledForReview",
    "activeReview",
    "returnedForRevision",
    "withdrawn",
    "deferred",
    "accepted",
    "acceptedWithRevisions",
    "rejected",
    "implemented",
    "previewing",
    "error",
    "unknown",
]

KNOWN_STATES: frozenset[str] = frozenset(get_args(StatusKind)) - {"unknown"}

_LABELS: dict[str, str] = {
    "awaitingReview": "Awaiting Review",
    "scheduledForReview": "Scheduled for Review",
    "activeReview": "Active Review",
    "returnedForRevision": "Returned for Revision",
    "withdrawn": "Withdrawn",
    "deferred": "Deferred",
    "accepted": "Accepted",
    "acceptedWithRevisions": "Accepted with Revisions",
    "rejected": "Rejected",
    "implemented": "Implemented",
    "previewing": "Previewing",
}


@dataclass(frozen=True)
class ReviewInterval:
    """Represent a review period with ``start <= end``."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class Status:
    """Represent one proposal status variant.

    Only the payload field belonging to ``kind`` is ever set.

    Attributes:
        kind: Status variant.
        interval: Review period for ``activeReview``.
        version: Implementation version for ``implemented``.
        reason: Failure reason for ``error``.
        raw_state: Original state string for ``unknown``.
    """

    kind: StatusKind
    interval: ReviewInterval | None = None
    version: str | None = None
    reason: str | None = None
    raw_state: str | None = None

    @property
    def description(self) -> str:
        """Return the human-readable status text."""
        if self.kind == "activeReview" and self.interval is not None:
            start = _format_day(self.interval.start)
            end = _format_day(self.interval.end)
            return f"Active Review ({start} to {end})"
        if self.kind == "implemented" and self.version is not None:
            return f"Implemented (Swift {self.version})"
        if self.kind == "error":
            return f"Error ({self.reason or 'unknown reason'})"
        if self.kind == "unknown":
            return f"Unknown status: {self.raw_state}"
        return _LABELS[self.kind]


def status_from_fields(fields: StatusFields) -> Status:
    """Map raw status fields to a status variant.

    Unrecognized states map to ``unknown``; an invalid review period is
    dropped rather than reported.

    Args:
        fields: Raw status object from the catalog.

    Returns:
        Status variant.
    """
    state = fields.state
    if state not in KNOWN_STATES:
        logger.debug(f"Unrecognized proposal state (state={state})")
        return Status(kind="unknown", raw_state=state)
    if state == "activeReview":
        return Status(
            kind="activeReview", interval=_review_interval(fields.start, fields.end)
        )
    if state == "implemented":
        return Status(kind="implemented", version=fields.version)
    if state == "error":
        return Status(kind="error", reason=fields.reason)
    return Status(kind=state)  # type: ignore[arg-type]


def _review_interval(start: str | None, end: str | None) -> ReviewInterval | None:
    if start is None or end is None:
        return None
    start_at = parse_timestamp(start)
    end_at = parse_timestamp(end)
    if start_at is None or end_at is None or start_at > end_at:
        return None
    return ReviewInterval(start=start_at, end=end_at)


def parse_timestamp(value: str) -> datetime | None:
    """Parse an ISO-8601 timestamp that carries a UTC offset.

    Args:
        value: Timestamp text, e.g. ``"2024-05-08T00:00:00Z"``.

    Returns:
        Timezone-aware datetime, or ``None`` when the text is not a full
        timestamp with an offset.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = f"{text[:-1]}+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


def _format_day(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d")
