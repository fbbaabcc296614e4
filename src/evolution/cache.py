# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Cache snapshot contracts."""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from evolution.catalog import CatalogDocument
from evolution.config import PROPOSALS_BASE_URL
from evolution.model import LaunchBarItem, to_proposal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CachedProposal:
    """Represent the pre-rendered projection of one proposal.

    Attributes:
        item: Rendered result row.
        search_text: Lowercase text used for matching queries.
        number: Proposal number used for matching and ordering.
    """

    item: LaunchBarItem
    search_text: str
    number: int | None = None


@dataclass(frozen=True)
class CacheSnapshot:
    """Represent one complete cache snapshot.

    Attributes:
        etag: ``ETag`` validator of the response that produced the snapshot.
        last_modified: ``Last-Modified`` validator of that response.
        cached_at: UTC time at which the snapshot was built.
        proposals: Cached proposals in catalog order.
    """

    etag: str | None
    last_modified: str | None
    cached_at: datetime
    proposals: list[CachedProposal]


class CacheStore(Protocol):
    """Define the contract for loading and saving cache snapshots."""

    def load(self) -> CacheSnapshot | None:
        """Load the current snapshot; ``None`` when absent or unreadable."""

    def save(self, snapshot: CacheSnapshot) -> None:
        """Replace the stored snapshot. Failures are discarded."""


def build_snapshot(
    document: CatalogDocument,
    etag: str | None,
    last_modified: str | None,
    cached_at: datetime,
    base_url: str = PROPOSALS_BASE_URL,
) -> CacheSnapshot:
    """Project a catalog document into a cache snapshot.

    Args:
        document: Decoded catalog document.
        etag: Response ``ETag`` header, if any.
        last_modified: Response ``Last-Modified`` header, if any.
        cached_at: Snapshot timestamp.
        base_url: Base URL that proposal links are relative to.

    Returns:
        Snapshot with one cached proposal per catalog entry.
    """
    proposals: list[CachedProposal] = []
    for dto in document.proposals:
        proposal = to_proposal(dto, base_url=base_url)
        proposals.append(
            CachedProposal(
                item=LaunchBarItem.from_proposal(proposal),
                search_text=proposal.search_text,
                number=proposal.number,
            )
        )
    return CacheSnapshot(
        etag=etag,
        last_modified=last_modified,
        cached_at=cached_at,
        proposals=proposals,
    )
