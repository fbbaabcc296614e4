# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain proposal model and the LaunchBar item output contract."""

import logging
from dataclasses import dataclass
from typing import Any

from evolution.catalog import ProposalDTO, UpcomingFeatureFlag
from evolution.config import ITEM_ICON, PROPOSALS_BASE_URL
from evolution.errors import format_error
from evolution.matcher import parse_integer
from evolution.status import Status, status_from_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Proposal:
    """Represent one proposal in domain form.

    Attributes:
        id: Proposal id, e.g. ``"SE-0147"``.
        title: Title without surrounding whitespace.
        url: Absolute URL of the proposal document.
        status: Review status.
        upcoming_feature_flag: Upcoming feature flag, if the proposal has one.
    """

    id: str
    title: str
    url: str
    status: Status
    upcoming_feature_flag: UpcomingFeatureFlag | None = None

    @property
    def number(self) -> int | None:
        """Return the numeric part of the id, e.g. ``147`` for ``SE-0147``."""
        parts = [part for part in self.id.split("-") if part]
        return parse_integer(parts[-1]) if parts else None

    @property
    def search_text(self) -> str:
        """Return the lowercase text that queries are matched against."""
        number = self.number
        flag = self.upcoming_feature_flag
        parts = [
            self.id,
            str(number) if number is not None else "",
            self.title,
            self.status.description,
            flag.flag if flag is not None else "",
        ]
        return " ".join(parts).lower()


def to_proposal(dto: ProposalDTO, base_url: str = PROPOSALS_BASE_URL) -> Proposal:
    """Convert a catalog DTO into a domain proposal.

    Args:
        dto: Proposal as published in the catalog.
        base_url: Base URL that proposal links are relative to.

    Returns:
        Domain proposal.
    """
    return Proposal(
        id=dto.id,
        title=dto.title.strip(),
        url=f"{base_url.rstrip('/')}/{dto.link.lstrip('/')}",
        status=status_from_fields(dto.status),
        upcoming_feature_flag=dto.upcoming_feature_flag,
    )


@dataclass(frozen=True)
class LaunchBarItem:
    """Represent one row in a LaunchBar result list.

    See <https://developer.obdev.at/launchbar-developer-documentation/#/script-output>.

    Attributes:
        title: Text displayed in the row.
        subtitle: Secondary text displayed below the title.
        action_argument: Argument passed to the action when the item is run.
        url: URL opened when the item is selected.
        icon: Icon name, resolved like ``CFBundleIconFile``.
        label: Right-aligned text.
        badge: Right-aligned text drawn in a rounded rectangle.
        always_shows_subtitle: Show the subtitle even when LaunchBar hides
            subtitles by default.
    """

    title: str
    subtitle: str | None = None
    action_argument: str | None = None
    url: str | None = None
    icon: str | None = None
    label: str | None = None
    badge: str | None = None
    always_shows_subtitle: bool = True

    @classmethod
    def from_proposal(cls, proposal: Proposal) -> "LaunchBarItem":
        """Render a proposal as a result row."""
        subtitle = proposal.status.description
        flag = proposal.upcoming_feature_flag
        if flag is not None:
            subtitle += f" · Feature flag: {flag.flag}"
            if flag.enabled_in_language_mode is not None:
                subtitle += (
                    f" (enabled in Swift {flag.enabled_in_language_mode} "
                    "language version)"
                )
        return cls(
            title=f"{proposal.id}: {proposal.title}",
            subtitle=subtitle,
            url=proposal.url,
            icon=ITEM_ICON,
        )

    @classmethod
    def from_error(cls, exc: BaseException) -> "LaunchBarItem":
        """Render a failure as a single diagnostic row.

        Args:
            exc: Failure to report.

        Returns:
            Item titled ``Error: <message>`` whose action argument carries the
            full cause chain.
        """
        title = f"Error: {exc}" if str(exc) else f"Error: {type(exc).__name__}"
        details = format_error(exc)
        return cls(title=title, subtitle=details, action_argument=f"{title}\n{details}")

    def to_json(self) -> dict[str, Any]:
        """Return the LaunchBar JSON object, omitting unset fields."""
        payload: dict[str, Any] = {
            "title": self.title,
            "subtitle": self.subtitle,
            "actionArgument": self.action_argument,
            "url": self.url,
            "icon": self.icon,
            "label": self.label,
            "badge": self.badge,
            "alwaysShowsSubtitle": self.always_shows_subtitle,
        }
        return {key: value for key, value in payload.items() if value is not None}

    @classmethod
    def from_json(cls, payload: dict[str, Any]) -> "LaunchBarItem":
        """Rebuild an item from its JSON object.

        Args:
            payload: Object produced by ``to_json``.

        Returns:
            Item.

        Raises:
            ValueError: If a field is missing or has the wrong type.
        """
        title = payload.get("title")
        if not isinstance(title, str):
            raise ValueError("Item field 'title' must be a string.")
        always_shows_subtitle = payload.get("alwaysShowsSubtitle", True)
        if not isinstance(always_shows_subtitle, bool):
            raise ValueError("Item field 'alwaysShowsSubtitle' must be a boolean.")
        return cls(
            title=title,
            subtitle=_optional_str(payload, "subtitle"),
            action_argument=_optional_str(payload, "actionArgument"),
            url=_optional_str(payload, "url"),
            icon=_optional_str(payload, "icon"),
            label=_optional_str(payload, "label"),
            badge=_optional_str(payload, "badge"),
            always_shows_subtitle=always_shows_subtitle,
        )


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"Item field '{key}' must be a string.")
    return value
