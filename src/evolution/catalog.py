# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Catalog document DTOs and JSON parsing."""

import json
import logging
from dataclasses import dataclass
from typing import Any

from evolution.errors import CatalogParseError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusFields:
    """Represent the raw ``status`` object of a proposal.

    Attributes:
        state: Status discriminant, e.g. ``"activeReview"``.
        version: Swift version the proposal was implemented in.
        start: Review period start timestamp, e.g. ``"2024-05-08T00:00:00Z"``.
        end: Review period end timestamp.
        reason: Reason text for the ``error`` state.
    """

    state: str
    version: str | None = None
    start: str | None = None
    end: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class UpcomingFeatureFlag:
    """Represent an upcoming language feature flag.

    Attributes:
        flag: Feature flag name, e.g. ``"ExistentialAny"``.
        enabled_in_language_mode: Language mode in which the feature is always
            enabled; ``None`` when no language mode was announced.
        available: Release in which the flag became available, when it differs
            from the implementation release.
    """

    flag: str
    enabled_in_language_mode: str | None = None
    available: str | None = None


@dataclass(frozen=True)
class ProposalDTO:
    """Represent one proposal exactly as published in the catalog."""

    id: str
    title: str
    link: str
    status: StatusFields
    upcoming_feature_flag: UpcomingFeatureFlag | None = None


@dataclass(frozen=True)
class CatalogDocument:
    """Represent the decoded catalog document.

    Attributes:
        creation_date: Catalog generation timestamp, e.g. ``"2024-05-14T13:38:30Z"``.
        schema_version: Catalog schema version, e.g. ``"1.0.0"``.
        proposals: Proposals in document order.
    """

    creation_date: str
    schema_version: str
    proposals: list[ProposalDTO]


def parse_catalog(data: bytes) -> CatalogDocument:
    """Decode a catalog document from raw response bytes.

    Args:
        data: JSON document bytes.

    Returns:
        Decoded catalog document.

    Raises:
        CatalogParseError: If the bytes are not valid JSON or required fields
            are missing or have the wrong type.
    """
    try:
        payload = json.loads(data)
    except (RecursionError, ValueError) as exc:
        logger.warning(f"Catalog is not valid JSON (bytes={len(data)} error={exc})")
        raise CatalogParseError(f"Catalog is not valid JSON: {exc}") from exc

    root = _require_object(payload, "catalog")
    raw_proposals = root.get("proposals")
    if not isinstance(raw_proposals, list):
        raise CatalogParseError("Catalog field 'proposals' must be a list.")
    proposals = [
        _parse_proposal(raw, f"proposals[{index}]")
        for index, raw in enumerate(raw_proposals)
    ]
    return CatalogDocument(
        creation_date=_require_str(root, "creationDate", "catalog"),
        schema_version=_require_str(root, "schemaVersion", "catalog"),
        proposals=proposals,
    )


def _parse_proposal(raw: Any, where: str) -> ProposalDTO:
    obj = _require_object(raw, where)
    status = _require_object(obj.get("status"), f"{where}.status")
    raw_flag = obj.get("upcomingFeatureFlag")
    flag = None
    if raw_flag is not None:
        flag_obj = _require_object(raw_flag, f"{where}.upcomingFeatureFlag")
        flag = UpcomingFeatureFlag(
            flag=_require_str(flag_obj, "flag", f"{where}.upcomingFeatureFlag"),
            enabled_in_language_mode=_optional_str(
                flag_obj, "enabledInLanguageMode", f"{where}.upcomingFeatureFlag"
            ),
            available=_optional_str(
                flag_obj, "available", f"{where}.upcomingFeatureFlag"
            ),
        )
    return ProposalDTO(
        id=_require_str(obj, "id", where),
        title=_require_str(obj, "title", where),
        link=_require_str(obj, "link", where),
        status=StatusFields(
            state=_require_str(status, "state", f"{where}.status"),
            version=_optional_str(status, "version", f"{where}.status"),
            start=_optional_str(status, "start", f"{where}.status"),
            end=_optional_str(status, "end", f"{where}.status"),
            reason=_optional_str(status, "reason", f"{where}.status"),
        ),
        upcoming_feature_flag=flag,
    )


def _require_object(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise CatalogParseError(f"Expected a JSON object at '{where}'.")
    return value


def _require_str(obj: dict[str, Any], key: str, where: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str):
        raise CatalogParseError(f"Missing or non-string field '{where}.{key}'.")
    return _require_unicode(value, f"{where}.{key}")


def _optional_str(obj: dict[str, Any], key: str, where: str) -> str | None:
    value = obj.get(key)
    if value is not None and not isinstance(value, str):
        raise CatalogParseError(f"Field '{where}.{key}' must be a string.")
    return value if value is None else _require_unicode(value, f"{where}.{key}")


def _require_unicode(value: str, where: str) -> str:
    """Reject strings holding lone surrogates from ``\\uXXXX`` escapes."""
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise CatalogParseError(f"Field '{where}' is not valid Unicode.") from exc
    return value
