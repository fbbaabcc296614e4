# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Query matching against precomputed proposal search text."""

import re

_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_integer(text: str) -> int | None:
    """Parse a signed decimal integer made of ASCII digits.

    Args:
        text: Candidate text.

    Returns:
        Parsed integer, or ``None`` if ``text`` is not an integer literal.
    """
    if _INTEGER_PATTERN.fullmatch(text) is None:
        return None
    return int(text)


def matches_query(query: str, number: int | None, search_text: str) -> bool:
    """Decide whether a proposal satisfies a query.

    An empty query matches everything. A query made of exactly one integer
    token matches only the proposal with that number. Otherwise any token
    occurring in ``search_text`` is a match.

    Args:
        query: Free-text query.
        number: Proposal number, ``None`` when the id has no numeric suffix.
        search_text: Lowercase search text of the proposal.

    Returns:
        ``True`` if the proposal matches.
    """
    words = [word.lower() for word in query.split()]
    if not words:
        return True
    if len(words) == 1:
        query_number = parse_integer(words[0])
        if query_number is not None:
            return number == query_number
    return any(word in search_text for word in words)
