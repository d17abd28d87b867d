"""Tracker key extraction from pull-request titles."""

from __future__ import annotations

import re

from aha_cli.domain.models import IdentifierMatch, RecordKind

REQUIREMENT_PATTERN = re.compile(r"^[A-Z]+-\d+-\d+")
FEATURE_PATTERN = re.compile(r"^[A-Z]+-\d+")

# Most specific first: a requirement key also starts with a feature key.
_PATTERNS = (
    (RecordKind.REQUIREMENT, REQUIREMENT_PATTERN),
    (RecordKind.FEATURE, FEATURE_PATTERN),
)


def match_identifier(title: str) -> IdentifierMatch | None:
    """Return the tracker key a PR title starts with, or None."""
    text = title.strip()
    for kind, pattern in _PATTERNS:
        found = pattern.match(text)
        if found:
            return IdentifierMatch(kind=kind, key=found.group(0))
    return None
