"""Canonical form of GitHub handles used for every membership check."""
from __future__ import annotations

import re
from typing import Iterable, List

GITHUB_PREFIX = re.compile(r"^(https?://)?(www\.)?github\.com/")
INVALID_RUN = re.compile(r"[^A-Za-z0-9-]+")


def normalize(raw: str) -> str:
    """Return the canonical, lower-cased form of a raw username string.

    Handles ``@user`` mentions and ``github.com/user`` profile URLs. The result
    may be empty; callers decide what to do with blank handles.
    """
    value = raw.strip()
    if value.startswith("@"):
        value = value[1:]
    value = GITHUB_PREFIX.sub("", value, count=1)
    value = INVALID_RUN.sub("-", value)
    return value.lower()


def unique_usernames(raw_values: Iterable[str]) -> List[str]:
    """Normalize, drop blanks and collapse duplicates, keeping first-seen order."""
    seen = {}
    for raw in raw_values:
        username = normalize(raw)
        if username and username not in seen:
            seen[username] = None
    return list(seen)


def parse_usernames(text: str) -> List[str]:
    return unique_usernames(text.splitlines())


__all__ = ["normalize", "parse_usernames", "unique_usernames"]
