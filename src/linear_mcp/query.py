"""Compile a human-typed search string into a Linear ``IssueFilter``.

Supported tokens::

    assignee:@me          restrict to issues assigned to the API key's user
    priority:<v>          0-4 or no/urgent/high/medium/low (2 and high mean urgent-or-high)
    state:<v> status:<v>  workflow state name; drops the default open-only filter
    team:<v>              team name
    label:<v>             label name
    key:"quoted value"    any value may be quoted to keep spaces
    word                  title or description contains ``word``

Unknown ``key:value`` tokens are ignored. Pure functions, no I/O.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass
from typing import Any

_TOKEN_RE = re.compile(r'\S+:"[^"]+"|[^:\s]+:\S+|\S+')
_QUOTED_RE = re.compile(r'^"(.*)"$')

PRIORITY_WORDS: dict[str, int] = {
    "no": 0,
    "urgent": 1,
    "high": 2,
    "medium": 3,
    "low": 4,
}

# "high" searches also surface urgent issues.
_URGENT_OR_HIGH: dict[str, Any] = {"in": [1, 2]}


def _default_state() -> dict[str, Any]:
    return {"type": {"nin": ["completed", "canceled"]}}


@dataclass(frozen=True)
class CompiledQuery:
    filter: dict[str, Any]
    is_my_issues: bool = False
    priority_filter: dict[str, Any] | None = None

    def search_filter(self) -> dict[str, Any]:
        """Return ``filter`` with the priority constraint merged in.

        Only the team-wide search uses this; the my-issues search sends
        ``filter`` unchanged.
        """
        merged = copy.deepcopy(self.filter)
        if self.priority_filter is not None:
            merged["priority"] = copy.deepcopy(self.priority_filter)
        return merged


def tokenize(raw: str) -> list[tuple[str, str | None]]:
    """Split *raw* into ``(key, value)`` pairs; bare words come back as ``(word, None)``."""
    tokens: list[tuple[str, str | None]] = []
    for part in _TOKEN_RE.findall(raw):
        if ":" not in part:
            tokens.append((part, None))
            continue
        key, _, value = part.partition(":")
        tokens.append((key, _QUOTED_RE.sub(r"\1", value)))
    return tokens


def parse_priority(value: str) -> dict[str, Any] | None:
    """Map a priority token value to a Linear number comparator, or ``None``."""
    if value.isascii() and value.isdigit():
        number = int(value)
        if number == 2:
            return copy.deepcopy(_URGENT_OR_HIGH)
        if 0 <= number <= 4:
            return {"eq": number}
        return None

    lowered = value.lower()
    if lowered == "high":
        return copy.deepcopy(_URGENT_OR_HIGH)
    if lowered in PRIORITY_WORDS:
        return {"eq": PRIORITY_WORDS[lowered]}
    return None


def compile_query(raw: str) -> CompiledQuery:
    """Compile *raw* into a :class:`CompiledQuery`. Never raises on odd input."""
    issue_filter: dict[str, Any] = {"state": _default_state()}
    is_my_issues = False
    priority_filter: dict[str, Any] | None = None

    for key, value in tokenize(raw or ""):
        if value is None:
            # Last bare word wins: Linear's filter takes a single ``or`` clause.
            issue_filter["or"] = [
                {"title": {"contains": key}},
                {"description": {"contains": key}},
            ]
            continue
        if not value:
            continue

        match key:
            case "assignee":
                if value == "@me":
                    is_my_issues = True
            case "priority":
                priority_filter = parse_priority(value) or priority_filter
            case "state" | "status":
                # Replaces the default open-only predicate rather than merging with it.
                issue_filter["state"] = {"name": {"eq": value}}
            case "team":
                issue_filter["team"] = {"name": {"eq": value}}
            case "label":
                issue_filter["labels"] = {"name": {"eq": value}}
            case _:
                pass

    return CompiledQuery(filter=issue_filter, is_my_issues=is_my_issues, priority_filter=priority_filter)
