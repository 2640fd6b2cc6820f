"""Markdown link extraction.

Only two shapes are recognised, image references ``![alt](URL)`` and
hyperlinks ``[label](URL)``, and only when the URL is absolute http(s).
Matching is purely lexical: links inside code fences are still found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

LINK_RE = re.compile(
    r"!\[[^\]]*]\((?P<image>https?://[^\s)]+)\)"
    r"|\[(?P<label>[^\]]+)]\((?P<link>https?://[^\s)]+)\)"
)


@dataclass(frozen=True)
class LinkMatch:
    """One syntactic occurrence of a remote URL; start/end delimit the URL only."""

    url: str
    start: int
    end: int
    is_image: bool


def extract_links(text: str | None) -> list[LinkMatch]:
    """Return every recognised link in first-occurrence order, duplicates included."""
    if not text:
        return []

    matches = []
    for m in LINK_RE.finditer(text):
        group = "image" if m.group("image") is not None else "link"
        matches.append(LinkMatch(url=m.group(group), start=m.start(group), end=m.end(group), is_image=group == "image"))
    return matches
