from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from prarchive_core.markdown.links import extract_links

if TYPE_CHECKING:
    from prarchive_core.assets import AssetStore


async def localize(text: str | None, store: AssetStore) -> str:
    """Rewrite every remote link in ``text`` to its local copy where one can be made.

    All occurrences are resolved concurrently; each resolved path is spliced
    back into the exact span its URL occupied, so repeated identical URLs are
    rewritten independently and everything outside the URL spans is kept
    byte for byte.
    """
    text = text or ""
    links = extract_links(text)
    if not links:
        return text

    resolved = await asyncio.gather(*(store.resolve(link.url) for link in links))

    parts = []
    cursor = 0
    for link, local in zip(links, resolved):
        parts.append(text[cursor : link.start])
        parts.append(local)
        cursor = link.end
    parts.append(text[cursor:])
    return "".join(parts)
