"""Output data models.

Decoupled from prarchive_core so a sink can be used on its own and the core
has no knowledge of how or where bytes are persisted.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass


@dataclass
class LocalAsset:
    """A downloaded asset as it was written next to the document."""

    filename: str
    folder: str  # asset folder name relative to the document, e.g. "assets"
    url: str | None = None
    size: int = 0

    @property
    def relative_path(self) -> str:
        """Posix-style path used inside the Markdown document."""
        return posixpath.join(self.folder, self.filename)
