"""DirectoryStore — the default: a plain folder next to the working directory.

Layout:
  {root}/{dirname}/pull-request.md
  {root}/{dirname}/assets/0.png, 1, 2.pdf, ...
"""

from __future__ import annotations

import logging
from pathlib import Path

from prarchive_store.base import BaseStore
from prarchive_store.models import LocalAsset

logger = logging.getLogger(__name__)


class DirectoryStore(BaseStore):
    """Writes the archive as a directory the document references by relative paths."""

    @property
    def path(self) -> Path:
        return Path(self.root) / self.dirname

    @property
    def assets_path(self) -> Path:
        return self.path / self.assets_dirname

    def prepare(self) -> None:
        self.assets_path.mkdir(parents=True, exist_ok=True)
        logger.debug("Prepared output folder %s", self.path)

    def save_asset(self, filename: str, content: bytes, url: str | None = None) -> LocalAsset:
        (self.assets_path / filename).write_bytes(content)
        return LocalAsset(filename=filename, folder=self.assets_dirname, url=url, size=len(content))

    def save_document(self, text: str) -> str:
        document = self.path / self.document_name
        document.write_text(text, encoding="utf-8")
        return str(document)
