"""ZipStore — the whole archive as a single portable .zip file.

Assets are buffered in memory until save_document() is called, which writes
the archive in one go. If the run aborts before that, nothing is written.
Inside the zip the layout matches DirectoryStore:
  {dirname}/pull-request.md
  {dirname}/assets/...
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path

from prarchive_store.base import BaseStore
from prarchive_store.models import LocalAsset

logger = logging.getLogger(__name__)


class ZipStore(BaseStore):
    """Buffers assets and emits ``{root}/{dirname}.zip`` with the document."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._pending: dict[str, bytes] = {}

    @property
    def path(self) -> Path:
        return Path(self.root) / f"{self.dirname}.zip"

    def prepare(self) -> None:
        Path(self.root).mkdir(parents=True, exist_ok=True)
        self._pending.clear()

    def save_asset(self, filename: str, content: bytes, url: str | None = None) -> LocalAsset:
        asset = LocalAsset(filename=filename, folder=self.assets_dirname, url=url, size=len(content))
        self._pending[asset.relative_path] = content
        return asset

    def save_document(self, text: str) -> str:
        with zipfile.ZipFile(self.path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            zf.writestr(f"{self.dirname}/{self.document_name}", text.encode("utf-8"))
            for name, content in self._pending.items():
                zf.writestr(f"{self.dirname}/{name}", content)
        logger.debug("Wrote %d asset(s) into %s", len(self._pending), self.path)
        self._pending.clear()
        return str(self.path)

    def close(self) -> None:
        self._pending.clear()
