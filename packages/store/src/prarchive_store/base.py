"""Abstract output interface.

Every place an archive can be written to (a plain directory, a zip file)
implements this interface. The core depends on BaseStore, not on a concrete
backend, so the CLI can pick the output format without touching the core.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prarchive_store.models import LocalAsset


class BaseStore(ABC):
    """Destination for one archived pull request: a document plus its assets."""

    def __init__(self, root: str, dirname: str, assets_dirname: str = "assets", document_name: str = "pull-request.md"):
        self.root = root
        self.dirname = dirname
        self.assets_dirname = assets_dirname
        self.document_name = document_name

    @abstractmethod
    def prepare(self) -> None:
        """Create the output folder and its asset sub-folder."""

    @abstractmethod
    def save_asset(self, filename: str, content: bytes, url: str | None = None) -> LocalAsset:
        """Persist one asset under the asset folder and describe it."""

    @abstractmethod
    def save_document(self, text: str) -> str:
        """Write the Markdown document, replacing any previous one, and return its path."""

    def close(self) -> None:
        """Release any resources held by the store.

        Optional. The default is a no-op so callers can always call close() safely.
        """
