# Local asset source: picks images from the local filesystem.

from __future__ import annotations

import asyncio
import logging
import mimetypes
from collections.abc import Awaitable, Callable
from pathlib import Path

from trainfit.account.models import AssetCandidate, ProbeResult
from trainfit.api.client import local_path

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".heic", ".bmp"})

Chooser = Callable[[], Awaitable[str | None]]


class FileAssetSource:
    """Asset source backed by local files.

    *chooser* returns the selected path, or ``None``/empty string when the
    user cancels.
    """

    def __init__(self, chooser: Chooser):
        self.chooser = chooser

    @classmethod
    def for_path(cls, path: str | None) -> FileAssetSource:
        """Source that always "selects" *path* (cancelled when falsy)."""

        async def chooser() -> str | None:
            return path

        return cls(chooser)

    async def pick_image(self) -> AssetCandidate | None:
        selected = await self.chooser()
        if not selected:
            return None
        path = Path(selected).expanduser()
        if path.suffix.lower() not in IMAGE_SUFFIXES:
            logger.info("Selected file %s does not look like an image", path)
        mime, _ = mimetypes.guess_type(path.name)
        return AssetCandidate(uri=str(path), mime_hint=mime.split("/")[0] if mime else "image")

    async def probe(self, uri: str) -> ProbeResult:
        """Stat *uri* off the event loop. OSError other than not-found propagates."""
        path = local_path(uri)
        try:
            st = await asyncio.to_thread(path.stat)
        except FileNotFoundError:
            return ProbeResult(exists=False)
        if not path.is_file():
            return ProbeResult(exists=False)
        return ProbeResult(exists=True, byte_size=st.st_size)
