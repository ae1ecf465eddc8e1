# Asset guard: pick an avatar image, inspect it, and reject unusable ones
# before anything touches the network.

from __future__ import annotations

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import PurePosixPath
from urllib.parse import urlsplit

from trainfit.account.errors import AssetPolicyError
from trainfit.account.models import AssetCandidate, AvatarUpload
from trainfit.account.protocol import AssetSourceProtocol
from trainfit.config import get_settings

logger = logging.getLogger(__name__)

_DEFAULT_EXTENSION = "jpg"
_EXTENSION_ALIASES = {"jpg": "jpeg", "tif": "tiff"}


@dataclass(frozen=True)
class AssetAccepted:
    upload: AvatarUpload


@dataclass(frozen=True)
class AssetRejected:
    error: AssetPolicyError


@dataclass(frozen=True)
class AssetCancelled:
    pass


AssetOutcome = AssetAccepted | AssetRejected | AssetCancelled


def file_extension(uri: str) -> str:
    """Lower-cased extension of the path component of *uri*, without the dot."""
    path = urlsplit(uri).path or uri
    suffix = PurePosixPath(path).suffix
    return suffix[1:].lower() if suffix else ""


def content_type_for(candidate: AssetCandidate, extension: str) -> str:
    hint = (candidate.mime_hint or "").strip().lower()
    if "/" in hint:
        return hint
    guessed, _ = mimetypes.guess_type(f"file.{extension}")
    if guessed and (not hint or guessed.startswith(f"{hint}/")):
        return guessed
    return f"{hint or 'image'}/{_EXTENSION_ALIASES.get(extension, extension)}"


class AssetGuard:
    """Select and police an avatar image.

    The size limit is inclusive: an asset of exactly ``max_bytes`` is accepted.
    """

    def __init__(self, source: AssetSourceProtocol, max_bytes: int | None = None):
        self.source = source
        self.max_bytes = max_bytes if max_bytes is not None else get_settings().avatar_max_bytes

    async def select(self, display_name: str) -> AssetOutcome:
        try:
            candidate = await self.source.pick_image()
        except Exception as e:
            logger.warning("Image selection failed: %s", e)
            return AssetRejected(AssetPolicyError(AssetPolicyError.SELECTION_FAILED, str(e)))
        if candidate is None:
            logger.debug("Image selection cancelled")
            return AssetCancelled()
        return await self.inspect(candidate, display_name)

    async def inspect(self, candidate: AssetCandidate, display_name: str) -> AssetOutcome:
        try:
            info = await self.source.probe(candidate.uri)
        except Exception as e:
            logger.warning("Could not probe %s: %s", candidate.uri, e)
            return AssetRejected(AssetPolicyError(AssetPolicyError.PROBE_FAILED, str(e)))

        if not info.exists:
            return AssetRejected(
                AssetPolicyError(AssetPolicyError.MISSING, f"{candidate.uri} does not exist")
            )

        if info.byte_size is None:
            return AssetRejected(
                AssetPolicyError(AssetPolicyError.PROBE_FAILED, f"size of {candidate.uri} unknown")
            )

        if info.byte_size > self.max_bytes:
            logger.info(
                "Rejected %s: %d bytes exceeds limit of %d",
                candidate.uri,
                info.byte_size,
                self.max_bytes,
            )
            return AssetRejected(
                AssetPolicyError(
                    AssetPolicyError.OVERSIZED,
                    f"{info.byte_size} bytes exceeds {self.max_bytes}",
                )
            )

        extension = file_extension(candidate.uri) or _DEFAULT_EXTENSION
        return AssetAccepted(
            AvatarUpload(
                uri=candidate.uri,
                filename=f"{display_name}.{extension}".lower(),
                content_type=content_type_for(candidate, extension),
                byte_size=info.byte_size,
            )
        )
