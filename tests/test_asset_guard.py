# Tests for avatar selection and size policing.

from unittest.mock import AsyncMock

import pytest

from trainfit.account.asset_guard import (
    AssetAccepted,
    AssetCancelled,
    AssetGuard,
    AssetRejected,
    file_extension,
)
from trainfit.account.errors import AssetPolicyError
from trainfit.account.models import AssetCandidate, ProbeResult
from trainfit.local_assets import FileAssetSource

MIB = 1024 * 1024


def _source(candidate, probe=None):
    source = AsyncMock()
    source.pick_image = AsyncMock(return_value=candidate)
    if isinstance(probe, Exception):
        source.probe = AsyncMock(side_effect=probe)
    else:
        source.probe = AsyncMock(return_value=probe)
    return source


PHOTO = AssetCandidate(uri="file:///photos/me.PNG", mime_hint="image")


class TestAssetGuard:
    async def test_cancelled_selection(self):
        source = _source(None)
        outcome = await AssetGuard(source).select("Sam")
        assert isinstance(outcome, AssetCancelled)
        source.probe.assert_not_called()

    async def test_exact_threshold_accepted(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=True, byte_size=5 * MIB)))
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetAccepted)
        assert outcome.upload.byte_size == 5 * MIB

    async def test_one_byte_over_rejected(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=True, byte_size=5 * MIB + 1)))
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetRejected)
        assert outcome.error.reason == AssetPolicyError.OVERSIZED

    async def test_six_mib_rejected(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=True, byte_size=6 * MIB)))
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetRejected)

    async def test_missing_file_rejected(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=False)))
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetRejected)
        assert outcome.error.reason == AssetPolicyError.MISSING

    async def test_probe_failure_rejected(self):
        guard = AssetGuard(_source(PHOTO, PermissionError("denied")))
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetRejected)
        assert outcome.error.reason == AssetPolicyError.PROBE_FAILED

    async def test_unknown_size_rejected(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=True)))
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetRejected)
        assert outcome.error.reason == AssetPolicyError.PROBE_FAILED

    async def test_picker_failure_is_not_cancellation(self):
        source = AsyncMock()
        source.pick_image = AsyncMock(side_effect=RuntimeError("picker crashed"))
        outcome = await AssetGuard(source).select("Sam")
        assert isinstance(outcome, AssetRejected)
        assert outcome.error.reason == AssetPolicyError.SELECTION_FAILED

    async def test_filename_and_mime(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=True, byte_size=100)))
        outcome = await guard.select("Sam Smith")
        upload = outcome.upload
        assert upload.filename == "sam smith.png"
        assert upload.content_type == "image/png"
        assert upload.field_name == "avatar"

    async def test_jpg_maps_to_jpeg(self):
        candidate = AssetCandidate(uri="/tmp/pic.jpg", mime_hint="image")
        guard = AssetGuard(_source(candidate, ProbeResult(exists=True, byte_size=10)))
        outcome = await guard.select("Sam")
        assert outcome.upload.content_type == "image/jpeg"
        assert outcome.upload.filename == "sam.jpg"

    async def test_full_mime_hint_kept(self):
        candidate = AssetCandidate(uri="/tmp/pic.png", mime_hint="image/webp")
        guard = AssetGuard(_source(candidate, ProbeResult(exists=True, byte_size=10)))
        outcome = await guard.select("Sam")
        assert outcome.upload.content_type == "image/webp"

    async def test_custom_limit(self):
        guard = AssetGuard(_source(PHOTO, ProbeResult(exists=True, byte_size=11)), max_bytes=10)
        assert isinstance(await guard.select("Sam"), AssetRejected)

    def test_limit_from_settings(self, monkeypatch):
        from trainfit.config import get_settings

        monkeypatch.setenv("TRAINFIT_AVATAR_MAX_BYTES", "1234")
        get_settings.cache_clear()
        assert AssetGuard(AsyncMock()).max_bytes == 1234


@pytest.mark.parametrize(
    "uri,expected",
    [
        ("file:///a/b/photo.JPG", "jpg"),
        ("/a/b/photo.png?size=large", "png"),
        ("content://media/external/images/42", ""),
        ("photo.tar.gz", "gz"),
    ],
)
def test_file_extension(uri, expected):
    assert file_extension(uri) == expected


class TestFileAssetSource:
    async def test_probe_existing_file(self, tmp_path):
        img = tmp_path / "me.png"
        img.write_bytes(b"\x89PNG" + b"\x00" * 96)
        info = await FileAssetSource.for_path(str(img)).probe(str(img))
        assert info.exists
        assert info.byte_size == 100

    async def test_probe_file_uri(self, tmp_path):
        img = tmp_path / "me.png"
        img.write_bytes(b"\x00" * 10)
        info = await FileAssetSource.for_path(None).probe(img.as_uri())
        assert info.byte_size == 10

    async def test_probe_missing(self, tmp_path):
        info = await FileAssetSource.for_path(None).probe(str(tmp_path / "nope.png"))
        assert not info.exists

    async def test_probe_directory_is_not_an_asset(self, tmp_path):
        info = await FileAssetSource.for_path(None).probe(str(tmp_path))
        assert not info.exists

    async def test_pick_cancelled(self):
        assert await FileAssetSource.for_path("").pick_image() is None

    async def test_pick_image(self, tmp_path):
        img = tmp_path / "me.jpeg"
        candidate = await FileAssetSource.for_path(str(img)).pick_image()
        assert candidate.uri == str(img)
        assert candidate.mime_hint == "image"

    async def test_guard_with_real_file(self, tmp_path):
        img = tmp_path / "avatar.png"
        img.write_bytes(b"\x00" * 2048)
        guard = AssetGuard(FileAssetSource.for_path(str(img)), max_bytes=1024)
        outcome = await guard.select("Sam")
        assert isinstance(outcome, AssetRejected)
        assert outcome.error.reason == AssetPolicyError.OVERSIZED
