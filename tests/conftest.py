# Shared fixtures for the account client tests.

from unittest.mock import AsyncMock

import pytest

from trainfit.account.errors import NotAuthenticatedError
from trainfit.account.models import Identity, NotificationKind
from trainfit.config import get_settings


@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """Point config at a temp dir and drop any cached settings."""
    for var in ("TRAINFIT_API_BASE_URL", "TRAINFIT_AVATAR_MAX_BYTES", "TRAINFIT_REQUEST_TIMEOUT"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TRAINFIT_CONFIG_DIR", str(tmp_path / "config"))
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeSession:
    """In-memory session projection that records every write."""

    def __init__(self, identity: Identity | None):
        self.identity = identity
        self.writes: list[Identity] = []

    def get_current_identity(self) -> Identity:
        if self.identity is None:
            raise NotAuthenticatedError("Not signed in")
        return self.identity

    async def apply_identity_update(self, identity: Identity) -> None:
        self.writes.append(identity)
        self.identity = identity


class FakeNotifier:
    def __init__(self):
        self.messages: list[tuple[str, NotificationKind]] = []

    def notify(self, message: str, kind: NotificationKind) -> None:
        self.messages.append((message, kind))


@pytest.fixture
def identity():
    return Identity(name="Sam", email="a@x.com", avatar="old.png", id="1")


@pytest.fixture
def session(identity):
    return FakeSession(identity)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def remote():
    mock = AsyncMock()
    mock.update_profile = AsyncMock(return_value=None)
    mock.update_avatar = AsyncMock(return_value="new-avatar.png")
    mock.create_user = AsyncMock(return_value=None)
    mock.fetch_history = AsyncMock(return_value=[])
    return mock
