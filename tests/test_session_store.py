# Tests for the file-backed session store.

import json
import os
import stat
from unittest.mock import AsyncMock, MagicMock

import pytest

from trainfit.account.errors import AppError, NotAuthenticatedError
from trainfit.account.models import Identity
from trainfit.session.store import SessionStore

SAM = Identity(name="Sam", email="a@x.com", avatar=None, id="1")


@pytest.fixture
def api():
    mock = MagicMock()
    mock.token_provider = None
    mock.create_session = AsyncMock(return_value=(SAM, "tok"))
    return mock


@pytest.fixture
def session_path(tmp_path):
    return tmp_path / "session.json"


class TestSessionStore:
    def test_starts_signed_out(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        assert not store.is_authenticated
        assert store.token() is None
        with pytest.raises(NotAuthenticatedError):
            store.get_current_identity()

    def test_wires_token_provider(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        assert api.token_provider == store.token

    async def test_sign_in_persists(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        identity = await store.sign_in("a@x.com", "pw")

        assert identity == SAM
        assert store.token() == "tok"
        data = json.loads(session_path.read_text())
        assert data["token"] == "tok"
        assert data["user"]["email"] == "a@x.com"
        assert stat.S_IMODE(os.stat(session_path).st_mode) == 0o600

    async def test_restored_on_construction(self, api, session_path):
        await SessionStore(api=api, path=session_path).sign_in("a@x.com", "pw")
        restored = SessionStore(api=api, path=session_path)
        assert restored.get_current_identity() == SAM
        assert restored.token() == "tok"

    async def test_failed_sign_in_stores_nothing(self, api, session_path):
        api.create_session.side_effect = AppError("Incorrect e-mail or password.")
        store = SessionStore(api=api, path=session_path)
        with pytest.raises(AppError):
            await store.sign_in("a@x.com", "bad")
        assert not store.is_authenticated
        assert not session_path.exists()

    async def test_apply_identity_update(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        await store.sign_in("a@x.com", "pw")

        await store.apply_identity_update(SAM.merge(name="Alex"))

        assert store.get_current_identity().name == "Alex"
        assert json.loads(session_path.read_text())["user"]["name"] == "Alex"
        assert store.token() == "tok"

    async def test_identical_update_does_not_rewrite(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        await store.sign_in("a@x.com", "pw")
        session_path.write_text(session_path.read_text() + "\n")
        before = session_path.read_text()

        await store.apply_identity_update(SAM)

        assert session_path.read_text() == before

    async def test_email_cannot_change(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        await store.sign_in("a@x.com", "pw")
        with pytest.raises(ValueError):
            await store.apply_identity_update(Identity(name="Sam", email="b@x.com"))
        assert store.get_current_identity() == SAM

    async def test_update_requires_session(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        with pytest.raises(NotAuthenticatedError):
            await store.apply_identity_update(SAM)

    async def test_sign_out(self, api, session_path):
        store = SessionStore(api=api, path=session_path)
        await store.sign_in("a@x.com", "pw")
        assert store.sign_out() is True
        assert not session_path.exists()
        assert not store.is_authenticated
        assert store.sign_out() is False

    def test_corrupt_file_ignored(self, api, session_path):
        session_path.write_text("{not json")
        store = SessionStore(api=api, path=session_path)
        assert not store.is_authenticated

    def test_default_path_under_config_dir(self, api, tmp_path):
        store = SessionStore(api=api)
        assert store.path == tmp_path / "config" / "session.json"
