# Session store: file-based session persistence at ~/.trainfit/session.json.
#
# Owns the authenticated identity. apply_identity_update() is the only write
# path for identity changes.

from __future__ import annotations

import asyncio
import json
import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from trainfit.account.errors import NotAuthenticatedError
from trainfit.account.models import Identity
from trainfit.api.client import ApiClient
from trainfit.config import get_config_dir

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSession:
    identity: Identity
    token: str

    def to_dict(self) -> dict[str, Any]:
        return {"user": self.identity.to_dict(), "token": self.token}


def _default_path() -> Path:
    return get_config_dir() / "session.json"


class SessionStore:
    """Session projection backed by a JSON file.

    The file is chmod 0600 (owner-only read/write). A stored session is
    restored on construction.
    """

    def __init__(self, api: ApiClient | None = None, path: Path | None = None):
        self.path = path or _default_path()
        self.api = api or ApiClient()
        if self.api.token_provider is None:
            self.api.token_provider = self.token
        self._session: StoredSession | None = self._load()
        self._lock = asyncio.Lock()

    def _load(self) -> StoredSession | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text())
            return StoredSession(identity=Identity.from_dict(data["user"]), token=data["token"])
        except Exception as e:
            logger.warning("Failed to restore session from %s: %s", self.path, e)
            return None

    def _save(self, session: StoredSession) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(session.to_dict(), indent=2))
        os.chmod(self.path, stat.S_IRUSR | stat.S_IWUSR)

    @property
    def is_authenticated(self) -> bool:
        return self._session is not None

    def token(self) -> str | None:
        return self._session.token if self._session else None

    def get_current_identity(self) -> Identity:
        if self._session is None:
            raise NotAuthenticatedError("Not signed in")
        return self._session.identity

    async def apply_identity_update(self, identity: Identity) -> None:
        async with self._lock:
            if self._session is None:
                raise NotAuthenticatedError("Not signed in")
            if identity == self._session.identity:
                return
            if identity.email != self._session.identity.email:
                raise ValueError("Email cannot be changed")
            session = StoredSession(identity=identity, token=self._session.token)
            self._save(session)
            self._session = session
            logger.debug("Identity updated for %s", identity.email)

    async def sign_in(self, email: str, password: str) -> Identity:
        identity, token = await self.api.create_session(email, password)
        async with self._lock:
            session = StoredSession(identity=identity, token=token)
            self._save(session)
            self._session = session
        logger.info("Saved session for %s", identity.email)
        return identity

    def sign_out(self) -> bool:
        """Forget the session. Returns True if one existed."""
        self._session = None
        if self.path.exists():
            self.path.unlink()
            logger.info("Deleted session file %s", self.path)
            return True
        return False
