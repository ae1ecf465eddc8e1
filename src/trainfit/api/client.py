# API client: HTTP access for the TrainFit backend.
#
# Every failure leaves this module as AppError (the server gave a message
# that is safe to show) or UnclassifiedError (anything else).

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlsplit

import httpx

from trainfit.account.errors import AppError, UnclassifiedError
from trainfit.account.models import AvatarUpload, Identity
from trainfit.config import get_settings

logger = logging.getLogger(__name__)


def local_path(uri: str) -> Path:
    parts = urlsplit(uri)
    if parts.scheme == "file":
        return Path(unquote(parts.path))
    return Path(uri).expanduser()


class ApiClient:
    """HTTP client for the account endpoints.

    Authenticated calls send ``Authorization: Bearer <token>`` using the
    token returned by *token_provider*.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token_provider: Callable[[], str | None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.request_timeout
        self.token_provider = token_provider
        self._transport = transport

    def _headers(self, auth: bool) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if auth and self.token_provider:
            token = self.token_provider()
            if token:
                headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(
        self, method: str, path: str, *, auth: bool = True, **kwargs: Any
    ) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.request(method, path, headers=self._headers(auth), **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise UnclassifiedError(f"{method} {path} failed: {e}") from e

        if resp.is_error:
            raise self._error_from(resp)
        return resp

    @staticmethod
    def _error_from(resp: httpx.Response) -> Exception:
        try:
            body = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict) and isinstance(body.get("message"), str) and body["message"]:
            return AppError(body["message"], status_code=resp.status_code)
        return UnclassifiedError(f"HTTP {resp.status_code} from {resp.request.url}")

    @staticmethod
    def _json(resp: httpx.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise UnclassifiedError(f"Invalid JSON from {resp.request.url}") from e

    # -- sessions --

    async def create_session(self, email: str, password: str) -> tuple[Identity, str]:
        """Authenticate and return the identity with its bearer token."""
        resp = await self._request(
            "POST", "/sessions", auth=False, json={"email": email, "password": password}
        )
        data = self._json(resp)
        if not isinstance(data, dict) or not isinstance(data.get("user"), dict):
            raise UnclassifiedError("Session response has no user")
        token = data.get("token")
        if not token:
            raise UnclassifiedError("Session response has no token")
        return Identity.from_dict(data["user"]), str(token)

    # -- users --

    async def create_user(self, name: str, email: str, password: str) -> None:
        await self._request(
            "POST", "/users", auth=False, json={"name": name, "email": email, "password": password}
        )

    async def update_profile(self, fields: dict[str, str]) -> Identity | None:
        """PUT /users. Returns the updated identity when the server echoes one."""
        resp = await self._request("PUT", "/users", json=fields)
        data = self._json(resp)
        if isinstance(data, dict):
            user = data.get("user", data)
            if isinstance(user, dict) and user.get("email"):
                return Identity.from_dict(user)
        return None

    async def update_avatar(self, upload: AvatarUpload) -> str:
        """PATCH /users/avatar as multipart. Returns the new avatar reference."""
        path = local_path(upload.uri)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise UnclassifiedError(f"Cannot read {path}: {e}") from e
        if len(content) != upload.byte_size:
            raise UnclassifiedError(
                f"{path} changed since it was inspected "
                f"({len(content)} bytes, expected {upload.byte_size})"
            )

        resp = await self._request(
            "PATCH",
            "/users/avatar",
            files={upload.field_name: (upload.filename, content, upload.content_type)},
        )
        data = self._json(resp)
        avatar = data.get("avatar") if isinstance(data, dict) else None
        if not avatar:
            raise UnclassifiedError("Avatar response has no avatar reference")
        return str(avatar)

    def avatar_url(self, avatar_ref: str | None) -> str | None:
        """Public URL for an avatar reference, or None for the default picture."""
        if not avatar_ref:
            return None
        return f"{self.base_url}/avatar/{avatar_ref}"

    # -- history --

    async def fetch_history(self) -> list[dict[str, Any]]:
        resp = await self._request("GET", "/history")
        data = self._json(resp)
        if data is None:
            return []
        if not isinstance(data, list):
            raise UnclassifiedError("History response is not a list")
        return data
