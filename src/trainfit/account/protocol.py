# Collaborator protocols for the account workflows.
# Implement these to plug in a different session store, backend or UI.

from typing import Any, Protocol

from trainfit.account.models import (
    AssetCandidate,
    AvatarUpload,
    Identity,
    NotificationKind,
    ProbeResult,
)


class SessionProjectionProtocol(Protocol):
    """Owner of the authenticated identity.

    ``apply_identity_update`` is the only way an identity changes and must be
    idempotent under repeated identical updates.
    """

    def get_current_identity(self) -> Identity:
        """Return the current identity. Raises NotAuthenticatedError if none."""
        ...

    async def apply_identity_update(self, identity: Identity) -> None:
        """Replace the stored identity with *identity*."""
        ...


class AuthenticatorProtocol(Protocol):
    """Creates authenticated sessions."""

    async def sign_in(self, email: str, password: str) -> Identity:
        """Authenticate and store the resulting session."""
        ...


class RemoteServiceProtocol(Protocol):
    """Remote persistence for account data.

    Failures raise AppError (known reason) or UnclassifiedError.
    """

    async def update_profile(self, fields: dict[str, str]) -> Identity | None:
        """Persist profile fields. Returns the updated identity if the server sends one."""
        ...

    async def update_avatar(self, upload: AvatarUpload) -> str:
        """Upload an avatar and return the new avatar reference."""
        ...

    async def create_user(self, name: str, email: str, password: str) -> None:
        """Register a new account."""
        ...

    async def fetch_history(self) -> list[dict[str, Any]]:
        """Return activity history grouped by day."""
        ...


class NotificationSinkProtocol(Protocol):
    """Fire-and-forget transient messages."""

    def notify(self, message: str, kind: NotificationKind) -> None: ...


class AssetSourceProtocol(Protocol):
    """Local image selection and inspection."""

    async def pick_image(self) -> AssetCandidate | None:
        """Let the user pick an image. Returns None when cancelled."""
        ...

    async def probe(self, uri: str) -> ProbeResult:
        """Read metadata for *uri*. Raises OSError when it cannot be determined."""
        ...
