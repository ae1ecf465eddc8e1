"""Account data models.

Identity is immutable: updates build a new value with ``Identity.merge``
and hand it to the session projection. Form state and asset candidates are
request-scoped and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class NotificationKind(str, Enum):
    """Kind of transient message shown to the user."""

    SUCCESS = "success"
    ERROR = "error"


class OperationState(str, Enum):
    """Lifecycle of a single update operation."""

    IDLE = "idle"
    SUBMITTING = "submitting"  # only state that blocks resubmission
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class Identity:
    """The authenticated user's profile record."""

    name: str
    email: str
    avatar: str | None = None
    id: str | None = None

    def merge(self, *, name: str | None = None, avatar: str | None = None) -> Identity:
        """Return a copy with the given fields replaced.

        Email is never replaced.
        """
        changes: dict[str, Any] = {}
        if name is not None:
            changes["name"] = name
        if avatar is not None:
            changes["avatar"] = avatar
        return replace(self, **changes) if changes else self

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "avatar": self.avatar}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Identity:
        return cls(
            name=data.get("name") or "",
            email=data.get("email") or "",
            avatar=data.get("avatar") or None,
            id=str(data["id"]) if data.get("id") is not None else None,
        )


@dataclass
class ProfileFormState:
    """Per-edit-session profile form input.

    ``email`` is displayed read-only and never submitted.
    """

    name: str = ""
    email: str = ""
    old_password: str = ""
    new_password: str = ""
    confirm_password: str = ""

    @classmethod
    def from_identity(cls, identity: Identity) -> ProfileFormState:
        return cls(name=identity.name, email=identity.email)

    @property
    def wants_rotation(self) -> bool:
        return bool(self.new_password)

    def to_payload(self) -> dict[str, str]:
        """Build the update request body.

        Password keys are sent only when a rotation is requested.
        """
        payload = {"name": self.name.strip()}
        if self.wants_rotation:
            payload["old_password"] = self.old_password
            payload["password"] = self.new_password
        return payload


@dataclass
class SignInForm:
    email: str = ""
    password: str = ""


@dataclass
class SignUpForm:
    name: str = ""
    email: str = ""
    password: str = ""
    password_confirm: str = ""


@dataclass(frozen=True)
class AssetCandidate:
    """A locally selected, not-yet-uploaded image."""

    uri: str
    byte_size: int | None = None  # as reported by the picker, may be absent
    mime_hint: str | None = None  # e.g. "image"


@dataclass(frozen=True)
class ProbeResult:
    """Filesystem metadata for a selected asset."""

    exists: bool
    byte_size: int | None = None  # None when the size could not be read


@dataclass(frozen=True)
class AvatarUpload:
    """Normalized multipart descriptor for an accepted avatar."""

    uri: str
    filename: str
    content_type: str
    byte_size: int
    field_name: str = "avatar"


@dataclass
class ValidationResult:
    """Field name -> error message. Empty means the form is submittable."""

    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def get(self, field_name: str) -> str | None:
        return self.errors.get(field_name)

    def __contains__(self, field_name: object) -> bool:
        return field_name in self.errors
