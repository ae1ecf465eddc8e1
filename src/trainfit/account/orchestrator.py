"""Profile and avatar update orchestration.

Each operation runs ``IDLE -> SUBMITTING -> SUCCESS | FAILED`` and always
settles back to ``IDLE``. While an operation is ``SUBMITTING`` a second
submission of the same operation is refused. The two operations are
independent of each other; since they write disjoint identity fields, the
last successful write wins.

Ordering within one operation:
  1. validation / asset guard
  2. remote call
  3. identity update through the session projection (success only)
  4. exactly one notification

All failures stop here and become a notification.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from trainfit.account.asset_guard import AssetAccepted, AssetCancelled, AssetGuard
from trainfit.account.errors import AssetPolicyError, TrainfitError, describe_error
from trainfit.account.models import (
    Identity,
    NotificationKind,
    OperationState,
    ProfileFormState,
    ValidationResult,
)
from trainfit.account.protocol import (
    NotificationSinkProtocol,
    RemoteServiceProtocol,
    SessionProjectionProtocol,
)
from trainfit.account.validation import validate_profile

logger = logging.getLogger(__name__)

PROFILE_UPDATED = "User was updated successfully!"
PROFILE_FALLBACK = "It's not possible to update the user at the moment. Please try again later!"
AVATAR_UPDATED = "Your profile photo has been successfully updated!"
AVATAR_OVERSIZED = "The selected image is oversized, please choose another one (max {limit}Mb)!"
AVATAR_UNREADABLE = "The selected image could not be read, please choose another one!"
AVATAR_FALLBACK = (
    "It's not possible to update your profile photo at the moment. Please try again later!"
)


class UpdateStatus(str, Enum):
    """How a single submission ended."""

    SUCCESS = "success"
    FAILED = "failed"  # remote call failed
    INVALID = "invalid"  # validation errors, nothing sent
    REJECTED = "rejected"  # asset policy, nothing sent
    CANCELLED = "cancelled"  # user cancelled the picker
    BLOCKED = "blocked"  # same operation already in flight


@dataclass
class UpdateResult:
    status: UpdateStatus
    identity: Identity | None = None
    message: str | None = None
    validation: ValidationResult = field(default_factory=ValidationResult)

    @property
    def ok(self) -> bool:
        return self.status is UpdateStatus.SUCCESS


class OperationGate:
    """Loading-state gate for one operation."""

    def __init__(self, name: str):
        self.name = name
        self.state = OperationState.IDLE
        self.last_state: OperationState | None = None

    @property
    def busy(self) -> bool:
        return self.state is OperationState.SUBMITTING

    def begin(self) -> bool:
        if self.busy:
            logger.debug("%s already in flight, ignoring submit", self.name)
            return False
        self._move(OperationState.SUBMITTING)
        return True

    def finish(self, outcome: OperationState) -> None:
        self._move(outcome)

    def settle(self) -> None:
        if self.state is OperationState.SUBMITTING:
            # Ended without a recorded outcome (cancelled picker).
            self.last_state = OperationState.IDLE
        self._move(OperationState.IDLE)

    def _move(self, state: OperationState) -> None:
        if state is not OperationState.IDLE:
            self.last_state = state
        logger.debug("%s: %s -> %s", self.name, self.state.value, state.value)
        self.state = state


class ProfileUpdateOrchestrator:
    """Drives the profile text update and the avatar replacement for one screen."""

    def __init__(
        self,
        session: SessionProjectionProtocol,
        remote: RemoteServiceProtocol,
        notifier: NotificationSinkProtocol,
        asset_guard: AssetGuard | None = None,
    ):
        self.session = session
        self.remote = remote
        self.notifier = notifier
        self.asset_guard = asset_guard
        self.profile = OperationGate("profile update")
        self.avatar = OperationGate("avatar update")

    def new_form(self) -> ProfileFormState:
        """Fresh form pre-filled from the current identity."""
        return ProfileFormState.from_identity(self.session.get_current_identity())

    # -- text fields --

    async def submit_profile(self, form: ProfileFormState) -> UpdateResult:
        validation = validate_profile(form)
        if not validation.ok:
            logger.debug("Profile form invalid: %s", sorted(validation.errors))
            return UpdateResult(UpdateStatus.INVALID, validation=validation)

        if not self.profile.begin():
            return UpdateResult(UpdateStatus.BLOCKED)

        try:
            payload = form.to_payload()
            try:
                returned = await self.remote.update_profile(payload)
                name = returned.name if returned and returned.name else payload["name"]
                updated = self.session.get_current_identity().merge(name=name)
                await self.session.apply_identity_update(updated)
            except Exception as e:
                return self._fail(self.profile, e, PROFILE_FALLBACK)

            self.profile.finish(OperationState.SUCCESS)
            logger.info("Profile updated for %s", updated.email)
            self.notifier.notify(PROFILE_UPDATED, NotificationKind.SUCCESS)
            return UpdateResult(UpdateStatus.SUCCESS, identity=updated, message=PROFILE_UPDATED)
        finally:
            self.profile.settle()

    # -- avatar --

    async def replace_avatar(self) -> UpdateResult:
        if self.asset_guard is None:
            raise RuntimeError("avatar replacement needs an asset guard")
        identity = self.session.get_current_identity()
        if not self.avatar.begin():
            return UpdateResult(UpdateStatus.BLOCKED)

        try:
            outcome = await self.asset_guard.select(identity.name)

            if isinstance(outcome, AssetCancelled):
                return UpdateResult(UpdateStatus.CANCELLED)

            if not isinstance(outcome, AssetAccepted):
                self.avatar.finish(OperationState.FAILED)
                message = _asset_message(outcome.error, self.asset_guard.max_bytes)
                self.notifier.notify(message, NotificationKind.ERROR)
                return UpdateResult(UpdateStatus.REJECTED, message=message)

            try:
                avatar_ref = await self.remote.update_avatar(outcome.upload)
                updated = self.session.get_current_identity().merge(avatar=avatar_ref)
                await self.session.apply_identity_update(updated)
            except Exception as e:
                return self._fail(self.avatar, e, AVATAR_FALLBACK)

            self.avatar.finish(OperationState.SUCCESS)
            logger.info("Avatar updated for %s", updated.email)
            self.notifier.notify(AVATAR_UPDATED, NotificationKind.SUCCESS)
            return UpdateResult(UpdateStatus.SUCCESS, identity=updated, message=AVATAR_UPDATED)
        finally:
            self.avatar.settle()

    def _fail(self, gate: OperationGate, error: Exception, fallback: str) -> UpdateResult:
        # Unexpected errors get a traceback, known ones just the message.
        logger.warning(
            "%s failed: %s", gate.name, error, exc_info=not isinstance(error, TrainfitError)
        )
        gate.finish(OperationState.FAILED)
        message = describe_error(error, fallback)
        self.notifier.notify(message, NotificationKind.ERROR)
        return UpdateResult(UpdateStatus.FAILED, message=message)


def _asset_message(error: AssetPolicyError, max_bytes: int) -> str:
    if error.reason == AssetPolicyError.OVERSIZED:
        return AVATAR_OVERSIZED.format(limit=f"{max_bytes / (1024 * 1024):g}")
    return AVATAR_UNREADABLE
