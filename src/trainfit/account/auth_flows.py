# Sign-in and sign-up workflows.
#
# Both validate locally, gate on a loading flag, and turn any failure into a
# single error notification. Success is silent: the caller moves on to the
# authenticated area.

from __future__ import annotations

import logging

from trainfit.account.errors import TrainfitError, describe_error
from trainfit.account.models import NotificationKind, OperationState, SignInForm, SignUpForm
from trainfit.account.orchestrator import OperationGate, UpdateResult, UpdateStatus
from trainfit.account.protocol import (
    AuthenticatorProtocol,
    NotificationSinkProtocol,
    RemoteServiceProtocol,
)
from trainfit.account.validation import validate_sign_in, validate_sign_up

logger = logging.getLogger(__name__)

SIGN_IN_FALLBACK = "It was not possible to log in, please try again later!"
SIGN_UP_FALLBACK = "Unable to process sign up at the moment. \nPlease try again later!"


class SignInFlow:
    def __init__(self, authenticator: AuthenticatorProtocol, notifier: NotificationSinkProtocol):
        self.authenticator = authenticator
        self.notifier = notifier
        self.gate = OperationGate("sign in")

    async def submit(self, form: SignInForm) -> UpdateResult:
        validation = validate_sign_in(form)
        if not validation.ok:
            return UpdateResult(UpdateStatus.INVALID, validation=validation)
        if not self.gate.begin():
            return UpdateResult(UpdateStatus.BLOCKED)

        try:
            identity = await self.authenticator.sign_in(form.email.strip(), form.password)
        except Exception as e:
            logger.warning("Sign in failed: %s", e, exc_info=not isinstance(e, TrainfitError))
            self.gate.finish(OperationState.FAILED)
            message = describe_error(e, SIGN_IN_FALLBACK)
            self.notifier.notify(message, NotificationKind.ERROR)
            return UpdateResult(UpdateStatus.FAILED, message=message)
        else:
            self.gate.finish(OperationState.SUCCESS)
            logger.info("Signed in as %s", identity.email)
            return UpdateResult(UpdateStatus.SUCCESS, identity=identity)
        finally:
            self.gate.settle()


class SignUpFlow:
    """Create an account, then sign straight into it."""

    def __init__(
        self,
        remote: RemoteServiceProtocol,
        authenticator: AuthenticatorProtocol,
        notifier: NotificationSinkProtocol,
    ):
        self.remote = remote
        self.authenticator = authenticator
        self.notifier = notifier
        self.gate = OperationGate("sign up")

    async def submit(self, form: SignUpForm) -> UpdateResult:
        validation = validate_sign_up(form)
        if not validation.ok:
            return UpdateResult(UpdateStatus.INVALID, validation=validation)
        if not self.gate.begin():
            return UpdateResult(UpdateStatus.BLOCKED)

        email = form.email.strip()
        try:
            await self.remote.create_user(form.name.strip(), email, form.password)
            identity = await self.authenticator.sign_in(email, form.password)
        except Exception as e:
            logger.warning("Sign up failed: %s", e, exc_info=not isinstance(e, TrainfitError))
            self.gate.finish(OperationState.FAILED)
            message = describe_error(e, SIGN_UP_FALLBACK)
            self.notifier.notify(message, NotificationKind.ERROR)
            return UpdateResult(UpdateStatus.FAILED, message=message)
        else:
            self.gate.finish(OperationState.SUCCESS)
            logger.info("Account created for %s", email)
            return UpdateResult(UpdateStatus.SUCCESS, identity=identity)
        finally:
            self.gate.settle()
