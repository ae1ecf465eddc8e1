# Account workflows: validation, avatar guard, profile updates, auth, history.

from trainfit.account.asset_guard import AssetAccepted, AssetCancelled, AssetGuard, AssetRejected
from trainfit.account.auth_flows import SignInFlow, SignUpFlow
from trainfit.account.errors import (
    AppError,
    AssetPolicyError,
    NotAuthenticatedError,
    TrainfitError,
    UnclassifiedError,
)
from trainfit.account.history import HistoryDay, HistoryEntry, HistoryView
from trainfit.account.models import (
    AssetCandidate,
    AvatarUpload,
    Identity,
    NotificationKind,
    OperationState,
    ProbeResult,
    ProfileFormState,
    SignInForm,
    SignUpForm,
    ValidationResult,
)
from trainfit.account.orchestrator import ProfileUpdateOrchestrator, UpdateResult, UpdateStatus

__all__ = [
    "AppError",
    "AssetAccepted",
    "AssetCancelled",
    "AssetCandidate",
    "AssetGuard",
    "AssetPolicyError",
    "AssetRejected",
    "AvatarUpload",
    "HistoryDay",
    "HistoryEntry",
    "HistoryView",
    "Identity",
    "NotAuthenticatedError",
    "NotificationKind",
    "OperationState",
    "ProbeResult",
    "ProfileFormState",
    "ProfileUpdateOrchestrator",
    "SignInFlow",
    "SignInForm",
    "SignUpFlow",
    "SignUpForm",
    "TrainfitError",
    "UnclassifiedError",
    "UpdateResult",
    "UpdateStatus",
    "ValidationResult",
]
