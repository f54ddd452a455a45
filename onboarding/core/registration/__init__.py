from onboarding.core.registration.activation import IdentityActivation
from onboarding.core.registration.display_name import (
    MAX_NAME_LENGTH_BYTES,
    display_name_is_valid,
    sanitize_display_name,
    sanitize_display_name_or_error,
)
from onboarding.core.registration.linking import (
    ActivationChannel,
    ActivationListener,
    ActivationRequest,
    CancellationToken,
    ProfilePoller,
    RetryingProfilePoller,
)
from onboarding.core.registration.orchestrator import LinkResult, RegistrationOrchestrator
from onboarding.core.registration.state import Registration, RegistrationState
from onboarding.core.registration.sync import ConfigSyncInitializer, UserConfigSync
from onboarding.core.registration.user_state import UserSnapshot, UserState

__all__ = [
    "ActivationChannel",
    "ActivationListener",
    "ActivationRequest",
    "CancellationToken",
    "ConfigSyncInitializer",
    "IdentityActivation",
    "LinkResult",
    "MAX_NAME_LENGTH_BYTES",
    "ProfilePoller",
    "Registration",
    "RegistrationOrchestrator",
    "RegistrationState",
    "RetryingProfilePoller",
    "UserConfigSync",
    "UserSnapshot",
    "UserState",
    "display_name_is_valid",
    "sanitize_display_name",
    "sanitize_display_name_or_error",
]
