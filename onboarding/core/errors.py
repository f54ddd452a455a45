from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict

from onboarding.core.events.audit import redact


class Severity(str, Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class OnboardingError(Exception):
    code: str
    user_message: str
    severity: Severity = Severity.ERROR
    recoverable: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.code)

    def __str__(self) -> str:
        return f"{self.code}: {self.user_message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "recoverable": bool(self.recoverable),
            "context": redact(self.context or {}),
        }


# ---- input / phrase ----
class MissingInputError(OnboardingError):
    def __init__(self, user_message: str = "A required value is missing.", **ctx: Any):
        super().__init__("missing_input", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class ValidationError(OnboardingError):
    def __init__(self, user_message: str = "Invalid value.", **ctx: Any):
        super().__init__("validation_error", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class DisplayNameTooLongError(ValidationError):
    def __init__(self, user_message: str = "Display name is too long.", **ctx: Any):
        super().__init__(user_message, **ctx)
        self.code = "display_name_too_long"


class MnemonicError(OnboardingError):
    pass


class InvalidWordError(MnemonicError):
    def __init__(self, user_message: str = "The recovery password contains an invalid word.", **ctx: Any):
        super().__init__("invalid_word", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


class InvalidChecksumError(MnemonicError):
    def __init__(self, user_message: str = "The recovery password checksum does not match.", **ctx: Any):
        super().__init__("invalid_checksum", user_message, severity=Severity.WARN, recoverable=True, context=ctx)


# ---- registration ----
class DerivationFailureError(OnboardingError):
    def __init__(self, user_message: str = "We don't have a public key from the recovery password.", **ctx: Any):
        super().__init__("derivation_failure", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


class SyncInitError(OnboardingError):
    def __init__(self, user_message: str = "Registered, but the config sync could not be initialized.", **ctx: Any):
        super().__init__("sync_init_failure", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


# ---- storage ----
class StoreError(OnboardingError):
    def __init__(self, user_message: str = "Account store error.", **ctx: Any):
        super().__init__("store_error", user_message, severity=Severity.ERROR, recoverable=True, context=ctx)


class StoreLockedError(StoreError):
    def __init__(self, user_message: str = "The store key is required to open the account store.", **ctx: Any):
        super().__init__(user_message, **ctx)
        self.code = "store_locked"
        self.severity = Severity.WARN


class StoreCorruptError(StoreError):
    def __init__(self, user_message: str = "The account store could not be decrypted.", **ctx: Any):
        super().__init__(user_message, **ctx)
        self.code = "store_corrupt"
        self.severity = Severity.CRITICAL
        self.recoverable = False
