from __future__ import annotations

from enum import Enum

from onboarding.core.storage.base import AccountStateStore
from onboarding.core.storage.keys import StorageKey


class RegistrationState(str, Enum):
    UNREGISTERED = "UNREGISTERED"
    PENDING_LINKING = "PENDING_LINKING"
    REGISTERED = "REGISTERED"


class Registration:
    """Durable registration flags, read back from the account store."""

    def __init__(self, store: AccountStateStore):
        self.store = store

    def mark_done(self) -> None:
        self.store.put(StorageKey.REGISTRATION_DONE, True)

    def is_done(self) -> bool:
        return bool(self.store.get(StorageKey.REGISTRATION_DONE, False))

    def set_sign_in_by_linking(self, value: bool) -> None:
        if value:
            self.store.put(StorageKey.SIGN_IN_BY_LINKING, True)
        else:
            self.store.remove(StorageKey.SIGN_IN_BY_LINKING)

    def is_sign_in_by_linking(self) -> bool:
        return bool(self.store.get(StorageKey.SIGN_IN_BY_LINKING, False))

    def state(self) -> RegistrationState:
        if self.is_done():
            return RegistrationState.REGISTERED
        if self.is_sign_in_by_linking():
            return RegistrationState.PENDING_LINKING
        return RegistrationState.UNREGISTERED
