from onboarding.core.storage.base import AccountStateStore
from onboarding.core.storage.encrypted import EncryptedFileStateStore, StoreMode
from onboarding.core.storage.keys import IDENTITY_SCOPED_KEYS, SettingsKey, StorageKey
from onboarding.core.storage.memory import MemoryStateStore

__all__ = [
    "AccountStateStore",
    "EncryptedFileStateStore",
    "StoreMode",
    "IDENTITY_SCOPED_KEYS",
    "SettingsKey",
    "StorageKey",
    "MemoryStateStore",
]
