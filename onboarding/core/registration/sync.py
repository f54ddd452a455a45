from __future__ import annotations

import time
from typing import Any, Protocol

from onboarding.core.keys.models import IdentityKeyPair
from onboarding.core.storage.base import AccountStateStore
from onboarding.core.storage.keys import StorageKey


class ConfigSyncInitializer(Protocol):
    def initialize(self) -> None: ...


class UserConfigSync:
    """
    Sets up the multi-device user config record for the registered identity.

    Needs `primaryDevicePubKey` and the identity key pair to be in the store,
    so it can only run after the primary id was persisted.
    """

    def __init__(self, store: AccountStateStore, *, logger: Any = None):
        self.store = store
        self.logger = logger

    def initialize(self) -> None:
        primary = self.store.get(StorageKey.PRIMARY_DEVICE_PUBKEY)
        if not primary:
            raise RuntimeError("primaryDevicePubKey is not set")
        raw = self.store.get(StorageKey.IDENTITY_KEY)
        if not raw:
            raise RuntimeError("identityKey is not set")
        key_pair = IdentityKeyPair.from_storage(raw)
        if key_pair.account_id != primary:
            raise RuntimeError("identityKey does not match primaryDevicePubKey")
        existing = self.store.get(StorageKey.USER_CONFIG) or {}
        if existing.get("account_id") == primary:
            return
        self.store.put(
            StorageKey.USER_CONFIG,
            {
                "account_id": primary,
                "ed25519_public_key": key_pair.ed25519_public_key.hex(),
                "seqno": 0,
                "created_at": time.time(),
            },
        )
        if self.logger:
            self.logger.info(f"[sync] user config initialized for {primary}")
