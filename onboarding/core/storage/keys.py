from __future__ import annotations

from typing import Tuple


class StorageKey:
    IDENTITY_KEY = "identityKey"
    SIGNALING_KEY = "signaling_key"
    PASSWORD = "password"
    REGISTRATION_ID = "registrationId"
    NUMBER_ID = "number_id"
    DEVICE_NAME = "device_name"
    USER_AGENT = "userAgent"
    PRIMARY_DEVICE_PUBKEY = "primaryDevicePubKey"
    REGION_CODE = "regionCode"
    LOCAL_ATTACHMENT_ENCRYPTED_KEY = "local_attachment_encrypted_key"
    RECOVERY_PHRASE = "recoveryPhrase"
    REGISTRATION_DONE = "registration_done"
    SIGN_IN_BY_LINKING = "is_sign_in_by_linking"
    USER_CONFIG = "user_config"


class SettingsKey:
    READ_RECEIPT = "read-receipt-setting"
    TYPING_INDICATOR = "typing-indicators-setting"
    OPEN_GROUP_PRUNING = "prune-setting"


# Everything that belongs to one identity. The linking flag is not in here:
# it is set before the reset of a linking attempt and must survive it.
IDENTITY_SCOPED_KEYS: Tuple[str, ...] = (
    StorageKey.IDENTITY_KEY,
    StorageKey.SIGNALING_KEY,
    StorageKey.PASSWORD,
    StorageKey.REGISTRATION_ID,
    StorageKey.NUMBER_ID,
    StorageKey.DEVICE_NAME,
    StorageKey.USER_AGENT,
    SettingsKey.READ_RECEIPT,
    SettingsKey.TYPING_INDICATOR,
    SettingsKey.OPEN_GROUP_PRUNING,
    StorageKey.REGION_CODE,
    StorageKey.LOCAL_ATTACHMENT_ENCRYPTED_KEY,
    StorageKey.PRIMARY_DEVICE_PUBKEY,
    StorageKey.RECOVERY_PHRASE,
    StorageKey.REGISTRATION_DONE,
    StorageKey.USER_CONFIG,
)
