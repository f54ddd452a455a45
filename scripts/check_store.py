from __future__ import annotations

import sys

from onboarding.core.config import DEFAULT_CONFIG_PATH, load_config
from onboarding.core.crypto import key_id_from_key_bytes, read_store_key
from onboarding.core.errors import StoreLockedError
from onboarding.core.registration.state import Registration
from onboarding.core.storage.encrypted import EncryptedFileStateStore, StoreMode


def main() -> None:
    cfg = load_config(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH)
    store = EncryptedFileStateStore(key_path=cfg.store.key_path, store_path=cfg.store.store_path)
    try:
        key = read_store_key(cfg.store.key_path)
    except StoreLockedError:
        raise SystemExit(f"Store key missing at: {cfg.store.key_path}")
    mode = store.mode()
    print(f"store: {cfg.store.store_path}")
    print(f"key_id: {key_id_from_key_bytes(key)}")
    print(f"mode: {mode.value}")
    if mode == StoreMode.READY:
        print(f"registration: {Registration(store).state().value}")


if __name__ == "__main__":
    main()
