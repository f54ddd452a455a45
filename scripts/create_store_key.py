from __future__ import annotations

import os
import sys

from onboarding.core.config import DEFAULT_CONFIG_PATH, load_config
from onboarding.core.crypto import generate_store_key_bytes, key_id_from_key_bytes, write_store_key


def main() -> None:
    cfg = load_config(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_CONFIG_PATH, write_default=True)
    key_path = cfg.store.key_path

    if os.path.exists(key_path):
        print(f"Store key already exists at: {key_path}")
        return

    key = generate_store_key_bytes()
    write_store_key(key_path, key)
    print(f"Created store key at: {key_path}")
    print(f"Key fingerprint (key_id): {key_id_from_key_bytes(key)}")


if __name__ == "__main__":
    main()
