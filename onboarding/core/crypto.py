from __future__ import annotations

import base64
import hashlib
import os
import secrets
from typing import Any, Dict

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from onboarding.core.errors import StoreLockedError

KEY_BYTES = 32
NONCE_BYTES = 12
BLOB_VERSION = 1


def key_id_from_key_bytes(key: bytes) -> str:
    """Short fingerprint of a store key, safe to print and log."""
    return hashlib.sha256(key).hexdigest()[:16]


def generate_store_key_bytes() -> bytes:
    return secrets.token_bytes(KEY_BYTES)


def write_store_key(path: str, key_bytes: bytes) -> None:
    if len(key_bytes) != KEY_BYTES:
        raise ValueError(f"Store key must be {KEY_BYTES} bytes.")
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as f:
        f.write(key_bytes)
    best_effort_restrict_permissions(path)


def read_store_key(path: str) -> bytes:
    """The store key, or StoreLockedError when the key file is absent."""
    try:
        with open(path, "rb") as f:
            key = f.read()
    except FileNotFoundError as e:
        raise StoreLockedError(path=path) from e
    if len(key) != KEY_BYTES:
        raise ValueError(f"Store key must be {KEY_BYTES} bytes (AES-256), got {len(key)}.")
    return key


def best_effort_restrict_permissions(path: str) -> None:
    # POSIX only; Windows ACLs are left alone
    if os.name == "nt":
        return
    try:
        os.chmod(path, 0o600)
    except OSError:
        return


def generate_local_password() -> str:
    """
    Password used by subsystems to authenticate internal requests.
    16 random bytes, base64, with the trailing '==' padding dropped.
    """
    return base64.b64encode(secrets.token_bytes(16)).decode("ascii")[:-2]


def seal(key: bytes, plaintext: bytes, aad: bytes = b"") -> Dict[str, Any]:
    """AES-GCM encrypt into a JSON-ready blob with a fresh nonce."""
    nonce = secrets.token_bytes(NONCE_BYTES)
    ciphertext = AESGCM(key).encrypt(nonce, plaintext, aad or None)
    return {"version": BLOB_VERSION, "nonce": nonce.hex(), "ciphertext": ciphertext.hex()}


def unseal(key: bytes, blob: Dict[str, Any], aad: bytes = b"") -> bytes:
    """Inverse of `seal`. Raises InvalidTag on a wrong key, aad or tampered data."""
    if blob.get("version") != BLOB_VERSION:
        raise ValueError(f"Unsupported blob version: {blob.get('version')!r}")
    nonce = bytes.fromhex(str(blob["nonce"]))
    ciphertext = bytes.fromhex(str(blob["ciphertext"]))
    return AESGCM(key).decrypt(nonce, ciphertext, aad or None)
