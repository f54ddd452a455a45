from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

VERSION_BYTE = 0x05


@dataclass(frozen=True)
class IdentityKeyPair:
    """
    Ed25519 signing pair plus the X25519 pair converted from it.

    `x25519_public_key` is 33 bytes: the version byte followed by the raw key.
    """

    ed25519_public_key: bytes
    ed25519_private_key: bytes
    x25519_public_key: bytes
    x25519_private_key: bytes

    @property
    def account_id(self) -> str:
        return self.x25519_public_key.hex()

    def to_storage(self) -> Dict[str, Any]:
        return {
            "pubKey": self.x25519_public_key.hex(),
            "privKey": self.x25519_private_key.hex(),
            "ed25519KeyPair": {
                "publicKey": self.ed25519_public_key.hex(),
                "privateKey": self.ed25519_private_key.hex(),
            },
        }

    @classmethod
    def from_storage(cls, data: Dict[str, Any]) -> "IdentityKeyPair":
        ed = data.get("ed25519KeyPair") or {}
        return cls(
            ed25519_public_key=bytes.fromhex(str(ed["publicKey"])),
            ed25519_private_key=bytes.fromhex(str(ed["privateKey"])),
            x25519_public_key=bytes.fromhex(str(data["pubKey"])),
            x25519_private_key=bytes.fromhex(str(data["privKey"])),
        )

    def __repr__(self) -> str:
        return f"IdentityKeyPair(account_id={self.account_id!r})"
