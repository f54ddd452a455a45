from __future__ import annotations

from nacl.bindings import (
    crypto_sign_ed25519_pk_to_curve25519,
    crypto_sign_ed25519_sk_to_curve25519,
    crypto_sign_seed_keypair,
)

from onboarding.core.keys.models import VERSION_BYTE, IdentityKeyPair
from onboarding.core.mnemonic import codec

SEED_HEX_LENGTH = 32 * 2


def normalize_seed_hex(seed_hex: str) -> str:
    """
    Legacy padding for seeds that are not 32 bytes: append zeros, keep 64 chars.

    Phrases encode 16-byte seeds, so the usual input is 32 hex chars padded
    with 32 zeros. Identities created that way depend on this exact rule.
    """
    if len(seed_hex) != SEED_HEX_LENGTH:
        seed_hex = (seed_hex + "0" * SEED_HEX_LENGTH)[:SEED_HEX_LENGTH]
    return seed_hex


def derive_key_pair(seed: bytes) -> IdentityKeyPair:
    """
    Deterministic seed -> IdentityKeyPair. No I/O.

    The padded seed buffer is wiped once libsodium has consumed it.
    """
    buf = bytearray(bytes.fromhex(normalize_seed_hex(bytes(seed).hex())))
    try:
        ed_pk, ed_sk = crypto_sign_seed_keypair(bytes(buf))
    finally:
        for i in range(len(buf)):
            buf[i] = 0
    x_pk = crypto_sign_ed25519_pk_to_curve25519(ed_pk)
    x_sk = crypto_sign_ed25519_sk_to_curve25519(ed_sk)
    return IdentityKeyPair(
        ed25519_public_key=ed_pk,
        ed25519_private_key=ed_sk,
        x25519_public_key=bytes([VERSION_BYTE]) + x_pk,
        x25519_private_key=x_sk,
    )


def derive_key_pair_from_hex(seed_hex: str) -> IdentityKeyPair:
    return derive_key_pair(bytes.fromhex(normalize_seed_hex(seed_hex)))


def derive_key_pair_from_mnemonic(phrase: str, language: str) -> IdentityKeyPair:
    """
    decode -> pad -> derive. Both registration flows go through here.
    """
    return derive_key_pair_from_hex(codec.decode(phrase, language))
