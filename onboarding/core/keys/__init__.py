from onboarding.core.keys.derivation import (
    derive_key_pair,
    derive_key_pair_from_hex,
    derive_key_pair_from_mnemonic,
    normalize_seed_hex,
)
from onboarding.core.keys.models import VERSION_BYTE, IdentityKeyPair

__all__ = [
    "IdentityKeyPair",
    "VERSION_BYTE",
    "derive_key_pair",
    "derive_key_pair_from_hex",
    "derive_key_pair_from_mnemonic",
    "normalize_seed_hex",
]
