from __future__ import annotations

import os

from nacl.signing import SigningKey

from onboarding.core.keys import (
    VERSION_BYTE,
    IdentityKeyPair,
    derive_key_pair,
    derive_key_pair_from_hex,
    derive_key_pair_from_mnemonic,
    normalize_seed_hex,
)
from onboarding.core.mnemonic import codec


def test_derivation_is_deterministic():
    for _ in range(5):
        seed = os.urandom(32)
        assert derive_key_pair(seed) == derive_key_pair(seed)


def test_versioned_public_key_shape():
    for _ in range(5):
        kp = derive_key_pair(os.urandom(32))
        assert len(kp.x25519_public_key) == 33
        assert kp.x25519_public_key[0] == VERSION_BYTE == 5
        assert len(kp.x25519_private_key) == 32
        assert len(kp.ed25519_public_key) == 32
        assert len(kp.ed25519_private_key) == 64
        assert kp.account_id.startswith("05")
        assert len(kp.account_id) == 66


def test_short_seed_is_zero_padded_to_32_bytes():
    assert derive_key_pair_from_hex("aa") == derive_key_pair_from_hex("aa" + "0" * 62)
    assert derive_key_pair(bytes.fromhex("aa")) == derive_key_pair(bytes.fromhex("aa" + "0" * 62))


def test_sixteen_byte_seed_matches_legacy_padding():
    seed = os.urandom(16)
    assert derive_key_pair(seed) == derive_key_pair(seed + bytes(16))


def test_normalize_seed_hex_rules():
    assert normalize_seed_hex("ab" * 16) == "ab" * 16 + "0" * 32
    assert normalize_seed_hex("cd" * 32) == "cd" * 32
    assert normalize_seed_hex("ef" * 40) == "ef" * 32
    assert len(normalize_seed_hex("")) == 64


def test_conversion_matches_pynacl_high_level_api():
    seed = os.urandom(32)
    kp = derive_key_pair(seed)
    sk = SigningKey(seed)
    assert kp.ed25519_public_key == sk.verify_key.encode()
    assert kp.x25519_public_key[1:] == sk.verify_key.to_curve25519_public_key().encode()
    assert kp.x25519_private_key == sk.to_curve25519_private_key().encode()


def test_mnemonic_derivation_goes_through_padded_seed(alice_phrase):
    seed_hex = codec.decode(alice_phrase, "english")
    assert derive_key_pair_from_mnemonic(alice_phrase, "english") == derive_key_pair_from_hex(seed_hex + "0" * 32)


def test_storage_form_round_trips(alice_phrase):
    kp = derive_key_pair_from_mnemonic(alice_phrase, "english")
    stored = kp.to_storage()
    assert stored["pubKey"] == kp.account_id
    assert IdentityKeyPair.from_storage(stored) == kp


def test_repr_does_not_expose_private_keys():
    kp = derive_key_pair(os.urandom(32))
    assert kp.x25519_private_key.hex() not in repr(kp)
