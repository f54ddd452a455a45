from __future__ import annotations

import pytest

from onboarding.core.conversations.models import ConversationType
from onboarding.core.errors import (
    DerivationFailureError,
    InvalidChecksumError,
    InvalidWordError,
    MissingInputError,
    SyncInitError,
)
from onboarding.core.events.registry import IDENTITY_CHANGED, REGISTRATION_DONE
from onboarding.core.keys import IdentityKeyPair, derive_key_pair_from_mnemonic
from onboarding.core.mnemonic import codec
from onboarding.core.registration.state import RegistrationState
from onboarding.core.storage.keys import IDENTITY_SCOPED_KEYS, SettingsKey, StorageKey
from tests.helpers.fakes import CountingSync, FailingSync, RecordingStore


@pytest.mark.parametrize(
    "phrase,language,name",
    [
        ("", "english", "Alice"),
        ("PHRASE", "", "Alice"),
        ("PHRASE", "english", ""),
        ("PHRASE", "english", "   "),
    ],
)
def test_missing_input_rejected_without_writes(harness, alice_phrase, phrase, language, name):
    phrase = alice_phrase if phrase == "PHRASE" else phrase
    with pytest.raises(MissingInputError):
        harness.orchestrator.register_fresh_account(phrase, language, name)
    assert harness.store.ops == []
    assert harness.orchestrator.registration_state() == RegistrationState.UNREGISTERED


def test_fresh_registration_end_to_end(harness, alice_phrase):
    account_id = harness.orchestrator.register_fresh_account(alice_phrase, "english", "  Alice  ")

    expected = derive_key_pair_from_mnemonic(alice_phrase, "english")
    assert account_id == expected.account_id
    assert account_id.startswith("05") and len(account_id) == 66

    store = harness.store
    assert IdentityKeyPair.from_storage(store.get(StorageKey.IDENTITY_KEY)) == expected
    assert store.get(StorageKey.RECOVERY_PHRASE) == alice_phrase
    assert store.get(StorageKey.PRIMARY_DEVICE_PUBKEY) == account_id
    assert store.get(StorageKey.NUMBER_ID) == f"{account_id}.1"
    assert store.get(StorageKey.REGISTRATION_DONE) is True
    assert store.get(SettingsKey.READ_RECEIPT) is False
    assert store.get(SettingsKey.TYPING_INDICATOR) is False
    assert store.get(SettingsKey.OPEN_GROUP_PRUNING) is True
    assert len(store.get(StorageKey.PASSWORD)) == 22
    assert store.get(StorageKey.USER_CONFIG)["account_id"] == account_id
    assert harness.orchestrator.registration_state() == RegistrationState.REGISTERED

    convo = harness.conversations.get_committed(account_id)
    assert convo is not None
    assert convo.type == ConversationType.PRIVATE
    assert convo.display_name_in_profile == "Alice"
    assert convo.is_approved and convo.did_approve_me and convo.hidden
    assert harness.conversations.propagations == []

    snap = harness.user_state.current
    assert snap is not None
    assert snap.our_display_name_in_profile == "Alice"
    assert snap.our_number == account_id
    assert snap.our_primary == account_id

    done = harness.events(REGISTRATION_DONE)
    assert len(done) == 1
    assert done[0]["payload"]["account_id"] == account_id
    assert len(harness.events(IDENTITY_CHANGED)) == 1


def test_observers_notified_once(harness, alice_phrase):
    seen = []
    harness.user_state.subscribe(seen.append)
    harness.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")
    assert [s.our_display_name_in_profile for s in seen] == ["Alice"]


def test_callback_replaces_activation(harness, alice_phrase):
    got = []
    account_id = harness.orchestrator.register_fresh_account(alice_phrase, "english", "Alice", register_callback=got.append)
    assert got == [account_id]
    assert harness.store.get(StorageKey.IDENTITY_KEY) is not None
    assert harness.store.get(StorageKey.PRIMARY_DEVICE_PUBKEY) is None
    assert harness.orchestrator.registration_state() == RegistrationState.UNREGISTERED
    assert harness.events(REGISTRATION_DONE) == []


def test_bad_checksum_fails_before_any_write(harness, alice_phrase):
    wl = codec.get_wordlist("english")
    words = alice_phrase.split()
    words[-1] = wl.words[(wl.index_of(words[-1]) + 1) % len(wl)]
    with pytest.raises(InvalidChecksumError):
        harness.orchestrator.register_fresh_account(" ".join(words), "english", "Alice")
    assert harness.store.ops == []


def test_unknown_word_fails_before_any_write(harness, alice_phrase):
    words = alice_phrase.split()
    words[3] = "zzzzzz"
    with pytest.raises(InvalidWordError):
        harness.orchestrator.register_fresh_account(" ".join(words), "english", "Alice")
    assert harness.store.ops == []


def test_reset_finishes_before_new_material_is_written(harness, alice_phrase):
    harness.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")
    ops = harness.store.ops
    first_put = next(i for i, (op, _k) in enumerate(ops) if op == "put")
    removed = {k for op, k in ops[:first_put] if op == "remove"}
    assert removed == set(IDENTITY_SCOPED_KEYS) | {StorageKey.SIGN_IN_BY_LINKING}
    assert ops[first_put] == ("put", StorageKey.IDENTITY_KEY)
    assert all(op == "put" for op, _k in ops[first_put:])


def test_reregistering_replaces_previous_identity(harness, alice_phrase, bob_phrase):
    first = harness.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")
    second = harness.orchestrator.register_fresh_account(bob_phrase, "english", "Bob")
    assert first != second

    store = harness.store
    assert store.get(StorageKey.RECOVERY_PHRASE) == bob_phrase
    assert store.get(StorageKey.PRIMARY_DEVICE_PUBKEY) == second
    assert store.get(StorageKey.NUMBER_ID) == f"{second}.1"
    assert store.get(StorageKey.USER_CONFIG)["account_id"] == second
    assert IdentityKeyPair.from_storage(store.get(StorageKey.IDENTITY_KEY)).account_id == second
    assert first not in str(store.snapshot())


def test_reset_twice_leaves_no_identity_keys(harness, alice_phrase):
    harness.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")
    harness.orchestrator.reset_identity()
    harness.orchestrator.reset_identity()
    for key in IDENTITY_SCOPED_KEYS:
        assert harness.store.get(key) is None
    assert harness.orchestrator.registration_state() == RegistrationState.UNREGISTERED


def test_sync_failure_keeps_registration_flag(make_harness, alice_phrase):
    sync = FailingSync(RuntimeError("wrappers unavailable"))
    h = make_harness(sync=sync)
    with pytest.raises(SyncInitError) as ei:
        h.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")

    assert isinstance(ei.value.__cause__, RuntimeError)
    assert sync.calls == 1
    assert h.store.get(StorageKey.REGISTRATION_DONE) is True
    assert h.store.get(StorageKey.PRIMARY_DEVICE_PUBKEY) is not None
    assert h.orchestrator.registration_state() == RegistrationState.REGISTERED
    assert any("config sync initialization failed" in m for m in h.logger.messages("warning"))
    # steps after sync init did not run
    assert h.conversations.all() == []
    assert h.user_state.current is None
    assert h.events(REGISTRATION_DONE) == []


def test_store_failure_before_flag_propagates(make_harness, alice_phrase):
    store = RecordingStore(fail_on_put=[StorageKey.REGISTRATION_DONE])
    sync = CountingSync()
    h = make_harness(store=store, sync=sync)
    with pytest.raises(RuntimeError):
        h.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")
    assert sync.calls == 0
    assert h.orchestrator.registration_state() == RegistrationState.UNREGISTERED


def test_empty_account_id_is_derivation_failure(harness, alice_phrase, monkeypatch):
    monkeypatch.setattr(IdentityKeyPair, "account_id", property(lambda self: ""))
    with pytest.raises(DerivationFailureError):
        harness.orchestrator.register_fresh_account(alice_phrase, "english", "Alice")
    # secrets were already written and are not rolled back
    assert harness.store.get(StorageKey.IDENTITY_KEY) is not None
    assert harness.store.get(StorageKey.RECOVERY_PHRASE) == alice_phrase
    assert harness.store.get(StorageKey.REGISTRATION_DONE) is None


def test_generate_mnemonic_registers(harness):
    phrase = harness.orchestrator.generate_mnemonic()
    assert len(phrase.split()) == 13
    account_id = harness.orchestrator.register_fresh_account(phrase, "english", "Carol")
    assert account_id == derive_key_pair_from_mnemonic(phrase, "english").account_id

