from __future__ import annotations

import os

import pytest

from onboarding.core.errors import InvalidChecksumError, InvalidWordError
from onboarding.core.mnemonic import codec


def test_sixteen_byte_seed_is_thirteen_words():
    phrase = codec.generate(16)
    assert len(phrase.split()) == 13


def test_known_entropy_decodes_back_to_seed():
    seed_hex = "00112233445566778899aabbccddeeff"
    phrase = codec.encode(seed_hex, "english")
    assert codec.decode(phrase, "english") == seed_hex


def test_phrase_round_trip():
    for _ in range(10):
        phrase = codec.generate(16, "english")
        assert codec.encode(codec.decode(phrase, "english"), "english") == phrase


def test_round_trip_other_language():
    phrase = codec.generate(16, "spanish", entropy=os.urandom(16))
    assert codec.encode(codec.decode(phrase, "spanish"), "spanish") == phrase


def test_decode_accepts_prefixes_case_and_extra_spaces(alice_phrase):
    words = alice_phrase.split()
    sloppy = "   ".join((w[:4] if len(w) > 4 else w).upper() for w in words)
    assert codec.decode(sloppy, "english") == codec.decode(alice_phrase, "english")


def test_wrong_checksum_word_rejected(alice_phrase):
    words = alice_phrase.split()
    wl = codec.get_wordlist("english")
    other = wl.words[(wl.index_of(words[-1]) + 1) % len(wl)]
    with pytest.raises(InvalidChecksumError):
        codec.decode(" ".join(words[:-1] + [other]), "english")


def test_unknown_word_rejected(alice_phrase):
    words = alice_phrase.split()
    words[0] = "zzzzzz"
    with pytest.raises(InvalidWordError):
        codec.decode(" ".join(words), "english")


def test_unknown_word_with_unique_prefix_reads_as_list_word(alice_phrase):
    wl = codec.get_wordlist("english")
    assert wl.index_of("notaword") == wl.index_of("notable")

    words = alice_phrase.split()
    i = next(i for i, w in enumerate(words[:-1]) if len(w) >= 4)
    words[i] = words[i][:4] + "qqq"
    assert codec.decode(" ".join(words), "english") == codec.decode(alice_phrase, "english")


def test_too_few_words_rejected(alice_phrase):
    with pytest.raises(InvalidWordError):
        codec.decode(" ".join(alice_phrase.split()[:6]), "english")


def test_missing_checksum_word_rejected(alice_phrase):
    with pytest.raises(InvalidWordError):
        codec.decode(" ".join(alice_phrase.split()[:12]), "english")


def test_word_triple_outside_32_bits_rejected(alice_phrase):
    wl = codec.get_wordlist("english")
    words = alice_phrase.split()
    # w1=0, w2=0, w3=n-1 encodes n*n*(n-1), which does not fit 4 bytes
    words[0:3] = [wl.words[0], wl.words[0], wl.words[len(wl) - 1]]
    with pytest.raises(InvalidWordError):
        codec.decode(" ".join(words), "english")


def test_unsupported_language_rejected(alice_phrase):
    with pytest.raises(InvalidWordError):
        codec.decode(alice_phrase, "klingon")


def test_generate_rejects_lengths_not_multiple_of_four():
    with pytest.raises(ValueError):
        codec.generate(15)
    with pytest.raises(ValueError):
        codec.generate(0)


@pytest.mark.parametrize("size", [4, 8, 12])
def test_seeds_too_short_to_decode_are_refused(size):
    with pytest.raises(ValueError):
        codec.generate(size)
    with pytest.raises(ValueError):
        codec.encode("ab" * size, "english")


@pytest.mark.parametrize("size", [16, 20, 32])
def test_generated_phrases_decode_for_every_allowed_size(size):
    phrase = codec.generate(size, "english")
    assert len(codec.decode(phrase, "english")) == size * 2
    assert codec.encode(codec.decode(phrase, "english"), "english") == phrase


def test_english_is_supported():
    assert "english" in codec.supported_languages()
