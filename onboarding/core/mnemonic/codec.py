"""
Recovery phrase codec.

Each little-endian 32-bit chunk of the seed becomes three words, and one
checksum word is appended, so a 16-byte seed is a 13-word phrase. Word lists
come from the `mnemonic` package (the 2048-word BIP-39 lists), so phrases
written against the older 1626-word lists do not decode here and cannot be
restored with this codec.
"""

from __future__ import annotations

import threading
import unicodedata
import zlib
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import nacl.utils
from mnemonic import Mnemonic

from onboarding.core.errors import InvalidChecksumError, InvalidWordError

DEFAULT_LANGUAGE = "english"
MIN_SEED_BYTES = 16
MIN_WORDS = MIN_SEED_BYTES // 4 * 3

# Latin-script lists are built so that the first four letters identify a word.
_PREFIX_LENGTHS: Dict[str, int] = {
    "english": 4,
    "spanish": 4,
    "french": 4,
    "italian": 4,
    "portuguese": 4,
    "czech": 4,
}


def _norm(word: str) -> str:
    return unicodedata.normalize("NFKD", word.strip().lower())


@dataclass
class WordList:
    language: str
    words: List[str]
    prefix_length: int = 0
    _index: Dict[str, int] = field(default_factory=dict, repr=False)
    _prefix_index: Dict[str, int] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        prefixes: Dict[str, List[int]] = {}
        for i, w in enumerate(self.words):
            nw = _norm(w)
            self._index[nw] = i
            if self.prefix_length:
                prefixes.setdefault(self._prefix(nw), []).append(i)
        # only prefixes that name exactly one word are usable for lookup
        self._prefix_index = {p: ids[0] for p, ids in prefixes.items() if len(ids) == 1}

    def __len__(self) -> int:
        return len(self.words)

    def _prefix(self, word: str) -> str:
        return word[: self.prefix_length] if self.prefix_length else word

    def index_of(self, word: str) -> int:
        nw = _norm(word)
        if nw in self._index:
            return self._index[nw]
        if self.prefix_length and len(nw) >= self.prefix_length:
            idx = self._prefix_index.get(self._prefix(nw))
            if idx is not None:
                return idx
        raise InvalidWordError(language=self.language)

    def checksum_index(self, words: List[str]) -> int:
        trimmed = "".join(self._prefix(_norm(w)) for w in words)
        return (zlib.crc32(trimmed.encode("utf-8")) & 0xFFFFFFFF) % len(words)


_CACHE: Dict[str, WordList] = {}
_CACHE_LOCK = threading.Lock()


def supported_languages() -> List[str]:
    return sorted(Mnemonic.list_languages())


def get_wordlist(language: str) -> WordList:
    lang = str(language or "").strip().lower()
    with _CACHE_LOCK:
        wl = _CACHE.get(lang)
        if wl is not None:
            return wl
        if lang not in Mnemonic.list_languages():
            raise InvalidWordError(f"Unsupported mnemonic language: {language!r}", language=language)
        wl = WordList(language=lang, words=list(Mnemonic(lang).wordlist), prefix_length=_PREFIX_LENGTHS.get(lang, 0))
        _CACHE[lang] = wl
        return wl


def encode(seed_hex: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Hex seed (multiple of 4 bytes, at least 16) -> phrase with checksum word."""
    wl = get_wordlist(language)
    try:
        raw = bytes.fromhex(seed_hex)
    except ValueError as e:
        raise ValueError("seed must be a hex string") from e
    if len(raw) < MIN_SEED_BYTES or len(raw) % 4:
        raise ValueError(f"seed length must be a multiple of 4 bytes and at least {MIN_SEED_BYTES}")
    n = len(wl)
    out: List[str] = []
    for i in range(0, len(raw), 4):
        x = int.from_bytes(raw[i : i + 4], "little")
        w1 = x % n
        w2 = (x // n + w1) % n
        w3 = (x // n // n + w2) % n
        out.extend([wl.words[w1], wl.words[w2], wl.words[w3]])
    out.append(out[wl.checksum_index(out)])
    return " ".join(out)


def decode(phrase: str, language: str = DEFAULT_LANGUAGE) -> str:
    """Phrase -> hex seed. Raises InvalidWordError / InvalidChecksumError."""
    wl = get_wordlist(language)
    words = str(phrase or "").split()
    if len(words) < MIN_WORDS:
        raise InvalidWordError("You've entered too few words, please try again.", words=len(words))
    if len(words) % 3 == 0:
        raise InvalidWordError("You seem to be missing the last word in your recovery phrase.", words=len(words))
    body, checksum_word = words[:-1], words[-1]
    if len(body) % 3:
        raise InvalidWordError("The recovery phrase has an unexpected number of words.", words=len(words))

    n = len(wl)
    out = bytearray()
    for i in range(0, len(body), 3):
        w1, w2, w3 = (wl.index_of(w) for w in body[i : i + 3])
        x = w1 + n * ((n - w1 + w2) % n) + n * n * ((n - w2 + w3) % n)
        if x >= 1 << 32:
            raise InvalidWordError("Those words do not form a valid recovery phrase.", position=i)
        out += x.to_bytes(4, "little")

    expected = body[wl.checksum_index(body)]
    if wl.index_of(expected) != wl.index_of(checksum_word):
        raise InvalidChecksumError()
    return out.hex()


def generate(byte_length: int = 16, language: str = DEFAULT_LANGUAGE, *, entropy: Optional[bytes] = None) -> str:
    """Random phrase. 16 bytes -> 12 words + 1 checksum word."""
    if byte_length < MIN_SEED_BYTES or byte_length % 4:
        raise ValueError(f"byte_length must be a multiple of 4 and at least {MIN_SEED_BYTES}")
    raw = entropy if entropy is not None else nacl.utils.random(byte_length)
    if len(raw) != byte_length:
        raise ValueError("entropy length does not match byte_length")
    return encode(raw.hex(), language)
