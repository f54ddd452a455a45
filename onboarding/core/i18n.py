from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Protocol

DEFAULT_STRINGS: Dict[str, str] = {
    "displayNameEmpty": "Please enter a display name",
    "displayNameErrorDescriptionShorter": "Please enter a shorter display name",
    "mnemonicRequired": "A recovery password is always required. Either generated or given by the user.",
    "mnemonicLanguageRequired": "A recovery password language is required.",
    "displayNameRequired": "A display name is required.",
    "derivationFailed": "We don't have a public key from the recovery password.",
}


class StringLookup(Protocol):
    def __call__(self, key: str, **params: Any) -> str: ...


class DictStringLookup:
    """
    Looks a key up in the given table, then the English defaults, then
    returns the key itself. `{name}` placeholders are filled from params.
    """

    def __init__(self, strings: Optional[Mapping[str, str]] = None):
        self._strings: Dict[str, str] = {**DEFAULT_STRINGS, **dict(strings or {})}

    def __call__(self, key: str, **params: Any) -> str:
        text = self._strings.get(key, key)
        if params:
            try:
                return text.format(**params)
            except (KeyError, IndexError):
                return text
        return text
