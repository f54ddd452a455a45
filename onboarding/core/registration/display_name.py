from __future__ import annotations

import unicodedata
from typing import Optional, Tuple

from onboarding.core.errors import DisplayNameTooLongError, ValidationError
from onboarding.core.i18n import DictStringLookup, StringLookup

MAX_NAME_LENGTH_BYTES = 100

_DROPPED_CATEGORIES = {"Cc", "Cf"}


def sanitize_display_name(display_name: str) -> str:
    """Drop control/format characters; reject names over the byte limit."""
    cleaned = "".join(ch for ch in str(display_name or "") if unicodedata.category(ch) not in _DROPPED_CATEGORIES)
    if len(cleaned.encode("utf-8")) > MAX_NAME_LENGTH_BYTES:
        raise DisplayNameTooLongError(length=len(cleaned.encode("utf-8")), limit=MAX_NAME_LENGTH_BYTES)
    return cleaned


def display_name_is_valid(display_name: Optional[str], i18n: Optional[StringLookup] = None) -> str:
    """
    Returns the trimmed name. Always use the trimmed name to create the account.
    """
    i18n = i18n or DictStringLookup()
    if not display_name:
        raise ValidationError(i18n("displayNameEmpty"))
    trimmed = display_name.strip()
    if not trimmed:
        raise ValidationError(i18n("displayNameEmpty"))
    return trimmed


def sanitize_display_name_or_error(display_name: str, i18n: Optional[StringLookup] = None) -> Tuple[str, Optional[str]]:
    """
    For input fields: returns (name to show, error message or None).
    """
    i18n = i18n or DictStringLookup()
    try:
        sanitized = sanitize_display_name(display_name)
    except DisplayNameTooLongError:
        return display_name, i18n("displayNameErrorDescriptionShorter")
    return sanitized, (None if sanitized.strip() else i18n("displayNameEmpty"))
