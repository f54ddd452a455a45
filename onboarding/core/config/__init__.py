from __future__ import annotations

import os
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from onboarding.core.config.io import JsonReadError, atomic_write_json, read_json_object
from onboarding.core.config.models import LinkingConfig, LoggingConfig, MnemonicConfig, OnboardingConfig, StoreConfig
from onboarding.core.errors import Severity, OnboardingError

DEFAULT_CONFIG_PATH = os.path.join("config", "onboarding.json")


class ConfigError(OnboardingError):
    def __init__(self, user_message: str = "Configuration error.", **ctx):  # noqa: ANN003
        super().__init__("config_error", user_message, severity=Severity.CRITICAL, recoverable=False, context=ctx)


def load_config(path: Optional[str] = None, *, write_default: bool = False) -> OnboardingConfig:
    """
    Load `config/onboarding.json`. A missing file yields defaults (optionally
    written back); an unreadable or invalid file is a ConfigError.
    """
    path = path or DEFAULT_CONFIG_PATH
    try:
        data = read_json_object(path)
    except JsonReadError as e:
        raise ConfigError(f"Config file is unreadable: {e}", path=path) from e
    if data is None:
        cfg = OnboardingConfig()
        if write_default:
            atomic_write_json(path, cfg.model_dump(mode="json"))
        return cfg
    try:
        return OnboardingConfig.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(f"Config file is invalid: {e.error_count()} error(s).", path=path) from e


__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "LinkingConfig",
    "LoggingConfig",
    "MnemonicConfig",
    "OnboardingConfig",
    "StoreConfig",
    "load_config",
]
