from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from onboarding.core.events.bus import EventBusConfig


class StoreConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    backend: Literal["encrypted", "memory"] = "encrypted"
    key_path: str = "secure/store.key"
    store_path: str = "secure/account_state.enc"


class MnemonicConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    default_language: str = "english"
    seed_size_bytes: int = Field(default=16, ge=16, le=32)

    @field_validator("seed_size_bytes")
    @classmethod
    def _multiple_of_four(cls, v: int) -> int:
        if v % 4:
            raise ValueError("seed_size_bytes must be a multiple of 4")
        return v


class LinkingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    poll_interval_seconds: float = Field(default=2.0, ge=0.0, le=60.0)
    max_poll_attempts: int = Field(default=15, ge=1, le=1000)
    listener_enabled: bool = True


class LoggingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    log_dir: str = "logs"
    level: str = "INFO"
    events_jsonl: bool = True


class OnboardingConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    config_version: int = Field(default=1, ge=1)
    store: StoreConfig = Field(default_factory=StoreConfig)
    mnemonic: MnemonicConfig = Field(default_factory=MnemonicConfig)
    linking: LinkingConfig = Field(default_factory=LinkingConfig)
    events: EventBusConfig = Field(default_factory=EventBusConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
