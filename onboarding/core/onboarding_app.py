from __future__ import annotations

import os
from typing import Any, Callable, Optional

from onboarding.core.config.models import OnboardingConfig
from onboarding.core.conversations.controller import ConversationController
from onboarding.core.events.bus import EventBus
from onboarding.core.events.subscribers import EventJsonlSink
from onboarding.core.i18n import DictStringLookup, StringLookup
from onboarding.core.registration.activation import IdentityActivation
from onboarding.core.registration.linking import ActivationChannel, ActivationListener, ProfilePoller, RetryingProfilePoller
from onboarding.core.registration.orchestrator import RegistrationOrchestrator
from onboarding.core.registration.sync import ConfigSyncInitializer, UserConfigSync
from onboarding.core.registration.user_state import UserState
from onboarding.core.storage.base import AccountStateStore
from onboarding.core.storage.encrypted import EncryptedFileStateStore
from onboarding.core.storage.memory import MemoryStateStore


def build_store(cfg: OnboardingConfig) -> AccountStateStore:
    if cfg.store.backend == "memory":
        return MemoryStateStore()
    return EncryptedFileStateStore(key_path=cfg.store.key_path, store_path=cfg.store.store_path)


class OnboardingApp:
    """
    Wires the registration core together from one config.

    `fetch_display_name` is the transport hook for linking; without it (and
    without an explicit poller) linking never discovers a name.
    """

    def __init__(
        self,
        cfg: OnboardingConfig,
        *,
        logger: Any = None,
        store: Optional[AccountStateStore] = None,
        fetch_display_name: Optional[Callable[[], Optional[str]]] = None,
        poller: Optional[ProfilePoller] = None,
        sync: Optional[ConfigSyncInitializer] = None,
        i18n: Optional[StringLookup] = None,
    ):
        self.cfg = cfg
        self.logger = logger
        self.store = store if store is not None else build_store(cfg)
        self.event_bus = EventBus(cfg=cfg.events, logger=logger)
        if cfg.logging.events_jsonl:
            self.event_bus.subscribe("*", EventJsonlSink(os.path.join(cfg.logging.log_dir, "events", "core_events.jsonl")), priority=90)
        self.conversations = ConversationController(logger=logger)
        self.user_state = UserState(logger=logger)
        self.channel = ActivationChannel()
        if poller is None and fetch_display_name is not None:
            poller = RetryingProfilePoller(
                fetch_display_name,
                interval_seconds=cfg.linking.poll_interval_seconds,
                max_attempts=cfg.linking.max_poll_attempts,
                logger=logger,
            )
        self.activation = IdentityActivation(
            store=self.store,
            sync=sync or UserConfigSync(self.store, logger=logger),
            conversations=self.conversations,
            user_state=self.user_state,
            event_bus=self.event_bus,
            logger=logger,
        )
        self.orchestrator = RegistrationOrchestrator(
            store=self.store,
            activation=self.activation,
            poller=poller,
            channel=self.channel,
            event_bus=self.event_bus,
            i18n=i18n or DictStringLookup(),
            logger=logger,
            default_language=cfg.mnemonic.default_language,
            seed_size_bytes=cfg.mnemonic.seed_size_bytes,
        )
        self.listener = ActivationListener(channel=self.channel, complete=self.orchestrator.complete_linking, event_bus=self.event_bus, logger=logger)

    def start(self) -> None:
        if self.cfg.linking.listener_enabled:
            self.listener.start()

    def shutdown(self) -> None:
        self.listener.stop()
        self.event_bus.shutdown(1.0)
