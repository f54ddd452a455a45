from __future__ import annotations

from typing import Any, Optional

from onboarding.core.conversations.controller import ConversationController
from onboarding.core.conversations.models import ConversationType
from onboarding.core.errors import SyncInitError
from onboarding.core.events.bus import EventBus
from onboarding.core.events.models import SourceSubsystem
from onboarding.core.events.registry import IDENTITY_CHANGED, REGISTRATION_DONE
from onboarding.core.registration.state import Registration
from onboarding.core.registration.sync import ConfigSyncInitializer
from onboarding.core.registration.user_state import UserSnapshot, UserState
from onboarding.core.storage.base import AccountStateStore
from onboarding.core.storage.keys import StorageKey
from onboarding.core.trace import current_trace_id


def local_pubkey(store: AccountStateStore) -> Optional[str]:
    number_id = store.get(StorageKey.NUMBER_ID)
    if not number_id:
        return None
    return str(number_id).split(".", 1)[0]


class IdentityActivation:
    """
    Terminal step of every registration path.

    Order matters:
    1. primaryDevicePubKey, 2. registration flag (first durable "registered"
    commitment), 3. config sync init (failure is raised, flag stays),
    4. self conversation, 5. user snapshot to observers, 6. `registration.done`.
    """

    def __init__(
        self,
        *,
        store: AccountStateStore,
        sync: ConfigSyncInitializer,
        conversations: ConversationController,
        user_state: UserState,
        event_bus: Optional[EventBus] = None,
        logger: Any = None,
    ):
        self.store = store
        self.sync = sync
        self.conversations = conversations
        self.user_state = user_state
        self.event_bus = event_bus
        self.logger = logger
        self.registration = Registration(store)

    def activate(self, account_id: str, display_name: str) -> None:
        if self.logger:
            self.logger.info(f'[onboarding] registration done with user provided displayName "{display_name}" and pubkey "{account_id}"')

        self.store.put(StorageKey.PRIMARY_DEVICE_PUBKEY, account_id)
        self.registration.mark_done()

        try:
            self.sync.initialize()
        except Exception as e:  # noqa: BLE001
            if self.logger:
                self.logger.warning(f"[onboarding] registration done but config sync initialization failed with {e}")
            raise SyncInitError(account_id=account_id, error=str(e)) from e

        # always have a conversation with ourself, hidden until used
        conversation = self.conversations.get_or_create_and_wait(account_id, ConversationType.PRIVATE)
        conversation.set_display_name(display_name)
        conversation.set_is_approved(True, False)
        conversation.set_did_approve_me(True, False)
        conversation.set_hidden(True)
        conversation.commit()

        snapshot = UserSnapshot(
            our_display_name_in_profile=display_name,
            our_number=local_pubkey(self.store) or account_id,
            our_primary=account_id,
        )
        self.user_state.user_changed(snapshot)

        if self.event_bus is not None:
            tid = current_trace_id()
            self.event_bus.trigger(IDENTITY_CHANGED, source=SourceSubsystem.activation, trace_id=tid, **snapshot.model_dump())
            if self.logger:
                self.logger.info("[onboarding] dispatching registration event")
            self.event_bus.trigger(REGISTRATION_DONE, source=SourceSubsystem.activation, trace_id=tid, account_id=account_id)
