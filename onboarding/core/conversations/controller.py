from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

from onboarding.core.conversations.models import ConversationAttributes, ConversationType

Committer = Callable[[ConversationAttributes], None]


class Conversation:
    """
    Mutable conversation model. Setters change the working copy; `commit()`
    hands a snapshot to the controller.
    """

    def __init__(self, attributes: ConversationAttributes, *, on_commit: Committer, on_propagate: Optional[Callable[[str, str], None]] = None):
        self._attrs = attributes
        self._on_commit = on_commit
        self._on_propagate = on_propagate

    @property
    def id(self) -> str:
        return self._attrs.id

    @property
    def attributes(self) -> ConversationAttributes:
        return self._attrs.model_copy()

    def get_display_name(self) -> Optional[str]:
        return self._attrs.display_name_in_profile

    def is_approved(self) -> bool:
        return self._attrs.is_approved

    def did_approve_me(self) -> bool:
        return self._attrs.did_approve_me

    def is_hidden(self) -> bool:
        return self._attrs.hidden

    def set_display_name(self, display_name: str) -> None:
        self._attrs = self._attrs.model_copy(update={"display_name_in_profile": display_name})

    def set_is_approved(self, value: bool, propagate: bool = True) -> None:
        self._attrs = self._attrs.model_copy(update={"is_approved": bool(value)})
        if propagate:
            self._propagate("is_approved")

    def set_did_approve_me(self, value: bool, propagate: bool = True) -> None:
        self._attrs = self._attrs.model_copy(update={"did_approve_me": bool(value)})
        if propagate:
            self._propagate("did_approve_me")

    def set_hidden(self, hidden: bool) -> None:
        self._attrs = self._attrs.model_copy(update={"hidden": bool(hidden)})

    def commit(self) -> None:
        self._on_commit(self._attrs.model_copy())

    def _propagate(self, change: str) -> None:
        if self._on_propagate is not None:
            self._on_propagate(self.id, change)


class ConversationController:
    """
    In-process registry of conversations, keyed by id.

    `propagations` records approval changes that asked to be synced to other
    devices; the registration path never asks for that.
    """

    def __init__(self, *, logger: Any = None):
        self.logger = logger
        self._lock = threading.Lock()
        self._live: Dict[str, Conversation] = {}
        self._committed: Dict[str, ConversationAttributes] = {}
        self.propagations: List[Dict[str, str]] = []

    def get(self, conversation_id: str) -> Optional[Conversation]:
        with self._lock:
            return self._live.get(conversation_id)

    def get_committed(self, conversation_id: str) -> Optional[ConversationAttributes]:
        with self._lock:
            attrs = self._committed.get(conversation_id)
            return attrs.model_copy() if attrs else None

    def get_or_create_and_wait(self, conversation_id: str, kind: ConversationType) -> Conversation:
        if not conversation_id:
            raise ValueError("conversation id required")
        with self._lock:
            convo = self._live.get(conversation_id)
            if convo is not None:
                return convo
            convo = Conversation(ConversationAttributes(id=conversation_id, type=kind), on_commit=self._commit, on_propagate=self._record_propagation)
            self._live[conversation_id] = convo
            self._committed[conversation_id] = convo.attributes
        if self.logger:
            self.logger.info(f"[conversations] created {kind.value} conversation {conversation_id}")
        return convo

    def all(self) -> List[ConversationAttributes]:
        with self._lock:
            return [a.model_copy() for a in self._committed.values()]

    def _commit(self, attrs: ConversationAttributes) -> None:
        with self._lock:
            self._committed[attrs.id] = attrs

    def _record_propagation(self, conversation_id: str, change: str) -> None:
        with self._lock:
            self.propagations.append({"conversation_id": conversation_id, "change": change})
