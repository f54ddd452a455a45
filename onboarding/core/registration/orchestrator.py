from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict

from onboarding.core import crypto
from onboarding.core.errors import DerivationFailureError, MissingInputError
from onboarding.core.events.bus import EventBus
from onboarding.core.events.models import SourceSubsystem
from onboarding.core.events.registry import CONFIGURATION_RECEIVED
from onboarding.core.i18n import DictStringLookup, StringLookup
from onboarding.core.keys.derivation import derive_key_pair_from_mnemonic
from onboarding.core.keys.models import IdentityKeyPair
from onboarding.core.mnemonic import codec
from onboarding.core.registration.activation import IdentityActivation
from onboarding.core.registration.display_name import display_name_is_valid
from onboarding.core.registration.linking import ActivationChannel, ActivationRequest, CancellationToken, ProfilePoller
from onboarding.core.registration.state import Registration, RegistrationState
from onboarding.core.storage.base import AccountStateStore
from onboarding.core.storage.keys import IDENTITY_SCOPED_KEYS, SettingsKey, StorageKey
from onboarding.core.trace import trace_context

RegisterCallback = Callable[[str], None]


class LinkResult(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    account_id: str
    display_name: Optional[str] = None


class RegistrationOrchestrator:
    """
    Entry points for creating or restoring the local identity.

    Failed calls can be retried from scratch. Successful calls are not
    idempotent: each one wipes the previous identity from the store first.
    """

    def __init__(
        self,
        *,
        store: AccountStateStore,
        activation: IdentityActivation,
        poller: Optional[ProfilePoller] = None,
        channel: Optional[ActivationChannel] = None,
        event_bus: Optional[EventBus] = None,
        i18n: Optional[StringLookup] = None,
        logger: Any = None,
        default_language: str = codec.DEFAULT_LANGUAGE,
        seed_size_bytes: int = 16,
        reset_workers: int = 4,
    ):
        self.store = store
        self.activation = activation
        self.poller = poller
        self.channel = channel
        self.event_bus = event_bus
        self.i18n = i18n or DictStringLookup()
        self.logger = logger
        self.default_language = default_language
        self.seed_size_bytes = int(seed_size_bytes)
        self.reset_workers = max(1, int(reset_workers))
        self.registration = Registration(store)

    # ---- entry points ----
    def generate_mnemonic(self, language: Optional[str] = None) -> str:
        # 4 bytes -> 3 words, so 16 bytes -> 12 words + 1 checksum word
        return codec.generate(self.seed_size_bytes, language or self.default_language)

    def register_fresh_account(
        self,
        phrase: str,
        language: str,
        display_name: str,
        register_callback: Optional[RegisterCallback] = None,
    ) -> str:
        """
        Register a brand-new account.

        Also the second half of a restore that found no display name: the
        caller then passes `register_callback`, which receives the account id
        instead of this method activating the identity itself.
        """
        self._require(phrase, "mnemonicRequired", field="phrase")
        self._require(language, "mnemonicLanguageRequired", field="language")
        self._require(display_name, "displayNameRequired", field="display_name")
        display_name = display_name_is_valid(display_name, self.i18n)

        with trace_context() as tid:
            key_pair = derive_key_pair_from_mnemonic(phrase, language)
            if register_callback is None:
                # clears a flag left by an earlier, abandoned linking attempt
                self.registration.set_sign_in_by_linking(False)
            self.create_account(key_pair)
            self.store.put(StorageKey.RECOVERY_PHRASE, phrase)

            account_id = self._account_id(key_pair)
            if self.logger:
                self.logger.info(f"[onboarding] account secrets written for {account_id} (trace {tid})")

            if register_callback is not None:
                register_callback(account_id)
            else:
                self.activation.activate(account_id, display_name)
            return account_id

    def link_existing_account(self, phrase: str, language: str, cancel_token: Optional[CancellationToken] = None) -> LinkResult:
        """
        Restore an identity from its recovery phrase and look for its display name.

        Returns once the poll ends. A discovered name is sent to the activation
        channel; registration only completes when that request is handled.
        Cancellation is a normal outcome: the result then has no display name.
        """
        self._require(phrase, "mnemonicRequired", field="phrase")
        self._require(language, "mnemonicLanguageRequired", field="language")

        with trace_context() as tid:
            key_pair = derive_key_pair_from_mnemonic(phrase, language)

            self.registration.set_sign_in_by_linking(True)
            self.create_account(key_pair)
            self.store.put(StorageKey.RECOVERY_PHRASE, phrase)

            account_id = self._account_id(key_pair)
            if self.logger:
                self.logger.info(f"[onboarding] linking {account_id}, polling for display name (trace {tid})")

            display_name: Optional[str] = None
            if self.poller is not None:
                display_name = self.poller.poll_once_for_display_name(cancel_token)

            display_name = (display_name or "").strip() or None
            if display_name:
                # registration is not finished until this request was handled
                if self.channel is not None:
                    self.channel.send(ActivationRequest(account_id=account_id, display_name=display_name, trace_id=tid))
                if self.event_bus is not None:
                    self.event_bus.trigger(CONFIGURATION_RECEIVED, source=SourceSubsystem.linking, trace_id=tid, account_id=account_id, display_name=display_name)
            elif self.logger:
                self.logger.info(f"[onboarding] no display name found for {account_id}")
            return LinkResult(account_id=account_id, display_name=display_name)

    def complete_linking(self, account_id: str, display_name: str) -> None:
        """Finalize a linked/restored identity."""
        self._require(account_id, "derivationFailed", field="account_id")
        display_name = display_name_is_valid(display_name, self.i18n)
        self.activation.activate(account_id, display_name)
        self.registration.set_sign_in_by_linking(False)

    def registration_state(self) -> RegistrationState:
        return self.registration.state()

    # ---- account secrets ----
    def reset_identity(self) -> None:
        """
        Remove every identity-scoped key. Removals target disjoint keys and run
        in parallel; all of them finish before this returns.
        """
        with ThreadPoolExecutor(max_workers=self.reset_workers, thread_name_prefix="identity-reset") as pool:
            futures = [pool.submit(self.store.remove, key) for key in IDENTITY_SCOPED_KEYS]
            wait(futures)
        for f in futures:
            f.result()

    def create_account(self, key_pair: IdentityKeyPair) -> None:
        self.reset_identity()

        self.store.put(StorageKey.IDENTITY_KEY, key_pair.to_storage())
        self.store.put(StorageKey.PASSWORD, crypto.generate_local_password())

        self.store.put(SettingsKey.READ_RECEIPT, False)
        self.store.put(SettingsKey.TYPING_INDICATOR, False)
        # open group pruning is on for new accounts
        self.store.put(SettingsKey.OPEN_GROUP_PRUNING, True)

        self.store.put(StorageKey.NUMBER_ID, f"{key_pair.account_id}.1")

    # ---- helpers ----
    def _require(self, value: Optional[str], message_key: str, *, field: str) -> None:
        if not value or not str(value).strip():
            raise MissingInputError(self.i18n(message_key), field=field)

    def _account_id(self, key_pair: IdentityKeyPair) -> str:
        account_id = key_pair.account_id
        if not account_id:
            raise DerivationFailureError(self.i18n("derivationFailed"))
        return account_id
