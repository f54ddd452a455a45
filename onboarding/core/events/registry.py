from __future__ import annotations

# payload: {account_id, display_name}
CONFIGURATION_RECEIVED = "registration.configuration_received"
# payload: {our_display_name_in_profile, our_number, our_primary}
IDENTITY_CHANGED = "identity.changed"
# pollers start fetching messages for the identity on this one
REGISTRATION_DONE = "registration.done"
ACTIVATION_FAILED = "registration.activation_failed"
HANDLER_ERROR = "events.handler_error"

CORE_EVENT_TYPES: set[str] = {
    CONFIGURATION_RECEIVED,
    IDENTITY_CHANGED,
    REGISTRATION_DONE,
    ACTIVATION_FAILED,
    HANDLER_ERROR,
}


def is_core_event_type(event_type: str) -> bool:
    return str(event_type) in CORE_EVENT_TYPES
