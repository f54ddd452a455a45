from onboarding.core.events.audit import AuditLog, redact
from onboarding.core.events.bus import EventBus, EventBusConfig
from onboarding.core.events.models import EventSeverity, OnboardingEvent, SourceSubsystem

__all__ = [
    "AuditLog",
    "EventBus",
    "EventBusConfig",
    "EventSeverity",
    "OnboardingEvent",
    "SourceSubsystem",
    "redact",
]
