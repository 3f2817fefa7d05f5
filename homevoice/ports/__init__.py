"""Port interfaces (Hexagonal Architecture)."""

from homevoice.ports.inbound import Role, TranscriptEvent, TranscriptKind
from homevoice.ports.outbound import (
    HealthPort,
    NavigationPort,
    SpeakResult,
    TemperatureStorePort,
    VoicePort,
)

__all__ = [
    "Role",
    "TranscriptEvent",
    "TranscriptKind",
    "HealthPort",
    "NavigationPort",
    "SpeakResult",
    "TemperatureStorePort",
    "VoicePort",
]
