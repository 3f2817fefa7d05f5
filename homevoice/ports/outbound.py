"""Outbound ports — interfaces for collaborators outside the command core."""

from dataclasses import dataclass
from typing import Dict, Optional, Protocol, runtime_checkable


@dataclass
class SpeakResult:
    """Result of a voice-output request."""

    success: bool
    text: Optional[str] = None
    error: Optional[str] = None


@runtime_checkable
class NavigationPort(Protocol):
    """Page-switching collaborator."""

    async def navigate(self, room: str) -> None: ...


@runtime_checkable
class HealthPort(Protocol):
    """Health Q&A collaborator, receives the original utterance."""

    async def redirect(self, utterance: str) -> None: ...


@runtime_checkable
class VoicePort(Protocol):
    """Voice output on the active call."""

    @property
    def is_configured(self) -> bool: ...

    async def speak(self, text: str) -> SpeakResult: ...


@runtime_checkable
class TemperatureStorePort(Protocol):
    """Room temperature persistence, last value wins."""

    def load_all(self) -> Dict[str, int]: ...
    def save(self, room: str, temp: int) -> None: ...
