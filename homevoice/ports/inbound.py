"""Inbound port — transport-agnostic transcript representation."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class TranscriptKind(str, Enum):
    PARTIAL = "partial"
    FINAL = "final"


@dataclass
class TranscriptEvent:
    """One transcript update from the call transport."""

    role: Role
    kind: TranscriptKind
    text: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_final_user(self) -> bool:
        return self.role is Role.USER and self.kind is TranscriptKind.FINAL
