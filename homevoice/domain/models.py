"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class Direction(str, Enum):
    INCREASE = "increase"
    DECREASE = "decrease"

    @property
    def sign(self) -> int:
        return 1 if self is Direction.INCREASE else -1


# Transient "last action" indicators use the same two values
TransientAction = Direction


class ActionSource(str, Enum):
    VOICE = "voice"
    BUTTON = "button"


@dataclass(frozen=True)
class TemperatureChange:
    """Relative change. Empty room means resolve from the current page."""

    room: str
    delta: int


@dataclass(frozen=True)
class TemperatureSet:
    """Absolute setpoint request, converted to a delta at dispatch time."""

    room: str
    target: int


@dataclass(frozen=True)
class Navigate:
    room: str


@dataclass(frozen=True)
class HealthQuery:
    text: str


@dataclass(frozen=True)
class NoIntent:
    pass


NO_INTENT = NoIntent()

Intent = Union[TemperatureChange, TemperatureSet, Navigate, HealthQuery, NoIntent]


@dataclass(frozen=True)
class ThermostatState:
    """Snapshot of a controller, safe to hand to the presentation layer."""

    room: str
    current_temp: int
    target: Optional[int]
    is_animating: bool
    last_voice_action: Optional[TransientAction] = None
    last_button_action: Optional[TransientAction] = None
