"""Domain layer — pure Python, no framework dependencies."""

from homevoice.domain.models import (
    Direction,
    ActionSource,
    TemperatureChange,
    TemperatureSet,
    Navigate,
    HealthQuery,
    NoIntent,
    NO_INTENT,
    ThermostatState,
)
from homevoice.domain.intent_extractor import ExtractionPolicy, IntentExtractor, extract
from homevoice.domain.context_buffer import ContextBuffer
from homevoice.domain.thermostat import ThermostatController
from homevoice.domain.registry import ControllerRegistry, room_key
from homevoice.domain.router import CommandRouter

__all__ = [
    "Direction",
    "ActionSource",
    "TemperatureChange",
    "TemperatureSet",
    "Navigate",
    "HealthQuery",
    "NoIntent",
    "NO_INTENT",
    "ThermostatState",
    "ExtractionPolicy",
    "IntentExtractor",
    "extract",
    "ContextBuffer",
    "ThermostatController",
    "ControllerRegistry",
    "room_key",
    "CommandRouter",
]
