"""Configuration and shared defaults."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field
from typing import Dict, Optional

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

# Seed temperatures (°F) for rooms that have never been persisted
DEFAULT_ROOM_TEMPS: Dict[str, int] = {
    "kitchen": 78,
    "bedroom": 72,
    "living room": 74,
    "nursery": 70,
    "garage": 68,
    "laundry": 71,
    "outside": 80,
    "backyard": 79,
    "master": 73,
}
FALLBACK_TEMP = 70

# Rooms addressed through the home controller when no room view is registered
HOME_ALIASES = ("home", "favorites")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass
class ThermostatConfig:
    min_temp: int = 45
    max_temp: int = 85
    tick_seconds: float = 0.5
    transient_seconds: float = 1.0
    button_step: int = 2


@dataclass
class RouterConfig:
    context_size: int = 3
    registry_ttl_seconds: Optional[float] = None  # None = never evict
    follow_assistant_navigation: bool = False


@dataclass
class VoiceConfig:
    vapi_control_url: str = ""
    vapi_api_key: str = ""
    timeout_seconds: float = 5.0


@dataclass
class AppConfig:
    """Typed configuration for the whole application."""

    port: int = 3000
    storage_dir: str = "memory"
    thermostat: ThermostatConfig = field(default_factory=ThermostatConfig)
    router: RouterConfig = field(default_factory=RouterConfig)
    voice: VoiceConfig = field(default_factory=VoiceConfig)
    room_temps: Dict[str, int] = field(default_factory=lambda: dict(DEFAULT_ROOM_TEMPS))

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        thermostat = ThermostatConfig(
            min_temp=_env_int("HOMEVOICE_MIN_TEMP", 45),
            max_temp=_env_int("HOMEVOICE_MAX_TEMP", 85),
            tick_seconds=_env_float("HOMEVOICE_TICK_SECONDS", 0.5),
            transient_seconds=_env_float("HOMEVOICE_TRANSIENT_SECONDS", 1.0),
            button_step=_env_int("HOMEVOICE_BUTTON_STEP", 2),
        )
        if thermostat.min_temp > thermostat.max_temp:
            _stderr_print(
                f"HOMEVOICE_MIN_TEMP={thermostat.min_temp} exceeds "
                f"HOMEVOICE_MAX_TEMP={thermostat.max_temp}, falling back to 45..85"
            )
            thermostat.min_temp, thermostat.max_temp = 45, 85

        context_size = _env_int("HOMEVOICE_CONTEXT_SIZE", 3)
        if context_size < 2:
            _stderr_print(f"HOMEVOICE_CONTEXT_SIZE={context_size} too small, falling back to 3")
            context_size = 3

        return cls(
            port=_env_int("PORT", 3000),
            storage_dir=os.getenv("HOMEVOICE_STORAGE_DIR", "memory"),
            thermostat=thermostat,
            router=RouterConfig(
                context_size=context_size,
                registry_ttl_seconds=_env_float("HOMEVOICE_REGISTRY_TTL", None),
                follow_assistant_navigation=_env_bool("HOMEVOICE_FOLLOW_ASSISTANT_NAV", False),
            ),
            voice=VoiceConfig(
                vapi_control_url=os.getenv("VAPI_CONTROL_URL", "").strip(),
                vapi_api_key=os.getenv("VAPI_API_KEY", "").strip(),
            ),
        )
