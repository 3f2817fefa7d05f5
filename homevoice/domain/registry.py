"""Room name → live thermostat controller lookup."""

import sys
import time
from typing import Callable, Dict, List, Optional

from homevoice.domain.thermostat import ThermostatController


def _log(msg: str):
    print(msg, file=sys.stderr)


def room_key(room: str) -> str:
    return " ".join(room.lower().split())


class ControllerRegistry:
    """Controllers keyed by lowercased room name.

    Entries stay registered after their room view is hidden so voice commands
    can reach any room visited earlier. With ``ttl_seconds`` set, an entry
    whose view has not been shown within the TTL is evicted and disposed on
    the next lookup.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._controllers: Dict[str, ThermostatController] = {}
        self._last_shown: Dict[str, float] = {}
        self._home: Optional[ThermostatController] = None

    def __len__(self) -> int:
        return len(self._controllers)

    def __contains__(self, room: str) -> bool:
        return room_key(room) in self._controllers

    @property
    def home(self) -> Optional[ThermostatController]:
        return self._home

    def register(self, room: str, controller: ThermostatController):
        key = room_key(room)
        existing = self._controllers.get(key)
        if existing is not None and existing is not controller:
            _log(f"[Registry] replacing controller for {key!r}")
            existing.dispose()
        self._controllers[key] = controller
        self._last_shown[key] = self._clock()
        _log(f"[Registry] registered {key!r}. rooms={sorted(self._controllers)}")

    def register_home(self, controller: ThermostatController):
        if self._home is not None and self._home is not controller:
            self._home.dispose()
        self._home = controller

    def touch(self, room: str) -> bool:
        """Mark a room view as shown again. Returns False if unknown."""
        key = room_key(room)
        if key not in self._controllers:
            return False
        self._last_shown[key] = self._clock()
        return True

    def lookup(self, room: str) -> Optional[ThermostatController]:
        key = room_key(room)
        controller = self._controllers.get(key)
        if controller is None:
            return None
        if self._is_expired(key):
            _log(f"[Registry] evicting stale controller {key!r}")
            self._evict(key)
            return None
        return controller

    def rooms(self) -> List[str]:
        return sorted(self._controllers)

    def dispose_all(self):
        for controller in self._controllers.values():
            controller.dispose()
        self._controllers.clear()
        self._last_shown.clear()
        if self._home is not None:
            self._home.dispose()
            self._home = None

    def _is_expired(self, key: str) -> bool:
        if self._ttl is None:
            return False
        return self._clock() - self._last_shown.get(key, 0.0) > self._ttl

    def _evict(self, key: str):
        controller = self._controllers.pop(key, None)
        self._last_shown.pop(key, None)
        if controller is not None:
            controller.dispose()
