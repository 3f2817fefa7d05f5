"""Per-room animated thermostat — setpoint changes applied one degree per tick.

Runs on the asyncio event loop; every timer is a ``loop.call_later`` handle
owned by the controller. No operation raises: out-of-range values are
clamped and calls on a disposed controller are ignored.
"""

import asyncio
import sys
from typing import Callable, Dict, Optional

from homevoice.config import ThermostatConfig
from homevoice.domain.models import ActionSource, ThermostatState, TransientAction

SettledCallback = Callable[[str, int], None]


def _log(msg: str):
    print(msg, file=sys.stderr)


class ThermostatController:
    """Idle / Animating state machine for one room.

    At most one tick timer is pending at any time: a new ``apply_delta``
    cancels the running animation and restarts from the live value.
    """

    def __init__(
        self,
        room: str,
        initial_temp: int,
        *,
        min_temp: int = 45,
        max_temp: int = 85,
        tick_seconds: float = 0.5,
        transient_seconds: float = 1.0,
        button_step: int = 2,
        on_settled: Optional[SettledCallback] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.room = room
        self.min_temp = min_temp
        self.max_temp = max_temp
        self.tick_seconds = tick_seconds
        self.transient_seconds = transient_seconds
        self.button_step = button_step
        self._on_settled = on_settled
        self._loop = loop
        self._current = self._clamp(initial_temp)
        self._target: Optional[int] = None
        self._tick_handle: Optional[asyncio.TimerHandle] = None
        self._transient: Dict[ActionSource, Optional[TransientAction]] = {
            ActionSource.VOICE: None,
            ActionSource.BUTTON: None,
        }
        self._expiry_handles: Dict[ActionSource, asyncio.TimerHandle] = {}
        self._disposed = False

    @classmethod
    def from_config(
        cls,
        room: str,
        initial_temp: int,
        config: ThermostatConfig,
        on_settled: Optional[SettledCallback] = None,
    ) -> "ThermostatController":
        return cls(
            room,
            initial_temp,
            min_temp=config.min_temp,
            max_temp=config.max_temp,
            tick_seconds=config.tick_seconds,
            transient_seconds=config.transient_seconds,
            button_step=config.button_step,
            on_settled=on_settled,
        )

    # -- Read-only state --

    @property
    def current_temp(self) -> int:
        return self._current

    @property
    def target(self) -> Optional[int]:
        return self._target

    @property
    def is_animating(self) -> bool:
        return self._target is not None

    @property
    def last_voice_action(self) -> Optional[TransientAction]:
        return self._transient[ActionSource.VOICE]

    @property
    def last_button_action(self) -> Optional[TransientAction]:
        return self._transient[ActionSource.BUTTON]

    @property
    def has_pending_tick(self) -> bool:
        return self._tick_handle is not None

    @property
    def disposed(self) -> bool:
        return self._disposed

    def state(self) -> ThermostatState:
        return ThermostatState(
            room=self.room,
            current_temp=self._current,
            target=self._target,
            is_animating=self.is_animating,
            last_voice_action=self.last_voice_action,
            last_button_action=self.last_button_action,
        )

    def set_settled_callback(self, callback: Optional[SettledCallback]):
        self._on_settled = callback

    # -- Commands --

    def apply_delta(self, delta: int):
        """Animate toward ``clamp(current + delta)``; restarts any running animation."""
        if self._disposed:
            _log(f"[Thermostat:{self.room}] apply_delta({delta}) ignored: disposed")
            return
        if delta == 0:
            return

        was_animating = self.is_animating
        self._cancel_tick()
        target = self._clamp(self._current + delta)
        if target == self._current:
            self._target = None
            if was_animating:
                self._settle()
            else:
                _log(f"[Thermostat:{self.room}] already at limit {self._current}, delta {delta} dropped")
            return

        _log(f"[Thermostat:{self.room}] animating {self._current} -> {target} (delta {delta})")
        self._target = target
        self._schedule_tick()

    def external_set(self, new_temp: int):
        """Jump straight to ``new_temp`` (non-voice update); stops any animation."""
        if self._disposed:
            return
        self._cancel_tick()
        self._target = None
        self._current = self._clamp(new_temp)

    def set_transient_action(
        self,
        kind: TransientAction,
        duration: Optional[float] = None,
        source: ActionSource = ActionSource.VOICE,
    ):
        """Show a short-lived "last action" flag; the newest call wins."""
        if self._disposed:
            return
        previous = self._expiry_handles.pop(source, None)
        if previous is not None:
            previous.cancel()
        self._transient[source] = kind
        delay = self.transient_seconds if duration is None else duration
        self._expiry_handles[source] = self._get_loop().call_later(
            delay, self._expire_transient, source
        )

    def press_button(self, kind: TransientAction):
        """UI up/down press, same entry points as a voice command."""
        self.apply_delta(kind.sign * self.button_step)
        self.set_transient_action(kind, source=ActionSource.BUTTON)

    def dispose(self):
        """Cancel every owned timer. Safe to call repeatedly."""
        self._cancel_tick()
        for handle in self._expiry_handles.values():
            handle.cancel()
        self._expiry_handles.clear()
        self._target = None
        self._disposed = True

    # -- Internals --

    def _clamp(self, value: int) -> int:
        return max(self.min_temp, min(self.max_temp, int(value)))

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _schedule_tick(self):
        self._tick_handle = self._get_loop().call_later(self.tick_seconds, self._tick)

    def _cancel_tick(self):
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _tick(self):
        self._tick_handle = None
        if self._target is None:
            return
        self._current += 1 if self._target > self._current else -1
        if self._current == self._target:
            self._settle()
        else:
            self._schedule_tick()

    def _settle(self):
        self._target = None
        final = self._current
        _log(f"[Thermostat:{self.room}] settled at {final}")
        if self._on_settled is None:
            return
        try:
            self._on_settled(self.room, final)
        except Exception as e:
            _log(f"[Thermostat:{self.room}] settled callback failed: {e}")

    def _expire_transient(self, source: ActionSource):
        self._expiry_handles.pop(source, None)
        self._transient[source] = None
