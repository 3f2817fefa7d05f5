"""HomeVoiceApp — wires the command core to storage, voice and presentation."""

import asyncio
import sys
from typing import Callable, Dict, List, Optional, Set

from homevoice.config import FALLBACK_TEMP, HOME_ALIASES, AppConfig
from homevoice.domain.intent_extractor import IntentExtractor
from homevoice.domain.models import Direction, Intent, ThermostatState
from homevoice.domain.registry import ControllerRegistry, room_key
from homevoice.domain.router import CommandRouter
from homevoice.domain.thermostat import ThermostatController
from homevoice.ports.inbound import TranscriptEvent
from homevoice.ports.outbound import (
    HealthPort,
    NavigationPort,
    TemperatureStorePort,
    VoicePort,
)


def _log(msg: str):
    print(msg, file=sys.stderr)


def display_name(room: str) -> str:
    return room[:1].upper() + room[1:]


class HomeVoiceApp:
    """Composition root for one home display.

    Showing a room creates (or refreshes) its controller and reads the
    current temperature aloud. Settled temperatures are persisted and
    announced in background tasks that never touch controller state.
    """

    def __init__(
        self,
        config: AppConfig,
        store: TemperatureStorePort,
        voice: VoicePort,
        navigation: NavigationPort,
        health: HealthPort,
        current_page: Callable[[], str],
        extractor: Optional[IntentExtractor] = None,
    ):
        self.config = config
        self._store = store
        self._voice = voice
        self._navigation = navigation
        self._current_page = current_page
        self.registry = ControllerRegistry(ttl_seconds=config.router.registry_ttl_seconds)
        self.router = CommandRouter(
            self.registry,
            navigation=self,
            health=health,
            current_page=current_page,
            extractor=extractor,
            context_size=config.router.context_size,
            follow_assistant_navigation=config.router.follow_assistant_navigation,
        )
        self._temps: Dict[str, int] = {room_key(k): v for k, v in store.load_all().items()}
        self._background_tasks: Set[asyncio.Task] = set()

    @property
    def pending_tasks(self) -> int:
        return len(self._background_tasks)

    def initial_temp(self, room: str) -> int:
        key = room_key(room)
        if key in self._temps:
            return self._temps[key]
        return self.config.room_temps.get(key, FALLBACK_TEMP)

    # -- Transcript path --

    async def handle_transcript(self, event: TranscriptEvent) -> Intent:
        return await self.router.handle(event)

    def end_call(self):
        self.router.end_session()

    # -- NavigationPort (router-driven page switches) --

    async def navigate(self, room: str) -> None:
        await self._navigation.navigate(room)
        await self.show_room(room)

    # -- UI surface --

    async def show_room(self, room: str) -> ThermostatController:
        """Room view appeared: register its controller and speak its temperature."""
        key = room_key(room)
        if key in HOME_ALIASES:
            return self.show_home()

        controller = self.registry.lookup(key)
        if controller is None:
            controller = self._create_controller(key)
            self.registry.register(key, controller)
        else:
            self.registry.touch(key)

        self._spawn(self._speak(
            f"The temperature in {key} is currently {controller.current_temp} degrees Fahrenheit."
        ))
        return controller

    def show_home(self) -> ThermostatController:
        controller = self.registry.home
        if controller is None:
            controller = self._create_controller("home")
            self.registry.register_home(controller)
        return controller

    def press_button(self, room: str, direction: Direction) -> Optional[ThermostatController]:
        controller = self.controller_for(room)
        if controller is None:
            return None
        controller.press_button(direction)
        return controller

    def controller_for(self, room: str) -> Optional[ThermostatController]:
        key = room_key(room)
        controller = self.registry.lookup(key)
        if controller is None and key in HOME_ALIASES:
            controller = self.registry.home
        return controller

    def room_state(self, room: str) -> Optional[ThermostatState]:
        controller = self.controller_for(room)
        return controller.state() if controller is not None else None

    def room_states(self) -> List[ThermostatState]:
        states = []
        for key in self.registry.rooms():
            controller = self.registry.lookup(key)
            if controller is not None:
                states.append(controller.state())
        return states

    async def shutdown(self):
        self.registry.dispose_all()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)

    # -- Internals --

    def _create_controller(self, key: str) -> ThermostatController:
        return ThermostatController.from_config(
            key,
            self.initial_temp(key),
            self.config.thermostat,
            on_settled=self._on_settled,
        )

    def _on_settled(self, room: str, temp: int):
        self._temps[room_key(room)] = temp
        self._spawn(self._persist(room, temp))
        self._spawn(self._speak(
            f"{display_name(room)} temperature is now {temp} degrees Fahrenheit."
        ))

    def _spawn(self, coro):
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _persist(self, room: str, temp: int):
        try:
            self._store.save(room_key(room), temp)
        except Exception as e:
            _log(f"[HomeVoice] failed to persist {room}={temp}: {e}")

    async def _speak(self, text: str):
        if not self._voice.is_configured:
            _log(f"[HomeVoice] voice not configured, skipped: {text!r}")
            return
        try:
            result = await self._voice.speak(text)
        except Exception as e:
            _log(f"[HomeVoice] speak failed: {e}")
            return
        if not result.success:
            _log(f"[HomeVoice] speak failed: {result.error}")
