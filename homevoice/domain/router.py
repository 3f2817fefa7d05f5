"""CommandRouter — transcript events in, controller / navigation / health calls out.

No framework dependencies; collaborators are reached through ports so the
router is testable with mock objects.
"""

import re
import sys
from typing import Callable, Optional

from homevoice.config import HOME_ALIASES
from homevoice.domain.context_buffer import ContextBuffer
from homevoice.domain.intent_extractor import IntentExtractor
from homevoice.domain.models import (
    NO_INTENT,
    Direction,
    HealthQuery,
    Intent,
    Navigate,
    NoIntent,
    TemperatureChange,
    TemperatureSet,
)
from homevoice.domain.registry import ControllerRegistry, room_key
from homevoice.domain.thermostat import ThermostatController
from homevoice.ports.inbound import Role, TranscriptEvent, TranscriptKind
from homevoice.ports.outbound import HealthPort, NavigationPort


def _log(msg: str):
    print(msg, file=sys.stderr)


_TRAILING_PUNCT_RE = re.compile(r"[\s.,!?]+$")


def normalize_utterance(text: str) -> str:
    return _TRAILING_PUNCT_RE.sub("", " ".join(text.lower().split()))


class CommandRouter:
    """Routes final user utterances to the right collaborator.

    Handles:
    - Filtering (final user transcripts only)
    - Duplicate suppression of back-to-back identical utterances
    - Extraction with a context-buffer retry
    - Room resolution (explicit room → current page → home controller)
    - Dispatch to controllers, navigation and health ports
    """

    def __init__(
        self,
        registry: ControllerRegistry,
        navigation: NavigationPort,
        health: HealthPort,
        current_page: Callable[[], str],
        extractor: Optional[IntentExtractor] = None,
        context_size: int = 3,
        follow_assistant_navigation: bool = False,
    ):
        self._registry = registry
        self._navigation = navigation
        self._health = health
        self._current_page = current_page
        self._extractor = extractor or IntentExtractor()
        self._context = ContextBuffer(self._extractor.extract, max_size=context_size)
        self._follow_assistant_navigation = follow_assistant_navigation
        self._last_utterance: Optional[str] = None

    @property
    def context(self) -> ContextBuffer:
        return self._context

    def end_session(self):
        """Call ended: forget buffered context and duplicate memory."""
        self._context.clear()
        self._last_utterance = None
        _log("[Router] session ended, context cleared")

    async def handle(self, event: TranscriptEvent) -> Intent:
        """Process one transcript event. Returns the intent that was acted on."""
        if not event.is_final_user:
            if (
                self._follow_assistant_navigation
                and event.role is Role.ASSISTANT
                and event.kind is TranscriptKind.FINAL
            ):
                return await self._handle_assistant(event.text)
            return NO_INTENT

        text = event.text.strip()
        if not text:
            return NO_INTENT

        normalized = normalize_utterance(text)
        if normalized == self._last_utterance:
            _log(f"[Router] duplicate utterance ignored: {text!r}")
            return NO_INTENT
        self._last_utterance = normalized

        intent = self._extractor.extract(text)
        if isinstance(intent, NoIntent):
            intent = self._context.retry_with_context(text)

        if isinstance(intent, NoIntent):
            _log(f"[Router] no command in {text!r}")
            return NO_INTENT

        _log(f"[Router] {text!r} -> {intent}")
        await self.dispatch(intent)
        return intent

    async def dispatch(self, intent: Intent):
        if isinstance(intent, TemperatureChange):
            self._dispatch_change(intent)
        elif isinstance(intent, TemperatureSet):
            self._dispatch_set(intent)
        elif isinstance(intent, Navigate):
            await self._navigate(intent.room)
        elif isinstance(intent, HealthQuery):
            await self._redirect_health(intent.text)

    def resolve_controller(self, room: str) -> Optional[ThermostatController]:
        """Explicit room, else current page; home/favorites fall back to home."""
        target = room_key(room or self._current_page() or "")
        if not target:
            return None
        controller = self._registry.lookup(target)
        if controller is None and target in HOME_ALIASES:
            controller = self._registry.home
        return controller

    def _dispatch_change(self, intent: TemperatureChange):
        controller = self.resolve_controller(intent.room)
        if controller is None:
            _log(f"[Router] no controller for room={intent.room or self._current_page()!r}, dropped")
            return
        direction = Direction.INCREASE if intent.delta > 0 else Direction.DECREASE
        controller.apply_delta(intent.delta)
        controller.set_transient_action(direction)

    def _dispatch_set(self, intent: TemperatureSet):
        controller = self.resolve_controller(intent.room)
        if controller is None:
            _log(f"[Router] no controller for room={intent.room or self._current_page()!r}, dropped")
            return
        target = max(controller.min_temp, min(controller.max_temp, intent.target))
        delta = target - controller.current_temp
        if delta == 0:
            _log(f"[Router] {controller.room} already at {target}")
            return
        self._dispatch_change(TemperatureChange(room=controller.room, delta=delta))

    async def _navigate(self, room: str):
        if room_key(room) == room_key(self._current_page() or ""):
            _log(f"[Router] already on {room!r}, navigation suppressed")
            return
        try:
            await self._navigation.navigate(room)
        except Exception as e:
            _log(f"[Router] navigation to {room!r} failed: {e}")

    async def _redirect_health(self, utterance: str):
        try:
            await self._health.redirect(utterance)
        except Exception as e:
            _log(f"[Router] health redirect failed: {e}")

    async def _handle_assistant(self, text: str) -> Intent:
        room = self._extractor.extract_navigation(text)
        if not room:
            return NO_INTENT
        await self._navigate(room)
        return Navigate(room=room)
