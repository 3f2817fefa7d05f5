"""Tests for domain/router.py — CommandRouter with mock ports only."""

from unittest.mock import MagicMock

import pytest

from homevoice.domain.models import (
    NO_INTENT,
    Direction,
    HealthQuery,
    Navigate,
    TemperatureChange,
    TemperatureSet,
)
from homevoice.domain.registry import ControllerRegistry
from homevoice.domain.router import CommandRouter, normalize_utterance
from homevoice.domain.thermostat import ThermostatController
from homevoice.ports.inbound import Role, TranscriptEvent, TranscriptKind


# --- Mock Ports ---


class MockNavigation:
    """Mock NavigationPort implementation."""

    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    async def navigate(self, room):
        self.calls.append(room)
        if self.fail:
            raise RuntimeError("ui gone")


class MockHealth:
    """Mock HealthPort implementation."""

    def __init__(self):
        self.calls = []

    async def redirect(self, utterance):
        self.calls.append(utterance)


class Page:
    def __init__(self, name="kitchen"):
        self.name = name

    def __call__(self):
        return self.name


# --- Helpers ---


def _user(text, kind=TranscriptKind.FINAL):
    return TranscriptEvent(role=Role.USER, kind=kind, text=text)


def _make_router(page="kitchen", rooms=None, follow_assistant_navigation=False):
    registry = ControllerRegistry()
    for room, temp in (rooms or {"kitchen": 78}).items():
        # long tick: nothing fires during a test
        registry.register(room, ThermostatController(room, temp, tick_seconds=10))
    nav, health = MockNavigation(), MockHealth()
    router = CommandRouter(
        registry,
        navigation=nav,
        health=health,
        current_page=Page(page),
        follow_assistant_navigation=follow_assistant_navigation,
    )
    return router, registry, nav, health


class TestFiltering:
    @pytest.mark.asyncio
    async def test_partial_ignored(self):
        router, registry, _, _ = _make_router()
        intent = await router.handle(_user("lower it by 5", kind=TranscriptKind.PARTIAL))
        assert intent == NO_INTENT
        assert registry.lookup("kitchen").is_animating is False

    @pytest.mark.asyncio
    async def test_assistant_ignored_by_default(self):
        router, _, nav, _ = _make_router(page="home")
        event = TranscriptEvent(role=Role.ASSISTANT, kind=TranscriptKind.FINAL, text="Shows the garage page")
        assert await router.handle(event) == NO_INTENT
        assert nav.calls == []

    @pytest.mark.asyncio
    async def test_assistant_navigation_when_enabled(self):
        router, _, nav, _ = _make_router(page="home", follow_assistant_navigation=True)
        event = TranscriptEvent(role=Role.ASSISTANT, kind=TranscriptKind.FINAL, text="Shows the garage page")
        assert await router.handle(event) == Navigate(room="garage")
        assert nav.calls == ["garage"]

    @pytest.mark.asyncio
    async def test_assistant_temperature_talk_not_dispatched(self):
        router, registry, _, _ = _make_router(follow_assistant_navigation=True)
        event = TranscriptEvent(role=Role.ASSISTANT, kind=TranscriptKind.FINAL, text="I'll lower it by 5")
        await router.handle(event)
        assert registry.lookup("kitchen").is_animating is False


class TestTemperatureDispatch:
    @pytest.mark.asyncio
    async def test_room_from_current_page(self):
        router, registry, _, _ = _make_router(page="kitchen")
        intent = await router.handle(_user("lower it by 5"))
        assert intent == TemperatureChange(room="", delta=-5)
        kitchen = registry.lookup("kitchen")
        assert kitchen.target == 73
        assert kitchen.last_voice_action == Direction.DECREASE
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_explicit_room(self):
        router, registry, _, _ = _make_router(page="home", rooms={"kitchen": 78, "bedroom": 72})
        await router.handle(_user("raise kitchen temp by 3"))
        assert registry.lookup("kitchen").target == 81
        assert registry.lookup("bedroom").is_animating is False
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_favorites_uses_home_controller(self):
        router, registry, _, _ = _make_router(page="favorites", rooms={})
        home = ThermostatController("home", 70, tick_seconds=10)
        registry.register_home(home)
        await router.handle(_user("turn it up by 2"))
        assert home.target == 72
        assert home.last_voice_action == Direction.INCREASE
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_unresolved_room_dropped(self):
        router, registry, _, _ = _make_router(page="security")
        intent = await router.handle(_user("lower it by 2"))
        assert intent == TemperatureChange(room="", delta=-2)
        assert registry.lookup("kitchen").is_animating is False

    @pytest.mark.asyncio
    async def test_setpoint_converted_to_delta(self):
        router, registry, _, _ = _make_router()
        intent = await router.handle(_user("set the kitchen temperature to 72"))
        assert intent == TemperatureSet(room="kitchen", target=72)
        kitchen = registry.lookup("kitchen")
        assert kitchen.target == 72
        assert kitchen.last_voice_action == Direction.DECREASE
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_setpoint_clamped(self):
        router, registry, _, _ = _make_router()
        await router.handle(_user("set the temperature to 99"))
        assert registry.lookup("kitchen").target == 85
        registry.dispose_all()


class TestDuplicates:
    @pytest.mark.asyncio
    async def test_back_to_back_duplicate_ignored(self):
        router, registry, _, _ = _make_router()
        kitchen = registry.lookup("kitchen")
        kitchen.apply_delta = MagicMock(wraps=kitchen.apply_delta)
        await router.handle(_user("lower it by 5"))
        second = await router.handle(_user("Lower it by 5."))
        assert second == NO_INTENT
        kitchen.apply_delta.assert_called_once_with(-5)
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_repeat_after_other_utterance_allowed(self):
        router, registry, _, _ = _make_router()
        kitchen = registry.lookup("kitchen")
        kitchen.apply_delta = MagicMock(wraps=kitchen.apply_delta)
        await router.handle(_user("lower it by 1"))
        await router.handle(_user("thanks"))
        await router.handle(_user("lower it by 1"))
        assert kitchen.apply_delta.call_count == 2
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_end_session_resets_duplicate_memory(self):
        router, registry, _, _ = _make_router()
        await router.handle(_user("lower it by 1"))
        router.end_session()
        assert await router.handle(_user("lower it by 1")) == TemperatureChange(room="", delta=-1)
        registry.dispose_all()

    def test_normalize(self):
        assert normalize_utterance("  Lower  it by 5!! ") == "lower it by 5"


class TestContextRetry:
    @pytest.mark.asyncio
    async def test_split_command(self):
        router, registry, _, _ = _make_router(page="home")
        assert await router.handle(_user("raise the kitchen")) == NO_INTENT
        intent = await router.handle(_user("temp by three"))
        assert intent == TemperatureChange(room="kitchen", delta=3)
        assert registry.lookup("kitchen").target == 81
        assert len(router.context) == 0
        registry.dispose_all()

    @pytest.mark.asyncio
    async def test_end_session_clears_context(self):
        router, _, _, _ = _make_router(page="home")
        await router.handle(_user("raise the kitchen"))
        router.end_session()
        assert await router.handle(_user("temp by three")) == NO_INTENT


class TestNavigation:
    @pytest.mark.asyncio
    async def test_navigates_to_other_room(self):
        router, _, nav, _ = _make_router(page="home")
        assert await router.handle(_user("go to the kitchen")) == Navigate(room="kitchen")
        assert nav.calls == ["kitchen"]

    @pytest.mark.asyncio
    async def test_same_page_suppressed(self):
        router, _, nav, _ = _make_router(page="Kitchen")
        await router.handle(_user("go to the kitchen"))
        assert nav.calls == []

    @pytest.mark.asyncio
    async def test_navigation_failure_logged(self):
        router, _, _, _ = _make_router(page="home")
        router._navigation = MockNavigation(fail=True)
        assert await router.handle(_user("open the garage")) == Navigate(room="garage")


class TestHealth:
    @pytest.mark.asyncio
    async def test_redirect_with_original_utterance(self):
        router, registry, nav, health = _make_router()
        text = "What is blood pressure in autonomic dysreflexia?"
        intent = await router.handle(_user(text))
        assert intent == HealthQuery(text=text)
        assert health.calls == [text]
        assert nav.calls == []
        assert registry.lookup("kitchen").is_animating is False


class TestOddInput:
    @pytest.mark.asyncio
    async def test_superscript_digit_does_not_crash(self):
        router, registry, _, _ = _make_router()
        intent = await router.handle(_user("increase ² by 3"))
        assert intent == TemperatureChange(room="", delta=3)
        assert registry.lookup("kitchen").target == 81
        registry.dispose_all()
