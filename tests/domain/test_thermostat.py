"""Tests for domain/thermostat.py — animated setpoint state machine."""

import asyncio

import pytest

from homevoice.config import ThermostatConfig
from homevoice.domain.models import Direction
from homevoice.domain.thermostat import ThermostatController

TICK = 0.01


def _make(initial=70, tick=TICK, **kwargs):
    settled = []
    controller = ThermostatController(
        "kitchen",
        initial,
        tick_seconds=tick,
        on_settled=lambda room, temp: settled.append((room, temp)),
        **kwargs,
    )
    return controller, settled


async def _wait_idle(controller, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while controller.is_animating:
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("animation did not settle")
        await asyncio.sleep(TICK)


class TestConstruction:
    def test_initial_clamped(self):
        controller = ThermostatController("garage", 100)
        assert controller.current_temp == 85
        assert ThermostatController("garage", 10).current_temp == 45

    def test_idle_after_init(self):
        controller = ThermostatController("garage", 68)
        state = controller.state()
        assert state.is_animating is False
        assert state.target is None
        assert state.last_voice_action is None

    def test_from_config(self):
        config = ThermostatConfig(min_temp=60, max_temp=80, tick_seconds=0.2, button_step=3)
        controller = ThermostatController.from_config("nursery", 90, config)
        assert controller.current_temp == 80
        assert controller.tick_seconds == 0.2
        assert controller.button_step == 3


class TestApplyDelta:
    @pytest.mark.asyncio
    async def test_animates_one_degree_per_tick(self):
        controller, settled = _make(70)
        controller.apply_delta(-3)
        assert controller.target == 67
        assert controller.current_temp == 70
        await _wait_idle(controller)
        assert controller.current_temp == 67
        assert settled == [("kitchen", 67)]

    @pytest.mark.asyncio
    async def test_zero_delta_ignored(self):
        controller, settled = _make(70)
        controller.apply_delta(0)
        assert controller.is_animating is False
        assert controller.has_pending_tick is False
        assert settled == []

    @pytest.mark.asyncio
    async def test_clamped_to_max(self):
        controller, settled = _make(84)
        controller.apply_delta(10)
        assert controller.target == 85
        await _wait_idle(controller)
        assert settled == [("kitchen", 85)]

    @pytest.mark.asyncio
    async def test_already_at_limit_is_noop(self):
        controller, settled = _make(45)
        controller.apply_delta(-4)
        assert controller.is_animating is False
        assert controller.has_pending_tick is False
        await asyncio.sleep(TICK * 3)
        assert settled == []

    @pytest.mark.asyncio
    async def test_restart_cancels_previous_tick(self):
        controller, _ = _make(70, tick=10)
        controller.apply_delta(-6)
        first = controller._tick_handle
        controller.apply_delta(2)
        assert first.cancelled()
        assert controller._tick_handle is not first
        assert controller.target == 72
        controller.dispose()

    @pytest.mark.asyncio
    async def test_restart_from_live_value(self):
        controller, settled = _make(70)
        controller.apply_delta(-6)
        await asyncio.sleep(TICK * 2.5)
        live = controller.current_temp
        controller.apply_delta(2)
        assert controller.target == live + 2
        await _wait_idle(controller)
        await asyncio.sleep(TICK * 3)
        assert controller.current_temp == live + 2
        assert settled == [("kitchen", live + 2)]

    @pytest.mark.asyncio
    async def test_callback_failure_does_not_break_state(self):
        def boom(room, temp):
            raise RuntimeError("store down")

        controller = ThermostatController("kitchen", 70, tick_seconds=TICK, on_settled=boom)
        controller.apply_delta(1)
        await _wait_idle(controller)
        assert controller.current_temp == 71


class TestExternalSet:
    @pytest.mark.asyncio
    async def test_stops_animation_without_callback(self):
        controller, settled = _make(70, tick=10)
        controller.apply_delta(5)
        controller.external_set(60)
        assert controller.current_temp == 60
        assert controller.is_animating is False
        assert controller.has_pending_tick is False
        assert settled == []

    def test_clamps(self):
        controller = ThermostatController("kitchen", 70)
        controller.external_set(200)
        assert controller.current_temp == 85


class TestTransientAction:
    @pytest.mark.asyncio
    async def test_expires(self):
        controller, _ = _make(70)
        controller.set_transient_action(Direction.INCREASE, duration=TICK * 2)
        assert controller.last_voice_action == Direction.INCREASE
        await asyncio.sleep(TICK * 5)
        assert controller.last_voice_action is None

    @pytest.mark.asyncio
    async def test_newest_wins(self):
        controller, _ = _make(70)
        controller.set_transient_action(Direction.INCREASE, duration=TICK * 2)
        controller.set_transient_action(Direction.DECREASE, duration=10)
        await asyncio.sleep(TICK * 5)
        assert controller.last_voice_action == Direction.DECREASE
        controller.dispose()

    @pytest.mark.asyncio
    async def test_sources_independent(self):
        controller, _ = _make(70, tick=10)
        controller.press_button(Direction.DECREASE)
        assert controller.last_button_action == Direction.DECREASE
        assert controller.last_voice_action is None
        controller.dispose()


class TestPressButton:
    @pytest.mark.asyncio
    async def test_steps_by_button_step(self):
        controller, settled = _make(70)
        controller.press_button(Direction.INCREASE)
        assert controller.target == 72
        await _wait_idle(controller)
        assert settled == [("kitchen", 72)]
        controller.dispose()


class TestDispose:
    @pytest.mark.asyncio
    async def test_cancels_timers(self):
        controller, settled = _make(70)
        controller.apply_delta(5)
        controller.set_transient_action(Direction.INCREASE)
        controller.dispose()
        assert controller.has_pending_tick is False
        await asyncio.sleep(TICK * 3)
        assert controller.current_temp == 70
        assert settled == []

    @pytest.mark.asyncio
    async def test_idempotent_and_ignores_commands(self):
        controller, _ = _make(70)
        controller.dispose()
        controller.dispose()
        controller.apply_delta(3)
        assert controller.disposed is True
        assert controller.is_animating is False
