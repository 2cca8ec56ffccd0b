"""Unit tests for config, meters, geometry helpers, the registry and the scheduler."""

from __future__ import annotations

import pytest

from game.arena.config import ArenaConfig
from game.arena.entities import EntityKind
from game.arena.meters import ResourceMeter
from game.arena.registry import EntityRegistry
from game.arena.scheduler import TimerScheduler
from game.arena.utils import push_out_of_rect, rect_contains

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# ArenaConfig
# ---------------------------------------------------------------------------


class TestArenaConfig:
    """Derived quantities and validation."""

    def test_wave_scaling(self, config):
        assert config.enemies_for_wave(1) == 3
        assert config.enemies_for_wave(4) == 5
        assert config.enemies_for_wave(10) == 8

    def test_enemy_speed_grows_with_wave(self, config):
        assert config.enemy_speed_for_wave(1) == 32.0
        assert config.enemy_speed_for_wave(10) == 50.0

    def test_rush_waves(self, config):
        assert [w for w in range(1, 21) if config.is_rush_wave(w)] == [5, 10, 15, 20]

    def test_rush_spawn_count(self, config):
        assert config.rush_spawn_count(10) == 20
        assert config.rush_spawn_count(5) == 10
        assert config.rush_spawn_count(15) == 30

    def test_rush_spawn_count_never_below_one(self):
        cfg = ArenaConfig(rush_base_count=0)
        assert cfg.rush_spawn_count(5) == 1

    def test_tick_ms(self):
        assert ArenaConfig(tick_rate=50).tick_ms == 20.0

    def test_from_dict_ignores_unknown_keys(self):
        cfg = ArenaConfig.from_dict({"base_per_wave": 5, "not_a_field": 1})
        assert cfg.base_per_wave == 5

    def test_invalid_tick_rate_rejected(self):
        with pytest.raises(ValueError):
            ArenaConfig(tick_rate=0)

    def test_inverted_event_delay_rejected(self):
        with pytest.raises(ValueError):
            ArenaConfig(special_event_delay_ms=(5000.0, 1000.0))


# ---------------------------------------------------------------------------
# ResourceMeter
# ---------------------------------------------------------------------------


class TestResourceMeter:
    """Meters clamp to [0, max] on every mutation."""

    def test_starts_full(self):
        meter = ResourceMeter(100)
        assert meter.value == 100
        assert meter.is_full()

    def test_initial_value_clamped(self):
        assert ResourceMeter(100, 150).value == 100
        assert ResourceMeter(100, -5).value == 0

    def test_adjust_clamps_low(self):
        meter = ResourceMeter(100)
        assert meter.adjust(-150) == 0
        assert meter.is_empty()

    def test_adjust_clamps_high(self):
        meter = ResourceMeter(100, 90)
        assert meter.adjust(30) == 100

    def test_percentage(self):
        assert ResourceMeter(200, 50).percentage() == 0.25

    def test_at_least_is_inclusive(self):
        meter = ResourceMeter(100, 10)
        assert meter.at_least(10)
        assert not meter.at_least(10.5)

    @pytest.mark.parametrize("value,band", [(0, "low"), (29, "low"), (30, "mid"),
                                            (59, "mid"), (60, "high"), (100, "high")])
    def test_bands(self, value, band):
        assert ResourceMeter(100, value).band() == band

    def test_refill(self):
        meter = ResourceMeter(100, 3)
        meter.refill()
        assert meter.is_full()


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


class TestGeometry:
    def test_rect_contains_edges_inclusive(self):
        assert rect_contains(100, 100, 20, 10, 110, 105)
        assert not rect_contains(100, 100, 20, 10, 110.5, 100)

    def test_push_out_along_shallow_axis(self):
        # Circle just inside the left face is pushed back out to the left
        x, y = push_out_of_rect(88, 100, 5, 100, 100, 20, 40)
        assert (x, y) == (85, 100)

    def test_push_out_leaves_clear_circles_alone(self):
        assert push_out_of_rect(0, 0, 5, 100, 100, 20, 20) == (0, 0)


# ---------------------------------------------------------------------------
# EntityRegistry
# ---------------------------------------------------------------------------


class TestEntityRegistry:
    """Handles, kind buckets and idempotent destruction."""

    def test_spawn_assigns_unique_ids(self):
        reg = EntityRegistry()
        a = reg.spawn(EntityKind.PICKUP, 0, 0)
        b = reg.spawn(EntityKind.PICKUP, 1, 1)
        assert a.id != b.id
        assert reg.active_count(EntityKind.PICKUP) == 2
        assert reg.get(a.id) is a

    def test_destroy_is_idempotent(self):
        reg = EntityRegistry()
        e = reg.spawn(EntityKind.GROUND_ADVERSARY, 0, 0)
        assert reg.destroy(e) is True
        assert reg.destroy(e) is False
        assert reg.destroy(e.id) is False
        assert not e.active
        assert reg.active_count(EntityKind.GROUND_ADVERSARY) == 0

    def test_destroy_none(self):
        assert EntityRegistry().destroy(None) is False

    def test_entities_snapshot_survives_destroy(self):
        reg = EntityRegistry()
        for i in range(5):
            reg.spawn(EntityKind.PROJECTILE, i, i)
        for e in reg.entities(EntityKind.PROJECTILE):
            reg.destroy(e)
        assert reg.active_count(EntityKind.PROJECTILE) == 0
        assert len(reg) == 0

    def test_clear_counts_only_one_kind(self):
        reg = EntityRegistry()
        for _ in range(3):
            reg.spawn(EntityKind.FLYING_ADVERSARY, 0, 0)
        reg.spawn(EntityKind.GROUND_ADVERSARY, 0, 0)
        assert reg.clear(EntityKind.FLYING_ADVERSARY) == 3
        assert reg.active_count(EntityKind.GROUND_ADVERSARY) == 1

    def test_listener_sees_spawn_and_destroy_once(self):
        seen = []
        reg = EntityRegistry(listener=lambda name, e: seen.append((name, e.id)))
        e = reg.spawn(EntityKind.PICKUP, 0, 0)
        reg.destroy(e)
        reg.destroy(e)
        assert seen == [("entity_spawned", e.id), ("entity_destroyed", e.id)]

    def test_spawn_uses_kind_type(self):
        reg = EntityRegistry()
        station = reg.spawn(EntityKind.STATION, 5, 5, width=10, height=10)
        assert station.kind is EntityKind.STATION
        assert station.width == 10


# ---------------------------------------------------------------------------
# TimerScheduler
# ---------------------------------------------------------------------------


class TestTimerScheduler:
    """Single-shot timers fired in order by advance()."""

    def test_fires_in_order_and_only_when_due(self):
        sched = TimerScheduler()
        fired = []
        sched.schedule(100, lambda: fired.append("late"))
        sched.schedule(50, lambda: fired.append("early"))
        assert sched.advance(60) == 1
        assert fired == ["early"]
        sched.advance(100)
        assert fired == ["early", "late"]

    def test_same_deadline_keeps_schedule_order(self):
        sched = TimerScheduler()
        fired = []
        for name in "abc":
            sched.schedule(10, lambda name=name: fired.append(name))
        sched.advance(10)
        assert fired == ["a", "b", "c"]

    def test_cancelled_timer_never_fires(self):
        sched = TimerScheduler()
        fired = []
        handle = sched.schedule(10, lambda: fired.append(1))
        assert sched.cancel(handle) is True
        assert sched.cancel(handle) is False
        sched.advance(100)
        assert fired == []

    def test_cancel_after_fire_is_noop(self):
        sched = TimerScheduler()
        handle = sched.schedule(0, lambda: None)
        sched.advance(0)
        assert handle.fired
        assert sched.cancel(handle) is False

    def test_callbacks_see_their_own_fire_time(self):
        sched = TimerScheduler()
        seen = []
        sched.schedule(40, lambda: seen.append(sched.now))
        sched.advance(100)
        assert seen == [40]
        assert sched.now == 100

    def test_nested_due_timer_fires_in_same_advance(self):
        sched = TimerScheduler()
        fired = []
        sched.schedule(10, lambda: sched.schedule(5, lambda: fired.append("nested")))
        sched.advance(100)
        assert fired == ["nested"]

    def test_cancel_all(self):
        sched = TimerScheduler()
        fired = []
        for delay in (10, 20, 30):
            sched.schedule(delay, lambda: fired.append(1))
        assert sched.cancel_all() == 3
        assert sched.pending() == 0
        sched.advance(1000)
        assert fired == []
