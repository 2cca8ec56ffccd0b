"""Unit tests for physics contacts and combat resolution."""

from __future__ import annotations

import math

import pytest

from game.arena.controls import InputIntent
from game.arena.entities import EntityKind
from game.arena.physics import COLLISION, OVERLAP, ContactEvent

pytestmark = pytest.mark.unit


def _names(events):
    return [e.name for e in events]


@pytest.fixture
def quiet(session):
    """Session with the first wave removed so nothing wanders into the player."""
    session.registry.clear(EntityKind.GROUND_ADVERSARY)
    session.registry.clear(EntityKind.PICKUP)
    session.state.drain_events()
    return session


# ---------------------------------------------------------------------------
# ArenaPhysics
# ---------------------------------------------------------------------------


class TestArenaPhysics:
    def test_ground_adversary_chases_player(self, quiet):
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, 650, 300, speed=60)
        quiet.physics.step(0.5, quiet.player)
        assert enemy.x == pytest.approx(620)
        assert enemy.vx == pytest.approx(-60)

    def test_adversary_stops_on_top_of_player(self, quiet):
        p = quiet.player
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, p.x + 2, p.y, speed=60)
        quiet.physics.step(0.1, p)
        assert (enemy.vx, enemy.vy) == (0.0, 0.0)

    def test_projectile_overlap_reported(self, quiet):
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, 650, 200)
        shot = quiet.registry.spawn(EntityKind.PROJECTILE, 650, 200)
        contacts = quiet.physics.step(0.0, quiet.player)
        assert ContactEvent(shot, enemy, OVERLAP) in contacts

    def test_player_blocked_by_desk(self, quiet):
        p = quiet.player
        p.x, p.y = 150, 150  # just under the desk at (150, 120)
        p.vy = -120
        contacts = quiet.physics.step(0.1, p)
        assert any(c.kind == COLLISION for c in contacts)
        assert p.y >= 120 + 20 + p.radius

    def test_player_kept_in_bounds(self, quiet):
        p = quiet.player
        p.x = -50
        quiet.physics.step(0.0, p)
        assert p.x >= p.radius

    def test_hidden_player_has_no_contacts(self, quiet):
        p = quiet.player
        quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, p.x, p.y)
        p.visible = False
        contacts = quiet.physics.step(0.0, p)
        assert all(p not in (c.a, c.b) for c in contacts)

    def test_freeze_zeroes_adversaries(self, quiet):
        flyer = quiet.registry.spawn(EntityKind.FLYING_ADVERSARY, 0, 0, vx=500, vy=10)
        quiet.physics.freeze()
        assert (flyer.vx, flyer.vy) == (0.0, 0.0)

    def test_knockback_decays(self, quiet):
        p = quiet.player
        p.knock_vx = 200
        quiet.physics.step(1 / 60, p)
        assert 0 < p.knock_vx < 200


# ---------------------------------------------------------------------------
# Projectile vs adversary
# ---------------------------------------------------------------------------


class TestProjectileHits:
    def test_kill_scores_ground_adversary(self, quiet):
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, 650, 200)
        shot = quiet.registry.spawn(EntityKind.PROJECTILE, 650, 200)
        quiet.combat.resolve([ContactEvent(shot, enemy, OVERLAP)])
        assert quiet.state.kills == 1
        assert quiet.state.score == 10
        assert not quiet.registry.is_alive(enemy)
        assert not quiet.registry.is_alive(shot)
        assert "enemy_burst" in _names(quiet.state.drain_events())

    def test_flying_kill_scores_double(self, quiet):
        flyer = quiet.registry.spawn(EntityKind.FLYING_ADVERSARY, 650, 200)
        shot = quiet.registry.spawn(EntityKind.PROJECTILE, 650, 200)
        quiet.combat.resolve([ContactEvent(flyer, shot, OVERLAP)])
        assert quiet.state.score == 20

    def test_two_shots_one_kill(self, quiet):
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, 650, 200)
        s1 = quiet.registry.spawn(EntityKind.PROJECTILE, 650, 200)
        s2 = quiet.registry.spawn(EntityKind.PROJECTILE, 650, 200)
        quiet.combat.resolve([ContactEvent(s1, enemy, OVERLAP), ContactEvent(s2, enemy, OVERLAP)])
        assert quiet.state.kills == 1
        assert quiet.registry.is_alive(s2)

    def test_collision_contacts_ignored(self, quiet):
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, 650, 200)
        shot = quiet.registry.spawn(EntityKind.PROJECTILE, 650, 200)
        quiet.combat.resolve([ContactEvent(shot, enemy, COLLISION)])
        assert quiet.state.kills == 0


# ---------------------------------------------------------------------------
# Adversary vs player
# ---------------------------------------------------------------------------


class TestPlayerDamage:
    def test_ground_hit_damages_and_knocks_back(self, quiet):
        p = quiet.player
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, p.x - 10, p.y)
        quiet.combat.resolve([ContactEvent(enemy, p, OVERLAP)])
        assert p.health.value == 85
        assert p.knock_vx == pytest.approx(200)
        assert p.is_invulnerable(quiet.state.now_ms)
        assert quiet.registry.is_alive(enemy)

    def test_invulnerability_window(self, quiet):
        p = quiet.player
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, p.x - 10, p.y)
        quiet.combat.resolve([ContactEvent(enemy, p, OVERLAP)])
        quiet.state.now_ms += 500
        quiet.combat.resolve([ContactEvent(enemy, p, OVERLAP)])
        assert p.health.value == 85
        quiet.state.now_ms += 300
        quiet.combat.resolve([ContactEvent(enemy, p, OVERLAP)])
        assert p.health.value == 70

    def test_flying_hit_destroys_flyer(self, quiet):
        p = quiet.player
        flyer = quiet.registry.spawn(EntityKind.FLYING_ADVERSARY, p.x, p.y + 5)
        quiet.combat.resolve([ContactEvent(flyer, p, OVERLAP)])
        assert p.health.value == 75
        assert p.knock_vy == pytest.approx(-300)
        assert not quiet.registry.is_alive(flyer)

    def test_damage_taken_accumulates(self, quiet):
        p = quiet.player
        enemy = quiet.registry.spawn(EntityKind.GROUND_ADVERSARY, p.x - 10, p.y)
        quiet.combat.resolve([ContactEvent(enemy, p, OVERLAP)])
        assert quiet.state.damage_taken == 15


class TestGameOver:
    def _lethal_hit(self, session):
        p = session.player
        p.health.adjust(-95)
        enemy = session.registry.spawn(EntityKind.GROUND_ADVERSARY, p.x - 10, p.y, vx=5)
        session.combat.resolve([ContactEvent(enemy, p, OVERLAP)])
        return enemy

    def test_lethal_hit_ends_session(self, quiet):
        quiet.state.kills, quiet.state.score = 4, 40
        enemy = self._lethal_hit(quiet)
        state = quiet.state
        assert state.game_over
        assert not quiet.player.visible
        assert (enemy.vx, enemy.vy) == (0.0, 0.0)
        assert quiet.scheduler.pending() == 0
        over = [e for e in state.drain_events() if e.name == "game_over"]
        assert len(over) == 1
        assert over[0].data["wave"] == 1
        assert over[0].data["kills"] == 4
        assert over[0].data["score"] == 40
        assert over[0].data["reason"] == "health_depleted"
        assert over[0].data["message"]

    def test_ticks_frozen_after_game_over(self, quiet):
        self._lethal_hit(quiet)
        now = quiet.state.now_ms
        quiet.tick(InputIntent(move_x=1, fire=True))
        assert quiet.state.now_ms == now
        assert quiet.registry.active_count(EntityKind.PROJECTILE) == 0

    def test_restart_resets_everything(self, quiet):
        self._lethal_hit(quiet)
        events = quiet.tick(InputIntent(restart=True))
        assert "restarted" in _names(events)
        state = quiet.state
        assert not state.game_over
        assert state.wave == 1 and state.kills == 0 and state.score == 0
        assert quiet.player.health.is_full()
        assert quiet.player.visible
        assert quiet.registry.active_count(EntityKind.GROUND_ADVERSARY) == 3


# ---------------------------------------------------------------------------
# Pickups and recharge
# ---------------------------------------------------------------------------


class TestPickupsAndRecharge:
    def test_pickup_heals_and_disappears(self, quiet):
        p = quiet.player
        p.health.adjust(-50)
        pickup = quiet.registry.spawn(EntityKind.PICKUP, p.x, p.y, heal=30)
        quiet.combat.resolve([ContactEvent(p, pickup, OVERLAP)])
        assert p.health.value == 80
        assert not quiet.registry.is_alive(pickup)

    def test_pickup_heal_clamped(self, quiet):
        p = quiet.player
        p.health.adjust(-10)
        pickup = quiet.registry.spawn(EntityKind.PICKUP, p.x, p.y, heal=30)
        quiet.combat.resolve([ContactEvent(pickup, p, OVERLAP)])
        assert p.health.value == 100

    def test_recharge_only_while_held(self, quiet):
        p = quiet.player
        p.energy.adjust(-50)
        station = quiet.layout.stations()[0]

        quiet.combat.begin_tick(False)
        quiet.combat.resolve([ContactEvent(p, station, OVERLAP)])
        assert p.energy.value == 50
        assert not quiet.state.recharging

        quiet.combat.begin_tick(True)
        quiet.combat.resolve([ContactEvent(p, station, OVERLAP)])
        assert p.energy.value == pytest.approx(50.8)
        assert quiet.state.recharging and station.recharging

    def test_recharge_once_per_tick(self, quiet):
        p = quiet.player
        p.energy.adjust(-50)
        s1, s2 = quiet.layout.stations()
        quiet.combat.begin_tick(True)
        quiet.combat.resolve([ContactEvent(p, s1, OVERLAP), ContactEvent(p, s2, OVERLAP)])
        assert p.energy.value == pytest.approx(50.8)

    def test_recharge_through_ticks(self, quiet, run_ms):
        # The player starts on top of the first station
        p = quiet.player
        p.energy.adjust(-50)
        for _ in range(10):
            quiet.tick(InputIntent(recharge=True))
        assert p.energy.value == pytest.approx(58.0)
        quiet.tick(InputIntent(recharge=False))
        assert p.energy.value == pytest.approx(58.0)
        assert quiet.status()["recharging"] is False

    def test_recharge_stops_off_station(self, quiet):
        p = quiet.player
        p.energy.adjust(-50)
        station = quiet.layout.stations()[0]
        for _ in range(5):
            quiet.tick(InputIntent(recharge=True))
        assert p.energy.value == pytest.approx(54.0)
        assert station.recharging

        # Key still held, but no overlap this tick
        quiet.combat.begin_tick(True)
        quiet.combat.resolve([])
        assert p.energy.value == pytest.approx(54.0)
        assert quiet.status()["recharging"] is False
        assert not station.recharging


# ---------------------------------------------------------------------------
# Fire action
# ---------------------------------------------------------------------------


class TestFire:
    def test_fire_spends_energy(self, quiet):
        shot = quiet.combat.try_fire()
        assert shot is not None
        assert quiet.player.energy.value == 90
        # Default facing is to the right
        assert shot.vx == pytest.approx(400)
        assert shot.vy == pytest.approx(0, abs=1e-9)

    def test_cooldown(self, quiet):
        assert quiet.combat.try_fire() is not None
        assert quiet.combat.try_fire() is None
        quiet.state.now_ms += 149
        assert quiet.combat.try_fire() is None
        quiet.state.now_ms += 1
        assert quiet.combat.try_fire() is not None

    def test_no_energy_no_shot(self, quiet):
        quiet.player.energy.adjust(-95)
        assert quiet.combat.try_fire() is None
        assert quiet.player.energy.value == 5
        assert quiet.registry.active_count(EntityKind.PROJECTILE) == 0

    def test_aimed_shot(self, quiet):
        p = quiet.player
        shot = quiet.combat.try_fire(aim=(p.x + 10, p.y))
        assert shot.vx == pytest.approx(400)
        assert shot.vy == pytest.approx(0, abs=1e-9)

    def test_projectile_expires(self, quiet):
        shot = quiet.combat.try_fire()
        quiet.scheduler.advance(999)
        assert quiet.registry.is_alive(shot)
        quiet.scheduler.advance(1000)
        assert not quiet.registry.is_alive(shot)

    def test_fire_follows_movement_facing(self, quiet):
        events = quiet.tick(InputIntent(move_x=-1, fire=True))
        assert "shot" in _names(events)
        assert quiet.player.facing_angle == pytest.approx(math.pi)
        (shot,) = quiet.registry.entities(EntityKind.PROJECTILE)
        assert shot.vx == pytest.approx(-400)
