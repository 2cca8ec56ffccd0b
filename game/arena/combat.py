"""
Combat resolution: turns physics contacts into game-state transitions

Handlers are looked up by the (kind, kind) pair of each contact. Pairs with
no handler (player vs obstacle, projectile vs pickup, ...) are ignored.
"""

from __future__ import annotations

import math
from typing import Callable, Dict, Iterable, Optional, Tuple

from .config import ArenaConfig
from .entities import Entity, EntityKind, Player, Projectile, Station
from .physics import OVERLAP, ContactEvent
from .registry import EntityRegistry
from .scheduler import TimerScheduler
from .state import GameState
from .utils import normalize

Handler = Callable[["CombatEngine", Entity, Entity], None]


class CombatEngine:
    """Applies damage, kills, pickups, recharge and the fire action"""

    def __init__(
        self,
        state: GameState,
        registry: EntityRegistry,
        scheduler: TimerScheduler,
        config: ArenaConfig,
        on_game_over: Callable[[], None],
    ) -> None:
        self.state = state
        self.registry = registry
        self.scheduler = scheduler
        self.config = config
        self.on_game_over = on_game_over
        self.recharge_held = False

    @property
    def player(self) -> Player:
        return self.state.player

    def begin_tick(self, recharge_held: bool) -> None:
        """Recharge is level-triggered: it must be re-earned every tick"""
        self.recharge_held = recharge_held
        self.state.recharging = False
        for station in self.registry.entities(EntityKind.STATION):
            station.recharging = False

    def resolve(self, contacts: Iterable[ContactEvent]) -> None:
        for contact in contacts:
            if contact.kind != OVERLAP:
                continue
            if self.state.game_over:
                return
            a, b = contact.a, contact.b
            handler = _HANDLERS.get((a.kind, b.kind))
            if handler is None:
                handler = _HANDLERS.get((b.kind, a.kind))
                a, b = b, a
            if handler is None:
                continue
            # Either side may already be gone from an earlier contact this tick
            if not (self.registry.is_alive(a) and self.registry.is_alive(b)):
                continue
            handler(self, a, b)

    # ----------------------------
    # Contact handlers
    # ----------------------------

    def _projectile_hits_adversary(self, shot: Projectile, enemy: Entity) -> None:
        self.registry.destroy(shot)
        self.registry.destroy(enemy)

        self.state.kills += 1
        if enemy.kind is EntityKind.FLYING_ADVERSARY:
            self.state.score += self.config.flying_score
        else:
            self.state.score += self.config.enemy_score
        self.state.emit("enemy_burst", x=enemy.x, y=enemy.y, kind=enemy.kind.value)

    def _adversary_hits_player(self, enemy: Entity, player: Player) -> None:
        now = self.state.now_ms
        if player.is_invulnerable(now):
            return

        flying = enemy.kind is EntityKind.FLYING_ADVERSARY
        cfg = self.config
        damage = cfg.flying_damage if flying else cfg.enemy_damage
        knockback = cfg.flying_knockback if flying else cfg.enemy_knockback

        player.health.adjust(-damage)
        self.state.damage_taken += damage

        nx, ny = normalize(player.x - enemy.x, player.y - enemy.y)
        if nx == 0.0 and ny == 0.0:
            nx = 1.0
        player.knock_vx = nx * knockback
        player.knock_vy = ny * knockback
        player.invulnerable_until = now + cfg.invulnerable_ms

        if flying:
            self.registry.destroy(enemy)

        self.state.emit("hit_flash", damage=damage, health=player.health.value)
        if player.health.is_empty():
            self.on_game_over()

    def _player_at_station(self, player: Player, station: Station) -> None:
        if not self.recharge_held or self.state.recharging:
            return
        player.energy.adjust(self.config.recharge_per_tick)
        self.state.recharging = True
        station.recharging = True
        self.state.emit("recharge", energy=player.energy.percentage())

    def _player_collects_pickup(self, player: Player, pickup: Entity) -> None:
        player.health.adjust(pickup.heal)
        self.registry.destroy(pickup)
        self.state.emit("pickup_collected", x=pickup.x, y=pickup.y, health=player.health.value)

    # ----------------------------
    # Fire action
    # ----------------------------

    def try_fire(self, aim: Optional[Tuple[float, float]] = None) -> Optional[Projectile]:
        """Fire along the facing angle (or toward ``aim``) if cooldown and energy allow"""
        state, cfg, player = self.state, self.config, self.player
        now = state.now_ms
        if state.game_over:
            return None
        if now - state.last_shot_ms < cfg.shot_cooldown_ms:
            return None
        if not player.energy.at_least(cfg.shot_cost):
            return None

        player.energy.adjust(-cfg.shot_cost)
        state.last_shot_ms = now

        if aim is not None and (aim[0], aim[1]) != (player.x, player.y):
            angle = math.atan2(aim[1] - player.y, aim[0] - player.x)
        else:
            angle = player.facing_angle

        shot = self.registry.spawn(
            EntityKind.PROJECTILE, player.x, player.y,
            vx=math.cos(angle) * cfg.projectile_speed,
            vy=math.sin(angle) * cfg.projectile_speed,
            radius=cfg.projectile_radius,
            ttl_ms=cfg.projectile_ttl_ms,
        )
        self.scheduler.schedule(cfg.projectile_ttl_ms, lambda: self.registry.destroy(shot))
        state.emit("shot", angle=angle, energy=player.energy.value)
        return shot


_HANDLERS: Dict[Tuple[EntityKind, EntityKind], Handler] = {
    (EntityKind.PROJECTILE, EntityKind.GROUND_ADVERSARY): CombatEngine._projectile_hits_adversary,
    (EntityKind.PROJECTILE, EntityKind.FLYING_ADVERSARY): CombatEngine._projectile_hits_adversary,
    (EntityKind.GROUND_ADVERSARY, EntityKind.PLAYER): CombatEngine._adversary_hits_player,
    (EntityKind.FLYING_ADVERSARY, EntityKind.PLAYER): CombatEngine._adversary_hits_player,
    (EntityKind.PLAYER, EntityKind.STATION): CombatEngine._player_at_station,
    (EntityKind.PLAYER, EntityKind.PICKUP): CombatEngine._player_collects_pickup,
}
