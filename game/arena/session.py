"""
ArenaSession - one playthrough of the arena, advanced one tick at a time
-----------------------------------------------------------------------
Tick order:
  0. restart handling while game over
  1. advance the clock and fire due timers
  2. per-tick resets (recharge is level-triggered)
  3. intents: movement/facing, fire, special-event action
  4. physics step
  5. combat resolution of the step's contacts
  6. flying-adversary bounds cleanup
  7. director wave-completion check

Combat runs before the completion check so an adversary killed this tick
is already gone when the director counts.
"""

from __future__ import annotations

import math
import random
from typing import Any, Dict, List, Optional

from .combat import CombatEngine
from .config import ArenaConfig
from .controls import InputIntent
from .director import EncounterDirector
from .entities import Entity, EntityKind, Player
from .expansion import ArenaExpansion
from .layout import ArenaLayout
from .physics import ArenaPhysics
from .placement import PlacementHelper
from .registry import EntityRegistry
from .scheduler import TimerScheduler
from .state import GameEvent, GameState
from .utils import normalize


class ArenaSession:
    """Owns every component of one session; ``restart`` rebuilds them all"""

    def __init__(self, config: Optional[ArenaConfig] = None, seed: Optional[int] = None):
        self.config = config or ArenaConfig()
        self.rng = random.Random(seed)
        self._build()

    def _build(self) -> None:
        cfg = self.config
        self.ticks = 0

        self.registry = EntityRegistry()
        self.scheduler = TimerScheduler()
        self.layout = ArenaLayout(self.registry, cfg)
        self.layout.build()

        sx, sy = cfg.player_start
        player = self.registry.spawn(
            EntityKind.PLAYER, sx, sy,
            radius=cfg.player_radius,
            base_speed=cfg.base_speed,
            speed_boost=cfg.speed_boost,
            max_health=cfg.max_health,
            max_energy=cfg.max_energy,
        )
        self.state = GameState(player=player)
        self.registry.listener = self._forward_registry_change

        self.placement = PlacementHelper(self.layout, self.rng, margin=cfg.spawn_margin)
        self.expansion = ArenaExpansion(self.layout, self.placement, cfg)
        self.physics = ArenaPhysics(self.registry, self.layout, cfg)
        self.director = EncounterDirector(
            self.state, self.registry, self.layout, self.placement, self.expansion,
            self.scheduler, self.physics, cfg, self.rng,
        )
        self.combat = CombatEngine(
            self.state, self.registry, self.scheduler, cfg,
            on_game_over=self.director.trigger_game_over,
        )
        self.director.start()

    def _forward_registry_change(self, name: str, entity: Entity) -> None:
        self.state.emit(name, id=entity.id, kind=entity.kind.value, x=entity.x, y=entity.y)

    def restart(self) -> None:
        """Fresh state, registry, layout and timers"""
        self._build()
        self.state.emit("restarted")

    # ----------------------------
    # Tick
    # ----------------------------

    def tick(self, intent: Optional[InputIntent] = None, dt_ms: Optional[float] = None) -> List[GameEvent]:
        """Advance one tick and return the events it produced"""
        intent = intent or InputIntent()
        dt_ms = self.config.tick_ms if dt_ms is None else dt_ms

        if self.state.game_over:
            if intent.restart:
                self.restart()
            return self.state.drain_events()

        state = self.state
        player = state.player
        state.now_ms += dt_ms
        self.scheduler.advance(state.now_ms)
        if state.game_over:
            return state.drain_events()

        self.combat.begin_tick(intent.recharge)
        self._apply_movement(player, intent)
        if intent.fire:
            self.combat.try_fire(intent.aim)
        if intent.event_action:
            self.director.try_complete_special_event(player.x, player.y)

        contacts = self.physics.step(dt_ms / 1000.0, player)
        self.combat.resolve(contacts)

        if not state.game_over:
            self.director.cleanup_flying()
            self.director.check_wave_complete()

        self.ticks += 1
        return state.drain_events()

    @staticmethod
    def _apply_movement(player: Player, intent: InputIntent) -> None:
        mx, my = normalize(intent.move_x, intent.move_y)
        if mx != 0.0 or my != 0.0:
            player.facing_angle = math.atan2(my, mx)
        player.vx = mx * player.speed
        player.vy = my * player.speed

    # ----------------------------
    # Read-outs
    # ----------------------------

    @property
    def player(self) -> Player:
        return self.state.player

    @property
    def health_pct(self) -> float:
        return self.player.health.percentage()

    @property
    def energy_pct(self) -> float:
        return self.player.energy.percentage()

    def status(self) -> Dict[str, Any]:
        state, layout = self.state, self.layout
        return {
            "wave": state.wave,
            "kills": state.kills,
            "score": state.score,
            "mode": state.mode.value,
            "game_over": state.game_over,
            "spawning": state.spawning,
            "health": self.player.health.value,
            "energy": self.player.energy.value,
            "recharging": state.recharging,
            "enemies": self.registry.active_count(EntityKind.GROUND_ADVERSARY),
            "flyers": self.registry.active_count(EntityKind.FLYING_ADVERSARY),
            "pickups": self.registry.active_count(EntityKind.PICKUP),
            "projectiles": self.registry.active_count(EntityKind.PROJECTILE),
            "arena": {"width": layout.width, "height": layout.height,
                      "rows": layout.desk_rows, "cols": layout.desk_cols},
            "event_heading": self.director.event_pointer_heading(self.player.x, self.player.y),
            "time_ms": state.now_ms,
        }
