"""
Encounter director: waves, the special event, the rush event and expansion

Mode machine
------------
NORMAL -> RUSH_EVENT -> NORMAL            every rush wave (5, 10, 15, ...)
NORMAL -> SPECIAL_EVENT -> NORMAL         objective reached in time
NORMAL -> SPECIAL_EVENT -> game over      countdown expired

Both event modes pause the wave-completion check. Game over is a flag on
the state rather than a mode: it freezes everything until a restart.
"""

from __future__ import annotations

import logging
import math
import random
from typing import List, Optional, Set

from .config import ArenaConfig
from .entities import EntityKind, EventDesk, Obstacle
from .expansion import ArenaExpansion
from .layout import ArenaLayout
from .physics import ArenaPhysics
from .placement import PlacementHelper
from .registry import EntityRegistry
from .scheduler import TimerHandle, TimerScheduler
from .state import DirectorMode, GameState
from .utils import rect_contains

logger = logging.getLogger(__name__)

GAME_OVER_MESSAGES = [
    "Your badge stopped working on Monday. You slept until noon on Tuesday.",
    "You spent the severance on a bicycle and rode it to the coast.",
    "The out-of-office reply is now permanent. It reads: gone fishing.",
    "You finally read the books on your shelf. All of them.",
    "You opened a tiny bakery. Nobody schedules meetings in a bakery.",
]


class EncounterDirector:
    """Decides when adversaries exist and drives the event timers"""

    def __init__(
        self,
        state: GameState,
        registry: EntityRegistry,
        layout: ArenaLayout,
        placement: PlacementHelper,
        expansion: ArenaExpansion,
        scheduler: TimerScheduler,
        physics: ArenaPhysics,
        config: ArenaConfig,
        rng: random.Random,
    ) -> None:
        self.state = state
        self.registry = registry
        self.layout = layout
        self.placement = placement
        self.expansion = expansion
        self.scheduler = scheduler
        self.physics = physics
        self.config = config
        self.rng = rng

        # Handles never eligible as the special-event target
        self.excluded_targets: Set[int] = set()

        self._special_start_timer: Optional[TimerHandle] = None
        self._special_countdown: Optional[TimerHandle] = None

    def start(self) -> None:
        """First wave spawns immediately"""
        self.spawn_wave()

    # ----------------------------
    # Mode bookkeeping
    # ----------------------------

    def _set_mode(self, mode: DirectorMode) -> None:
        current = self.state.mode
        if mode is not DirectorMode.NORMAL:
            assert current is DirectorMode.NORMAL, f"cannot enter {mode.value} while {current.value} is active"
        self.state.mode = mode

    # ----------------------------
    # Waves
    # ----------------------------

    def check_wave_complete(self) -> bool:
        """Once per tick, after combat. Returns True when a new wave was triggered."""
        state = self.state
        if state.game_over or state.spawning or state.mode is not DirectorMode.NORMAL:
            return False
        if self.registry.active_count(EntityKind.GROUND_ADVERSARY) > 0:
            return False
        self.start_next_wave()
        return True

    def start_next_wave(self) -> None:
        state, cfg = self.state, self.config
        if state.spawning:
            return

        state.wave += 1
        logger.info("Wave %d cleared the way for wave %d", state.wave - 1, state.wave)

        if state.wave > cfg.expansion_after_wave:
            direction = self.expansion.expand(state.wave)
            width, height = self.layout.bounds()
            state.emit("arena_expanded", direction=direction, width=width, height=height)

        if cfg.is_rush_wave(state.wave):
            self.start_rush()
            return

        if self.rng.random() < cfg.wave_pickup_chance:
            self.spawn_pickup()

        state.spawning = True
        self.scheduler.schedule(cfg.next_wave_delay_ms, self._spawn_and_schedule_event)

    def _spawn_and_schedule_event(self) -> None:
        self.spawn_wave()
        self.schedule_special_event()

    def spawn_wave(self) -> int:
        state, cfg = self.state, self.config
        state.spawning = True

        count = cfg.enemies_for_wave(state.wave)
        speed = cfg.enemy_speed_for_wave(state.wave)
        player = (state.player.x, state.player.y)
        for _ in range(count):
            x, y = self.placement.find_spawn_position(player, cfg.spawn_min_distance, cfg.spawn_max_attempts)
            self.registry.spawn(EntityKind.GROUND_ADVERSARY, x, y, speed=speed, radius=cfg.enemy_radius)

        # Keep the completion check quiet until the new adversaries count as active
        self.scheduler.schedule(cfg.spawn_settle_ms, self._finish_spawning)
        state.emit("wave_started", wave=state.wave, enemies=count, speed=speed)
        return count

    def _finish_spawning(self) -> None:
        self.state.spawning = False

    def spawn_pickup(self):
        x, y = self.placement.random_point(self.config.pickup_margin)
        return self.registry.spawn(
            EntityKind.PICKUP, x, y, radius=self.config.pickup_radius, heal=self.config.pickup_heal
        )

    # ----------------------------
    # Special event
    # ----------------------------

    def schedule_special_event(self) -> Optional[TimerHandle]:
        state, cfg = self.state, self.config
        if state.wave < cfg.special_event_min_wave or state.mode is not DirectorMode.NORMAL:
            return None
        if self._special_start_timer is not None and self._special_start_timer.pending:
            return None
        delay = self.rng.uniform(*cfg.special_event_delay_ms)
        self._special_start_timer = self.scheduler.schedule(delay, self.start_special_event)
        return self._special_start_timer

    def event_desk_candidates(self) -> List[Obstacle]:
        """Interior desks minus the explicit exclusion list; walls and stations never qualify"""
        return [desk for desk in self.layout.desks() if desk.id not in self.excluded_targets]

    def start_special_event(self) -> Optional[EventDesk]:
        state, cfg = self.state, self.config
        if state.game_over:
            return None
        if state.mode is not DirectorMode.NORMAL:
            logger.debug("Special event skipped: %s already active", state.mode.value)
            return None

        candidates = self.event_desk_candidates()
        if not candidates:
            logger.debug("Special event skipped: no eligible desk")
            return None

        desk = self.rng.choice(candidates)
        self.registry.destroy(desk)
        event_desk = self.registry.spawn(
            EntityKind.EVENT_DESK, desk.x, desk.y,
            width=cfg.event_desk_width, height=cfg.event_desk_height, replaced=desk,
        )
        state.special_event_desk = event_desk
        self._set_mode(DirectorMode.SPECIAL_EVENT)

        self._special_countdown = self.scheduler.schedule(
            cfg.special_event_duration_ms, self._special_event_expired
        )
        state.emit("special_event_started", x=event_desk.x, y=event_desk.y,
                   duration_ms=cfg.special_event_duration_ms)
        state.emit("audio", track="special")
        logger.info("Special event started at (%.0f, %.0f)", event_desk.x, event_desk.y)
        return event_desk

    def try_complete_special_event(self, x: float, y: float) -> bool:
        """Event action pressed at (x, y); completes the event when inside the desk"""
        state = self.state
        desk = state.special_event_desk
        if state.mode is not DirectorMode.SPECIAL_EVENT or desk is None:
            return False
        if not rect_contains(desk.x, desk.y, desk.width, desk.height, x, y):
            return False

        self.scheduler.cancel(self._special_countdown)
        self._special_countdown = None
        self.registry.destroy(desk)
        state.special_event_desk = None
        self._set_mode(DirectorMode.NORMAL)

        state.emit("special_event_completed", wave=state.wave)
        state.emit("audio", track="main")
        logger.info("Special event completed in wave %d", state.wave)
        return True

    def event_pointer_heading(self, x: float, y: float) -> Optional[float]:
        """Angle (radians) from (x, y) toward the event desk, or None when no event runs"""
        desk = self.state.special_event_desk
        if desk is None:
            return None
        return math.atan2(desk.y - y, desk.x - x)

    def _special_event_expired(self) -> None:
        logger.info("Special event countdown expired")
        self.trigger_game_over(reason="special_event_timeout")

    # ----------------------------
    # Rush event
    # ----------------------------

    def start_rush(self) -> int:
        state, cfg = self.state, self.config
        self._set_mode(DirectorMode.RUSH_EVENT)

        count = cfg.rush_spawn_count(state.wave)
        interval = cfg.rush_spawn_window_ms / count
        for i in range(count):
            self.scheduler.schedule(i * interval, self.spawn_flying)
        self.scheduler.schedule(cfg.rush_spawn_window_ms + cfg.rush_tail_ms, self.end_rush)

        state.emit("rush_started", wave=state.wave, count=count, banner_ms=cfg.rush_banner_ms)
        logger.info("Rush event started at wave %d with %d flyers", state.wave, count)
        return count

    def spawn_flying(self):
        state, cfg = self.state, self.config
        if state.game_over or state.mode is not DirectorMode.RUSH_EVENT:
            return None

        w, h = self.layout.bounds()
        off = cfg.flying_entry_offset
        speed = cfg.flying_base_speed + cfg.flying_speed_per_wave * state.wave
        lateral = self.rng.uniform(-cfg.flying_lateral, cfg.flying_lateral)

        side = self.rng.randrange(4)
        if side == 0:  # top
            x, y = self.rng.uniform(off, w - off), -off
            vx, vy = lateral, speed
        elif side == 1:  # right
            x, y = w + off, self.rng.uniform(off, h - off)
            vx, vy = -speed, lateral
        elif side == 2:  # bottom
            x, y = self.rng.uniform(off, w - off), h + off
            vx, vy = lateral, -speed
        else:  # left
            x, y = -off, self.rng.uniform(off, h - off)
            vx, vy = speed, lateral

        return self.registry.spawn(
            EntityKind.FLYING_ADVERSARY, x, y, vx=vx, vy=vy, radius=cfg.flying_radius
        )

    def end_rush(self) -> None:
        state, cfg = self.state, self.config
        if state.mode is not DirectorMode.RUSH_EVENT:
            return

        cleared = self.registry.clear(EntityKind.FLYING_ADVERSARY)
        self._set_mode(DirectorMode.NORMAL)

        if self.rng.random() < cfg.rush_pickup_chance:
            self.spawn_pickup()

        state.spawning = True
        self.scheduler.schedule(cfg.rush_resume_delay_ms, self._spawn_and_schedule_event)
        state.emit("rush_ended", wave=state.wave, cleared=cleared)
        logger.info("Rush event ended, %d flyers cleared", cleared)

    def cleanup_flying(self) -> int:
        """Destroy flyers that left the arena by more than the exit margin"""
        w, h = self.layout.bounds()
        m = self.config.flying_exit_margin
        removed = 0
        for flyer in self.registry.entities(EntityKind.FLYING_ADVERSARY):
            if flyer.x < -m or flyer.x > w + m or flyer.y < -m or flyer.y > h + m:
                if self.registry.destroy(flyer):
                    removed += 1
        return removed

    # ----------------------------
    # Game over
    # ----------------------------

    def trigger_game_over(self, reason: str = "health_depleted") -> None:
        state = self.state
        if state.game_over:
            return

        state.game_over = True
        self.physics.freeze()
        self.scheduler.cancel_all()
        self._special_start_timer = None
        self._special_countdown = None

        if state.special_event_desk is not None:
            self.registry.destroy(state.special_event_desk)
            state.special_event_desk = None
        state.mode = DirectorMode.NORMAL

        player = state.player
        player.visible = False
        player.vx = player.vy = 0.0
        player.knock_vx = player.knock_vy = 0.0

        state.emit("audio", track=None)
        state.emit(
            "game_over",
            wave=state.wave,
            kills=state.kills,
            score=state.score,
            reason=reason,
            message=self.rng.choice(GAME_OVER_MESSAGES),
        )
        logger.info("Game over (%s) at wave %d: %d kills, score %d",
                    reason, state.wave, state.kills, state.score)
