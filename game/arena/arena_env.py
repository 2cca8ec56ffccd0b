"""
ArenaEnv - gymnasium wrapper around an ArenaSession
--------------------------------------------------
- One agent-controlled player that moves, fires, recharges and answers the
  special event
- Waves of chasing adversaries, rush events with flying adversaries, health
  pickups and recharge stations, all driven by the EncounterDirector
- Vector observation: player state + meters + event offsets + top-K nearest
  ground adversaries + top-M nearest flying adversaries
- MultiDiscrete action space: [move(9), fire(2), recharge(2), event_action(2)]

Quick test:
    python -m game.arena.arena_env
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from .config import ArenaConfig
from .controls import MOVE_DIRECTIONS, InputIntent
from .entities import EntityKind
from .session import ArenaSession
from .state import GameEvent
from .utils import clamp, seed_everything

DEFAULT_REWARD = {
    "R_KILL": 1.0,        # ground adversary eliminated
    "R_FLYING_KILL": 1.5,
    "R_PICKUP": 0.5,
    "R_DAMAGE": 1.0,      # multiplied by damage / max health
    "R_EVENT": 3.0,       # special event answered in time
    "R_WAVE": 0.5,        # new wave reached
    "R_SHOT": 0.01,
    "R_TIME": 0.001,
    "R_DEATH": 5.0,
}


class ArenaEnv(gym.Env):
    """Office arena survival environment"""

    metadata = {"render_modes": ["human"], "render_fps": 60}

    def __init__(
        self,
        render_mode: Optional[str] = None,
        config: Optional[ArenaConfig] = None,
        max_steps: int = 3600,  # 60s at 60 ticks/s
        k_enemies: int = 5,
        m_flyers: int = 3,
        reward_weights: Optional[Dict[str, float]] = None,
    ):
        super().__init__()

        assert render_mode is None or render_mode in self.metadata["render_modes"]
        self.render_mode = render_mode
        self.config = config or ArenaConfig()
        self.max_steps = max_steps
        self.k_enemies = k_enemies
        self.m_flyers = m_flyers
        self.reward_weights = dict(DEFAULT_REWARD)
        if reward_weights:
            self.reward_weights.update(reward_weights)

        self.action_space = spaces.MultiDiscrete([len(MOVE_DIRECTIONS), 2, 2, 2])

        # Player: pos(2) vel(2) health(1) energy(1) invulnerable(1) can_fire(1)
        # Director: special(1) rush(1) wave(1)
        # Offsets: event desk(2) nearest station(2) nearest pickup(2)
        # Each ground adversary: rel pos(2) rel vel(2); each flyer: rel pos(2) vel(2)
        obs_dim = 8 + 3 + 6 + (self.k_enemies * 4) + (self.m_flyers * 4)
        self.observation_space = spaces.Box(
            low=-1.0, high=1.0, shape=(obs_dim,), dtype=np.float32
        )

        self._window = None
        self.session: ArenaSession = None  # type: ignore
        self._step_count = 0
        self._last_events: List[GameEvent] = []

    # ----------------------------
    # Gym API
    # ----------------------------

    def reset(self, seed: Optional[int] = None, options: Optional[dict] = None):
        super().reset(seed=seed)
        seed_everything(seed)
        if seed is None:
            seed = int(self.np_random.integers(0, 2**31 - 1))

        self.session = ArenaSession(self.config, seed=seed)
        self._step_count = 0
        self._last_events = []
        return self._get_obs(), self._get_info()

    def step(self, action):
        move, fire, recharge, event_action = (int(a) for a in action)
        mx, my = MOVE_DIRECTIONS[move % len(MOVE_DIRECTIONS)]
        intent = InputIntent(
            move_x=mx,
            move_y=my,
            fire=bool(fire),
            recharge=bool(recharge),
            event_action=bool(event_action),
        )

        events = self.session.tick(intent)
        self._last_events = events
        reward = self._compute_reward(events)

        terminated = self.session.state.game_over
        self._step_count += 1
        truncated = self._step_count >= self.max_steps

        if self.render_mode == "human":
            self.render()

        return self._get_obs(), reward, terminated, truncated, self._get_info()

    # ----------------------------
    # Observation / reward / info
    # ----------------------------

    def _rel(self, x: float, y: float) -> Tuple[float, float]:
        p = self.session.player
        w, h = self.session.layout.bounds()
        return clamp((x - p.x) / w, -1, 1), clamp((y - p.y) / h, -1, 1)

    def _nearest(self, kind: EntityKind, limit: int) -> list:
        p = self.session.player
        return sorted(
            self.session.registry.entities(kind),
            key=lambda e: (e.x - p.x) ** 2 + (e.y - p.y) ** 2,
        )[:limit]

    def _get_obs(self) -> np.ndarray:
        session = self.session
        state, p, cfg = session.state, session.player, self.config
        w, h = session.layout.bounds()
        speed = max(1e-6, p.speed)
        now = state.now_ms

        can_fire = (now - state.last_shot_ms >= cfg.shot_cooldown_ms
                    and p.energy.at_least(cfg.shot_cost))

        obs_parts = [
            (p.x / w) * 2 - 1, (p.y / h) * 2 - 1,
            clamp(p.vx / speed, -1, 1), clamp(p.vy / speed, -1, 1),
            p.health.percentage() * 2 - 1,
            p.energy.percentage() * 2 - 1,
            1.0 if p.is_invulnerable(now) else -1.0,
            1.0 if can_fire else -1.0,
            1.0 if state.special_event_active else -1.0,
            1.0 if state.rush_active else -1.0,
            clamp(state.wave / 20.0, 0, 1) * 2 - 1,
        ]

        desk = state.special_event_desk
        obs_parts += list(self._rel(desk.x, desk.y)) if desk is not None else [0.0, 0.0]

        stations = self._nearest(EntityKind.STATION, 1)
        obs_parts += list(self._rel(stations[0].x, stations[0].y)) if stations else [0.0, 0.0]

        pickups = self._nearest(EntityKind.PICKUP, 1)
        obs_parts += list(self._rel(pickups[0].x, pickups[0].y)) if pickups else [0.0, 0.0]

        enemies = self._nearest(EntityKind.GROUND_ADVERSARY, self.k_enemies)
        for i in range(self.k_enemies):
            if i < len(enemies):
                e = enemies[i]
                dx, dy = self._rel(e.x, e.y)
                obs_parts += [dx, dy,
                              clamp((e.vx - p.vx) / speed, -1, 1),
                              clamp((e.vy - p.vy) / speed, -1, 1)]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        fly_speed = cfg.flying_base_speed + cfg.flying_speed_per_wave * state.wave
        flyers = self._nearest(EntityKind.FLYING_ADVERSARY, self.m_flyers)
        for i in range(self.m_flyers):
            if i < len(flyers):
                f = flyers[i]
                dx, dy = self._rel(f.x, f.y)
                obs_parts += [dx, dy,
                              clamp(f.vx / fly_speed, -1, 1),
                              clamp(f.vy / fly_speed, -1, 1)]
            else:
                obs_parts += [0.0, 0.0, 0.0, 0.0]

        return np.array(obs_parts, dtype=np.float32)

    def _compute_reward(self, events: List[GameEvent]) -> float:
        rw = self.reward_weights
        max_health = self.config.max_health
        reward = -rw["R_TIME"]

        for event in events:
            if event.name == "enemy_burst":
                flying = event.data.get("kind") == EntityKind.FLYING_ADVERSARY.value
                reward += rw["R_FLYING_KILL"] if flying else rw["R_KILL"]
            elif event.name == "pickup_collected":
                reward += rw["R_PICKUP"]
            elif event.name == "hit_flash":
                reward -= rw["R_DAMAGE"] * event.data["damage"] / max_health
            elif event.name == "special_event_completed":
                reward += rw["R_EVENT"]
            elif event.name == "wave_started" and event.data["wave"] > 1:
                reward += rw["R_WAVE"]
            elif event.name == "shot":
                reward -= rw["R_SHOT"]
            elif event.name == "game_over":
                reward -= rw["R_DEATH"]

        return float(reward)

    def _get_info(self) -> Dict[str, Any]:
        status = self.session.status()
        return {
            "health": status["health"],
            "energy": status["energy"],
            "wave": status["wave"],
            "enemies_killed": status["kills"],
            "score": status["score"],
            "damage_taken": self.session.state.damage_taken,
            "mode": status["mode"],
            "num_enemies": status["enemies"],
            "num_flyers": status["flyers"],
            "step": self._step_count,
        }

    # ----------------------------
    # Rendering with Arcade
    # ----------------------------

    def render(self):
        if self.render_mode is None:
            return None

        if self._window is None:
            # arcade import deferred to the first render
            from .window import ArenaWindow
            self._window = ArenaWindow(self.session)

        self._window.session = self.session
        self._window.on_draw()
        return None

    def close(self):
        if self._window is not None:
            self._window.close()
            self._window = None


# ----------------------------
# Quick sanity test
# ----------------------------

def run_random_episode(render: bool = True, seed: int = 42):
    """Run a random-policy episode"""
    env = ArenaEnv(render_mode="human" if render else None)
    obs, info = env.reset(seed=seed)

    terminated = False
    truncated = False
    total = 0.0

    import time
    while not (terminated or truncated):
        action = env.action_space.sample()
        obs, reward, terminated, truncated, info = env.step(action)
        total += reward

        if render and env._window:
            env._window.dispatch_events()
            env._window.flip()
            time.sleep(1 / 60)

    print(f"Random episode return: {total:.2f} "
          f"(wave {info['wave']}, kills {info['enemies_killed']}, score {info['score']})")
    env.close()
    return total


if __name__ == "__main__":
    run_random_episode(render=True)
