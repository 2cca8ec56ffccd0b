"""
Tunable constants for the office arena
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Tuple


@dataclass
class ArenaConfig:
    """Every gameplay constant, grouped the way the director reads them"""

    # Simulation clock
    tick_rate: int = 60  # ticks per second

    # Arena
    arena_width: float = 800.0
    arena_height: float = 600.0
    wall_thickness: float = 20.0
    desk_rows: int = 3
    desk_cols: int = 4
    desk_spacing: float = 200.0
    desk_start_x: float = 150.0
    desk_start_y: float = 120.0
    desk_width: float = 64.0
    desk_height: float = 40.0
    desk_skip_cell: Tuple[int, int] = (1, 1)  # player start cell
    station_positions: List[Tuple[float, float]] = field(
        default_factory=lambda: [(350.0, 300.0), (550.0, 480.0)]
    )
    station_width: float = 112.0
    station_height: float = 72.0
    station_min_distance: float = 100.0  # desks never closer to a station

    # Player
    player_start: Tuple[float, float] = (400.0, 300.0)
    player_radius: float = 14.0
    max_health: float = 100.0
    max_energy: float = 100.0
    base_speed: float = 120.0
    speed_boost: float = 0.0
    invulnerable_ms: float = 800.0
    knockback_damping: float = 8.0  # per second

    # Weapons
    shot_cooldown_ms: float = 150.0
    shot_cost: float = 10.0
    projectile_speed: float = 400.0
    projectile_ttl_ms: float = 1000.0
    projectile_radius: float = 4.0

    # Recharge / pickups
    recharge_per_tick: float = 0.8
    pickup_heal: float = 30.0
    pickup_radius: float = 6.0
    pickup_margin: float = 150.0
    wave_pickup_chance: float = 0.4
    rush_pickup_chance: float = 0.6

    # Ground adversaries
    base_per_wave: int = 3
    enemy_radius: float = 12.0
    enemy_base_speed: float = 30.0
    enemy_speed_per_wave: float = 2.0
    enemy_damage: float = 15.0
    enemy_knockback: float = 200.0
    enemy_score: int = 10
    spawn_margin: float = 100.0
    spawn_min_distance: float = 150.0
    spawn_max_attempts: int = 10
    chase_stop_distance: float = 4.0

    # Wave timing
    next_wave_delay_ms: float = 1500.0
    spawn_settle_ms: float = 100.0

    # Special event
    special_event_min_wave: int = 3
    special_event_delay_ms: Tuple[float, float] = (25000.0, 35000.0)
    special_event_duration_ms: float = 30000.0
    event_desk_width: float = 113.0
    event_desk_height: float = 68.0

    # Rush event
    rush_every: int = 5
    rush_base_count: int = 20
    rush_count_per_wave: int = 2
    rush_reference_wave: int = 10
    rush_spawn_window_ms: float = 15000.0
    rush_tail_ms: float = 5000.0
    rush_resume_delay_ms: float = 2000.0
    rush_banner_ms: float = 3000.0
    flying_radius: float = 12.0
    flying_base_speed: float = 500.0
    flying_speed_per_wave: float = 5.0
    flying_lateral: float = 100.0
    flying_entry_offset: float = 50.0
    flying_exit_margin: float = 100.0
    flying_damage: float = 25.0
    flying_knockback: float = 300.0
    flying_score: int = 20

    # Expansion
    expansion_after_wave: int = 10

    def __post_init__(self):
        if self.tick_rate <= 0:
            raise ValueError(f"tick_rate must be positive, got {self.tick_rate}")
        if self.desk_spacing <= 0:
            raise ValueError(f"desk_spacing must be positive, got {self.desk_spacing}")
        if self.max_health <= 0 or self.max_energy <= 0:
            raise ValueError("meter maxima must be positive")
        if self.spawn_max_attempts < 1:
            raise ValueError("spawn_max_attempts must be at least 1")
        lo, hi = self.special_event_delay_ms
        if lo > hi:
            raise ValueError(f"special_event_delay_ms is inverted: {lo} > {hi}")

    @property
    def tick_ms(self) -> float:
        return 1000.0 / self.tick_rate

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "ArenaConfig":
        """Build from an experiment dict, ignoring keys that are not config fields"""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})

    def enemies_for_wave(self, wave: int) -> int:
        return self.base_per_wave + wave // 2

    def enemy_speed_for_wave(self, wave: int) -> float:
        return self.enemy_base_speed + self.enemy_speed_per_wave * wave

    def rush_spawn_count(self, wave: int) -> int:
        count = self.rush_base_count + (wave - self.rush_reference_wave) * self.rush_count_per_wave
        return max(1, count)

    def is_rush_wave(self, wave: int) -> bool:
        return wave >= self.rush_every and wave % self.rush_every == 0
