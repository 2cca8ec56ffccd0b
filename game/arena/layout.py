"""
Static arena layout: border walls, the desk grid and recharge stations
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .config import ArenaConfig
from .entities import EntityKind, Obstacle, Station
from .registry import EntityRegistry
from .utils import distance, rect_contains

logger = logging.getLogger(__name__)


class ArenaLayout:
    """Owns arena geometry and the obstacles/stations that live in it"""

    def __init__(self, registry: EntityRegistry, config: ArenaConfig) -> None:
        self.registry = registry
        self.config = config

        self.width = config.arena_width
        self.height = config.arena_height
        self.desk_rows = config.desk_rows
        self.desk_cols = config.desk_cols
        self.spacing = config.desk_spacing

        self.recharge_positions: List[Tuple[float, float]] = []
        self._border_walls: List[Obstacle] = []

    def build(self) -> None:
        """Border walls, then stations, then desks (which avoid the stations)"""
        self.rebuild_borders()
        for x, y in self.config.station_positions:
            self.create_station(x, y)

        skip_row, skip_col = self.config.desk_skip_cell
        for row in range(self.desk_rows):
            for col in range(self.desk_cols):
                if (row, col) == (skip_row, skip_col):
                    continue
                x, y = self.cell_center(row, col)
                if self.near_station(x, y, self.config.station_min_distance):
                    logger.debug("Skipping desk cell (%d, %d): too close to a station", row, col)
                    continue
                self.create_desk(x, y)

    # ----------------------------
    # Construction
    # ----------------------------

    def create_station(self, x: float, y: float) -> Station:
        self.recharge_positions.append((x, y))
        return self.registry.spawn(
            EntityKind.STATION, x, y,
            width=self.config.station_width, height=self.config.station_height,
        )

    def create_desk(self, x: float, y: float) -> Obstacle:
        return self.registry.spawn(
            EntityKind.OBSTACLE, x, y,
            width=self.config.desk_width, height=self.config.desk_height,
        )

    def create_wall(self, x: float, y: float, width: float, height: float) -> Obstacle:
        return self.registry.spawn(EntityKind.OBSTACLE, x, y, width=width, height=height, border=True)

    def rebuild_borders(self) -> None:
        """Destroy the current border walls and recreate them for the current size"""
        for wall in self._border_walls:
            self.registry.destroy(wall)

        t = self.config.wall_thickness
        w, h = self.width, self.height
        self._border_walls = [
            self.create_wall(w / 2, t / 2, w, t),        # top
            self.create_wall(w / 2, h - t / 2, w, t),    # bottom
            self.create_wall(t / 2, h / 2, t, h),        # left
            self.create_wall(w - t / 2, h / 2, t, h),    # right
        ]

    # ----------------------------
    # Queries
    # ----------------------------

    def bounds(self) -> Tuple[float, float]:
        return self.width, self.height

    def cell_center(self, row: int, col: int) -> Tuple[float, float]:
        return (
            self.config.desk_start_x + col * self.spacing,
            self.config.desk_start_y + row * self.spacing,
        )

    def border_obstacles(self) -> List[Obstacle]:
        return [wall for wall in self._border_walls if wall.active]

    def all_obstacles(self) -> List[Obstacle]:
        """Every solid body; stations are not obstacles"""
        return self.registry.entities(EntityKind.OBSTACLE)

    def desks(self) -> List[Obstacle]:
        return [o for o in self.all_obstacles() if not o.border]

    def stations(self) -> List[Station]:
        return self.registry.entities(EntityKind.STATION)

    def is_occupied(self, x: float, y: float) -> bool:
        for obstacle in self.all_obstacles():
            if rect_contains(obstacle.x, obstacle.y, obstacle.width, obstacle.height, x, y):
                return True
        return False

    def near_station(self, x: float, y: float, min_distance: float) -> bool:
        for sx, sy in self.recharge_positions:
            if distance(x, y, sx, sy) < min_distance:
                return True
        return False
