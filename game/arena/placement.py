"""
Randomised spawn placement with a bounded number of attempts
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Optional, Tuple

from .layout import ArenaLayout
from .utils import distance

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class PlacementHelper:
    """Rejection sampling inside the current arena bounds.

    Sampling never loops forever: after ``max_attempts`` the last sample is
    used even if it is too close to the player.
    """

    def __init__(self, layout: ArenaLayout, rng: random.Random, margin: float = 100.0) -> None:
        self.layout = layout
        self.rng = rng
        self.margin = margin

    def random_point(self, margin: Optional[float] = None) -> Point:
        m = self.margin if margin is None else margin
        w, h = self.layout.bounds()
        # Degenerate arenas collapse to the centre line instead of raising
        x = self.rng.uniform(min(m, w / 2), max(w - m, w / 2))
        y = self.rng.uniform(min(m, h / 2), max(h - m, h / 2))
        return x, y

    def find_spawn_position(self, player: Point, min_distance: float, max_attempts: int) -> Point:
        px, py = player
        x, y = self.random_point()
        attempts = 1
        while distance(x, y, px, py) < min_distance and attempts < max_attempts:
            x, y = self.random_point()
            attempts += 1
        return x, y

    def find_free_desk_cell(
        self,
        row: int,
        col: int,
        recharge_positions: Iterable[Point],
        min_distance: float,
    ) -> Optional[Point]:
        """Centre of grid cell (row, col), or None when the cell must be skipped"""
        x, y = self.layout.cell_center(row, col)
        for sx, sy in recharge_positions:
            if distance(x, y, sx, sy) < min_distance:
                logger.debug("Desk cell (%d, %d) skipped: station at (%.0f, %.0f)", row, col, sx, sy)
                return None
        if self.layout.is_occupied(x, y):
            logger.debug("Desk cell (%d, %d) skipped: already occupied", row, col)
            return None
        return x, y
