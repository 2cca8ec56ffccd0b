"""
Arena expansion: every wave past the threshold adds a desk column or row
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from .config import ArenaConfig
from .layout import ArenaLayout
from .placement import PlacementHelper

logger = logging.getLogger(__name__)


class ArenaExpansion:
    """Alternates between widening (new column) and heightening (new row)"""

    def __init__(self, layout: ArenaLayout, placement: PlacementHelper, config: ArenaConfig) -> None:
        self.layout = layout
        self.placement = placement
        self.config = config

    def direction_for_wave(self, wave: int) -> str:
        return "column" if (wave - self.config.expansion_after_wave) % 2 == 0 else "row"

    def expand(self, wave: int) -> str:
        """Grow the arena by one desk strip and return which way it grew"""
        layout = self.layout
        direction = self.direction_for_wave(wave)

        if direction == "column":
            layout.desk_cols += 1
            layout.width += layout.spacing
            col = layout.desk_cols - 1
            cells = [(row, col) for row in range(layout.desk_rows)]
        else:
            layout.desk_rows += 1
            layout.height += layout.spacing
            row = layout.desk_rows - 1
            cells = [(row, col) for col in range(layout.desk_cols)]

        placed = self._place_strip(cells)
        layout.rebuild_borders()

        logger.info(
            "Arena expanded by a %s at wave %d: now %.0fx%.0f, %d new desks",
            direction, wave, layout.width, layout.height, len(placed),
        )
        return direction

    def _place_strip(self, cells: List[Tuple[int, int]]) -> list:
        placed = []
        for row, col in cells:
            cell = self.placement.find_free_desk_cell(
                row, col, self.layout.recharge_positions, self.config.station_min_distance
            )
            if cell is None:
                continue
            placed.append(self.layout.create_desk(*cell))
        return placed
