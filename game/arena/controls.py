"""
Input intents and the key-state tracker that produces them
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Set, Tuple


@dataclass
class InputIntent:
    """What the player wants this tick"""
    move_x: float = 0.0
    move_y: float = 0.0
    fire: bool = False          # pressed this tick
    recharge: bool = False      # held
    event_action: bool = False  # pressed this tick
    restart: bool = False
    aim: Optional[Tuple[float, float]] = None


# move: 0 stay, 1 up, 2 down, 3 left, 4 right, 5 up-left, 6 up-right, 7 down-left, 8 down-right
MOVE_DIRECTIONS = [
    (0.0, 0.0),
    (0.0, -1.0),
    (0.0, 1.0),
    (-1.0, 0.0),
    (1.0, 0.0),
    (-1.0, -1.0),
    (1.0, -1.0),
    (-1.0, 1.0),
    (1.0, 1.0),
]


class KeyboardIntents:
    """Tracks held keys plus fresh presses between polls.

    Keys are symbolic: up, down, left, right, fire, recharge, event, restart.
    """

    def __init__(self) -> None:
        self.held: Set[str] = set()
        self._pressed: Set[str] = set()

    def press(self, name: str) -> None:
        if name not in self.held:
            self._pressed.add(name)
        self.held.add(name)

    def release(self, name: str) -> None:
        self.held.discard(name)

    def poll(self) -> InputIntent:
        held = self.held
        move_x = (1.0 if "right" in held else 0.0) - (1.0 if "left" in held else 0.0)
        move_y = (1.0 if "down" in held else 0.0) - (1.0 if "up" in held else 0.0)
        intent = InputIntent(
            move_x=move_x,
            move_y=move_y,
            fire="fire" in self._pressed,
            recharge="recharge" in held,
            event_action="event" in self._pressed,
            restart="restart" in self._pressed,
        )
        self._pressed.clear()
        return intent
