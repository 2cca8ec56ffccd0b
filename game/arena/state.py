"""
Per-session game state and the notification log read by collaborators
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional

from .entities import EventDesk, Player


class DirectorMode(Enum):
    NORMAL = "normal"
    SPECIAL_EVENT = "special_event"
    RUSH_EVENT = "rush_event"


class GameEvent(NamedTuple):
    """Discrete notification for rendering / audio / UI collaborators"""
    name: str
    data: Dict[str, Any]


@dataclass
class GameState:
    """Everything the director and combat engine mutate during a session.

    A restart builds a new GameState rather than resetting this one.
    """
    player: Player
    wave: int = 1
    kills: int = 0
    score: int = 0
    mode: DirectorMode = DirectorMode.NORMAL
    spawning: bool = False
    game_over: bool = False
    recharging: bool = False
    last_shot_ms: float = -math.inf
    now_ms: float = 0.0
    damage_taken: float = 0.0
    special_event_desk: Optional[EventDesk] = None
    events: List[GameEvent] = field(default_factory=list)

    @property
    def special_event_active(self) -> bool:
        return self.mode is DirectorMode.SPECIAL_EVENT

    @property
    def rush_active(self) -> bool:
        return self.mode is DirectorMode.RUSH_EVENT

    def emit(self, name: str, **data) -> None:
        self.events.append(GameEvent(name, data))

    def drain_events(self) -> List[GameEvent]:
        events, self.events = self.events, []
        return events
