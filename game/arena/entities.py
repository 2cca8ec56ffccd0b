"""
Game entity dataclasses

Every live thing in the arena is one of the kinds in EntityKind. The
registry assigns the integer handle (``id``) at spawn time.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Optional

from .meters import ResourceMeter


class EntityKind(Enum):
    PLAYER = "player"
    GROUND_ADVERSARY = "ground_adversary"
    FLYING_ADVERSARY = "flying_adversary"
    PROJECTILE = "projectile"
    PICKUP = "pickup"
    STATION = "station"
    OBSTACLE = "obstacle"
    EVENT_DESK = "event_desk"


ADVERSARY_KINDS = (EntityKind.GROUND_ADVERSARY, EntityKind.FLYING_ADVERSARY)


@dataclass(eq=False)
class Entity:
    """Common position + handle bookkeeping"""
    x: float
    y: float
    id: int = 0
    active: bool = True

    kind: ClassVar[EntityKind]


@dataclass(eq=False)
class Player(Entity):
    """The controlled avatar"""
    radius: float = 14.0
    vx: float = 0.0
    vy: float = 0.0
    knock_vx: float = 0.0
    knock_vy: float = 0.0
    facing_angle: float = 0.0  # facing right
    base_speed: float = 120.0
    speed_boost: float = 0.0
    max_health: float = 100.0
    max_energy: float = 100.0
    invulnerable_until: float = -math.inf
    visible: bool = True
    health: ResourceMeter = field(default=None)  # type: ignore
    energy: ResourceMeter = field(default=None)  # type: ignore

    kind: ClassVar[EntityKind] = EntityKind.PLAYER

    def __post_init__(self):
        if self.health is None:
            self.health = ResourceMeter(self.max_health)
        if self.energy is None:
            self.energy = ResourceMeter(self.max_energy)

    @property
    def speed(self) -> float:
        return self.base_speed + self.speed_boost

    def is_invulnerable(self, now_ms: float) -> bool:
        return now_ms < self.invulnerable_until


@dataclass(eq=False)
class GroundAdversary(Entity):
    """Enemy that chases the player"""
    vx: float = 0.0
    vy: float = 0.0
    radius: float = 12.0
    speed: float = 30.0  # px/s

    kind: ClassVar[EntityKind] = EntityKind.GROUND_ADVERSARY


@dataclass(eq=False)
class FlyingAdversary(Entity):
    """Rush-event enemy crossing the arena on a fixed heading"""
    vx: float = 0.0
    vy: float = 0.0
    radius: float = 12.0

    kind: ClassVar[EntityKind] = EntityKind.FLYING_ADVERSARY


@dataclass(eq=False)
class Projectile(Entity):
    """Player-fired shot"""
    vx: float = 0.0
    vy: float = 0.0
    radius: float = 4.0
    ttl_ms: float = 1000.0

    kind: ClassVar[EntityKind] = EntityKind.PROJECTILE


@dataclass(eq=False)
class Pickup(Entity):
    """Health restoration item"""
    radius: float = 6.0
    heal: float = 30.0

    kind: ClassVar[EntityKind] = EntityKind.PICKUP


@dataclass(eq=False)
class Station(Entity):
    """Fixed recharge point"""
    width: float = 112.0
    height: float = 72.0
    recharging: bool = False  # set while the player recharges this tick

    kind: ClassVar[EntityKind] = EntityKind.STATION


@dataclass(eq=False)
class Obstacle(Entity):
    """Solid blocking body: a border wall or a desk"""
    width: float = 64.0
    height: float = 40.0
    border: bool = False

    kind: ClassVar[EntityKind] = EntityKind.OBSTACLE


@dataclass(eq=False)
class EventDesk(Entity):
    """Objective target of the special event"""
    width: float = 113.0
    height: float = 68.0
    replaced: Optional[Obstacle] = None

    kind: ClassVar[EntityKind] = EntityKind.EVENT_DESK


KIND_TYPES = {
    cls.kind: cls
    for cls in (Player, GroundAdversary, FlyingAdversary, Projectile, Pickup, Station, Obstacle, EventDesk)
}
