"""
Headless kinematic physics: movement, solid contact and overlap reports
"""

from __future__ import annotations

from typing import List, NamedTuple

from .config import ArenaConfig
from .entities import ADVERSARY_KINDS, Entity, EntityKind, Player
from .layout import ArenaLayout
from .registry import EntityRegistry
from .utils import (
    circle_collide,
    circle_rect_collide,
    clamp,
    distance,
    normalize,
    push_out_of_rect,
)

OVERLAP = "overlap"
COLLISION = "collision"


class ContactEvent(NamedTuple):
    a: Entity
    b: Entity
    kind: str


class ArenaPhysics:
    """Moves bodies by velocity each step and reports contacts"""

    def __init__(self, registry: EntityRegistry, layout: ArenaLayout, config: ArenaConfig) -> None:
        self.registry = registry
        self.layout = layout
        self.config = config

    # ----------------------------
    # Mutators / queries
    # ----------------------------

    @staticmethod
    def set_velocity(entity: Entity, vx: float, vy: float) -> None:
        entity.vx = vx
        entity.vy = vy

    @staticmethod
    def distance(a: Entity, b: Entity) -> float:
        return distance(a.x, a.y, b.x, b.y)

    def freeze(self) -> None:
        """Zero every adversary velocity"""
        for kind in ADVERSARY_KINDS:
            for entity in self.registry.entities(kind):
                self.set_velocity(entity, 0.0, 0.0)

    # ----------------------------
    # Step
    # ----------------------------

    def step(self, dt: float, player: Player) -> List[ContactEvent]:
        """Advance ``dt`` seconds and return this step's contacts"""
        self._steer_adversaries(player)
        contacts: List[ContactEvent] = []

        damping = max(0.0, 1.0 - self.config.knockback_damping * dt)
        player.x += (player.vx + player.knock_vx) * dt
        player.y += (player.vy + player.knock_vy) * dt
        player.knock_vx *= damping
        player.knock_vy *= damping

        for kind in (EntityKind.GROUND_ADVERSARY, EntityKind.FLYING_ADVERSARY, EntityKind.PROJECTILE):
            for e in self.registry.entities(kind):
                e.x += e.vx * dt
                e.y += e.vy * dt

        contacts.extend(self._resolve_solids(player))
        for enemy in self.registry.entities(EntityKind.GROUND_ADVERSARY):
            self._resolve_solids(enemy)

        self._keep_in_bounds(player)
        for enemy in self.registry.entities(EntityKind.GROUND_ADVERSARY):
            self._keep_in_bounds(enemy)

        contacts.extend(self._overlaps(player))
        return contacts

    def _steer_adversaries(self, player: Player) -> None:
        stop = self.config.chase_stop_distance
        for enemy in self.registry.entities(EntityKind.GROUND_ADVERSARY):
            dx = player.x - enemy.x
            dy = player.y - enemy.y
            if dx * dx + dy * dy > stop * stop:
                nx, ny = normalize(dx, dy)
                self.set_velocity(enemy, nx * enemy.speed, ny * enemy.speed)
            else:
                self.set_velocity(enemy, 0.0, 0.0)

    def _resolve_solids(self, body: Entity) -> List[ContactEvent]:
        contacts = []
        for obstacle in self.layout.all_obstacles():
            nx, ny = push_out_of_rect(
                body.x, body.y, body.radius,
                obstacle.x, obstacle.y, obstacle.width, obstacle.height,
            )
            if (nx, ny) != (body.x, body.y):
                body.x, body.y = nx, ny
                contacts.append(ContactEvent(body, obstacle, COLLISION))
        return contacts

    def _keep_in_bounds(self, body: Entity) -> None:
        w, h = self.layout.bounds()
        r = body.radius
        body.x = clamp(body.x, r, w - r)
        body.y = clamp(body.y, r, h - r)

    def _overlaps(self, player: Player) -> List[ContactEvent]:
        contacts: List[ContactEvent] = []
        registry = self.registry
        adversaries = [e for kind in ADVERSARY_KINDS for e in registry.entities(kind)]

        for shot in registry.entities(EntityKind.PROJECTILE):
            for enemy in adversaries:
                if circle_collide(shot.x, shot.y, shot.radius, enemy.x, enemy.y, enemy.radius):
                    contacts.append(ContactEvent(shot, enemy, OVERLAP))

        if not player.visible:
            return contacts

        for enemy in adversaries:
            if circle_collide(player.x, player.y, player.radius, enemy.x, enemy.y, enemy.radius):
                contacts.append(ContactEvent(enemy, player, OVERLAP))

        for station in registry.entities(EntityKind.STATION):
            if circle_rect_collide(player.x, player.y, player.radius,
                                   station.x, station.y, station.width, station.height):
                contacts.append(ContactEvent(player, station, OVERLAP))

        for pickup in registry.entities(EntityKind.PICKUP):
            if circle_collide(player.x, player.y, player.radius, pickup.x, pickup.y, pickup.radius):
                contacts.append(ContactEvent(player, pickup, OVERLAP))

        return contacts
