"""
Entity registry: owns creation and destruction of every arena entity
"""

from __future__ import annotations

from itertools import count
from typing import Callable, Dict, List, Optional, Union

from .entities import Entity, EntityKind, KIND_TYPES

Listener = Callable[[str, Entity], None]


class EntityRegistry:
    """Live entities bucketed by kind, keyed by integer handle.

    ``destroy`` is idempotent: combat hits, TTL timers and bounds cleanup
    can all target the same entity within one tick.
    """

    def __init__(self, listener: Optional[Listener] = None) -> None:
        self._ids = count(1)
        self._by_kind: Dict[EntityKind, Dict[int, Entity]] = {kind: {} for kind in EntityKind}
        self._kind_of: Dict[int, EntityKind] = {}
        self.listener = listener

    def spawn(self, kind: EntityKind, x: float, y: float, **attrs) -> Entity:
        """Create an entity of ``kind`` at (x, y) and register it"""
        entity = KIND_TYPES[kind](x=x, y=y, **attrs)
        return self.add(entity)

    def add(self, entity: Entity) -> Entity:
        """Register an already-built entity and assign its handle"""
        entity.id = next(self._ids)
        entity.active = True
        self._by_kind[entity.kind][entity.id] = entity
        self._kind_of[entity.id] = entity.kind
        if self.listener is not None:
            self.listener("entity_spawned", entity)
        return entity

    def destroy(self, target: Union[Entity, int, None]) -> bool:
        """Remove an entity. Returns False when it was already gone."""
        if target is None:
            return False
        entity_id = target if isinstance(target, int) else target.id
        kind = self._kind_of.pop(entity_id, None)
        if kind is None:
            return False
        entity = self._by_kind[kind].pop(entity_id)
        entity.active = False
        if self.listener is not None:
            self.listener("entity_destroyed", entity)
        return True

    def get(self, entity_id: int) -> Optional[Entity]:
        kind = self._kind_of.get(entity_id)
        if kind is None:
            return None
        return self._by_kind[kind][entity_id]

    def is_alive(self, entity: Entity) -> bool:
        return entity.id in self._kind_of

    def active_count(self, kind: EntityKind) -> int:
        return len(self._by_kind[kind])

    def entities(self, kind: EntityKind) -> List[Entity]:
        """Snapshot list; safe to destroy entities while iterating it"""
        return list(self._by_kind[kind].values())

    def for_each(self, kind: EntityKind, fn: Callable[[Entity], None]) -> None:
        for entity in self.entities(kind):
            if entity.active:
                fn(entity)

    def clear(self, kind: EntityKind) -> int:
        """Destroy every entity of a kind, returning how many were removed"""
        removed = 0
        for entity in self.entities(kind):
            if self.destroy(entity):
                removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._kind_of)
