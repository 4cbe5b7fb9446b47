"""Entity and relationship records.

Relationships hold direct references to the two ``Entity`` records they
connect. The references are resolved once, by the loader, so traversal
never goes back through identifier lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class EntityType(str, Enum):
    ORGANIZATION = "organization"
    PERSON = "person"
    VESSEL = "vessel"
    LOCATION = "location"
    EVENT = "event"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "EntityType":
        """Map a raw document ``type`` to an EntityType (``unknown`` if absent)."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.UNKNOWN

    @property
    def label(self) -> str:
        return self.value.capitalize()


# The five types the dataset defines; ``unknown`` is a fallback only.
KNOWN_TYPES: tuple[EntityType, ...] = (
    EntityType.ORGANIZATION,
    EntityType.PERSON,
    EntityType.VESSEL,
    EntityType.LOCATION,
    EntityType.EVENT,
)


@dataclass(eq=False)
class Entity:
    """A node in the relationship network.

    Position and velocity are mutated by the layout engine; ``fx``/``fy``
    are set only while the entity is pinned by a drag.
    """

    id: str
    type: EntityType = EntityType.UNKNOWN
    country: str = ""
    attributes: dict[str, Any] = field(default_factory=dict)
    x: float | None = None
    y: float | None = None
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None

    @property
    def position(self) -> tuple[float, float]:
        return (self.x or 0.0, self.y or 0.0)

    def __repr__(self) -> str:
        return f"Entity({self.id!r}, {self.type.value})"


@dataclass(frozen=True, eq=False)
class Relationship:
    """A directed, weighted connection between two resolved entities.

    Identity-compared: two relationships with the same endpoints are still
    distinct records.
    """

    source: Entity
    target: Entity
    weight: float = 1.0
    index: int = 0
    attributes: dict[str, Any] = field(default_factory=dict)

    def touches(self, entity: Entity) -> bool:
        return self.source.id == entity.id or self.target.id == entity.id

    def other(self, entity: Entity) -> Entity:
        """The endpoint opposite ``entity``."""
        return self.target if self.source.id == entity.id else self.source

    def __repr__(self) -> str:
        return f"Relationship({self.source.id!r} -> {self.target.id!r}, w={self.weight})"
