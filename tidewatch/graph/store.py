"""Read-only store of every entity and relationship in the loaded graph.

A thin read-only layer over a NetworkX ``MultiDiGraph`` index. Each
graph edge carries its ``Relationship`` record under the
``relationship`` attribute, so incident-edge queries return the same
resolved instances the rest of the engine holds.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

import networkx as nx

from tidewatch.graph.models import Entity, EntityType, Relationship

logger = logging.getLogger(__name__)


class EntityGraph:
    """Lookup by identifier plus incident-relationship queries.

    Parameters
    ----------
    entities:
        Entity records in document order.
    relationships:
        Resolved relationships; every endpoint must be one of ``entities``.
    directed:
        Whether the source document declared itself directed. Informational
        only: neighbourhood queries treat relationships as undirected.
    """

    def __init__(
        self,
        entities: Iterable[Entity],
        relationships: Iterable[Relationship],
        directed: bool = True,
    ) -> None:
        self._entities: dict[str, Entity] = {}
        for entity in entities:
            self._entities.setdefault(entity.id, entity)

        self._relationships: tuple[Relationship, ...] = tuple(relationships)
        self.directed = directed

        self._index = nx.MultiDiGraph()
        self._index.add_nodes_from(self._entities)
        for rel in self._relationships:
            if rel.source.id not in self._entities or rel.target.id not in self._entities:
                raise ValueError(f"{rel!r} references an entity outside the store")
            self._index.add_edge(rel.source.id, rel.target.id, relationship=rel)

    # -- Lookup --------------------------------------------------------------

    def get(self, entity_id: str) -> Entity | None:
        return self._entities.get(entity_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    @property
    def entities(self) -> tuple[Entity, ...]:
        return tuple(self._entities.values())

    @property
    def relationships(self) -> tuple[Relationship, ...]:
        return self._relationships

    @property
    def graph(self) -> nx.MultiDiGraph:
        return self._index

    @property
    def node_count(self) -> int:
        return self._index.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self._index.number_of_edges()

    # -- Queries -------------------------------------------------------------

    def incident(self, entity: Entity | str) -> list[Relationship]:
        """All relationships touching ``entity``, in document order.

        A self-loop is reported once.
        """
        entity_id = entity if isinstance(entity, str) else entity.id
        if entity_id not in self._index:
            return []
        seen: dict[int, Relationship] = {}
        for _, _, data in self._index.out_edges(entity_id, data=True):
            rel = data["relationship"]
            seen[id(rel)] = rel
        for _, _, data in self._index.in_edges(entity_id, data=True):
            rel = data["relationship"]
            seen[id(rel)] = rel
        return sorted(seen.values(), key=lambda r: r.index)

    def degree(self, entity: Entity | str) -> int:
        return len(self.incident(entity))

    def type_counts(self) -> dict[EntityType, int]:
        counts: dict[EntityType, int] = {}
        for entity in self._entities.values():
            counts[entity.type] = counts.get(entity.type, 0) + 1
        return counts

    def summary(self) -> dict[str, object]:
        return {
            "node_count": self.node_count,
            "edge_count": self.edge_count,
            "directed": self.directed,
            "type_counts": {t.value: n for t, n in self.type_counts().items()},
        }
