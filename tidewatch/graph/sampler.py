"""Sampling of a renderable working subgraph around the seed entities.

Starting from the seed entities (the investigation's entities of
interest) the sampler keeps every relationship touching a seed plus both
of its endpoints. When that first-order neighbourhood is small it makes
exactly one more pass with every first-order entity as a seed. This is a
bounded two-hop fallback, not a breadth-first search.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from tidewatch.graph.models import Entity, Relationship
from tidewatch.graph.store import EntityGraph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkingSubgraph:
    """The entities and relationships chosen for rendering.

    Every relationship's endpoints are members of ``entities``.
    """

    entities: tuple[Entity, ...]
    relationships: tuple[Relationship, ...]
    seeds: frozenset[str]
    expanded: bool = False
    _by_id: dict[str, Entity] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {e.id: e for e in self.entities})

    @property
    def entity_ids(self) -> frozenset[str]:
        return frozenset(self._by_id)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._by_id

    def __len__(self) -> int:
        return len(self.entities)

    def get(self, entity_id: str) -> Entity | None:
        return self._by_id.get(entity_id)

    def is_seed(self, entity: Entity | str) -> bool:
        entity_id = entity if isinstance(entity, str) else entity.id
        return entity_id in self.seeds


class NeighborhoodSampler:
    """Derive the working subgraph from a list of seed identifiers.

    Parameters
    ----------
    graph:
        The full entity graph.
    expansion_threshold:
        If the first-order neighbourhood has fewer entities than this, a
        single second-order pass is made. Default 50.
    """

    def __init__(self, graph: EntityGraph, expansion_threshold: int = 50) -> None:
        self._graph = graph
        self._threshold = expansion_threshold

    def sample(self, seeds: Iterable[str]) -> WorkingSubgraph:
        seed_ids: set[str] = set()
        for seed in seeds:
            if seed in self._graph:
                seed_ids.add(seed)
            else:
                logger.debug("Seed %r not in graph; skipping", seed)

        node_ids = set(seed_ids)
        relationships: dict[int, Relationship] = {}
        self._expand(seed_ids, node_ids, relationships)

        expanded = False
        if len(node_ids) < self._threshold:
            # One-time two-hop fallback over the first-order set
            self._expand(set(node_ids), node_ids, relationships)
            expanded = True

        entities = tuple(e for e in self._graph if e.id in node_ids)
        ordered = tuple(sorted(relationships.values(), key=lambda r: r.index))

        logger.info(
            "Sampled %d entities and %d relationships from %d seed(s)%s",
            len(entities), len(ordered), len(seed_ids),
            " with second-order expansion" if expanded else "",
        )
        return WorkingSubgraph(
            entities=entities,
            relationships=ordered,
            seeds=frozenset(seed_ids),
            expanded=expanded,
        )

    def _expand(
        self,
        frontier: set[str],
        node_ids: set[str],
        relationships: dict[int, Relationship],
    ) -> None:
        for entity_id in frontier:
            for rel in self._graph.incident(entity_id):
                relationships[id(rel)] = rel
                node_ids.add(rel.source.id)
                node_ids.add(rel.target.id)
