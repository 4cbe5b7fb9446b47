"""Graph document → resolved EntityGraph conversion.

The document is the node-link JSON the investigation dataset ships in:
a ``nodes`` list plus a relationship list under ``links`` or ``edges``.
Relationship endpoints may be given as entity identifiers or as integer
positions into the node list.

Loading is two passes. Pass 1 builds the Entity records. Pass 2 links
every relationship to the two records it names; a relationship whose
endpoints do not both resolve is dropped here and never reaches the
store, the sampler, or the layout.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from tidewatch.errors import GraphLoadError
from tidewatch.graph.models import Entity, EntityType, Relationship
from tidewatch.graph.store import EntityGraph

logger = logging.getLogger(__name__)

# Keys that become Entity fields rather than free-form attributes.
_ENTITY_FIELDS = {"id", "type", "country"}
_RELATIONSHIP_FIELDS = {"source", "target", "value", "weight"}


@dataclass
class LoadStats:
    """Statistics from a graph loading operation."""

    entities_loaded: int = 0
    relationships_loaded: int = 0
    dropped_relationships: int = 0
    skipped_entities: int = 0
    duplicate_entities: int = 0
    relationship_key: str = ""
    type_counts: dict[str, int] = field(default_factory=dict)


class GraphLoader:
    """Convert a parsed graph document into an ``EntityGraph``."""

    def load(self, document: Any) -> tuple[EntityGraph, LoadStats]:
        """Parse and link ``document``.

        Raises
        ------
        GraphLoadError
            If the document is not a mapping or has no ``nodes`` list.
        """
        if not isinstance(document, dict):
            raise GraphLoadError(
                f"Data format error: expected a JSON object, got {type(document).__name__}"
            )
        raw_nodes = document.get("nodes")
        if not isinstance(raw_nodes, list):
            raise GraphLoadError("Data format error: No nodes found")

        stats = LoadStats()
        raw_links, stats.relationship_key = self._relationship_list(document)

        logger.info("Found %d nodes and %d links", len(raw_nodes), len(raw_links))

        # Pass 1: entities
        entities: dict[str, Entity] = {}
        positions: list[Entity | None] = []
        for raw in raw_nodes:
            entity = self._build_entity(raw)
            if entity is None:
                stats.skipped_entities += 1
                positions.append(None)
                continue
            if entity.id in entities:
                stats.duplicate_entities += 1
                positions.append(entities[entity.id])
                continue
            entities[entity.id] = entity
            positions.append(entity)
            stats.type_counts[entity.type.value] = stats.type_counts.get(entity.type.value, 0) + 1

        stats.entities_loaded = len(entities)

        # Pass 2: resolve relationship endpoints once
        relationships: list[Relationship] = []
        for index, raw in enumerate(raw_links):
            rel = self._link(raw, index, entities, positions)
            if rel is None:
                stats.dropped_relationships += 1
                continue
            relationships.append(rel)

        stats.relationships_loaded = len(relationships)

        graph = EntityGraph(
            entities.values(),
            relationships,
            directed=bool(document.get("directed", True)),
        )

        logger.info(
            "After processing: %d nodes and %d valid links (%d dropped)",
            stats.entities_loaded, stats.relationships_loaded,
            stats.dropped_relationships,
        )
        return graph, stats

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    def _relationship_list(document: dict[str, Any]) -> tuple[list[Any], str]:
        links = document.get("links")
        if isinstance(links, list):
            return links, "links"
        edges = document.get("edges")
        if isinstance(edges, list):
            logger.debug("Using 'edges' as 'links'")
            return edges, "edges"
        logger.error("No links/edges found in data")
        return [], ""

    @staticmethod
    def _build_entity(raw: Any) -> Entity | None:
        if not isinstance(raw, dict):
            return None
        eid = raw.get("id")
        if eid is None or eid == "":
            return None

        country = raw.get("country") or ""
        return Entity(
            id=str(eid),
            type=EntityType.parse(raw.get("type")),
            country=str(country),
            attributes={k: v for k, v in raw.items() if k not in _ENTITY_FIELDS},
        )

    def _link(
        self,
        raw: Any,
        index: int,
        entities: dict[str, Entity],
        positions: list[Entity | None],
    ) -> Relationship | None:
        if not isinstance(raw, dict):
            logger.debug("Dropping link %d: not an object", index)
            return None

        source = self._resolve(raw.get("source"), entities, positions)
        target = self._resolve(raw.get("target"), entities, positions)
        if source is None or target is None:
            logger.debug(
                "Dropping link %d: unresolved endpoint (%r -> %r)",
                index, raw.get("source"), raw.get("target"),
            )
            return None

        return Relationship(
            source=source,
            target=target,
            weight=_weight(raw),
            index=index,
            attributes={k: v for k, v in raw.items() if k not in _RELATIONSHIP_FIELDS},
        )

    @staticmethod
    def _resolve(
        ref: Any,
        entities: dict[str, Entity],
        positions: list[Entity | None],
    ) -> Entity | None:
        """Resolve an endpoint given as identifier, falling back to node index."""
        if ref is None or isinstance(ref, bool):
            return None
        if isinstance(ref, dict):
            ref = ref.get("id")
            if ref is None:
                return None
        entity = entities.get(str(ref))
        if entity is not None:
            return entity
        if isinstance(ref, int) and 0 <= ref < len(positions):
            return positions[ref]
        return None


def _weight(raw: dict[str, Any]) -> float:
    """Relationship weight; missing, non-positive, or non-numeric values default to 1."""
    value = raw.get("value", raw.get("weight"))
    if isinstance(value, bool):
        return 1.0
    try:
        weight = float(value)
    except (TypeError, ValueError):
        return 1.0
    if not math.isfinite(weight) or weight <= 0:
        return 1.0
    return weight
