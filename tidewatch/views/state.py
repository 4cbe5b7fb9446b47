"""Selection, highlight and filter state shared by both views.

The state is an explicit object owned by ``SelectionController``; the
primary view, the info panel and the projection view subscribe to its
events instead of reading globals.

States:

  - *idle*: nothing selected, both highlight sets empty
  - *selected*: one entity selected; the highlighted-node set holds it and
    its rendered neighbours, the highlighted-relationship set holds the
    rendered relationships touching it

Events (listeners are called synchronously, in registration order):

  - ``restyle``: highlight state changed; payload is the HighlightState
  - ``filter``: a type filter changed; payload is the FilterState
  - ``subgraph``: the rendered working subgraph was replaced
  - ``notice``: user-facing, non-fatal message (e.g. search miss)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from tidewatch.graph.models import Entity, EntityType, Relationship
from tidewatch.graph.sampler import WorkingSubgraph
from tidewatch.views.styles import LinkStyle, NodeStyle, link_style, node_style

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]

EVENTS = ("restyle", "filter", "subgraph", "notice")

NOT_FOUND_NOTICE = "No matching entity found"


class FilterState:
    """One flag per entity type; all enabled by default."""

    def __init__(self, enabled: dict[EntityType, bool] | None = None) -> None:
        self._enabled: dict[EntityType, bool] = {t: True for t in EntityType}
        if enabled:
            self._enabled.update(enabled)

    def is_enabled(self, entity_type: EntityType) -> bool:
        return self._enabled.get(entity_type, True)

    def set(self, entity_type: EntityType, enabled: bool) -> bool:
        """Set a flag; returns whether it changed."""
        changed = self._enabled.get(entity_type, True) != enabled
        self._enabled[entity_type] = enabled
        return changed

    def entity_visible(self, entity: Entity) -> bool:
        return self.is_enabled(entity.type)

    def relationship_visible(self, rel: Relationship) -> bool:
        return self.entity_visible(rel.source) and self.entity_visible(rel.target)

    def as_dict(self) -> dict[str, bool]:
        return {t.value: v for t, v in self._enabled.items()}


@dataclass
class HighlightState:
    """Current selection and the emphasis derived from it."""

    selected: Entity | None = None
    nodes: set[str] = field(default_factory=set)
    relationships: set[Relationship] = field(default_factory=set)

    @property
    def active(self) -> bool:
        return bool(self.nodes)

    def reset(self) -> None:
        self.selected = None
        self.nodes = set()
        self.relationships = set()


@dataclass(frozen=True)
class SearchResult:
    term: str
    status: str                  # found, not_found, empty
    entity: Entity | None = None
    matches: int = 0

    @property
    def found(self) -> bool:
        return self.status == "found"


class SelectionController:
    """Drives the selection/highlight state machine over the rendered set.

    Parameters
    ----------
    subgraph:
        The working subgraph currently rendered in the primary view.
    filters:
        Shared filter state. A fresh all-enabled state if omitted.
    """

    def __init__(
        self,
        subgraph: WorkingSubgraph,
        filters: FilterState | None = None,
    ) -> None:
        self.subgraph = subgraph
        self.filters = filters or FilterState()
        self.highlight = HighlightState()
        self._listeners: dict[str, list[Listener]] = {e: [] for e in EVENTS}

    # -- Events --------------------------------------------------------------

    def on(self, event: str, listener: Listener) -> None:
        if event not in self._listeners:
            raise ValueError(f"Unknown event {event!r}; expected one of {EVENTS}")
        self._listeners[event].append(listener)

    def _emit(self, event: str, payload: Any) -> None:
        for listener in self._listeners[event]:
            listener(payload)

    # -- Transitions ---------------------------------------------------------

    def select(self, entity: Entity) -> HighlightState:
        """Select ``entity`` and highlight its rendered neighbourhood."""
        nodes = {entity.id}
        relationships: set[Relationship] = set()
        for rel in self.subgraph.relationships:
            if rel.touches(entity):
                nodes.add(rel.other(entity).id)
                relationships.add(rel)

        self.highlight.selected = entity
        self.highlight.nodes = nodes
        self.highlight.relationships = relationships

        logger.debug(
            "Selected %s: %d highlighted node(s), %d relationship(s)",
            entity.id, len(nodes), len(relationships),
        )
        self._emit("restyle", self.highlight)
        return self.highlight

    def clear(self) -> HighlightState:
        self.highlight.reset()
        logger.debug("Highlights cleared")
        self._emit("restyle", self.highlight)
        return self.highlight

    def search(self, term: str) -> SearchResult:
        """Select the first rendered entity whose id contains ``term``."""
        term = (term or "").strip()
        if not term:
            return SearchResult(term=term, status="empty")

        needle = term.lower()
        matches = [e for e in self.subgraph.entities if needle in e.id.lower()]
        if not matches:
            logger.info("Search %r: no match", term)
            self._emit("notice", NOT_FOUND_NOTICE)
            return SearchResult(term=term, status="not_found")

        self.select(matches[0])
        return SearchResult(term=term, status="found", entity=matches[0], matches=len(matches))

    def set_filter(self, entity_type: EntityType, enabled: bool) -> bool:
        """Toggle a type filter. Highlight state is left as is."""
        changed = self.filters.set(entity_type, enabled)
        if changed:
            logger.debug("Filter %s -> %s", entity_type.value, enabled)
            self._emit("filter", self.filters)
        return changed

    def set_subgraph(self, subgraph: WorkingSubgraph) -> None:
        """Replace the rendered set; the selection is re-derived against it."""
        self.subgraph = subgraph
        selected = self.highlight.selected
        if selected is not None and selected.id in subgraph:
            self.select(subgraph.get(selected.id))
        elif selected is not None:
            self.clear()
        self._emit("subgraph", subgraph)

    # -- Derived views -------------------------------------------------------

    def visible_entities(self) -> list[Entity]:
        return [e for e in self.subgraph.entities if self.filters.entity_visible(e)]

    def visible_relationships(self) -> list[Relationship]:
        return [r for r in self.subgraph.relationships if self.filters.relationship_visible(r)]

    def node_styles(self) -> dict[str, NodeStyle]:
        nodes = self.highlight.nodes
        return {
            e.id: node_style(
                e,
                self.subgraph.is_seed(e),
                nodes,
                visible=self.filters.entity_visible(e),
            )
            for e in self.subgraph.entities
        }

    def link_styles(self) -> list[tuple[Relationship, LinkStyle]]:
        active = self.highlight.active
        highlighted = self.highlight.relationships
        return [
            (
                rel,
                link_style(
                    rel,
                    active,
                    rel in highlighted,
                    visible=self.filters.relationship_visible(rel),
                ),
            )
            for rel in self.subgraph.relationships
        ]
