"""Explorer — the user-facing facade over the exploration engine.

Wires the loaded entity graph, the sampled working subgraph, the layout
engine, the shared selection state and the projection view together,
and exposes the analyst's controls plus the render models a drawing
surface consumes.

Usage::

    explorer = await Explorer.load()                  # from settings
    explorer.advance(1 / 60)                          # per frame
    explorer.search("oasis")
    info = explorer.info_panel()
    print(info.risk.score, info.risk.message)
    explorer.set_filter(EntityType.PERSON, False)
    scene = explorer.projection.scene
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

import httpx

from tidewatch.config.settings import Settings, settings as default_settings
from tidewatch.data.sources import DataSource, ProjectionMap, parse_projection
from tidewatch.errors import DragError, ProjectionLoadError
from tidewatch.graph.analysis import ConnectionAnalysis, TypeDistribution
from tidewatch.graph.loader import GraphLoader, LoadStats
from tidewatch.graph.models import Entity, EntityType, Relationship
from tidewatch.graph.risk import RiskAssessment, RiskScorer
from tidewatch.graph.sampler import NeighborhoodSampler, WorkingSubgraph
from tidewatch.graph.store import EntityGraph
from tidewatch.layout.engine import LayoutEngine, LayoutFrame
from tidewatch.views.projection import ProjectionView
from tidewatch.views.state import SearchResult, SelectionController
from tidewatch.views.styles import LinkStyle, NodeStyle
from tidewatch.views.viewport import Viewport

logger = logging.getLogger(__name__)

DRAG_PHASES = ("start", "move", "end")


def _clean_projection(projection: Any) -> ProjectionMap:
    """Normalise a caller-supplied projection; malformed input becomes empty."""
    if not projection:
        return {}
    try:
        return parse_projection(projection)
    except ProjectionLoadError as exc:
        logger.warning("Ignoring projection data: %s", exc)
        return {}


# ---------------------------------------------------------------------------
# Render models
# ---------------------------------------------------------------------------


@dataclass
class EntityTooltip:
    id: str
    type_label: str
    country: str
    connections: int


@dataclass
class EntityInfo:
    """Everything the info panel shows for the selected entity."""

    id: str
    type: EntityType
    type_label: str
    country: str
    connections: int
    risk: RiskAssessment
    distribution: TypeDistribution
    mean_distribution: TypeDistribution

    @property
    def average_connections(self) -> float:
        return self.mean_distribution.total

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type_label,
            "country": self.country,
            "connections": self.connections,
            "risk": {
                "score": round(self.risk.score, 2),
                "category": self.risk.category,
                "label": self.risk.label,
                "message": self.risk.message,
                "color": self.risk.color,
                "factors": self.risk.factors,
                "explanation": self.risk.explanation,
            },
            "connection_types": self.distribution.counts,
            "mean_connection_types": self.mean_distribution.counts,
            "average_connections": self.average_connections,
        }


@dataclass
class PrimaryStyles:
    nodes: dict[str, NodeStyle] = field(default_factory=dict)
    links: list[tuple[Relationship, LinkStyle]] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Explorer
# ---------------------------------------------------------------------------


class Explorer:
    """Linked multi-view exploration of one entity graph.

    Parameters
    ----------
    graph:
        The full entity graph.
    projection:
        Entity id → (x, y) map for the scatter view; may be empty.
    seeds:
        Entities of interest the working subgraph is sampled around.
    config:
        Settings providing thresholds, forces and canvas sizes. Defaults
        to the module-level settings.
    stats:
        Load statistics, kept for summaries.
    """

    def __init__(
        self,
        graph: EntityGraph,
        projection: ProjectionMap | None = None,
        seeds: Iterable[str] | None = None,
        config: Settings | None = None,
        stats: LoadStats | None = None,
    ) -> None:
        self.config = config or default_settings
        self.graph = graph
        self.stats = stats
        self.seeds = list(seeds if seeds is not None else self.config.SEED_ENTITIES)

        self.sampler = NeighborhoodSampler(graph, self.config.EXPANSION_THRESHOLD)
        self.scorer = RiskScorer(
            graph,
            suspicion_connections=self.config.SUSPICION_CONNECTIONS,
            suspicion_vessel_links=self.config.SUSPICION_VESSEL_LINKS,
        )
        self.analysis = ConnectionAnalysis(graph)

        self.subgraph = self.sampler.sample(self.seeds)
        self.controller = SelectionController(self.subgraph)
        self.layout = self._make_layout(self.subgraph)
        self.viewport = Viewport.initial(self.config.CANVAS_WIDTH, self.config.CANVAS_HEIGHT)
        self.projection = ProjectionView(
            _clean_projection(projection),
            graph,
            self.controller,
            width=self.config.PROJECTION_WIDTH,
            height=self.config.PROJECTION_HEIGHT,
        )

        self.notices: list[str] = []
        self.controller.on("notice", self.notices.append)

    # -- Construction --------------------------------------------------------

    @classmethod
    def from_document(
        cls,
        document: Any,
        projection: ProjectionMap | None = None,
        seeds: Iterable[str] | None = None,
        config: Settings | None = None,
    ) -> "Explorer":
        """Build from an already-parsed graph document."""
        graph, stats = GraphLoader().load(document)
        return cls(graph, projection, seeds=seeds, config=config, stats=stats)

    @classmethod
    async def load(
        cls,
        config: Settings | None = None,
        graph_source: str | None = None,
        projection_source: str | None = None,
        seeds: Iterable[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "Explorer":
        """Fetch both documents concurrently and build the explorer.

        Raises
        ------
        GraphLoadError
            If the graph document cannot be fetched or parsed.
        """
        config = config or default_settings
        source = DataSource(timeout=config.HTTP_TIMEOUT, transport=transport)
        document, projection = await source.load_all(
            graph_source or config.GRAPH_SOURCE,
            projection_source if projection_source is not None else config.PROJECTION_SOURCE,
        )
        return cls.from_document(document, projection, seeds=seeds, config=config)

    def _make_layout(self, subgraph: WorkingSubgraph) -> LayoutEngine:
        c = self.config
        engine = LayoutEngine(
            subgraph,
            width=c.CANVAS_WIDTH,
            height=c.CANVAS_HEIGHT,
            link_distance=c.LINK_DISTANCE,
            charge_strength=c.CHARGE_STRENGTH,
            collide_radius=c.COLLIDE_RADIUS,
            theta=c.THETA,
            velocity_decay=c.VELOCITY_DECAY,
            alpha_min=c.ALPHA_MIN,
            drag_alpha_target=c.DRAG_ALPHA_TARGET,
            resize_alpha=c.RESIZE_ALPHA,
            ticks_per_second=c.TICKS_PER_SECOND,
        )
        engine.set_visibility(self.controller.filters.relationship_visible)
        return engine

    def resample(self, seeds: Iterable[str]) -> WorkingSubgraph:
        """Re-sample around new seeds; highlight and projection follow."""
        # Release any pin held by the old engine
        self.layout.drag_end()
        self.seeds = list(seeds)
        self.subgraph = self.sampler.sample(self.seeds)
        self.layout = self._make_layout(self.subgraph)
        self.controller.set_subgraph(self.subgraph)
        return self.subgraph

    # -- Controls ------------------------------------------------------------

    def select(self, entity_id: str) -> bool:
        """Primary-view click. Unknown ids leave state unchanged."""
        entity = self.graph.get(entity_id)
        if entity is None:
            logger.debug("Select on unknown id %r ignored", entity_id)
            return False
        self.controller.select(entity)
        return True

    def search(self, term: str) -> SearchResult:
        result = self.controller.search(term)
        if result.found and result.entity is not None:
            self.viewport.center_on(result.entity)
        return result

    def set_filter(self, entity_type: EntityType | str, enabled: bool) -> bool:
        """Toggle a type filter by enum or name.

        Returns whether the filter changed. Unknown type names are logged
        and leave the filters untouched.
        """
        if not isinstance(entity_type, EntityType):
            name = str(entity_type).strip().lower()
            try:
                entity_type = EntityType(name)
            except ValueError:
                logger.warning("Unknown entity type %r; filter unchanged", entity_type)
                return False
        return self.controller.set_filter(entity_type, enabled)

    def clear(self) -> None:
        self.controller.clear()

    def resize(self, width: float, height: float) -> None:
        self.layout.resize(width, height)
        self.viewport.resize(width, height)

    def drag(
        self,
        entity_id: str | None,
        phase: str,
        x: float | None = None,
        y: float | None = None,
    ) -> None:
        """Drive one drag gesture phase: ``start``, ``move`` or ``end``.

        Raises
        ------
        DragError
            On an unknown phase, a second concurrent drag, a move without
            coordinates, or an entity outside the working subgraph.
        """
        if phase == "start":
            self.layout.drag_start(entity_id)
        elif phase == "move":
            if x is None or y is None:
                raise DragError("Drag move requires x and y")
            self.layout.drag_move(x, y)
        elif phase == "end":
            self.layout.drag_end()
        else:
            raise DragError(f"Unknown drag phase {phase!r}; expected one of {DRAG_PHASES}")

    def highlight_seed(self, entity_id: str) -> bool:
        """Quick-select a seed: clear, select, recenter."""
        entity = self.graph.get(entity_id)
        if entity is None:
            logger.debug("Seed %r not in graph", entity_id)
            return False
        self.controller.clear()
        self.controller.select(entity)
        self._recenter(entity)
        return True

    def click_projection(self, entity_id: str) -> bool:
        if not self.projection.click(entity_id):
            return False
        self._recenter(self.graph.get(entity_id))
        return True

    def advance(self, dt: float | None = None) -> LayoutFrame:
        return self.layout.advance(dt)

    def _recenter(self, entity: Entity | None) -> None:
        # Only rendered entities have a layout position
        if entity is not None and entity.id in self.subgraph:
            self.viewport.center_on(entity)

    # -- Render outputs ------------------------------------------------------

    @property
    def selected(self) -> Entity | None:
        return self.controller.highlight.selected

    def primary_styles(self) -> PrimaryStyles:
        return PrimaryStyles(
            nodes=self.controller.node_styles(),
            links=self.controller.link_styles(),
        )

    def info_panel(self, entity_id: str | None = None) -> EntityInfo | None:
        """Info panel for ``entity_id``, or for the current selection."""
        entity = self.graph.get(entity_id) if entity_id is not None else self.selected
        if entity is None:
            return None
        return EntityInfo(
            id=entity.id,
            type=entity.type,
            type_label=entity.type.label,
            country=entity.country,
            connections=self.graph.degree(entity),
            risk=self.scorer.assess(entity),
            distribution=self.analysis.connection_type_distribution(entity),
            mean_distribution=self.analysis.mean_distribution(),
        )

    def tooltip(self, entity_id: str) -> EntityTooltip | None:
        entity = self.graph.get(entity_id)
        if entity is None:
            return None
        return EntityTooltip(
            id=entity.id,
            type_label=entity.type.label,
            country=entity.country,
            connections=self.graph.degree(entity),
        )

    def summary(self) -> dict[str, Any]:
        """Counts for the CLI and logs."""
        summary: dict[str, Any] = {
            "graph": self.graph.summary(),
            "seeds": [s for s in self.seeds if s in self.graph],
            "missing_seeds": [s for s in self.seeds if s not in self.graph],
            "working_subgraph": {
                "entities": len(self.subgraph.entities),
                "relationships": len(self.subgraph.relationships),
                "expanded": self.subgraph.expanded,
            },
            "projection": {
                "enabled": self.projection.enabled,
                "points": len(self.projection.scene.points),
            },
            "mean_connection_types": self.analysis.mean_distribution().counts,
        }
        if self.stats is not None:
            summary["load"] = {
                "entities_loaded": self.stats.entities_loaded,
                "relationships_loaded": self.stats.relationships_loaded,
                "dropped_relationships": self.stats.dropped_relationships,
                "skipped_entities": self.stats.skipped_entities,
                "duplicate_entities": self.stats.duplicate_entities,
                "relationship_key": self.stats.relationship_key,
            }
        return summary
