"""PCA scatter view kept in sync with the primary graph view.

The scatter shows only entities that are rendered in the primary view,
visible under the current filters, and present in the projection map.
It is rebuilt whenever that set can change (filter toggles, re-sampling)
and merely restyled when only the highlight changes.

Usage::

    view = ProjectionView(projection, store, controller)
    scene = view.scene                 # kept current through controller events
    view.click("8327")                 # same transition as a primary click
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tidewatch.data.sources import ProjectionMap
from tidewatch.graph.models import EntityType
from tidewatch.graph.store import EntityGraph
from tidewatch.views.state import HighlightState, SelectionController
from tidewatch.views.styles import PointStyle, point_style

logger = logging.getLogger(__name__)

EMPTY_VIEW_PLACEHOLDER = "No nodes to display in current view"
UNAVAILABLE_PLACEHOLDER = "Projection data unavailable"

DOMAIN_PADDING = 0.1

# Plot margins: left/bottom leave room for axes
MARGIN_LEFT = 40.0
MARGIN_RIGHT = 20.0
MARGIN_TOP = 20.0
MARGIN_BOTTOM = 40.0


@dataclass
class ProjectionPoint:
    """One scatter point: raw coordinates, canvas coordinates, style."""

    id: str
    type: EntityType
    x: float
    y: float
    cx: float = 0.0
    cy: float = 0.0
    style: PointStyle | None = None


@dataclass
class ProjectionScene:
    points: list[ProjectionPoint] = field(default_factory=list)
    x_domain: tuple[float, float] = (0.0, 1.0)
    y_domain: tuple[float, float] = (0.0, 1.0)
    x_range: tuple[float, float] = (0.0, 1.0)
    y_range: tuple[float, float] = (0.0, 1.0)
    placeholder: str | None = None
    enabled: bool = True
    x_label: str = "Principal Component 1"
    y_label: str = "Principal Component 2"

    @property
    def ids(self) -> list[str]:
        return [p.id for p in self.points]

    def get(self, point_id: str) -> ProjectionPoint | None:
        for point in self.points:
            if point.id == point_id:
                return point
        return None


def padded_extent(values: list[float]) -> tuple[float, float]:
    """Extent padded by 10% on each side; a zero-width extent is widened by ±1."""
    lo, hi = min(values), max(values)
    if lo == hi:
        return (lo - 1.0, hi + 1.0)
    margin = (hi - lo) * DOMAIN_PADDING
    return (lo - margin, hi + margin)


def linear(domain: tuple[float, float], rng: tuple[float, float]):
    d0, d1 = domain
    r0, r1 = rng
    span = d1 - d0

    def scale(value: float) -> float:
        return r0 + (value - d0) / span * (r1 - r0)

    return scale


class ProjectionView:
    """Keeps a ``ProjectionScene`` consistent with the primary view.

    Parameters
    ----------
    projection:
        Entity id → (x, y) map. An empty map disables the view.
    graph:
        The full entity graph, used to resolve clicked ids.
    controller:
        The shared selection controller. The view subscribes to its
        ``filter``, ``subgraph`` and ``restyle`` events.
    width, height:
        Plot size in pixels.
    """

    def __init__(
        self,
        projection: ProjectionMap,
        graph: EntityGraph,
        controller: SelectionController,
        width: float = 300.0,
        height: float = 300.0,
    ) -> None:
        self.projection = projection
        self.graph = graph
        self.controller = controller
        self.width = width
        self.height = height
        self.scene = ProjectionScene(enabled=self.enabled)

        controller.on("filter", lambda _: self.recompute())
        controller.on("subgraph", lambda _: self.recompute())
        controller.on("restyle", self._on_restyle)

        if not self.enabled:
            logger.warning("No projection data; projection view disabled")
        self.recompute()

    @property
    def enabled(self) -> bool:
        return bool(self.projection)

    # -- Rebuild -------------------------------------------------------------

    def recompute(self) -> ProjectionScene:
        """Rebuild the point set and scales from the rendered, visible entities."""
        if not self.enabled:
            self.scene = ProjectionScene(enabled=False, placeholder=UNAVAILABLE_PLACEHOLDER)
            return self.scene

        points = [
            ProjectionPoint(id=e.id, type=e.type, x=self.projection[e.id][0], y=self.projection[e.id][1])
            for e in self.controller.visible_entities()
            if e.id in self.projection
        ]
        logger.debug("Projection view: %d visible point(s)", len(points))

        if not points:
            self.scene = ProjectionScene(placeholder=EMPTY_VIEW_PLACEHOLDER)
            return self.scene

        x_domain = padded_extent([p.x for p in points])
        y_domain = padded_extent([p.y for p in points])
        x_range = (MARGIN_LEFT, self.width - MARGIN_RIGHT)
        y_range = (self.height - MARGIN_BOTTOM, MARGIN_TOP)
        sx = linear(x_domain, x_range)
        sy = linear(y_domain, y_range)
        for point in points:
            point.cx = sx(point.x)
            point.cy = sy(point.y)

        self.scene = ProjectionScene(
            points=points,
            x_domain=x_domain,
            y_domain=y_domain,
            x_range=x_range,
            y_range=y_range,
        )
        return self.restyle()

    def restyle(self, highlight: HighlightState | None = None) -> ProjectionScene:
        """Re-apply point styles only; positions and scales are untouched."""
        if highlight is None:
            highlight = self.controller.highlight
        active = highlight.active
        for point in self.scene.points:
            point.style = point_style(point.type, active, point.id in highlight.nodes)
        # Highlighted points draw on top
        self.scene.points.sort(key=lambda p: p.style is not None and p.style.highlighted)
        return self.scene

    def _on_restyle(self, highlight: HighlightState) -> None:
        self.restyle(highlight)

    # -- Interaction ---------------------------------------------------------

    def click(self, point_id: str) -> bool:
        """Select the clicked point's entity exactly as a primary click would."""
        entity = self.graph.get(point_id)
        if entity is None:
            logger.debug("Projection click on unknown id %r ignored", point_id)
            return False
        self.controller.select(entity)
        return True
