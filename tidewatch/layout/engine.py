"""Force-directed positioning of the working subgraph for the primary view.

Wraps ``ForceSimulation`` with the four forces the primary view uses and
the interactions that steer it:

  - ``advance(dt)`` is the per-frame entry point; it returns a
    ``LayoutFrame`` with every entity position and a line segment for
    every visible relationship.
  - ``drag_start`` / ``drag_move`` / ``drag_end`` pin one entity under the
    pointer and reheat the simulation while it is held.
  - ``resize`` moves the centering target and reheats, keeping positions.

Usage::

    engine = LayoutEngine(subgraph, width=960, height=600)
    frame = engine.advance()          # one tick
    engine.drag_start("8327")
    engine.drag_move(120.0, 80.0)
    frame = engine.advance(1 / 60)
    engine.drag_end()
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

from tidewatch.errors import DragError
from tidewatch.graph.models import Entity, Relationship
from tidewatch.graph.sampler import WorkingSubgraph
from tidewatch.layout.forces import CenterForce, CollideForce, LinkForce, ManyBodyForce
from tidewatch.layout.simulation import ForceSimulation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Segment:
    """Drawn line for one relationship."""

    relationship: Relationship
    x1: float
    y1: float
    x2: float
    y2: float


@dataclass(frozen=True)
class LayoutFrame:
    """Positions emitted for one rendered frame."""

    positions: dict[str, tuple[float, float]] = field(default_factory=dict)
    segments: tuple[Segment, ...] = ()
    alpha: float = 0.0
    ticks: int = 0
    settled: bool = False


class LayoutEngine:
    """Force layout over a ``WorkingSubgraph``.

    Parameters
    ----------
    subgraph:
        Entities and relationships to lay out.
    width, height:
        Canvas size; the centering force targets its midpoint.
    link_distance:
        Target separation of connected entities.
    charge_strength:
        Many-body strength; negative repels.
    collide_radius:
        Marker radius used for overlap avoidance.
    ticks_per_second:
        Converts ``advance(dt)`` into a number of ticks.
    """

    def __init__(
        self,
        subgraph: WorkingSubgraph,
        width: float = 960.0,
        height: float = 600.0,
        link_distance: float = 100.0,
        charge_strength: float = -100.0,
        collide_radius: float = 10.0,
        theta: float = 0.9,
        velocity_decay: float = 0.4,
        alpha_min: float = 0.001,
        drag_alpha_target: float = 0.3,
        resize_alpha: float = 0.3,
        ticks_per_second: int = 60,
        seed: int = 0,
    ) -> None:
        self.subgraph = subgraph
        self.width = width
        self.height = height
        self._drag_alpha_target = drag_alpha_target
        self._resize_alpha = resize_alpha
        self._ticks_per_second = ticks_per_second
        self._dragging: Entity | None = None
        self._is_visible: Callable[[Relationship], bool] = lambda rel: True

        self.simulation = ForceSimulation(
            subgraph.entities,
            alpha_min=alpha_min,
            velocity_decay=velocity_decay,
            seed=seed,
        )
        self.simulation.force("link", LinkForce(subgraph.relationships, distance=link_distance))
        self.simulation.force("charge", ManyBodyForce(strength=charge_strength, theta=theta))
        self.simulation.force("center", CenterForce(width / 2, height / 2))
        self.simulation.force("collision", CollideForce(radius=collide_radius))

        logger.debug(
            "Layout engine over %d entities / %d relationships (%gx%g)",
            len(subgraph.entities), len(subgraph.relationships), width, height,
        )

    # -- Frames --------------------------------------------------------------

    @property
    def alpha(self) -> float:
        return self.simulation.alpha

    @property
    def settled(self) -> bool:
        return self.simulation.settled

    def set_visibility(self, predicate: Callable[[Relationship], bool]) -> None:
        """Relationships for which ``predicate`` is false get no segment."""
        self._is_visible = predicate

    def advance(self, dt: float | None = None) -> LayoutFrame:
        """Run the ticks due for ``dt`` seconds (one tick if omitted)."""
        ticks = 1 if dt is None else max(1, round(dt * self._ticks_per_second))
        ran = 0
        for _ in range(ticks):
            if not self.simulation.step():
                break
            ran += 1
        return self.frame(ticks=ran)

    def run_until_settled(self, max_ticks: int = 1000) -> LayoutFrame:
        ran = 0
        while ran < max_ticks and self.simulation.step():
            ran += 1
        logger.info("Layout ran %d ticks (alpha=%.4f)", ran, self.simulation.alpha)
        return self.frame(ticks=ran)

    def frame(self, ticks: int = 0) -> LayoutFrame:
        positions = {e.id: (e.x, e.y) for e in self.subgraph.entities}
        segments = tuple(
            Segment(rel, rel.source.x, rel.source.y, rel.target.x, rel.target.y)
            for rel in self.subgraph.relationships
            if self._is_visible(rel)
        )
        return LayoutFrame(
            positions=positions,
            segments=segments,
            alpha=self.simulation.alpha,
            ticks=ticks,
            settled=self.simulation.settled,
        )

    # -- Drag ----------------------------------------------------------------

    @property
    def dragging(self) -> Entity | None:
        return self._dragging

    def drag_start(self, entity_id: str) -> Entity:
        """Pin ``entity_id`` at its current position and reheat."""
        if self._dragging is not None:
            raise DragError(
                f"Already dragging {self._dragging.id!r}; end that gesture first"
            )
        entity = self.subgraph.get(entity_id)
        if entity is None:
            raise DragError(f"Entity {entity_id!r} is not in the working subgraph")

        self.simulation.alpha_target = self._drag_alpha_target
        self.simulation.restart()
        entity.fx = entity.x
        entity.fy = entity.y
        self._dragging = entity
        logger.debug("Drag start: %s", entity_id)
        return entity

    def drag_move(self, x: float, y: float) -> None:
        if self._dragging is None:
            raise DragError("No drag in progress")
        if not (math.isfinite(x) and math.isfinite(y)):
            raise DragError(f"Invalid drag position ({x}, {y})")
        self._dragging.fx = x
        self._dragging.fy = y

    def drag_end(self) -> None:
        """Release the pinned entity and let the layout cool."""
        if self._dragging is None:
            return
        self.simulation.alpha_target = 0.0
        self._dragging.fx = None
        self._dragging.fy = None
        logger.debug("Drag end: %s", self._dragging.id)
        self._dragging = None

    # -- Canvas --------------------------------------------------------------

    def resize(self, width: float, height: float) -> None:
        """Retarget the centering force and reheat; positions are kept."""
        if width <= 0 or height <= 0:
            logger.debug("Ignoring non-positive resize %gx%g", width, height)
            return
        self.width = width
        self.height = height
        center = self.simulation.force("center")
        if isinstance(center, CenterForce):
            center.x = width / 2
            center.y = height / 2
        self.simulation.reheat(self._resize_alpha)
