"""Force-directed layout simulation with decaying energy.

The simulation is stepped explicitly: the rendering surface (or a test)
calls ``tick()`` once per frame. Energy (``alpha``) decays geometrically
toward ``alpha_target``; when it drops below ``alpha_min`` the
simulation reports itself settled and ``step()`` becomes a no-op until
something reheats it.

Pinned entities (``fx``/``fy`` set) are held exactly at their pin
regardless of the forces acting on them.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Sequence

from tidewatch.graph.models import Entity
from tidewatch.layout.forces import Force

logger = logging.getLogger(__name__)

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


class ForceSimulation:
    """Velocity-Verlet integration over a set of named forces.

    Parameters
    ----------
    nodes:
        Entities to position. Entities without a position are placed on a
        phyllotaxis spiral so the initial layout is deterministic.
    alpha_min:
        Energy below which the simulation is considered settled.
    alpha_decay:
        Per-tick decay rate. Defaults to reaching ``alpha_min`` from 1 in
        300 ticks.
    velocity_decay:
        Fraction of velocity lost per tick (friction).
    seed:
        Seed for the jiggle RNG.
    """

    def __init__(
        self,
        nodes: Sequence[Entity] = (),
        alpha_min: float = 0.001,
        alpha_decay: float | None = None,
        velocity_decay: float = 0.4,
        seed: int = 0,
    ) -> None:
        self.alpha = 1.0
        self.alpha_min = alpha_min
        self.alpha_decay = (
            alpha_decay if alpha_decay is not None else 1 - alpha_min ** (1 / 300)
        )
        self.alpha_target = 0.0
        self.velocity_decay = velocity_decay
        self.tick_count = 0
        self._rng = random.Random(seed)
        self._forces: dict[str, Force] = {}
        self._stopped = False
        self.nodes: list[Entity] = []
        self.set_nodes(nodes)

    # -- Configuration -------------------------------------------------------

    def set_nodes(self, nodes: Sequence[Entity]) -> None:
        self.nodes = list(nodes)
        self._initialize_nodes()
        for force in self._forces.values():
            force.initialize(self.nodes, self._rng)

    def force(self, name: str, force: Force | None = None) -> Force | None:
        """Get, add/replace (``force`` given) a named force."""
        if force is None:
            return self._forces.get(name)
        force.initialize(self.nodes, self._rng)
        self._forces[name] = force
        return force

    def _initialize_nodes(self) -> None:
        for i, node in enumerate(self.nodes):
            if node.fx is not None:
                node.x = node.fx
            if node.fy is not None:
                node.y = node.fy
            if node.x is None or node.y is None or math.isnan(node.x) or math.isnan(node.y):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                node.x = radius * math.cos(angle)
                node.y = radius * math.sin(angle)
            if math.isnan(node.vx) or math.isnan(node.vy):
                node.vx = node.vy = 0.0

    # -- Energy --------------------------------------------------------------

    @property
    def settled(self) -> bool:
        return self._stopped

    def restart(self) -> None:
        self._stopped = False

    def stop(self) -> None:
        self._stopped = True

    def reheat(self, alpha: float) -> None:
        """Set the energy directly and restart."""
        self.alpha = alpha
        self.restart()

    # -- Stepping ------------------------------------------------------------

    def tick(self, iterations: int = 1) -> None:
        """Advance ``iterations`` ticks unconditionally."""
        for _ in range(iterations):
            self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay
            for force in self._forces.values():
                force(self.alpha)

            keep = 1 - self.velocity_decay
            for node in self.nodes:
                if node.fx is None:
                    node.vx *= keep
                    node.x += node.vx
                else:
                    node.x = node.fx
                    node.vx = 0.0
                if node.fy is None:
                    node.vy *= keep
                    node.y += node.vy
                else:
                    node.y = node.fy
                    node.vy = 0.0
            self.tick_count += 1

    def step(self) -> bool:
        """One frame: tick if still hot. Returns whether a tick ran."""
        if self.settled:
            return False
        self.tick()
        if self.alpha < self.alpha_min:
            logger.debug("Simulation settled after %d ticks", self.tick_count)
            self.stop()
        return True
