"""Forces composed by the layout simulation.

Each force is initialised with the simulation's node list and then
called once per tick with the current energy (alpha). Forces only
adjust velocities (``vx``/``vy``); the centering force is the exception
and translates positions directly, as is standard.

  - LinkForce:      springs relationships toward a target length
  - ManyBodyForce:  pairwise repulsion, Barnes–Hut approximated
  - CenterForce:    keeps the layout's mean position on the canvas centre
  - CollideForce:   keeps node markers from overlapping
"""

from __future__ import annotations

import math
import random
from collections.abc import Sequence

from tidewatch.graph.models import Entity, Relationship
from tidewatch.layout.quadtree import Quad, QuadTree


def jiggle(rng: random.Random) -> float:
    """Tiny non-zero offset used to separate coincident nodes."""
    return (rng.random() - 0.5) * 1e-6


class Force:
    """Base class: holds the node list and the simulation's RNG."""

    def __init__(self) -> None:
        self.nodes: Sequence[Entity] = ()
        self.rng = random.Random(0)

    def initialize(self, nodes: Sequence[Entity], rng: random.Random) -> None:
        self.nodes = nodes
        self.rng = rng

    def __call__(self, alpha: float) -> None:
        raise NotImplementedError


class LinkForce(Force):
    """Spring force along relationships.

    Strength defaults to ``1 / min(degree(source), degree(target))`` so
    hubs are not yanked around by their many links. Displacement is split
    between the endpoints in proportion to their relative degree.
    """

    def __init__(
        self,
        relationships: Sequence[Relationship] = (),
        distance: float = 100.0,
        iterations: int = 1,
    ) -> None:
        super().__init__()
        self.relationships = tuple(relationships)
        self.distance = distance
        self.iterations = iterations
        self._strengths: list[float] = []
        self._bias: list[float] = []

    def initialize(self, nodes: Sequence[Entity], rng: random.Random) -> None:
        super().initialize(nodes, rng)
        present = {id(n) for n in nodes}
        self.relationships = tuple(
            r for r in self.relationships
            if id(r.source) in present and id(r.target) in present
        )
        count: dict[int, int] = {}
        for rel in self.relationships:
            count[id(rel.source)] = count.get(id(rel.source), 0) + 1
            count[id(rel.target)] = count.get(id(rel.target), 0) + 1

        self._bias = []
        self._strengths = []
        for rel in self.relationships:
            cs, ct = count[id(rel.source)], count[id(rel.target)]
            self._bias.append(cs / (cs + ct))
            self._strengths.append(1.0 / min(cs, ct))

    def __call__(self, alpha: float) -> None:
        for _ in range(self.iterations):
            for rel, bias, strength in zip(self.relationships, self._bias, self._strengths):
                source, target = rel.source, rel.target
                x = (target.x + target.vx - source.x - source.vx) or jiggle(self.rng)
                y = (target.y + target.vy - source.y - source.vy) or jiggle(self.rng)
                length = math.sqrt(x * x + y * y)
                length = (length - self.distance) / length * alpha * strength
                x *= length
                y *= length
                target.vx -= x * bias
                target.vy -= y * bias
                source.vx += x * (1 - bias)
                source.vy += y * (1 - bias)


class ManyBodyForce(Force):
    """Charge force between all node pairs.

    Negative strength repels. Far-away clusters are approximated by their
    centroid when ``quad width / distance < theta`` (Barnes–Hut).
    """

    def __init__(
        self,
        strength: float = -100.0,
        theta: float = 0.9,
        distance_min: float = 1.0,
        distance_max: float = math.inf,
    ) -> None:
        super().__init__()
        self.strength = strength
        self.theta2 = theta * theta
        self.distance_min2 = distance_min * distance_min
        self.distance_max2 = distance_max * distance_max

    def __call__(self, alpha: float) -> None:
        if not self.nodes:
            return
        tree = QuadTree([(n.x, n.y) for n in self.nodes])
        tree.visit_after(self._accumulate)
        for i, node in enumerate(self.nodes):
            tree.visit(self._apply_to(i, node, alpha))

    def _accumulate(self, quad: Quad) -> None:
        if quad.children is not None:
            strength = weight = x = y = 0.0
            for child in quad.children:
                if child is None or not child.value:
                    continue
                c = abs(child.value)
                strength += child.value
                weight += c
                x += c * child.x
                y += c * child.y
            if weight:
                quad.x = x / weight
                quad.y = y / weight
            quad.value = strength
        elif quad.points:
            px, py, _ = quad.points[0]
            quad.x, quad.y = px, py
            quad.value = self.strength * len(quad.points)

    def _apply_to(self, index: int, node: Entity, alpha: float):
        rng = self.rng

        def apply(quad: Quad, x0: float, y0: float, x1: float, y1: float) -> bool:
            if not quad.value:
                return True
            x = quad.x - node.x
            y = quad.y - node.y
            w = x1 - x0
            dist2 = x * x + y * y

            # Far enough away: treat the quad as a single body
            if w * w / self.theta2 < dist2:
                if dist2 < self.distance_max2:
                    if x == 0:
                        x = jiggle(rng)
                        dist2 += x * x
                    if y == 0:
                        y = jiggle(rng)
                        dist2 += y * y
                    if dist2 < self.distance_min2:
                        dist2 = math.sqrt(self.distance_min2 * dist2)
                    node.vx += x * quad.value * alpha / dist2
                    node.vy += y * quad.value * alpha / dist2
                return True

            if quad.children is not None or dist2 >= self.distance_max2:
                return False

            others = [p for p in quad.points if p[2] != index]
            if not others:
                return True
            if x == 0:
                x = jiggle(rng)
                dist2 += x * x
            if y == 0:
                y = jiggle(rng)
                dist2 += y * y
            if dist2 < self.distance_min2:
                dist2 = math.sqrt(self.distance_min2 * dist2)
            k = self.strength * len(others) * alpha / dist2
            node.vx += x * k
            node.vy += y * k
            return True

        return apply


class CenterForce(Force):
    """Translate all nodes so their mean position sits at ``(x, y)``."""

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0) -> None:
        super().__init__()
        self.x = x
        self.y = y
        self.strength = strength

    def __call__(self, alpha: float) -> None:
        n = len(self.nodes)
        if not n:
            return
        sx = sum(node.x for node in self.nodes)
        sy = sum(node.y for node in self.nodes)
        sx = (sx / n - self.x) * self.strength
        sy = (sy / n - self.y) * self.strength
        for node in self.nodes:
            node.x -= sx
            node.y -= sy


class CollideForce(Force):
    """Push apart nodes whose circles (of ``radius``) overlap.

    Uses each node's anticipated position (position + velocity) and
    shares the correction between the pair by relative radius.
    """

    def __init__(self, radius: float = 10.0, strength: float = 1.0, iterations: int = 1) -> None:
        super().__init__()
        self.radius = radius
        self.strength = strength
        self.iterations = iterations

    def __call__(self, alpha: float) -> None:
        nodes = self.nodes
        if len(nodes) < 2:
            return
        r = self.radius
        for _ in range(self.iterations):
            tree = QuadTree([(n.x + n.vx, n.y + n.vy) for n in nodes])
            tree.visit_after(self._prepare)
            for i, node in enumerate(nodes):
                xi = node.x + node.vx
                yi = node.y + node.vy
                tree.visit(self._apply_to(i, node, xi, yi, r))

    def _prepare(self, quad: Quad) -> None:
        quad.r = self.radius

    def _apply_to(self, index: int, node: Entity, xi: float, yi: float, ri: float):
        rng = self.rng
        nodes = self.nodes
        ri2 = ri * ri

        def apply(quad: Quad, x0: float, y0: float, x1: float, y1: float) -> bool:
            rj = quad.r
            reach = ri + rj
            if quad.children is None:
                for _, _, j in quad.points:
                    if j <= index:
                        continue
                    other = nodes[j]
                    x = xi - other.x - other.vx
                    y = yi - other.y - other.vy
                    dist2 = x * x + y * y
                    if dist2 < reach * reach:
                        if x == 0:
                            x = jiggle(rng)
                            dist2 += x * x
                        if y == 0:
                            y = jiggle(rng)
                            dist2 += y * y
                        dist = math.sqrt(dist2)
                        k = (reach - dist) / dist * self.strength
                        x *= k
                        y *= k
                        share = (rj * rj) / (ri2 + rj * rj)
                        node.vx += x * share
                        node.vy += y * share
                        other.vx -= x * (1 - share)
                        other.vy -= y * (1 - share)
                return True
            return x0 > xi + reach or x1 < xi - reach or y0 > yi + reach or y1 < yi - reach

        return apply
