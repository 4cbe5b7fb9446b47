"""Point quadtree used by the many-body and collision forces.

Stores point *indices* so the forces can look up per-node parameters.
Coincident points share a leaf. Internal quads carry aggregate fields
(``value``, ``x``, ``y``, ``r``) that a force fills in with
``visit_after`` before querying the tree with ``visit``.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

# Past this depth nearly-coincident points share a leaf instead of splitting.
MAX_DEPTH = 48


class Quad:
    __slots__ = ("children", "points", "value", "x", "y", "r")

    def __init__(self) -> None:
        self.children: list[Quad | None] | None = None
        self.points: list[tuple[float, float, int]] = []
        self.value = 0.0
        self.x = 0.0
        self.y = 0.0
        self.r = 0.0

    @property
    def is_leaf(self) -> bool:
        return self.children is None


# (quad, x0, y0, x1, y1) -> True to skip the quad's children
VisitFn = Callable[[Quad, float, float, float, float], bool]


class QuadTree:
    """Quadtree over ``points``; quad bounds are always square."""

    def __init__(self, points: Sequence[tuple[float, float]]) -> None:
        self.root = Quad()
        self.size = len(points)

        finite = [
            (px, py, i) for i, (px, py) in enumerate(points)
            if math.isfinite(px) and math.isfinite(py)
        ]
        if not finite:
            self.x0 = self.y0 = 0.0
            self.x1 = self.y1 = 1.0
            return

        x0 = min(p[0] for p in finite)
        y0 = min(p[1] for p in finite)
        x1 = max(p[0] for p in finite)
        y1 = max(p[1] for p in finite)
        side = max(x1 - x0, y1 - y0) or 1.0
        self.x0, self.y0 = x0, y0
        self.x1, self.y1 = x0 + side, y0 + side

        for point in finite:
            self._insert(point)

    def _insert(self, point: tuple[float, float, int]) -> None:
        px, py, _ = point
        quad = self.root
        x0, y0, x1, y1 = self.x0, self.y0, self.x1, self.y1
        depth = 0

        while True:
            if quad.children is None:
                if not quad.points:
                    quad.points.append(point)
                    return
                fx, fy, _ = quad.points[0]
                if (fx == px and fy == py) or depth >= MAX_DEPTH:
                    quad.points.append(point)
                    return
                # Split: push the resident points one level down
                resident = quad.points
                quad.points = []
                quad.children = [None, None, None, None]
                xm, ym = (x0 + x1) / 2, (y0 + y1) / 2
                i = _child_index(fx, fy, xm, ym)
                child = Quad()
                child.points = resident
                quad.children[i] = child

            xm, ym = (x0 + x1) / 2, (y0 + y1) / 2
            i = _child_index(px, py, xm, ym)
            if i & 1:
                x0 = xm
            else:
                x1 = xm
            if i & 2:
                y0 = ym
            else:
                y1 = ym

            child = quad.children[i]
            if child is None:
                child = Quad()
                child.points.append(point)
                quad.children[i] = child
                return
            quad = child
            depth += 1

    def visit(self, callback: VisitFn) -> None:
        """Pre-order traversal; a truthy callback result prunes the subtree."""
        stack = [(self.root, self.x0, self.y0, self.x1, self.y1)]
        while stack:
            quad, x0, y0, x1, y1 = stack.pop()
            if callback(quad, x0, y0, x1, y1) or quad.children is None:
                continue
            xm, ym = (x0 + x1) / 2, (y0 + y1) / 2
            bounds = (
                (x0, y0, xm, ym),
                (xm, y0, x1, ym),
                (x0, ym, xm, y1),
                (xm, ym, x1, y1),
            )
            for i in (3, 2, 1, 0):
                child = quad.children[i]
                if child is not None:
                    stack.append((child, *bounds[i]))

    def visit_after(self, callback: Callable[[Quad], None]) -> None:
        """Post-order traversal: children are visited before their parent."""
        order: list[Quad] = []
        stack = [self.root]
        while stack:
            quad = stack.pop()
            order.append(quad)
            if quad.children is not None:
                stack.extend(c for c in quad.children if c is not None)
        for quad in reversed(order):
            callback(quad)


def _child_index(px: float, py: float, xm: float, ym: float) -> int:
    return (1 if px >= xm else 0) | (2 if py >= ym else 0)
