"""Zoom/pan transform of the primary view.

A point ``(x, y)`` in layout coordinates is drawn at
``(x * k + tx, y * k + ty)`` on the canvas. The initial transform puts
the layout origin at the canvas centre at half scale; recentering on an
entity puts that entity at the canvas centre at scale 1.5.
"""

from __future__ import annotations

from dataclasses import dataclass

from tidewatch.graph.models import Entity

MIN_SCALE = 0.1
MAX_SCALE = 8.0
INITIAL_SCALE = 0.5
FOCUS_SCALE = 1.5


@dataclass
class Viewport:
    width: float = 960.0
    height: float = 600.0
    tx: float = 0.0
    ty: float = 0.0
    k: float = INITIAL_SCALE

    @classmethod
    def initial(cls, width: float, height: float) -> "Viewport":
        return cls(width=width, height=height, tx=width / 2, ty=height / 2, k=INITIAL_SCALE)

    def apply(self, x: float, y: float) -> tuple[float, float]:
        """Layout coordinates → canvas coordinates."""
        return (x * self.k + self.tx, y * self.k + self.ty)

    def invert(self, x: float, y: float) -> tuple[float, float]:
        """Canvas coordinates → layout coordinates (for drag pointers)."""
        return ((x - self.tx) / self.k, (y - self.ty) / self.k)

    def zoom(self, k: float) -> None:
        """Set the scale, clamped to the allowed extent."""
        self.k = min(max(k, MIN_SCALE), MAX_SCALE)

    def center_on(self, entity: Entity, scale: float = FOCUS_SCALE) -> None:
        x, y = entity.position
        self.zoom(scale)
        self.tx = -x * self.k + self.width / 2
        self.ty = -y * self.k + self.height / 2

    def resize(self, width: float, height: float) -> None:
        if width > 0 and height > 0:
            self.width = width
            self.height = height

    def as_dict(self) -> dict[str, float]:
        return {"x": self.tx, "y": self.ty, "k": self.k}
