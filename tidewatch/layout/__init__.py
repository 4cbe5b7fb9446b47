"""Force-directed layout for the primary graph view.

Usage::

    from tidewatch.layout import LayoutEngine

    engine = LayoutEngine(subgraph, width=960, height=600)
    frame = engine.advance(1 / 60)
"""

from tidewatch.layout.engine import LayoutEngine, LayoutFrame, Segment
from tidewatch.layout.simulation import ForceSimulation

__all__ = [
    "LayoutEngine",
    "LayoutFrame",
    "Segment",
    "ForceSimulation",
]
