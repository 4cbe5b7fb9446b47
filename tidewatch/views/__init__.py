"""Linked views: selection state, styling, viewport and the projection scatter."""

from tidewatch.views.projection import ProjectionScene, ProjectionView
from tidewatch.views.state import FilterState, HighlightState, SearchResult, SelectionController
from tidewatch.views.viewport import Viewport

__all__ = [
    "ProjectionScene",
    "ProjectionView",
    "FilterState",
    "HighlightState",
    "SearchResult",
    "SelectionController",
    "Viewport",
]
