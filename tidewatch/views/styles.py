"""Styling rules shared by the primary graph view and the projection view.

Pure functions from (element, highlight state, visibility) to a style
record; the rendering surface applies them verbatim.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from tidewatch.graph.models import Entity, EntityType, Relationship

# Entity type → fill color
TYPE_COLORS: dict[EntityType, str] = {
    EntityType.ORGANIZATION: "#e74c3c",
    EntityType.PERSON: "#3498db",
    EntityType.VESSEL: "#2ecc71",
    EntityType.LOCATION: "#f39c12",
    EntityType.EVENT: "#9b59b6",
    EntityType.UNKNOWN: "#999999",
}

NEUTRAL_LINK_COLOR = "#999"
ACCENT_LINK_COLOR = "#ff5722"

SEED_RADIUS = 10.0
NODE_RADIUS = 5.0
SEED_STROKE = "#000"
NODE_STROKE = "#fff"

BASE_LINK_OPACITY = 0.6
DIMMED_NODE_OPACITY = 0.1
DIMMED_LINK_OPACITY = 0.05

POINT_RADIUS = 3.0
HIGHLIGHT_POINT_RADIUS = 5.0
DIMMED_POINT_OPACITY = 0.3


@dataclass(frozen=True)
class NodeStyle:
    fill: str
    radius: float
    stroke: str
    stroke_width: float
    opacity: float = 1.0
    visible: bool = True


@dataclass(frozen=True)
class LinkStyle:
    color: str
    width: float
    opacity: float
    visible: bool = True
    highlighted: bool = False


@dataclass(frozen=True)
class PointStyle:
    fill: str
    radius: float
    stroke: str | None
    stroke_width: float
    opacity: float
    highlighted: bool = False


def type_color(entity_type: EntityType) -> str:
    return TYPE_COLORS.get(entity_type, TYPE_COLORS[EntityType.UNKNOWN])


def link_width(rel: Relationship) -> float:
    return math.sqrt(rel.weight or 1.0)


def node_style(
    entity: Entity,
    is_seed: bool,
    highlighted_nodes: set[str] | frozenset[str],
    visible: bool = True,
) -> NodeStyle:
    """Seeds keep their larger radius and dark outline in every state."""
    if highlighted_nodes:
        opacity = 1.0 if entity.id in highlighted_nodes else DIMMED_NODE_OPACITY
    else:
        opacity = 1.0
    return NodeStyle(
        fill=type_color(entity.type),
        radius=SEED_RADIUS if is_seed else NODE_RADIUS,
        stroke=SEED_STROKE if is_seed else NODE_STROKE,
        stroke_width=2.0 if is_seed else 1.0,
        opacity=opacity,
        visible=visible,
    )


def link_style(
    rel: Relationship,
    highlight_active: bool,
    highlighted: bool,
    visible: bool = True,
) -> LinkStyle:
    width = link_width(rel)
    if not highlight_active:
        return LinkStyle(NEUTRAL_LINK_COLOR, width, BASE_LINK_OPACITY, visible)
    if highlighted:
        return LinkStyle(ACCENT_LINK_COLOR, 2 * width, 1.0, visible, highlighted=True)
    return LinkStyle(NEUTRAL_LINK_COLOR, width, DIMMED_LINK_OPACITY, visible)


def point_style(
    entity_type: EntityType,
    highlight_active: bool,
    highlighted: bool,
) -> PointStyle:
    if highlighted:
        return PointStyle(
            fill=type_color(entity_type),
            radius=HIGHLIGHT_POINT_RADIUS,
            stroke="#000",
            stroke_width=2.0,
            opacity=1.0,
            highlighted=True,
        )
    return PointStyle(
        fill=type_color(entity_type),
        radius=POINT_RADIUS,
        stroke=None,
        stroke_width=1.0,
        opacity=DIMMED_POINT_OPACITY if highlight_active else 1.0,
    )
