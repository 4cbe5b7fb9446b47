"""Render-model export for external drawing tools.

Supported formats:
  - D3 JSON: node-link document with layout positions and styles, ready
    for a D3.js force view that skips its own simulation
  - CSV: node table with positions, visibility and risk

Only the working subgraph is exported; filtered-out elements are kept
with ``visible: false`` so a consumer can toggle them back on.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tidewatch.views.styles import type_color

if TYPE_CHECKING:
    from tidewatch.explorer import Explorer

logger = logging.getLogger(__name__)


class SceneExporter:
    """Export the explorer's current scene.

    Parameters
    ----------
    explorer:
        The explorer whose working subgraph, layout and styles are exported.
    """

    def __init__(self, explorer: Explorer) -> None:
        self._explorer = explorer

    # -- D3 JSON -------------------------------------------------------------

    def to_d3_json(self) -> dict[str, Any]:
        """Nodes with positions and styles; links as index pairs."""
        explorer = self._explorer
        styles = explorer.primary_styles()

        nodes = []
        node_index: dict[str, int] = {}
        for i, entity in enumerate(explorer.subgraph.entities):
            node_index[entity.id] = i
            x, y = entity.position
            nodes.append({
                "id": entity.id,
                "type": entity.type.value,
                "country": entity.country,
                "x": round(x, 3),
                "y": round(y, 3),
                "color": type_color(entity.type),
                "seed": explorer.subgraph.is_seed(entity),
                "style": asdict(styles.nodes[entity.id]),
            })

        links = []
        for rel, style in styles.links:
            links.append({
                "source": node_index[rel.source.id],
                "target": node_index[rel.target.id],
                "value": rel.weight,
                "style": asdict(style),
            })

        selected = explorer.selected
        return {
            "directed": explorer.graph.directed,
            "nodes": nodes,
            "links": links,
            "selected": selected.id if selected is not None else None,
            "filters": explorer.controller.filters.as_dict(),
            "viewport": explorer.viewport.as_dict(),
            "projection": self._projection(),
        }

    def _projection(self) -> dict[str, Any]:
        scene = self._explorer.projection.scene
        return {
            "enabled": scene.enabled,
            "placeholder": scene.placeholder,
            "x_domain": list(scene.x_domain),
            "y_domain": list(scene.y_domain),
            "points": [
                {
                    "id": p.id,
                    "type": p.type.value,
                    "cx": round(p.cx, 3),
                    "cy": round(p.cy, 3),
                    "style": asdict(p.style) if p.style is not None else None,
                }
                for p in scene.points
            ],
        }

    # -- CSV -----------------------------------------------------------------

    def to_csv_nodes(self) -> str:
        """Export the working-subgraph node table as a CSV string."""
        explorer = self._explorer
        filters = explorer.controller.filters

        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(["id", "type", "country", "x", "y", "visible", "risk_score", "risk_category"])

        for entity in explorer.subgraph.entities:
            assessment = explorer.scorer.assess(entity)
            x, y = entity.position
            writer.writerow([
                entity.id,
                entity.type.value,
                entity.country,
                f"{x:.3f}",
                f"{y:.3f}",
                filters.entity_visible(entity),
                f"{assessment.score:.2f}",
                assessment.category,
            ])

        return output.getvalue()

    # -- Files ---------------------------------------------------------------

    def to_json_file(self, path: str | Path) -> Path:
        path = Path(path)
        document = self.to_d3_json()
        path.write_text(json.dumps(document, indent=2, default=str), encoding="utf-8")
        logger.info(
            "Exported scene to %s (%d nodes, %d links)",
            path, len(document["nodes"]), len(document["links"]),
        )
        return path
