"""Heuristic risk scoring for entities.

The score is an explainable 0–10 heuristic built from connectivity and
entity type, not a calibrated classifier. It always uses the entity's
relationships in the *full* dataset, so a score does not move when the
analyst toggles type filters or the working subgraph is re-sampled.

Terms (summed, then clamped to [0, 10]):

  - degree:        min(connections * 0.3, 3)
  - type:          vessel 2, organization 1, person 0.5, others 0
  - vessel links:  min(vessel neighbours * 0.5, 2)
  - org links:     min(organization neighbours * 0.3, 1.5)
  - suspicion:     +3 when connections > 10 or vessel neighbours > 3
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from tidewatch.graph.models import Entity, EntityType
from tidewatch.graph.store import EntityGraph

logger = logging.getLogger(__name__)

MAX_SCORE = 10.0

TYPE_WEIGHTS: dict[EntityType, float] = {
    EntityType.VESSEL: 2.0,        # Potential illicit transport
    EntityType.ORGANIZATION: 1.0,  # Structured entity
    EntityType.PERSON: 0.5,
}

HIGH_RISK = 7.0
MEDIUM_RISK = 4.0

RISK_CATEGORIES: dict[str, dict[str, str]] = {
    "high": {
        "label": "High risk",
        "color": "#e74c3c",
        "message": "High risk. Strongly recommend further investigation.",
    },
    "medium": {
        "label": "Medium risk",
        "color": "#f39c12",
        "message": "Medium risk. Suggest continuous monitoring.",
    },
    "low": {
        "label": "Low risk",
        "color": "#2ecc71",
        "message": "Low risk. No obvious suspicious activity.",
    },
}


@dataclass
class RiskAssessment:
    """Risk score for one entity with its per-term breakdown."""

    entity_id: str
    entity_type: EntityType
    score: float                   # 0–10
    connections: int
    vessel_links: int
    organization_links: int
    factors: dict[str, float] = field(default_factory=dict)
    suspicious: bool = False

    @property
    def category(self) -> str:
        return risk_category(self.score)

    @property
    def color(self) -> str:
        return RISK_CATEGORIES[self.category]["color"]

    @property
    def message(self) -> str:
        return RISK_CATEGORIES[self.category]["message"]

    @property
    def label(self) -> str:
        return RISK_CATEGORIES[self.category]["label"]

    @property
    def explanation(self) -> str:
        parts = [
            f"{self.entity_id} ({self.entity_type.label}) scores {self.score:g}/10 "
            f"from {self.connections} connection(s)"
        ]
        if self.vessel_links:
            parts.append(f"{self.vessel_links} to vessels")
        if self.organization_links:
            parts.append(f"{self.organization_links} to organizations")
        text = ", ".join(parts) + "."
        if self.suspicious:
            text += " Connectivity exceeds the suspicion cutoffs."
        return text


def score(
    entity_type: EntityType,
    connections: int,
    vessel_links: int = 0,
    organization_links: int = 0,
    suspicion_connections: int = 10,
    suspicion_vessel_links: int = 3,
) -> float:
    """Risk score in [0, 10] from an entity's type and connection counts."""
    factors = _factors(
        entity_type, connections, vessel_links, organization_links,
        suspicion_connections, suspicion_vessel_links,
    )
    return _clamp(sum(factors.values()))


def risk_category(value: float) -> str:
    if value >= HIGH_RISK:
        return "high"
    if value >= MEDIUM_RISK:
        return "medium"
    return "low"


def _factors(
    entity_type: EntityType,
    connections: int,
    vessel_links: int,
    organization_links: int,
    suspicion_connections: int,
    suspicion_vessel_links: int,
) -> dict[str, float]:
    connections = max(connections, 0)
    vessel_links = max(vessel_links, 0)
    organization_links = max(organization_links, 0)

    suspicious = (
        connections > suspicion_connections
        or vessel_links > suspicion_vessel_links
    )
    return {
        "degree": min(connections * 0.3, 3.0),
        "type": TYPE_WEIGHTS.get(entity_type, 0.0),
        "vessel_links": min(vessel_links * 0.5, 2.0),
        "organization_links": min(organization_links * 0.3, 1.5),
        "suspicion": 3.0 if suspicious else 0.0,
    }


def _clamp(value: float) -> float:
    return min(max(value, 0.0), MAX_SCORE)


class RiskScorer:
    """Score entities against the full entity graph.

    Parameters
    ----------
    graph:
        The full (unsampled) entity graph.
    suspicion_connections:
        Connection count above which the suspicion bonus applies.
    suspicion_vessel_links:
        Vessel-neighbour count above which the suspicion bonus applies.
    """

    def __init__(
        self,
        graph: EntityGraph,
        suspicion_connections: int = 10,
        suspicion_vessel_links: int = 3,
    ) -> None:
        self._graph = graph
        self._suspicion_connections = suspicion_connections
        self._suspicion_vessel_links = suspicion_vessel_links

    def assess(self, entity: Entity) -> RiskAssessment:
        relationships = self._graph.incident(entity)
        connections = len(relationships)
        vessel_links = 0
        organization_links = 0
        for rel in relationships:
            neighbour_type = rel.other(entity).type
            if neighbour_type is EntityType.VESSEL:
                vessel_links += 1
            elif neighbour_type is EntityType.ORGANIZATION:
                organization_links += 1

        factors = _factors(
            entity.type, connections, vessel_links, organization_links,
            self._suspicion_connections, self._suspicion_vessel_links,
        )
        value = _clamp(sum(factors.values()))

        logger.debug("Risk for %s: %.2f %s", entity.id, value, factors)
        return RiskAssessment(
            entity_id=entity.id,
            entity_type=entity.type,
            score=value,
            connections=connections,
            vessel_links=vessel_links,
            organization_links=organization_links,
            factors=factors,
            suspicious=factors["suspicion"] > 0,
        )
