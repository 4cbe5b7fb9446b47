"""Shared fixtures: a small synthetic fishing-fleet investigation.

Structure (undirected view):

    Mar de la Vida OJSC ── 8327 ── Port Grove ── Coral Drift
            │                                       │
        Liam Conti ── Nameless (no type)             │
                                                     │
    979893388 ── Oceanfront Oasis Inc Carriers ──────┘
                        │
                    Sea Breeze ── Haul 2035-06

  - "Isolated Co" has no relationships
  - one link names a missing entity ("Ghost") and is dropped
  - the Coral Drift ── Port Grove link is given by node *index* (8 → 6)
"""

from __future__ import annotations

import copy

import pytest

from tidewatch.config.settings import Settings

SEEDS = [
    "Mar de la Vida OJSC",
    "979893388",
    "Oceanfront Oasis Inc Carriers",
    "8327",
]

FLEET_DOCUMENT = {
    "directed": True,
    "multigraph": True,
    "nodes": [
        {"id": "Mar de la Vida OJSC", "type": "organization", "country": "Oceanus"},
        {"id": "979893388", "type": "person", "country": "Oceanus"},
        {"id": "Oceanfront Oasis Inc Carriers", "type": "organization", "country": "Marebak"},
        {"id": 8327, "type": "vessel", "country": "Oceanus"},
        {"id": "Sea Breeze", "type": "vessel", "country": "Kondanovia"},
        {"id": "Liam Conti", "type": "person", "country": "Oceanus"},
        {"id": "Port Grove", "type": "location"},
        {"id": "Haul 2035-06", "type": "event"},
        {"id": "Coral Drift", "type": "vessel", "country": "Marebak"},
        {"id": "Isolated Co", "type": "organization", "country": "Rio Isla"},
        {"id": "Nameless", "dataset": "MC1"},
    ],
    "links": [
        {"source": "Mar de la Vida OJSC", "target": "8327", "value": 2, "type": "ownership"},
        {"source": "Mar de la Vida OJSC", "target": "Liam Conti"},
        {"source": "979893388", "target": "Oceanfront Oasis Inc Carriers"},
        {"source": "Oceanfront Oasis Inc Carriers", "target": "Sea Breeze", "value": 4},
        {"source": "Oceanfront Oasis Inc Carriers", "target": "Coral Drift"},
        {"source": "8327", "target": "Port Grove"},
        {"source": "Sea Breeze", "target": "Haul 2035-06"},
        {"source": "Liam Conti", "target": "Nameless"},
        {"source": "Ghost", "target": "8327"},
        {"source": 8, "target": 6},
    ],
}

FLEET_PROJECTION = {
    "8327": (0.5, 1.0),
    "Sea Breeze": (-1.0, 2.0),
    "Coral Drift": (2.0, -1.0),
    "Mar de la Vida OJSC": (0.0, 0.0),
    "Liam Conti": (1.0, 1.0),
    "Isolated Co": (5.0, 5.0),
}


@pytest.fixture
def fleet_document() -> dict:
    return copy.deepcopy(FLEET_DOCUMENT)


@pytest.fixture
def fleet_projection() -> dict:
    return dict(FLEET_PROJECTION)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        GRAPH_SOURCE="",
        PROJECTION_SOURCE="",
        SEED_ENTITIES=list(SEEDS),
        EXPANSION_THRESHOLD=50,
    )
