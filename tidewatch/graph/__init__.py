"""Tidewatch graph layer.

Loads the investigation's node-link document into a resolved entity
graph, samples the working subgraph around the entities of interest,
and scores entities for the info panel.

Usage::

    from tidewatch.graph import GraphLoader, NeighborhoodSampler, RiskScorer

    graph, stats = GraphLoader().load(document)
    subgraph = NeighborhoodSampler(graph).sample(["8327"])

    assessment = RiskScorer(graph).assess(graph.get("8327"))
    print(assessment.category, assessment.message)
"""

from tidewatch.graph.analysis import ConnectionAnalysis, TypeDistribution
from tidewatch.graph.loader import GraphLoader, LoadStats
from tidewatch.graph.models import Entity, EntityType, Relationship
from tidewatch.graph.risk import RiskAssessment, RiskScorer
from tidewatch.graph.sampler import NeighborhoodSampler, WorkingSubgraph
from tidewatch.graph.store import EntityGraph

__all__ = [
    "ConnectionAnalysis",
    "TypeDistribution",
    "GraphLoader",
    "LoadStats",
    "Entity",
    "EntityType",
    "Relationship",
    "RiskAssessment",
    "RiskScorer",
    "NeighborhoodSampler",
    "WorkingSubgraph",
    "EntityGraph",
]
