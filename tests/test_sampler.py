"""Tests for tidewatch.graph.store and tidewatch.graph.sampler."""

import pytest

from tidewatch.graph.loader import GraphLoader
from tidewatch.graph.models import Entity, EntityType, Relationship
from tidewatch.graph.sampler import NeighborhoodSampler
from tidewatch.graph.store import EntityGraph

from conftest import SEEDS


def _chain(*ids: str) -> EntityGraph:
    """Path graph ids[0] – ids[1] – ... as a store."""
    entities = [Entity(i, EntityType.PERSON) for i in ids]
    rels = [
        Relationship(entities[k], entities[k + 1], index=k)
        for k in range(len(entities) - 1)
    ]
    return EntityGraph(entities, rels)


def _star(center: str, n: int) -> EntityGraph:
    hub = Entity(center, EntityType.ORGANIZATION)
    leaves = [Entity(f"{center}-{k}", EntityType.VESSEL) for k in range(n)]
    rels = [Relationship(hub, leaf, index=k) for k, leaf in enumerate(leaves)]
    return EntityGraph([hub, *leaves], rels)


@pytest.fixture
def fleet_graph(fleet_document):
    graph, _ = GraphLoader().load(fleet_document)
    return graph


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class TestEntityGraph:
    def test_lookup_and_counts(self, fleet_graph):
        assert len(fleet_graph) == 11
        assert fleet_graph.node_count == 11
        assert fleet_graph.edge_count == 9
        assert fleet_graph.get("missing") is None

    def test_incident_is_undirected(self, fleet_graph):
        ids = {r.other(fleet_graph.get("8327")).id for r in fleet_graph.incident("8327")}
        assert ids == {"Mar de la Vida OJSC", "Port Grove"}

    def test_incident_ordered_by_document_index(self, fleet_graph):
        rels = fleet_graph.incident("Oceanfront Oasis Inc Carriers")
        assert [r.index for r in rels] == sorted(r.index for r in rels)

    def test_self_loop_counted_once(self):
        a = Entity("A")
        graph = EntityGraph([a], [Relationship(a, a)])
        assert graph.degree("A") == 1

    def test_parallel_relationships_kept(self):
        a, b = Entity("A"), Entity("B")
        graph = EntityGraph([a, b], [Relationship(a, b, index=0), Relationship(a, b, index=1)])
        assert graph.edge_count == 2
        assert graph.degree(a) == 2

    def test_rejects_foreign_endpoint(self):
        a, b = Entity("A"), Entity("B")
        with pytest.raises(ValueError):
            EntityGraph([a], [Relationship(a, b)])

    def test_isolated_entity(self, fleet_graph):
        assert fleet_graph.incident("Isolated Co") == []

    def test_summary(self, fleet_graph):
        summary = fleet_graph.summary()
        assert summary["node_count"] == 11
        assert summary["type_counts"]["organization"] == 3


# ---------------------------------------------------------------------------
# Sampler
# ---------------------------------------------------------------------------


class TestNeighborhoodSampler:
    def test_two_hop_fallback_worked_example(self):
        graph = _chain("A", "B", "C")
        sub = NeighborhoodSampler(graph, expansion_threshold=50).sample(["A"])
        assert sub.entity_ids == {"A", "B", "C"}
        assert len(sub.relationships) == 2
        assert sub.expanded

    def test_fallback_is_single_pass(self):
        graph = _chain("A", "B", "C", "D", "E")
        sub = NeighborhoodSampler(graph, expansion_threshold=50).sample(["A"])
        assert sub.entity_ids == {"A", "B", "C"}

    def test_no_fallback_at_threshold(self):
        graph = _star("hub", 60)
        sub = NeighborhoodSampler(graph, expansion_threshold=50).sample(["hub"])
        assert len(sub) == 61
        assert not sub.expanded

    def test_threshold_is_configurable(self):
        graph = _chain("A", "B", "C")
        sub = NeighborhoodSampler(graph, expansion_threshold=2).sample(["A"])
        assert sub.entity_ids == {"A", "B"}
        assert not sub.expanded

    def test_unknown_seeds_skipped(self):
        graph = _chain("A", "B")
        sub = NeighborhoodSampler(graph).sample(["nobody", "A"])
        assert sub.seeds == {"A"}
        assert sub.entity_ids == {"A", "B"}

    def test_all_seeds_unknown_gives_empty_subgraph(self):
        sub = NeighborhoodSampler(_chain("A", "B")).sample(["nobody"])
        assert len(sub) == 0
        assert sub.relationships == ()

    def test_isolated_seed_kept(self, fleet_graph):
        sub = NeighborhoodSampler(fleet_graph).sample(["Isolated Co"])
        assert sub.entity_ids == {"Isolated Co"}

    def test_fleet_sample(self, fleet_graph):
        sub = NeighborhoodSampler(fleet_graph).sample(SEEDS)
        assert sub.expanded
        assert "Isolated Co" not in sub
        assert {"Haul 2035-06", "Nameless"} <= sub.entity_ids
        assert len(sub) == 10
        assert len(sub.relationships) == 9

    def test_no_dangling_relationships(self, fleet_graph):
        sub = NeighborhoodSampler(fleet_graph).sample(SEEDS)
        for rel in sub.relationships:
            assert rel.source.id in sub
            assert rel.target.id in sub

    def test_deterministic_under_seed_order(self, fleet_graph):
        sampler = NeighborhoodSampler(fleet_graph)
        forward = sampler.sample(SEEDS)
        backward = sampler.sample(list(reversed(SEEDS)))
        assert forward.entities == backward.entities
        assert forward.relationships == backward.relationships

    def test_seed_flag(self, fleet_graph):
        sub = NeighborhoodSampler(fleet_graph).sample(SEEDS)
        assert sub.is_seed("8327")
        assert not sub.is_seed(sub.get("Port Grove"))
