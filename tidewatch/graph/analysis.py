"""Connection-type breakdowns for the info panel.

Two views of "who is this entity connected to":

  - the neighbour-type distribution of a single entity, and
  - the dataset-wide mean number of connections to each type per node,
    which the panel draws as a baseline next to the first.

Both count over the full entity graph.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from tidewatch.graph.models import KNOWN_TYPES, Entity
from tidewatch.graph.store import EntityGraph


@dataclass
class TypeDistribution:
    """Connection counts (or means) per neighbour type."""

    counts: dict[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        return sum(self.counts.values())


class ConnectionAnalysis:
    """Neighbour-type statistics over an ``EntityGraph``."""

    def __init__(self, graph: EntityGraph) -> None:
        self._graph = graph
        self._mean: TypeDistribution | None = None

    def connection_type_distribution(self, entity: Entity) -> TypeDistribution:
        counts: dict[str, float] = {t.value: 0 for t in KNOWN_TYPES}
        for rel in self._graph.incident(entity):
            neighbour = rel.other(entity)
            counts[neighbour.type.value] = counts.get(neighbour.type.value, 0) + 1
        return TypeDistribution(counts=counts)

    def mean_distribution(self) -> TypeDistribution:
        """Mean per-node connections to each type.

        Every relationship contributes one count to each endpoint's type;
        totals are divided by the number of entities. The result is cached:
        the graph is immutable after load.
        """
        if self._mean is not None:
            return self._mean

        totals: dict[str, float] = {t.value: 0 for t in KNOWN_TYPES}
        for rel in self._graph.relationships:
            for endpoint in (rel.source, rel.target):
                totals[endpoint.type.value] = totals.get(endpoint.type.value, 0) + 1

        node_count = len(self._graph)
        if node_count == 0:
            self._mean = TypeDistribution(counts={t: 0.0 for t in totals})
        else:
            self._mean = TypeDistribution(
                counts={t: n / node_count for t, n in totals.items()}
            )
        return self._mean

    def compare(self, entity: Entity) -> list[dict[str, float | str]]:
        """Rows of ``{type, count, mean}`` for the entity vs. the dataset mean."""
        own = self.connection_type_distribution(entity).counts
        mean = self.mean_distribution().counts
        types = list(own) + [t for t in mean if t not in own]
        return [
            {"type": t, "count": own.get(t, 0), "mean": mean.get(t, 0.0)}
            for t in types
        ]
