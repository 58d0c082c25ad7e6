"""Dependency graph over registered test units."""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum, auto

from hdata_conformance.errors import (
    DependencyCycleError,
    DuplicateTestError,
    UnknownDependencyError,
    UnknownTestError,
)
from hdata_conformance.units.base import TestUnit

log = logging.getLogger(__name__)


class _Mark(Enum):
    UNVISITED = auto()
    IN_PROGRESS = auto()
    DONE = auto()


@dataclass(frozen=True)
class Edge:
    """Edge from a test unit to one of its prerequisites."""

    target: str
    advisory: bool = False


@dataclass(frozen=True, kw_only=True)
class DependencyGraph:
    """Immutable mapping from each test id to the ids it depends on.

    Nodes keep registration order and edges keep declaration order, so the
    topological order is reproducible across runs.
    """

    nodes: Sequence[str]
    edges: Mapping[str, Sequence[Edge]]

    @classmethod
    def build(cls, units: Iterable[TestUnit]) -> "DependencyGraph":
        """Build and validate the graph for a set of registered units.

        Raises:
            DuplicateTestError: If two units share an id
            UnknownDependencyError: If a prerequisite is not registered
            DependencyCycleError: If the dependencies form a cycle

        """
        nodes: list[str] = []
        edges: dict[str, tuple[Edge, ...]] = {}
        for unit in units:
            if unit.test_id in edges:
                raise DuplicateTestError(f"Test id {unit.test_id} is registered twice")
            nodes.append(unit.test_id)
            edges[unit.test_id] = tuple(
                Edge(target=dep.unit.test_id, advisory=dep.advisory)
                for dep in unit.declared_dependencies()
            )

        for test_id in nodes:
            for edge in edges[test_id]:
                if edge.target not in edges:
                    raise UnknownDependencyError(test_id, edge.target)

        graph = cls(nodes=tuple(nodes), edges=edges)
        graph.topological_order()
        return graph

    def prerequisites_of(self, test_id: str) -> Sequence[Edge]:
        return self.edges[test_id]

    def topological_order(self) -> Sequence[str]:
        """Return the ids ordered so that prerequisites come first.

        Raises:
            DependencyCycleError: If a back edge is found during traversal

        """
        marks = dict.fromkeys(self.nodes, _Mark.UNVISITED)
        order: list[str] = []

        for root in self.nodes:
            if marks[root] is not _Mark.UNVISITED:
                continue
            marks[root] = _Mark.IN_PROGRESS
            path = [root]
            pending = [iter(self.edges[root])]
            while pending:
                edge = next(pending[-1], None)
                if edge is None:
                    pending.pop()
                    node = path.pop()
                    marks[node] = _Mark.DONE
                    order.append(node)
                    continue
                mark = marks[edge.target]
                if mark is _Mark.IN_PROGRESS:
                    cycle = path[path.index(edge.target) :] + [edge.target]
                    log.error("Dependency cycle: %s", " -> ".join(cycle))
                    raise DependencyCycleError(cycle)
                if mark is _Mark.UNVISITED:
                    marks[edge.target] = _Mark.IN_PROGRESS
                    path.append(edge.target)
                    pending.append(iter(self.edges[edge.target]))

        return order

    def closure(self, test_ids: Iterable[str]) -> set[str]:
        """Return the given ids together with all their transitive prerequisites.

        Raises:
            UnknownTestError: If a requested id is not in the graph

        """
        selected: set[str] = set()
        pending = list(test_ids)
        while pending:
            test_id = pending.pop()
            if test_id not in self.edges:
                raise UnknownTestError(f"Test {test_id} is not registered")
            if test_id in selected:
                continue
            selected.add(test_id)
            pending.extend(edge.target for edge in self.edges[test_id])
        return selected
