"""
Resource-allocation graph for lock-order analysis.

Process nodes stand for analyzed threads, Resource nodes for lock expressions.
A waits-for fact adds a Process -> Resource edge, a holds fact adds a
Resource -> Process edge. Edges are never removed or deduplicated.

Nodes are keyed by their identity string alone. No scope or alias resolution
is done, so two different locks spelled the same way are one node, and a
thread id that happens to equal a lock expression collides with it.
"""

import itertools
import logging
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional

import networkx as nx

logger = logging.getLogger(__name__)


class NodeKind(Enum):
    """Graph node classification"""

    PROCESS = "process"
    RESOURCE = "resource"


class LockType(Enum):
    """How a resource was first acquired"""

    SYNCHRONIZED = "SYNCHRONIZED"  # synchronized (x) { ... }
    REENTRANT_LOCK = "REENTRANT_LOCK"  # x.lock() / x.unlock()


class FactKind(Enum):
    WAITS_FOR = "waits_for"
    HOLDS = "holds"


class LockFact(NamedTuple):
    """A single edge-producing observation about one thread and one lock"""

    kind: FactKind
    process_id: str
    resource_id: str
    lock_type: Optional[LockType] = None


class ResourceGraph:
    """Process/Resource multigraph owned by a single analysis run"""

    def __init__(self):
        self._graph = nx.MultiDiGraph()
        self._edge_seq = itertools.count()

    def get_or_create_node(
        self, node_id: str, kind: NodeKind, lock_type: Optional[LockType] = None
    ) -> str:
        """Return ``node_id``, creating the node with ``kind`` if it is new.

        An existing node keeps its original kind and lock type.
        """
        if node_id not in self._graph:
            self._graph.add_node(node_id, kind=kind, lock_type=lock_type)
        return node_id

    def add_holds(
        self, process_id: str, resource_id: str, lock_type: Optional[LockType] = None
    ):
        """Record that ``process_id`` holds ``resource_id`` (Resource -> Process)"""
        process = self.get_or_create_node(process_id, NodeKind.PROCESS)
        resource = self.get_or_create_node(resource_id, NodeKind.RESOURCE, lock_type)
        self._add_edge(resource, process)

    def add_waits_for(
        self, process_id: str, resource_id: str, lock_type: Optional[LockType] = None
    ):
        """Record that ``process_id`` waits for ``resource_id`` (Process -> Resource)"""
        process = self.get_or_create_node(process_id, NodeKind.PROCESS)
        resource = self.get_or_create_node(resource_id, NodeKind.RESOURCE, lock_type)
        self._add_edge(process, resource)

    def add_fact(self, fact: LockFact):
        if fact.kind is FactKind.WAITS_FOR:
            self.add_waits_for(fact.process_id, fact.resource_id, fact.lock_type)
        else:
            self.add_holds(fact.process_id, fact.resource_id, fact.lock_type)

    def _add_edge(self, source: str, target: str):
        self._graph.add_edge(source, target, seq=next(self._edge_seq))

    def kind(self, node_id: str) -> NodeKind:
        return self._graph.nodes[node_id]["kind"]

    def lock_type(self, node_id: str) -> Optional[LockType]:
        return self._graph.nodes[node_id]["lock_type"]

    def nodes(self) -> List[str]:
        """All node ids in creation order"""
        return list(self._graph.nodes)

    def successors(self, node_id: str) -> List[str]:
        """Edge targets of ``node_id`` in insertion order, duplicates included"""
        edges = self._graph.out_edges(node_id, data="seq")
        return [target for _, target, _ in sorted(edges, key=lambda edge: edge[2])]

    def process_ids(self) -> List[str]:
        return [n for n in self._graph.nodes if self.kind(n) is NodeKind.PROCESS]

    def resource_ids(self) -> List[str]:
        return [n for n in self._graph.nodes if self.kind(n) is NodeKind.RESOURCE]

    def number_of_nodes(self) -> int:
        return self._graph.number_of_nodes()

    def number_of_edges(self) -> int:
        return self._graph.number_of_edges()

    def __contains__(self, node_id) -> bool:
        return node_id in self._graph

    def __iter__(self) -> Iterator[str]:
        return iter(self.nodes())

    def __len__(self) -> int:
        return self.number_of_nodes()

    def dump(self):
        """Log every node and its outgoing edges at DEBUG level"""
        if not logger.isEnabledFor(logging.DEBUG):
            return
        for node in self._graph.nodes:
            logger.debug("Node: %s (%s)", node, self.kind(node).value)
            for target in self.successors(node):
                logger.debug("  -> %s (%s)", target, self.kind(target).value)
