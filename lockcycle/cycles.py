"""
Cycle discovery and deadlock validation over a ResourceGraph.

Detection is reachability based: a node that has been fully explored from
one root is never explored again from a later root, so a cycle reachable
only through such a node is not reported twice (or at all). This is not an
enumeration of every simple cycle.
"""

import logging
from enum import Enum, auto
from typing import Dict, Iterator, List, NamedTuple, Optional, Tuple

from lockcycle.graph import NodeKind, ResourceGraph

logger = logging.getLogger(__name__)

MIN_CYCLE_LENGTH = 4  # Closing node included: P -> R -> P' -> R' -> P
MIN_PROCESS_COUNT = 2


class VisitState(Enum):
    UNVISITED = auto()
    ON_PATH = auto()
    DONE = auto()


class CycleNode(NamedTuple):
    """One (identifier, kind) element of a reported cycle"""

    identifier: str
    kind: NodeKind


class CycleDetector:
    """Depth-first cycle detection with a scan-wide visitation state"""

    def find_cycles(self, graph: ResourceGraph) -> List[List[str]]:
        """
        Find cycles reachable from every root, in node insertion order.

        Args:
            graph: Graph to scan; it is not modified

        Returns:
            Raw cycles as node id lists whose last element repeats the first
        """
        state: Dict[str, VisitState] = {node: VisitState.UNVISITED for node in graph}
        cycles: List[List[str]] = []

        for node in graph.nodes():
            if state[node] is VisitState.UNVISITED:
                self._dfs(graph, node, state, cycles)

        logger.debug("Detected %d raw cycle(s)", len(cycles))
        return cycles

    def _dfs(
        self,
        graph: ResourceGraph,
        root: str,
        state: Dict[str, VisitState],
        cycles: List[List[str]],
    ):
        # Iterative; each frame is (node, its remaining successors)
        state[root] = VisitState.ON_PATH
        path: List[str] = [root]
        frames: List[Tuple[str, Iterator[str]]] = [
            (root, iter(graph.successors(root)))
        ]

        while frames:
            current, neighbors = frames[-1]
            neighbor = next(neighbors, None)

            if neighbor is None:
                frames.pop()
                path.pop()
                state[current] = VisitState.DONE
            elif state[neighbor] is VisitState.UNVISITED:
                state[neighbor] = VisitState.ON_PATH
                path.append(neighbor)
                frames.append((neighbor, iter(graph.successors(neighbor))))
            elif state[neighbor] is VisitState.ON_PATH:
                cycle = path[path.index(neighbor) :] + [neighbor]
                logger.debug("Found cycle: %s", " -> ".join(cycle))
                cycles.append(cycle)


class CycleValidator:
    """Keeps only cycles that indicate a cross-thread deadlock"""

    def validate(
        self, graph: ResourceGraph, cycles: List[List[str]]
    ) -> List[List[CycleNode]]:
        accepted = []
        for cycle in cycles:
            nodes = [CycleNode(node, graph.kind(node)) for node in cycle]
            valid, reason = self.check(nodes)
            if valid:
                accepted.append(nodes)
            else:
                logger.debug("Rejected cycle %s: %s", " -> ".join(cycle), reason)
        return accepted

    def check(self, cycle: List[CycleNode]) -> Tuple[bool, Optional[str]]:
        """Return ``(True, None)`` or ``(False, reason)`` for one cycle"""
        if len(cycle) < MIN_CYCLE_LENGTH:
            return False, f"length {len(cycle)} < {MIN_CYCLE_LENGTH}"

        for current, following in zip(cycle, cycle[1:]):
            if current.kind is following.kind:
                return False, (
                    f"{current.identifier} and {following.identifier} "
                    f"are both {current.kind.value} nodes"
                )

        processes = {node.identifier for node in cycle if node.kind is NodeKind.PROCESS}
        if len(processes) < MIN_PROCESS_COUNT:
            return False, f"only {len(processes)} distinct process(es)"

        return True, None


def is_deadlock_cycle(cycle: List[CycleNode]) -> bool:
    return CycleValidator().check(cycle)[0]
