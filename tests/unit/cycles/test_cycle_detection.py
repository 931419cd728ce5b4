"""Unit tests for cycle detection and deadlock validation."""
import random

import pytest

from lockcycle.cycles import (
    CycleDetector,
    CycleNode,
    CycleValidator,
    is_deadlock_cycle,
)
from lockcycle.graph import NodeKind, ResourceGraph

P = NodeKind.PROCESS
R = NodeKind.RESOURCE


def crossed_two_lock_graph():
    """thread1: hold lock1, wait+hold lock2; thread2: hold lock2, wait+hold lock1"""
    graph = ResourceGraph()
    graph.add_holds("thread1", "lock1")
    graph.add_waits_for("thread1", "lock2")
    graph.add_holds("thread1", "lock2")
    graph.add_holds("thread2", "lock2")
    graph.add_waits_for("thread2", "lock1")
    graph.add_holds("thread2", "lock1")
    return graph


def plain_graph(edges):
    """Graph of process nodes only, for exercising the DFS itself"""
    graph = ResourceGraph()
    for source, target in edges:
        graph.get_or_create_node(source, P)
        graph.get_or_create_node(target, P)
        graph._add_edge(source, target)
    return graph


class TestCycleDetector:
    @pytest.fixture
    def detector(self):
        return CycleDetector()

    def test_raw_cycles_of_crossed_locks(self, detector):
        cycles = detector.find_cycles(crossed_two_lock_graph())

        assert cycles == [
            ["thread1", "lock2", "thread1"],
            ["thread1", "lock2", "thread2", "lock1", "thread1"],
            ["thread2", "lock1", "thread2"],
        ]

    def test_detection_is_repeatable(self, detector):
        graph = crossed_two_lock_graph()

        assert detector.find_cycles(graph) == detector.find_cycles(graph)

    def test_empty_graph(self, detector):
        assert detector.find_cycles(ResourceGraph()) == []

    def test_self_loop(self, detector):
        graph = plain_graph([("a", "a")])

        assert detector.find_cycles(graph) == [["a", "a"]]

    def test_done_nodes_are_not_explored_again(self, detector):
        """Only one of the two cycles through a is found."""
        graph = plain_graph([("a", "b"), ("b", "c"), ("c", "a"), ("a", "c")])

        assert detector.find_cycles(graph) == [["a", "b", "c", "a"]]

    def test_later_root_reaching_done_node(self, detector):
        graph = plain_graph([("a", "b"), ("b", "a"), ("c", "a")])

        assert detector.find_cycles(graph) == [["a", "b", "a"]]

    def test_parallel_edges_report_cycle_twice(self, detector):
        graph = plain_graph([("a", "b"), ("b", "a"), ("b", "a")])

        assert detector.find_cycles(graph) == [["a", "b", "a"], ["a", "b", "a"]]

    def test_long_chain_does_not_exhaust_the_stack(self, detector):
        edges = [(f"n{i}", f"n{i + 1}") for i in range(5000)]

        assert detector.find_cycles(plain_graph(edges)) == []

    def test_cycle_at_the_end_of_a_long_chain(self, detector):
        edges = [(f"n{i}", f"n{i + 1}") for i in range(5000)]
        edges.append(("n5000", "n4999"))

        assert detector.find_cycles(plain_graph(edges)) == [["n4999", "n5000", "n4999"]]


class TestCycleValidator:
    @pytest.fixture
    def validator(self):
        return CycleValidator()

    def test_crossed_locks_yield_one_deadlock(self, validator):
        graph = crossed_two_lock_graph()
        cycles = validator.validate(graph, CycleDetector().find_cycles(graph))

        assert len(cycles) == 1
        assert cycles[0] == [
            CycleNode("thread1", P),
            CycleNode("lock2", R),
            CycleNode("thread2", P),
            CycleNode("lock1", R),
            CycleNode("thread1", P),
        ]
        assert len(set(cycles[0])) == 4

    def test_short_cycle_rejected(self):
        cycle = [CycleNode("t1", P), CycleNode("a", R), CycleNode("t1", P)]

        assert not is_deadlock_cycle(cycle)

    def test_single_process_cycle_rejected(self, validator):
        cycle = [
            CycleNode("t1", P),
            CycleNode("a", R),
            CycleNode("t1", P),
            CycleNode("b", R),
            CycleNode("t1", P),
        ]

        valid, reason = validator.check(cycle)
        assert not valid
        assert "process" in reason

    def test_non_alternating_cycle_rejected(self, validator):
        """A process -> process edge appears when ids collide."""
        graph = ResourceGraph()
        graph.add_holds("t1", "l1")
        graph.add_holds("t2", "l2")
        graph.add_waits_for("t1", "t2")
        graph.add_waits_for("t2", "l1")

        raw = CycleDetector().find_cycles(graph)
        assert raw == [["t1", "t2", "l1", "t1"]]
        assert validator.validate(graph, raw) == []

    def test_valid_cycle(self):
        cycle = [
            CycleNode("t1", P),
            CycleNode("a", R),
            CycleNode("t2", P),
            CycleNode("b", R),
            CycleNode("t1", P),
        ]

        assert is_deadlock_cycle(cycle)

    @pytest.mark.parametrize("seed", range(20))
    def test_validated_cycles_satisfy_invariants(self, seed):
        """Random fact sequences never produce an invalid reported cycle."""
        rng = random.Random(seed)
        graph = ResourceGraph()
        threads = [f"thread{i}" for i in range(1, 5)]
        locks = [f"lock{i}" for i in range(1, 6)]
        for _ in range(40):
            thread, lock = rng.choice(threads), rng.choice(locks)
            if rng.random() < 0.5:
                graph.add_holds(thread, lock)
            else:
                graph.add_waits_for(thread, lock)

        detector = CycleDetector()
        raw = detector.find_cycles(graph)
        assert raw == detector.find_cycles(graph)

        for cycle in CycleValidator().validate(graph, raw):
            assert len(cycle) >= 4
            assert cycle[0] == cycle[-1]
            assert all(a.kind is not b.kind for a, b in zip(cycle, cycle[1:]))
            assert len({n.identifier for n in cycle if n.kind is P}) >= 2
