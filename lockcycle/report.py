"""Text rendering of detected deadlock cycles."""

from datetime import datetime
from typing import List

from lockcycle.cycles import CycleNode
from lockcycle.graph import NodeKind

NO_DEADLOCK = "No deadlock detected"
DEADLOCK_HEADER = "Deadlock detected!"
ARROW = " → "

GENERAL_SUGGESTIONS = [
    "Acquire locks in one global order in every thread",
    "Use tryLock() with a timeout instead of waiting forever",
    "Split coarse locks into finer-grained ones to reduce contention",
    "Avoid taking a lock while already holding another one",
    "Prefer concurrent collections and atomics over explicit locks",
]


def format_node(node: CycleNode) -> str:
    return f"{node.identifier}({node.kind.value})"


def format_deadlock_report(cycles: List[List[CycleNode]]) -> str:
    """Render validated cycles, one numbered line each"""
    if not cycles:
        return NO_DEADLOCK

    lines = [DEADLOCK_HEADER]
    for i, cycle in enumerate(cycles, 1):
        lines.append(f"Deadlock cycle {i}: " + ARROW.join(map(format_node, cycle)))
    return "\n".join(lines)


def _unique_locks(cycle: List[CycleNode]) -> List[str]:
    locks: List[str] = []
    for node in cycle:
        if node.kind is NodeKind.RESOURCE and node.identifier not in locks:
            locks.append(node.identifier)
    return locks


def format_suggestions(cycles: List[List[CycleNode]]) -> str:
    """Remediation advice for the given cycles"""
    if not cycles:
        return "No deadlock detected, nothing to fix"

    lines = ["Suggestions:"]
    lines.extend(f"{i}. {tip}" for i, tip in enumerate(GENERAL_SUGGESTIONS, 1))

    for i, cycle in enumerate(cycles, 1):
        lines.append("")
        lines.append(f"Deadlock cycle {i}:")
        locks = _unique_locks(cycle)
        if len(locks) >= 2:
            lines.append("   - Use a single acquisition order: " + ARROW.join(locks))
        lines.append("   - Avoid nesting acquisitions of these locks")
    return "\n".join(lines)


def format_analysis_report(result, filename: str, suggestions: bool = False) -> str:
    """Full report for one analyzed file"""
    report = []

    report.append("=" * 80)
    report.append("LockCycle Deadlock Analysis Report")
    report.append("=" * 80)
    report.append(f"File: {filename}")
    report.append(f"Analysis Time: {result.analysis_time:.3f} seconds")
    report.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    report.append("\nSUMMARY")
    report.append("-" * 50)
    if result.has_deadlock:
        report.append(f"{len(result.cycles)} POTENTIAL DEADLOCK CYCLE(S) FOUND")
    else:
        report.append("NO DEADLOCK CYCLES DETECTED")

    report.append("\nAnalysis Metrics:")
    report.append(f"  • Threads: {result.metrics.get('threads', 0)}")
    report.append(f"  • Locks: {result.metrics.get('resources', 0)}")
    report.append(f"  • Graph Edges: {result.metrics.get('edges', 0)}")
    report.append(f"  • Raw Cycles: {result.metrics.get('raw_cycles', 0)}")
    report.append(f"  • Rejected Cycles: {result.metrics.get('rejected_cycles', 0)}")

    if result.errors:
        report.append("\nERRORS & WARNINGS")
        report.append("-" * 50)
        for i, error in enumerate(result.errors, 1):
            report.append(f"{i}. {error}")

    report.append("\nDEADLOCK CYCLES")
    report.append("-" * 50)
    report.append(format_deadlock_report(result.cycles))

    if suggestions and result.has_deadlock:
        report.append("")
        report.append(format_suggestions(result.cycles))

    report.append("\n" + "=" * 80)
    return "\n".join(report)
