"""Structured analysis output."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from lockcycle.cycles import CycleNode


@dataclass
class AnalysisResult:
    """Complete analysis results"""

    has_deadlock: bool = False
    cycles: List[List[CycleNode]] = field(default_factory=list)
    report: str = ""
    threads: List[str] = field(default_factory=list)
    metrics: Dict[str, int] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)
    read_failed: bool = False  # Source could not be read; errors say why
    analysis_time: float = 0.0
    file_analyzed: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation"""
        return {
            "file": self.file_analyzed,
            "has_deadlock": self.has_deadlock,
            "cycles": [
                [{"id": node.identifier, "kind": node.kind.value} for node in cycle]
                for cycle in self.cycles
            ],
            "threads": list(self.threads),
            "metrics": dict(self.metrics),
            "errors": list(self.errors),
            "read_failed": self.read_failed,
            "analysis_time": self.analysis_time,
        }
