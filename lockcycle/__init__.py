"""LockCycle: static lock-order deadlock detection for Java-like source."""

__version__ = "1.0.0"

from lockcycle.analyzer import LockCycleAnalyzer, analyze_source
from lockcycle.config import AnalyzerConfig, WaitPolicy
from lockcycle.cycles import CycleDetector, CycleNode, CycleValidator
from lockcycle.graph import LockType, NodeKind, ResourceGraph
from lockcycle.parser import LockSequenceParser
from lockcycle.report import NO_DEADLOCK, format_deadlock_report
from lockcycle.result import AnalysisResult
from lockcycle.scanner import SourceScanner, ThreadFragment

__all__ = [
    "AnalysisResult",
    "AnalyzerConfig",
    "CycleDetector",
    "CycleNode",
    "CycleValidator",
    "LockCycleAnalyzer",
    "LockSequenceParser",
    "LockType",
    "NO_DEADLOCK",
    "NodeKind",
    "ResourceGraph",
    "SourceScanner",
    "ThreadFragment",
    "WaitPolicy",
    "analyze_source",
    "format_deadlock_report",
]
