"""
LockCycle: static lock-order deadlock analysis

Scans Java-like source text for threads, extracts the order in which each
thread acquires locks, builds a resource-allocation graph and reports cycles
that span at least two threads.

Pipeline:
    source -> SourceScanner -> LockSequenceParser -> ResourceGraph
           -> CycleDetector -> CycleValidator -> report
"""

import logging
import time
from typing import Optional

from lockcycle.config import AnalyzerConfig
from lockcycle.cycles import CycleDetector, CycleValidator
from lockcycle.graph import ResourceGraph
from lockcycle.parser import LockSequenceParser
from lockcycle.report import format_deadlock_report
from lockcycle.result import AnalysisResult
from lockcycle.scanner import SourceScanner

logger = logging.getLogger(__name__)


class LockCycleAnalyzer:
    """
    Runs the whole analysis pipeline on source text.

    The analyzer holds only configuration and stateless stages; every call
    to ``analyze_source`` builds and discards its own ResourceGraph, so one
    instance can be reused for any number of inputs.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None, scanner=None):
        self.config = config or AnalyzerConfig()
        self.scanner = scanner or SourceScanner(self.config)
        self.parser = LockSequenceParser(self.config)
        self.detector = CycleDetector()
        self.validator = CycleValidator()

    def build_graph(self, source: str) -> ResourceGraph:
        """Scan ``source`` and return its resource-allocation graph"""
        graph = ResourceGraph()
        fragments = self.scanner.scan(source or "")
        for fragment in fragments:
            self.parser.apply(fragment, graph)
        logger.debug(
            "Built graph from %d thread fragment(s): %d nodes, %d edges",
            len(fragments),
            graph.number_of_nodes(),
            graph.number_of_edges(),
        )
        return graph

    def analyze_source(self, source: str) -> AnalysisResult:
        """
        Analyze one compilation unit or selected region.

        Args:
            source: Source text; empty or unrecognized text is not an error

        Returns:
            AnalysisResult with the validated cycles and rendered report
        """
        start_time = time.time()
        result = AnalysisResult()

        graph = self.build_graph(source)
        graph.dump()

        raw_cycles = self.detector.find_cycles(graph)
        result.cycles = self.validator.validate(graph, raw_cycles)
        result.has_deadlock = bool(result.cycles)
        result.report = format_deadlock_report(result.cycles)
        result.threads = graph.process_ids()

        result.metrics = {
            "threads": len(result.threads),
            "resources": len(graph.resource_ids()),
            "nodes": graph.number_of_nodes(),
            "edges": graph.number_of_edges(),
            "raw_cycles": len(raw_cycles),
            "rejected_cycles": len(raw_cycles) - len(result.cycles),
            "deadlock_cycles": len(result.cycles),
        }
        result.analysis_time = time.time() - start_time
        return result


def analyze_source(
    source: str, config: Optional[AnalyzerConfig] = None
) -> AnalysisResult:
    """Convenience wrapper around LockCycleAnalyzer.analyze_source"""
    return LockCycleAnalyzer(config).analyze_source(source)
