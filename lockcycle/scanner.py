"""
Lexical extraction of thread bodies from Java-like source text.

The scanner does not parse. It runs four regex rules in a fixed order and
turns every match into a ThreadFragment with a freshly numbered thread id.
Rules may overlap (an anonymous Runnable is matched by rules 2, 3 and often
4); overlapping matches are kept, each with its own id.
"""

import itertools
import logging
import re
from enum import Enum
from typing import List, NamedTuple, Optional

from lockcycle.config import AnalyzerConfig

logger = logging.getLogger(__name__)


class ThreadRule(Enum):
    """Extraction rules, in priority order"""

    LAMBDA = 1  # new Thread(() -> { ... }).start();
    ANONYMOUS_RUNNABLE = 2  # new Thread(new Runnable() { public void run() { ... } }).start();
    LOOSE_RUNNABLE = 3  # new Thread(new Runnable() { ... }).start();
    RUN_METHOD = 4  # public void run() { ... } near a thread marker


class ThreadFragment(NamedTuple):
    """Source text believed to execute on one thread"""

    thread_id: str
    body: str
    rule: ThreadRule
    offset: int  # Start of the whole match in the scanned source


class SourceScanner:
    """Finds thread bodies using staged pattern extraction.

    Any object exposing ``scan(source) -> List[ThreadFragment]`` can replace
    this class in LockCycleAnalyzer.
    """

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()
        self._compile_patterns()

    def _compile_patterns(self):
        """Pre-compile regex patterns for performance"""
        start_call = r"\)\s*\.start\s*\(\s*\)\s*;"
        self.patterns = {
            ThreadRule.LAMBDA: re.compile(
                r"new\s+Thread\s*\(\s*\(\s*\)\s*->\s*\{([\s\S]*?)\}\s*" + start_call
            ),
            ThreadRule.ANONYMOUS_RUNNABLE: re.compile(
                r"new\s+Thread\s*\(\s*new\s+Runnable\s*\(\s*\)\s*\{\s*"
                r"public\s+void\s+run\s*\(\s*\)\s*\{([\s\S]*?)\}\s*\}\s*" + start_call
            ),
            ThreadRule.LOOSE_RUNNABLE: re.compile(
                r"new\s+Thread\s*\(\s*new\s+Runnable\s*\(\s*\)\s*\{([\s\S]*?)\}\s*"
                + start_call
            ),
            ThreadRule.RUN_METHOD: re.compile(
                r"public\s+void\s+run\s*\(\s*\)\s*\{([\s\S]*?)\}"
            ),
        }

    def scan(self, source: str) -> List[ThreadFragment]:
        """Extract every thread body in ``source``.

        Thread ids are ``<prefix>1``, ``<prefix>2``, ... in discovery order
        across all rules. Text without recognizable threads yields an empty
        list.
        """
        fragments: List[ThreadFragment] = []
        if not source or not source.strip():
            return fragments

        counter = itertools.count(1)
        for rule, pattern in self.patterns.items():
            for match in pattern.finditer(source):
                if rule is ThreadRule.RUN_METHOD and not self._has_thread_marker(
                    source, match.start()
                ):
                    continue
                thread_id = f"{self.config.thread_prefix}{next(counter)}"
                fragments.append(
                    ThreadFragment(thread_id, match.group(1), rule, match.start())
                )
                logger.debug(
                    "Found %s via %s at offset %d", thread_id, rule.name, match.start()
                )

        return fragments

    def _has_thread_marker(self, source: str, position: int) -> bool:
        """Check the text just before ``position`` for a thread marker"""
        context = source[max(0, position - self.config.lookback_window) : position]
        return any(marker in context for marker in self.config.thread_markers)
