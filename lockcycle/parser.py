"""
Lock sequence extraction for a single thread body.

Two operation families are recognized, each with its own lock stack:

- ``synchronized (expr) {`` opens a critical section; every ``}`` closes the
  innermost one. Braces that do not belong to a critical section still pop
  the stack, so deeply nested unrelated blocks can desynchronize it.
- ``name.lock()`` acquires ``name``; ``name.unlock()`` releases it and every
  lock taken after it when unlock tracking is enabled.

Lock expressions are used verbatim as resource ids, including ``null`` and
string literals.
"""

import logging
import re
from typing import List, Optional

from lockcycle.config import AnalyzerConfig, WaitPolicy
from lockcycle.graph import FactKind, LockFact, LockType, ResourceGraph
from lockcycle.scanner import ThreadFragment

logger = logging.getLogger(__name__)


class LockSequenceParser:
    """Turns a thread fragment into ordered waits-for / holds facts"""

    def __init__(self, config: Optional[AnalyzerConfig] = None):
        self.config = config or AnalyzerConfig()
        self._compile_patterns()

    def _compile_patterns(self):
        self.patterns = {
            "synchronized": re.compile(r"(synchronized\s*\(([^)]+)\)\s*\{)|\}"),
            "lock_call": re.compile(r"(\w+)\.lock\s*\(\s*\)"),
            "lock_op": re.compile(r"(\w+)\.(lock|unlock)\s*\(\s*\)"),
        }

    def parse(self, fragment: ThreadFragment) -> List[LockFact]:
        """Return the facts for ``fragment`` in emission order"""
        facts = self._parse_synchronized_blocks(fragment.body, fragment.thread_id)
        facts.extend(self._parse_lock_calls(fragment.body, fragment.thread_id))
        logger.debug("%s: %d lock facts", fragment.thread_id, len(facts))
        return facts

    def apply(self, fragment: ThreadFragment, graph: ResourceGraph) -> List[LockFact]:
        """Parse ``fragment`` and add its facts to ``graph``"""
        facts = self.parse(fragment)
        for fact in facts:
            graph.add_fact(fact)
        return facts

    def _parse_synchronized_blocks(self, code: str, thread_id: str) -> List[LockFact]:
        facts: List[LockFact] = []
        lock_stack: List[str] = []

        for match in self.patterns["synchronized"].finditer(code):
            if match.group(1):
                lock_object = match.group(2).strip()
                self._acquire(
                    facts, lock_stack, thread_id, lock_object, LockType.SYNCHRONIZED
                )
            elif lock_stack:
                lock_stack.pop()

        return facts

    def _parse_lock_calls(self, code: str, thread_id: str) -> List[LockFact]:
        facts: List[LockFact] = []
        lock_stack: List[str] = []

        if not self.config.track_unlock:
            for match in self.patterns["lock_call"].finditer(code):
                self._acquire(
                    facts, lock_stack, thread_id, match.group(1), LockType.REENTRANT_LOCK
                )
            return facts

        for match in self.patterns["lock_op"].finditer(code):
            lock_object, operation = match.group(1), match.group(2)
            if operation == "lock":
                self._acquire(
                    facts, lock_stack, thread_id, lock_object, LockType.REENTRANT_LOCK
                )
            elif lock_object in lock_stack:
                # Release the most recent acquisition and everything taken after it
                index = len(lock_stack) - 1 - lock_stack[::-1].index(lock_object)
                del lock_stack[index:]
            else:
                logger.debug(
                    "%s: unlock of %s without matching lock", thread_id, lock_object
                )

        return facts

    def _acquire(
        self,
        facts: List[LockFact],
        lock_stack: List[str],
        thread_id: str,
        lock_object: str,
        lock_type: LockType,
    ):
        holds_other = any(held != lock_object for held in lock_stack)
        if self.config.wait_policy is WaitPolicy.ALWAYS or holds_other:
            facts.append(LockFact(FactKind.WAITS_FOR, thread_id, lock_object, lock_type))
        lock_stack.append(lock_object)
        facts.append(LockFact(FactKind.HOLDS, thread_id, lock_object, lock_type))
