"""Analyzer configuration."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class WaitPolicy(Enum):
    """When a lock acquisition produces a waits-for edge"""

    ALWAYS = "always"  # Every acquisition waits, even the outermost one
    NESTED_ONLY = "nested"  # Only acquisitions made while holding another lock


DEFAULT_LOOKBACK_WINDOW = 100
DEFAULT_THREAD_MARKERS = ("new Thread", "implements Runnable", "extends Thread")


@dataclass
class AnalyzerConfig:
    """Options shared by every stage of one analyzer.

    Attributes:
        wait_policy: Emission policy for waits-for facts
        track_unlock: Treat ``x.unlock()`` as a release of ``x``
        lookback_window: Characters inspected before a bare ``run()`` method
        thread_prefix: Prefix of generated thread identifiers
        thread_markers: Text that marks a bare ``run()`` method as a thread body
    """

    wait_policy: WaitPolicy = WaitPolicy.NESTED_ONLY
    track_unlock: bool = True
    lookback_window: int = DEFAULT_LOOKBACK_WINDOW
    thread_prefix: str = "thread"
    thread_markers: Tuple[str, ...] = field(default=DEFAULT_THREAD_MARKERS)

    def __post_init__(self):
        if not isinstance(self.wait_policy, WaitPolicy):
            # Accept the CLI spelling ("nested" / "always")
            self.wait_policy = WaitPolicy(self.wait_policy)
        if self.lookback_window < 0:
            raise ValueError(
                f"lookback_window must be non-negative, got {self.lookback_window}"
            )
        if not self.thread_prefix:
            raise ValueError("thread_prefix must not be empty")
        self.thread_markers = tuple(self.thread_markers)

    @classmethod
    def from_args(cls, args) -> "AnalyzerConfig":
        """Build a config from parsed command line arguments"""
        return cls(
            wait_policy=WaitPolicy(args.wait_policy),
            track_unlock=not args.no_unlock_tracking,
            lookback_window=args.lookback,
        )
