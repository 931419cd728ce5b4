"""Test package for the LockCycle deadlock analyzer.

This package contains unit and integration tests for every stage of the
analysis pipeline and for the command line interface.
"""

__all__ = ["test_cli", "test_deadlock_detection", "test_host", "test_utils"]
