"""Unit tests for thread body extraction."""
import pytest

from lockcycle.config import AnalyzerConfig
from lockcycle.scanner import SourceScanner, ThreadRule
from tests.test_utils import JavaSamples


class TestSourceScanner:
    """Test suite for the four extraction rules."""

    @pytest.fixture
    def scanner(self):
        return SourceScanner()

    def test_lambda_threads(self, scanner):
        """Closures chained to start() become fragments in source order."""
        fragments = scanner.scan(JavaSamples.crossed_two_locks())

        assert [f.thread_id for f in fragments] == ["thread1", "thread2"]
        assert all(f.rule is ThreadRule.LAMBDA for f in fragments)
        assert "synchronized (lock1)" in fragments[0].body
        assert fragments[0].body.index("lock1") < fragments[0].body.index("lock2")
        assert fragments[1].body.index("lock2") < fragments[1].body.index("lock1")

    def test_lambda_body_keeps_nested_blocks(self, scanner):
        fragments = scanner.scan(JavaSamples.crossed_three_locks())

        assert len(fragments) == 2
        assert fragments[0].body.count("synchronized") == 3

    def test_anonymous_runnable_matches_three_rules(self, scanner):
        """An anonymous Runnable is picked up by rules 2, 3 and 4 without dedup."""
        fragments = scanner.scan(JavaSamples.anonymous_runnable())

        assert [f.rule for f in fragments] == [
            ThreadRule.ANONYMOUS_RUNNABLE,
            ThreadRule.LOOSE_RUNNABLE,
            ThreadRule.RUN_METHOD,
        ]
        assert [f.thread_id for f in fragments] == ["thread1", "thread2", "thread3"]
        assert fragments[0].body.lstrip().startswith("synchronized (lock1)")
        assert "public void run()" in fragments[1].body

    def test_run_method_with_thread_marker(self, scanner):
        fragments = scanner.scan(JavaSamples.thread_subclass())

        assert len(fragments) == 1
        assert fragments[0].rule is ThreadRule.RUN_METHOD
        # The body ends at the first closing brace
        assert "synchronized (lock2)" in fragments[0].body
        assert "}" not in fragments[0].body

    def test_run_method_without_marker_is_ignored(self, scanner):
        code = """
        class Task {
            public void run() {
                synchronized (lock1) { work(); }
            }
        }
        """
        assert scanner.scan(code) == []

    def test_marker_outside_lookback_window(self):
        padding = "// " + "x" * 150 + "\n"
        code = (
            "class Job implements Runnable {\n"
            + padding
            + "    public void run() { synchronized (a) { go(); } }\n}"
        )

        assert SourceScanner().scan(code) == []
        wide = SourceScanner(AnalyzerConfig(lookback_window=500))
        assert len(wide.scan(code)) == 1

    def test_ids_follow_rule_priority_not_position(self, scanner):
        """A lambda found later in the text still gets the first id."""
        code = JavaSamples.thread_subclass() + JavaSamples.single_thread_nested()
        fragments = scanner.scan(code)

        assert [(f.thread_id, f.rule) for f in fragments] == [
            ("thread1", ThreadRule.LAMBDA),
            ("thread2", ThreadRule.RUN_METHOD),
        ]
        assert fragments[0].offset > fragments[1].offset

    def test_custom_thread_prefix(self):
        scanner = SourceScanner(AnalyzerConfig(thread_prefix="T"))
        fragments = scanner.scan(JavaSamples.crossed_two_locks())

        assert [f.thread_id for f in fragments] == ["T1", "T2"]

    @pytest.mark.parametrize("source", ["", "   \n\t", "int x = 0;", "}}}{{{"])
    def test_no_threads(self, scanner, source):
        assert scanner.scan(source) == []
