"""Command line entry point."""

import argparse
import json
import logging
import sys
import traceback
from datetime import datetime
from pathlib import Path

from lockcycle import __version__
from lockcycle.analyzer import LockCycleAnalyzer
from lockcycle.config import DEFAULT_LOOKBACK_WINDOW, AnalyzerConfig, WaitPolicy
from lockcycle.host import analyze_file, to_diagnostics
from lockcycle.report import format_analysis_report

EXIT_OK = 0
EXIT_USAGE = 1
EXIT_DEADLOCK = 2
EXIT_ERROR = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lockcycle",
        description="LockCycle: static lock-order deadlock detector for Java-like code",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lockcycle Worker.java
  lockcycle --output report.txt src/*.java
  lockcycle --json results.json --ci-mode Bank.java
  lockcycle --wait-policy always --suggest Bank.java

Exit Codes:
  0: Success, no deadlock cycles (or not in CI mode)
  1: Usage error
  2: Deadlock cycles found (CI mode)
  3: Analysis error (CI mode)
""",
    )

    parser.add_argument("files", nargs="*", help="Source files to analyze")
    parser.add_argument("--output", "-o", help="Output file for the report")
    parser.add_argument("--json", help="Output JSON report to file")
    parser.add_argument(
        "--ci-mode",
        action="store_true",
        help="Exit non-zero when a deadlock cycle or an error is found",
    )
    parser.add_argument(
        "--wait-policy",
        choices=[policy.value for policy in WaitPolicy],
        default=WaitPolicy.NESTED_ONLY.value,
        help="Emit waits-for edges for nested acquisitions only, or always",
    )
    parser.add_argument(
        "--no-unlock-tracking",
        action="store_true",
        help="Ignore explicit unlock() calls",
    )
    parser.add_argument(
        "--lookback",
        type=int,
        default=DEFAULT_LOOKBACK_WINDOW,
        help="Characters searched before run() for a thread marker",
    )
    parser.add_argument(
        "--suggest", action="store_true", help="Append remediation suggestions"
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug output and stack traces"
    )
    parser.add_argument(
        "--quiet", "-q", action="store_true", help="Suppress non-essential output"
    )
    parser.add_argument(
        "--version", action="version", version=f"LockCycle {__version__}"
    )
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.files:
        parser.print_help()
        return EXIT_USAGE

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = AnalyzerConfig.from_args(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    analyzer = LockCycleAnalyzer(config)
    all_results = []
    reports = []
    had_error = False

    for filepath in args.files:
        path = Path(filepath)
        if not path.exists():
            print(f"Error: File not found: {path}", file=sys.stderr)
            had_error = True
            continue

        if not args.quiet:
            print(f"Analyzing {path}...")

        try:
            result = analyze_file(path, analyzer)
        except Exception as e:
            print(f"Error analyzing {path}: {e}", file=sys.stderr)
            if args.debug:
                traceback.print_exc()
            had_error = True
            continue

        if result.errors and not args.quiet:
            for message in result.errors:
                print(message, file=sys.stderr)
        if result.read_failed:
            had_error = True
        all_results.append((str(path), result))
        reports.append(format_analysis_report(result, str(path), args.suggest))

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write("\n\n".join(reports))
        if not args.quiet:
            print(f"Report saved to {args.output}")
    else:
        for report in reports:
            print(report)

    if args.json and all_results:
        json_data = {
            "analysis_summary": {
                "total_files": len(all_results),
                "files_with_deadlocks": sum(
                    1 for _, result in all_results if result.has_deadlock
                ),
                "total_cycles": sum(len(result.cycles) for _, result in all_results),
                "wait_policy": config.wait_policy.value,
                "analysis_timestamp": datetime.now().isoformat(),
                "lockcycle_version": __version__,
            },
            "files": [],
        }
        for _, result in all_results:
            file_data = result.to_dict()
            file_data["diagnostics"] = to_diagnostics(result)
            json_data["files"].append(file_data)

        with open(args.json, "w", encoding="utf-8") as f:
            json.dump(json_data, f, indent=2)
        if not args.quiet:
            print(f"JSON report saved to {args.json}")

    if args.ci_mode:
        if had_error:
            print("CI ERROR: analysis could not complete", file=sys.stderr)
            return EXIT_ERROR
        deadlocked = [name for name, result in all_results if result.has_deadlock]
        if deadlocked:
            print(f"CI FAILURE: deadlock cycles found in {', '.join(deadlocked)}")
            return EXIT_DEADLOCK
        print("CI PASSED: No deadlock cycles found")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
