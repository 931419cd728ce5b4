"""
Host adapter: file handling and diagnostics for editors and CI.

Everything that touches the filesystem lives here. Problems are recorded on
the returned AnalysisResult instead of being raised, so a host can always
render something.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from lockcycle.analyzer import LockCycleAnalyzer
from lockcycle.graph import NodeKind
from lockcycle.report import ARROW, format_node
from lockcycle.result import AnalysisResult

VALID_EXTENSIONS = {".java", ".kt", ".kts", ".groovy", ".scala"}
LARGE_FILE_MB = 10
ENCODINGS = ["utf-8", "utf-8-sig", "latin1", "cp1252"]


def validate_file(filepath: Path) -> Tuple[bool, List[str]]:
    """File validation with detailed error reporting"""
    messages: List[str] = []
    if not filepath.exists():
        return False, [f"File does not exist: {filepath}"]

    if not filepath.is_file():
        return False, [f"Path is not a file: {filepath}"]

    if filepath.suffix.lower() not in VALID_EXTENSIONS:
        messages.append(
            f"Warning: Unusual file extension '{filepath.suffix}' for JVM source"
        )

    try:
        size_mb = filepath.stat().st_size / (1024 * 1024)
    except OSError as e:
        messages.append(f"Cannot read file stats: {e}")
        return False, messages

    if size_mb > LARGE_FILE_MB:
        messages.append(
            f"Warning: Large file ({size_mb:.1f}MB) may impact analysis performance"
        )
    return True, messages


def read_source(filepath: Path) -> Tuple[Optional[str], List[str]]:
    """Read file with multiple encoding attempts.

    Returns:
        (content, messages); content is None when the file is unusable
    """
    ok, messages = validate_file(filepath)
    if not ok:
        return None, messages

    for encoding in ENCODINGS:
        try:
            return filepath.read_text(encoding=encoding), messages
        except UnicodeDecodeError:
            continue
        except OSError as e:
            messages.append(f"Error reading file {filepath}: {e}")
            return None, messages

    messages.append(f"Could not decode file {filepath} with any supported encoding")
    return None, messages


def analyze_file(
    filepath: Path, analyzer: Optional[LockCycleAnalyzer] = None
) -> AnalysisResult:
    """Read and analyze one file; I/O problems end up in ``result.errors``"""
    analyzer = analyzer or LockCycleAnalyzer()
    filepath = Path(filepath)

    content, messages = read_source(filepath)
    result = analyzer.analyze_source(content or "")
    result.read_failed = content is None
    result.errors.extend(messages)
    result.file_analyzed = str(filepath)
    return result


def to_diagnostics(result: AnalysisResult) -> List[Dict[str, Any]]:
    """One diagnostic record per deadlock cycle, for inline rendering"""
    diagnostics = []
    for cycle in result.cycles:
        threads: List[str] = []
        locks: List[str] = []
        for node in cycle:
            bucket = threads if node.kind is NodeKind.PROCESS else locks
            if node.identifier not in bucket:
                bucket.append(node.identifier)
        diagnostics.append(
            {
                "severity": "error",
                "message": "Potential deadlock between "
                + ", ".join(threads)
                + " on locks "
                + ", ".join(locks),
                "threads": threads,
                "locks": locks,
                "path": ARROW.join(map(format_node, cycle)),
                "file": result.file_analyzed,
            }
        )
    return diagnostics
