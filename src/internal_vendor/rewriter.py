# SPDX-License-Identifier: MIT
"""Rule-based rewriting of Go import paths.

Only the path literal of a matching import spec is replaced; aliases,
comments, grouping and formatting are left exactly as they were:

    Original:
        import (
            "fmt"
            foo "example.com/foo" // needed for Bar
        )

    Rewritten with Rule("example.com/foo", "example.com/me/app/internal/foo"):
        import (
            "fmt"
            foo "example.com/me/app/internal/foo" // needed for Bar
        )
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

import structlog

from .errors import ImportParseError, ImportRewriteError
from .fsutil import write_atomic
from .imports import parse_imports

log = structlog.get_logger("internal_vendor.rewriter")


@dataclass(frozen=True)
class Rule:
    """Replace import path ``from_path`` with ``to_path``."""

    from_path: str
    to_path: str


@dataclass
class RewriteResult:
    """Result of rewriting imports in a file.

    Attributes:
        path: File that was processed
        imports_rewritten: Number of import specs that were changed
        modified: Whether the file content changed
    """

    path: Path
    imports_rewritten: int = 0
    modified: bool = False


def rewrite_source(
    source: bytes,
    rules: Sequence[Rule],
    filename: str = "<source>",
) -> tuple[bytes, int]:
    """Rewrite the import paths of a Go source file.

    Args:
        source: File content
        rules: Substitutions; the first rule matching a path wins
        filename: Name used in error messages

    Returns:
        Tuple of (rewritten_source, imports_rewritten). The source is returned
        unchanged when nothing matches.

    Raises:
        ImportRewriteError: If the imports cannot be parsed
    """
    try:
        specs = parse_imports(source, filename=filename)
    except ImportParseError as e:
        raise ImportRewriteError(str(e)) from e

    mapping: dict[str, str] = {}
    for rule in rules:
        mapping.setdefault(rule.from_path, rule.to_path)

    edits = [(spec, mapping[spec.path]) for spec in specs if spec.path in mapping]
    edits = [(spec, to_path) for spec, to_path in edits if to_path != spec.path]
    if not edits:
        return source, 0

    # Splice from the end so earlier offsets stay valid.
    rewritten = source
    for spec, to_path in sorted(edits, key=lambda edit: edit[0].start, reverse=True):
        rewritten = rewritten[: spec.start] + spec.quoted(to_path) + rewritten[spec.end :]

    return rewritten, len(edits)


def rewrite_files(files: Iterable[str | Path], rules: Sequence[Rule]) -> list[RewriteResult]:
    """Rewrite imports in a batch of files.

    Every file is read and rewritten in memory first; if any of them fails,
    nothing is written. Files with no matching import are not touched.

    Args:
        files: Files to process
        rules: Substitutions to apply

    Returns:
        RewriteResult for each file, sorted by path

    Raises:
        ImportRewriteError: If a file cannot be read, parsed or written
    """
    paths = sorted({Path(f) for f in files})
    pending: list[tuple[RewriteResult, bytes]] = []
    results: list[RewriteResult] = []

    for path in paths:
        try:
            source = path.read_bytes()
        except OSError as e:
            raise ImportRewriteError(f"Failed to read {path}: {e}") from e

        rewritten, count = rewrite_source(source, rules, filename=str(path))
        result = RewriteResult(path=path, imports_rewritten=count, modified=rewritten != source)
        results.append(result)
        if result.modified:
            pending.append((result, rewritten))

    written: list[Path] = []
    for result, content in pending:
        try:
            write_atomic(result.path, content)
        except OSError as e:
            raise ImportRewriteError(f"Failed to write {result.path}: {e}", written=written) from e
        written.append(result.path)
        log.debug(
            "rewriter.file_rewritten",
            path=str(result.path),
            imports=result.imports_rewritten,
        )

    return results
