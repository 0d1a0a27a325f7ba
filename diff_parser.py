import logging
import re
from typing import List, Optional

from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

from models import ChangeKind, ChangeRecord, FileDiff

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_WINDOW = 3

HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


def _starts_file_header(lines: List[str], index: int) -> bool:
    """A "--- "/"+++ " pair directly followed by a hunk header."""
    return (
        lines[index].startswith("--- ")
        and index + 2 < len(lines)
        and lines[index + 1].startswith("+++ ")
        and lines[index + 2].startswith("@@")
    )


def _context_window(lines: List[str], index: int, hunk_start: int, window: int) -> List[str]:
    """Unmarked lines around lines[index], never reaching outside the current hunk."""
    nearby = lines[max(hunk_start, index - window):index]
    for line in lines[index + 1:index + window + 1]:
        if line.startswith(("@@", "diff ")):
            break
        nearby.append(line)
    return [line[1:] for line in nearby if line.startswith(" ")]


def parse_hunks(diff_text: str, window: int = DEFAULT_CONTEXT_WINDOW) -> List[ChangeRecord]:
    """
    Turn one file's unified diff into ordered addition/deletion records.

    Additions carry their line number in the post-change file. Deletions carry
    the current post-change position without advancing it, so consecutive
    deletions share a line number.
    A malformed hunk header causes that hunk's body to be skipped.
    """
    lines = [line.rstrip("\r") for line in diff_text.split("\n")]
    changes: List[ChangeRecord] = []
    current_line = 0
    hunk_start: Optional[int] = None

    for index, line in enumerate(lines):
        if line.startswith("@@"):
            match = HUNK_HEADER.match(line)
            if match is None:
                logger.debug("Skipping malformed hunk header: %r", line)
                hunk_start = None
                continue
            current_line = int(match.group(3))
            hunk_start = index + 1
            continue

        if line.startswith("diff ") or _starts_file_header(lines, index):
            hunk_start = None
            continue

        # header lines ("index", "---", "+++") sit outside any hunk
        if hunk_start is None:
            continue

        if line.startswith("+"):
            changes.append(ChangeRecord(
                kind=ChangeKind.ADDITION,
                line_number=current_line,
                text=line[1:],
                context=_context_window(lines, index, hunk_start, window),
            ))
            current_line += 1
        elif line.startswith("-"):
            changes.append(ChangeRecord(
                kind=ChangeKind.DELETION,
                line_number=current_line,
                text=line[1:],
                context=_context_window(lines, index, hunk_start, window),
            ))
        elif line.startswith(" "):
            current_line += 1
        # anything else ("\ No newline at end of file", blank trailer) is ignored

    return changes


def file_diff_from_text(
    path: str,
    diff_text: str,
    additions: Optional[int] = None,
    deletions: Optional[int] = None,
    full_content: Optional[str] = None,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> FileDiff:
    """Build a FileDiff; counts fall back to the parsed records when no summary is given."""
    changes = parse_hunks(diff_text, window)
    if additions is None:
        additions = sum(1 for c in changes if c.kind == ChangeKind.ADDITION)
    if deletions is None:
        deletions = sum(1 for c in changes if c.kind == ChangeKind.DELETION)
    return FileDiff(
        path=path,
        additions=additions,
        deletions=deletions,
        changes=changes,
        full_content=full_content,
    )


def split_unified_diff(diff_text: str, window: int = DEFAULT_CONTEXT_WINDOW) -> List[FileDiff]:
    try:
        patch = PatchSet(diff_text.splitlines(keepends=True))
    except UnidiffParseError as e:
        raise ValueError(f"Malformed unified diff: {e}") from e

    diffs = []
    for patched_file in patch:
        changes = [] if patched_file.is_binary_file else parse_hunks(str(patched_file), window)
        diffs.append(FileDiff(
            path=patched_file.path,
            additions=patched_file.added,
            deletions=patched_file.removed,
            changes=changes,
        ))
    return diffs
