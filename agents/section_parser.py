# agents/section_parser.py
import re
from typing import List, Optional, Tuple

from pydantic import BaseModel

from models import FileAnalysis

NO_SUMMARY = "No summary provided"
NO_PURPOSE = "No purpose identified"
NO_IMPACT = "Impact not specified"

# Priority order: also the tie-break when two headings start at the same offset.
SECTION_HEADINGS: Tuple[Tuple[str, str], ...] = (
    ("summary", r"summary"),
    ("purpose", r"purpose"),
    ("key_changes", r"key[ \t]+changes"),
    ("impact", r"impact"),
    ("documentation", r"documentation"),
    ("suggestions", r"suggestions"),
)
LIST_SECTIONS = frozenset({"key_changes", "suggestions"})

_DECORATION = r"(?:\*\*|__)?"


def _heading_regex(name: str) -> "re.Pattern[str]":
    # "## ", "1. " and "**" may wrap the label; it must end in ":" / "-" or the line
    return re.compile(
        r"^[ \t]*(?:#{1,6}[ \t]*)?(?:\d+[.)][ \t]*)?" + _DECORATION
        + name + _DECORATION + r"[ \t]*(?:[:\-]|$)" + _DECORATION + r"[ \t]*",
        re.IGNORECASE | re.MULTILINE,
    )


_HEADING_PATTERNS = tuple((key, _heading_regex(name)) for key, name in SECTION_HEADINGS)
_LIST_MARKER = re.compile(r"^[-*+0-9]+\.?\s*")


class ExtractedSections(BaseModel):
    """Sections found in a backend response; None means the heading was not found."""

    summary: Optional[str] = None
    purpose: Optional[str] = None
    key_changes: Optional[List[str]] = None
    impact: Optional[str] = None
    documentation: Optional[str] = None
    suggestions: Optional[List[str]] = None


def _locate_headings(text: str) -> List[Tuple[int, str, int]]:
    """(start, key, body_start) for every heading, in text order, one per offset."""
    found = []
    for order, (key, regex) in enumerate(_HEADING_PATTERNS):
        for m in regex.finditer(text):
            found.append((m.start(), order, key, m.end()))
    found.sort()

    located = []
    last_start = None
    for start, _, key, body_start in found:
        if start == last_start:
            continue
        located.append((start, key, body_start))
        last_start = start
    return located


def list_items(body: str) -> List[str]:
    items = []
    for line in body.splitlines():
        item = _LIST_MARKER.sub("", line.strip()).strip()
        if item:
            items.append(item)
    return items


def extract_sections(raw: str) -> ExtractedSections:
    """
    Split free-form model output into the six canonical sections.

    Each section runs from the first occurrence of its heading to the next
    heading of a different section (or the end of the text). Never raises.
    """
    if not raw:
        return ExtractedSections()

    headings = _locate_headings(raw)
    values = {}
    for i, (start, key, body_start) in enumerate(headings):
        if key in values:
            continue
        end = next(
            (s for s, other, _ in headings[i + 1:] if other != key and s >= body_start),
            len(raw),
        )
        body = raw[body_start:end]
        if key in LIST_SECTIONS:
            values[key] = list_items(body)
        else:
            values[key] = body.strip() or None
    return ExtractedSections(**values)


def to_file_analysis(path: str, language: str, raw: str) -> FileAnalysis:
    """Fill placeholders for missing sections; raw text stands in for documentation."""
    sections = extract_sections(raw)
    return FileAnalysis(
        path=path,
        language=language,
        summary=sections.summary or NO_SUMMARY,
        purpose=sections.purpose or NO_PURPOSE,
        key_changes=sections.key_changes or [],
        impact=sections.impact or NO_IMPACT,
        documentation=sections.documentation or raw,
        suggestions=sections.suggestions or [],
    )
