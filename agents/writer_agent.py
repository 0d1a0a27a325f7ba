# agents/writer_agent.py
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from models import AnalysisFailure, FileAnalysis, ProjectContext


def _bullets(title: str, items: List[str]) -> str:
    if not items:
        return ""
    return f"**{title}:**\n" + "".join(f"- {item}\n" for item in items) + "\n"


def writer_agent(
    project: ProjectContext,
    analyses: Sequence[FileAnalysis],
    failures: Sequence[AnalysisFailure] = (),
    generated_at: Optional[datetime] = None,
) -> str:
    """
    Render collected analyses as one Markdown report.

    Files appear in the order given; empty Key Changes / Suggestions lists are
    omitted. Files whose analysis failed are listed under "Skipped Files".
    """
    generated_at = generated_at or datetime.now(timezone.utc)

    report = "# Code Analysis Report\n\n"
    report += f"**Project:** {project.name}\n"
    report += f"**Type:** {project.type}\n"
    report += f"**Languages:** {', '.join(project.languages)}\n"
    report += f"**Generated:** {generated_at.isoformat()}\n\n"

    report += "## Summary\n\n"
    report += f"Analyzed {len(analyses)} file(s) with AI-powered code analysis.\n\n"

    for a in analyses:
        report += f"### {a.path}\n\n"
        report += f"**Language:** {a.language}\n\n"
        report += f"**Summary:** {a.summary}\n\n"
        report += f"**Purpose:** {a.purpose}\n\n"
        report += _bullets("Key Changes", a.key_changes)
        report += f"**Impact:** {a.impact}\n\n"
        report += f"**Documentation:** {a.documentation}\n\n"
        report += _bullets("Suggestions", a.suggestions)
        report += "---\n\n"

    if failures:
        report += "## Skipped Files\n\n"
        for f in failures:
            report += f"- {f.path}: {f.reason}\n"
        report += "\n"

    return report
