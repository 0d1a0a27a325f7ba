"""Tests for Markdown report rendering."""

from datetime import datetime, timezone

from agents.writer_agent import writer_agent
from models import AnalysisFailure, FileAnalysis, ProjectContext

PROJECT = ProjectContext(name="shop", type="FastAPI Service", languages=["python", "typescript"])
GENERATED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_analysis(path, **overrides):
    fields = dict(
        path=path, language="python", summary="s", purpose="p",
        key_changes=["k1", "k2"], impact="i", documentation="d", suggestions=["s1"],
    )
    fields.update(overrides)
    return FileAnalysis(**fields)


def test_header_block():
    report = writer_agent(PROJECT, [], generated_at=GENERATED)

    assert report.startswith(
        "# Code Analysis Report\n\n"
        "**Project:** shop\n"
        "**Type:** FastAPI Service\n"
        "**Languages:** python, typescript\n"
        "**Generated:** 2024-05-01T12:00:00+00:00\n\n"
        "## Summary\n\n"
        "Analyzed 0 file(s) with AI-powered code analysis.\n\n"
    )


def test_file_section_layout():
    report = writer_agent(PROJECT, [make_analysis("src/app.py")], generated_at=GENERATED)
    section = report.split("### src/app.py\n\n", 1)[1]

    assert section == (
        "**Language:** python\n\n"
        "**Summary:** s\n\n"
        "**Purpose:** p\n\n"
        "**Key Changes:**\n- k1\n- k2\n\n"
        "**Impact:** i\n\n"
        "**Documentation:** d\n\n"
        "**Suggestions:**\n- s1\n\n"
        "---\n\n"
    )


def test_empty_lists_omitted():
    report = writer_agent(PROJECT, [make_analysis("a.py", key_changes=[], suggestions=[])])

    assert "**Key Changes:**" not in report
    assert "**Suggestions:**" not in report
    assert "**Impact:** i" in report


def test_files_keep_given_order():
    report = writer_agent(PROJECT, [make_analysis("z.py"), make_analysis("a.py")])

    assert report.index("### z.py") < report.index("### a.py")
    assert report.count("---\n\n") == 2


def test_failures_listed():
    failures = [AnalysisFailure(path="b.py", reason="OpenAI API request failed: quota exceeded")]
    report = writer_agent(PROJECT, [make_analysis("a.py")], failures)

    assert "## Skipped Files\n\n- b.py: OpenAI API request failed: quota exceeded\n" in report
    assert "### b.py" not in report


def test_no_skipped_section_without_failures():
    assert "Skipped Files" not in writer_agent(PROJECT, [make_analysis("a.py")])


def test_stable_output_for_same_input():
    analyses = [make_analysis("a.py"), make_analysis("b.py")]
    assert writer_agent(PROJECT, analyses, generated_at=GENERATED) == writer_agent(PROJECT, analyses, generated_at=GENERATED)
