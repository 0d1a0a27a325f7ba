"""Tests for include/exclude filtering of changed files."""

from agents.diff_agent import select_diffs, should_include
from models import FileDiff, FilterRules


class TestShouldInclude:

    def test_exclude_wins_over_include(self):
        rules = FilterRules(exclude=["**/*.test.*"], include=["**/*.ts"])
        assert should_include("a.test.ts", rules) is False
        assert should_include("src/a.test.ts", rules) is False
        assert should_include("src/a.ts", rules) is True

    def test_include_required_when_configured(self):
        rules = FilterRules(include=["**/*.py"])
        assert should_include("docs/readme.md", rules) is False

    def test_no_include_accepts_anything_not_excluded(self):
        rules = FilterRules(exclude=["dist/**"])
        assert should_include("docs/readme.md", rules) is True
        assert should_include("dist/bundle.js", rules) is False

    def test_empty_rules_accept_everything(self):
        assert should_include("any/path.bin", FilterRules()) is True


def test_select_diffs_keeps_order():
    diffs = [FileDiff(path=p) for p in ("b.py", "node_modules/x.js", "a.py", "c.md")]
    rules = FilterRules(exclude=["node_modules/**"], include=["**/*.py", "**/*.js"])

    assert [d.path for d in select_diffs(diffs, rules)] == ["b.py", "a.py"]
