"""Tests for glob pattern compilation."""

from utils.glob_matcher import compile_glob, matches


class TestDoubleStar:
    """'**' crosses directory separators."""

    def test_matches_nested_file(self):
        assert compile_glob("**/*.ts")("src/deep/nested/file.ts")

    def test_rejects_other_extension(self):
        assert not compile_glob("**/*.ts")("src/file.tsx")

    def test_leading_double_star_matches_root_level_file(self):
        assert matches("file.ts", "**/*.ts")

    def test_trailing_double_star(self):
        assert matches("node_modules/pkg/index.js", "node_modules/**")
        assert not matches("src/node_modules/index.js", "node_modules/**")


class TestSingleStarAndQuestionMark:

    def test_single_star_does_not_cross_separator(self):
        assert not compile_glob("*.ts")("src/file.ts")
        assert compile_glob("*.ts")("file.ts")

    def test_question_mark_matches_one_character(self):
        assert matches("a.py", "?.py")
        assert not matches("ab.py", "?.py")
        assert not matches("a/.py", "a?.py")

    def test_dot_is_literal(self):
        assert not matches("filets", "*.ts")


class TestUnsupportedSyntax:

    def test_character_class_is_literal(self):
        assert matches("[abc].py", "[abc].py")
        assert not matches("a.py", "[abc].py")

    def test_unusable_pattern_matches_nothing(self):
        predicate = compile_glob(None)
        assert predicate("anything") is False
        assert predicate("") is False

    def test_unhashable_pattern_matches_nothing(self):
        assert matches("a.py", ["*.py"]) is False
