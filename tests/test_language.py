"""Tests for extension-based language detection."""

import pytest

from utils.language import classify


@pytest.mark.parametrize("path,expected", [
    ("src/app.ts", "typescript"),
    ("src/App.TSX", "typescript"),
    ("tool.py", "python"),
    ("lib/mod.rs", "rust"),
    ("include/vec.hpp", "cpp"),
    ("include/vec.h", "c"),
    ("web/index.jsx", "javascript"),
])
def test_known_extensions(path, expected):
    assert classify(path) == expected


@pytest.mark.parametrize("path", ["README.md", "Makefile", ".gitignore", "archive.tar.gz", ""])
def test_unknown_or_missing_extension(path):
    assert classify(path) == "unknown"
