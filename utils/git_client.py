# utils/git_client.py

import logging
from pathlib import Path
from typing import List, Optional

import git

from diff_parser import DEFAULT_CONTEXT_WINDOW, file_diff_from_text
from models import FileDiff

logger = logging.getLogger(__name__)


def _count(stat: str) -> int:
    # numstat prints "-" for binary files
    return int(stat) if stat.isdigit() else 0


class GitClient:
    """Reads diffs and file contents from a local git repository."""

    def __init__(self, repo_path: str, context_lines: int = DEFAULT_CONTEXT_WINDOW):
        # raises git.InvalidGitRepositoryError / git.NoSuchPathError
        self.repo = git.Repo(repo_path, search_parent_directories=True)
        self.root = Path(self.repo.working_tree_dir)
        self.context_lines = context_lines

    # -----------------------------------------------------------
    # Diff selectors
    # -----------------------------------------------------------
    def diff_between_commits(self, from_commit: str, to_commit: str = "HEAD", merge_base: bool = False) -> List[FileDiff]:
        """Changes from from_commit to to_commit; merge_base diffs from their common ancestor ("A...B")."""
        separator = "..." if merge_base else ".."
        return self._collect([f"{from_commit}{separator}{to_commit}"])

    def staged_changes(self) -> List[FileDiff]:
        return self._collect(["--cached"])

    def unstaged_changes(self) -> List[FileDiff]:
        return self._collect([])

    def _collect(self, selector: List[str]) -> List[FileDiff]:
        """One FileDiff per changed file, in the order git reports them."""
        numstat = self.repo.git.diff(*selector, "--numstat", "--no-renames", "-z")
        diffs = []
        for record in numstat.split("\0"):
            parts = record.strip("\n").split("\t")
            if len(parts) != 3:
                continue
            added, removed, path = parts
            raw = self.repo.git.diff(*selector, "--no-renames", "--", path)
            diffs.append(file_diff_from_text(
                path,
                raw,
                additions=_count(added),
                deletions=_count(removed),
                full_content=self.read_file(path),
                window=self.context_lines,
            ))
        logger.debug("git diff %s: %d file(s)", " ".join(selector) or "(working tree)", len(diffs))
        return diffs

    # -----------------------------------------------------------
    # Repository info
    # -----------------------------------------------------------
    def read_file(self, path: str) -> Optional[str]:
        """Current working-tree text of a file, or None when deleted/unreadable."""
        full_path = self.root / path
        if not full_path.is_file():
            return None
        try:
            return full_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def project_name(self) -> str:
        return self.root.name
