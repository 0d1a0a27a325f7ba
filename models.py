from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChangeKind(str, Enum):
    """Kinds of line-level change. A modification is a deletion plus an addition."""

    ADDITION = "addition"
    DELETION = "deletion"


class ChangeRecord(BaseModel):
    """One added or deleted line inside a file's diff"""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    line_number: int
    text: str
    context: List[str] = Field(default_factory=list)


class FileDiff(BaseModel):
    """One changed file within a diff range"""

    model_config = ConfigDict(frozen=True)

    path: str
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    changes: List[ChangeRecord] = Field(default_factory=list)
    full_content: Optional[str] = None  # None when deleted or unreadable

    @field_validator("path")
    @classmethod
    def _relative_path(cls, value: str) -> str:
        if value.startswith("/"):
            raise ValueError(f"path must be repository-relative, got {value!r}")
        return value


class FileAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: str
    language: str = "unknown"
    summary: str
    purpose: str
    key_changes: List[str] = Field(default_factory=list)
    impact: str
    documentation: str
    suggestions: List[str] = Field(default_factory=list)


class FilterRules(BaseModel):
    """Exclude patterns are checked before include patterns."""

    exclude: List[str] = Field(default_factory=list)
    include: List[str] = Field(default_factory=list)


class ProjectContext(BaseModel):
    name: str
    type: str = "Unknown"
    framework: Optional[str] = None
    languages: List[str] = Field(default_factory=list)
    main_purpose: str = "Software development project"


class AnalysisFailure(BaseModel):
    path: str
    reason: str


class AnalysisReport(BaseModel):
    project: ProjectContext
    analyses: List[FileAnalysis]
    failures: List[AnalysisFailure] = Field(default_factory=list)
    report: str
