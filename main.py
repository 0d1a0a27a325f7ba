import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import List, Optional

import git
from dotenv import load_dotenv
from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

load_dotenv()

from agents.analysis_agent import analysis_agent, documentation_agent, file_analysis_agent, summary_agent
from agents.diff_agent import select_diffs
from agents.llm_client import BackendError, UnsupportedProviderError, create_backend
from agents.writer_agent import writer_agent
from config import AnalyzerConfig, load_config, validate_config
from diff_parser import split_unified_diff
from models import AnalysisFailure, AnalysisReport, FileAnalysis, FileDiff, FilterRules, ProjectContext
from utils.git_client import GitClient
from utils.logging_setup import setup_logging
from utils.project_context import detect_project_context

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    yield


app = FastAPI(title="Code Context Agent", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RepoInput(BaseModel):
    repo_path: Optional[str] = None
    commit_range: Optional[str] = None  # "A..B", "A...B" (from the merge base), or a single ref meaning "ref..HEAD"
    staged: bool = False


class FileInput(BaseModel):
    path: str
    repo_path: Optional[str] = None


def project_root() -> str:
    return os.getenv("PROJECT_ROOT") or os.getcwd()


def filter_rules(config: AnalyzerConfig) -> FilterRules:
    return FilterRules(exclude=config.exclude_patterns, include=config.include_patterns)


def analyze_file_diffs(
    diffs: List[FileDiff],
    config: AnalyzerConfig,
    project: ProjectContext,
    backend,
) -> AnalysisReport:
    """
    Analyze files one at a time, in the order given.

    Filtering happens before any prompt is built. A BackendError skips that
    file only; it is recorded as a failure and shown in the report.
    """
    analyses: List[FileAnalysis] = []
    failures: List[AnalysisFailure] = []

    for file_diff in select_diffs(diffs, filter_rules(config)):
        try:
            analyses.append(analysis_agent(file_diff, project, backend))
        except BackendError as e:
            logger.warning("Analysis of %s failed: %s", file_diff.path, e)
            failures.append(AnalysisFailure(path=file_diff.path, reason=str(e)))

    logger.info("Analyzed %d file(s), %d skipped after backend errors", len(analyses), len(failures))
    return AnalysisReport(
        project=project,
        analyses=analyses,
        failures=failures,
        report=writer_agent(project, analyses, failures),
    )


def analyze_single_file(
    path: str,
    content: str,
    config: AnalyzerConfig,
    project: ProjectContext,
    backend,
) -> AnalysisReport:
    analysis = file_analysis_agent(path, content, project, backend, config.custom_prompts.code_analysis)
    return AnalysisReport(project=project, analyses=[analysis], report=writer_agent(project, [analysis]))


def _backend_for(config: AnalyzerConfig):
    try:
        return create_backend(config.ai_provider, config)
    except UnsupportedProviderError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _open_repo(repo_path: str, config: AnalyzerConfig) -> GitClient:
    try:
        return GitClient(repo_path, context_lines=config.context_lines)
    except (git.InvalidGitRepositoryError, git.NoSuchPathError) as e:
        raise HTTPException(status_code=400, detail=f"Not a git repository: {e}")


def _parse_diff(diff_text: str, config: AnalyzerConfig) -> List[FileDiff]:
    try:
        diffs = split_unified_diff(diff_text, window=config.context_lines)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not diffs:
        raise HTTPException(status_code=400, detail="No file changes parsed from diff")
    return diffs


def _read_project_file(root_dir: str, path: str) -> str:
    file_path = Path(root_dir) / path
    if not file_path.is_file():
        raise HTTPException(status_code=404, detail=f"File not found: {path}")
    try:
        return file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail=f"Could not read {path}: {e}")


def analyze_diff_text(diff_text: str) -> AnalysisReport:
    root_dir = project_root()
    config = load_config(root_dir)
    diffs = _parse_diff(diff_text, config)

    backend = _backend_for(config)
    project = detect_project_context(root_dir, config.exclude_patterns)
    return analyze_file_diffs(diffs, config, project, backend)


@app.post("/analyze-diff", response_model=AnalysisReport, summary="Analyze a unified diff (plain text)")
def analyze_diff(diff_text: str = Body(..., media_type="text/plain", description="Paste the full unified diff here (plain text).")):

    return analyze_diff_text(diff_text)


@app.post("/analyze-repo", response_model=AnalysisReport, summary="Analyze a commit range, staged or unstaged changes of a local repository")
def analyze_repo(inp: RepoInput):

    root_dir = inp.repo_path or project_root()
    config = load_config(root_dir)
    client = _open_repo(root_dir, config)
    backend = _backend_for(config)

    try:
        if inp.commit_range:
            merge_base = "..." in inp.commit_range
            from_commit, _, to_commit = inp.commit_range.partition("..." if merge_base else "..")
            diffs = client.diff_between_commits(from_commit, to_commit or "HEAD", merge_base=merge_base)
        elif inp.staged:
            diffs = client.staged_changes()
        else:
            diffs = client.unstaged_changes()
    except git.GitCommandError as e:
        raise HTTPException(status_code=400, detail=f"git diff failed: {e.stderr.strip() if e.stderr else e}")

    project = detect_project_context(str(client.root), config.exclude_patterns, name=client.project_name())
    return analyze_file_diffs(diffs, config, project, backend)


@app.post("/analyze-file", response_model=AnalysisReport, summary="Analyze the full content of one file")
def analyze_file(inp: FileInput):

    root_dir = inp.repo_path or project_root()
    config = load_config(root_dir)
    content = _read_project_file(root_dir, inp.path)

    backend = _backend_for(config)
    project = detect_project_context(root_dir, config.exclude_patterns)
    try:
        return analyze_single_file(inp.path, content, config, project, backend)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Analysis of {inp.path} failed: {e}")


@app.post("/summarize-diff", summary="One-paragraph summary of a unified diff, e.g. for a commit message")
def summarize_diff(diff_text: str = Body(..., media_type="text/plain")):

    config = load_config(project_root())
    diffs = select_diffs(_parse_diff(diff_text, config), filter_rules(config))
    if not diffs:
        raise HTTPException(status_code=400, detail="All changed files are excluded by the filter rules")

    backend = _backend_for(config)
    try:
        summary = summary_agent(diffs, backend, config.custom_prompts.summary)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Summary failed: {e}")
    return {"files": [d.path for d in diffs], "summary": summary}


@app.post("/document-file", summary="Developer documentation for one file")
def document_file(inp: FileInput):

    root_dir = inp.repo_path or project_root()
    config = load_config(root_dir)
    content = _read_project_file(root_dir, inp.path)

    backend = _backend_for(config)
    try:
        documentation = documentation_agent(inp.path, content, backend, config.custom_prompts.documentation)
    except BackendError as e:
        raise HTTPException(status_code=502, detail=f"Documentation of {inp.path} failed: {e}")
    return {"path": inp.path, "documentation": documentation}


@app.get("/")
def root():
    config = load_config(project_root())
    return {
        "status": "Code Context Agent running",
        "provider": config.ai_provider,
        "config_errors": validate_config(config),
    }
