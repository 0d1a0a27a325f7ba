import logging
from typing import List

from agents.section_parser import to_file_analysis
from models import FileAnalysis, FileDiff, ProjectContext
from utils.language import classify

logger = logging.getLogger(__name__)


def _project_lines(project: ProjectContext) -> str:
    return f"""Project Context:
- Name: {project.name}
- Type: {project.type}
- Framework: {project.framework or 'Unknown'}
- Main Purpose: {project.main_purpose}"""


def build_diff_prompt(project: ProjectContext, language: str) -> str:
    return f"""You are analyzing code changes in a {project.type} project using {language}.

{_project_lines(project)}

Analyze the following code changes and provide:
1. Summary: A brief overview of what changed
2. Purpose: Why this change was likely made
3. Key Changes: List the most important modifications
4. Impact: How this affects the system/application
5. Documentation: Clear explanation for other developers
6. Suggestions: Any improvements or concerns

Focus on helping developers understand the change quickly and effectively."""


def build_file_prompt(project: ProjectContext, language: str, custom_prompt: str = "") -> str:
    """Instruction for analyzing a whole file rather than a diff."""
    return f"""{custom_prompt}

{_project_lines(project)}
- Language: {language}

Please analyze the following code and provide structured insights."""


def build_file_content(file_diff: FileDiff) -> str:
    content = f"File: {file_diff.path}\n"
    content += f"Changes: +{file_diff.additions} -{file_diff.deletions}\n\n"

    if file_diff.full_content:
        content += f"Full file content:\n{file_diff.full_content}\n\n"

    content += "Specific changes:\n"
    for change in file_diff.changes:
        content += f"{change.kind.value} at line {change.line_number}: {change.text}\n"
        if change.context:
            content += f"Context: {' '.join(change.context)}\n"
    return content


def analysis_agent(file_diff: FileDiff, project: ProjectContext, backend) -> FileAnalysis:
    """Analyze one changed file. BackendError propagates to the caller."""
    language = classify(file_diff.path)
    instruction = build_diff_prompt(project, language)
    logger.info("Analyzing %s (%s, +%d -%d)", file_diff.path, language,
                file_diff.additions, file_diff.deletions)
    out = backend.respond(instruction, build_file_content(file_diff))
    return to_file_analysis(file_diff.path, language, out)


def file_analysis_agent(path: str, content: str, project: ProjectContext, backend, custom_prompt: str = "") -> FileAnalysis:
    language = classify(path)
    logger.info("Analyzing full file %s (%s)", path, language)
    out = backend.respond(build_file_prompt(project, language, custom_prompt), content)
    return to_file_analysis(path, language, out)


def summary_agent(diffs: List[FileDiff], backend, prompt: str) -> str:
    """One paragraph describing the whole change set, fit for a commit message."""
    logger.info("Summarizing %d changed file(s)", len(diffs))
    changes = "\n".join(build_file_content(file_diff) for file_diff in diffs)
    return backend.respond(prompt, changes).strip()


def documentation_agent(path: str, content: str, backend, prompt: str) -> str:
    logger.info("Generating documentation for %s", path)
    return backend.respond(prompt, f"File: {path}\n\n{content}").strip()
