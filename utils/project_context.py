import json
import logging
import os
import re
import tomllib
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from models import ProjectContext
from utils.glob_matcher import matches
from utils.language import UNKNOWN_LANGUAGE, classify

logger = logging.getLogger(__name__)

DEFAULT_PURPOSE = "Software development project"
MAX_SAMPLED_FILES = 500

# (dependency, project type, framework), first hit wins
NODE_FRAMEWORKS = (
    ("react", "React Application", "React"),
    ("vue", "Vue.js Application", "Vue.js"),
    ("angular", "Angular Application", "Angular"),
    ("express", "Node.js Server", "Express"),
    ("next", "Next.js Application", "Next.js"),
)
PYTHON_FRAMEWORKS = (
    ("fastapi", "FastAPI Service", "FastAPI"),
    ("django", "Django Application", "Django"),
    ("flask", "Flask Application", "Flask"),
)

_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9_.\-]+)")


def _match_framework(deps: Iterable[str], table) -> Optional[Tuple[str, str]]:
    names = {d.lower() for d in deps}
    for dep, project_type, framework in table:
        if dep in names:
            return project_type, framework
    return None


def _from_package_json(path: Path):
    data = json.loads(path.read_text(encoding="utf-8"))
    deps = {**data.get("dependencies", {}), **data.get("devDependencies", {})}
    return _match_framework(deps, NODE_FRAMEWORKS), data.get("description")


def _from_pyproject(path: Path):
    project = tomllib.loads(path.read_text(encoding="utf-8")).get("project", {})
    deps = []
    for requirement in project.get("dependencies", []):
        m = _REQUIREMENT_NAME.match(requirement)
        if m:
            deps.append(m.group(1))
    return _match_framework(deps, PYTHON_FRAMEWORKS), project.get("description")


def _excluded(rel_path: str, exclude_patterns: List[str]) -> bool:
    return any(matches(rel_path, p) for p in exclude_patterns)


def detect_languages(root: str, exclude_patterns: List[str] = (), limit: int = MAX_SAMPLED_FILES) -> List[str]:
    """Sample up to `limit` files under root (excluded dirs pruned) and collect language tags."""
    found = set()
    sampled = 0
    for dirpath, dirnames, filenames in os.walk(root):
        rel_dir = os.path.relpath(dirpath, root)
        rel_dir = "" if rel_dir == "." else rel_dir.replace(os.sep, "/") + "/"
        dirnames[:] = sorted(
            d for d in dirnames
            if d != ".git" and not _excluded(f"{rel_dir}{d}/", exclude_patterns)
        )
        for filename in sorted(filenames):
            if _excluded(rel_dir + filename, exclude_patterns):
                continue
            language = classify(filename)
            if language != UNKNOWN_LANGUAGE:
                found.add(language)
            sampled += 1
            if sampled >= limit:
                return sorted(found)
    return sorted(found)


def detect_project_context(root: str, exclude_patterns: List[str] = (), name: Optional[str] = None) -> ProjectContext:
    """Best-effort project metadata from package.json / pyproject.toml; unreadable manifests are ignored."""
    root_path = Path(root)
    project_type, framework, purpose = "Unknown", None, DEFAULT_PURPOSE

    for manifest, reader in (("package.json", _from_package_json), ("pyproject.toml", _from_pyproject)):
        path = root_path / manifest
        if not path.is_file():
            continue
        try:
            detected, description = reader(path)
        except (OSError, ValueError, AttributeError) as e:
            logger.debug("Ignoring unreadable %s: %s", path, e)
            continue
        if detected:
            project_type, framework = detected
        purpose = description or purpose
        break

    return ProjectContext(
        name=name or root_path.resolve().name,
        type=project_type,
        framework=framework,
        languages=detect_languages(root, exclude_patterns),
        main_purpose=purpose,
    )
