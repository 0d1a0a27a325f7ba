import logging
from typing import List

from models import FileDiff, FilterRules
from utils.glob_matcher import matches

logger = logging.getLogger(__name__)


def should_include(path: str, rules: FilterRules) -> bool:
    """Exclude wins over include; with no include patterns anything not excluded passes."""
    if any(matches(path, pattern) for pattern in rules.exclude):
        return False
    if rules.include:
        return any(matches(path, pattern) for pattern in rules.include)
    return True


def select_diffs(diffs: List[FileDiff], rules: FilterRules) -> List[FileDiff]:
    selected = []
    for d in diffs:
        if should_include(d.path, rules):
            selected.append(d)
        else:
            logger.debug("Skipping %s (filtered by include/exclude patterns)", d.path)
    return selected
