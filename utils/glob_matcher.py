# utils/glob_matcher.py
import logging
import re
from functools import lru_cache
from typing import Callable

logger = logging.getLogger(__name__)

# Ordered longest-first so "**/" is consumed before "**" and "**" before "*"
_WILDCARDS = (
    ("**/", "(?:.*/)?"),
    ("**", ".*"),
    ("*", "[^/]*"),
    ("?", "[^/]"),
)


def _never(path: str) -> bool:
    return False


def _translate(pattern: str) -> str:
    out = []
    i = 0
    while i < len(pattern):
        for token, replacement in _WILDCARDS:
            if pattern.startswith(token, i):
                out.append(replacement)
                i += len(token)
                break
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return "^" + "".join(out) + "$"


@lru_cache(maxsize=256)
def _compile(pattern: str) -> Callable[[str], bool]:
    try:
        regex = re.compile(_translate(pattern))
    except re.error as e:
        logger.warning("Ignoring unusable glob pattern %r: %s", pattern, e)
        return _never
    return lambda path: regex.match(path) is not None


def compile_glob(pattern: str) -> Callable[[str], bool]:
    """
    Compile a simple glob into a whole-path predicate.

    Supports "**" (any characters, separators included), "*" (any characters
    except "/") and "?" (one non-separator character). Character classes,
    braces and negation are not supported and match literally.
    A pattern that is not a string or cannot be compiled matches nothing.
    """
    if not isinstance(pattern, str):
        logger.warning("Ignoring non-string glob pattern %r", pattern)
        return _never
    return _compile(pattern)


def matches(path: str, pattern: str) -> bool:
    return compile_glob(pattern)(path)
