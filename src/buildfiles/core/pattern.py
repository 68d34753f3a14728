"""
Shell-style wildcard matching for paths.

Translates glob patterns into regular expressions with the same rules
`glob.glob(..., recursive=True, include_hidden=True)` uses when expanding
them, so that membership tests agree with enumeration:

- `*` matches any run of characters within one path segment
- `?` matches a single character within one path segment
- `[abc]` / `[!abc]` match character classes
- `**` matches any number of segments (including none when followed by `/`)
- a trailing `/**` also matches the directory it starts from, and a
  trailing separator is optional, since expansion reports directories
  without one
- wildcards match leading dots
"""

import functools
import os
import re

_SEPARATOR = re.escape(os.sep)
_NOT_SEPARATOR = f"[^{_SEPARATOR}]"


def _translate_class(pattern: str, index: int) -> tuple[str, int]:
    """Translate a `[...]` class starting at index, returning (regex, next_index)."""
    end = index + 1
    if end < len(pattern) and pattern[end] in "!^":
        end += 1
    if end < len(pattern) and pattern[end] == "]":
        end += 1
    while end < len(pattern) and pattern[end] != "]":
        end += 1

    if end >= len(pattern):
        # Unterminated class, treat the bracket literally.
        return re.escape("["), index + 1

    body = pattern[index + 1 : end]
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]
    body = body.replace("\\", "\\\\").replace("[", "\\[").replace("]", "\\]")
    if negate:
        return f"[^{_SEPARATOR}{body}]", end + 1
    return f"[{body}]", end + 1


@functools.lru_cache(maxsize=512)
def translate(pattern: str) -> str:
    """
    Translate a glob pattern into an anchored regular expression.

    Args:
        pattern: Shell-style pattern, e.g. "src/**/*.py"

    Returns:
        Regular expression source matching the whole path
    """
    trailing = ""
    stripped = pattern.rstrip(os.sep)
    if stripped and stripped != pattern:
        pattern, trailing = stripped, f"{_SEPARATOR}?"

    parts: list[str] = []
    index = 0
    length = len(pattern)

    while index < length:
        char = pattern[index]

        if char == "*":
            if pattern.startswith("**", index):
                index += 2
                if index < length and pattern[index] == os.sep:
                    index += 1
                    parts.append(f"(?:.*{_SEPARATOR})?")
                else:
                    parts.append(".*")
            else:
                index += 1
                parts.append(f"{_NOT_SEPARATOR}*")
        elif char == "?":
            index += 1
            parts.append(_NOT_SEPARATOR)
        elif char == "[":
            regex, index = _translate_class(pattern, index)
            parts.append(regex)
        elif char == os.sep and pattern[index + 1 :] == "**":
            index = length
            parts.append(f"(?:{_SEPARATOR}.*)?")
        else:
            index += 1
            parts.append(re.escape(char))

    return "(?s:" + "".join(parts) + trailing + r")\Z"


@functools.lru_cache(maxsize=512)
def _compile(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    flags = 0 if case_sensitive else re.IGNORECASE
    return re.compile(translate(pattern), flags)


def fnmatch(pattern: str, path: str, case_sensitive: bool = True) -> bool:
    """
    Check whether a path string matches a glob pattern.

    Args:
        pattern: Shell-style pattern
        path: Path string to test
        case_sensitive: Whether letter case must match

    Returns:
        True if the whole path matches the pattern
    """
    return _compile(pattern, case_sensitive).match(path) is not None


def is_glob_pattern(pattern: str) -> bool:
    """Check if a string contains glob wildcards."""
    return any(char in pattern for char in "*?[")
