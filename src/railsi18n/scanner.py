# src/railsi18n/scanner.py
"""
Locale file discovery for RailsI18n.

This module finds locale documents inside a project root using glob
patterns such as ``config/locales/**/*.yml``.

Functions:
    glob_to_regex: Compile a glob pattern with ``**`` support
    matches_pattern: Check a relative path against a glob pattern
    find_locale_files: Recursively find files matching a pattern under a root
"""
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Pattern, Union

IGNORE_DIRS = frozenset({
    '.git', '.svn', '.bundle', 'node_modules', 'tmp', 'log', 'vendor', 'coverage', '__pycache__'
})


@lru_cache(maxsize=32)
def glob_to_regex(pattern: str) -> Pattern[str]:
    """
    Compile a glob pattern into a regular expression over POSIX relative paths.

    ``**/`` matches zero or more directories, ``*`` and ``?`` never cross a
    ``/``.

    Args:
        pattern (str): Glob pattern, e.g. ``config/locales/**/*.yml``

    Returns:
        Pattern[str]: Anchored regular expression
    """
    i, n = 0, len(pattern)
    out = []
    while i < n:
        if pattern.startswith('**/', i):
            out.append('(?:.*/)?')
            i += 3
        elif pattern.startswith('**', i):
            out.append('.*')
            i += 2
        elif pattern[i] == '*':
            out.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            out.append('[^/]')
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile('^' + ''.join(out) + '$')


def matches_pattern(relative_path: Union[str, Path], pattern: str) -> bool:
    """Return True if *relative_path* (relative to a project root) matches *pattern*."""
    return glob_to_regex(pattern).match(Path(relative_path).as_posix()) is not None


def _static_prefix(pattern: str) -> str:
    """Leading directories of *pattern* that contain no wildcard."""
    parts = []
    for part in pattern.split('/')[:-1]:
        if any(ch in part for ch in '*?['):
            break
        parts.append(part)
    return '/'.join(parts)


def find_locale_files(directory: Union[str, Path], pattern: str) -> List[Path]:
    """
    Find files under *directory* whose relative path matches *pattern*.

    Walks only the part of the tree the pattern can match and skips common
    dependency and build directories.

    Args:
        directory (Union[str, Path]): Project root to scan
        pattern (str): Glob pattern relative to the root

    Returns:
        List[Path]: Sorted absolute paths of matching files
    """
    root = Path(directory)
    start = root / _static_prefix(pattern)
    if not start.is_dir():
        return []

    files = []
    for current, dirs, filenames in os.walk(start):
        # Filter directories in-place for efficiency
        dirs[:] = [d for d in dirs if d not in IGNORE_DIRS]
        for filename in filenames:
            path = Path(current) / filename
            if matches_pattern(path.relative_to(root), pattern):
                files.append(path)
    return sorted(files)
