"""Gitignore-style matching of paths relative to the input root.

Matching is delegated to ``pathspec`` so wildcards, anchored patterns,
directory-only patterns and ``!`` negation follow git semantics.
"""

import os
import re
from pathlib import Path

import pathspec

IGNORE_FILE_NAME = ".hostmdxignore"
CONFIG_FILE_NAME = "host-mdx.py"

# Always ignored so the tool never re-processes its own bookkeeping files.
DEFAULT_IGNORE_PATTERNS = (
    IGNORE_FILE_NAME,
    CONFIG_FILE_NAME,
    # bytecode written when the hook module is imported
    "__pycache__/",
    ".git",
    "node_modules",
    "package-lock.json",
    "package.json",
)


def _case_insensitive_paths():
    return os.path.normcase("A") == "a"


def _fold_case(spec):
    """Rebuild ``spec`` with every pattern matching case-insensitively.

    The flag goes into the compiled regex instead of lowercasing the pattern
    text, which would change what a character range such as ``[Z-a]`` covers.
    """
    patterns = list(spec.patterns)
    for pattern in patterns:
        if pattern.regex is not None:
            # inline so matchers that only read the pattern string keep it
            pattern.regex = re.compile("(?i)" + pattern.regex.pattern)
    return pathspec.GitIgnoreSpec(patterns)


class IgnoreMatcher:
    """Predicate over posix paths relative to the input root."""

    def __init__(self, patterns, fold_case=None):
        if fold_case is None:
            fold_case = _case_insensitive_paths()
        self.fold_case = fold_case
        self.patterns = list(patterns)
        spec = pathspec.GitIgnoreSpec.from_lines(self.patterns)
        if fold_case:
            spec = _fold_case(spec)
        self._spec = spec

    def matches(self, relative_path, is_dir=False):
        path = str(relative_path).replace("\\", "/").strip("/")
        if path in ("", "."):
            # the root is never matched against its own rules
            return False
        if is_dir:
            # lets "build/" style patterns see the directory itself
            path += "/"
        return self._spec.match_file(path)


def compile_ignore(default_patterns=DEFAULT_IGNORE_PATTERNS, user_contents=None):
    """Compile defaults plus user patterns; user lines come last so they win."""
    patterns = list(default_patterns)
    if user_contents:
        patterns.extend(user_contents.splitlines())
    return IgnoreMatcher(patterns)


def compile_ignore_file(ignore_file, default_patterns=DEFAULT_IGNORE_PATTERNS):
    ignore_file = Path(ignore_file)
    user_contents = None
    if ignore_file.is_file():
        user_contents = ignore_file.read_text(encoding="utf-8", errors="replace")
    return compile_ignore(default_patterns, user_contents)
