"""Exclusion patterns for template copying.

Four pattern shapes are understood:

* ``name``      -- exact match against the bare entry name
* ``name/``     -- directory-name match (the trailing slash is stripped)
* ``*.log``     -- single-segment glob, anchored at both ends
* ``**/Dockerfile`` -- nested glob, matched against the path relative to the
  copy root; ``**`` spans any number of segments, ``*`` stays within one

Nested globs are only evaluated when a relative path is supplied.  Without
one they never match, so ``**/Dockerfile`` cannot exclude a top-level file.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "node_modules",
    ".git",
    "cli",
    "scripts",
    ".turbo",
    "dist",
    "build",
    ".next",
    ".react-router",
    "*.log",
    ".DS_Store",
    "*.db",
    # contributor-only files
    ".github",
    "CONTRIBUTING.md",
    "DEVELOPMENT.md",
    # only .env.example is shipped
    ".env",
    ".env.local",
    # docker support is opt-in
    "**/Dockerfile",
    "**/.dockerignore",
)


def _compile_glob(pattern: str, nested: bool) -> re.Pattern[str]:
    parts: list[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**", index) and nested:
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return re.compile("^" + "".join(parts) + "$")


class PatternMatcher:
    """Decides whether a template entry should be left out of the copy."""

    def __init__(self, patterns: Iterable[str] = DEFAULT_EXCLUDE_PATTERNS) -> None:
        self.patterns: tuple[str, ...] = tuple(patterns)
        self._compiled: dict[str, re.Pattern[str]] = {}
        for pattern in self.patterns:
            if "**" in pattern:
                self._compiled[pattern] = _compile_glob(pattern, nested=True)
            elif "*" in pattern and not pattern.endswith("/"):
                self._compiled[pattern] = _compile_glob(pattern, nested=False)

    def _matches(self, pattern: str, entry_name: str, relative_path: str | None) -> bool:
        if "**" in pattern:
            if relative_path is None:
                return False
            return self._compiled[pattern].match(relative_path.replace("\\", "/")) is not None

        if pattern.endswith("/"):
            return entry_name == pattern[:-1]

        if "*" in pattern:
            return self._compiled[pattern].match(entry_name) is not None

        return entry_name == pattern

    def is_excluded(self, entry_name: str, relative_path: str | None = None) -> bool:
        """Return ``True`` if the entry should not be copied.

        Args:
            entry_name: Bare file or directory name.
            relative_path: ``/``-separated path from the copy root, required
                for ``**`` patterns to take effect.
        """
        return any(
            self._matches(pattern, entry_name, relative_path) for pattern in self.patterns
        )
