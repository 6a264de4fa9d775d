"""Glob engine for spec discovery.

Walks a directory tree and matches relative paths against minimatch-style
patterns the way Cypress interprets ``specPattern`` / ``testFiles``:

* ``*``, ``?`` and ``[...]`` match within a single path segment.
* ``**`` as a whole segment matches zero or more segments.
* ``{a,b}`` alternation is expanded before matching (nesting allowed).
* Dotfiles are matched by wildcards (minimatch ``dot: true``).
* Patterns without a ``/`` are matched against the basename only
  (minimatch ``matchBase: true``).
"""

from __future__ import annotations

import fnmatch
import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

logger = logging.getLogger(__name__)

_GLOBSTAR = "**"


# ── Pattern handling ─────────────────────────────────────────────


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternations in *pattern*.

    A brace group without a top-level comma is kept literally, as are
    unbalanced braces.
    """
    start, end, options = _find_brace_group(pattern)
    if options is None:
        return [pattern]

    prefix = pattern[:start]
    suffix = pattern[end + 1 :]
    expanded: list[str] = []
    for option in options:
        expanded.extend(expand_braces(prefix + option + suffix))
    return expanded


def _find_brace_group(pattern: str) -> tuple[int, int, list[str] | None]:
    """Locate the first expandable brace group.

    Returns ``(start, end, options)``; *options* is ``None`` when the
    pattern has nothing to expand.
    """
    index = 0
    while index < len(pattern):
        if pattern[index] != "{":
            index += 1
            continue

        depth = 0
        split_points: list[int] = []
        for pos in range(index, len(pattern)):
            char = pattern[pos]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    if not split_points:
                        break  # literal group like ``{foo}``
                    bounds = [index, *split_points, pos]
                    options = [pattern[a + 1 : b] for a, b in zip(bounds, bounds[1:], strict=False)]
                    return index, pos, options
            elif char == "," and depth == 1:
                split_points.append(pos)
        index += 1

    return -1, -1, None


@lru_cache(maxsize=512)
def _compile(pattern: str) -> tuple[tuple[str, ...], ...]:
    """Split every brace expansion of *pattern* into segment tuples."""
    compiled: list[tuple[str, ...]] = []
    for expanded in expand_braces(pattern):
        while expanded.startswith("./"):
            expanded = expanded[2:]
        segments = expanded.split("/")
        # a trailing slash leaves an empty last segment
        if len(segments) > 1 and segments[-1] == "":
            segments = segments[:-1]
        compiled.append(tuple(_normalize_segment(s) for s in segments))
    return tuple(compiled)


def _normalize_segment(segment: str) -> str:
    # fnmatch spells negated classes ``[!...]``; minimatch also accepts ``[^...]``
    return segment.replace("[^", "[!")


def _match_segments(path: tuple[str, ...], pattern: tuple[str, ...]) -> bool:
    if not pattern:
        return not path

    head, rest = pattern[0], pattern[1:]
    if head == _GLOBSTAR:
        return any(_match_segments(path[i:], rest) for i in range(len(path) + 1))
    if not path:
        return False
    return fnmatch.fnmatchcase(path[0], head) and _match_segments(path[1:], rest)


def match_path(path: str, pattern: str) -> bool:
    """Return ``True`` when the relative POSIX *path* matches *pattern*."""
    parts = tuple(path.split("/"))
    for segments in _compile(pattern):
        if len(segments) == 1 and segments[0] != _GLOBSTAR:
            # matchBase: slash-less patterns only look at the file name
            if fnmatch.fnmatchcase(parts[-1], segments[0]):
                return True
            continue
        if _match_segments(parts, segments):
            return True
    return False


def match_any(path: str, patterns: Iterable[str]) -> bool:
    """Return ``True`` when *path* matches at least one of *patterns*."""
    return any(match_path(path, pattern) for pattern in patterns)


# ── Filesystem traversal ─────────────────────────────────────────


def iter_files(root: Path, *, follow_symbolic_links: bool = True) -> Iterator[str]:
    """Yield every regular file below *root* as a relative POSIX path.

    With *follow_symbolic_links*, linked directories are descended and links
    to files are listed; a link pointing back at one of its own ancestors is
    not descended again.  Without it, symbolic links are skipped altogether.
    """
    stack: list[tuple[Path, frozenset[str]]] = [(root, frozenset({os.path.realpath(root)}))]
    while stack:
        directory, ancestors = stack.pop()
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name, reverse=True)
        except OSError as exc:
            logger.warning("Skipping unreadable directory %s: %s", directory, exc)
            continue

        for entry in entries:
            is_link = entry.is_symlink()
            if is_link and not follow_symbolic_links:
                continue
            path = directory / entry.name
            try:
                is_dir = entry.is_dir()
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                logger.warning("Skipping %s: %s", path, exc)
                continue

            if is_dir:
                real = os.path.realpath(path)
                if real in ancestors:
                    logger.debug("Not descending into %s: symbolic link cycle", path)
                    continue
                stack.append((path, ancestors | {real}))
            elif is_file:
                yield path.relative_to(root).as_posix()


def glob_files(
    root: Path,
    patterns: Iterable[str],
    ignore_patterns: Iterable[str] = (),
    *,
    follow_symbolic_links: bool = True,
) -> list[str]:
    """Return sorted relative paths below *root* matching *patterns*.

    Files matching any of *ignore_patterns* are dropped.  A missing *root*
    yields an empty list.

    Args:
        root: Directory to search.
        patterns: Include globs; a file must match at least one.
        ignore_patterns: Exclude globs; a file matching any is removed.
        follow_symbolic_links: Whether linked directories and files are
            part of the traversal.

    Returns:
        Sorted list of POSIX paths relative to *root*.
    """
    if not root.is_dir():
        logger.debug("Glob root %s does not exist", root)
        return []

    include = list(patterns)
    exclude = list(ignore_patterns)
    logger.debug("Globbing %s with include=%s exclude=%s", root, include, exclude)

    matches = [
        rel
        for rel in iter_files(root, follow_symbolic_links=follow_symbolic_links)
        if match_any(rel, include) and not match_any(rel, exclude)
    ]
    return sorted(matches)
